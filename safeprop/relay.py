# -*- coding: utf-8 -*-
"""Safe Transaction Service client. No timeouts, no retries: one attempt per call."""

from typing import Any, Dict, Optional

import requests
from hexbytes import HexBytes

from .config import ZERO_ADDRESS
from .errors import NetworkError, RelayRejectionError
from .log import logger
from .proposal import Proposal

DEFAULT_ORIGIN = "safeprop"


def _hex(b: bytes) -> str:
    return "0x" + bytes(b).hex()


class SafeTxServiceClient:
    def __init__(self, base_url: str, api_key: str, session: Optional[requests.Session] = None) -> None:
        self.base_url = base_url.rstrip("/")
        self.session = session if session is not None else requests.Session()
        self.session.headers.update({
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        })

    def _request(self, method: str, path: str, **kwargs: Any) -> requests.Response:
        url = f"{self.base_url}{path}"
        try:
            resp = self.session.request(method, url, **kwargs)
        except requests.RequestException as e:
            raise NetworkError(f"Safe Transaction Service unreachable ({method} {url}): {e}") from e
        if resp.status_code >= 400:
            logger.error(f"❌ relay rejected {method} {path} status={resp.status_code}")
            raise RelayRejectionError(resp.status_code, resp.text)
        return resp

    def get_nonce(self, safe_address: str) -> int:
        resp = self._request("GET", f"/api/v1/safes/{safe_address}/")
        try:
            return int(resp.json()["nonce"])
        except (ValueError, KeyError, TypeError) as e:
            logger.error(f"❌ relay returned no usable nonce for {safe_address} status={resp.status_code}")
            raise RelayRejectionError(resp.status_code, resp.text) from e

    @staticmethod
    def proposal_body(
        proposal: Proposal, proposal_hash: bytes, sender: str, signature: bytes, origin: str = DEFAULT_ORIGIN
    ) -> Dict[str, Any]:
        data = proposal.data
        return {
            "to": proposal.to,
            "value": str(proposal.value),
            "data": _hex(data) if len(data) else None,
            "operation": proposal.operation,
            "safeTxGas": "0",
            "baseGas": "0",
            "gasPrice": "0",
            "gasToken": ZERO_ADDRESS,
            "refundReceiver": ZERO_ADDRESS,
            "nonce": proposal.nonce,
            "contractTransactionHash": _hex(proposal_hash),
            "sender": sender,
            "signature": _hex(signature),
            "origin": origin,
        }

    def propose(
        self,
        proposal: Proposal,
        proposal_hash: HexBytes,
        sender: str,
        signature: HexBytes,
        origin: str = DEFAULT_ORIGIN,
    ) -> None:
        body = self.proposal_body(proposal, proposal_hash, sender, signature, origin)
        self._request("POST", f"/api/v1/safes/{proposal.safe_address}/multisig-transactions/", json=body)
        logger.info(f"📨 Proposed safeTxHash={_hex(proposal_hash)} nonce={proposal.nonce} safe={proposal.safe_address}")
