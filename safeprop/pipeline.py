# -*- coding: utf-8 -*-
"""
One run: passphrase → signer → chain check → calls → proposal → submit → audit.

Every ProposalError is caught here exactly once, logged, recorded in the
audit ledger, and handed back as an Outcome; the CLI turns that into an exit
status. Anything else (bugs, KeyboardInterrupt) propagates.
"""

from dataclasses import dataclass
from typing import Callable, List, Optional

from .audit import AuditLedger
from .chain import read_chain_id
from .config import Settings
from .errors import ChainMismatchError, ProposalError
from .keystore import Signer, load_signer
from .log import logger
from .passphrase import SecretResolver
from .proposal import Call, build_proposal
from .relay import SafeTxServiceClient
from .submit import ProposalSubmitter, SubmissionResult

CallBuilder = Callable[[Settings, Signer], List[Call]]


@dataclass
class Outcome:
    result: Optional[SubmissionResult] = None
    error: Optional[ProposalError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def exit_code(self) -> int:
        return 0 if self.error is None else self.error.exit_code


class ProposalPipeline:
    def __init__(
        self,
        settings: Settings,
        resolver: Optional[SecretResolver] = None,
        relay: Optional[SafeTxServiceClient] = None,
        ledger: Optional[AuditLedger] = None,
        signer_loader: Optional[Callable[..., Signer]] = None,
    ) -> None:
        self.settings = settings
        self.resolver = resolver or SecretResolver(
            env_secret=settings.password, keyring_service=settings.keyring_service
        )
        self.relay = relay or SafeTxServiceClient(settings.tx_service_url, settings.api_key)
        self.ledger = ledger or AuditLedger(settings.audit_file, settings.audit_hmac_key)
        self.signer_loader = signer_loader or load_signer

    def _unlock(self) -> Signer:
        passphrase = self.resolver.resolve()
        try:
            return self.signer_loader(self.settings.keystore_path, passphrase, self.settings.rpc_url)
        finally:
            del passphrase

    def _check_chain(self, signer: Signer) -> None:
        if not self.settings.verify_chain_id:
            logger.warning("⚠️ Chain id check disabled (VERIFY_CHAIN_ID=0)")
            return
        actual = read_chain_id(signer.w3)
        if actual != self.settings.chain_id:
            raise ChainMismatchError(self.settings.chain_id, actual)

    def _audit(self, action: str, params: dict, ok: bool, result: dict) -> None:
        # may run after the relay accepted the proposal, so it never raises
        try:
            self.ledger.record(action, params, ok, result)
        except (OSError, ValueError, TypeError):
            logger.error(f"❌ audit record {action} ok={ok} could not be written", exc_info=True)

    def run(self, build_calls: CallBuilder, action: str = "proposal_submit") -> Outcome:
        s = self.settings
        params = {"safe": s.safe_address, "chain_id": s.chain_id}
        try:
            signer = self._unlock()
            params["sender"] = signer.address
            self._check_chain(signer)
            calls = build_calls(s, signer)
            proposal = build_proposal(calls, s.safe_address, s.chain_id, multisend_address=s.multisend_address)
            params["calls"] = len(proposal.calls)
            result = ProposalSubmitter(self.relay).submit(proposal, signer)
        except ProposalError as e:
            logger.error(f"❌ {type(e).__name__}: {e}")
            self._audit(action, params, False, {"error": type(e).__name__, "message": str(e)})
            return Outcome(error=e)
        logger.info(f"✅ Proposal submitted | safeTxHash={result.hash_hex} nonce={result.proposal.nonce}")
        self._audit(action, params, True, {
            "safeTxHash": result.hash_hex,
            "nonce": result.proposal.nonce,
            "sender": result.sender_address,
        })
        return Outcome(result=result)
