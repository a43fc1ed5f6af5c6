# -*- coding: utf-8 -*-
"""
Run configuration, validated once at process start.

Settings snapshots the environment when it is built; the pipeline and the
commands only ever read from that snapshot.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Mapping, Optional

from dotenv import load_dotenv
from web3 import Web3

from .errors import ConfigurationError, InvalidAddressError

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"

# MultiSendCallOnly v1.3.0, canonical deployment
DEFAULT_MULTISEND_ADDRESS = Web3.to_checksum_address("0x40a2accbd92bca938b02010e17a5b8929b49130d")

TX_SERVICE_BASE = "https://api.safe.global/tx-service"
TX_SERVICE_SLUGS: Dict[int, str] = {
    1: "eth",
    10: "oeth",
    56: "bnb",
    100: "gno",
    137: "pol",
    324: "zksync",
    8453: "base",
    42161: "arb1",
    43114: "avax",
    59144: "linea",
    84532: "basesep",
    11155111: "sep",
}

REQUIRED_VARS = (
    "ETH_KEYSTORE_PATH",
    "RPC_URL",
    "SAFE_TX_SERVICE_API_KEY",
    "SAFE_ADDRESS",
    "CHAIN_ID",
)

_FALSEY = {"0", "false", "no", "off"}


def load_env_files(path: str = ".env") -> None:
    load_dotenv(path)


def to_checksum(value: str, label: str = "address") -> str:
    if not isinstance(value, str) or not Web3.is_address(value):
        raise InvalidAddressError(value, label)
    return Web3.to_checksum_address(value)


def to_nonzero_checksum(value: str, label: str = "address") -> str:
    addr = to_checksum(value, label)
    if addr == ZERO_ADDRESS:
        raise InvalidAddressError(value, label)
    return addr


def tx_service_url_for(chain_id: int) -> str:
    slug = TX_SERVICE_SLUGS.get(chain_id)
    if not slug:
        raise ConfigurationError(
            f"No Safe Transaction Service known for chain {chain_id}; set SAFE_TX_SERVICE_URL",
            variable="SAFE_TX_SERVICE_URL",
        )
    return f"{TX_SERVICE_BASE}/{slug}"


@dataclass(frozen=True)
class Settings:
    keystore_path: Path
    rpc_url: str
    api_key: str = field(repr=False)
    safe_address: str
    chain_id: int
    tx_service_url: str
    password: Optional[str] = field(default=None, repr=False)
    multisend_address: str = DEFAULT_MULTISEND_ADDRESS
    keyring_service: Optional[str] = None
    artifacts_dir: Path = Path("../out")
    audit_file: Path = Path("safeprop_audit.jsonl")
    audit_hmac_key: Optional[str] = field(default=None, repr=False)
    log_file: str = "safeprop.log"
    verify_chain_id: bool = True
    env: Mapping[str, str] = field(default_factory=dict, repr=False, compare=False)

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "Settings":
        snapshot = dict(os.environ if env is None else env)
        for name in REQUIRED_VARS:
            if not snapshot.get(name):
                raise ConfigurationError.missing(name)

        chain_raw = snapshot["CHAIN_ID"].strip()
        try:
            chain_id = int(chain_raw)
        except ValueError:
            raise ConfigurationError(f"Invalid CHAIN_ID provided: {chain_raw}", variable="CHAIN_ID") from None
        if chain_id <= 0:
            raise ConfigurationError(f"Invalid CHAIN_ID provided: {chain_raw}", variable="CHAIN_ID")

        safe_address = to_checksum(snapshot["SAFE_ADDRESS"].strip(), "SAFE_ADDRESS")
        tx_service_url = (snapshot.get("SAFE_TX_SERVICE_URL") or "").strip() or tx_service_url_for(chain_id)
        multisend = to_checksum(
            (snapshot.get("MULTISEND_ADDRESS") or DEFAULT_MULTISEND_ADDRESS).strip(), "MULTISEND_ADDRESS"
        )

        return cls(
            keystore_path=Path(snapshot["ETH_KEYSTORE_PATH"]),
            rpc_url=snapshot["RPC_URL"].strip(),
            api_key=snapshot["SAFE_TX_SERVICE_API_KEY"].strip(),
            safe_address=safe_address,
            chain_id=chain_id,
            tx_service_url=tx_service_url.rstrip("/"),
            # an empty ETH_PASSWORD is still a supplied password
            password=snapshot.get("ETH_PASSWORD"),
            multisend_address=multisend,
            keyring_service=snapshot.get("KEYRING_SERVICE") or None,
            artifacts_dir=Path(snapshot.get("ARTIFACTS_DIR") or "../out"),
            audit_file=Path(snapshot.get("AUDIT_FILE") or "safeprop_audit.jsonl"),
            audit_hmac_key=snapshot.get("AUDIT_HMAC_KEY") or None,
            log_file=snapshot.get("SAFEPROP_LOG_FILE") or "safeprop.log",
            verify_chain_id=(snapshot.get("VERIFY_CHAIN_ID") or "1").strip().lower() not in _FALSEY,
            env=snapshot,
        )

    def require(self, name: str, fallback: Optional[str] = None) -> str:
        value = self.env.get(name)
        if value:
            return value
        if fallback and self.env.get(fallback):
            return self.env[fallback]
        raise ConfigurationError.missing(name, fallback)

    def require_address(self, name: str, fallback: Optional[str] = None) -> str:
        return to_nonzero_checksum(self.require(name, fallback).strip(), name)

    def artifact(self, relative: str) -> Path:
        return self.artifacts_dir / relative
