# -*- coding: utf-8 -*-
import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Union

from eth_account import Account
from eth_account.signers.local import LocalAccount
from hexbytes import HexBytes
from web3 import Web3

from .errors import CredentialReadError, DecryptionError
from .log import logger


@dataclass(frozen=True)
class Signer:
    """A decrypted key bound to an RPC endpoint. Lives for one run only."""

    account: LocalAccount = field(repr=False)
    w3: Web3 = field(repr=False)
    rpc_url: str

    @property
    def address(self) -> str:
        return Web3.to_checksum_address(self.account.address)

    def sign_digest(self, digest: bytes) -> HexBytes:
        """65-byte r||s||v ECDSA signature over a 32-byte digest (no message prefix)."""
        if len(digest) != 32:
            raise ValueError("digest must be 32 bytes")
        signed = self.account.unsafe_sign_hash(digest)
        return HexBytes(signed.signature)


def read_keyfile(path: Union[str, Path]) -> bytes:
    try:
        return Path(path).read_bytes()
    except OSError as e:
        raise CredentialReadError(str(path), e.strerror or type(e).__name__) from e


def decrypt_keyfile(raw: bytes, passphrase: str, path: Union[str, Path] = "<memory>") -> HexBytes:
    try:
        keyfile = json.loads(raw.decode("utf-8"))
        return HexBytes(Account.decrypt(keyfile, passphrase))
    except (ValueError, KeyError, TypeError) as e:
        # wrong password surfaces as ValueError("MAC mismatch")
        raise DecryptionError(str(path)) from e


def load_signer(keyfile_path: Union[str, Path], passphrase: str, rpc_endpoint: str) -> Signer:
    raw = read_keyfile(keyfile_path)
    private_key = decrypt_keyfile(raw, passphrase, keyfile_path)
    del passphrase
    account = Account.from_key(private_key)
    del private_key, raw
    w3 = Web3(Web3.HTTPProvider(rpc_endpoint))
    signer = Signer(account=account, w3=w3, rpc_url=rpc_endpoint)
    logger.info(f"🔓 Keystore unlocked | signer={signer.address}")
    return signer
