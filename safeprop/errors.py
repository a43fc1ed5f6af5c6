# -*- coding: utf-8 -*-
"""Error taxonomy for the proposal pipeline. Every error here is fatal to a run."""

from typing import Optional


class ProposalError(Exception):
    exit_code = 1


# ───────── Pre-flight ─────────
class ConfigurationError(ProposalError):
    exit_code = 2

    def __init__(self, message: str, variable: Optional[str] = None) -> None:
        super().__init__(message)
        self.variable = variable

    @classmethod
    def missing(cls, name: str, fallback: Optional[str] = None) -> "ConfigurationError":
        hint = f" (fallback: {fallback})" if fallback else ""
        return cls(f"Missing required env var: {name}{hint}", variable=name)


class ChainMismatchError(ConfigurationError):
    def __init__(self, expected: int, actual: int) -> None:
        super().__init__(f"RPC reports chain id {actual}, but CHAIN_ID is {expected}", variable="CHAIN_ID")
        self.expected = expected
        self.actual = actual


# ───────── Keystore ─────────
class CredentialReadError(ProposalError):
    exit_code = 3

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"Cannot read keystore file {path}: {reason}")
        self.path = path


class DecryptionError(ProposalError):
    exit_code = 3

    def __init__(self, path: str) -> None:
        # never include the underlying exception text; it may echo keyfile fields
        super().__init__(f"Could not decrypt keystore {path}: wrong password or corrupt file")
        self.path = path


# ───────── Caller input ─────────
class InvalidAddressError(ProposalError):
    exit_code = 4

    def __init__(self, value: object, label: str = "address") -> None:
        super().__init__(f"Invalid {label}: {value}")
        self.value = value
        self.label = label


class EmptyProposalError(ProposalError):
    exit_code = 4

    def __init__(self) -> None:
        super().__init__("A proposal needs at least one call")


class InvalidArgumentError(ProposalError):
    exit_code = 4


# ───────── Remote ─────────
class NetworkError(ProposalError):
    exit_code = 5


class RelayRejectionError(ProposalError):
    exit_code = 6

    def __init__(self, status_code: int, body: str) -> None:
        super().__init__(body)
        self.status_code = status_code
        self.body = body
