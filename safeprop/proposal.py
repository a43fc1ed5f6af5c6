# -*- coding: utf-8 -*-
"""
Safe transaction proposals.

A proposal is an ordered batch of calls executed by the Safe. One call is
sent as a plain CALL; several are wrapped into a single DELEGATECALL to
MultiSendCallOnly, preserving their order byte for byte. The proposal hash
is the Safe's own EIP-712 SafeTx hash, so it is both what owners sign and
what the transaction service deduplicates on.
"""

from dataclasses import dataclass, field, replace
from typing import Iterable, Optional, Tuple, Union

from eth_abi import encode
from hexbytes import HexBytes
from web3 import Web3

from .config import DEFAULT_MULTISEND_ADDRESS, ZERO_ADDRESS, to_checksum
from .errors import EmptyProposalError, InvalidArgumentError

OPERATION_CALL = 0
OPERATION_DELEGATECALL = 1

DOMAIN_TYPEHASH = Web3.keccak(text="EIP712Domain(uint256 chainId,address verifyingContract)")
SAFE_TX_TYPEHASH = Web3.keccak(
    text="SafeTx(address to,uint256 value,bytes data,uint8 operation,uint256 safeTxGas,"
    "uint256 baseGas,uint256 gasPrice,address gasToken,address refundReceiver,uint256 nonce)"
)
MULTISEND_SELECTOR = Web3.keccak(text="multiSend(bytes)")[:4]
UINT256_MAX = 2**256 - 1

Payload = Union[bytes, str]


def _as_bytes(payload: Payload) -> HexBytes:
    if payload is None:
        return HexBytes(b"")
    if isinstance(payload, str) and not payload.startswith("0x") and payload:
        raise InvalidArgumentError(f"payload must be 0x-prefixed hex: {payload[:12]}…")
    try:
        return HexBytes(payload)
    except (ValueError, TypeError) as e:
        raise InvalidArgumentError(f"payload is not valid hex: {e}") from e


@dataclass(frozen=True)
class Call:
    target: str
    data: HexBytes = field(default_factory=lambda: HexBytes(b""))
    value: int = 0

    @classmethod
    def create(cls, target: str, data: Payload = b"", value: Optional[int] = None) -> "Call":
        value = 0 if value is None else value
        if not isinstance(value, int) or isinstance(value, bool) or not 0 <= value <= UINT256_MAX:
            raise InvalidArgumentError(f"call value must be a uint256: {value!r}")
        return cls(target=to_checksum(target, "call target"), data=_as_bytes(data), value=value)


@dataclass(frozen=True)
class Proposal:
    safe_address: str
    chain_id: int
    calls: Tuple[Call, ...]
    nonce: Optional[int] = None
    multisend_address: str = DEFAULT_MULTISEND_ADDRESS

    def with_nonce(self, nonce: int) -> "Proposal":
        return replace(self, nonce=nonce)

    @property
    def is_batch(self) -> bool:
        return len(self.calls) > 1

    @property
    def to(self) -> str:
        return self.multisend_address if self.is_batch else self.calls[0].target

    @property
    def value(self) -> int:
        return 0 if self.is_batch else self.calls[0].value

    @property
    def operation(self) -> int:
        return OPERATION_DELEGATECALL if self.is_batch else OPERATION_CALL

    @property
    def data(self) -> HexBytes:
        if not self.is_batch:
            return self.calls[0].data
        return HexBytes(MULTISEND_SELECTOR + encode(["bytes"], [pack_multisend(self.calls)]))


def pack_multisend(calls: Iterable[Call]) -> bytes:
    """operation(1) ‖ to(20) ‖ value(32) ‖ len(32) ‖ data, concatenated in call order."""
    out = b""
    for c in calls:
        out += (
            OPERATION_CALL.to_bytes(1, "big")
            + bytes(HexBytes(c.target))
            + c.value.to_bytes(32, "big")
            + len(c.data).to_bytes(32, "big")
            + bytes(c.data)
        )
    return out


_CALL_KEYS = {"target", "to", "payload", "data", "value"}


def call_from_mapping(c: dict) -> Call:
    unknown = set(c) - _CALL_KEYS
    if unknown:
        raise InvalidArgumentError(f"unknown call field(s): {', '.join(sorted(unknown))}")
    if "target" in c and "to" in c:
        raise InvalidArgumentError("call has both 'target' and 'to'")
    if "payload" in c and "data" in c:
        raise InvalidArgumentError("call has both 'payload' and 'data'")
    target = c["target"] if "target" in c else c.get("to")
    payload = c["payload"] if "payload" in c else c.get("data", b"")
    return Call.create(target, payload, c.get("value"))


def build_proposal(
    calls: Iterable[Union[Call, dict]],
    safe_address: str,
    chain_id: int,
    nonce: Optional[int] = None,
    multisend_address: str = DEFAULT_MULTISEND_ADDRESS,
) -> Proposal:
    """Validate and freeze an ordered batch. Nothing here touches the network."""
    built = []
    for c in calls:
        if isinstance(c, Call):
            built.append(Call.create(c.target, c.data, c.value))
        else:
            built.append(call_from_mapping(c))
    if not built:
        raise EmptyProposalError()
    if nonce is not None and (not isinstance(nonce, int) or nonce < 0):
        raise InvalidArgumentError(f"nonce must be a non-negative integer: {nonce!r}")
    return Proposal(
        safe_address=to_checksum(safe_address, "Safe address"),
        chain_id=int(chain_id),
        calls=tuple(built),
        nonce=nonce,
        multisend_address=to_checksum(multisend_address, "MultiSend address"),
    )


def domain_separator(chain_id: int, safe_address: str) -> bytes:
    return Web3.keccak(encode(["bytes32", "uint256", "address"], [DOMAIN_TYPEHASH, chain_id, safe_address]))


def proposal_hash(proposal: Proposal) -> HexBytes:
    if proposal.nonce is None:
        raise InvalidArgumentError("proposal has no nonce; it cannot be hashed yet")
    struct_hash = Web3.keccak(
        encode(
            ["bytes32", "address", "uint256", "bytes32", "uint8", "uint256", "uint256", "uint256",
             "address", "address", "uint256"],
            [
                SAFE_TX_TYPEHASH,
                proposal.to,
                proposal.value,
                Web3.keccak(proposal.data),
                proposal.operation,
                0, 0, 0,
                ZERO_ADDRESS,
                ZERO_ADDRESS,
                proposal.nonce,
            ],
        )
    )
    return HexBytes(Web3.keccak(b"\x19\x01" + domain_separator(proposal.chain_id, proposal.safe_address) + struct_hash))
