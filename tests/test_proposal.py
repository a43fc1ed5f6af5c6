"""
Tests for proposal building and hashing.

1. Bad input is rejected before any network I/O
2. Call order is preserved into the MultiSend payload
3. The Safe tx hash is deterministic and order-sensitive
"""

import pytest
from eth_abi import decode
from web3 import Web3

from safeprop.config import DEFAULT_MULTISEND_ADDRESS
from safeprop.errors import EmptyProposalError, InvalidAddressError, InvalidArgumentError
from safeprop.proposal import (
    MULTISEND_SELECTOR,
    OPERATION_CALL,
    OPERATION_DELEGATECALL,
    Call,
    build_proposal,
    pack_multisend,
    proposal_hash,
)

from conftest import IRM, OTHER, SAFE, VAULT

PAYLOAD = "0x8bcd4016" + "00" * 12 + IRM[2:]


# =============================================================================
# BUILDER
# =============================================================================

class TestBuildProposal:
    def test_empty_calls_rejected(self):
        with pytest.raises(EmptyProposalError):
            build_proposal([], SAFE, 1)

    def test_bad_target_rejected(self):
        with pytest.raises(InvalidAddressError):
            build_proposal([{"target": "not-an-address", "data": "0x", "value": 0}], SAFE, 1)

    def test_bad_safe_rejected(self):
        with pytest.raises(InvalidAddressError):
            build_proposal([Call.create(VAULT)], "0xSafe", 1)

    def test_value_defaults_to_zero(self):
        p = build_proposal([{"target": VAULT, "data": PAYLOAD}], SAFE, 1)
        assert p.calls[0].value == 0

    def test_negative_value_rejected(self):
        with pytest.raises(InvalidArgumentError):
            Call.create(VAULT, b"", -1)

    def test_non_hex_payload_rejected(self):
        with pytest.raises(InvalidArgumentError):
            Call.create(VAULT, "setIRM(0x..)")

    def test_targets_are_checksummed(self):
        p = build_proposal([Call.create(VAULT.lower())], SAFE, 1)
        assert p.calls[0].target == Web3.to_checksum_address(VAULT)
        assert p.safe_address == Web3.to_checksum_address(SAFE)

    def test_single_call_is_plain_call(self):
        p = build_proposal([Call.create(VAULT, PAYLOAD, 5)], SAFE, 1)
        assert p.to == Web3.to_checksum_address(VAULT)
        assert p.value == 5
        assert p.operation == OPERATION_CALL
        assert p.data == Web3.to_bytes(hexstr=PAYLOAD)


class TestMultiSend:
    def test_batch_delegatecalls_multisend(self):
        p = build_proposal([Call.create(VAULT, "0xaa"), Call.create(IRM, "0xbbbb", 3)], SAFE, 1)
        assert p.to == DEFAULT_MULTISEND_ADDRESS
        assert p.operation == OPERATION_DELEGATECALL
        assert p.value == 0
        assert p.data[:4] == MULTISEND_SELECTOR
        assert MULTISEND_SELECTOR.hex().endswith("8d80ff0a")

    def test_packed_layout_keeps_order(self):
        calls = [Call.create(VAULT, "0xaa"), Call.create(IRM, "0xbbbb", 3)]
        packed = pack_multisend(calls)
        assert len(packed) == (85 + 1) + (85 + 2)
        assert packed[0] == 0
        assert packed[1:21] == Web3.to_bytes(hexstr=VAULT)
        assert packed[85] == 0xAA
        second = packed[86:]
        assert second[1:21] == Web3.to_bytes(hexstr=IRM)
        assert int.from_bytes(second[21:53], "big") == 3
        assert int.from_bytes(second[53:85], "big") == 2

        p = build_proposal(calls, SAFE, 1)
        (inner,) = decode(["bytes"], bytes(p.data[4:]))
        assert inner == packed


# =============================================================================
# HASH
# =============================================================================

class TestProposalHash:
    def _calls(self):
        return [Call.create(VAULT, PAYLOAD), Call.create(OTHER, "0x01")]

    def test_requires_nonce(self):
        p = build_proposal(self._calls(), SAFE, 1)
        with pytest.raises(InvalidArgumentError):
            proposal_hash(p)

    def test_same_content_same_hash(self):
        a = build_proposal(self._calls(), SAFE, 1, nonce=4)
        b = build_proposal(self._calls(), SAFE, 1, nonce=4)
        assert proposal_hash(a) == proposal_hash(b)
        assert len(proposal_hash(a)) == 32

    def test_reordering_changes_hash(self):
        a = build_proposal(self._calls(), SAFE, 1, nonce=4)
        b = build_proposal(list(reversed(self._calls())), SAFE, 1, nonce=4)
        assert proposal_hash(a) != proposal_hash(b)

    @pytest.mark.parametrize("field,value", [("nonce", 5), ("chain_id", 5), ("safe_address", Web3.to_checksum_address(OTHER))])
    def test_metadata_is_hashed(self, field, value):
        from dataclasses import replace

        a = build_proposal(self._calls(), SAFE, 1, nonce=4)
        assert proposal_hash(a) != proposal_hash(replace(a, **{field: value}))

    def test_value_is_hashed(self):
        a = build_proposal([Call.create(VAULT, PAYLOAD, 0)], SAFE, 1, nonce=0)
        b = build_proposal([Call.create(VAULT, PAYLOAD, 1)], SAFE, 1, nonce=0)
        assert proposal_hash(a) != proposal_hash(b)


class TestCallMappings:
    """Calls given as plain dicts."""

    def test_payload_key_carries_calldata(self):
        p = build_proposal([{"to": VAULT, "payload": "0xdeadbeef", "value": 0}], SAFE, 1)
        assert p.calls[0].data == b"\xde\xad\xbe\xef"
        assert p.data == b"\xde\xad\xbe\xef"

    def test_data_key_still_accepted(self):
        p = build_proposal([{"target": VAULT, "data": "0xdeadbeef"}], SAFE, 1)
        assert p.calls[0].data == b"\xde\xad\xbe\xef"

    def test_payload_and_data_hash_identically(self):
        a = build_proposal([{"to": VAULT, "payload": PAYLOAD}], SAFE, 1, nonce=0)
        b = build_proposal([{"target": VAULT, "data": PAYLOAD}], SAFE, 1, nonce=0)
        assert proposal_hash(a) == proposal_hash(b)

    def test_unknown_key_rejected(self):
        with pytest.raises(InvalidArgumentError, match="paylaod"):
            build_proposal([{"to": VAULT, "paylaod": "0xdeadbeef"}], SAFE, 1)

    @pytest.mark.parametrize("call", [
        {"to": VAULT, "target": VAULT},
        {"to": VAULT, "payload": "0x01", "data": "0x02"},
    ])
    def test_ambiguous_keys_rejected(self, call):
        with pytest.raises(InvalidArgumentError):
            build_proposal([call], SAFE, 1)
