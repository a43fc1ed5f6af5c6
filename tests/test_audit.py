"""Tests for the hash-chained audit ledger."""

import json

from safeprop.audit import AuditLedger, calc_record_hash


class TestAuditLedger:
    def test_chain_links(self, tmp_path):
        ledger = AuditLedger(tmp_path / "audit.jsonl")
        first = ledger.record("proposal_submit", {"safe": "0xabc"}, True, {"nonce": 1})
        second = ledger.record("proposal_submit", {"safe": "0xabc"}, False, {"error": "NetworkError"})
        assert first["prev"] == ""
        assert second["prev"] == first["hash"]
        body = {k: second[k] for k in ("ts", "action", "params", "ok", "result")}
        assert second["hash"] == calc_record_hash(first["hash"], body)
        assert ledger.verify() == (True, None)

    def test_tamper_detected(self, tmp_path):
        path = tmp_path / "audit.jsonl"
        ledger = AuditLedger(path)
        ledger.record("a", {}, True, {})
        ledger.record("b", {}, True, {})
        lines = path.read_text().splitlines()
        rec = json.loads(lines[0])
        rec["ok"] = False
        lines[0] = json.dumps(rec)
        path.write_text("\n".join(lines) + "\n")
        assert ledger.verify() == (False, 1)

    def test_hmac_signed(self, tmp_path):
        path = tmp_path / "audit.jsonl"
        ledger = AuditLedger(path, hmac_key="k")
        rec = ledger.record("a", {}, True, {})
        assert "hmac" in rec
        assert ledger.verify() == (True, None)
        assert AuditLedger(path, hmac_key="other").verify() == (False, 1)

    def test_resumes_from_existing_file(self, tmp_path):
        path = tmp_path / "audit.jsonl"
        first = AuditLedger(path).record("a", {}, True, {})
        second = AuditLedger(path).record("b", {}, True, {})
        assert second["prev"] == first["hash"]

    def test_truncated_tail_does_not_block_recording(self, tmp_path):
        path = tmp_path / "audit.jsonl"
        path.write_text('{"hash":"abc"}\n{"trunc')
        rec = AuditLedger(path).record("a", {}, True, {})
        assert rec["prev"] == ""
        lines = path.read_text().splitlines()
        assert lines[-1] == json.dumps(rec, ensure_ascii=False)
        assert lines[-2] == '{"trunc'

    def test_verify_flags_unparseable_line(self, tmp_path):
        path = tmp_path / "audit.jsonl"
        ledger = AuditLedger(path)
        ledger.record("a", {}, True, {})
        with path.open("a") as f:
            f.write('{"trunc\n')
        assert ledger.verify() == (False, 2)
