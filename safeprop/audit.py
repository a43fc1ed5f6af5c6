# -*- coding: utf-8 -*-
"""
Forensic ledger: local, append-only JSONL with hash chaining.

Each record carries the sha256 of its own canonical body plus the previous
record's hash, so edits or deletions anywhere in the file break the chain.
An optional HMAC key (AUDIT_HMAC_KEY) signs each record on top of that.
Only public facts go in here: addresses, hashes, nonces, error text.
"""

import os
import json
import time
import hmac
import hashlib
from pathlib import Path
from typing import Dict, Any, Optional, Tuple

from .log import logger


def _canonical(obj: Dict[str, Any]) -> bytes:
    return json.dumps(obj, separators=(",", ":"), sort_keys=True).encode("utf-8")


def calc_record_hash(prev_hash: str, payload: Dict[str, Any]) -> str:
    return hashlib.sha256(_canonical({"prev": prev_hash, **payload})).hexdigest()


def calc_record_hmac(hmac_key: bytes, payload_with_hash: Dict[str, Any]) -> str:
    return hmac.new(hmac_key, _canonical(payload_with_hash), hashlib.sha256).hexdigest()


class AuditLedger:
    def __init__(self, path: Path, hmac_key: Optional[str] = None) -> None:
        self.path = Path(path)
        self.hmac_key = hmac_key.encode("utf-8") if hmac_key else None

    def last_hash(self) -> str:
        if not self.path.exists():
            return ""
        try:
            return self._read_last_hash()
        except (OSError, ValueError, AttributeError) as e:
            # truncated tail from an interrupted write: start a fresh chain segment
            logger.error(f"❌ audit ledger tail unreadable ({type(e).__name__}); chaining from empty hash", exc_info=True)
            return ""

    def _read_last_hash(self) -> str:
        with self.path.open("rb") as f:
            f.seek(0, os.SEEK_END)
            pos = f.tell()
            buf = b""
            # scan backwards until the last complete line is in the buffer
            while pos > 0 and buf.count(b"\n") < 2:
                step = min(4096, pos)
                pos -= step
                f.seek(pos)
                buf = f.read(step) + buf
        lines = [l for l in buf.splitlines() if l.strip()]
        if not lines:
            return ""
        return json.loads(lines[-1].decode("utf-8")).get("hash", "")

    def _ends_with_newline(self) -> bool:
        if not self.path.exists() or self.path.stat().st_size == 0:
            return True
        with self.path.open("rb") as f:
            f.seek(-1, os.SEEK_END)
            return f.read(1) == b"\n"

    def record(self, action: str, params: Dict[str, Any], ok: bool, result: Dict[str, Any]) -> Dict[str, Any]:
        rec = {
            "ts": time.time(),
            "action": action,
            "params": params,
            "ok": ok,
            "result": result,
        }
        prev = self.last_hash()
        out = {"prev": prev, **rec, "hash": calc_record_hash(prev, rec)}
        if self.hmac_key:
            out["hmac"] = calc_record_hmac(self.hmac_key, out)
        line = json.dumps(out, ensure_ascii=False) + "\n"
        if not self._ends_with_newline():
            line = "\n" + line
        with self.path.open("a", encoding="utf-8") as f:
            f.write(line)
        logger.info(f"🧾 audit {action} ok={ok}")
        return out

    def verify(self) -> Tuple[bool, Optional[int]]:
        """Walk the ledger. Returns (True, None) or (False, first_bad_line_number)."""
        if not self.path.exists():
            return True, None
        prev = ""
        with self.path.open("r", encoding="utf-8") as f:
            for lineno, line in enumerate(f, start=1):
                if not line.strip():
                    continue
                try:
                    rec = json.loads(line)
                except ValueError:
                    return False, lineno
                body = {k: rec.get(k) for k in ("ts", "action", "params", "ok", "result")}
                if rec.get("prev") != prev or rec.get("hash") != calc_record_hash(prev, body):
                    return False, lineno
                if self.hmac_key:
                    signed = {k: v for k, v in rec.items() if k != "hmac"}
                    if not hmac.compare_digest(rec.get("hmac", ""), calc_record_hmac(self.hmac_key, signed)):
                        return False, lineno
                prev = rec["hash"]
        return True, None
