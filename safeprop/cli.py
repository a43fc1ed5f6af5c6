# -*- coding: utf-8 -*-
"""
safeprop — propose governance transactions to a Gnosis Safe.

Loads .env, validates configuration, unlocks the keystore (ETH_PASSWORD or a
masked prompt), builds the call batch, and proposes it to the Safe
Transaction Service signed by the keystore owner.
"""

import sys
import argparse
import logging
from typing import List, Optional

from .commands import COMMANDS, Plan
from .config import Settings, load_env_files
from .errors import ProposalError
from .log import setup_logger
from .pipeline import ProposalPipeline

EXIT_INTERRUPTED = 130


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="safeprop", description="Propose Safe governance transactions.")
    p.add_argument("--env-file", default=".env", help="dotenv file to load before reading the environment")
    sub = p.add_subparsers(dest="command", required=True)

    irm = sub.add_parser("irm", help="setInterestRateModel on a vault")
    irm.add_argument("vault")
    irm.add_argument("irm")

    ltv = sub.add_parser("ltv", help="setLTV on the nUSD vault")
    ltv.add_argument("collateral_vault")
    ltv.add_argument("borrow_ltv", metavar="borrowLTV_bps")
    ltv.add_argument("liquidation_ltv", metavar="liquidationLTV_bps")
    ltv.add_argument("ramp", metavar="rampDurationSeconds")

    psm = sub.add_parser("psm-fees", help="setFees on a peg stability module")
    psm.add_argument("psm")
    psm.add_argument("underlying_fee", metavar="underlyingFeeBps")
    psm.add_argument("synth_fee", metavar="synthFeeBps")

    dsr = sub.add_parser("set-dsr-vault", help="setDsrVault on the synth (defaults to SAVINGS_RATE_ADDRESS)")
    dsr.add_argument("savings_rate_module", nargs="?", default=None)

    coll = sub.add_parser("synth-collateral", help="setLTV + router oracle wiring for a new collateral")
    coll.add_argument("collateral_vault")
    coll.add_argument("price_oracle", metavar="oracleAddress")
    coll.add_argument("borrow_ltv", metavar="borrowLTV_bps")
    coll.add_argument("liquidation_ltv", metavar="liquidationLTV_bps")
    coll.add_argument("ramp", metavar="rampDurationSeconds")

    keeper = sub.add_parser("synth-keeper", help="grantRole(KEEPER_ROLE) on the synth")
    keeper.add_argument("keeper")
    return p


def _plan_args(ns: argparse.Namespace) -> dict:
    return {k: v for k, v in vars(ns).items() if k not in ("command", "env_file")}


def print_summary(plan: Plan, safe_address: str) -> None:
    if len(plan.summary) == 1:
        print(f"Proposed {plan.summary[0]} from Safe {safe_address}")
        return
    print("Prepared transactions:")
    for line in plan.summary:
        print(f"- {line}")
    print(f"Proposed from Safe {safe_address}")


def run(argv: Optional[List[str]] = None) -> int:
    ns = build_parser().parse_args(argv)
    load_env_files(ns.env_file)
    try:
        settings = Settings.from_env()
        setup_logger(settings.log_file)
        plan: Plan = COMMANDS[ns.command](settings, **_plan_args(ns))
    except ProposalError as e:
        print(f"❌ {e}", file=sys.stderr)
        return e.exit_code

    outcome = ProposalPipeline(settings).run(plan.build_calls, action=f"propose_{ns.command}")
    if not outcome.ok:
        print(f"❌ {outcome.error}", file=sys.stderr)
        return outcome.exit_code

    res = outcome.result
    print_summary(plan, settings.safe_address)
    print(f"Sender: {res.sender_address}")
    print(f"Tx hash: {res.hash_hex}")
    return 0


def main(argv: Optional[List[str]] = None) -> None:
    try:
        code = run(argv)
    except KeyboardInterrupt:
        print("\n⚠️ Interrupted.", file=sys.stderr)
        code = EXIT_INTERRUPTED
    finally:
        logging.shutdown()
    sys.exit(code)


if __name__ == "__main__":
    main()
