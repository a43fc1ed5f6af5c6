# -*- coding: utf-8 -*-
"""
Governance commands. Each plan_* function validates its arguments and the
env values it needs up front, then returns a Plan whose build step encodes
the calls (and, for synth-collateral, reads the router wiring over RPC).
"""

from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

from web3 import Web3

from .chain import encode_call, load_abi, read_address
from .config import Settings, to_nonzero_checksum, to_checksum
from .errors import InvalidArgumentError
from .keystore import Signer
from .proposal import Call

EVAULT_ARTIFACT = "EVault.sol/EVault.json"
ROUTER_ARTIFACT = "EulerRouter.sol/EulerRouter.json"
PSM_ARTIFACT = "PegStabilityModule.sol/PegStabilityModule.json"
NUSD_ARTIFACT = "nUSD.sol/nUSD.json"

MAX_BPS = 10_000
MAX_UINT32 = 0xFFFFFFFF

KEEPER_ROLE = Web3.keccak(text="KEEPER_ROLE")


def parse_uint(raw: str, label: str, maximum: int) -> int:
    try:
        value = int(raw, 10)
    except (TypeError, ValueError):
        raise InvalidArgumentError(f"{label} must be a non-negative number") from None
    if value < 0:
        raise InvalidArgumentError(f"{label} must be a non-negative number")
    if value > maximum:
        raise InvalidArgumentError(f"{label} exceeds maximum ({maximum})")
    return value


def parse_fee(raw: str, label: str) -> int:
    try:
        fee = int(raw, 16) if raw.lower().startswith("0x") else int(raw, 10)
    except (TypeError, ValueError):
        raise InvalidArgumentError(f"Invalid {label} fee: {raw}") from None
    if fee < 0:
        raise InvalidArgumentError(f"Invalid {label} fee: {label} must be non-negative")
    return fee


@dataclass
class Plan:
    build_calls: Callable[[Settings, Signer], List[Call]]
    summary: List[str] = field(default_factory=list)


def _abi(settings: Settings, artifact: str):
    return load_abi(settings.artifact(artifact))


# ───────── irm ─────────
def plan_irm(settings: Settings, vault: str, irm: str) -> Plan:
    vault = to_checksum(vault, "vault address")
    irm = to_checksum(irm, "IRM address")
    plan = Plan(build_calls=lambda s, _: [
        Call.create(vault, encode_call(_abi(s, EVAULT_ARTIFACT), "setInterestRateModel", [irm]))
    ])
    plan.summary.append(f"setInterestRateModel({irm}) on vault {vault}")
    return plan


# ───────── ltv ─────────
def plan_ltv(settings: Settings, collateral_vault: str, borrow_ltv: str, liquidation_ltv: str, ramp: str) -> Plan:
    collateral_vault = to_checksum(collateral_vault, "collateral vault address")
    borrow = parse_uint(borrow_ltv, "borrowLTV", MAX_BPS)
    liquidation = parse_uint(liquidation_ltv, "liquidationLTV", MAX_BPS)
    ramp_duration = parse_uint(ramp, "rampDuration", MAX_UINT32)
    nusd_vault = settings.require_address("NUSD_VAULT_ADDRESS")
    args = [collateral_vault, borrow, liquidation, ramp_duration]
    plan = Plan(build_calls=lambda s, _: [
        Call.create(nusd_vault, encode_call(_abi(s, EVAULT_ARTIFACT), "setLTV", args))
    ])
    plan.summary.append(f"setLTV({collateral_vault}, {borrow}, {liquidation}, {ramp_duration}) to nUSD vault {nusd_vault}")
    return plan


# ───────── psm-fees ─────────
def plan_psm_fees(settings: Settings, psm: str, underlying_fee: str, synth_fee: str) -> Plan:
    psm = to_checksum(psm, "PSM module address")
    underlying = parse_fee(underlying_fee, "underlying")
    synth = parse_fee(synth_fee, "synth")
    plan = Plan(build_calls=lambda s, _: [
        Call.create(psm, encode_call(_abi(s, PSM_ARTIFACT), "setFees", [underlying, synth]))
    ])
    plan.summary.append(f"setFees({underlying}, {synth}) to {psm}")
    return plan


# ───────── set-dsr-vault ─────────
def plan_set_dsr_vault(settings: Settings, savings_rate_module: Optional[str] = None) -> Plan:
    synth = settings.require_address("SYNTH_ADDRESS")
    env_module = settings.require_address("SAVINGS_RATE_ADDRESS")
    module = env_module
    if savings_rate_module is not None:
        module = to_nonzero_checksum(savings_rate_module, "SavingsRateModule address")
    plan = Plan(build_calls=lambda s, _: [
        Call.create(synth, encode_call(_abi(s, NUSD_ARTIFACT), "setDsrVault", [module]))
    ])
    plan.summary.append(f"setDsrVault({module}) on synth {synth}")
    return plan


# ───────── synth-keeper ─────────
def plan_synth_keeper(settings: Settings, keeper: str) -> Plan:
    keeper = to_nonzero_checksum(keeper, "keeper address")
    synth = settings.require_address("SYNTH_ADDRESS")
    plan = Plan(build_calls=lambda s, _: [
        Call.create(synth, encode_call(_abi(s, NUSD_ARTIFACT), "grantRole", [KEEPER_ROLE, keeper]))
    ])
    plan.summary.append(f"grantRole(KEEPER_ROLE, {keeper}) on synth {synth}")
    return plan


# ───────── synth-collateral ─────────
def plan_synth_collateral(
    settings: Settings, collateral_vault: str, price_oracle: str, borrow_ltv: str, liquidation_ltv: str, ramp: str
) -> Plan:
    collateral_vault = to_checksum(collateral_vault, "collateral vault address")
    price_oracle = to_checksum(price_oracle, "oracle address")
    borrow = parse_uint(borrow_ltv, "borrowLTV", MAX_BPS)
    liquidation = parse_uint(liquidation_ltv, "liquidationLTV", MAX_BPS)
    ramp_duration = parse_uint(ramp, "rampDuration", MAX_UINT32)
    synth_vault = settings.require_address("SYNTH_VAULT_ADDRESS", fallback="NUSD_VAULT_ADDRESS")
    summary: List[str] = []

    def build(s: Settings, signer: Signer) -> List[Call]:
        router = read_address(signer.w3, synth_vault, "oracle")
        unit_of_account = read_address(signer.w3, synth_vault, "unitOfAccount")
        asset = read_address(signer.w3, collateral_vault, "asset")
        vault_abi = _abi(s, EVAULT_ARTIFACT)
        router_abi = _abi(s, ROUTER_ARTIFACT)
        summary.extend([
            f"setLTV({collateral_vault}, {borrow}, {liquidation}, {ramp_duration}) on synth vault {synth_vault}",
            f"govSetConfig({asset}, {unit_of_account}, {price_oracle}) on router {router}",
            f"govSetResolvedVault({collateral_vault}, true) on router {router}",
        ])
        return [
            Call.create(synth_vault, encode_call(vault_abi, "setLTV", [collateral_vault, borrow, liquidation, ramp_duration])),
            Call.create(router, encode_call(router_abi, "govSetConfig", [asset, unit_of_account, price_oracle])),
            Call.create(router, encode_call(router_abi, "govSetResolvedVault", [collateral_vault, True])),
        ]

    return Plan(build_calls=build, summary=summary)


COMMANDS: Dict[str, Callable[..., Plan]] = {
    "irm": plan_irm,
    "ltv": plan_ltv,
    "psm-fees": plan_psm_fees,
    "set-dsr-vault": plan_set_dsr_vault,
    "synth-collateral": plan_synth_collateral,
    "synth-keeper": plan_synth_keeper,
}
