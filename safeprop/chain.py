# -*- coding: utf-8 -*-
"""Thin wrappers over the RPC node and ABI artifacts."""

import json
from pathlib import Path
from typing import Any, Dict, List, Sequence, Union

import requests
from eth_abi.exceptions import EncodingError
from hexbytes import HexBytes
from web3 import Web3
from web3.exceptions import Web3Exception

from .config import to_checksum
from .errors import ConfigurationError, InvalidArgumentError, NetworkError

ADDRESS_GETTER_ABI = [
    {"name": name, "type": "function", "stateMutability": "view", "inputs": [],
     "outputs": [{"name": "", "type": "address"}]}
    for name in ("asset", "oracle", "unitOfAccount")
]

_ENCODER = Web3()


def load_abi(path: Union[str, Path]) -> List[Dict[str, Any]]:
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        raise ConfigurationError(f"ABI artifact not found: {path} (check ARTIFACTS_DIR)", variable="ARTIFACTS_DIR") from None
    except (OSError, ValueError) as e:
        raise ConfigurationError(f"ABI artifact unreadable: {path}: {e}", variable="ARTIFACTS_DIR") from e
    abi = data["abi"] if isinstance(data, dict) and "abi" in data else data
    if not isinstance(abi, list):
        raise ConfigurationError(f"ABI artifact has no abi list: {path}", variable="ARTIFACTS_DIR")
    return abi


def encode_call(abi: Sequence[Dict[str, Any]], fn_name: str, args: Sequence[Any]) -> HexBytes:
    try:
        contract = _ENCODER.eth.contract(abi=abi)
        return HexBytes(contract.encode_abi(fn_name, args=list(args)))
    except (Web3Exception, EncodingError, AttributeError, TypeError, ValueError) as e:
        raise InvalidArgumentError(f"Cannot encode {fn_name}({len(args)} args): {e}") from e


def read_address(w3: Web3, contract_address: str, fn_name: str) -> str:
    contract = w3.eth.contract(address=to_checksum(contract_address), abi=ADDRESS_GETTER_ABI)
    try:
        value = getattr(contract.functions, fn_name)().call()
    except (requests.RequestException, Web3Exception, OSError) as e:
        raise NetworkError(f"RPC call {fn_name}() on {contract_address} failed: {e}") from e
    return to_checksum(value, f"{fn_name}() result from {contract_address}")


def read_chain_id(w3: Web3) -> int:
    try:
        return int(w3.eth.chain_id)
    except (requests.RequestException, Web3Exception, OSError) as e:
        raise NetworkError(f"RPC eth_chainId failed: {e}") from e
