import json

import pytest
from eth_account import Account

from safeprop.config import Settings

PRIVATE_KEY = "0x4c0883a69102937d6231471b5dbb6204fe5129617082792ae468d01a3f362318"
SIGNER_ADDRESS = "0x2c7536e3605d9c16a7a3d7b1898e529396a65c23"
PASSWORD = "correct horse battery staple"

SAFE = "0x5afe3855358e112b5647b952709e6165e1c1eeee"
VAULT = "0x1111111111111111111111111111111111111111"
IRM = "0x2222222222222222222222222222222222222222"
OTHER = "0x3333333333333333333333333333333333333333"

ABIS = {
    "EVault.sol/EVault.json": [
        {"type": "function", "name": "setInterestRateModel", "stateMutability": "nonpayable",
         "inputs": [{"name": "newModel", "type": "address"}], "outputs": []},
        {"type": "function", "name": "setLTV", "stateMutability": "nonpayable",
         "inputs": [{"name": "collateral", "type": "address"}, {"name": "borrowLTV", "type": "uint16"},
                    {"name": "liquidationLTV", "type": "uint16"}, {"name": "rampDuration", "type": "uint32"}],
         "outputs": []},
    ],
    "EulerRouter.sol/EulerRouter.json": [
        {"type": "function", "name": "govSetConfig", "stateMutability": "nonpayable",
         "inputs": [{"name": "base", "type": "address"}, {"name": "quote", "type": "address"},
                    {"name": "oracle", "type": "address"}], "outputs": []},
        {"type": "function", "name": "govSetResolvedVault", "stateMutability": "nonpayable",
         "inputs": [{"name": "vault", "type": "address"}, {"name": "set", "type": "bool"}], "outputs": []},
    ],
    "PegStabilityModule.sol/PegStabilityModule.json": [
        {"type": "function", "name": "setFees", "stateMutability": "nonpayable",
         "inputs": [{"name": "toUnderlying", "type": "uint256"}, {"name": "toSynth", "type": "uint256"}],
         "outputs": []},
    ],
    "nUSD.sol/nUSD.json": [
        {"type": "function", "name": "setDsrVault", "stateMutability": "nonpayable",
         "inputs": [{"name": "vault", "type": "address"}], "outputs": []},
        {"type": "function", "name": "grantRole", "stateMutability": "nonpayable",
         "inputs": [{"name": "role", "type": "bytes32"}, {"name": "account", "type": "address"}],
         "outputs": []},
    ],
}


class FakeResponse:
    def __init__(self, status_code=200, payload=None, text=None):
        self.status_code = status_code
        self._payload = payload if payload is not None else {}
        self.text = text if text is not None else json.dumps(self._payload)

    def json(self):
        return self._payload


class FakeSession:
    """Stands in for requests.Session; records every request."""

    def __init__(self, nonce=7, post_status=201, post_text=""):
        self.headers = {}
        self.nonce = nonce
        self.post_status = post_status
        self.post_text = post_text
        self.requests = []

    def request(self, method, url, **kwargs):
        self.requests.append((method, url, kwargs))
        if method == "GET":
            return FakeResponse(200, {"address": SAFE, "nonce": self.nonce})
        return FakeResponse(self.post_status, text=self.post_text)

    @property
    def posts(self):
        return [r for r in self.requests if r[0] == "POST"]


@pytest.fixture
def keyfile(tmp_path):
    path = tmp_path / "keystore.json"
    path.write_text(json.dumps(Account.encrypt(PRIVATE_KEY, PASSWORD, kdf="pbkdf2", iterations=2)))
    return path


@pytest.fixture
def artifacts(tmp_path):
    root = tmp_path / "out"
    for rel, abi in ABIS.items():
        p = root / rel
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_text(json.dumps({"abi": abi}))
    return root


@pytest.fixture
def env(tmp_path, keyfile, artifacts):
    return {
        "ETH_KEYSTORE_PATH": str(keyfile),
        "ETH_PASSWORD": PASSWORD,
        "RPC_URL": "http://127.0.0.1:8545",
        "SAFE_TX_SERVICE_API_KEY": "test-api-key",
        "SAFE_ADDRESS": SAFE,
        "CHAIN_ID": "1",
        "ARTIFACTS_DIR": str(artifacts),
        "AUDIT_FILE": str(tmp_path / "audit.jsonl"),
    }


@pytest.fixture
def settings(env):
    return Settings.from_env(env)
