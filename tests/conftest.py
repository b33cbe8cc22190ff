import pytest
from eth_account import Account
from eth_account.messages import encode_defunct
from fastapi.testclient import TestClient

from nftgate.core import AssetStore
from nftgate.core.challenge import build_challenge
from nftgate.core.errors import LedgerUnavailable
from nftgate.main import create_app
from nftgate.shared import Config

OWNER_KEY = "0x" + "11" * 32
STRANGER_KEY = "0x" + "22" * 32

CONTRACT_ADDRESS = "0x5af0d9827e0c53e4799bb226655a1de152a425a5"


class FakeLedger:
    """In-memory ledger recording every owner lookup."""

    def __init__(self, owners=None, error=None):
        self.owners = dict(owners or {})
        self.error = error
        self.calls = []

    def owner_of(self, token_id: int) -> str:
        self.calls.append(token_id)
        if self.error is not None:
            raise self.error
        if token_id not in self.owners:
            raise LedgerUnavailable(f"no owner for {token_id}")
        return self.owners[token_id]


def sign_download(private_key: str, token_id) -> str:
    message = encode_defunct(text=build_challenge(token_id))
    signed = Account.sign_message(message, private_key=private_key)
    return bytes(signed.signature).hex()


@pytest.fixture
def owner():
    return Account.from_key(OWNER_KEY)


@pytest.fixture
def stranger():
    return Account.from_key(STRANGER_KEY)


@pytest.fixture
def asset_root(tmp_path):
    root = tmp_path / "metadata"
    root.mkdir()
    (root / "7.jpg").write_bytes(b"\xff\xd8\xff\xe0high resolution seven")
    (root / "42.jpg").write_bytes(b"\xff\xd8\xff\xe0high resolution forty two")
    return root


@pytest.fixture
def config(tmp_path, asset_root):
    return Config(
        paths={"logs": str(tmp_path / "logs"), "assets": str(asset_root)},
        ledger={
            "rpc_url": "http://127.0.0.1:8545",
            "contract_address": CONTRACT_ADDRESS,
        },
        network={"http_port": 8080, "https_port": 8443},
        cors={"origins": "https://gallery.example https://shop.example"},
        compression={"enabled": False},
    )


@pytest.fixture
def ledger(owner):
    return FakeLedger({7: owner.address, 42: owner.address})


@pytest.fixture
def client(config, ledger):
    app = create_app(
        config,
        ledger=ledger,
        assets=AssetStore.from_config(config.paths, config.assets),
    )
    return TestClient(app, raise_server_exceptions=False)
