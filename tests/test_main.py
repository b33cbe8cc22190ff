import json
import logging

import pytest
from conftest import CONTRACT_ADDRESS

import nftgate.main as main_module
from nftgate.core import Web3Ledger
from nftgate.main import create_app, parse_args

ABI = [
    {
        "inputs": [{"name": "tokenId", "type": "uint256"}],
        "name": "ownerOf",
        "outputs": [{"name": "", "type": "address"}],
        "stateMutability": "view",
        "type": "function",
    }
]


@pytest.fixture
def workdir(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "abi_mainnet.json").write_text(json.dumps(ABI))
    (tmp_path / "config.toml").write_text(
        f"""
[general]
title = "test banner"

[paths]
logs = "{(tmp_path / 'logs').as_posix()}"
assets = "{(tmp_path / 'metadata').as_posix()}"

[ledger]
rpc_url = "http://127.0.0.1:9"
contract_address = "{CONTRACT_ADDRESS}"
"""
    )
    return tmp_path


def test_parse_args_defaults():
    args = parse_args([])
    assert args.config == "config.toml"
    assert args.env_config is None


def test_create_app_builds_web3_ledger_from_config(config, workdir):
    app = create_app(config)
    assert isinstance(app.state.gate.ledger, Web3Ledger)
    assert app.state.assets.extension == ".jpg"
    assert not hasattr(app.state, "config")


def test_main_serves_configured_app(workdir, monkeypatch):
    served = {}

    async def fake_serve(config, app):
        served["config"] = config
        served["app"] = app

    monkeypatch.setattr(main_module, "serve", fake_serve)

    main_module.main(["--config", str(workdir / "config.toml")])

    assert served["config"].general.title == "test banner"
    assert isinstance(served["app"].state.gate.ledger, Web3Ledger)
    assert list((workdir / "logs").glob("*.log"))

    root = logging.getLogger("nftgate")
    for handler in [h for h in root.handlers if isinstance(h, logging.FileHandler)]:
        root.removeHandler(handler)
        handler.close()
