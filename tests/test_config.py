import logging
from pathlib import Path

import pytest
from pydantic import ValidationError
from web3 import Web3

from nftgate.shared import load_config
from nftgate.shared.config import Config

CONTRACT = "0x5af0d9827e0c53e4799bb226655a1de152a425a5"

MINIMAL = f"""
[ledger]
rpc_url = "https://rpc.example"
contract_address = "{CONTRACT}"
"""


def write(tmp_path, name, text) -> Path:
    path = tmp_path / name
    path.write_text(text)
    return path


def test_repository_config_loads():
    config = load_config(Path(__file__).parent.parent / "config.toml")
    assert config.ledger.abi_path == "abi_mainnet.json"
    assert config.assets.extension == ".jpg"


def test_minimal_config_gets_defaults(tmp_path):
    config = load_config(write(tmp_path, "config.toml", MINIMAL))

    assert config.ledger.contract_address == Web3.to_checksum_address(CONTRACT)
    assert config.ledger.abi_path == "abi_mainnet.json"
    assert config.ledger.timeout == 10
    assert config.paths.assets == "metadata"
    assert config.cache.ttl == 86400
    assert config.cache.max_total_size == 268435456
    assert config.tls.enabled is False
    assert config.logging.level == logging.INFO


def test_specific_config_overrides_sections(tmp_path):
    shared = write(tmp_path, "config.toml", MINIMAL)
    specific = write(
        tmp_path,
        "production.toml",
        '[logging]\nlevel = "warning"\n[network]\nhttp_port = 80\nhttps_port = 443\n',
    )

    config = load_config(shared, specific)

    assert config.logging.level == logging.WARNING
    assert config.network.https_port == 443
    assert config.ledger.rpc_url == "https://rpc.example"


def test_unknown_log_level_falls_back_to_info(tmp_path):
    config = load_config(write(tmp_path, "c.toml", MINIMAL + '[logging]\nlevel = "LOUD"\n'))
    assert config.logging.level == logging.INFO


def test_cors_origins_include_local_https(tmp_path):
    text = MINIMAL + '[cors]\norigins = "https://a.example https://b.example"\n[network]\nhttps_port = 8443\n'
    config = load_config(write(tmp_path, "c.toml", text))

    assert config.cors_origins() == [
        "https://a.example",
        "https://b.example",
        "https://localhost:8443",
        "https://127.0.0.1:8443",
    ]


def test_extension_gets_leading_dot():
    config = Config(
        ledger={"rpc_url": "https://rpc.example", "contract_address": CONTRACT},
        assets={"extension": "png"},
    )
    assert config.assets.extension == ".png"


@pytest.mark.parametrize(
    "override",
    [
        {"ledger": {"rpc_url": "wss://rpc.example", "contract_address": CONTRACT}},
        {"ledger": {"rpc_url": "https://rpc.example", "contract_address": "0x1234"}},
        {"ledger": {"rpc_url": "https://rpc.example", "contract_address": CONTRACT, "timeout": 0}},
        {"ledger": {"rpc_url": "https://rpc.example", "contract_address": CONTRACT, "timeout": 600}},
        {"network": {"http_port": 70000}},
        {"tls": {"cert": "cert.pem"}},
        {"assets": {"extension": "../jpg"}},
    ],
)
def test_invalid_config_is_rejected(override):
    data = {"ledger": {"rpc_url": "https://rpc.example", "contract_address": CONTRACT}}
    data.update(override)
    with pytest.raises(ValidationError):
        Config(**data)


def test_ledger_section_is_required(tmp_path):
    with pytest.raises(ValidationError):
        load_config(write(tmp_path, "c.toml", "[general]\ntitle = 'x'\n"))
