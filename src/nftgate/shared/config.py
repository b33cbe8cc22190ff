from logging import CRITICAL, DEBUG, ERROR, INFO, WARNING
from os import PathLike
from pathlib import Path
from tomllib import load

from pydantic import BaseModel, Field, field_validator, model_validator
from web3 import Web3

DEFAULT_CONFIG_PATH = Path("config.toml")


class General(BaseModel):
    title: str = "nftgate"


class Logging(BaseModel):
    level: int = INFO

    @field_validator("level", mode="before")
    @classmethod
    def convert_log_level(cls, value):
        if isinstance(value, int):
            return value
        log_levels = {
            "DEBUG": DEBUG,
            "INFO": INFO,
            "WARNING": WARNING,
            "ERROR": ERROR,
            "CRITICAL": CRITICAL,
        }
        return log_levels.get(str(value).upper(), INFO)


class Paths(BaseModel):
    logs: str = "logs"
    assets: str = "metadata"


class Assets(BaseModel):
    extension: str = ".jpg"
    media_type: str = "image/jpeg"

    @field_validator("extension")
    @classmethod
    def leading_dot(cls, value: str) -> str:
        if "/" in value or "\\" in value:
            raise ValueError("extension must not contain path separators")
        return value if value.startswith(".") else f".{value}"


class Ledger(BaseModel):
    rpc_url: str
    network: str = "mainnet"
    chain_id: int | None = None
    contract_address: str
    abi_path: str | None = None
    timeout: float = Field(default=10.0, gt=0, le=60)

    @field_validator("rpc_url")
    @classmethod
    def http_url(cls, value: str) -> str:
        if not value.startswith(("http://", "https://")):
            raise ValueError("rpc_url must be an http(s) URL")
        return value

    @field_validator("contract_address")
    @classmethod
    def checksum_address(cls, value: str) -> str:
        if not Web3.is_address(value):
            raise ValueError(f"invalid contract address: {value}")
        return Web3.to_checksum_address(value)

    @model_validator(mode="after")
    def default_abi_path(self):
        # The ABI file is named after the network unless given explicitly
        if self.abi_path is None:
            self.abi_path = f"abi_{self.network}.json"
        return self


class Network(BaseModel):
    host: str = "0.0.0.0"
    http_port: int = Field(default=80, ge=1, le=65535)
    https_port: int = Field(default=443, ge=1, le=65535)


class TLS(BaseModel):
    cert: str | None = None
    key: str | None = None

    @model_validator(mode="after")
    def both_or_neither(self):
        if (self.cert is None) != (self.key is None):
            raise ValueError("tls.cert and tls.key must be configured together")
        return self

    @property
    def enabled(self) -> bool:
        return self.cert is not None


class Cors(BaseModel):
    origins: list[str] = []

    @field_validator("origins", mode="before")
    @classmethod
    def split_origins(cls, value):
        # Accept the space separated form as well as a TOML list
        if isinstance(value, str):
            return value.split()
        return value


class Cache(BaseModel):
    enabled: bool = True
    ttl: int = Field(default=86400, gt=0)
    max_entries: int = Field(default=256, gt=0)
    max_entry_size: int = Field(default=20971520, gt=0)  # 20 MB
    max_total_size: int = Field(default=268435456, gt=0)  # 256 MB


class Compression(BaseModel):
    enabled: bool = True
    minimum_size: int = Field(default=0, ge=0)


class Config(BaseModel):
    general: General = General()
    logging: Logging = Logging()
    paths: Paths = Paths()
    assets: Assets = Assets()
    ledger: Ledger
    network: Network = Network()
    tls: TLS = TLS()
    cors: Cors = Cors()
    cache: Cache = Cache()
    compression: Compression = Compression()

    def cors_origins(self) -> list[str]:
        port = self.network.https_port
        return [
            *self.cors.origins,
            f"https://localhost:{port}",
            f"https://127.0.0.1:{port}",
        ]


def load_config(
    shared_config_file: PathLike = DEFAULT_CONFIG_PATH,
    specific_config_file: PathLike | None = None,
) -> Config:
    """Load and merge configurations from TOML files."""
    # Load shared config
    with Path(shared_config_file).open("rb") as f:
        config_data = load(f)

    # Load and merge specific config if provided
    if specific_config_file:
        with Path(specific_config_file).open("rb") as f:
            specific_data = load(f)
            config_data.update(specific_data)

    return Config(**config_data)
