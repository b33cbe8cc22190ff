import json
from pathlib import Path
from typing import Protocol, runtime_checkable

from web3 import Web3

from nftgate.core.errors import LedgerUnavailable, ledger_error_handler
from nftgate.shared.config import Ledger as LedgerConfig
from nftgate.shared.logger import Logger

logger = Logger(__name__).get_logger()


@runtime_checkable
class LedgerClient(Protocol):
    """Read-only view of the NFT contract."""

    def owner_of(self, token_id: int) -> str:
        """Checksum address currently owning ``token_id``.

        Raises LedgerUnavailable or LedgerQueryFailed, never returns a sentinel.
        """
        ...


def _defines_owner_of(abi: list[dict]) -> bool:
    for entry in abi:
        if entry.get("type", "function") != "function" or entry.get("name") != "ownerOf":
            continue
        inputs = [i.get("type") for i in entry.get("inputs", [])]
        outputs = [o.get("type") for o in entry.get("outputs", [])]
        if inputs == ["uint256"] and outputs == ["address"]:
            return True
    return False


def load_abi(path) -> list[dict]:
    """
    Reads a contract ABI from a JSON file. Accepts either the bare ABI list or
    a compiler artifact with an ``abi`` key.
    Raises ValueError if the ABI does not define ``ownerOf(uint256) -> address``.
    """
    with Path(path).open("r", encoding="utf-8") as f:
        data = json.load(f)

    abi = data["abi"] if isinstance(data, dict) and "abi" in data else data
    if not isinstance(abi, list):
        raise ValueError(f"ABI in {path} is not a list of entries")

    if not _defines_owner_of(abi):
        raise ValueError(f"ABI in {path} does not define ownerOf(uint256) -> address")

    logger.debug("Loaded ABI with %s entries from %s", len(abi), path)
    return abi


class Web3Ledger:
    """LedgerClient backed by a JSON-RPC endpoint.

    Built once at startup and shared between requests. Each lookup is a single
    ``eth_call`` bounded by ``timeout``; provider level retries are disabled.

    The response is streamed so web3 checks a deadline between chunks
    (``TimeExhausted``) instead of letting every socket read restart the
    clock. Socket reads get half the budget each, so the deadline plus one
    final stalled read stays within ``timeout``.
    """

    def __init__(
        self,
        rpc_url: str,
        contract_address: str,
        abi: list[dict],
        timeout: float = 10.0,
        chain_id: int | None = None,
    ):
        self.rpc_url = rpc_url
        self.timeout = timeout
        self.chain_id = chain_id

        self.w3 = Web3(
            Web3.HTTPProvider(
                rpc_url,
                request_kwargs={"timeout": timeout / 2, "stream": True},
                exception_retry_configuration=None,
            )
        )
        self.contract = self.w3.eth.contract(
            address=Web3.to_checksum_address(contract_address), abi=abi
        )

    @classmethod
    def from_config(cls, config: LedgerConfig) -> "Web3Ledger":
        logger.info(
            "Connecting to %s ledger contract %s", config.network, config.contract_address
        )
        return cls(
            rpc_url=config.rpc_url,
            contract_address=config.contract_address,
            abi=load_abi(config.abi_path),
            timeout=config.timeout,
            chain_id=config.chain_id,
        )

    def verify_network(self) -> None:
        if self.chain_id is None:
            return

        with ledger_error_handler():
            remote_chain_id = self.w3.eth.chain_id

        if remote_chain_id != self.chain_id:
            raise LedgerUnavailable(
                f"Provider is on chain {remote_chain_id}, expected {self.chain_id}"
            )
        logger.info("Ledger provider is on chain %s", remote_chain_id)

    def owner_of(self, token_id: int) -> str:
        logger.debug("Querying owner of token %s", token_id)
        with ledger_error_handler():
            owner = self.contract.functions.ownerOf(token_id).call()
            return Web3.to_checksum_address(owner)
