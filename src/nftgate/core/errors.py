import logging
from contextlib import contextmanager

import requests
from web3.exceptions import (
    ContractLogicError,
    ProviderConnectionError,
    RequestTimedOut,
    TimeExhausted,
    Web3Exception,
)

from nftgate.shared import Logger

__all__ = [
    "AssetNotFound",
    "GateError",
    "InvalidTokenId",
    "LedgerError",
    "LedgerQueryFailed",
    "LedgerUnavailable",
    "ledger_error_handler",
]

logger = Logger(__name__, level=logging.DEBUG).get_logger()


class GateError(Exception):
    """Request scoped failure with a status code and a message safe to send to clients."""

    status_code = 500
    public_message = "Internal server error"

    def __init__(self, detail: str | None = None):
        super().__init__(detail or self.public_message)
        self.detail = detail


class InvalidTokenId(GateError):
    status_code = 400
    public_message = "Invalid token id"


class AssetNotFound(GateError):
    status_code = 404

    def __init__(self, token_id: int, detail: str | None = None):
        self.token_id = token_id
        self.public_message = f"File for NFT #{token_id} not found"
        super().__init__(detail)


class LedgerError(GateError):
    status_code = 502
    public_message = "Ownership could not be verified"


class LedgerUnavailable(LedgerError):
    public_message = "Ownership could not be verified, try again later"

    def __init__(self, detail: str | None = None, timed_out: bool = False):
        super().__init__(detail)
        self.timed_out = timed_out
        if timed_out:
            self.status_code = 504


class LedgerQueryFailed(LedgerError):
    pass


@contextmanager
def ledger_error_handler(stacklevel=1):
    # Go 3 levels up to escape @contextmanager methods and current function
    stack_level = 2 + stacklevel
    kw = {"stacklevel": stack_level}
    try:
        yield

    except LedgerError:
        raise

    except (requests.exceptions.Timeout, RequestTimedOut, TimeExhausted) as e:
        logger.error("Ledger query timed out: %s", e, **kw)
        raise LedgerUnavailable(str(e), timed_out=True) from e

    except (
        requests.exceptions.ConnectionError,
        requests.exceptions.HTTPError,
        ProviderConnectionError,
    ) as e:
        logger.error("Ledger provider unreachable: %s", e, **kw)
        raise LedgerUnavailable(str(e)) from e

    except ContractLogicError as e:
        logger.error("Ledger contract call reverted: %s", e, **kw)
        raise LedgerQueryFailed(str(e)) from e

    except (Web3Exception, requests.exceptions.RequestException, ValueError) as e:
        logger.error("Ledger query failed: %s", e, **kw)
        raise LedgerQueryFailed(str(e)) from e
