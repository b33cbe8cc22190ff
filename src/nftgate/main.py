import argparse
import asyncio

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse

from nftgate.core import AssetStore, LedgerClient, OwnershipGate, Web3Ledger
from nftgate.core.errors import GateError
from nftgate.middleware import HTTPSRedirect, ResponseCache, SelectiveGZip, UnhandledErrors
from nftgate.routers import get_routers
from nftgate.shared import Config, Logger, load_config
from nftgate.shared.config import DEFAULT_CONFIG_PATH
from nftgate.shared.tls import load_tls_materials

logger = Logger(__name__).get_logger()


# ================================================================================
#       FastAPI Setup
# ================================================================================
async def gate_error_handler(request: Request, exc: GateError):
    logger.warning(
        "%s on %s: %s", type(exc).__name__, request.url.path, exc.detail or exc.public_message
    )
    return PlainTextResponse(exc.public_message, status_code=exc.status_code)


async def unhandled_error_handler(request: Request, exc: Exception):
    logger.error("Failed to process request %s", request.url.path, exc_info=exc)
    return PlainTextResponse("Internal server error", status_code=500)


def create_app(
    config: Config,
    ledger: LedgerClient | None = None,
    assets: AssetStore | None = None,
) -> FastAPI:
    app = FastAPI()

    if ledger is None:
        ledger = Web3Ledger.from_config(config.ledger)
    if assets is None:
        assets = AssetStore.from_config(config.paths, config.assets)

    app.state.gate = OwnershipGate(ledger)
    app.state.assets = assets

    for router in get_routers():
        app.include_router(router)

    app.add_exception_handler(GateError, gate_error_handler)
    # Only reached by failures in the outer middlewares, see UnhandledErrors
    app.add_exception_handler(Exception, unhandled_error_handler)

    # Added innermost first: the cache stores uncompressed bodies without CORS headers
    app.add_middleware(UnhandledErrors)

    if config.cache.enabled:
        app.add_middleware(
            ResponseCache,
            ttl_s=config.cache.ttl,
            max_entries=config.cache.max_entries,
            max_entry_size=config.cache.max_entry_size,
            max_total_size=config.cache.max_total_size,
        )

    if config.compression.enabled:
        app.add_middleware(SelectiveGZip, minimum_size=config.compression.minimum_size)

    if config.tls.enabled:
        app.add_middleware(
            HTTPSRedirect,
            http_port=config.network.http_port,
            https_port=config.network.https_port,
        )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins(),
        allow_methods=["GET", "OPTIONS"],
        allow_headers=["*"],
    )

    return app


# ================================================================================
#       Command Line
# ================================================================================
def welcome(config: Config):
    # Log server banner
    for line in config.general.title.split("\n"):
        logger.info(line)

    # Log server startup information
    logger.info("Starting NFT download server")


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        description="Serve high resolution NFT files to verified owners"
    )
    parser.add_argument(
        "--config",
        default=str(DEFAULT_CONFIG_PATH),
        help=f"Path to the shared TOML config (default: {DEFAULT_CONFIG_PATH})",
    )
    parser.add_argument(
        "--env-config",
        default=None,
        help="Optional TOML file merged over the shared config",
    )
    return parser.parse_args(argv)


async def serve(config: Config, app: FastAPI):
    import uvicorn

    servers = []

    if config.tls.enabled:
        tls = load_tls_materials(config.tls.cert, config.tls.key)
        servers.append(
            uvicorn.Server(
                uvicorn.Config(
                    app,
                    host=config.network.host,
                    port=config.network.https_port,
                    ssl_certfile=str(tls.cert_path),
                    ssl_keyfile=str(tls.key_path),
                    log_config=None,
                )
            )
        )
        logger.info("HTTPS listening on port %s", config.network.https_port)

    servers.append(
        uvicorn.Server(
            uvicorn.Config(
                app,
                host=config.network.host,
                port=config.network.http_port,
                log_config=None,
            )
        )
    )
    logger.info("HTTP listening on port %s", config.network.http_port)

    await asyncio.gather(*(server.serve() for server in servers))


def main(argv=None):
    args = parse_args(argv)
    config = load_config(args.config, args.env_config)

    Logger.attach_file(config.paths.logs, config.logging.level)
    welcome(config)

    ledger = Web3Ledger.from_config(config.ledger)
    ledger.verify_network()

    app = create_app(config, ledger=ledger)
    asyncio.run(serve(config, app))


if __name__ == "__main__":
    main()
