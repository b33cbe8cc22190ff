from typing import Annotated

from fastapi import APIRouter, Depends, Request
from fastapi.responses import FileResponse, PlainTextResponse
from starlette.concurrency import run_in_threadpool

from nftgate.core import AssetStore, OwnershipGate
from nftgate.core.challenge import parse_token_id
from nftgate.models import Forbidden
from nftgate.shared import Logger

logger = Logger(__name__).get_logger()

router = APIRouter()


def get_gate(request: Request) -> OwnershipGate:
    return request.app.state.gate


def get_assets(request: Request) -> AssetStore:
    return request.app.state.assets


@router.get("/download-nft/{token_id}/{signature}")
async def download_nft(
    token_id: str,
    signature: str,
    gate: Annotated[OwnershipGate, Depends(get_gate)],
    assets: Annotated[AssetStore, Depends(get_assets)],
):
    """
    Streams the high resolution file of an NFT to its owner.

    The signature must be an EIP-191 personal signature of
    ``Download high resolution file of #<token_id>`` made by the address the
    contract reports as the current owner.
    """
    parsed_id = parse_token_id(token_id)
    logger.debug("Download request for token %s", parsed_id)

    # The ledger lookup blocks on network I/O
    decision = await run_in_threadpool(gate.authorize, parsed_id, signature)

    if isinstance(decision, Forbidden):
        return PlainTextResponse(decision.message, status_code=403)

    path = assets.resolve(decision.token_id)
    logger.info("Serving %s to %s", path.name, decision.owner)

    return FileResponse(
        path=path,
        filename=assets.download_name(decision.token_id),
        media_type=assets.media_type,
    )
