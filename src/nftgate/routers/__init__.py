from .download import router as download_router
from .index import router as index_router

_routers = [download_router, index_router]

__all__ = ["get_routers"]


def get_routers():
    return _routers
