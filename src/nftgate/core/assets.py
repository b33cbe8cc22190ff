from pathlib import Path

from nftgate.core.errors import AssetNotFound
from nftgate.shared.config import Assets, Paths
from nftgate.shared.logger import Logger

logger = Logger(__name__).get_logger()


class AssetStore:
    """Maps token ids to the high resolution files under the asset root."""

    def __init__(self, root, extension: str = ".jpg", media_type: str = "image/jpeg"):
        self.root = Path(root)
        self.extension = extension
        self.media_type = media_type

    @classmethod
    def from_config(cls, paths: Paths, assets: Assets) -> "AssetStore":
        store = cls(paths.assets, assets.extension, assets.media_type)
        logger.info("Assets are served from: %s", store.root.absolute())
        return store

    def download_name(self, token_id: int) -> str:
        return f"{token_id}{self.extension}"

    def path_for(self, token_id: int) -> Path:
        """
        Builds the asset path for ``token_id``.
        Raises ValueError if the result would resolve outside the asset root.
        """
        root = self.root.resolve()
        path = (root / self.download_name(token_id)).resolve()
        if not path.is_relative_to(root):
            raise ValueError(f"Asset path escapes the asset root: {path}")
        return path

    def resolve(self, token_id: int) -> Path:
        path = self.path_for(token_id)
        if not path.is_file():
            logger.error("Asset not found on disk: %s", path)
            raise AssetNotFound(token_id, detail=f"No file at {path}")
        return path
