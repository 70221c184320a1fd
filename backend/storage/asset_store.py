"""
Asset store clients.

An asset store takes a local file path, keeps the file somewhere it can be
served from, and hands back a public URL. The same URL is later used to
remove the asset. Two backends exist: the local media tree (development,
tests) and Cloudinary (see storage.cloudinary_store).
"""
import logging
import mimetypes
from pathlib import Path
from typing import Optional
from urllib.parse import urlparse

from domain.errors import AssetStoreError
from domain.models import StoredAsset
from settings import settings
from storage.file_storage import FileStorage

logger = logging.getLogger(__name__)


def folder_for(local_path: str) -> str:
    """Pick an upload folder from the file type: images are covers, the rest files."""
    mime, _ = mimetypes.guess_type(local_path)
    if mime and mime.startswith("image/"):
        return "covers"
    return "files"


class AssetStore:
    """Interface shared by the asset store backends."""

    def upload(self, local_path: str, folder: Optional[str] = None) -> StoredAsset:
        raise NotImplementedError

    def remove(self, public_url: str) -> None:
        raise NotImplementedError


class LocalAssetStore(AssetStore):
    """Stores assets in the local media tree, served by the API under /media."""

    def __init__(self, media_root: str = "media", public_base_url: str = "http://localhost:8000"):
        self.storage = FileStorage(media_root)
        self.public_base_url = public_base_url.rstrip("/")

    def _url_for(self, relative_path: str) -> str:
        return f"{self.public_base_url}/media/{relative_path}"

    def _relative_path(self, public_url: str) -> Optional[str]:
        prefix = f"{self.public_base_url}/media/"
        if public_url.startswith(prefix):
            return public_url[len(prefix):]
        # Accept URLs that were issued under another host name
        path = urlparse(public_url).path
        if path.startswith("/media/uploads/"):
            return path[len("/media/"):]
        return None

    def upload(self, local_path: str, folder: Optional[str] = None) -> StoredAsset:
        source = Path(local_path)
        if not source.is_file():
            raise AssetStoreError(f"File not found: {local_path}")
        try:
            with open(source, "rb") as fh:
                relative = self.storage.save_upload(
                    folder=folder or folder_for(local_path),
                    file=fh,
                    filename=source.name,
                )
        except OSError as exc:
            raise AssetStoreError(f"Failed to store {source.name}: {exc}") from exc
        return StoredAsset(public_url=self._url_for(relative), public_id=relative, resource_type="local")

    def remove(self, public_url: str) -> None:
        relative = self._relative_path(public_url)
        if relative is None:
            logger.debug("Not a local asset URL, nothing to remove: %s", public_url)
            return
        try:
            self.storage.delete_file(relative)
        except OSError as exc:
            raise AssetStoreError(f"Failed to remove {relative}: {exc}") from exc


def get_asset_store() -> AssetStore:
    """Build the asset store configured by ASSET_STORE."""
    if settings.ASSET_STORE == "cloudinary":
        from storage.cloudinary_store import CloudinaryAssetStore

        return CloudinaryAssetStore(
            cloud_name=settings.CLOUDINARY_CLOUD_NAME,
            api_key=settings.CLOUDINARY_API_KEY,
            api_secret=settings.CLOUDINARY_API_SECRET,
            folder=settings.CLOUDINARY_FOLDER,
            timeout=settings.ASSET_STORE_TIMEOUT,
        )
    if settings.ASSET_STORE != "local":
        raise ValueError(f"Unknown ASSET_STORE: {settings.ASSET_STORE}")
    return LocalAssetStore(settings.MEDIA_ROOT, settings.PUBLIC_BASE_URL)
