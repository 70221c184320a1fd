"""
Cloudinary asset store using the signed upload/destroy REST API.
"""
from __future__ import annotations

import hashlib
import logging
import re
import time
from pathlib import Path
from typing import Any, Dict, Optional, Tuple
from urllib.parse import unquote, urlparse

import requests

from domain.errors import AssetStoreError
from domain.models import StoredAsset
from storage.asset_store import AssetStore, folder_for

CLOUDINARY_API_BASE_URL = "https://api.cloudinary.com/v1_1"
logger = logging.getLogger(__name__)

_VERSION_RE = re.compile(r"^v\d+$")
# Parameters Cloudinary leaves out of the signature
_UNSIGNED_PARAMS = {"file", "cloud_name", "resource_type", "api_key"}


def sign_params(params: Dict[str, Any], api_secret: str) -> str:
    """SHA-1 signature over the sorted, non-empty parameters followed by the secret."""
    to_sign = "&".join(
        f"{key}={value}"
        for key, value in sorted(params.items())
        if key not in _UNSIGNED_PARAMS and value not in (None, "")
    )
    return hashlib.sha1(f"{to_sign}{api_secret}".encode("utf-8")).hexdigest()


def parse_delivery_url(public_url: str) -> Tuple[str, str]:
    """
    Extract (resource_type, public_id) from a Cloudinary delivery URL.

    https://res.cloudinary.com/<cloud>/<resource_type>/upload/v123/<folder>/<name>.<ext>
    Raw assets keep their extension in the public id; images and videos don't.
    """
    parts = [unquote(p) for p in urlparse(public_url).path.split("/") if p]
    if len(parts) < 4:
        raise AssetStoreError(f"Not a Cloudinary delivery URL: {public_url}")
    resource_type = parts[1]
    rest = parts[3:]
    if rest and _VERSION_RE.match(rest[0]):
        rest = rest[1:]
    if not rest:
        raise AssetStoreError(f"Not a Cloudinary delivery URL: {public_url}")
    public_id = "/".join(rest)
    if resource_type != "raw":
        public_id = public_id.rsplit(".", 1)[0] if "." in rest[-1] else public_id
    return resource_type, public_id


class CloudinaryAssetStore(AssetStore):
    def __init__(
        self,
        cloud_name: Optional[str],
        api_key: Optional[str],
        api_secret: Optional[str],
        folder: str = "elib",
        timeout: float = 30.0,
        session: Optional[requests.Session] = None,
    ):
        if not (cloud_name and api_key and api_secret):
            raise ValueError("Cloudinary credentials are not configured")
        self.cloud_name = cloud_name
        self.api_key = api_key
        self.api_secret = api_secret
        self.folder = folder.strip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def _endpoint(self, resource_type: str, action: str) -> str:
        return f"{CLOUDINARY_API_BASE_URL}/{self.cloud_name}/{resource_type}/{action}"

    def _signed(self, params: Dict[str, Any]) -> Dict[str, Any]:
        params = {k: v for k, v in params.items() if v not in (None, "")}
        params["timestamp"] = int(time.time())
        params["signature"] = sign_params(params, self.api_secret)
        params["api_key"] = self.api_key
        return params

    def _post(self, url: str, data: Dict[str, Any], files: Optional[dict] = None) -> dict:
        try:
            resp = self.session.post(url, data=data, files=files, timeout=self.timeout)
        except requests.RequestException as exc:
            raise AssetStoreError(f"Cloudinary request failed: {exc}") from exc
        try:
            payload = resp.json()
        except ValueError:
            payload = {}
        if resp.status_code >= 400:
            message = (payload.get("error") or {}).get("message") or resp.reason
            raise AssetStoreError(f"Cloudinary error {resp.status_code}: {message}")
        return payload

    def upload(self, local_path: str, folder: Optional[str] = None) -> StoredAsset:
        source = Path(local_path)
        if not source.is_file():
            raise AssetStoreError(f"File not found: {local_path}")

        target_folder = "/".join(p for p in (self.folder, folder or folder_for(local_path)) if p)
        data = self._signed({"folder": target_folder})
        with open(source, "rb") as fh:
            payload = self._post(
                self._endpoint("auto", "upload"),
                data=data,
                files={"file": (source.name, fh)},
            )

        secure_url = payload.get("secure_url")
        if not secure_url:
            raise AssetStoreError("Cloudinary upload returned no URL")
        logger.debug("Uploaded %s to Cloudinary as %s", source.name, payload.get("public_id"))
        return StoredAsset(
            public_url=secure_url,
            public_id=payload.get("public_id"),
            resource_type=payload.get("resource_type"),
        )

    def _is_own_url(self, public_url: str) -> bool:
        parsed = urlparse(public_url)
        parts = [p for p in parsed.path.split("/") if p]
        return parsed.netloc.endswith("cloudinary.com") and bool(parts) and parts[0] == self.cloud_name

    def remove(self, public_url: str) -> None:
        if not self._is_own_url(public_url):
            # e.g. a /media URL issued while ASSET_STORE was "local"
            logger.info("Not a Cloudinary asset of %s, nothing to remove: %s", self.cloud_name, public_url)
            return
        resource_type, public_id = parse_delivery_url(public_url)
        data = self._signed({"public_id": public_id, "invalidate": "true"})
        payload = self._post(self._endpoint(resource_type, "destroy"), data=data)
        result = payload.get("result")
        if result == "not found":
            logger.info("Cloudinary asset already gone: %s", public_id)
        elif result != "ok":
            raise AssetStoreError(f"Cloudinary destroy failed for {public_id}: {result}")
