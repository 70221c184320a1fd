"""
Staging of multipart uploads.

The asset store works on local paths, so each uploaded file is written to a
temporary location for the duration of the request and removed afterwards.
"""
import logging
import uuid
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List, Optional

from fastapi import UploadFile
from PIL import Image, UnidentifiedImageError

from domain.errors import ValidationError
from domain.models import UploadedFiles
from settings import settings

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 1024


def _max_bytes() -> int:
    return int(settings.MAX_UPLOAD_MB * 1024 * 1024)


def _stage(upload: Optional[UploadFile], staged: List[Path]) -> Optional[str]:
    """Copy one upload to the staging dir. Empty slots are treated as absent."""
    if upload is None or not upload.filename:
        return None

    tmp_dir = Path(settings.UPLOAD_TMP_DIR)
    tmp_dir.mkdir(parents=True, exist_ok=True)
    ext = Path(upload.filename).suffix.lower()
    target = tmp_dir / f"{uuid.uuid4()}{ext}"
    staged.append(target)

    limit = _max_bytes()
    written = 0
    upload.file.seek(0)
    with open(target, "wb") as out:
        while True:
            chunk = upload.file.read(CHUNK_SIZE)
            if not chunk:
                break
            written += len(chunk)
            if written > limit:
                raise ValidationError(
                    f"{upload.filename} is too large (max {settings.MAX_UPLOAD_MB:g} MB).",
                )
            out.write(chunk)

    if written == 0:
        raise ValidationError(f"{upload.filename} is empty.")
    return str(target)


def ensure_image(path: str) -> None:
    """Raise ValidationError unless Pillow can identify the file as an image."""
    try:
        with Image.open(path) as img:
            img.verify()
    except (UnidentifiedImageError, OSError, SyntaxError) as exc:
        logger.debug("Rejected cover image %s: %s", path, exc)
        raise ValidationError("Cover image must be an image.") from exc


@contextmanager
def stage_uploads(
    cover_image: Optional[UploadFile] = None,
    file: Optional[UploadFile] = None,
) -> Iterator[UploadedFiles]:
    """
    Stage the cover image and book file of a request to local paths.

    Yields UploadedFiles; the staged copies are deleted when the block exits.
    """
    staged: List[Path] = []
    try:
        cover_path = _stage(cover_image, staged)
        file_path = _stage(file, staged)
        if cover_path:
            ensure_image(cover_path)
        yield UploadedFiles(cover_image=cover_path, file=file_path)
    finally:
        for path in staged:
            try:
                path.unlink(missing_ok=True)
            except OSError as exc:
                logger.warning("Failed to remove staged upload %s: %s", path, exc)
