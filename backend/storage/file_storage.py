"""
File storage abstraction.

Provides a simple interface for storing and retrieving files on the local
filesystem. Used by the local asset store and served under /media.
"""
import shutil
from pathlib import Path
from typing import BinaryIO, Optional
import uuid


class FileStorage:
    """
    Local file storage implementation.

    Files are organized as:
    - media/uploads/covers/  - Book cover images
    - media/uploads/files/   - Book files (PDF, EPUB, ...)
    """

    def __init__(self, media_root: str = "media"):
        self.media_root = Path(media_root)
        self.media_root.mkdir(parents=True, exist_ok=True)

    def get_uploads_dir(self, folder: str) -> Path:
        """Get (and create) an upload folder under the media root."""
        path = self.media_root / "uploads" / folder
        path.mkdir(parents=True, exist_ok=True)
        return path

    def save_upload(
        self,
        folder: str,
        file: BinaryIO,
        filename: str,
        file_id: Optional[str] = None,
    ) -> str:
        """
        Save an uploaded file to storage.

        Args:
            folder: Upload folder name
            file: File-like object with the data
            filename: Original filename (only its extension is kept)
            file_id: Optional id used for naming

        Returns:
            Relative path to the saved file
        """
        ext = Path(filename).suffix.lower()
        new_filename = f"{file_id or uuid.uuid4()}{ext}"

        file_path = self.get_uploads_dir(folder) / new_filename
        with open(file_path, "wb") as f:
            shutil.copyfileobj(file, f)

        return file_path.relative_to(self.media_root).as_posix()

    def delete_file(self, relative_path: str) -> bool:
        """Delete a file. Returns True if deleted."""
        path = self.media_root / relative_path
        if path.is_file():
            path.unlink()
            return True
        return False
