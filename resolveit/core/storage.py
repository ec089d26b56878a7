"""File storage for uploaded proof documents and photos.

Files go to local disk under UPLOAD_DIR, or to Cloudinary when
STORAGE_BACKEND is "cloudinary" (with a local-disk fallback if the
upload fails).
"""

import asyncio
from io import BytesIO
from pathlib import Path
import time
import uuid

import cloudinary
import cloudinary.uploader

from resolveit.config import settings
from resolveit.core.logging import log

DOCUMENT_EXTENSIONS = ("pdf", "doc", "docx", "txt", "md", "csv", "xlsx", "xls")


def _configure():
    """Configure cloudinary from settings."""
    cloudinary.config(
        cloud_name=settings.CLOUDINARY_CLOUD_NAME,
        api_key=settings.CLOUDINARY_API_KEY,
        api_secret=settings.CLOUDINARY_API_SECRET,
        secure=True,
    )


def _stored_name(original_filename: str) -> str:
    """Timestamped name that keeps the original extension."""
    suffix = Path(original_filename).suffix.lower()
    return f"{int(time.time() * 1000)}-{uuid.uuid4().hex[:8]}{suffix}"


class FileStore:
    """Stores uploaded files and returns opaque path/URL references."""

    def __init__(
        self,
        upload_dir: str | Path | None = None,
        backend: str | None = None,
    ):
        self.upload_dir = Path(upload_dir or settings.UPLOAD_DIR)
        self.backend = backend or settings.STORAGE_BACKEND

    async def save(self, content: bytes, original_filename: str) -> str:
        """Persist one file and return its reference."""
        filename = _stored_name(original_filename or "upload")

        if self.backend == "cloudinary":
            try:
                result = await self._upload_to_cloudinary(content, filename)
                return result["url"]
            except Exception as e:
                log.error(f"Cloudinary upload failed, falling back to local: {e}")

        return self._save_local(content, filename)

    async def save_many(self, files: list[tuple[bytes, str]]) -> list[str]:
        """Persist several files, keeping their order."""
        return [await self.save(content, name) for content, name in files]

    def _save_local(self, content: bytes, filename: str) -> str:
        self.upload_dir.mkdir(parents=True, exist_ok=True)
        file_path = self.upload_dir / filename
        file_path.write_bytes(content)
        log.info(f"Stored upload locally: {file_path}")
        return file_path.as_posix()

    async def _upload_to_cloudinary(
        self,
        content: bytes,
        filename: str,
        folder: str = "resolveit/proof",
    ) -> dict:
        """Upload file to Cloudinary and return URL + metadata."""
        _configure()

        # Use "raw" for documents, "auto"/"image" causes 401 on download
        ext = filename.rsplit(".", 1)[-1].lower() if "." in filename else ""
        resource_type = "raw" if ext in DOCUMENT_EXTENSIONS else "auto"

        result = await asyncio.to_thread(
            cloudinary.uploader.upload,
            BytesIO(content),
            folder=folder,
            public_id=filename.rsplit(".", 1)[0] if "." in filename else filename,
            resource_type=resource_type,
            overwrite=False,
            unique_filename=True,
            access_mode="public",
        )

        upload_result = {
            "url": result["secure_url"],
            "public_id": result["public_id"],
            "resource_type": result["resource_type"],
            "bytes": result["bytes"],
            "format": result.get("format", ""),
        }

        log.info(f"Uploaded to Cloudinary: {upload_result['public_id']}")
        return upload_result
