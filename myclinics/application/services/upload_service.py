from dataclasses import dataclass
from typing import List, Optional
import io
import os
import logging
from PIL import Image, UnidentifiedImageError

from ...core.config import settings
from ...exceptions import APIException
from ... import messages
from ..ports.storage_repo import StorageRepository

logger = logging.getLogger(__name__)

PDF_MAGIC = b"%PDF"


def thumbnail_url(url: str) -> str:
    """/uploads/clinics/ab12.png -> /uploads/clinics/thumbnails/ab12.jpg"""
    head, _, name = url.rpartition("/")
    return f"{head}/thumbnails/{os.path.splitext(name)[0]}.jpg"


@dataclass
class UploadedFile:
    filename: str
    content_type: str
    data: bytes


@dataclass
class UploadService:
    storage: StorageRepository
    max_file_size: int = settings.MAX_FILE_SIZE
    allowed_image_types: Optional[List[str]] = None
    allowed_report_types: Optional[List[str]] = None

    def __post_init__(self):
        if self.allowed_image_types is None:
            self.allowed_image_types = list(settings.ALLOWED_IMAGE_TYPES)
        if self.allowed_report_types is None:
            self.allowed_report_types = list(settings.ALLOWED_REPORT_TYPES)

    def save_image(self, subdir: str, upload: UploadedFile, thumbnail: bool = False) -> str:
        """Validate an image with Pillow and store it; returns its public URL."""
        self._check_size(upload)
        if upload.content_type not in self.allowed_image_types:
            raise APIException(415, messages.FILE_TYPE_NOT_ALLOWED)
        self._verify_image(upload.data)
        url = self.storage.save_bytes(subdir, upload.filename, upload.data)
        if thumbnail:
            self._save_thumbnail(subdir, url, upload)
        return url

    def save_images(self, subdir: str, uploads: List[UploadedFile], limit: int) -> List[str]:
        if len(uploads) > limit:
            raise APIException(400, messages.TOO_MANY_IMAGES, errors={"clinicImages": [messages.TOO_MANY_IMAGES]})
        saved: List[str] = []
        try:
            for upload in uploads:
                saved.append(self.save_image(subdir, upload, thumbnail=True))
        except APIException:
            self.discard(saved, thumbnails=True)
            raise
        return saved

    def save_report(self, upload: UploadedFile) -> str:
        self._check_size(upload)
        if upload.content_type not in self.allowed_report_types:
            raise APIException(415, messages.FILE_TYPE_NOT_ALLOWED)
        if upload.content_type == "application/pdf":
            if not upload.data.startswith(PDF_MAGIC):
                raise APIException(400, messages.FILE_INVALID)
        else:
            self._verify_image(upload.data)
        return self.storage.save_bytes("reports", upload.filename, upload.data)

    def discard(self, urls: List[str], thumbnails: bool = False) -> None:
        for url in urls:
            self.storage.delete(url)
            if thumbnails:
                self.storage.delete(thumbnail_url(url))

    def _check_size(self, upload: UploadedFile) -> None:
        if not upload.data:
            raise APIException(400, messages.FILE_INVALID)
        if len(upload.data) > self.max_file_size:
            raise APIException(413, messages.FILE_TOO_LARGE)

    def _verify_image(self, data: bytes) -> None:
        try:
            with Image.open(io.BytesIO(data)) as img:
                img.verify()
        except (UnidentifiedImageError, Image.DecompressionBombError, OSError, SyntaxError):
            raise APIException(400, messages.FILE_INVALID)

    def _save_thumbnail(self, subdir: str, url: str, upload: UploadedFile) -> Optional[str]:
        try:
            with Image.open(io.BytesIO(upload.data)) as img:
                if img.mode in ("RGBA", "LA", "P"):
                    img = img.convert("RGB")
                img.thumbnail(settings.THUMBNAIL_SIZE, Image.Resampling.LANCZOS)
                buf = io.BytesIO()
                img.save(buf, format="JPEG", quality=85, optimize=True)
            name = thumbnail_url(url).rpartition("/")[2]
            return self.storage.save_bytes(os.path.join(subdir, "thumbnails"), name, buf.getvalue(), keep_name=True)
        except (OSError, Image.DecompressionBombError) as e:
            logger.warning(f"Thumbnail generation failed for {upload.filename}: {e}")
            return None
