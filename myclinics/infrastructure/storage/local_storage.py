import os
import uuid
import logging
from typing import Optional

from ...core.config import settings
from ...application.ports.storage_repo import StorageRepository

logger = logging.getLogger(__name__)

URL_PREFIX = "/uploads"


class LocalStorageRepository(StorageRepository):
    def __init__(self, upload_dir: Optional[str] = None) -> None:
        self.upload_dir = upload_dir or settings.UPLOAD_DIR

    def save_bytes(self, subdir: str, filename: str, data: bytes, keep_name: bool = False) -> str:
        if keep_name:
            name = os.path.basename(filename)
        else:
            ext = os.path.splitext(filename or "")[1].lower()
            name = f"{uuid.uuid4().hex}{ext}"
        dest_dir = os.path.join(self.upload_dir, subdir) if subdir else self.upload_dir
        os.makedirs(dest_dir, exist_ok=True)
        with open(os.path.join(dest_dir, name), "wb") as f:
            f.write(data)
        rel = "/".join(p for p in (subdir.replace(os.sep, "/") if subdir else "", name) if p)
        return f"{URL_PREFIX}/{rel}"

    def delete(self, url: str) -> None:
        if not url or not url.startswith(URL_PREFIX + "/"):
            return
        path = os.path.join(self.upload_dir, *url[len(URL_PREFIX) + 1:].split("/"))
        try:
            os.remove(path)
        except FileNotFoundError:
            logger.warning(f"Upload already removed: {url}")
