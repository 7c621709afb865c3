from __future__ import annotations

import logging
import time
from functools import lru_cache
from pathlib import Path, PurePosixPath
from typing import Optional

from app.core.config import get_settings

logger = logging.getLogger(__name__)


def build_image_path(owner_id: str, filename: Optional[str], now_ms: Optional[int] = None) -> str:
    """
    `{ownerId}/{timestamp}.{extension}`; timestamp is epoch milliseconds.
    """
    ts = now_ms if now_ms is not None else int(time.time() * 1000)
    ext = "bin"
    if filename and "." in filename:
        candidate = filename.rsplit(".", 1)[-1].strip().lower()
        if candidate and candidate.isalnum():
            ext = candidate
    return f"{owner_id}/{ts}.{ext}"


IMAGE_PATH_ATTEMPTS = 5


class LocalBlobStore:
    """
    Filesystem-backed object store.

    Handles are the relative POSIX paths objects were stored under. Objects are
    write-once: storing to an existing path fails like a hosted bucket would.
    """

    def __init__(self, root: Path, public_base_url: str):
        self.root = Path(root)
        self.public_base_url = public_base_url.rstrip("/")

    def _resolve(self, handle: str) -> Path:
        rel = PurePosixPath(handle)
        if rel.is_absolute() or ".." in rel.parts or not rel.parts:
            raise ValueError(f"Invalid blob path: {handle}")
        return self.root.joinpath(*rel.parts)

    def store(self, path: str, data: bytes) -> str:
        target = self._resolve(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        with open(target, "xb") as fh:
            fh.write(data)
        logger.info("[blob] stored %s (%d bytes)", path, len(data))
        return str(PurePosixPath(path))

    def public_url(self, handle: str) -> str:
        self._resolve(handle)
        return f"{self.public_base_url}/{handle}"

    def exists(self, handle: str) -> bool:
        return self._resolve(handle).is_file()

    def store_image(
        self, owner_id: str, filename: Optional[str], data: bytes, now_ms: Optional[int] = None
    ) -> str:
        """
        Store under `{owner}/{ms}.{ext}`. A second upload by the same owner in
        the same millisecond takes the next free millisecond.
        """
        ts = now_ms if now_ms is not None else int(time.time() * 1000)
        for attempt in range(IMAGE_PATH_ATTEMPTS):
            try:
                return self.store(build_image_path(owner_id, filename, now_ms=ts + attempt), data)
            except FileExistsError:
                if attempt == IMAGE_PATH_ATTEMPTS - 1:
                    raise
                logger.info("[blob] %s/%d taken, retrying", owner_id, ts + attempt)


@lru_cache(maxsize=1)
def get_blob_store() -> LocalBlobStore:
    settings = get_settings()
    return LocalBlobStore(settings.media_root, settings.blob_public_base_url)
