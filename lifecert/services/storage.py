import logging
from dataclasses import dataclass
from pathlib import Path

from lifecert.core.config import settings

logger = logging.getLogger(__name__)


class StorageError(RuntimeError):
    pass


@dataclass(frozen=True)
class LocalStorage:
    """Certificate photo bucket backed by a directory served under a public URL."""

    root: Path
    public_url: str

    def _path(self, key: str) -> Path:
        safe_key = key.lstrip("/").replace("\\", "/")
        if ".." in safe_key.split("/"):
            raise StorageError(f"Invalid storage key: {key}")
        return self.root / safe_key

    def upload(self, key: str, data: bytes, *, content_type: str | None = None) -> None:
        p = self._path(key)
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_bytes(data)
        logger.info(f"Stored {len(data)} bytes at {key} ({content_type or 'unknown type'})")

    def exists(self, key: str) -> bool:
        return self._path(key).exists()

    def get_public_url(self, key: str) -> str:
        return f"{self.public_url.rstrip('/')}/{key.lstrip('/')}"


def storage_from_settings() -> LocalStorage:
    return LocalStorage(root=Path(settings.MEDIA_ROOT), public_url=settings.media_public_url)
