"""Local file storage for uploaded documents."""

import logging
import re
import time
import uuid
from pathlib import Path
from typing import Protocol

logger = logging.getLogger(__name__)

_WHITESPACE = re.compile(r"\s+")

_MAX_NAME_ATTEMPTS = 5


class FileStorage(Protocol):
    """Stores raw uploaded files under opaque names."""

    def save(self, original_name: str, data: bytes) -> str:
        """Persist bytes and return the stored filename."""
        ...

    def path_for(self, stored_filename: str) -> Path:
        """Resolve a stored filename to a local path."""
        ...

    def delete(self, stored_filename: str) -> bool:
        """Remove a stored file. Returns False if it did not exist."""
        ...


def make_stored_filename(
    original_name: str, now_ms: int | None = None, token: str | None = None
) -> str:
    """Build `<epoch-ms>-<token>-<name>` with whitespace replaced and directories stripped.

    The random token keeps same-name uploads within one millisecond apart.
    """
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    if token is None:
        token = uuid.uuid4().hex[:8]
    base = Path(original_name.replace("\\", "/")).name or "upload"
    return f"{now_ms}-{token}-{_WHITESPACE.sub('_', base)}"


class LocalFileStorage:
    """FileStorage backed by a local directory."""

    def __init__(self, root: Path | str) -> None:
        self._root = Path(root)

    @property
    def root(self) -> Path:
        return self._root

    def ensure_ready(self) -> None:
        self._root.mkdir(parents=True, exist_ok=True)

    def save(self, original_name: str, data: bytes) -> str:
        self.ensure_ready()
        for _ in range(_MAX_NAME_ATTEMPTS):
            stored_filename = make_stored_filename(original_name)
            destination = self.path_for(stored_filename)
            # Exclusive create: an existing file is never overwritten
            try:
                f = destination.open("xb")
            except FileExistsError:
                logger.warning(f"Stored name {stored_filename} already taken, retrying")
                continue
            try:
                with f:
                    f.write(data)
            except OSError:
                destination.unlink(missing_ok=True)
                raise
            logger.info(f"Stored upload {original_name!r} as {stored_filename} ({len(data)} bytes)")
            return stored_filename
        raise FileExistsError(f"No free stored name for {original_name!r}")

    def path_for(self, stored_filename: str) -> Path:
        # Stored names never contain separators; reject anything that would escape root
        if Path(stored_filename).name != stored_filename:
            raise ValueError(f"Invalid stored filename: {stored_filename!r}")
        return self._root / stored_filename

    def delete(self, stored_filename: str) -> bool:
        path = self.path_for(stored_filename)
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        logger.info(f"Deleted stored file {stored_filename}")
        return True
