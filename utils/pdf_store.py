from __future__ import annotations

import logging
from pathlib import Path
from typing import Union

logger = logging.getLogger(__name__)


class PathOutsideStoreError(ValueError):
    """The requested path does not resolve inside the attachment directory."""


class PdfStore:
    """Attachment files under one managed directory.

    Reads and deletes only accept paths that resolve inside ``directory``.
    No locking: concurrent save and delete of one path race.
    """

    def __init__(self, directory: Union[str, Path]):
        self.directory = Path(directory)

    def _root(self) -> Path:
        return self.directory.resolve()

    def _inside(self, path: Union[str, Path]) -> Path:
        resolved = Path(path).expanduser().resolve()
        root = self._root()
        if resolved == root or root not in resolved.parents:
            raise PathOutsideStoreError(f"{path} is outside the attachment directory")
        return resolved

    def save(self, name: str, data: bytes) -> str:
        """Write ``data`` to ``directory/name`` and return the absolute path.

        An existing file with the same name is overwritten.
        """
        if not name or Path(name).name != name or name in {".", ".."}:
            raise PathOutsideStoreError(f"invalid attachment name: {name!r}")
        self.directory.mkdir(parents=True, exist_ok=True)
        target = self._inside(self.directory / name)
        target.write_bytes(data)
        logger.info("saved attachment %s (%d bytes)", target, len(data))
        return str(target)

    def read(self, path: Union[str, Path]) -> bytes:
        return self._inside(path).read_bytes()

    def delete(self, path: Union[str, Path]) -> None:
        target = self._inside(path)
        target.unlink()
        logger.info("deleted attachment %s", target)
