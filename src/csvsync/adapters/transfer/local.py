"""Read source files from the local filesystem."""

from __future__ import annotations

from logging import getLogger
from pathlib import Path
from typing import TYPE_CHECKING

from csvsync.domain.errors import TransferError
from csvsync.domain.ports.fetching import SourceFile

if TYPE_CHECKING:
    from csvsync.domain.model import ImportSource

log = getLogger(__name__)


class LocalFileFetcher:
    """Reads ``source.selector`` as a path, relative paths resolved against ``base_dir``."""

    def __init__(self, base_dir: Path | None = None) -> None:
        self.base_dir = base_dir

    def resolve(self, selector: str) -> Path:
        path = Path(selector).expanduser()
        if not path.is_absolute() and self.base_dir is not None:
            path = self.base_dir / path
        return path

    def __call__(self, source: ImportSource) -> SourceFile:
        path = self.resolve(source.selector)
        log.debug("Reading %s", path)
        try:
            content = path.read_bytes()
        except OSError as exc:
            raise TransferError(f"Cannot read file '{path}': {exc}") from exc
        return SourceFile(name=path.name, content=content)
