"""Loading raw CVRF documents and index manifests from files."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from .constants import MANIFEST_COMMENT
from .exceptions import CvrfError

logger = logging.getLogger(__name__)

UTF8_BOM = b"\xef\xbb\xbf"


@dataclass
class Source:
    """Raw document bytes and where they came from."""

    raw: bytes
    origin: str
    path: Optional[Path] = None

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> Source:
        path = Path(path)
        logger.debug("Reading %s", path)
        return cls(raw=path.read_bytes(), origin=str(path), path=path)

    @classmethod
    def from_bytes(cls, raw: bytes, origin: str = "<memory>") -> Source:
        return cls(raw=raw, origin=origin)

    @property
    def readable_origin(self) -> str:
        return self.origin

    @property
    def is_markup(self) -> bool:
        """True for XML input, False for a plain-text manifest."""
        return self.raw.removeprefix(UTF8_BOM).lstrip().startswith(b"<")


def manifest_entries(source: Source) -> list[str]:
    """Document paths listed in a manifest, skipping blank lines and comments."""
    entries = []
    try:
        text = source.raw.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise CvrfError(f"Manifest {source.readable_origin} is not UTF-8 text: {e}") from e
    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith(MANIFEST_COMMENT):
            continue
        entries.append(line)
    return entries


def resolve_entry(source: Source, entry: str) -> Path:
    """Resolve a manifest entry relative to the manifest's directory."""
    path = Path(entry)
    if path.is_absolute() or source.path is None:
        return path
    return source.path.parent / path
