import base64
import json
import logging
from pathlib import Path
from typing import Any
from urllib.parse import unquote

import sourcemap
from sourcemap.objects import SourceMapIndex

logger = logging.getLogger(__name__)

_DATA_URL_PREFIX = "data:"


class SourceMapHandle:
    """Read-only view over a parsed input source map.

    Owned by exactly one file context; never shared between files.
    """

    def __init__(self, index: SourceMapIndex) -> None:
        self._index = index

    @classmethod
    def from_input(cls, raw: dict[str, Any] | str | bytes) -> "SourceMapHandle":
        if isinstance(raw, dict):
            raw = json.dumps(raw)
        elif isinstance(raw, bytes):
            raw = raw.decode("utf-8")
        return cls(sourcemap.loads(raw))

    def resolve_original_position(self, generated_line: int, generated_column: int) -> tuple[int, str] | None:
        """Map a 1-based line and 0-based column to ``(original_line, source)``.

        Returns ``None`` when the map holds no segment for that position.
        """
        try:
            token = self._index.lookup(generated_line - 1, generated_column)
        except IndexError:
            return None
        if token.src is None or token.src_line is None:
            return None
        return token.src_line + 1, token.src


def discover_source_map(source: str, file_path: Path | None = None) -> str | None:
    """Return the raw JSON of the map referenced by a ``sourceMappingURL`` comment, if any."""
    url = sourcemap.discover(source)
    if not url:
        return None

    if url.startswith(_DATA_URL_PREFIX):
        header, _, payload = url[len(_DATA_URL_PREFIX) :].partition(",")
        if header.endswith(";base64"):
            return base64.b64decode(payload).decode("utf-8")
        return unquote(payload)

    if file_path is None:
        logger.debug("Ignoring external source map %s: no file path to resolve it against", url)
        return None
    map_path = file_path.parent / unquote(url)
    if not map_path.is_file():
        logger.debug("Referenced source map %s does not exist", map_path)
        return None
    return map_path.read_text(encoding="utf-8")
