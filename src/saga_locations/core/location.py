import os

from saga_locations.core.source_map import SourceMapHandle
from saga_locations.models import LocationData, Position


def resolve_location(
    position: Position,
    compiled_file_name: str,
    base_path: str | None = None,
    source_map: SourceMapHandle | None = None,
) -> LocationData:
    """Compute the file name and 1-based line to embed for a node starting at ``position``.

    With a source map the reported line is the original authored line and the
    mapped source is appended to the file name, e.g. ``"a.js (orig.js)"``.
    """
    file_name = os.path.relpath(compiled_file_name, base_path) if base_path else compiled_file_name
    line_number = position.row + 1

    if source_map is None:
        return LocationData(file_name=file_name, line_number=line_number)

    mapped = source_map.resolve_original_position(line_number, position.column)
    if mapped is None:
        return LocationData(file_name=file_name, line_number=line_number)

    original_line, original_source = mapped
    return LocationData(
        file_name=f"{file_name} ({original_source})",
        line_number=original_line,
        original_source=original_source,
    )
