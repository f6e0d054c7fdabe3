import logging
from pathlib import Path
from typing import Any

from saga_locations.core.ast import parse_source
from saga_locations.core.languages import normalize_language, resolve_language
from saga_locations.core.rewriter import FileContext, SagaLocationRewriter
from saga_locations.core.source_map import discover_source_map
from saga_locations.models import FileOptions, PluginOptions, TransformResult

logger = logging.getLogger(__name__)


def transform_source(
    source: str,
    file_options: FileOptions,
    plugin_options: PluginOptions | None = None,
    language: str = "javascript",
) -> TransformResult:
    """Annotate one file's source text and return the rewritten code."""
    resolved_language = normalize_language(language)
    source_bytes = source.encode("utf-8")
    tree = parse_source(source_bytes, resolved_language, file_options.filename)

    context = FileContext(file_options, plugin_options or PluginOptions())
    rewriter = SagaLocationRewriter(context, source_bytes)
    code = rewriter.rewrite(tree)

    logger.info("Annotated %d location(s) in %s", len(rewriter.annotations), file_options.filename)
    return TransformResult(code=code, language=resolved_language, annotations=rewriter.annotations)


def annotate_file(
    path: str | Path,
    plugin_options: PluginOptions | None = None,
    language: str | None = None,
    input_source_map: dict[str, Any] | str | None = None,
) -> TransformResult:
    """Read ``path`` and annotate it.

    Without an explicit ``input_source_map`` the map referenced by the file's
    ``sourceMappingURL`` comment is used, when there is one.
    """
    file_path = Path(path)
    resolved_language = resolve_language(language, file_path)

    try:
        source = file_path.read_bytes().decode("utf-8")
    except FileNotFoundError:
        raise FileNotFoundError(f"File not found: {path}") from None

    if input_source_map is None:
        input_source_map = discover_source_map(source, file_path)

    return transform_source(
        source,
        FileOptions(filename=str(file_path), input_source_map=input_source_map),
        plugin_options,
        resolved_language,
    )
