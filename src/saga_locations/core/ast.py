from collections.abc import Iterator
from typing import cast

from tree_sitter import Node, Tree
from tree_sitter_language_pack import SupportedLanguage, get_parser

from saga_locations.core.errors import SourceSyntaxError
from saga_locations.models import Position


def parse_source(source_bytes: bytes, language: str, filename: str = "unknown") -> Tree:
    """Parse ``source_bytes`` and refuse trees that needed error recovery."""
    parser = get_parser(cast(SupportedLanguage, language))
    tree = parser.parse(source_bytes)

    if tree.root_node.has_error:
        broken = next(_error_nodes(tree.root_node), tree.root_node)
        row, _ = broken.start_point
        raise SourceSyntaxError(
            filename,
            row + 1,
            node_position(broken, source_bytes).column,
            source_bytes[broken.start_byte : broken.end_byte][:40].decode("utf-8", errors="replace"),
        )
    return tree


def _error_nodes(node: Node) -> Iterator[Node]:
    if node.type == "ERROR" or node.is_missing:
        yield node
        return
    for child in node.children:
        if child.has_error or child.is_missing:
            yield from _error_nodes(child)


def node_position(node: Node, source_bytes: bytes) -> Position:
    """Start of ``node`` as a 0-based row and a UTF-16 column, the unit source maps count in."""
    row, byte_column = node.start_point
    line_prefix = source_bytes[node.start_byte - byte_column : node.start_byte]
    column = len(line_prefix.decode("utf-8").encode("utf-16-le")) // 2
    return Position(row=row, column=column)


def node_source(node: Node, source_bytes: bytes) -> str:
    return source_bytes[node.start_byte : node.end_byte].decode("utf-8")


def has_position(node: Node) -> bool:
    # error recovery inserts zero-width nodes that do not exist in the authored text
    return not node.is_missing and node.end_byte > node.start_byte
