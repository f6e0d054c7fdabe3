import logging
from collections.abc import Callable

from tree_sitter import Node, Tree

from saga_locations.core.ast import has_position, node_position, node_source
from saga_locations.core.errors import MissingIdentifierError
from saga_locations.core.fragments import (
    Fragment,
    Raw,
    build_declaration_annotation,
    build_expression_wrapper,
    build_key_expression,
)
from saga_locations.core.location import resolve_location
from saga_locations.core.source_map import SourceMapHandle
from saga_locations.models import Annotation, FileOptions, LocationData, PluginOptions

logger = logging.getLogger(__name__)

# Only the parent and the grandparent of a call are inspected for a yield.
YIELD_ANCESTOR_DEPTH = 2

# tree-sitter wrappers that have no node of their own in an ECMAScript tree
_TRANSPARENT_NODE_TYPES = frozenset({"parenthesized_expression", "arguments", "template_substitution"})


class FileContext:
    """State for one compilation unit: options, the location key and the input source map."""

    def __init__(self, file_options: FileOptions, plugin_options: PluginOptions) -> None:
        self.filename = file_options.filename
        self.base_path = plugin_options.base_path
        self.key_expression = build_key_expression(plugin_options.use_symbol)
        self.source_map: SourceMapHandle | None = None
        self._input_source_map = file_options.input_source_map

    def enter_program(self) -> None:
        self.source_map = (
            SourceMapHandle.from_input(self._input_source_map) if self._input_source_map is not None else None
        )

    def locate(self, node: Node, source_bytes: bytes) -> LocationData:
        return resolve_location(node_position(node, source_bytes), self.filename, self.base_path, self.source_map)


def structural_parent(node: Node) -> Node | None:
    parent = node.parent
    while parent is not None and parent.type in _TRANSPARENT_NODE_TYPES:
        parent = parent.parent
    # `a, b, c` nests in tree-sitter but is one flat sequence expression
    while (
        parent is not None
        and parent.type == "sequence_expression"
        and parent.parent is not None
        and parent.parent.type == "sequence_expression"
    ):
        parent = parent.parent
    return parent


_CHAIN_LINKS = {"call_expression": "function", "member_expression": "object", "subscript_expression": "object"}


def in_optional_chain(node: Node) -> bool:
    """Whether ``node`` is part of an ``a?.b`` chain: an optional call or member access."""
    link: Node | None = node
    while link is not None and link.type in _CHAIN_LINKS:
        if any(child.type == "optional_chain" for child in link.children):
            return True
        link = link.child_by_field_name(_CHAIN_LINKS[link.type])
    return False


def is_call_expression(node: Node) -> bool:
    if node.type != "call_expression":
        return False
    arguments = node.child_by_field_name("arguments")
    # tag`...` is a tagged template, not a call
    if arguments is not None and arguments.type == "template_string":
        return False
    # optional calls may short-circuit to undefined
    return not in_optional_chain(node)


def is_yield_operand(node: Node) -> bool:
    """Whether a call's parent or grandparent is a yield expression.

    A call whose parent is another call is never a match: the enclosing call
    is wrapped first, so the yield is no longer its grandparent.
    """
    ancestor = node
    for depth in range(YIELD_ANCESTOR_DEPTH):
        ancestor = structural_parent(ancestor)
        if ancestor is None:
            return False
        if ancestor.type == "yield_expression":
            return True
        if depth == 0 and is_call_expression(ancestor):
            return False
    return False


def _declaration_name(declaration: Node) -> Node | None:
    return declaration.child_by_field_name("name")


class SagaLocationRewriter:
    """Re-emits a parsed file, annotating generator declarations and yielded calls."""

    def __init__(self, context: FileContext, source_bytes: bytes) -> None:
        self.context = context
        self.source_bytes = source_bytes
        self.annotations: list[Annotation] = []
        self._handlers: dict[str, Callable[[Node, str], str]] = {
            "generator_function_declaration": self.visit_generator_function_declaration,
            "export_statement": self.visit_export_statement,
            "call_expression": self.visit_call_expression,
        }

    def rewrite(self, tree: Tree) -> str:
        self.context.enter_program()
        root = tree.root_node
        # the root node can exclude leading and trailing whitespace
        leading = self.source_bytes[: root.start_byte].decode("utf-8")
        trailing = self.source_bytes[root.end_byte :].decode("utf-8")
        return leading + self._emit(root) + trailing

    def _emit(self, node: Node) -> str:
        if node.child_count == 0:
            text = node_source(node, self.source_bytes)
        else:
            parts: list[str] = []
            cursor = node.start_byte
            for child in node.children:
                parts.append(self.source_bytes[cursor : child.start_byte].decode("utf-8"))
                parts.append(self._emit(child))
                cursor = child.end_byte
            parts.append(self.source_bytes[cursor : node.end_byte].decode("utf-8"))
            text = "".join(parts)

        handler = self._handlers.get(node.type)
        return handler(node, text) if handler else text

    def visit_generator_function_declaration(self, node: Node, text: str) -> str:
        parent = node.parent
        if parent is not None and parent.type == "export_statement":
            return text
        return f"{text} {self._annotate_declaration(node).render()}"

    def visit_export_statement(self, node: Node, text: str) -> str:
        declaration = node.child_by_field_name("declaration")
        if declaration is None:
            declaration = node.child_by_field_name("value")
        if declaration is None or declaration.type not in ("generator_function_declaration", "generator_function"):
            return text
        return f"{text} {self._annotate_declaration(declaration).render()}"

    def visit_call_expression(self, node: Node, text: str) -> str:
        if not is_call_expression(node) or not is_yield_operand(node):
            return text
        if not has_position(node):
            return text

        location = self.context.locate(node, self.source_bytes)
        code = node_source(node, self.source_bytes)
        wrapper = build_expression_wrapper(Raw(text=text), self.context.key_expression, location, code)
        self.annotations.append(Annotation(kind="effect", name=code, location=location))
        logger.debug("Annotated effect %s at %s:%d", code, location.file_name, location.line_number)
        return wrapper.render()

    def _annotate_declaration(self, declaration: Node) -> Fragment:
        name_node = _declaration_name(declaration)
        if name_node is None:
            row, _ = declaration.start_point
            raise MissingIdentifierError(self.context.filename, row + 1)

        name = node_source(name_node, self.source_bytes)
        location = self.context.locate(declaration, self.source_bytes)
        self.annotations.append(Annotation(kind="declaration", name=name, location=location))
        logger.debug("Annotated generator %s at %s:%d", name, location.file_name, location.line_number)
        return build_declaration_annotation(name, self.context.key_expression, location)
