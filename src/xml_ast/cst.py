"""Concrete syntax tree (CST) for XML documents.

The CST is the input contract of the AST builder. Every CST node is a
``CstNode`` holding an ordered list of children per token type or rule name,
exactly as a lexer/parser produced them, including whitespace tokens and tokens
that the producing parser fabricated while recovering from a syntax error
(``Token.is_inserted_in_recovery``).

``CSTBuilder`` produces this structure from an Arpeggio parse tree created by
the grammar in ``xml_ast.grammar``. Other producers, e.g. an error-recovering
parser, only need to emit the same shapes.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Union

from arpeggio import Terminal

from .position import LineIndex, SourcePosition

logger = logging.getLogger(__name__)


# The closed set of CST node kinds a CST visitor must handle.
CST_KINDS = (
    "document",
    "prolog",
    "content",
    "element",
    "attribute",
    "chardata",
    "reference",
    "misc",
)


@dataclass
class Token:
    """A lexer token.

    Attributes:
        image: The literal matched text.
        start_offset: Offset of the first character (0-indexed).
        end_offset: Offset just past the last character.
        start_line: Line of the first character (1-indexed).
        end_line: Line of ``end_offset``.
        start_column: Column of the first character (1-indexed).
        end_column: Column of ``end_offset``.
        token_type: The token type name, e.g. ``"Name"`` or ``"STRING"``.
        is_inserted_in_recovery: True if the parser fabricated this token while
            recovering from a syntax error.
    """
    image: str
    start_offset: int
    end_offset: int
    start_line: int
    end_line: int
    start_column: int
    end_column: int
    token_type: str = ""
    is_inserted_in_recovery: bool = False


@dataclass
class CstNode:
    """A CST node of one of the kinds in ``CST_KINDS``.

    Attributes:
        name: The node kind.
        location: The span of source text covered by this node.
        children: Child tokens and CST nodes keyed by token type or rule name,
            each list in source order.
    """
    name: str
    location: SourcePosition
    children: dict[str, list[Union["CstNode", Token]]] = field(default_factory=dict)

    def add(self, key: str, child: Union["CstNode", Token]) -> None:
        self.children.setdefault(key, []).append(child)

    def get(self, key: str) -> list[Union["CstNode", Token]]:
        return self.children.get(key, [])


class BaseXMLCstVisitor:
    """Base class for visitors over XML CST nodes.

    Subclasses implement ``visit_<kind>(self, ctx, location)`` for every kind in
    ``CST_KINDS``; ``ctx`` is the node's ``children`` mapping. The check runs at
    construction so an incomplete visitor fails before it ever walks a tree.
    """

    def __init__(self):
        self.validate_visitor()

    def validate_visitor(self) -> None:
        missing = [
            kind for kind in CST_KINDS
            if not callable(getattr(self, f"visit_{kind}", None))
        ]
        if missing:
            raise TypeError(
                f"{type(self).__name__} is missing CST visit methods for: {', '.join(missing)}"
            )

    def visit(self, cst_node: CstNode | list[CstNode]) -> Any:
        """Dispatch ``cst_node`` to its ``visit_<kind>`` method.

        A list visits its first entry, matching how CST children are stored.
        """
        if isinstance(cst_node, list):
            if not cst_node:
                return None
            cst_node = cst_node[0]
        if cst_node.name not in CST_KINDS:
            raise ValueError(f"Unknown CST node kind: {cst_node.name!r}")
        method = getattr(self, f"visit_{cst_node.name}")
        return method(cst_node.children, cst_node.location)


class CSTBuilder:
    """Builds ``CstNode`` trees from Arpeggio parse trees.

    Rule nodes whose rule name is a CST kind become ``CstNode`` objects; all
    terminals become ``Token`` objects keyed by their rule name. Nodes of any
    other rule are flattened into the enclosing CST node.
    """

    def __init__(self, text: str):
        """Initialize the builder.

        Args:
            text: The input string the parse tree was produced from, needed to
                convert offsets into lines and columns.
        """
        self.text = text
        self._index = LineIndex(text)

    def visit_parse_tree(self, parse_tree) -> CstNode:
        """Convert the root ``document`` node of an Arpeggio parse tree."""
        if getattr(parse_tree, 'rule_name', None) != "document":
            raise ValueError("Parse tree root must be a 'document' node")
        cst = self._visit_node(parse_tree)
        logger.debug("Built CST for %d characters of input", len(self.text))
        return cst

    def _visit_node(self, node) -> CstNode:
        cst_node = CstNode(name=node.rule_name, location=self._get_node_span(node))
        self._collect_children(cst_node, node)
        return cst_node

    def _collect_children(self, cst_node: CstNode, node) -> None:
        for child in node:
            rule_name = child.rule_name
            if isinstance(child, Terminal):
                if rule_name == "EOF":
                    continue
                cst_node.add(rule_name, self._to_token(child))
            elif rule_name in CST_KINDS:
                cst_node.add(rule_name, self._visit_node(child))
            else:
                self._collect_children(cst_node, child)

    def _to_token(self, terminal) -> Token:
        span = self._index.span(terminal.position, terminal.position + len(terminal.value))
        return Token(
            image=terminal.value,
            start_offset=span.start_offset,
            end_offset=span.end_offset,
            start_line=span.start_line,
            end_line=span.end_line,
            start_column=span.start_column,
            end_column=span.end_column,
            token_type=terminal.rule_name,
        )

    def _get_node_span(self, node) -> SourcePosition:
        return self._index.span(node.position, self._get_node_end(node))

    def _get_node_end(self, node) -> int:
        if isinstance(node, Terminal):
            return node.position + len(node.value)
        if len(node) == 0:
            return node.position
        return self._get_node_end(node[-1])
