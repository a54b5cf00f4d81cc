"""Pre-order traversal of XML AST trees.

Example:
    class ElementNames(XMLAstVisitor):
        def __init__(self):
            self.names = []

        def visit_XMLElement(self, node):
            self.names.append(node.name)

    collector = ElementNames()
    accept(collector, getASTfromString("<a><b/></a>"))
    # collector.names == ["a", "b"]
"""

from __future__ import annotations

from .nodes import AST_NODE_TYPES, XMLAstNode, get_ast_children


class XMLAstVisitor:
    """Base class for AST visitors.

    Every handler is a no-op, so subclasses override only the node kinds they
    care about. Objects that do not inherit from this class work with
    ``accept()`` as well, as long as their handlers use the same names.
    """

    def visit_XMLDocument(self, node):
        pass

    def visit_XMLProlog(self, node):
        pass

    def visit_XMLElement(self, node):
        pass

    def visit_XMLAttribute(self, node):
        pass

    def visit_XMLTextContent(self, node):
        pass


def _handler_name(node) -> str:
    for node_type in AST_NODE_TYPES:
        if isinstance(node, node_type):
            return f"visit_{node_type.__name__}"
    raise TypeError(f"Non exhaustive match: {type(node).__name__} is not an XML AST node")


def accept(visitor, node: XMLAstNode) -> None:
    """Walk the tree below ``node`` depth-first in pre-order.

    For every node the visitor's handler for that node kind is called if the
    visitor has one. Children are always visited afterwards; a handler cannot
    stop the descent.

    Raises:
        TypeError: If the tree contains an object that is not one of the XML
            AST node kinds.
    """
    pending = [node]
    while pending:
        current = pending.pop()
        handler = getattr(visitor, _handler_name(current), None)
        if callable(handler):
            handler(current)
        pending.extend(reversed(get_ast_children(current)))
