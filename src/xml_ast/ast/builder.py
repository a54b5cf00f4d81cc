"""Builds XML ASTs from XML concrete syntax trees.

The build runs in two phases. ``ASTBuilderVisitor`` converts the CST bottom-up;
each node links its children back to itself as soon as its fields are final.
``update_namespaces`` then walks the finished element tree top-down and fills in
the namespace bindings visible on every element.
"""

from __future__ import annotations

import logging
import re
from typing import Iterable, Optional, Sequence

from ..cst import BaseXMLCstVisitor, CstNode, Token
from ..position import SourcePosition
from .nodes import (
    MISSING,
    XMLAstNode,
    XMLAttribute,
    XMLDocument,
    XMLElement,
    XMLNamespace,
    XMLProlog,
    XMLTextContent,
    XMLToken,
    get_ast_children,
)

logger = logging.getLogger(__name__)

_NS_PARTS_RE = re.compile(r'([^:]+):([^:]+)')
_XMLNS_KEY_RE = re.compile(r'xmlns(?::([^:]+))?')


# --- Token helpers ---

def present_token(tokens: Optional[Sequence[Token]]) -> Optional[Token]:
    """Return the first token of ``tokens`` unless it is absent or fabricated.

    Tokens inserted by the parser during error recovery never carry real source
    data, so they are treated exactly like absent ones.
    """
    if not tokens:
        return None
    token = tokens[0]
    if token.is_inserted_in_recovery:
        return None
    return token


def exists(tokens: Optional[Sequence[Token]]) -> bool:
    """True if ``tokens`` holds exactly one real (non-recovery) token."""
    return tokens is not None and len(tokens) == 1 and not tokens[0].is_inserted_in_recovery


def to_xml_token(token: Token) -> XMLToken:
    """Copy the text and span of a lexer token."""
    return XMLToken(
        text=token.image,
        start_offset=token.start_offset,
        end_offset=token.end_offset,
        start_line=token.start_line,
        end_line=token.end_line,
        start_column=token.start_column,
        end_column=token.end_column,
    )


def end_of_xml_token(location: SourcePosition, token: Token) -> SourcePosition:
    """Span from the start of ``location`` through the end of ``token``."""
    return SourcePosition(
        start_offset=location.start_offset,
        end_offset=token.end_offset,
        start_line=location.start_line,
        end_line=token.end_line,
        start_column=location.start_column,
        end_column=token.end_column,
    )


def strip_quotes(quoted_text: str) -> str:
    """Drop the first and last character. Escapes are left untouched."""
    return quoted_text[1:-1]


def ns_to_parts(text: str) -> Optional[tuple[str, str]]:
    """Split ``prefix:name`` into its two parts.

    Returns None unless the text holds exactly one colon with non-empty text on
    both sides.
    """
    match = _NS_PARTS_RE.fullmatch(text)
    if match is None:
        return None
    return match.group(1), match.group(2)


# --- Parent links ---

def set_children_parent(ast_parent: XMLAstNode) -> None:
    """Point the parent reference of every child of ``ast_parent`` at it."""
    for child in get_ast_children(ast_parent):
        child.parent = ast_parent


# --- Namespaces ---

def _declared_namespaces(element: XMLElement) -> list[XMLNamespace]:
    declared = []
    for attrib in element.attributes:
        if attrib.key is MISSING:
            continue
        ns_match = _XMLNS_KEY_RE.fullmatch(attrib.key)
        if ns_match is None:
            continue
        # An empty or unparsed value declares nothing.
        if attrib.value is MISSING or attrib.value == "":
            continue
        declared.append(XMLNamespace(prefix=ns_match.group(1), uri=attrib.value))
    return declared


def update_namespaces(element: XMLElement, prev_namespaces: Iterable[XMLNamespace] = ()) -> None:
    """Compute the visible namespace bindings of ``element`` and its descendants.

    Each element gets its own ``xmlns``/``xmlns:<prefix>`` declarations in
    attribute order, followed by the bindings inherited from its parent.
    Duplicate prefixes are kept; the first match wins when resolving a prefix.
    Only attributes and sub elements are read, so running this again on a
    resolved tree gives the same result.

    Args:
        element: The element to start from, normally the document root.
        prev_namespaces: Bindings inherited from above ``element``.
    """
    pending = [(element, list(prev_namespaces))]
    while pending:
        current, inherited = pending.pop()
        current.namespaces = _declared_namespaces(current) + inherited
        for sub_element in reversed(current.sub_elements):
            pending.append((sub_element, current.namespaces))


# --- CST to AST ---

class ASTBuilderVisitor(BaseXMLCstVisitor):
    """
    Visits the CST produced for an XML document and builds the AST defined in nodes.py.
    """

    def visit_document(self, ctx, location) -> XMLDocument:
        ast_node = XMLDocument(position=location, root_element=MISSING)

        if ctx.get("prolog"):
            ast_node.prolog = self.visit(ctx["prolog"][0])

        # An element production without any children is what a recovering
        # parser leaves behind when no root element was found.
        elements = ctx.get("element")
        if elements and any(elements[0].children.values()):
            ast_node.root_element = self.visit(elements[0])

        set_children_parent(ast_node)
        return ast_node

    def visit_prolog(self, ctx, location) -> XMLProlog:
        ast_node = XMLProlog(
            position=location,
            attributes=[self.visit(attrib) for attrib in ctx.get("attribute", [])],
        )
        set_children_parent(ast_node)
        return ast_node

    def visit_content(self, ctx, location) -> tuple[list[XMLElement], list[XMLTextContent]]:
        # Not an AST node: returns the element and text children as two lists.
        elements = [self.visit(elem) for elem in ctx.get("element", [])]
        text_contents = [self.visit(chardata) for chardata in ctx.get("chardata", [])]
        return elements, text_contents

    def visit_element(self, ctx, location) -> XMLElement:
        ast_node = XMLElement(position=location, name=MISSING)

        ast_node.attributes = [self.visit(attrib) for attrib in ctx.get("attribute", [])]

        if ctx.get("content"):
            ast_node.sub_elements, ast_node.text_contents = self.visit(ctx["content"][0])

        open_name_token = present_token(ctx.get("Name"))
        if open_name_token is not None:
            ast_node.syntax.open_name = to_xml_token(open_name_token)
            ns_parts = ns_to_parts(open_name_token.image)
            if ns_parts is not None:
                ast_node.ns, ast_node.name = ns_parts
            else:
                ast_node.name = open_name_token.image

            if exists(ctx.get("START_CLOSE")):
                ast_node.syntax.open_body = end_of_xml_token(location, ctx["START_CLOSE"][0])
            elif exists(ctx.get("SLASH_CLOSE")):
                ast_node.syntax.open_body = end_of_xml_token(location, ctx["SLASH_CLOSE"][0])

        close_name_token = present_token(ctx.get("END_NAME"))
        if close_name_token is not None:
            ast_node.syntax.close_name = to_xml_token(close_name_token)

        set_children_parent(ast_node)
        return ast_node

    def visit_reference(self, ctx, location) -> None:
        # Entity and character references are not part of the AST.
        return None

    def visit_attribute(self, ctx, location) -> XMLAttribute:
        ast_node = XMLAttribute(position=location, key=MISSING, value=MISSING)

        key_token = present_token(ctx.get("Name"))
        if key_token is not None:
            ast_node.key = key_token.image
            ast_node.syntax.key = to_xml_token(key_token)

        value_token = present_token(ctx.get("STRING"))
        if value_token is not None:
            ast_node.value = strip_quotes(value_token.image)
            ast_node.syntax.value = to_xml_token(value_token)

        set_children_parent(ast_node)
        return ast_node

    def visit_chardata(self, ctx, location) -> XMLTextContent:
        # Whitespace and text arrive as two separately ordered token lists.
        all_tokens = [
            token for token in [*ctx.get("SEA_WS", []), *ctx.get("TEXT", [])]
            if not token.is_inserted_in_recovery
        ]
        sorted_tokens = sorted(all_tokens, key=lambda token: token.start_offset)
        return XMLTextContent(
            position=location,
            text="".join(token.image for token in sorted_tokens),
        )

    def visit_misc(self, ctx, location) -> None:
        # Comments, processing instructions and whitespace outside the root.
        return None


_AST_BUILDER = ASTBuilderVisitor()


def build_ast(document_cst: CstNode) -> XMLDocument:
    """Build the AST of a document from its CST.

    Args:
        document_cst: A CST node of kind ``document``.

    Returns:
        The XMLDocument with parent references and namespace bindings set.

    Raises:
        ValueError: If ``document_cst`` is not a ``document`` node.
    """
    if document_cst.name != "document":
        raise ValueError(f"Expected a 'document' CST node, got {document_cst.name!r}")

    xml_doc_ast = _AST_BUILDER.visit(document_cst)

    if xml_doc_ast.root_element is not MISSING:
        update_namespaces(xml_doc_ast.root_element)
    logger.debug("Built XML AST (root element: %s)", xml_doc_ast.root_element is not MISSING)
    return xml_doc_ast
