from __future__ import annotations
import enum
import weakref
from dataclasses import dataclass, field
from typing import Literal, Optional, Union

from ..position import SourcePosition


# --- Missing value marker. ---

class Missing(enum.Enum):
    """Marker for a value that is syntactically absent or was recovered from an error.

    ``MISSING`` is distinct from ``None`` and from the empty string, so an attribute
    written as ``a=""`` keeps the value ``""`` while an attribute whose value token
    was never parsed holds ``MISSING``.
    """
    MISSING = "MISSING"

    def __repr__(self) -> str:
        return "MISSING"


MISSING = Missing.MISSING
MissingType = Literal[Missing.MISSING]


# --- Syntax records. ---

@dataclass(frozen=True)
class XMLToken:
    """The text and span of a single source token.

    Attributes:
        text: The literal token text.
        start_offset: Offset of the first character (0-indexed).
        end_offset: Offset just past the last character.
        start_line: Line of the first character (1-indexed).
        end_line: Line of ``end_offset``.
        start_column: Column of the first character (1-indexed).
        end_column: Column of ``end_offset``.
    """
    text: str
    start_offset: int
    end_offset: int
    start_line: int
    end_line: int
    start_column: int
    end_column: int


@dataclass
class XMLElementSyntax:
    """Token spans of an element's tags.

    Attributes:
        open_name: The name token of the opening tag.
        open_body: The span from the element start through the ``>`` or ``/>``
            that ends the opening tag.
        close_name: The name token of the closing tag.
    """
    open_name: Union[XMLToken, MissingType] = MISSING
    open_body: Union[SourcePosition, MissingType] = MISSING
    close_name: Union[XMLToken, MissingType] = MISSING


@dataclass
class XMLAttributeSyntax:
    """Token spans of an attribute's key and quoted value."""
    key: Union[XMLToken, MissingType] = MISSING
    value: Union[XMLToken, MissingType] = MISSING


@dataclass
class XMLNamespace:
    """A namespace binding visible on an element.

    Attributes:
        prefix: The bound prefix, or None for the default namespace (``xmlns="..."``).
        uri: The namespace URI.
    """
    prefix: Optional[str]
    uri: str

    def __str__(self):
        if self.prefix is None:
            return f'xmlns="{self.uri}"'
        return f'xmlns:{self.prefix}="{self.uri}"'


# --- AST nodes classes. ---

@dataclass
class XMLAstNode(object):
    """Base class for all XML AST nodes.

    Children are owned through the node's fields. The way back up is the
    ``parent`` property, which holds only a weak reference, so a tree never forms
    a strong reference cycle. The document node has no parent.

    Attributes:
        position: The source span of this node.
    """
    position: SourcePosition

    _parent_ref = None

    @property
    def parent(self) -> Optional["XMLAstNode"]:
        """The structural parent of this node, or None for a root."""
        ref = self._parent_ref
        return ref() if ref is not None else None

    @parent.setter
    def parent(self, node: Optional["XMLAstNode"]) -> None:
        self._parent_ref = weakref.ref(node) if node is not None else None

    def ast_children(self) -> list["XMLAstNode"]:
        """Return the AST nodes owned by this node, in a fixed order."""
        raise NotImplementedError

    def __str__(self) -> str:
        raise NotImplementedError


@dataclass
class XMLAttribute(XMLAstNode):
    """Represents an attribute of an element or of the XML declaration.

    Example:
        <item id="42"/>      // key 'id', value '42'

    Attributes:
        key: The attribute name, or MISSING.
        value: The attribute value without its quotes, or MISSING. Entity and
            character references are not decoded.
        syntax: Spans of the key and value tokens.
    """
    key: Union[str, MissingType] = MISSING
    value: Union[str, MissingType] = MISSING
    syntax: XMLAttributeSyntax = field(default_factory=XMLAttributeSyntax)

    def ast_children(self) -> list[XMLAstNode]:
        return []

    def __str__(self):
        key = "" if self.key is MISSING else self.key
        value = "" if self.value is MISSING else self.value
        return f'{key}="{value}"'


@dataclass
class XMLTextContent(XMLAstNode):
    """Represents a run of character data inside an element.

    Attributes:
        text: The literal text, whitespace included.
    """
    text: str = ""

    def ast_children(self) -> list[XMLAstNode]:
        return []

    def __str__(self):
        return self.text


@dataclass
class XMLElement(XMLAstNode):
    """Represents an XML element.

    Text children and element children are kept in two separate lists, each in
    document order.

    Example:
        <a:item id="1">text<b/></a:item>
        // ns 'a', name 'item', one attribute, one sub element, one text content

    Attributes:
        name: The local name, or MISSING if the opening name was not parsed.
        ns: The namespace prefix written in the opening tag, or None.
        attributes: Attributes in source order.
        sub_elements: Child elements in source order.
        text_contents: Text runs in source order.
        namespaces: Namespace bindings visible on this element, own declarations
            first, then inherited ones. Filled in by namespace resolution.
        syntax: Spans of the tag tokens.
    """
    name: Union[str, MissingType] = MISSING
    ns: Optional[str] = None
    attributes: list[XMLAttribute] = field(default_factory=list)
    sub_elements: list["XMLElement"] = field(default_factory=list)
    text_contents: list[XMLTextContent] = field(default_factory=list)
    namespaces: list[XMLNamespace] = field(default_factory=list)
    syntax: XMLElementSyntax = field(default_factory=XMLElementSyntax)

    def ast_children(self) -> list[XMLAstNode]:
        return [*self.attributes, *self.sub_elements, *self.text_contents]

    @property
    def qualified_name(self) -> Union[str, MissingType]:
        """The name as written in the opening tag, prefix included."""
        if self.name is MISSING:
            return MISSING
        return f"{self.ns}:{self.name}" if self.ns is not None else self.name

    def __str__(self):
        qname = self.qualified_name
        return f"<{'' if qname is MISSING else qname}>"


@dataclass
class XMLProlog(XMLAstNode):
    """Represents the XML declaration.

    Example:
        <?xml version="1.0" encoding="UTF-8"?>

    Attributes:
        attributes: The pseudo-attributes of the declaration in source order.
    """
    attributes: list[XMLAttribute] = field(default_factory=list)

    def ast_children(self) -> list[XMLAstNode]:
        return list(self.attributes)

    def __str__(self):
        return f"<?xml {' '.join(str(attr) for attr in self.attributes)}?>"


@dataclass
class XMLDocument(XMLAstNode):
    """Represents a whole XML document.

    Attributes:
        prolog: The XML declaration, or None if the document has none.
        root_element: The root element, or MISSING if none was parsed.
    """
    prolog: Optional[XMLProlog] = None
    root_element: Union[XMLElement, MissingType] = MISSING

    def ast_children(self) -> list[XMLAstNode]:
        children: list[XMLAstNode] = []
        if self.root_element is not MISSING:
            children.append(self.root_element)
        if self.prolog is not None:
            children.append(self.prolog)
        return children

    def __str__(self):
        root = "" if self.root_element is MISSING else str(self.root_element)
        return f"{'' if self.prolog is None else str(self.prolog)}{root}"


# The closed set of node kinds an AST can contain.
AST_NODE_TYPES = (XMLDocument, XMLProlog, XMLElement, XMLAttribute, XMLTextContent)


def get_ast_children(node: XMLAstNode | None) -> list[XMLAstNode]:
    """Return the AST-node children of ``node`` in a stable order.

    Only AST nodes are returned: the parent back-reference, positions, syntax
    records, namespace bindings and MISSING values never are. ``None`` has no
    children.
    """
    if node is None:
        return []
    return node.ast_children()
