import logging
import os
from arpeggio import NoMatch
from xml_ast import getXMLParser
from ..cst import CSTBuilder, CstNode, Token, BaseXMLCstVisitor

# Import all AST nodes from nodes
from .nodes import (
    MISSING,
    Missing,
    XMLAstNode,
    XMLDocument,
    XMLProlog,
    XMLElement,
    XMLAttribute,
    XMLTextContent,
    XMLNamespace,
    XMLToken,
    XMLElementSyntax,
    XMLAttributeSyntax,
    get_ast_children,
)

# Import the CST to AST builder
from .builder import ASTBuilderVisitor, build_ast, update_namespaces, set_children_parent

# Import traversal and namespace helpers
from .visitor import XMLAstVisitor, accept
from .namespaces import (
    resolve_prefix,
    element_namespace_uri,
    attribute_namespace_uri,
    in_scope_namespaces,
)

# Import serialization functions
from .serialization import (
    ast_to_dict,
    ast_to_json,
    ast_from_dict,
    ast_from_json,
    ast_to_yaml,
    ast_from_yaml,
)

logger = logging.getLogger(__name__)


# --- AST convenience functions ---

def _format_syntax_error(code: str, char_pos: int, origin: str) -> str:
    """Build a syntax error message with the offending line and a caret under the error."""
    if char_pos < 0:
        char_pos = 0  # pragma: no cover
    if char_pos > len(code):
        char_pos = len(code)  # pragma: no cover
    text_before = code[:char_pos]
    error_line = text_before.count('\n') + 1
    last_newline = text_before.rfind('\n')
    error_column = char_pos - last_newline  # 1-indexed

    message = f"Syntax error in {origin} at line {error_line}, column {error_column}:"
    lines = code.split('\n')
    if 1 <= error_line <= len(lines):
        error_line_code = lines[error_line - 1]
        # Expand tabs for display - calculate caret position in expanded line
        caret_pos = len(error_line_code[:error_column - 1].expandtabs())
        message += f"\n{error_line_code.expandtabs()}\n{' ' * caret_pos}^"
    return message


def parse_cst(parser, code):
    """Parse code and return its CST.

    Raises:
        arpeggio.NoMatch: If the code is not well-formed enough to parse.
    """
    parse_tree = parser.parse(code)
    return CSTBuilder(code).visit_parse_tree(parse_tree)


def parse_ast(parser, code, origin="<string>") -> XMLDocument | None:
    """Parse code and return its AST.

    This is the main public API for converting XML text to an AST.

    Args:
        parser: An Arpeggio parser instance (from getXMLParser())
        code: The XML text to parse
        origin: Name of the input used in error messages

    Returns:
        The XMLDocument, or None if the code has a syntax error. The error is
        logged with the offending line.
    """
    try:
        document_cst = parse_cst(parser, code)
    except NoMatch as e:
        # Arpeggio's NoMatch.position is the character offset of the failure
        char_pos = e.position if isinstance(e.position, int) else 0
        logger.error(_format_syntax_error(code, char_pos, origin))
        return None
    return build_ast(document_cst)


def getASTfromString(code: str, origin: str = "<string>") -> XMLDocument | None:
    """
    Parse XML text from a string and return its abstract syntax tree (AST).

    Args:
        code (str): The XML text to be parsed.
        origin (str): Name of the input used in error messages (default: "<string>").

    Returns:
        XMLDocument | None: The AST of the document, or None on a syntax error.

    Example:
        ast = getASTfromString('<root xmlns:a="urn:a"><a:item/></root>')
    """
    parser = getXMLParser()
    return parse_ast(parser, code, origin=origin)


# Module-level cache for AST trees
# Key: absolute file path (str)
# Value: tuple of (AST, modification timestamp)
_ast_cache: dict[str, tuple[XMLDocument | None, float]] = {}


def clear_ast_cache():
    """Clear the in-memory AST cache.

    This function removes all cached AST trees, forcing all subsequent
    calls to getASTfromFile() to re-parse files.
    """
    _ast_cache.clear()


def getASTfromFile(file: str) -> XMLDocument | None:
    """
    Parse an XML file and return its corresponding abstract syntax tree (AST).

    The function caches AST trees in memory. Cache entries are automatically invalidated
    if the file's modification timestamp changes, ensuring that updated files are re-parsed.
    Cached trees are shared between callers; namespace resolution mutates trees, so
    callers that modify a tree should work on a copy.

    Args:
        file (str): The XML file to be parsed.

    Returns:
        XMLDocument | None: The AST of the document, or None on a syntax error.

    Raises:
        FileNotFoundError: If the specified file does not exist.
        Exception: If there is an error while reading the file.

    Example:
        ast = getASTfromFile("catalog.xml")
    """
    # Get absolute path for consistent cache keys
    file_path = os.path.abspath(file)

    # Check if file exists and get its modification time
    if not os.path.exists(file_path):
        raise FileNotFoundError(f"File {file} not found")

    current_mtime = os.path.getmtime(file_path)

    # Check cache
    if file_path in _ast_cache:
        cached_ast, cached_mtime = _ast_cache[file_path]
        # If file hasn't been modified, return cached AST
        if cached_mtime == current_mtime:
            logger.debug("AST cache hit for %s", file_path)
            return cached_ast
        # Otherwise, invalidate the cache entry
        del _ast_cache[file_path]

    # Read the file
    try:
        with open(file_path, 'r', encoding='utf-8') as f:
            code = f.read()
    except Exception as e:
        raise Exception(f"Error reading file {file}: {e}") from e

    parser = getXMLParser()
    ast = parse_ast(parser, code, origin=file_path)

    # Cache the result with current modification time
    _ast_cache[file_path] = (ast, current_mtime)

    return ast
