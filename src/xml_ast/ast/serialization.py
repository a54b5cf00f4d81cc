"""JSON and YAML serialization for XML AST trees.

This module provides functions to serialize AST trees to JSON and YAML formats,
and to deserialize them back to AST nodes.

Example:
    from xml_ast.ast import getASTfromString, ast_to_json, ast_from_json

    ast = getASTfromString('<a x="1"/>')
    json_str = ast_to_json(ast)
    ast_restored = ast_from_json(json_str)
"""

from __future__ import annotations

import dataclasses
import json
from typing import Any

from ..position import SourcePosition
from .builder import set_children_parent
from .nodes import (
    MISSING,
    XMLAstNode,
    XMLAttribute,
    XMLAttributeSyntax,
    XMLDocument,
    XMLElement,
    XMLElementSyntax,
    XMLNamespace,
    XMLProlog,
    XMLTextContent,
    XMLToken,
)


# Registry mapping class names to classes for deserialization
_NODE_REGISTRY: dict[str, type[XMLAstNode]] = {
    cls.__name__: cls
    for cls in [
        XMLDocument,
        XMLProlog,
        XMLElement,
        XMLAttribute,
        XMLTextContent,
    ]
}

# Plain records stored inside node fields
_RECORD_REGISTRY: dict[str, type] = {
    cls.__name__: cls
    for cls in [
        XMLToken,
        XMLNamespace,
        XMLElementSyntax,
        XMLAttributeSyntax,
        SourcePosition,
    ]
}

_MISSING_MARKER = "_missing"


def _serialize_position(position: SourcePosition) -> dict[str, Any]:
    """Serialize a SourcePosition to a dictionary."""
    return dataclasses.asdict(position)


def _serialize_value(value: Any, include_position: bool) -> Any:
    """Serialize a field value recursively."""
    if value is None:
        return None
    elif value is MISSING:
        return {_MISSING_MARKER: True}
    elif isinstance(value, XMLAstNode):
        return _serialize_node(value, include_position)
    elif type(value).__name__ in _RECORD_REGISTRY:
        result: dict[str, Any] = {"_type": type(value).__name__}
        for field in dataclasses.fields(value):
            result[field.name] = _serialize_value(getattr(value, field.name), include_position)
        return result
    elif isinstance(value, list):
        return [_serialize_value(item, include_position) for item in value]
    elif isinstance(value, (str, int, float, bool)):
        return value
    else:
        raise TypeError(f"Unsupported type for serialization: {type(value)}")


def _serialize_node(node: XMLAstNode, include_position: bool) -> dict[str, Any]:
    """Serialize a single AST node to a dictionary."""
    result: dict[str, Any] = {
        "_type": node.__class__.__name__,
    }

    if include_position:
        result["_position"] = _serialize_position(node.position)

    # The parent reference is not a dataclass field, so it is never written.
    for field in dataclasses.fields(node):
        if field.name == "position":
            continue
        value = getattr(node, field.name)
        result[field.name] = _serialize_value(value, include_position)

    return result


def ast_to_dict(
    ast: XMLAstNode | None,
    include_position: bool = True,
) -> dict[str, Any] | None:
    """Convert an AST to a Python dictionary (JSON-serializable).

    Args:
        ast: An AST node, usually an XMLDocument, or None.
        include_position: If True, include node source spans (default: True).

    Returns:
        A dictionary representation of the AST, or None.

    Example:
        ast = getASTfromString("<a/>")
        data = ast_to_dict(ast)
    """
    if ast is None:
        return None
    return _serialize_node(ast, include_position)


def ast_to_json(
    ast: XMLAstNode | None,
    include_position: bool = True,
    indent: int | None = 2,
) -> str:
    """Serialize an AST to a JSON string.

    Args:
        ast: An AST node or None.
        include_position: If True, include node source spans (default: True).
        indent: Indentation level for pretty-printing. Use None for compact output.

    Returns:
        A JSON string representation of the AST.
    """
    data = ast_to_dict(ast, include_position=include_position)
    return json.dumps(data, indent=indent)


def _deserialize_position(data: dict[str, Any]) -> SourcePosition:
    """Deserialize a SourcePosition from a dictionary."""
    return SourcePosition(
        start_offset=data["start_offset"],
        end_offset=data["end_offset"],
        start_line=data["start_line"],
        end_line=data["end_line"],
        start_column=data["start_column"],
        end_column=data["end_column"],
    )


def _deserialize_value(value: Any) -> Any:
    """Deserialize a field value recursively."""
    if value is None:
        return None
    elif isinstance(value, dict) and value.get(_MISSING_MARKER) is True:
        return MISSING
    elif isinstance(value, dict) and value.get("_type") in _RECORD_REGISTRY:
        return _deserialize_record(value)
    elif isinstance(value, dict) and "_type" in value:
        return _deserialize_node(value)
    elif isinstance(value, list):
        return [_deserialize_value(item) for item in value]
    elif isinstance(value, (str, int, float, bool)):
        return value
    else:
        raise TypeError(f"Unsupported type for deserialization: {type(value)}")


def _deserialize_record(data: dict[str, Any]) -> Any:
    record_class = _RECORD_REGISTRY[data["_type"]]
    field_names = {f.name for f in dataclasses.fields(record_class)}
    kwargs = {
        key: _deserialize_value(value)
        for key, value in data.items()
        if key in field_names
    }
    return record_class(**kwargs)


def _deserialize_node(data: dict[str, Any]) -> XMLAstNode:
    """Deserialize a single AST node from a dictionary."""
    if "_type" not in data:
        raise ValueError("Missing '_type' field in node data")

    type_name = data["_type"]
    if type_name not in _NODE_REGISTRY:
        raise ValueError(f"Unknown node type: {type_name}")

    node_class = _NODE_REGISTRY[type_name]

    # Reconstruct position (required for all nodes)
    if "_position" in data:
        position = _deserialize_position(data["_position"])
    else:
        # Default position if not provided
        position = SourcePosition(0, 0, 1, 1, 1, 1)

    # Get field names from dataclass (excluding position)
    field_names = {f.name for f in dataclasses.fields(node_class) if f.name != "position"}

    # Build kwargs for constructor
    kwargs: dict[str, Any] = {"position": position}
    for key, value in data.items():
        if key.startswith("_"):
            continue  # Skip _type, _position
        if key in field_names:
            kwargs[key] = _deserialize_value(value)

    node = node_class(**kwargs)
    set_children_parent(node)
    return node


def ast_from_dict(data: dict[str, Any] | None) -> XMLAstNode | None:
    """Reconstruct an AST from a Python dictionary.

    Parent references are restored on the way.

    Args:
        data: A dictionary or None (as returned by ast_to_dict).

    Returns:
        An AST node, or None.

    Raises:
        ValueError: If the data contains an unknown node type or is malformed.
    """
    if data is None:
        return None
    return _deserialize_node(data)


def ast_from_json(json_str: str) -> XMLAstNode | None:
    """Deserialize an AST from a JSON string.

    Raises:
        ValueError: If the JSON contains an unknown node type or is malformed.
        json.JSONDecodeError: If the string is not valid JSON.
    """
    data = json.loads(json_str)
    return ast_from_dict(data)


def ast_to_yaml(
    ast: XMLAstNode | None,
    include_position: bool = True,
) -> str:
    """Serialize an AST to a YAML string.

    Requires PyYAML to be installed: pip install xml_ast[yaml]

    Raises:
        ImportError: If PyYAML is not installed.
    """
    try:
        import yaml
    except ImportError:
        raise ImportError(
            "PyYAML is required for YAML serialization. "
            "Install it with: pip install xml_ast[yaml]"
        )

    data = ast_to_dict(ast, include_position=include_position)
    return yaml.dump(data, default_flow_style=False, sort_keys=False, allow_unicode=True)


def ast_from_yaml(yaml_str: str) -> XMLAstNode | None:
    """Deserialize an AST from a YAML string.

    Requires PyYAML to be installed: pip install xml_ast[yaml]

    Raises:
        ImportError: If PyYAML is not installed.
        ValueError: If the YAML contains an unknown node type or is malformed.
    """
    try:
        import yaml
    except ImportError:
        raise ImportError(
            "PyYAML is required for YAML deserialization. "
            "Install it with: pip install xml_ast[yaml]"
        )

    data = yaml.safe_load(yaml_str)
    return ast_from_dict(data)
