"""Namespace lookup for resolved XML AST nodes.

These helpers read the ``namespaces`` list that namespace resolution stores on
every element. The list holds an element's own declarations first and inherited
ones after, so the first binding found for a prefix is the one in effect.
"""
from __future__ import annotations
from typing import Optional

from .nodes import MISSING, XMLAttribute, XMLElement
from .builder import ns_to_parts


def resolve_prefix(element: XMLElement, prefix: Optional[str]) -> Optional[str]:
    """Look up the URI bound to a prefix on an element.

    Args:
        element: The element whose bindings are searched.
        prefix: The prefix to look up, or None for the default namespace.

    Returns:
        The namespace URI, or None if the prefix is not bound.
    """
    for namespace in element.namespaces:
        if namespace.prefix == prefix:
            return namespace.uri
    return None


def element_namespace_uri(element: XMLElement) -> Optional[str]:
    """Return the namespace URI of an element's name.

    A prefixed name resolves through its prefix; an unprefixed name is in the
    default namespace, if one is declared.

    Returns:
        The URI, or None if the element has no name or its prefix is unbound.
    """
    if element.name is MISSING:
        return None
    return resolve_prefix(element, element.ns)


def attribute_namespace_uri(attribute: XMLAttribute) -> Optional[str]:
    """Return the namespace URI of a prefixed attribute name.

    Unprefixed attributes are in no namespace, whatever the default namespace
    is. Prefixed ones resolve through the bindings of the owning element.

    Returns:
        The URI, or None if the attribute is unprefixed, unbound, or not owned
        by an element.
    """
    if attribute.key is MISSING:
        return None
    parts = ns_to_parts(attribute.key)
    if parts is None:
        return None
    prefix = parts[0]
    if prefix == "xmlns":
        return None
    owner = attribute.parent
    if not isinstance(owner, XMLElement):
        return None
    return resolve_prefix(owner, prefix)


def in_scope_namespaces(element: XMLElement) -> dict[Optional[str], str]:
    """Return the bindings in effect on an element, one URI per prefix.

    Shadowed bindings are dropped; the key None is the default namespace.
    """
    bindings: dict[Optional[str], str] = {}
    for namespace in element.namespaces:
        if namespace.prefix not in bindings:
            bindings[namespace.prefix] = namespace.uri
    return bindings
