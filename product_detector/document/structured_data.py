# product_detector/document/structured_data.py

"""Helpers for locating schema.org nodes inside JSON-LD payloads."""

from collections.abc import Iterator
from typing import Any


def has_type(node: Any, type_name: str) -> bool:
    """Whether a JSON-LD node declares *type_name* in its ``@type``.

    ``@type`` may be a plain name, a schema.org URI, or a list of either.
    """
    if not isinstance(node, dict):
        return False
    declared = node.get("@type")
    names = declared if isinstance(declared, list) else [declared]
    for name in names:
        if isinstance(name, str) and name.rsplit("/", 1)[-1] == type_name:
            return True
    return False


def find_typed_node(payload: Any, type_name: str) -> dict[str, Any] | None:
    """Depth-first search through arrays and objects for a typed node."""
    if has_type(payload, type_name):
        return payload
    children: list[Any] = []
    if isinstance(payload, list):
        children = payload
    elif isinstance(payload, dict):
        children = list(payload.values())
    for child in children:
        found = find_typed_node(child, type_name)
        if found is not None:
            return found
    return None


def find_product(payloads: list[Any]) -> dict[str, Any] | None:
    """First ``Product`` node across all payloads."""
    for payload in payloads:
        product = find_typed_node(payload, "Product")
        if product is not None:
            return product
    return None


def iter_typed_nodes(payload: Any, type_name: str) -> Iterator[dict[str, Any]]:
    """Every node of *type_name* in document order, outermost first."""
    if has_type(payload, type_name):
        yield payload
    children: list[Any] = []
    if isinstance(payload, list):
        children = payload
    elif isinstance(payload, dict):
        children = list(payload.values())
    for child in children:
        yield from iter_typed_nodes(child, type_name)
