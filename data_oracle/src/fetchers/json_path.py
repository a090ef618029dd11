"""Dot-path extraction over decoded JSON trees.

Used by the custom source to pull a single value out of an arbitrary
response body. Each path segment is tried as an object key first, then as a
zero-based array index.

.. code-block:: python

    >>> extract_value({"blocks": [{"author": "alice"}]}, "blocks.0.author",
    ...               ValueType.STRING)
    'alice'
    >>> extract_value({"rates": {"USD": "1.05"}}, "rates.USD", ValueType.NUMBER)
    1.05
"""

from __future__ import annotations

import json
import math
from typing import Any

from ..OracleTypes import DataValue, ValueType
from .base import FetcherError


class JsonPathError(FetcherError):
    """Raised when a path segment cannot be resolved or coerced."""

    pass


def resolve(tree: Any, path: str) -> Any:
    """Walk a JSON tree one path segment at a time.

    :param tree: Decoded JSON value.
    :param path: Dot-separated path (e.g. "data.price", "items.0.value").
    :returns: The node at the path.
    :raises JsonPathError: If a segment is missing or an index is out of bounds.
    """
    current = tree
    for part in path.split("."):
        if isinstance(current, dict) and part in current:
            current = current[part]
        elif part.isdecimal():
            index = int(part)
            if not isinstance(current, list) or index >= len(current):
                raise JsonPathError(
                    f"JSON path '{path}' array index '{part}' out of bounds"
                )
            current = current[index]
        else:
            raise JsonPathError(f"JSON path '{path}' not found at '{part}'")
    return current


def extract_value(tree: Any, path: str, value_type: ValueType) -> DataValue:
    """Extract and coerce the value at a path.

    :param tree: Decoded JSON value.
    :param path: Dot-separated path.
    :param value_type: Type to coerce the node to.
    :returns: Number, text or boolean value.
    :raises JsonPathError: If the path does not resolve or the node has the
        wrong type.
    """
    node = resolve(tree, path)

    if value_type is ValueType.NUMBER:
        if isinstance(node, bool):
            raise JsonPathError(f"Value at '{path}' is not a number")
        if isinstance(node, (int, float)):
            number = float(node)
        elif isinstance(node, str):
            try:
                number = float(node)
            except ValueError as e:
                raise JsonPathError(f"Failed to parse '{node}' as number: {e}") from e
        else:
            raise JsonPathError(f"Value at '{path}' is not a number")
        if not math.isfinite(number):
            raise JsonPathError(f"Value at '{path}' is not a finite number")
        return number

    if value_type is ValueType.STRING:
        if isinstance(node, str):
            return node
        return json.dumps(node, separators=(",", ":"))

    if isinstance(node, bool):
        return node
    raise JsonPathError(f"Value at '{path}' is not a boolean")
