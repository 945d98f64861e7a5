"""
Load and dump the JSON tree documents exchanged with the editor and storage.

Documents are validated into the node models; anything that does not
describe a well-formed tree is rejected with ``MalformedTreeError``.
"""

import json
import logging
from typing import Any, Dict, Optional, Union

from pydantic import TypeAdapter, ValidationError

from ..core.errors import MalformedTreeError, NestingDepthError
from ..models.ast_schema import (
    NODE_CLASSES,
    Condition,
    ConditionalNode,
    FormulaNode,
    FunctionCall,
    OperatorNode,
)

logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 64

_NODE_ADAPTER = TypeAdapter(FormulaNode)


def document_depth(data: Any) -> int:
    """Deepest nesting of JSON objects in ``data`` (iterative, no recursion)."""
    max_depth = 0
    stack = [(data, 0)]

    while stack:
        value, depth = stack.pop()
        if isinstance(value, dict):
            depth += 1
            max_depth = max(max_depth, depth)
            stack.extend((child, depth) for child in value.values())
        elif isinstance(value, list):
            stack.extend((child, depth) for child in value)

    return max_depth


def _node_children(node: Any) -> tuple:
    if isinstance(node, OperatorNode):
        return node.operands
    if isinstance(node, ConditionalNode):
        return (node.condition, node.when_true, node.when_false)
    if isinstance(node, Condition):
        return (node.left, node.right)
    if isinstance(node, FunctionCall):
        return node.args
    return ()


def tree_depth(node: FormulaNode) -> int:
    """Deepest nesting of a built tree, counted like ``document_depth`` of its dump."""
    max_depth = 0
    stack = [(node, 1)]

    while stack:
        current, depth = stack.pop()
        max_depth = max(max_depth, depth)
        stack.extend((child, depth + 1) for child in _node_children(current))

    return max_depth


def load_tree(data: Any, max_depth: int = DEFAULT_MAX_DEPTH) -> FormulaNode:
    """Validate a tree document (or an existing node) into node models.

    Args:
        data: Wire-format dict, or an already built node
        max_depth: Deepest object nesting accepted

    Returns:
        FormulaNode: The validated tree

    Raises:
        NestingDepthError: If the document nests beyond ``max_depth``
        MalformedTreeError: If the document is not a valid tree
    """
    if isinstance(data, NODE_CLASSES):
        depth = tree_depth(data)
        if depth > max_depth:
            raise NestingDepthError(depth, max_depth)
        return data

    if not isinstance(data, dict):
        raise MalformedTreeError(
            f"Formula tree must be a JSON object, got {type(data).__name__}"
        )

    depth = document_depth(data)
    if depth > max_depth:
        raise NestingDepthError(depth, max_depth)

    try:
        return _NODE_ADAPTER.validate_python(data)
    except ValidationError as e:
        error = e.errors()[0]
        path = ".".join(str(part) for part in error["loc"]) or None
        logger.debug(f"Rejected formula tree: {e}")
        raise MalformedTreeError(f"Invalid formula tree: {error['msg']}", path=path) from e


def load_tree_json(text: Union[str, bytes], max_depth: int = DEFAULT_MAX_DEPTH) -> FormulaNode:
    """Parse JSON text and validate it as a tree document."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise MalformedTreeError(f"Formula tree is not valid JSON: {e}") from e
    return load_tree(data, max_depth=max_depth)


def dump_tree(node: FormulaNode) -> Dict[str, Any]:
    """Serialise a tree to its wire-format dict."""
    return node.model_dump(mode="json", by_alias=True, exclude_none=True)


def dump_tree_json(node: FormulaNode, indent: Optional[int] = None) -> str:
    return node.model_dump_json(by_alias=True, exclude_none=True, indent=indent)


__all__ = [
    "DEFAULT_MAX_DEPTH",
    "document_depth",
    "tree_depth",
    "load_tree",
    "load_tree_json",
    "dump_tree",
    "dump_tree_json",
]
