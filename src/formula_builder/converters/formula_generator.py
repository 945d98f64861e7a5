"""
Formula Generator - Converts an expression tree back to formula text.

Inverse of the parser for the flat grammar: operator chains are wrapped in
parentheses, conditionals become ``IF(...)`` and lookups ``LOOKUP(...)``.
Unrecognised nodes render as an empty string so that generating a preview
never fails.
"""

import logging
from typing import Any, Union

from ..models.ast_schema import (
    CellReference,
    ConditionalNode,
    FunctionCall,
    NumberLiteral,
    OperatorNode,
    TextLiteral,
)

logger = logging.getLogger(__name__)


def format_number(value: Union[int, float]) -> str:
    """Default decimal rendering: integral values without a fractional part."""
    if isinstance(value, float) and value.is_integer() and abs(value) < 1e21:
        return str(int(value))
    return repr(value) if isinstance(value, float) else str(value)


class FormulaGenerator:
    """
    Converts expression tree nodes to formula text.

    Each node variant has its own conversion method; ``generate`` dispatches
    on the node class.
    """

    def generate(self, node: Any) -> str:
        """
        Convert a tree to formula text.

        Args:
            node: Root node of the tree

        Returns:
            str: Formula text without a leading ``=``

        Example:
            Input: OperatorNode(operands=[A1, B1, 2], operators=["+", "*"])
            Output: "(A1+B1*2)"
        """
        if isinstance(node, CellReference):
            return node.name
        elif isinstance(node, NumberLiteral):
            return format_number(node.value)
        elif isinstance(node, TextLiteral):
            return f'"{node.value}"'
        elif isinstance(node, OperatorNode):
            return self._generate_operator(node)
        elif isinstance(node, ConditionalNode):
            return self._generate_conditional(node)
        elif isinstance(node, FunctionCall):
            return self._generate_function(node)

        logger.debug(f"Unsupported node, generating empty text: {type(node).__name__}")
        return ""

    def _generate_operator(self, node: OperatorNode) -> str:
        """Interleave operands with their operators: ``(a+b*c)``."""
        if node.is_legacy:
            body = node.operator.join(self.generate(arg) for arg in node.operands)
            return f"({body})"

        parts = [self.generate(node.operands[0])]
        for symbol, operand in zip(node.symbols, node.operands[1:]):
            parts.append(symbol)
            parts.append(self.generate(operand))
        return f"({''.join(parts)})"

    def _generate_conditional(self, node: ConditionalNode) -> str:
        condition = (
            f"{self.generate(node.left)}{node.comparator}{self.generate(node.right)}"
        )
        return (
            f"IF({condition},"
            f"{self.generate(node.when_true)},"
            f"{self.generate(node.when_false)})"
        )

    def _generate_function(self, node: FunctionCall) -> str:
        if not node.is_lookup:
            logger.debug(f"Unsupported function, generating empty text: {node.name}")
            return ""
        return f"LOOKUP({','.join(self.generate(arg) for arg in node.args)})"


__all__ = ["FormulaGenerator", "format_number"]
