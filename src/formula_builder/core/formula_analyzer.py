"""
Metadata derived from an expression tree.

The walks differ in which children they visit:

- ``complexity_score`` counts operator operands and all four conditional
  children, but not function-call arguments.
- ``collect_cell_references`` visits function-call arguments as well.
- ``has_conditional`` / ``has_lookup`` search operator operands, function
  arguments and the two branches of a conditional, but not its comparison.

These rules match the metadata already stored for existing formulas.
"""

from typing import Set

from ..models.ast_schema import (
    CellReference,
    ConditionalNode,
    FormulaNode,
    FunctionCall,
    OperatorNode,
)


def complexity_score(node: FormulaNode) -> int:
    """Structural size: 1 per node plus the scores of the counted children."""
    if node is None:
        return 0

    score = 1

    if isinstance(node, OperatorNode):
        score += sum(complexity_score(child) for child in node.operands)
    elif isinstance(node, ConditionalNode):
        for child in [node.left, node.right, node.when_true, node.when_false]:
            score += complexity_score(child)

    # TODO: count FunctionCall arguments once product confirms the intended score
    return score


def collect_cell_references(node: FormulaNode) -> Set[str]:
    """Names of every cell reference in the tree, without duplicates."""
    references: Set[str] = set()

    def visit(n: FormulaNode):
        if isinstance(n, CellReference):
            references.add(n.name)
        elif isinstance(n, OperatorNode):
            for child in n.operands:
                visit(child)
        elif isinstance(n, ConditionalNode):
            for child in [n.left, n.right, n.when_true, n.when_false]:
                visit(child)
        elif isinstance(n, FunctionCall):
            for child in n.args:
                visit(child)

    if node is not None:
        visit(node)
    return references


def has_conditional(node: FormulaNode) -> bool:
    """Check if the tree contains an IF."""
    if isinstance(node, ConditionalNode):
        return True
    if isinstance(node, OperatorNode):
        return any(has_conditional(child) for child in node.operands)
    if isinstance(node, FunctionCall):
        return any(has_conditional(child) for child in node.args)
    return False


def has_lookup(node: FormulaNode) -> bool:
    """Check if the tree contains a LOOKUP call."""
    if isinstance(node, FunctionCall):
        if node.is_lookup:
            return True
        return any(has_lookup(child) for child in node.args)
    if isinstance(node, OperatorNode):
        return any(has_lookup(child) for child in node.operands)
    if isinstance(node, ConditionalNode):
        return has_lookup(node.when_true) or has_lookup(node.when_false)
    return False


__all__ = [
    "complexity_score",
    "collect_cell_references",
    "has_conditional",
    "has_lookup",
]
