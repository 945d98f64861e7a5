from .ast_schema import (
    CellReference,
    Condition,
    ConditionalNode,
    FormulaNode,
    FunctionCall,
    NumberLiteral,
    OperatorNode,
    TextLiteral,
)
from .formula_record import FormulaImportResult, FormulaMetadata, FormulaRecord

__all__ = [
    "CellReference",
    "Condition",
    "ConditionalNode",
    "FormulaNode",
    "FunctionCall",
    "NumberLiteral",
    "OperatorNode",
    "TextLiteral",
    "FormulaImportResult",
    "FormulaMetadata",
    "FormulaRecord",
]
