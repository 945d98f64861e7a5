"""
Expression tree schema for spreadsheet formulas.

Each node variant is a frozen pydantic model whose JSON form is the tree
document stored by the persistence layer and exchanged with the editing UI.
Python attribute names describe the tree; field aliases carry the wire names.
"""

import math
from typing import Annotated, List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, StrictFloat, StrictInt
from pydantic import field_validator, model_validator

from ..core.errors import MalformedTreeError

# Arithmetic operators, in the order the UI offers them
ARITHMETIC_OPERATORS = ("+", "-", "*", "/")

# Comparator candidates, longest first so "=" never matches inside "=="
COMPARATORS = ("<>", ">=", "<=", "==", ">", "<", "=")
EQUALITY_SYMBOLS = ("=", "==")

LOOKUP_FUNCTION = "lookup"

# Largest float that still maps onto an exact integer
_MAX_EXACT_INTEGER = 2**53


class FormulaNodeBase(BaseModel):
    """Common configuration for every expression tree node."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)


class CellReference(FormulaNodeBase):
    """Reference to a cell or named value: ``A1``, ``[15401]``, ``STRUC_HRS``."""

    type: Literal["cellValue"] = "cellValue"
    name: str = Field(alias="value")

    @field_validator("name")
    @classmethod
    def _check_name(cls, value: str) -> str:
        if not value:
            raise MalformedTreeError("Cell reference name must not be empty")
        return value


class NumberLiteral(FormulaNodeBase):
    """Finite numeric literal; integral values are kept as ``int``."""

    type: Literal["number"] = "number"
    value: Union[StrictInt, StrictFloat]

    @field_validator("value")
    @classmethod
    def _check_value(cls, value: Union[int, float]) -> Union[int, float]:
        if isinstance(value, float):
            if not math.isfinite(value):
                raise MalformedTreeError(f"Number literal must be finite, got {value}")
            if value.is_integer() and abs(value) < _MAX_EXACT_INTEGER:
                return int(value)
        return value


class TextLiteral(FormulaNodeBase):
    """Quoted text. Embedded quotes are not escaped when generating."""

    type: Literal["textbox"] = "textbox"
    value: str


class OperatorNode(FormulaNodeBase):
    """Flat left-to-right arithmetic chain without precedence.

    ``operators[i]`` sits between ``operands[i]`` and ``operands[i + 1]``.
    Older documents carry a single shared ``operator`` instead of the list.
    """

    type: Literal["operator"] = "operator"
    operands: Tuple["FormulaNode", ...] = Field(alias="args")
    operators: Optional[Tuple[str, ...]] = None
    operator: Optional[str] = None

    @model_validator(mode="after")
    def _check_chain(self) -> "OperatorNode":
        if len(self.operands) < 2:
            raise MalformedTreeError(
                f"Operator node needs at least 2 operands, got {len(self.operands)}"
            )

        if self.operators:
            if len(self.operators) != len(self.operands) - 1:
                raise MalformedTreeError(
                    f"Operator node has {len(self.operands)} operands but "
                    f"{len(self.operators)} operators"
                )
            symbols = self.operators
        elif self.operator is not None:
            symbols = [self.operator]
        else:
            raise MalformedTreeError("Operator node has no operators")

        for symbol in symbols:
            if symbol not in ARITHMETIC_OPERATORS:
                raise MalformedTreeError(f"Unsupported arithmetic operator: {symbol!r}")
        return self

    @property
    def symbols(self) -> List[str]:
        """Per-pair operator list, expanding the legacy shared operator."""
        if self.operators:
            return list(self.operators)
        return [self.operator] * (len(self.operands) - 1)

    @property
    def is_legacy(self) -> bool:
        return not self.operators


class Condition(FormulaNodeBase):
    """Comparison used as the test of a conditional."""

    operator: str
    left: "FormulaNode"
    right: "FormulaNode"

    @field_validator("operator")
    @classmethod
    def _check_operator(cls, value: str) -> str:
        if value not in COMPARATORS:
            raise MalformedTreeError(f"Unsupported comparator: {value!r}")
        return value


class ConditionalNode(FormulaNodeBase):
    """``IF(left comparator right, when_true, when_false)``."""

    type: Literal["if"] = "if"
    condition: Condition
    when_true: "FormulaNode" = Field(alias="trueValue")
    when_false: "FormulaNode" = Field(alias="falseValue")

    @classmethod
    def build(
        cls,
        comparator: str,
        left: "FormulaNode",
        right: "FormulaNode",
        when_true: "FormulaNode",
        when_false: "FormulaNode",
    ) -> "ConditionalNode":
        return cls(
            condition=Condition(operator=comparator, left=left, right=right),
            when_true=when_true,
            when_false=when_false,
        )

    @property
    def comparator(self) -> str:
        return self.condition.operator

    @property
    def left(self) -> "FormulaNode":
        return self.condition.left

    @property
    def right(self) -> "FormulaNode":
        return self.condition.right


class FunctionCall(FormulaNodeBase):
    """Function call; only ``lookup`` carries meaning.

    The intended lookup shape is (lookup value, lookup array, result array),
    but the argument count is not enforced.
    """

    type: Literal["function"] = "function"
    name: str
    args: Tuple["FormulaNode", ...] = ()

    @property
    def is_lookup(self) -> bool:
        return self.name == LOOKUP_FUNCTION


FormulaNode = Annotated[
    Union[
        CellReference,
        NumberLiteral,
        TextLiteral,
        OperatorNode,
        ConditionalNode,
        FunctionCall,
    ],
    Field(discriminator="type"),
]

NODE_CLASSES = (
    CellReference,
    NumberLiteral,
    TextLiteral,
    OperatorNode,
    ConditionalNode,
    FunctionCall,
)


# Forward reference resolution
OperatorNode.model_rebuild()
Condition.model_rebuild()
ConditionalNode.model_rebuild()
FunctionCall.model_rebuild()


# Export main classes
__all__ = [
    "ARITHMETIC_OPERATORS",
    "COMPARATORS",
    "EQUALITY_SYMBOLS",
    "LOOKUP_FUNCTION",
    "FormulaNodeBase",
    "CellReference",
    "NumberLiteral",
    "TextLiteral",
    "OperatorNode",
    "Condition",
    "ConditionalNode",
    "FunctionCall",
    "FormulaNode",
    "NODE_CLASSES",
]
