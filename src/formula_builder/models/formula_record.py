"""
Records handed to the persistence layer and the editor's import action.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .ast_schema import FormulaNode


class FormulaMetadata(BaseModel):
    """Metadata derived from a tree by the generator and analyzer."""

    generated_text: str
    complexity_score: int
    has_conditional: bool = False
    has_lookup: bool = False
    referenced_cells: List[str] = Field(default_factory=list)  # Sorted, unique


class FormulaRecord(FormulaMetadata):
    """Complete row stored for a saved formula."""

    name: str
    description: str = ""
    tree: Dict[str, Any]  # Wire-format tree document

    model_config = ConfigDict(
        json_schema_extra={
            "examples": [
                {
                    "name": "overtime_bonus",
                    "description": "Bonus when overtime exceeds 10 hours",
                    "tree": {
                        "type": "if",
                        "condition": {
                            "operator": ">",
                            "left": {"type": "cellValue", "value": "OT1.1"},
                            "right": {"type": "number", "value": 10},
                        },
                        "trueValue": {"type": "textbox", "value": "High"},
                        "falseValue": {"type": "textbox", "value": "Low"},
                    },
                    "generated_text": 'IF(OT1.1>10,"High","Low")',
                    "complexity_score": 5,
                    "has_conditional": True,
                    "has_lookup": False,
                    "referenced_cells": ["OT1.1"],
                }
            ]
        }
    )


class FormulaImportResult(BaseModel):
    """Result of importing formula text from the editor."""

    success: bool
    formula: str

    # Always set for non-blank input, the fallback tree when parsing failed
    node: Optional[FormulaNode] = None

    # Error case
    error_message: Optional[str] = None

    # Reference names seen for the first time in this import
    new_references: List[str] = Field(default_factory=list)


__all__ = ["FormulaMetadata", "FormulaRecord", "FormulaImportResult"]
