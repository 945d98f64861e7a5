import logging
from functools import lru_cache
from typing import Any, Optional

from ..converters.formula_generator import FormulaGenerator
from ..converters.formula_parser import FormulaParser
from ..converters.tree_codec import dump_tree, load_tree
from ..models.ast_schema import FormulaNode
from ..models.formula_record import FormulaImportResult, FormulaMetadata, FormulaRecord
from .errors import FormulaBuilderError, MalformedTreeError
from .formula_analyzer import (
    collect_cell_references,
    complexity_score,
    has_conditional,
    has_lookup,
)
from .reference_registry import ReferenceRegistry
from .settings import CompilerSettings, load_settings


class FormulaEngine:
    """Entry point for the editor and the persistence layer.

    Wires the parser, generator and analyzer to one set of settings and one
    caller-owned reference registry:
    1. Text import (parse)
    2. Live preview (generate)
    3. Metadata for saved formulas (analyze / build_record)
    """

    def __init__(
        self,
        settings: Optional[CompilerSettings] = None,
        registry: Optional[ReferenceRegistry] = None,
    ):
        """Initialize the engine.

        Args:
            settings: Compiler settings (packaged defaults if None)
            registry: Reference names shared with the editor's autocomplete
        """
        self.logger = logging.getLogger(__name__)
        self.settings = settings or load_settings()
        if registry is None:
            registry = ReferenceRegistry(self.settings.known_references)
        self.registry = registry

        self.parser = FormulaParser(self.settings, self.registry)
        self.generator = FormulaGenerator()

    def parse(self, text: str) -> FormulaNode:
        """Parse formula text; never raises."""
        return self.parser.parse(text)

    def load(self, tree: Any) -> FormulaNode:
        """Validate a tree document (or node) against the configured depth limit.

        Raises:
            MalformedTreeError: If the tree is invalid or nests too deeply
        """
        return load_tree(tree, max_depth=self.settings.max_nesting_depth)

    def generate(self, tree: Any) -> str:
        """Formula text for a node or tree document.

        Documents that are not valid trees generate an empty string.
        """
        try:
            node = self.load(tree)
        except MalformedTreeError as e:
            self.logger.warning(f"Cannot generate formula for malformed tree: {e}")
            return ""
        return self.generator.generate(node)

    def analyze(self, tree: Any) -> FormulaMetadata:
        """Generated text and analyzer metadata for a tree.

        Raises:
            MalformedTreeError: If the tree is invalid or nests too deeply
        """
        node = self.load(tree)
        return FormulaMetadata(
            generated_text=self.generator.generate(node),
            complexity_score=complexity_score(node),
            has_conditional=has_conditional(node),
            has_lookup=has_lookup(node),
            referenced_cells=sorted(collect_cell_references(node)),
        )

    def build_record(
        self, name: str, tree: Any, description: str = ""
    ) -> FormulaRecord:
        """Everything the persistence layer stores for a saved formula.

        Raises:
            MalformedTreeError: If the tree is invalid or nests too deeply
        """
        node = self.load(tree)
        metadata = self.analyze(node)
        self.logger.info(
            f"Built record for formula '{name}': {metadata.generated_text} "
            f"(complexity {metadata.complexity_score})"
        )
        return FormulaRecord(
            name=name,
            description=description,
            tree=dump_tree(node),
            **metadata.model_dump(),
        )

    def import_formula(self, text: str) -> FormulaImportResult:
        """Parse text typed into the editor's import box.

        Parsing failures are reported in the result with the fallback tree
        attached. Reference names seen for the first time are added to the
        registry.
        """
        if not text or not text.strip():
            return FormulaImportResult(
                success=False, formula=text or "", error_message="Formula text is empty"
            )

        success = True
        error_message = None
        try:
            node = self.parser.parse_strict(text)
        except FormulaBuilderError as e:
            self.logger.warning(f"Import fell back for formula '{text}': {e}")
            success = False
            error_message = f"Error parsing formula: {e}"
            node = self.parser.parse(text)

        new_references = [
            name for name in sorted(collect_cell_references(node)) if self.registry.add(name)
        ]

        return FormulaImportResult(
            success=success,
            formula=text,
            node=node,
            error_message=error_message,
            new_references=new_references,
        )


@lru_cache(maxsize=1)
def default_engine() -> FormulaEngine:
    """Shared engine built from the packaged settings."""
    return FormulaEngine()


def parse_formula(text: str) -> FormulaNode:
    """Parse formula text with the packaged settings; never raises."""
    return default_engine().parse(text)


def generate_formula(tree: Any) -> str:
    """Formula text for a node or tree document; never raises."""
    return default_engine().generate(tree)


__all__ = ["FormulaEngine", "default_engine", "parse_formula", "generate_formula"]
