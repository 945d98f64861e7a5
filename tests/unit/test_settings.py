"""Unit tests for compiler settings loading."""

import pytest
from pydantic import ValidationError

from formula_builder.core.errors import FormulaConfigError
from formula_builder.core.settings import CompilerSettings, load_settings


def test_packaged_defaults():
    settings = load_settings()

    assert settings.equality_symbol == "="
    assert settings.max_nesting_depth == 64
    assert "STRUC_HRS" in settings.known_references
    assert "[15401]" in settings.known_references
    assert "cell value 1" in settings.known_references


def test_load_from_file(tmp_path):
    config = tmp_path / "compiler.yaml"
    config.write_text(
        "known_references:\n"
        "  - net-pay\n"
        "equality_symbol: '=='\n"
        "max_nesting_depth: 8\n",
        encoding="utf-8",
    )

    settings = load_settings(config)

    assert settings.known_references == ["net-pay"]
    assert settings.equality_symbol == "=="
    assert settings.max_nesting_depth == 8


def test_empty_file_gives_defaults(tmp_path):
    config = tmp_path / "empty.yaml"
    config.write_text("", encoding="utf-8")

    assert load_settings(str(config)) == CompilerSettings()


def test_missing_file_raises(tmp_path):
    with pytest.raises(FormulaConfigError, match="Failed to load settings"):
        load_settings(tmp_path / "missing.yaml")


@pytest.mark.parametrize(
    "content",
    [
        "unknown_option: 1\n",
        "equality_symbol: '==='\n",
        "max_nesting_depth: 0\n",
        "known_references: [\n",
    ],
)
def test_invalid_file_raises(tmp_path, content):
    config = tmp_path / "bad.yaml"
    config.write_text(content, encoding="utf-8")

    with pytest.raises(FormulaConfigError):
        load_settings(config)


def test_non_mapping_file_raises(tmp_path):
    config = tmp_path / "list.yaml"
    config.write_text("- A1\n- B1\n", encoding="utf-8")

    with pytest.raises(FormulaConfigError, match="Expected a mapping"):
        load_settings(config)


def test_settings_validation():
    with pytest.raises(ValidationError):
        CompilerSettings(max_nesting_depth=0)
    with pytest.raises(ValidationError):
        CompilerSettings(equality_symbol="!=")
