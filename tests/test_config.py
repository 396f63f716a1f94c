from pathlib import Path
import textwrap

import pytest

from pairer.configs import (
    DEFAULT_CONFIG,
    get_config_value,
    load_config,
    merge_config,
    validate_config,
)
from pairer.profiles import PreceptorLayout, StudentLayout

PROJECT_ROOT = Path(__file__).parent.parent


def test_defaults_when_no_path():
    config = load_config()
    assert config == DEFAULT_CONFIG
    assert config is not DEFAULT_CONFIG
    assert validate_config(config) == []


def test_shipped_config_is_valid():
    config = load_config(str(PROJECT_ROOT / "configs" / "config.yaml"))
    assert validate_config(config) == []
    assert StudentLayout.from_config(config) == StudentLayout()
    assert PreceptorLayout.from_config(config) == PreceptorLayout()


def test_file_values_override_defaults(tmp_path: Path):
    path = tmp_path / "config.yaml"
    path.write_text(textwrap.dedent("""\
        global:
          log_level: DEBUG
        output:
          format: csv
    """), encoding="utf-8")
    config = load_config(str(path))
    assert config["global"]["log_level"] == "DEBUG"
    assert config["output"]["format"] == "csv"
    assert config["output"]["path"] is None
    assert config["scoring"]["weights"]["practice"] == 0.5


def test_weights_replace_defaults_as_a_whole(tmp_path: Path):
    path = tmp_path / "config.yaml"
    path.write_text(textwrap.dedent("""\
        scoring:
          weights:
            practice: 0.7
            gender: 0.15
            language: 0.15
    """), encoding="utf-8")
    config = load_config(str(path))
    assert config["scoring"]["weights"] == {"practice": 0.7, "gender": 0.15, "language": 0.15}
    assert config["scoring"]["no_preference_baseline"] == 0.75
    assert validate_config(config) == []


def test_missing_and_empty_files(tmp_path: Path):
    with pytest.raises(FileNotFoundError):
        load_config(str(tmp_path / "missing.yaml"))

    empty = tmp_path / "empty.yaml"
    empty.write_text("", encoding="utf-8")
    with pytest.raises(ValueError):
        load_config(str(empty))

    not_mapping = tmp_path / "list.yaml"
    not_mapping.write_text("- a\n- b\n", encoding="utf-8")
    with pytest.raises(ValueError):
        load_config(str(not_mapping))


def test_validate_flags_bad_values():
    config = merge_config(DEFAULT_CONFIG, {
        "scoring": {"no_preference_baseline": 2.0, "min_score": 0},
        "output": {"format": "xml"},
    })
    config["scoring"]["weights"] = {"practice": 0.9, "gender": 0.3}
    issues = validate_config(config)
    assert any("sum to 1" in i for i in issues)
    assert any("scoring.weights.language" in i for i in issues)
    assert any("baseline" in i for i in issues)
    assert any("min_score" in i for i in issues)
    assert any("output format" in i for i in issues)


def test_validate_flags_unknown_attribute_group():
    config = merge_config(DEFAULT_CONFIG, {})
    config["scoring"]["weights"] = {"practise": 0.5, "setting": 0.2, "gender": 0.15, "language": 0.15}
    issues = validate_config(config)
    assert issues == ["Unknown attribute groups in scoring.weights: ['practise']"]


def test_validate_flags_missing_sections():
    issues = validate_config({"scoring": DEFAULT_CONFIG["scoring"]})
    assert "Missing required section: global" in issues
    assert "Missing required section: output" in issues


def test_merge_config_does_not_modify_inputs():
    base = {"a": {"x": 1, "y": 2}}
    override = {"a": {"y": 3}, "b": 4}
    merged = merge_config(base, override)
    assert merged == {"a": {"x": 1, "y": 3}, "b": 4}
    assert base == {"a": {"x": 1, "y": 2}}


def test_get_config_value():
    assert get_config_value(DEFAULT_CONFIG, "scoring.weights.gender") == 0.15
    assert get_config_value(DEFAULT_CONFIG, "scoring.missing.key", "fallback") == "fallback"
    assert get_config_value(DEFAULT_CONFIG, "output.path", "x") is None
