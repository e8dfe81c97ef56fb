"""Tests for modelgen.config."""

from __future__ import annotations

from pathlib import Path

import pytest

from modelgen.config import DEFAULT_BUILD_TIMEOUT, ConfigError, ProjectConfig, load_config
from tests._fixtures.project_builder import ProjectBuilder


def test_load_config_returns_defaults_when_missing(project_builder: ProjectBuilder) -> None:
    config = load_config(project_builder.path())

    assert isinstance(config, ProjectConfig)
    assert config.root == project_builder.path().resolve()
    assert config.name == "project"
    assert config.source_dir == config.root / "."
    assert config.output_dir is None
    assert [spec.text for spec in config.models.serialize_keywords] == ["to_json"]
    assert [spec.text for spec in config.models.deserialize_keywords] == ["from_json"]
    assert config.build.command == []
    assert config.build.timeout == DEFAULT_BUILD_TIMEOUT


def test_load_config_parses_expected_fields(project_builder: ProjectBuilder) -> None:
    project_builder.configure(
        """
        name: shop_api
        source_dir: src
        output_dir: src/generated
        models:
          extensions: [dto]
          serialize_keywords:
            - keyword: as_dict
          deserialize_keywords:
            - keyword: parse
        build:
          command: ["python", "-m", "codegen"]
          timeout: 30
        """
    )

    config = load_config(project_builder.path())
    root = project_builder.path().resolve()

    assert config.name == "shop_api"
    assert config.source_dir == root / "src"
    assert config.output_dir == root / "src" / "generated"
    assert ".dto" in config.models.resolve_extensions()
    assert [spec.text for spec in config.models.serialize_keywords] == ["as_dict", "to_json"]
    assert [spec.text for spec in config.models.deserialize_keywords] == ["parse", "from_json"]
    assert config.build.command == ["python", "-m", "codegen"]
    assert config.build.timeout == pytest.approx(30.0)


def test_load_config_accepts_camel_case_keywords_and_string_command(project_builder: ProjectBuilder) -> None:
    project_builder.configure(
        """
        models:
          serializeKeywords:
            - keyword: dump
          deserializeKeywords:
            - load
        build:
          command: "make models"
        """
    )

    config = load_config(project_builder.path())

    assert config.models.is_serialize_keyword("dump")
    assert config.models.is_deserialize_keyword("load")
    assert config.build.command == ["make", "models"]


def test_load_config_rejects_invalid_yaml(project_builder: ProjectBuilder) -> None:
    project_builder.configure("models: [unterminated\n")

    with pytest.raises(ConfigError):
        load_config(project_builder.path())


def test_load_config_rejects_non_mapping_root(project_builder: ProjectBuilder) -> None:
    project_builder.configure("- just\n- a list\n")

    with pytest.raises(ConfigError, match="mapping"):
        load_config(project_builder.path())


def test_load_config_rejects_empty_keyword(project_builder: ProjectBuilder) -> None:
    project_builder.configure(
        """
        models:
          serialize_keywords:
            - keyword: ""
        """
    )

    with pytest.raises(ConfigError, match="keyword"):
        load_config(project_builder.path())


def test_load_config_rejects_non_positive_timeout(project_builder: ProjectBuilder) -> None:
    project_builder.configure("build:\n  timeout: 0\n")

    with pytest.raises(ConfigError, match="timeout"):
        load_config(project_builder.path())


def test_load_config_rejects_missing_project(tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="not found"):
        load_config(tmp_path / "missing")
