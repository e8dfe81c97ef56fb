"""Tests for modelgen.orchestrator."""

from __future__ import annotations

import importlib.util
from pathlib import Path
from types import ModuleType

import pytest

from modelgen.analyzer import AnalysisError
from modelgen.build import BuildError
from modelgen.config import ConfigError
from modelgen.orchestrator import Orchestrator, Stage
from modelgen.provider import ModelProvider, UnsupportedModelError
from tests._fixtures.project_builder import USER_MODEL, WIDGET_MODEL, ProjectBuilder


def _seed_project(project_builder: ProjectBuilder, package: str) -> None:
    project_builder.configure(f"name: {package}_app\nsource_dir: src\noutput_dir: src\n")
    project_builder.write(
        {
            f"src/{package}/__init__.py": "",
            f"src/{package}/user.py": USER_MODEL,
            f"src/{package}/user.g.py": "# generated companion\n",
            f"src/{package}/widget.py": WIDGET_MODEL,
            f"src/{package}/util.py": "def slug(value):\n    return value.lower()\n",
        }
    )


def _load_provider(path: Path, monkeypatch: pytest.MonkeyPatch) -> ModuleType:
    monkeypatch.syspath_prepend(str(path.parent))
    spec = importlib.util.spec_from_file_location(f"_provider_{path.parent.parent.name}", path)
    assert spec is not None and spec.loader is not None
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def test_generate_writes_provider_and_reports_models(project_builder: ProjectBuilder) -> None:
    _seed_project(project_builder, "shop_a")
    orchestrator = Orchestrator()

    result = orchestrator.run_generate(project_builder.path())

    assert result.path == project_builder.path("src/model_provider.py").resolve()
    assert result.model_names == ["User", "Widget"]
    assert result.provider_class == "ShopAAppModelProvider"
    assert orchestrator.stage is Stage.DONE

    content = result.path.read_text(encoding="utf-8")
    assert "from shop_a.user import User\n" in content
    assert "from shop_a.widget import Widget\n" in content
    assert "user.g" not in content


def test_generated_provider_round_trips_and_rejects_unsupported(
    project_builder: ProjectBuilder, monkeypatch: pytest.MonkeyPatch
) -> None:
    _seed_project(project_builder, "shop_b")
    result = Orchestrator().run_generate(project_builder.path())

    module = _load_provider(result.path, monkeypatch)
    provider = module.ShopBAppModelProvider()
    assert isinstance(provider, ModelProvider)

    user = module.User(name="Ada", age=36)
    payload = provider.to_json(user)
    assert payload == {"name": "Ada", "age": 36}
    assert provider.from_json(module.User, payload) == user
    assert provider.from_json("User", payload) == user

    widget = module.Widget("knob")
    assert provider.to_json(widget) == {"label": "knob"}
    with pytest.raises(UnsupportedModelError) as excinfo:
        provider.from_json(module.Widget, {"label": "knob"})
    assert excinfo.value.model is module.Widget


def test_generate_is_byte_identical_across_runs(project_builder: ProjectBuilder) -> None:
    _seed_project(project_builder, "shop_c")
    orchestrator = Orchestrator()

    first = orchestrator.run_generate(project_builder.path()).path.read_bytes()
    second = orchestrator.run_generate(project_builder.path()).path.read_bytes()

    assert first == second


def test_output_argument_overrides_configured_directory(project_builder: ProjectBuilder, tmp_path: Path) -> None:
    _seed_project(project_builder, "shop_d")
    out_dir = tmp_path / "out"

    result = Orchestrator().run_generate(project_builder.path(), out_dir)

    assert result.path == out_dir / "model_provider.py"
    assert result.path.exists()
    assert not project_builder.path("src/model_provider.py").exists()


def test_analysis_failure_leaves_existing_artifact_untouched(project_builder: ProjectBuilder) -> None:
    _seed_project(project_builder, "shop_e")
    orchestrator = Orchestrator()
    artifact = orchestrator.run_generate(project_builder.path()).path
    before = artifact.read_bytes()

    project_builder.write({"src/shop_e/broken.py": "class Broken(:\n    def to_json(self): ...\n"})

    with pytest.raises(AnalysisError):
        orchestrator.run_generate(project_builder.path())

    assert orchestrator.stage is Stage.FAILED
    assert artifact.read_bytes() == before
    assert [p.name for p in artifact.parent.iterdir() if p.name.endswith(".tmp")] == []


def test_config_failure_has_no_side_effects(project_builder: ProjectBuilder) -> None:
    _seed_project(project_builder, "shop_f")
    project_builder.configure("models: [unterminated\n")
    calls: list[list[str]] = []

    def runner(args, *, cwd, timeout, on_line):  # pragma: no cover - must not run
        calls.append(list(args))
        return 0

    orchestrator = Orchestrator(build_runner=runner)
    with pytest.raises(ConfigError):
        orchestrator.run_generate(project_builder.path())

    assert orchestrator.stage is Stage.FAILED
    assert calls == []
    assert not project_builder.path("model_provider.py").exists()


def test_build_step_runs_before_collecting(project_builder: ProjectBuilder) -> None:
    project_builder.configure("name: gen\nbuild:\n  command: [codegen, --all]\n  timeout: 5\n")
    seen: list[dict[str, object]] = []

    def runner(args, *, cwd, timeout, on_line):
        seen.append({"args": list(args), "cwd": cwd, "timeout": timeout})
        # Simulate the build materializing a model on disk.
        (Path(cwd) / "order.py").write_text(
            "class Order:\n    def to_json(self):\n        return {}\n", encoding="utf-8"
        )
        on_line("built 1 file")
        return 0

    result = Orchestrator(build_runner=runner).run_generate(project_builder.path())

    assert seen == [
        {"args": ["codegen", "--all"], "cwd": project_builder.path().resolve(), "timeout": 5.0}
    ]
    assert result.model_names == ["Order"]


def test_build_failure_aborts_generation(project_builder: ProjectBuilder) -> None:
    _seed_project(project_builder, "shop_g")
    project_builder.configure("source_dir: src\nbuild:\n  command: [codegen]\n")

    def runner(args, *, cwd, timeout, on_line):
        return 2

    orchestrator = Orchestrator(build_runner=runner)
    with pytest.raises(BuildError) as excinfo:
        orchestrator.run_generate(project_builder.path())

    assert excinfo.value.returncode == 2
    assert orchestrator.stage is Stage.FAILED
    assert not project_builder.path("model_provider.py").exists()


def test_skip_build_bypasses_configured_command(project_builder: ProjectBuilder) -> None:
    _seed_project(project_builder, "shop_h")
    project_builder.configure("source_dir: src\nbuild:\n  command: [codegen]\n")

    def runner(args, *, cwd, timeout, on_line):  # pragma: no cover - must not run
        raise AssertionError("build step should have been skipped")

    result = Orchestrator(build_runner=runner).run_generate(project_builder.path(), run_build=False)

    assert result.model_names == ["User", "Widget"]
    assert result.path == project_builder.path("model_provider.py").resolve()


@pytest.mark.parametrize("relative", ["src/api-v1/user.py", "src/user.v2.py"])
def test_non_importable_model_path_aborts_without_writing(project_builder: ProjectBuilder, relative: str) -> None:
    project_builder.configure("name: paths\nsource_dir: src\noutput_dir: src\n")
    project_builder.write({relative: USER_MODEL})
    orchestrator = Orchestrator()

    with pytest.raises(AnalysisError, match="not importable"):
        orchestrator.run_generate(project_builder.path())

    assert orchestrator.stage is Stage.FAILED
    assert not project_builder.path("src/model_provider.py").exists()


def test_models_named_like_typing_helpers_import_cleanly(
    project_builder: ProjectBuilder, monkeypatch: pytest.MonkeyPatch
) -> None:
    project_builder.configure("name: shop_i\nsource_dir: src\noutput_dir: src\n")
    project_builder.write(
        {
            "src/shop_i/__init__.py": "",
            "src/shop_i/shapes.py": """
                class Mapping:
                    def __init__(self, size):
                        self.size = size

                    def to_json(self):
                        return {"size": self.size}

                    @classmethod
                    def from_json(cls, data):
                        return cls(data["size"])

                class Any:
                    def to_json(self):
                        return {}

                class Dict:
                    def to_json(self):
                        return {}

                class Callable:
                    def to_json(self):
                        return {}
            """,
        }
    )

    result = Orchestrator().run_generate(project_builder.path())
    module = _load_provider(result.path, monkeypatch)
    provider = module.ShopIModelProvider()

    restored = provider.from_json(module.Mapping, provider.to_json(module.Mapping(3)))
    assert isinstance(restored, module.Mapping)
    assert restored.size == 3
    assert provider.to_json(module.Any()) == {}
    assert set(provider.model_tags) == {"Any", "Callable", "Dict", "Mapping"}
