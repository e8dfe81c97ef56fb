"""Pipeline orchestration for the generate-models flow."""

from __future__ import annotations

import logging
import os
import tempfile
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable, List

from .analyzer import ModelAnalyzer
from .build import BuildStep
from .collector import PROVIDER_FILENAME, FileCollector
from .config import ProjectConfig, load_config
from .emitter import CodeEmitter, provider_class_name
from .logging import get_logger, progress
from .models import Model, Registry


class Stage(str, Enum):
    """Pipeline stages, in execution order."""

    IDLE = "idle"
    CONFIG_LOADING = "config_loading"
    BUILD_STEP = "build_step"
    COLLECTING = "collecting"
    ANALYZING = "analyzing"
    EMITTING = "emitting"
    WRITING = "writing"
    DONE = "done"
    FAILED = "failed"


@dataclass
class GenerationResult:
    """Outcome of a successful generate-models run."""

    path: Path
    models: List[Model]
    provider_class: str

    @property
    def model_names(self) -> List[str]:
        return [model.name for model in self.models]


class Orchestrator:
    """Coordinates config loading, build, collection, analysis, emission and writing."""

    def __init__(
        self,
        *,
        config_loader: Callable[[Path], ProjectConfig] = load_config,
        analyzer: ModelAnalyzer | None = None,
        emitter: CodeEmitter | None = None,
        build_runner: Callable[..., int] | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.config_loader = config_loader
        self.logger = logger or get_logger("orchestrator")
        self.analyzer = analyzer or ModelAnalyzer(logger=self.logger.getChild("analyzer"))
        self.emitter = emitter or CodeEmitter()
        self._build_runner = build_runner
        self.stage = Stage.IDLE

    def load_config(self, project_path: str | Path) -> ProjectConfig:
        self.stage = Stage.CONFIG_LOADING
        try:
            return self.config_loader(Path(project_path))
        except Exception:
            self.stage = Stage.FAILED
            raise

    def run_generate(
        self,
        project_path: str | Path,
        output: str | Path | None = None,
        *,
        run_build: bool = True,
    ) -> GenerationResult:
        """Regenerate ``model_provider.py`` for the project at ``project_path``."""
        config = self.load_config(project_path)
        self.logger.info("Generating models for %s", config.root)
        try:
            if run_build:
                self.stage = Stage.BUILD_STEP
                self._run_build(config)
            result = self.generate_model_provider(config, output)
        except Exception:
            self.stage = Stage.FAILED
            raise
        self.stage = Stage.DONE
        return result

    def generate_model_provider(
        self, config: ProjectConfig, output: str | Path | None = None
    ) -> GenerationResult:
        """Scan, analyze and emit for an already loaded configuration."""
        with progress(self.logger, "Generating model provider..."):
            self.stage = Stage.COLLECTING
            collector = FileCollector(config.models, logger=self.logger.getChild("collector"))
            files = collector.collect(config.source_dir)

            self.stage = Stage.ANALYZING
            models = self.analyzer.analyze(files, config.models, config.source_dir)
            registry = Registry(models=models)

            self.stage = Stage.EMITTING
            class_name = provider_class_name(config.name)
            content = self.emitter.emit(registry, class_name, project_name=config.name)

            self.stage = Stage.WRITING
            target = self._output_path(config, output)
            _write_atomic(target, content)

        if models:
            self.logger.info("Added %s to the model provider", ", ".join(registry.names))
        else:
            self.logger.warning("No models discovered under %s", config.source_dir)
        self.logger.info("Model provider written to %s", target)
        return GenerationResult(path=target, models=models, provider_class=class_name)

    def _run_build(self, config: ProjectConfig) -> None:
        step = BuildStep(
            config.build.command,
            timeout=config.build.timeout,
            runner=self._build_runner,
            logger=self.logger.getChild("build"),
        )
        if not step.enabled:
            self.logger.debug("Build step disabled; using companion files already on disk")
            return
        with progress(self.logger, "Running build step..."):
            step.run(config.root)

    @staticmethod
    def _output_path(config: ProjectConfig, output: str | Path | None) -> Path:
        if output is not None:
            directory = Path(output).expanduser()
            if not directory.is_absolute():
                directory = Path.cwd() / directory
        else:
            directory = config.output_dir or config.root
        return directory / PROVIDER_FILENAME


def _write_atomic(target: Path, content: str) -> None:
    target.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{target.name}.", suffix=".tmp", dir=str(target.parent))
    tmp_path = Path(tmp_name)
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="\n") as handle:
            handle.write(content)
        os.replace(tmp_path, target)
    except BaseException:
        tmp_path.unlink(missing_ok=True)
        raise


__all__ = ["GenerationResult", "Orchestrator", "Stage"]
