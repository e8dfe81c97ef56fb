"""Discover serializable classes and generate a type-dispatching model provider."""

from .analyzer import AnalysisError, DuplicateModelError, ModelAnalyzer
from .build import BuildError, BuildStep
from .collector import FileCollector
from .config import ConfigError, ProjectConfig, load_config
from .emitter import CodeEmitter
from .keywords import KeywordRole, KeywordSpec, ModelsConfig
from .models import Model, Registry
from .orchestrator import GenerationResult, Orchestrator
from .provider import ModelProvider, UnsupportedModelError

__version__ = "0.1.0"

__all__ = [
    "AnalysisError",
    "BuildError",
    "BuildStep",
    "CodeEmitter",
    "ConfigError",
    "DuplicateModelError",
    "FileCollector",
    "GenerationResult",
    "KeywordRole",
    "KeywordSpec",
    "Model",
    "ModelAnalyzer",
    "ModelProvider",
    "ModelsConfig",
    "Orchestrator",
    "ProjectConfig",
    "Registry",
    "UnsupportedModelError",
    "load_config",
]
