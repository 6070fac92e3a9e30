"""DepDrift - A CLI tool reporting how far locked dependencies have drifted from their registries."""

__version__ = "0.1.0"
__author__ = "DepDrift Team"

from .core.parsers import DependencyParser
from .core.classifier import Severity, VersionDriftClassifier
from .core.pipeline import DriftPipeline

__all__ = ["DependencyParser", "Severity", "VersionDriftClassifier", "DriftPipeline"]
