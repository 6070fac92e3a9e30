"""Core drift-checking functionality for DepDrift."""

from .parsers import DependencyParser, DependencyRecord
from .classifier import Drift, Severity, VersionDriftClassifier
from .cache import RegistryLookup, ResultCache
from .pipeline import Annotation, AnnotationSink, DriftPipeline, EcosystemContext, build_contexts, publish

__all__ = [
    "DependencyParser",
    "DependencyRecord",
    "Drift",
    "Severity",
    "VersionDriftClassifier",
    "RegistryLookup",
    "ResultCache",
    "Annotation",
    "AnnotationSink",
    "DriftPipeline",
    "EcosystemContext",
    "build_contexts",
    "publish",
]
