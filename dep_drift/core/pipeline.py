"""Drift pipeline: parse, look up latest versions, classify, annotate."""

import asyncio
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from ..config import DriftConfig
from ..errors import FetchError, describe_error
from ..registries import JsonFetcher, RegistryClient, get_registry_client
from ..utils.logging import get_logger
from ..utils.performance import PerformanceMonitor
from .cache import RegistryLookup, ResultCache
from .classifier import GREY, RED, Drift, Fragment, VersionDriftClassifier
from .parsers import BaseParser, DependencyRecord, ParserRegistry
from .parsers import registry as default_parsers
from .versioning import satisfies

ARROW = " -> "


@dataclass
class Annotation:
    """Rendered drift for one manifest line."""

    source_line: int
    name: str
    fragments: List[Fragment] = field(default_factory=list)
    record: Optional[DependencyRecord] = None
    drift: Optional[Drift] = None
    error: Optional[str] = None

    @property
    def text(self) -> str:
        return "".join(text for text, _ in self.fragments)


class AnnotationSink(ABC):
    """Receiver of per-line annotations, e.g. an editor or a console."""

    @abstractmethod
    def set_text(self, line: int, fragments: List[Fragment]) -> None:
        """Attach styled fragments to a manifest line."""


def publish(annotations: Iterable[Annotation], sink: AnnotationSink) -> int:
    """Hand annotations to a sink in order, returning how many were sent."""
    count = 0
    for annotation in annotations:
        sink.set_text(annotation.source_line, annotation.fragments)
        count += 1
    return count


@dataclass
class EcosystemContext:
    """Everything needed to check manifests of one ecosystem.

    The cache lives as long as the context, so reusing a context across
    passes is what makes repeated checks cheap.
    """

    parser: BaseParser
    client: RegistryClient
    cache: ResultCache
    classifier: VersionDriftClassifier

    @property
    def ecosystem(self) -> str:
        return self.parser.ecosystem

    @classmethod
    def create(
        cls,
        parser: BaseParser,
        fetcher: Optional[JsonFetcher] = None,
        config: Optional[DriftConfig] = None
    ) -> "EcosystemContext":
        """Build a context for ``parser``'s ecosystem.

        Raises:
            ValueError: If the ecosystem has no registry client
        """
        config = config or DriftConfig()
        return cls(
            parser=parser,
            client=get_registry_client(parser.ecosystem, fetcher),
            cache=ResultCache(ttl=config.cache_ttl),
            classifier=VersionDriftClassifier(parser.bare_operator),
        )


def build_contexts(
    fetcher: Optional[JsonFetcher] = None,
    config: Optional[DriftConfig] = None,
    parsers: Optional[ParserRegistry] = None
) -> Dict[str, EcosystemContext]:
    """One context per registered parser, keyed by ecosystem name."""
    parsers = parsers or default_parsers
    return {
        parser.ecosystem: EcosystemContext.create(parser, fetcher, config)
        for parser in parsers
    }


class DriftPipeline:
    """Runs one check pass over a manifest and its lockfile."""

    def __init__(
        self,
        config: Optional[DriftConfig] = None,
        monitor: Optional[PerformanceMonitor] = None
    ) -> None:
        """Initialize the pipeline.

        Args:
            config: Concurrency settings
            monitor: Collector for phase timings, shared across passes
        """
        self.config = config or DriftConfig()
        self.performance_monitor = monitor or PerformanceMonitor()
        self.logger = get_logger(__name__)

    async def analyze(
        self,
        manifest_text: str,
        lockfile_text: str,
        context: EcosystemContext
    ) -> List[Annotation]:
        """Check every declared dependency against its registry.

        Args:
            manifest_text: Raw manifest content
            lockfile_text: Raw lockfile content, empty when absent
            context: Parser, client, cache and classifier to use

        Returns:
            One annotation per declared dependency, in manifest order

        Raises:
            ParseError: If the manifest is malformed; nothing is fetched
        """
        with self.performance_monitor.measure("parse"):
            records = context.parser.get_dependencies(manifest_text, lockfile_text)

        with self.performance_monitor.measure("fetch"):
            lookups = await self.fetch_latest(records, context)

        context.cache.update(lookups)

        with self.performance_monitor.measure("classify"):
            annotations = [
                self.annotate(record, lookup, context)
                for record, lookup in zip(records, lookups)
            ]

        failed = sum(1 for lookup in lookups if lookup.error)
        cached = sum(1 for lookup in lookups if lookup.cached)
        self.logger.debug(
            f"{context.parser.manifest_name}: {len(records)} dependencies, "
            f"{cached} cached, {failed} failed"
        )
        return annotations

    async def fetch_latest(
        self,
        records: List[DependencyRecord],
        context: EcosystemContext
    ) -> List[RegistryLookup]:
        """Look up latest versions concurrently, preserving record order.

        Fetch failures become failed lookups instead of propagating.
        """
        semaphore = asyncio.Semaphore(self.config.max_concurrent)

        async def lookup(record: DependencyRecord) -> RegistryLookup:
            cached = record.name in context.cache
            async with semaphore:
                try:
                    latest = await context.cache.get(record, context.client.get_max_version)
                except FetchError as e:
                    self.logger.warning(f"{context.client.name}: {describe_error(e)}")
                    return RegistryLookup(record.name, error=str(e))
            return RegistryLookup(record.name, latest=latest, cached=cached)

        return list(await asyncio.gather(*(lookup(record) for record in records)))

    def annotate(
        self,
        record: DependencyRecord,
        lookup: RegistryLookup,
        context: EcosystemContext
    ) -> Annotation:
        """Build the annotation fragments for one dependency."""
        matched = satisfies(record.requirement, record.resolved_current, context.parser.bare_operator)
        current_style = RED if matched is False else GREY
        fragments: List[Fragment] = [(record.current_display, current_style)]

        if not lookup.ok:
            fragments.append((f" Error retrieving version for {record.name}", GREY))
            return Annotation(record.source_line, record.name, fragments, record, error=lookup.error)

        drift = context.classifier.classify(record.resolved_current, lookup.latest, record.requirement)
        if drift.fragments:
            fragments.append((ARROW, GREY))
            fragments.extend(drift.fragments)
        return Annotation(record.source_line, record.name, fragments, record, drift=drift)

