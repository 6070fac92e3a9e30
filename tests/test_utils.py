"""Tests for logging, performance and path utilities."""

import asyncio
import logging
import pytest
from pathlib import Path
from unittest.mock import patch

from dep_drift.utils.logging import ROOT_LOGGER, get_logger, setup_logging
from dep_drift.utils.path_utils import PathFilter, find_manifest_files, read_text_or_empty
from dep_drift.utils.performance import BENCHMARK_ENV_VAR, PerformanceMonitor, benchmark

MANIFESTS = ["Cargo.toml", "Pipfile", "package.json"]


@pytest.fixture
def workspace(tmp_path):
    """Create a tree with manifests, including ignored ones."""
    (tmp_path / "Cargo.toml").write_text("[dependencies]\n")
    (tmp_path / "api").mkdir()
    (tmp_path / "api" / "Pipfile").write_text("[packages]\n")
    (tmp_path / "web").mkdir()
    (tmp_path / "web" / "package.json").write_text("{}")
    (tmp_path / "web" / "node_modules" / "lodash").mkdir(parents=True)
    (tmp_path / "web" / "node_modules" / "lodash" / "package.json").write_text("{}")
    (tmp_path / "README.md").write_text("# demo\n")
    return tmp_path


class TestFindManifestFiles:
    """Test manifest discovery."""

    def test_recursive_search(self, workspace):
        """Test that manifests are found and vendored ones skipped."""
        found = find_manifest_files(workspace, MANIFESTS)

        assert found == sorted([
            workspace / "Cargo.toml",
            workspace / "api" / "Pipfile",
            workspace / "web" / "package.json",
        ])

    def test_extra_ignore_patterns(self, workspace):
        """Test user-supplied ignore globs."""
        found = find_manifest_files(workspace, MANIFESTS, ["**/api/**"])

        assert workspace / "api" / "Pipfile" not in found
        assert len(found) == 2

    def test_single_file(self, workspace):
        """Test that a manifest path is accepted as is."""
        assert find_manifest_files(workspace / "Cargo.toml", MANIFESTS) == [workspace / "Cargo.toml"]

    def test_unsupported_file(self, workspace):
        """Test that other files are rejected."""
        with pytest.raises(ValueError, match="Not a supported manifest"):
            find_manifest_files(workspace / "README.md", MANIFESTS)

    def test_missing_path(self, tmp_path):
        """Test that missing paths are rejected."""
        with pytest.raises(ValueError, match="does not exist"):
            find_manifest_files(tmp_path / "nope", MANIFESTS)


class TestPathHelpers:
    """Test path filtering and reading."""

    def test_path_filter(self):
        """Test default ignore patterns."""
        path_filter = PathFilter()

        assert path_filter.is_ignored(Path("/src/app/node_modules/x/package.json"))
        assert path_filter.is_ignored(Path("/src/crate/target/debug/Cargo.toml"))
        assert not path_filter.is_ignored(Path("/src/app/package.json"))

    def test_read_text_or_empty(self, tmp_path):
        """Test that absent files read as empty."""
        lockfile = tmp_path / "Cargo.lock"
        assert read_text_or_empty(lockfile) == ""

        lockfile.write_text("version = 3\n")
        assert read_text_or_empty(lockfile) == "version = 3\n"


class TestPerformanceMonitor:
    """Test phase timing."""

    def test_measure(self):
        """Test that measured phases are aggregated."""
        monitor = PerformanceMonitor()
        with monitor.measure("parse"):
            pass
        with monitor.measure("fetch"):
            pass
        with monitor.measure("parse"):
            pass

        summary = monitor.get_summary()
        assert summary["total_executions"] == 3
        assert summary["phases"]["parse"]["calls"] == 2
        assert summary["phases"]["fetch"]["calls"] == 1

    def test_measure_records_on_error(self):
        """Test that failing phases are still timed."""
        monitor = PerformanceMonitor()
        with pytest.raises(RuntimeError):
            with monitor.measure("fetch"):
                raise RuntimeError("boom")

        assert monitor.metrics[0].name == "fetch"

    def test_empty_summary(self):
        """Test that an unused monitor has no summary."""
        assert PerformanceMonitor().get_summary() == {}


class TestBenchmark:
    """Test the benchmark decorator."""

    def test_sync_function(self):
        """Test that results pass through for plain functions."""
        @benchmark
        def add(a, b):
            return a + b

        assert add(1, 2) == 3
        assert add.__name__ == "add"

    def test_async_function(self):
        """Test that coroutine functions stay awaitable."""
        @benchmark
        async def double(value):
            return value * 2

        assert asyncio.run(double(4)) == 8

    def test_logs_only_when_enabled(self, monkeypatch):
        """Test the environment switch."""
        @benchmark
        def noop():
            return None

        with patch("dep_drift.utils.performance.logging.getLogger") as get_logger_mock:
            monkeypatch.delenv(BENCHMARK_ENV_VAR, raising=False)
            noop()
            get_logger_mock.assert_not_called()

            monkeypatch.setenv(BENCHMARK_ENV_VAR, "1")
            noop()
            get_logger_mock.return_value.info.assert_called_once()


class TestLogging:
    """Test logging setup."""

    def test_verbose_sets_debug(self):
        """Test that verbose mode lowers the package level."""
        setup_logging(verbose=True)
        assert logging.getLogger(ROOT_LOGGER).level == logging.DEBUG

        setup_logging()
        assert logging.getLogger(ROOT_LOGGER).level == logging.WARNING

    def test_single_rich_handler(self):
        """Test that creating many loggers attaches one console handler."""
        get_logger("dep_drift.a")
        get_logger("dep_drift.b")

        handlers = logging.getLogger(ROOT_LOGGER).handlers
        assert sum(1 for h in handlers if type(h).__name__ == "RichHandler") == 1

    def test_log_file(self, tmp_path):
        """Test writing a plain-text copy of the log."""
        log_file = tmp_path / "depdrift.log"
        setup_logging(level=logging.INFO, log_file=log_file)
        package_logger = logging.getLogger(ROOT_LOGGER)

        try:
            get_logger("dep_drift.tests").warning("registry unreachable")
            for handler in package_logger.handlers:
                handler.flush()
            assert "registry unreachable" in log_file.read_text()
        finally:
            for handler in list(package_logger.handlers):
                if isinstance(handler, logging.FileHandler):
                    package_logger.removeHandler(handler)
                    handler.close()
            setup_logging()
