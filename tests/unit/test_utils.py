"""Unit tests for the dependency guard and logging setup."""

import logging

import pytest

from pdf_inspector.exceptions import DependencyError
from pdf_inspector.logging_utils import configure_logging
from pdf_inspector.utils.decorators import requires_dependencies
from pdf_inspector.utils.packages import check_requirement


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    configure_logging(logging.WARNING)
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.mark.unit
class TestCheckRequirement:
    """Test distribution lookups."""

    def test_installed_distribution(self) -> None:
        status = check_requirement("pymupdf>=1.0")
        assert status.name == "pymupdf"
        assert status.installed is not None
        assert status.satisfied

    def test_version_outside_specifier(self) -> None:
        status = check_requirement("pymupdf>=999")
        assert status.installed is not None
        assert not status.satisfied

    def test_missing_distribution(self) -> None:
        status = check_requirement("pdf-inspector-no-such-dist>=1.0")
        assert status.installed is None
        assert not status.satisfied

    def test_bare_name_accepts_any_version(self) -> None:
        assert check_requirement("pymupdf").satisfied


@pytest.mark.unit
class TestRequiresDependencies:
    """Test the dependency guard decorator."""

    def test_satisfied_calls_through(self) -> None:
        @requires_dependencies("Test component", [("fitz", "pymupdf>=1.0")])
        def run(value):
            return value * 2

        assert run(4) == 8

    def test_missing_module(self) -> None:
        @requires_dependencies("Test component", [("pdf_inspector_no_such_module", "pdf-inspector-no-such-dist>=2.0")])
        def run():
            raise AssertionError("should not be called")

        with pytest.raises(DependencyError) as exc_info:
            run()
        assert exc_info.value.missing_packages == [("pdf-inspector-no-such-dist", ">=2.0")]
        assert 'Install with: pip install --upgrade "pdf-inspector-no-such-dist>=2.0"' in str(exc_info.value)
        assert isinstance(exc_info.value.__cause__, ImportError)

    def test_version_mismatch(self) -> None:
        @requires_dependencies("Test component", [("fitz", "pymupdf>=999")])
        def run():
            raise AssertionError("should not be called")

        with pytest.raises(DependencyError) as exc_info:
            run()
        ((name, required, installed),) = exc_info.value.version_mismatches
        assert (name, required) == ("pymupdf", ">=999")
        assert installed
        assert "version mismatches" in str(exc_info.value)


@pytest.mark.unit
class TestConfigureLogging:
    """Test root logger configuration."""

    def test_level_names_and_numbers(self, restore_root_logger) -> None:
        assert configure_logging("info").level == logging.INFO
        assert configure_logging(logging.ERROR).level == logging.ERROR
        assert configure_logging("not-a-level").level == logging.WARNING

    def test_trace_forces_debug(self, restore_root_logger) -> None:
        root = configure_logging("error", trace_mode=True)
        assert root.level == logging.DEBUG
        assert "%(name)s" in root.handlers[0].formatter._fmt

    def test_handlers_are_replaced(self, restore_root_logger) -> None:
        configure_logging("warning")
        root = configure_logging("warning")
        assert len(root.handlers) == 1

    def test_log_file(self, restore_root_logger, tmp_path) -> None:
        log_file = tmp_path / "run.log"
        root = configure_logging("info", log_file=str(log_file))
        logging.getLogger("pdf_inspector.test").info("hello from the test")
        for handler in root.handlers:
            handler.flush()
        content = log_file.read_text(encoding="utf-8")
        assert "Logging to file" in content
        assert "hello from the test" in content

    def test_unwritable_log_file_warns(self, restore_root_logger, tmp_path) -> None:
        root = configure_logging("info", log_file=str(tmp_path / "missing" / "run.log"))
        assert len(root.handlers) == 1
