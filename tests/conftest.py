"""
Pytest configuration and fixtures for devagent tests.
"""

import logging
import tempfile
from collections.abc import Generator
from pathlib import Path

import pytest
from typer.testing import CliRunner

from devagent.security import WhitelistValidator
from devagent.tools import ToolExecutionEngine, ToolRegistry
from devagent.tools.builtin import register_builtin_tools


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Typer CLI test runner."""
    return CliRunner()


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Provide a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir).resolve()


@pytest.fixture
def mock_devagent_home(temp_dir: Path, monkeypatch: pytest.MonkeyPatch) -> Generator[Path, None, None]:
    """Point DEVAGENT_HOME at an empty directory."""
    devagent_home = temp_dir / ".devagent"
    devagent_home.mkdir()
    monkeypatch.setenv("DEVAGENT_HOME", str(devagent_home))
    yield devagent_home


@pytest.fixture
def workspace(temp_dir: Path) -> Path:
    """A whitelisted project directory with a few files."""
    project = temp_dir / "project"
    (project / "src").mkdir(parents=True)
    (project / "README.md").write_text("# Demo\n")
    (project / "src" / "app.py").write_text("print('hello')\n")
    return project


@pytest.fixture
def validator(workspace: Path) -> WhitelistValidator:
    """Validator allowing every operation inside ``workspace``."""
    validator = WhitelistValidator()
    validator.add_root(workspace)
    return validator


@pytest.fixture
def registry(validator: WhitelistValidator) -> ToolRegistry:
    """Registry with the built-in file tools bound to ``validator``."""
    registry = ToolRegistry()
    register_builtin_tools(registry, validator)
    return registry


@pytest.fixture
def engine(registry: ToolRegistry) -> ToolExecutionEngine:
    return ToolExecutionEngine(registry, default_timeout=5)


@pytest.fixture(autouse=True)
def reset_devagent_logger() -> Generator[None, None, None]:
    """Undo configure_logging() so caplog sees devagent records."""
    yield
    logger = logging.getLogger("devagent")
    logger.handlers.clear()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
