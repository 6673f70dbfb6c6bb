"""
Tests for wiring the orchestration stack from configuration.
"""

from pathlib import Path

from devagent.cli.runtime import build_runtime, build_validator
from devagent.config import Config
from devagent.security import FileOperation, WhitelistStore, WhitelistValidator


class FakeTransport:
    async def call(self, conversation, tools, system_prompt):
        raise AssertionError("not called")


class TestBuildRuntime:
    """Tests for build_runtime."""

    def test_configured_roots(self, mock_devagent_home: Path, workspace: Path) -> None:
        config = Config.model_validate({"whitelist": {"roots": [str(workspace)]}})

        runtime = build_runtime(config, transport=FakeTransport())

        assert runtime.validator.is_allowed(workspace / "README.md", FileOperation.READ)
        assert runtime.engine.registry is runtime.registry
        assert isinstance(runtime.loop.transport, FakeTransport)
        assert "read_file" in runtime.registry

    def test_persisted_roots_are_loaded(self, mock_devagent_home: Path, workspace: Path) -> None:
        stored = WhitelistValidator()
        stored.add_root(workspace, [FileOperation.READ])
        WhitelistStore(mock_devagent_home / "whitelist.json").save(stored.policy)

        validator = build_validator(Config())

        assert validator.is_allowed(workspace / "README.md", FileOperation.READ)
        assert not validator.is_allowed(workspace / "new.txt", FileOperation.WRITE)

    def test_persistence_disabled(self, mock_devagent_home: Path, workspace: Path) -> None:
        stored = WhitelistValidator()
        stored.add_root(workspace, [FileOperation.READ])
        WhitelistStore(mock_devagent_home / "whitelist.json").save(stored.policy)

        validator = build_validator(Config.model_validate({"whitelist": {"persist": False}}))

        assert len(validator) == 0

    def test_loop_limits_from_config(self, mock_devagent_home: Path) -> None:
        config = Config.model_validate({"agent": {"max_iterations": 3, "max_retries": 1}})

        runtime = build_runtime(config, transport=FakeTransport())

        assert runtime.loop.config.max_iterations == 3
        assert runtime.loop.retry_policy.max_attempts == 2
