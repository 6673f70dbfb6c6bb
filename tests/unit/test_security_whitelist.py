"""Tests for the filesystem whitelist."""

import os
import threading
from pathlib import Path

import pytest

from devagent.config.schema import WhitelistConfig
from devagent.security.whitelist import (
    AccessDeniedError,
    FileOperation,
    WhitelistPolicy,
    WhitelistRoot,
    WhitelistValidator,
    canonicalize,
    check_path_input,
)


class TestCanonicalize:
    """Tests for path canonicalization helpers."""

    def test_resolves_parent_segments(self, temp_dir: Path) -> None:
        path = canonicalize(temp_dir / "a" / ".." / "b")
        assert path == temp_dir / "b"

    def test_relative_path_is_anchored_at_cwd(
        self, workspace: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.chdir(workspace)
        assert canonicalize("src/app.py") == workspace / "src" / "app.py"

    def test_expands_home(self, temp_dir: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("HOME", str(temp_dir))
        assert canonicalize("~/notes.txt") == temp_dir / "notes.txt"

    def test_check_path_input_rejects_bad_strings(self) -> None:
        with pytest.raises(ValueError, match="empty"):
            check_path_input("   ")
        with pytest.raises(ValueError, match="NUL"):
            check_path_input("file\x00.txt")
        with pytest.raises(ValueError, match="exceeds"):
            check_path_input("a" * 5000)

    def test_check_path_input_returns_string(self) -> None:
        assert check_path_input(Path("/tmp/x")) == "/tmp/x"


class TestWhitelistValidator:
    """Tests for WhitelistValidator.validate()."""

    def test_allows_file_inside_root(self, validator: WhitelistValidator, workspace: Path) -> None:
        path = validator.validate(str(workspace / "README.md"), FileOperation.READ)
        assert path == workspace / "README.md"

    def test_returns_canonical_path(self, validator: WhitelistValidator, workspace: Path) -> None:
        raw = str(workspace / "src" / ".." / "README.md")
        assert validator.validate(raw, FileOperation.READ) == workspace / "README.md"

    def test_empty_whitelist_denies_everything(self, workspace: Path) -> None:
        validator = WhitelistValidator()

        with pytest.raises(AccessDeniedError) as exc_info:
            validator.validate(str(workspace / "README.md"), FileOperation.READ)

        assert "no directories are whitelisted" in exc_info.value.reason

    def test_denies_path_outside_roots(self, validator: WhitelistValidator, temp_dir: Path) -> None:
        outside = temp_dir / "outside.txt"
        outside.write_text("secret")

        with pytest.raises(AccessDeniedError) as exc_info:
            validator.validate(str(outside), FileOperation.READ)

        assert exc_info.value.operation is FileOperation.READ
        assert "outside" in exc_info.value.reason

    def test_denies_parent_traversal(self, validator: WhitelistValidator, workspace: Path, temp_dir: Path) -> None:
        (temp_dir / "outside.txt").write_text("secret")

        with pytest.raises(AccessDeniedError):
            validator.validate(str(workspace / ".." / "outside.txt"), FileOperation.READ)

    def test_denies_sibling_with_common_prefix(
        self, validator: WhitelistValidator, workspace: Path
    ) -> None:
        sibling = workspace.parent / (workspace.name + "-evil")
        sibling.mkdir()
        (sibling / "file.txt").write_text("x")

        assert not validator.is_allowed(str(sibling / "file.txt"), FileOperation.READ)

    @pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks unsupported")
    def test_denies_symlink_escape(self, validator: WhitelistValidator, workspace: Path, temp_dir: Path) -> None:
        outside = temp_dir / "outside"
        outside.mkdir()
        (outside / "secret.txt").write_text("secret")
        (workspace / "link").symlink_to(outside, target_is_directory=True)

        with pytest.raises(AccessDeniedError):
            validator.validate(str(workspace / "link" / "secret.txt"), FileOperation.READ)

    def test_operation_must_be_permitted_by_root(self, workspace: Path) -> None:
        validator = WhitelistValidator()
        validator.add_root(workspace, [FileOperation.READ, FileOperation.LIST])

        assert validator.is_allowed(str(workspace / "README.md"), FileOperation.READ)
        with pytest.raises(AccessDeniedError):
            validator.validate(str(workspace / "new.txt"), FileOperation.WRITE)

    @pytest.mark.parametrize(
        "relative",
        [".env", "config/.env.local", "keys/server.pem", ".ssh/config", "id_rsa.pub"],
    )
    def test_blocked_patterns(self, validator: WhitelistValidator, workspace: Path, relative: str) -> None:
        target = workspace / relative
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text("secret")

        with pytest.raises(AccessDeniedError) as exc_info:
            validator.validate(str(target), FileOperation.READ)

        assert "blocked" in exc_info.value.reason

    def test_read_requires_existing_file(self, validator: WhitelistValidator, workspace: Path) -> None:
        with pytest.raises(AccessDeniedError, match="not an existing file"):
            validator.validate(str(workspace / "missing.txt"), FileOperation.READ)

        with pytest.raises(AccessDeniedError, match="not an existing file"):
            validator.validate(str(workspace / "src"), FileOperation.READ)

    def test_read_enforces_size_limit(self, workspace: Path) -> None:
        validator = WhitelistValidator(WhitelistPolicy(max_file_size=10))
        validator.add_root(workspace)
        (workspace / "big.txt").write_text("x" * 11)

        with pytest.raises(AccessDeniedError, match="limit is 10"):
            validator.validate(str(workspace / "big.txt"), FileOperation.READ)

    def test_list_requires_directory(self, validator: WhitelistValidator, workspace: Path) -> None:
        assert validator.validate(str(workspace / "src"), FileOperation.LIST) == workspace / "src"

        with pytest.raises(AccessDeniedError, match="not an existing directory"):
            validator.validate(str(workspace / "README.md"), FileOperation.LIST)

    def test_write_allows_new_file_but_not_directory(
        self, validator: WhitelistValidator, workspace: Path
    ) -> None:
        target = workspace / "new" / "file.txt"
        assert validator.validate(str(target), FileOperation.WRITE) == target

        with pytest.raises(AccessDeniedError, match="directory"):
            validator.validate(str(workspace / "src"), FileOperation.WRITE)

    def test_invalid_input_is_denied_not_raised_as_value_error(
        self, validator: WhitelistValidator
    ) -> None:
        with pytest.raises(AccessDeniedError):
            validator.validate("", FileOperation.READ)
        with pytest.raises(AccessDeniedError):
            validator.validate("bad\x00path", FileOperation.READ)

    def test_subdirectories_can_be_disallowed(self, workspace: Path) -> None:
        validator = WhitelistValidator(WhitelistPolicy(allow_subdirectories=False))
        validator.add_root(workspace)

        assert validator.is_allowed(str(workspace / "README.md"), FileOperation.READ)
        assert not validator.is_allowed(str(workspace / "src" / "app.py"), FileOperation.READ)

    def test_max_depth(self, workspace: Path) -> None:
        deep = workspace / "a" / "b"
        deep.mkdir(parents=True)
        (deep / "c.txt").write_text("x")
        validator = WhitelistValidator(WhitelistPolicy(max_depth=2))
        validator.add_root(workspace)

        assert validator.is_allowed(str(workspace / "src" / "app.py"), FileOperation.READ)
        assert not validator.is_allowed(str(deep / "c.txt"), FileOperation.READ)

    def test_root_itself_can_be_listed(self, validator: WhitelistValidator, workspace: Path) -> None:
        assert validator.is_allowed(str(workspace), FileOperation.LIST)


class TestWhitelistAdministration:
    """Tests for adding, removing and replacing roots."""

    def test_add_root_requires_directory(self, workspace: Path) -> None:
        validator = WhitelistValidator()

        with pytest.raises(ValueError, match="Not an existing directory"):
            validator.add_root(workspace / "README.md")
        with pytest.raises(ValueError):
            validator.add_root(workspace / "missing")

    def test_add_root_requires_operations(self, workspace: Path) -> None:
        with pytest.raises(ValueError, match="At least one operation"):
            WhitelistValidator().add_root(workspace, [])

    def test_readding_root_replaces_operations(self, workspace: Path) -> None:
        validator = WhitelistValidator()
        validator.add_root(workspace, [FileOperation.READ])
        validator.add_root(workspace, [FileOperation.WRITE])

        assert len(validator) == 1
        assert validator.list_roots()[0].operations == frozenset({FileOperation.WRITE})

    def test_remove_root(self, validator: WhitelistValidator, workspace: Path) -> None:
        assert validator.remove_root(workspace) is True
        assert validator.remove_root(workspace) is False
        assert not validator.is_allowed(str(workspace / "README.md"), FileOperation.READ)

    def test_list_roots_is_sorted(self, temp_dir: Path) -> None:
        for name in ("zeta", "alpha", "mid"):
            (temp_dir / name).mkdir()
        validator = WhitelistValidator()
        for name in ("zeta", "alpha", "mid"):
            validator.add_root(temp_dir / name)

        assert [root.path.name for root in validator.list_roots()] == ["alpha", "mid", "zeta"]

    def test_clear(self, validator: WhitelistValidator, workspace: Path) -> None:
        validator.clear()

        assert len(validator) == 0
        assert not validator.is_allowed(str(workspace / "README.md"), FileOperation.READ)

    def test_replace_installs_new_policy(self, validator: WhitelistValidator, temp_dir: Path) -> None:
        other = temp_dir / "other"
        other.mkdir()
        (other / "f.txt").write_text("x")

        validator.replace(WhitelistPolicy(roots=(WhitelistRoot(other),)))

        assert validator.is_allowed(str(other / "f.txt"), FileOperation.READ)
        assert len(validator) == 1

    def test_snapshot_is_not_mutated_by_updates(self, validator: WhitelistValidator, workspace: Path) -> None:
        before = validator.policy

        validator.remove_root(workspace)

        assert len(before.roots) == 1
        assert validator.policy is not before
        assert validator.policy.roots == ()

    def test_concurrent_updates_and_validation(self, workspace: Path) -> None:
        validator = WhitelistValidator()
        validator.add_root(workspace)
        target = str(workspace / "README.md")
        errors: list[BaseException] = []

        def toggle() -> None:
            for _ in range(200):
                validator.remove_root(workspace)
                validator.add_root(workspace)

        def check() -> None:
            for _ in range(200):
                try:
                    validator.validate(target, FileOperation.READ)
                except AccessDeniedError:
                    pass
                except BaseException as e:  # pragma: no cover
                    errors.append(e)

        threads = [threading.Thread(target=toggle)] + [threading.Thread(target=check) for _ in range(3)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert errors == []
        assert validator.is_allowed(target, FileOperation.READ)

    def test_from_config_skips_missing_roots(self, workspace: Path, temp_dir: Path) -> None:
        config = WhitelistConfig(
            roots=[str(workspace), {"path": str(temp_dir / "missing")}],
            max_depth=3,
        )

        validator = WhitelistValidator.from_config(config)

        assert [root.path for root in validator.list_roots()] == [workspace]
        assert validator.policy.max_depth == 3

    def test_from_config_operations(self, workspace: Path) -> None:
        config = WhitelistConfig(roots=[{"path": str(workspace), "operations": ["read"]}])

        validator = WhitelistValidator.from_config(config)

        assert validator.list_roots()[0].operations == frozenset({FileOperation.READ})

    def test_access_denied_message(self) -> None:
        error = AccessDeniedError("/srv/x", FileOperation.WRITE, "path matches a blocked pattern")
        assert str(error) == "Access denied: write on /srv/x (path matches a blocked pattern)"
