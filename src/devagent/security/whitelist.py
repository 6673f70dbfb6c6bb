"""
Filesystem whitelist for tool access.

Paths are canonicalized before any comparison so that ``..`` segments and
symlinks cannot be used to escape an allowed root. The allowed roots live in
an immutable WhitelistPolicy snapshot; administrative updates build a new
snapshot and swap it in, so a concurrent validation always sees either the
old or the new policy, never a partial one.
"""

import dataclasses
import fnmatch
import logging
import threading
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING

from devagent.constants import DEFAULT_BLOCKED_PATTERNS, MAX_FILE_SIZE, MAX_PATH_LENGTH
from devagent.exceptions import ToolError

if TYPE_CHECKING:
    from devagent.config.schema import WhitelistConfig

logger = logging.getLogger(__name__)


class FileOperation(str, Enum):
    """Kinds of filesystem access a root can permit."""

    READ = "read"
    WRITE = "write"
    LIST = "list"


ALL_OPERATIONS = frozenset(FileOperation)


class AccessDeniedError(ToolError):
    """A path/operation pair was rejected by the whitelist."""

    def __init__(self, path: str | Path, operation: FileOperation, reason: str):
        self.path = str(path)
        self.operation = operation
        self.reason = reason
        super().__init__(
            f"Access denied: {operation.value} on {self.path} ({reason})"
        )


@dataclass(frozen=True)
class WhitelistRoot:
    """An allowed directory and the operations permitted below it."""

    path: Path
    operations: frozenset[FileOperation] = ALL_OPERATIONS

    def permits(self, operation: FileOperation) -> bool:
        return operation in self.operations

    def relative_depth(self, path: Path) -> int | None:
        """Number of components between the root and ``path``.

        Returns:
            0 for the root itself, None when ``path`` is outside the root.
        """
        try:
            return len(path.relative_to(self.path).parts)
        except ValueError:
            return None


@dataclass(frozen=True)
class WhitelistPolicy:
    """Immutable snapshot of the whitelist settings."""

    roots: tuple[WhitelistRoot, ...] = ()
    allow_subdirectories: bool = True
    max_depth: int = 0  # 0 means unlimited
    blocked_patterns: tuple[str, ...] = DEFAULT_BLOCKED_PATTERNS
    max_file_size: int = MAX_FILE_SIZE

    def with_root(self, root: WhitelistRoot) -> "WhitelistPolicy":
        others = tuple(r for r in self.roots if r.path != root.path)
        return dataclasses.replace(self, roots=others + (root,))

    def without_root(self, path: Path) -> "WhitelistPolicy":
        return dataclasses.replace(self, roots=tuple(r for r in self.roots if r.path != path))

    def is_blocked(self, path: Path) -> bool:
        """Check a canonical path against the blocked glob patterns.

        Patterns are matched against the full path, every component, and
        every trailing run of components (so ``.ssh/*`` catches
        ``/srv/app/.ssh/config``).
        """
        parts = path.parts
        candidates = {str(path), *parts}
        for start in range(1, len(parts)):
            candidates.add("/".join(parts[start:]))
        return any(
            fnmatch.fnmatch(candidate, pattern)
            for pattern in self.blocked_patterns
            for candidate in candidates
        )


def canonicalize(path: str | Path) -> Path:
    """Expand ``~``, anchor relative paths at the cwd, and resolve ``..``/symlinks.

    Components that do not exist yet are normalized lexically so that a
    target for a new file can still be validated.
    """
    return Path(path).expanduser().resolve(strict=False)


def check_path_input(path: str | Path) -> str:
    """Reject path strings that must never reach the filesystem.

    Raises:
        ValueError: If the path is empty, too long, or contains a NUL byte.
    """
    raw = str(path)
    if not raw or not raw.strip():
        raise ValueError("Path cannot be empty")
    if len(raw) > MAX_PATH_LENGTH:
        raise ValueError(f"Path exceeds {MAX_PATH_LENGTH} characters")
    if "\x00" in raw:
        raise ValueError("Path contains a NUL byte")
    return raw


class WhitelistValidator:
    """Authorizes filesystem operations against the allowed roots.

    Validation reads the current snapshot without taking the lock. Updates
    are serialized by the lock and publish a fresh snapshot in one
    assignment. An execution that has already been validated keeps the
    answer it got from the snapshot it saw.
    """

    def __init__(self, policy: WhitelistPolicy | None = None) -> None:
        self._policy = policy or WhitelistPolicy()
        self._lock = threading.Lock()

    @classmethod
    def from_config(cls, config: "WhitelistConfig") -> "WhitelistValidator":
        """Create a validator from the whitelist configuration section.

        Roots that do not exist or are not directories are skipped with a
        warning.
        """
        validator = cls(
            WhitelistPolicy(
                allow_subdirectories=config.allow_subdirectories,
                max_depth=config.max_depth,
                blocked_patterns=tuple(config.blocked_patterns),
                max_file_size=config.max_file_size,
            )
        )
        for root in config.roots:
            try:
                validator.add_root(
                    root.path, [FileOperation(op) for op in root.operations]
                )
            except ValueError as e:
                logger.warning(f"Skipping whitelist root {root.path}: {e}")
        return validator

    @property
    def policy(self) -> WhitelistPolicy:
        """The snapshot validations are currently checked against."""
        return self._policy

    def validate(self, path: str | Path, operation: FileOperation) -> Path:
        """Authorize ``operation`` on ``path``.

        Args:
            path: Raw path as supplied by the model.
            operation: Requested operation kind.

        Returns:
            The canonical path that the caller must use for the operation.

        Raises:
            AccessDeniedError: If the path is outside every root permitting
                the operation, blocked, or unsuitable for the operation.
        """
        policy = self._policy

        try:
            raw = check_path_input(path)
        except ValueError as e:
            raise AccessDeniedError(repr(str(path))[:80], operation, str(e)) from None

        try:
            canonical = canonicalize(raw)
        except (OSError, RuntimeError) as e:
            raise AccessDeniedError(raw, operation, f"cannot resolve path: {e}") from None

        if not policy.roots:
            raise AccessDeniedError(canonical, operation, "no directories are whitelisted")

        if not self._within_permitting_root(policy, canonical, operation):
            raise AccessDeniedError(
                canonical, operation, "path is outside the whitelisted directories"
            )

        if policy.is_blocked(canonical):
            raise AccessDeniedError(canonical, operation, "path matches a blocked pattern")

        self._check_operation(policy, canonical, operation)
        return canonical

    def is_allowed(self, path: str | Path, operation: FileOperation) -> bool:
        """Boolean form of :meth:`validate`."""
        try:
            self.validate(path, operation)
        except AccessDeniedError:
            return False
        return True

    def _within_permitting_root(
        self, policy: WhitelistPolicy, canonical: Path, operation: FileOperation
    ) -> bool:
        for root in policy.roots:
            if not root.permits(operation):
                continue
            depth = root.relative_depth(canonical)
            if depth is None:
                continue
            if not policy.allow_subdirectories and depth > 1:
                continue
            if policy.max_depth and depth > policy.max_depth:
                continue
            return True
        return False

    @staticmethod
    def _check_operation(
        policy: WhitelistPolicy, canonical: Path, operation: FileOperation
    ) -> None:
        if operation is FileOperation.LIST:
            if not canonical.is_dir():
                raise AccessDeniedError(canonical, operation, "not an existing directory")
        elif operation is FileOperation.READ:
            if not canonical.is_file():
                raise AccessDeniedError(canonical, operation, "not an existing file")
            size = canonical.stat().st_size
            if size > policy.max_file_size:
                raise AccessDeniedError(
                    canonical,
                    operation,
                    f"file is {size} bytes, limit is {policy.max_file_size}",
                )
        elif operation is FileOperation.WRITE:
            if canonical.is_dir():
                raise AccessDeniedError(canonical, operation, "path is a directory")

    # ------------------------------------------------------------------
    # Administration
    # ------------------------------------------------------------------

    def _update(self, change: Callable[[WhitelistPolicy], WhitelistPolicy]) -> WhitelistPolicy:
        with self._lock:
            self._policy = change(self._policy)
            return self._policy

    def add_root(
        self,
        path: str | Path,
        operations: Iterable[FileOperation] | None = None,
    ) -> Path:
        """Allow access below ``path``.

        Re-adding an existing root replaces its permitted operations.

        Args:
            path: Directory to allow.
            operations: Permitted operations (all of them when omitted).

        Returns:
            The canonical root path.

        Raises:
            ValueError: If the path is invalid or not an existing directory.
        """
        canonical = canonicalize(check_path_input(path))
        if not canonical.is_dir():
            raise ValueError(f"Not an existing directory: {canonical}")

        ops = frozenset(operations) if operations is not None else ALL_OPERATIONS
        if not ops:
            raise ValueError("At least one operation must be permitted")

        self._update(lambda policy: policy.with_root(WhitelistRoot(canonical, ops)))
        logger.info(
            f"Whitelisted {canonical} for {', '.join(sorted(op.value for op in ops))}"
        )
        return canonical

    def remove_root(self, path: str | Path) -> bool:
        """Stop allowing ``path``.

        Returns:
            True if the root was present.
        """
        canonical = canonicalize(path)
        removed = False

        def change(policy: WhitelistPolicy) -> WhitelistPolicy:
            nonlocal removed
            removed = any(root.path == canonical for root in policy.roots)
            return policy.without_root(canonical)

        self._update(change)
        if removed:
            logger.info(f"Removed whitelist root {canonical}")
        return removed

    def list_roots(self) -> list[WhitelistRoot]:
        """Allowed roots sorted by path."""
        return sorted(self._policy.roots, key=lambda root: str(root.path))

    def clear(self) -> None:
        """Remove every root; all validations fail afterwards."""
        self._update(lambda policy: dataclasses.replace(policy, roots=()))
        logger.info("Cleared whitelist")

    def replace(self, policy: WhitelistPolicy) -> None:
        """Install a whole new policy (hot reload)."""
        self._update(lambda _: policy)
        logger.info(f"Whitelist reloaded with {len(policy.roots)} roots")

    def __len__(self) -> int:
        return len(self._policy.roots)

    def __repr__(self) -> str:
        roots = ", ".join(str(root.path) for root in self.list_roots())
        return f"<WhitelistValidator roots=[{roots}]>"
