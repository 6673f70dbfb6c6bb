"""
Persistence for whitelist roots.

Roots are stored as JSON next to the configuration. Saving writes a temporary
file and renames it over the target so a crash never leaves a half-written
whitelist behind.
"""

import json
import logging
import os
import tempfile
from pathlib import Path

from devagent.exceptions import DevAgentError
from devagent.security.whitelist import (
    FileOperation,
    WhitelistPolicy,
    WhitelistRoot,
    WhitelistValidator,
)

logger = logging.getLogger(__name__)

STORE_VERSION = 1


class WhitelistStoreError(DevAgentError):
    """Raised when the whitelist file cannot be read or written."""

    pass


class WhitelistStore:
    """Reads and writes the whitelist roots file."""

    def __init__(self, path: Path):
        """
        Initialize the store.

        Args:
            path: Location of the JSON file.
        """
        self.path = path

    def save(self, policy: WhitelistPolicy) -> None:
        """
        Persist the roots of ``policy`` atomically.

        Raises:
            WhitelistStoreError: If the file cannot be written.
        """
        data = {
            "version": STORE_VERSION,
            "roots": [
                {
                    "path": str(root.path),
                    "operations": sorted(op.value for op in root.operations),
                }
                for root in sorted(policy.roots, key=lambda r: str(r.path))
            ],
        }

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(data, f, indent=2)
                os.replace(tmp_name, self.path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise WhitelistStoreError(f"Failed to save whitelist to {self.path}: {e}") from e

        logger.debug(f"Saved {len(data['roots'])} whitelist roots to {self.path}")

    def load_roots(self) -> list[WhitelistRoot]:
        """
        Read the stored roots.

        Roots that no longer exist as directories are dropped.

        Returns:
            Stored roots, empty if the file does not exist.

        Raises:
            WhitelistStoreError: If the file exists but is not valid.
        """
        if not self.path.exists():
            return []

        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
            entries = data.get("roots", [])
            roots = []
            for entry in entries:
                root_path = Path(entry["path"])
                operations = frozenset(
                    FileOperation(op) for op in entry.get("operations", [])
                ) or frozenset(FileOperation)
                if not root_path.is_dir():
                    logger.warning(f"Dropping missing whitelist root {root_path}")
                    continue
                roots.append(WhitelistRoot(root_path.resolve(), operations))
        except (OSError, json.JSONDecodeError, KeyError, TypeError, AttributeError, ValueError) as e:
            raise WhitelistStoreError(f"Invalid whitelist file {self.path}: {e}") from e

        return roots

    def load_into(self, validator: WhitelistValidator) -> int:
        """
        Add the stored roots to ``validator``.

        Returns:
            Number of roots added.
        """
        roots = self.load_roots()
        for root in roots:
            validator.add_root(root.path, root.operations)
        return len(roots)
