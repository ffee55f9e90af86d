"""
Read-only environment snapshots.

The configuration core never reads ``os.environ`` while merging. Callers
either inject a mapping or capture the process environment once with
``EnvironmentSnapshot.capture()`` before a build.
"""

import os
from typing import Dict, Iterator, Mapping, Optional


class EnvironmentSnapshot(Mapping):
    """Immutable mapping of environment variable names to values."""

    def __init__(self, values: Optional[Mapping[str, str]] = None):
        self._values: Dict[str, str] = dict(values or {})

    @classmethod
    def capture(cls) -> "EnvironmentSnapshot":
        """Copy the current process environment."""
        return cls(os.environ)

    def __getitem__(self, key: str) -> str:
        return self._values[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def with_prefix(self, prefix: str) -> Dict[str, str]:
        """Entries whose key starts with ``{prefix}_``."""
        marker = f"{prefix}_"
        return {key: value for key, value in self._values.items() if key.startswith(marker)}

    def __repr__(self) -> str:
        return f"EnvironmentSnapshot({len(self._values)} variables)"
