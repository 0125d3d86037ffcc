"""
Backend configuration.

The two values come from the process environment and are read again on
every backend call, so a changed environment takes effect without a restart.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

ENDPOINT_VAR = "ENDPOINT"
API_KEY_VAR = "API_KEY"


@dataclass(frozen=True)
class BackendConfig:
    """Read-only snapshot of the backend settings."""

    endpoint: str | None = None
    api_key: str | None = None

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "BackendConfig":
        """Build a snapshot from os.environ (or the given mapping).

        Empty values count as unset.
        """
        env = os.environ if environ is None else environ
        return cls(
            endpoint=env.get(ENDPOINT_VAR) or None,
            api_key=env.get(API_KEY_VAR) or None,
        )

    @property
    def has_api_key(self) -> bool:
        return self.api_key is not None
