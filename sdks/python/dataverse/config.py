"""Configuration for the Dataverse client.

All polling defaults live here. The waiting and retrying algorithms take plain
parameters and never fall back to defaults of their own.
"""

import logging
import math
import os
from dataclasses import dataclass
from typing import Any, Callable, Optional

from .models import RetryPolicy


def _parse_env_numeric(value: Optional[str], cast: Callable[[str], Any]) -> Optional[Any]:
    """Parse an environment value, returning None when invalid."""
    if value is None:
        return None
    try:
        parsed = cast(value)
    except (TypeError, ValueError):
        return None
    if isinstance(parsed, float) and not math.isfinite(parsed):
        return None
    return parsed


@dataclass
class DataverseConfig:
    """Connection settings and polling defaults.

    Attributes:
        base_url: Dataverse installation root (default: http://localhost:8080)
        api_token: API token sent as X-Dataverse-key (default: None)
        timeout: HTTP timeout in seconds (default: 30.0)
        unblock_key: Key for blocked admin endpoints (default: None)
        await_lock_state_max_attempts: Lock checks per wait (default: 30)
        await_lock_state_interval_ms: Pause between lock checks (default: 500)
        await_indexing_max_attempts: Publish attempts while indexing is pending (default: 15)
        await_indexing_interval_ms: Pause between publish attempts (default: 1000)
    """

    base_url: str = "http://localhost:8080"
    api_token: Optional[str] = None
    timeout: float = 30.0
    unblock_key: Optional[str] = None
    await_lock_state_max_attempts: int = 30
    await_lock_state_interval_ms: int = 500
    await_indexing_max_attempts: int = 15
    await_indexing_interval_ms: int = 1000

    def retry_policy_for_locks(self) -> RetryPolicy:
        return RetryPolicy(self.await_lock_state_max_attempts, self.await_lock_state_interval_ms)

    def retry_policy_for_indexing(self) -> RetryPolicy:
        return RetryPolicy(self.await_indexing_max_attempts, self.await_indexing_interval_ms)

    @classmethod
    def from_env(cls, prefix: str = "DATAVERSE_") -> "DataverseConfig":
        """Build a configuration from ``<prefix>*`` environment variables.

        Invalid numeric values are logged and replaced by the default.
        """
        logger = logging.getLogger(__name__)
        cfg = cls()
        cfg.base_url = os.environ.get(f"{prefix}BASE_URL", cfg.base_url)
        cfg.api_token = os.environ.get(f"{prefix}API_KEY", cfg.api_token)
        cfg.unblock_key = os.environ.get(f"{prefix}UNBLOCK_KEY", cfg.unblock_key)

        numeric_fields = (
            ("TIMEOUT", "timeout", float, 0),
            ("AWAIT_LOCK_STATE_MAX_ATTEMPTS", "await_lock_state_max_attempts", int, 1),
            ("AWAIT_LOCK_STATE_INTERVAL_MS", "await_lock_state_interval_ms", int, 0),
            ("AWAIT_INDEXING_MAX_ATTEMPTS", "await_indexing_max_attempts", int, 1),
            ("AWAIT_INDEXING_INTERVAL_MS", "await_indexing_interval_ms", int, 0),
        )
        for suffix, attr, cast, minimum in numeric_fields:
            name = f"{prefix}{suffix}"
            raw = os.environ.get(name)
            if raw is None:
                continue
            parsed = _parse_env_numeric(raw, cast)
            if parsed is not None and parsed >= minimum:
                setattr(cfg, attr, parsed)
            else:
                logger.warning(f"Ignoring invalid {name}={raw!r}; using default {getattr(cfg, attr)}")
        return cfg
