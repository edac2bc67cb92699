"""Feature flags system."""

import os
from typing import Any

from pydantic import BaseModel


class FeatureFlags(BaseModel):
    """Feature flags configuration."""

    # Export features
    enable_exports: bool = True
    enable_charts: bool = True
    enable_preview: bool = True

    # Reports
    enable_report_cache: bool = True

    @classmethod
    def from_env(cls) -> "FeatureFlags":
        """Create feature flags from environment variables."""
        return cls(
            enable_exports=_get_bool_env("ENABLE_EXPORTS", True),
            enable_charts=_get_bool_env("ENABLE_CHARTS", True),
            enable_preview=_get_bool_env("ENABLE_PREVIEW", True),
            enable_report_cache=_get_bool_env("ENABLE_REPORT_CACHE", True),
        )


def _get_bool_env(key: str, default: bool) -> bool:
    """Get boolean environment variable."""
    value = os.getenv(key, str(default)).lower()
    return value in ("true", "1", "yes", "on")


# Global feature flags instance
feature_flags = FeatureFlags.from_env()


def is_enabled(flag_name: str) -> bool:
    """Check if a feature flag is enabled."""
    return getattr(feature_flags, flag_name, False)


def set_flag(flag_name: str, value: bool) -> None:
    """Override a feature flag at runtime."""
    if not hasattr(feature_flags, flag_name):
        raise KeyError(f"Unknown feature flag: {flag_name}")
    setattr(feature_flags, flag_name, value)
