"""Platform rule provider — loads and caches per-platform constraint profiles.

One JSON file per platform lives in the rules directory. Profiles are loaded on
first access, validated, and kept for the process lifetime; ``reload()`` is the
only way to drop them.
"""

import json
from pathlib import Path
from typing import Optional, Union

import structlog
from pydantic import ValidationError

from adcanvas.errors import ConfigError
from adcanvas.rules.models import Platform, PlatformProfile, SUPPORTED_PLATFORMS

logger = structlog.get_logger()

RULES_DIR = Path(__file__).parent / "platforms"


class PlatformRuleProvider:
    """Lazy, cached access to platform profiles.

    Concurrent first access is harmless: loading is deterministic, so two
    racing loaders store equal profiles under the same key.
    """

    def __init__(self, rules_dir: Optional[Path] = None):
        self.rules_dir = Path(rules_dir) if rules_dir else RULES_DIR
        self._cache: dict[str, PlatformProfile] = {}

    def get_profile(self, platform: Union[Platform, str]) -> PlatformProfile:
        """Return the profile for a platform, loading it on first access.

        Raises:
            ConfigError: unknown platform, or a missing/malformed rules file
        """
        key = self._key(platform)
        profile = self._cache.get(key)
        if profile is None:
            profile = self._cache.setdefault(key, self._load(key))
        return profile

    def supported_platforms(self) -> list[str]:
        return list(SUPPORTED_PLATFORMS)

    def reload(self) -> None:
        """Drop all cached profiles so the next access re-reads the source."""
        self._cache.clear()
        logger.info("platform_rules_reloaded", rules_dir=str(self.rules_dir))

    @staticmethod
    def _key(platform: Union[Platform, str]) -> str:
        value = platform.value if isinstance(platform, Platform) else str(platform).lower()
        if value not in SUPPORTED_PLATFORMS:
            raise ConfigError(f"Unknown platform '{platform}'. Supported: {', '.join(SUPPORTED_PLATFORMS)}")
        return value

    def _load(self, key: str) -> PlatformProfile:
        path = self.rules_dir / f"{key}.json"
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except FileNotFoundError as e:
            raise ConfigError(f"Rules file for '{key}' not found at {path}") from e
        except json.JSONDecodeError as e:
            raise ConfigError(f"Rules file for '{key}' is not valid JSON: {e}") from e

        try:
            profile = PlatformProfile.model_validate(data)
        except ValidationError as e:
            raise ConfigError(f"Rules file for '{key}' is malformed: {e.error_count()} schema error(s)") from e

        if profile.platform.value != key:
            raise ConfigError(f"Rules file {path.name} declares platform '{profile.platform.value}'")

        logger.info("platform_profile_loaded", platform=key, source=str(path))
        return profile
