"""Platform rules — one JSON constraint profile per retail platform."""

from adcanvas.rules.loader import PlatformRuleProvider
from adcanvas.rules.models import Platform, PlatformProfile, SUPPORTED_PLATFORMS

__all__ = ["PlatformRuleProvider", "Platform", "PlatformProfile", "SUPPORTED_PLATFORMS"]
