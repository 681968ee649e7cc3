"""AdCanvas — compliance-aware design assistant for retail media creatives."""

__version__ = "1.0.0"
