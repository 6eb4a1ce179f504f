"""Local dashboard for OpenCode sessions stored on disk."""

from opencode_dashboard.cache import TTLCache
from opencode_dashboard.loaders import discover_sessions
from opencode_dashboard.models import Session, Thresholds

__all__ = ["Session", "TTLCache", "Thresholds", "discover_sessions"]
__version__ = "0.1.0"
