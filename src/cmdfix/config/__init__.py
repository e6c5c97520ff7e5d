"""Settings and their loading."""

from .loader import get_config_dir, get_rules_dir, load_settings
from .settings import ALL_RULES, Settings

__all__ = ["ALL_RULES", "Settings", "get_config_dir", "get_rules_dir", "load_settings"]
