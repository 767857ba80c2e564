from internal.config.loader import get_settings, load_config
from internal.config.settings import Settings

__all__ = ["Settings", "get_settings", "load_config"]
