# Initializes config package (imports Settings instance)

from .config import Settings, settings, unwrap_secret

__all__ = ["Settings", "settings", "unwrap_secret"]
