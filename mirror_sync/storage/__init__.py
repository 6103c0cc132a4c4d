"""
Storage Layer.

This package handles all data persistence: the managed destination directory
and the configuration file.
"""

from .config_manager import ConfigManager
from .local_directory import LocalDirectory

__all__ = ["ConfigManager", "LocalDirectory"]
