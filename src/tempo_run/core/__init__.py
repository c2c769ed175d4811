"""Core infrastructure layer - no business logic dependencies.

This module provides foundation-level services:
- Configuration management (TOML)
- Logging (Loguru)
- Console management (Rich)

The core layer has no dependencies on the domain layer.
"""

from .config import (
    Config,
    load_config,
    get_config_dir,
    get_config_path,
    get_data_dir,
    create_default_config,
    ensure_directories,
)
from .output import setup_loguru, log, mark_silent
from .console import format_pace, get_console, safe_print

__all__ = [
    # Config
    "Config",
    "load_config",
    "get_config_dir",
    "get_config_path",
    "get_data_dir",
    "create_default_config",
    "ensure_directories",
    # Output
    "setup_loguru",
    "log",
    "mark_silent",
    # Console
    "get_console",
    "safe_print",
    "format_pace",
]
