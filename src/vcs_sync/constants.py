from pathlib import Path

"""Global constants and path definitions for vcs-sync.

This module defines application identifiers, where user configuration lives,
and the fixed names the git driver relies on when talking to `git`.
"""

# --- Identity ---
APP_NAME = "vcs-sync"
"""str: The human-readable application name, also the logger name."""

# --- Configuration Paths ---
CONFIG_DIR: Path = Path.home() / ".config/vcs-sync"
"""Path: The directory for user configuration files."""

CONFIG_FILE: Path = CONFIG_DIR / "config.toml"
"""Path: The global configuration file path."""

LOCAL_CONFIG_NAME = "vcs-sync.toml"
"""str: The per-project configuration file name."""

# --- Driver Constants ---
DEFAULT_DRIVER = "git"
"""str: The backend used when none is configured."""

DEFAULT_REF = "master"
"""str: The ref synchronized against when none is configured or detected."""

GIT_EXECUTABLE = "git"
"""str: The external version-control program."""

GIT_METADATA_DIR = ".git"
"""str: The git metadata directory, excluded from downstream processing."""

GIT_ATTRIBUTES_FILE = ".gitattributes"
"""str: The attributes file that may flag files as generated."""

REMOTE_NAME = "origin"
"""str: The remote every clone is fetched from."""

CLONE_DEPTH = 1
"""int: History depth for shallow clones and fetches."""
