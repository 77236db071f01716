"""vcs-sync: keep local working copies in sync with their remote repositories.

This package provides pluggable version-control drivers that clone, fetch and
reset a working directory to a resolved ref, plus the command-line interface
and configuration layer around them.
"""

from . import (
    cli,
    config,
    constants,
    driver,
    git_driver,
    patterns,
    registry,
    resolver,
    runner,
)

__all__ = [
    "cli",
    "config",
    "constants",
    "driver",
    "git_driver",
    "patterns",
    "registry",
    "resolver",
    "runner",
]
