"""
aursync - synchronize, build and install AUR packages.

Keeps a cache of package working copies current with the AUR's git
endpoints (clone, fast-forward or three-way merge) and hands changed
packages to makepkg.
"""

__version__ = "1.0.0"
__description__ = "AUR package synchronization and install helper"

from .cli import main

__all__ = ["main"]
