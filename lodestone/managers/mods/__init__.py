"""Mods package - dependency-aware install/remove/update of mods and plugins"""

from .mod_manager import ModManager

__all__ = ["ModManager"]
