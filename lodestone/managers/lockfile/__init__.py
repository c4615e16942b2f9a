"""Lockfile package - persisted record of the installed loader and mods"""

from .lockfile import LOCKFILE_NAME, Lockfile, LockfileStore

__all__ = ["LOCKFILE_NAME", "Lockfile", "LockfileStore"]
