"""Loader package - per-family version resolution for server runtimes"""

from .forge import forge_version_tag
from .loader_manager import LoaderManager

__all__ = ["LoaderManager", "forge_version_tag"]
