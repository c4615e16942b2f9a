"""Server package - lockfile-driven server setup"""

from .server_manager import ServerManager

__all__ = ["ServerManager"]
