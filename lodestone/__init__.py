"""
lodestone - Minecraft server mod and loader manager
Keeps a lockfile of installed mods/plugins and resolves their dependencies
"""

__version__ = "0.1.0"
