"""Download package - streaming downloads with digest verification"""

from .downloader import ArtifactDownloader

__all__ = ["ArtifactDownloader"]
