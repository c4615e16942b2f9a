import hashlib
import logging
import os
from pathlib import Path
from typing import Optional

import requests

from ..api.client import HttpClient
from ...errors import ChecksumMismatchError, InvalidChecksumError, TransportError

logger = logging.getLogger(__name__)


class ArtifactDownloader:
    """Streams remote jars to disk, optionally verifying a digest"""

    def __init__(self, http: HttpClient, chunk_size: Optional[int] = None):
        self.http = http
        self.chunk_size = chunk_size or http.settings.chunk_size

    def fetch(self, url: str, destination: Path) -> Path:
        """
        Downloads url to destination without verification

        Args:
            url: File URL
            destination: Where the file ends up (parent folders are created)

        Returns:
            The destination path
        """
        self._stream_to(url, Path(destination), hasher=None)
        return Path(destination)

    def fetch_with_checksum(self, url: str, destination: Path, algorithm: str, expected_hex: str) -> Path:
        """
        Downloads url to destination while hashing it

        The file is fully written before the digest is compared, so a
        mismatching file is still left on disk.

        Args:
            url: File URL
            destination: Where the file ends up (parent folders are created)
            algorithm: hashlib algorithm name (sha1, sha256, sha512, ...)
            expected_hex: Expected digest as hex

        Returns:
            The destination path

        Raises:
            ChecksumMismatchError: if the digests disagree
        """
        try:
            hasher = hashlib.new(algorithm)
        except (ValueError, TypeError) as e:
            raise InvalidChecksumError(f"unsupported checksum method '{algorithm}'") from e

        destination = Path(destination)
        self._stream_to(url, destination, hasher=hasher)

        actual = hasher.hexdigest().lower()
        expected = expected_hex.strip().lower()
        if actual != expected:
            raise ChecksumMismatchError(str(destination), expected, actual)

        logger.info("verified %s digest of %s", algorithm, destination.name)
        return destination

    def _stream_to(self, url: str, destination: Path, hasher) -> None:
        destination.parent.mkdir(parents=True, exist_ok=True)
        # Partial data lives next to the target until the stream is exhausted
        part_path = destination.with_name(destination.name + ".part")

        logger.info("downloading %s to %s", url, destination)
        try:
            with self.http.stream(url) as response, open(part_path, 'wb') as file:
                for chunk in response.iter_content(chunk_size=self.chunk_size):
                    if not chunk:
                        continue
                    file.write(chunk)
                    if hasher is not None:
                        hasher.update(chunk)
        except requests.RequestException as e:
            self._discard(part_path)
            raise TransportError(f"download of {url} failed: {e}") from e
        except BaseException:
            self._discard(part_path)
            raise

        os.replace(part_path, destination)

    @staticmethod
    def _discard(path: Path) -> None:
        try:
            path.unlink()
        except FileNotFoundError:
            pass
