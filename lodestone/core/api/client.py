import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator, Optional

import requests

from ...config import Settings
from ...errors import NotFoundError, TransportError

logger = logging.getLogger(__name__)


class HttpClient:
    """Thin wrapper over a requests session that identifies lodestone"""

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or Settings()
        # Create persistent session so every request carries the same headers
        self.session = requests.Session()
        self.session.headers.update({
            'User-Agent': self.settings.user_agent,
            'Accept-Encoding': 'gzip, deflate',
        })

    def _get(self, url: str, params: Optional[Dict[str, str]] = None, stream: bool = False) -> requests.Response:
        logger.debug("GET %s %s", url, params or "")
        try:
            response = self.session.get(url, params=params, stream=stream, timeout=self.settings.timeout)
        except requests.RequestException as e:
            raise TransportError(f"request to {url} failed: {e}") from e

        if response.status_code == 404:
            response.close()
            raise NotFoundError(f"{url} returned 404")

        try:
            response.raise_for_status()
        except requests.HTTPError as e:
            response.close()
            raise TransportError(f"request to {url} failed: {e}") from e

        return response

    def get_json(self, url: str, params: Optional[Dict[str, str]] = None) -> Any:
        """
        Fetches and decodes a JSON document

        Args:
            url: Endpoint to query
            params: Optional query parameters

        Returns:
            Decoded JSON body

        Raises:
            NotFoundError: on a 404 response
            TransportError: on any other failure
        """
        response = self._get(url, params=params)
        try:
            return response.json()
        except ValueError as e:
            raise TransportError(f"invalid JSON from {url}: {e}") from e

    def get_text(self, url: str, params: Optional[Dict[str, str]] = None) -> str:
        """Fetches a plain-text body"""
        return self._get(url, params=params).text.strip()

    @contextmanager
    def stream(self, url: str) -> Iterator[requests.Response]:
        """Opens a streaming GET; the response is closed on exit"""
        response = self._get(url, stream=True)
        try:
            yield response
        finally:
            response.close()
