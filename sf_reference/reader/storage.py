"""
Storage abstraction for the read layer.

Provides a uniform interface for loading written reference data from
either a local directory or a static HTTP mirror.
"""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

import requests

from sf_reference.config import DEFAULT_ITEM_TIMEOUT


class StorageError(Exception):
    """A storage unit exists but could not be retrieved."""


class StorageAdapter(ABC):
    """Abstract interface for reading storage units by relative path."""

    @abstractmethod
    def load(self, path: str) -> bytes:
        """Return the raw bytes at ``path``.

        Raises FileNotFoundError if missing and StorageError if it could not
        be retrieved.
        """

    def load_json(self, path: str) -> Any:
        return json.loads(self.load(path))


class LocalStorage(StorageAdapter):
    """Reads data from a local directory."""

    def __init__(self, data_dir: str):
        self._root = Path(data_dir)
        if not self._root.is_dir():
            raise FileNotFoundError(f"Data directory not found: {self._root}")

    def load(self, path: str) -> bytes:
        full = (self._root / path).resolve()
        # Keep lookups inside the data directory
        try:
            full.relative_to(self._root.resolve())
        except ValueError:
            raise FileNotFoundError(f"Not found: {path}")
        if not full.is_file():
            raise FileNotFoundError(f"Not found: {path}")
        return full.read_bytes()


class HttpStorage(StorageAdapter):
    """Reads data published under a base URL (e.g. raw GitHub content or a CDN)."""

    def __init__(self, base_url: str, timeout: float = DEFAULT_ITEM_TIMEOUT,
                 session: requests.Session | None = None):
        self._base = base_url.rstrip('/')
        self._timeout = timeout
        self._session = session or requests.Session()

    def load(self, path: str) -> bytes:
        url = f"{self._base}/{path.lstrip('/')}"
        try:
            response = self._session.get(url, timeout=self._timeout)
        except requests.RequestException as e:
            raise StorageError(f"Request for {url} failed: {e}") from e
        if response.status_code == 404:
            raise FileNotFoundError(f"Not found: {url}")
        try:
            response.raise_for_status()
        except requests.HTTPError as e:
            raise StorageError(f"Request for {url} failed: {e}") from e
        return response.content
