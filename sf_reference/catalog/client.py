"""HTTP client for the Salesforce developer documentation endpoints."""

import logging

import requests

from sf_reference.config import DEFAULT_ITEM_TIMEOUT
from sf_reference.domain.constants import CONTENT_URL, DOCS_BASE_URL, DOCUMENT_URL
from sf_reference.domain.models import CatalogDocument, LeafReference, RawPage

logger = logging.getLogger(__name__)


class CatalogFetchError(Exception):
    """A documentation endpoint returned an error or an unreadable body."""
    pass


class DocsClient:
    """Fetches tables of contents and page content.

    Args:
        base_url: Documentation root, without trailing slash.
        timeout: Per-request timeout in seconds.
        session: Optional pre-configured ``requests.Session``.
    """

    def __init__(self, base_url: str = DOCS_BASE_URL, timeout: float = DEFAULT_ITEM_TIMEOUT,
                 session: requests.Session | None = None):
        self._base = base_url.rstrip('/')
        self._timeout = timeout
        self._session = session or requests.Session()
        self._documents: dict[str, CatalogDocument] = {}

    def get_document(self, documentation_id: str) -> CatalogDocument:
        """Fetch the toc and header of a documentation set."""
        url = DOCUMENT_URL.format(base=self._base, documentation_id=documentation_id)
        data = self._get_json(url)
        if not isinstance(data, dict):
            raise CatalogFetchError(f"Unexpected document payload for {documentation_id}")
        version = data.get('version') or {}
        document = CatalogDocument(
            documentation_id=documentation_id,
            deliverable=data.get('deliverable') or '',
            doc_version=version.get('doc_version', '') if isinstance(version, dict) else '',
            toc=data.get('toc') or [],
        )
        self._documents[documentation_id] = document
        return document

    def get_content(self, leaf: LeafReference) -> RawPage:
        """Fetch one page; its document must have been loaded first."""
        document = self._documents.get(leaf.documentation_id)
        if document is None:
            raise CatalogFetchError(f"Document {leaf.documentation_id} not loaded")
        url = CONTENT_URL.format(
            base=self._base,
            deliverable=document.deliverable,
            reference=leaf.reference,
            doc_version=document.doc_version,
        )
        data = self._get_json(url)
        if not isinstance(data, dict):
            raise CatalogFetchError(f"Unexpected content payload for {leaf.reference}")
        return RawPage(
            documentation_id=leaf.documentation_id,
            reference=leaf.reference,
            markup=data.get('content') or '',
            title=data.get('title') or '',
            deliverable=document.deliverable,
        )

    def close(self) -> None:
        self._session.close()

    def _get_json(self, url: str):
        logger.debug("GET %s", url)
        try:
            response = self._session.get(url, timeout=self._timeout)
        except requests.RequestException as e:
            raise CatalogFetchError(f"Request failed for {url}: {e}") from e
        if not response.ok:
            raise CatalogFetchError(f"HTTP error! status: {response.status_code} ({url})")
        try:
            return response.json()
        except ValueError as e:
            raise CatalogFetchError(f"Invalid JSON from {url}: {e}") from e
