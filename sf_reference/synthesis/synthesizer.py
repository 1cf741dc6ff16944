"""Turns parsed pages into object records owned by their cloud."""

import logging
from typing import Iterable

from sf_reference.config import CloudConfig
from sf_reference.domain.constants import DOCS_BASE_URL, PUBLIC_URL
from sf_reference.domain.models import EntityRecord, ParsedPage

logger = logging.getLogger(__name__)


def public_url(documentation_id: str, deliverable: str, reference: str, base: str = DOCS_BASE_URL) -> str:
    """Public documentation link for a page.

    The content endpoint is /get_document_content/{deliverable}/{reference}/...,
    the public page is /{documentation_id}/{deliverable}/{reference}.
    """
    return PUBLIC_URL.format(
        base=base.rstrip('/'),
        documentation_id=documentation_id,
        deliverable=deliverable,
        reference=reference,
    )


class EntitySynthesizer:
    """Builds EntityRecord candidates from parser output.

    Args:
        clouds: Configured clouds keyed by documentation id.
    """

    def __init__(self, clouds: dict[str, CloudConfig], base_url: str = DOCS_BASE_URL):
        self._clouds = clouds
        self._base_url = base_url

    def synthesize(self, parsed: ParsedPage) -> EntityRecord | None:
        if not parsed.name:
            logger.debug("Skipping nameless page %s", parsed.page.reference)
            return None
        config = self._clouds.get(parsed.page.documentation_id)
        cloud = config.label if config else ''
        return EntityRecord(
            name=parsed.name,
            description=parsed.description,
            fields=dict(parsed.fields),
            cloud=cloud,
            clouds=[cloud] if cloud else [],
            source_url=public_url(
                parsed.page.documentation_id,
                parsed.page.deliverable,
                parsed.page.reference,
                base=self._base_url,
            ),
        )

    def synthesize_all(self, parsed_pages: Iterable[ParsedPage]) -> list[EntityRecord]:
        records = []
        for parsed in parsed_pages:
            record = self.synthesize(parsed)
            if record is not None:
                records.append(record)
        return records
