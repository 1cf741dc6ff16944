"""
Parser for object reference pages.

This module provides the FieldTableParser class for extracting the object
name, summary and field table from the HTML of one documentation page.

Two table layouts are used interchangeably by the source: the field name
column is headed either "Field Name" or "Field". The "Details" column is a
definition list whose entries are positional; see ``type_column`` and
``description_column``.
"""

import logging
import re
from typing import Iterable

from bs4 import BeautifulSoup, Tag

from sf_reference.domain.constants import DETAILS_SELECTOR, FIELD_NAME_SELECTORS, SUMMARY_SELECTOR
from sf_reference.domain.models import FailedItem, FieldSpec, ParsedPage, RawPage, StageSummary

logger = logging.getLogger(__name__)

# Positions of the <dd> entries inside a Details cell.
TYPE_POSITION = 0
DESCRIPTION_POSITION = 2

_WHITESPACE = re.compile(r'\s+')


class ParseFailure(FailedItem):
    """A page that could not be parsed."""
    pass


def normalize_whitespace(text: str | None) -> str:
    """Collapse runs of whitespace (including newlines and tabs) and trim."""
    if not text:
        return ''
    return _WHITESPACE.sub(' ', text).strip()


def type_column(details: Tag) -> str:
    """Field type from a Details cell."""
    return _definition_at(details, TYPE_POSITION)


def description_column(details: Tag) -> str:
    """Field description from a Details cell."""
    return _definition_at(details, DESCRIPTION_POSITION)


def _definition_at(details: Tag, position: int) -> str:
    definitions = details.find_all('dd')
    if position >= len(definitions):
        return ''
    return normalize_whitespace(definitions[position].get_text())


class FieldTableParser:
    """
    Parser for object reference pages.

    Extracts name, description and an ordered field mapping. Either a
    complete ParsedPage or a ParseFailure is returned, never a partial one.
    """

    def parse(self, page: RawPage) -> ParsedPage | ParseFailure:
        """
        Parse one page.

        Args:
            page: Raw page as fetched from the catalog

        Returns:
            ParsedPage with:
            - name: page title, whitespace-normalized
            - description: text of the summary block ('' if absent)
            - fields: field name -> FieldSpec, in table order
            or a ParseFailure carrying the page reference.
        """
        try:
            return self._parse(page)
        except Exception as e:
            logger.warning("Error parsing content for %s: %s", page.reference, e)
            return ParseFailure(ref=page.reference, reason=str(e) or type(e).__name__)

    def parse_all(self, pages: Iterable[RawPage]) -> StageSummary[ParsedPage]:
        summary: StageSummary[ParsedPage] = StageSummary()
        for page in pages:
            result = self.parse(page)
            if isinstance(result, ParseFailure):
                summary.failed.append(result)
            else:
                summary.succeeded.append(result)
        return summary

    def _parse(self, page: RawPage) -> ParsedPage:
        if not isinstance(page.markup, str):
            raise ValueError(f"Page markup is {type(page.markup).__name__}, expected str")

        soup = BeautifulSoup(page.markup, 'html.parser')

        summary = soup.select_one(SUMMARY_SELECTOR)
        description = normalize_whitespace(summary.get_text()) if summary is not None else ''

        return ParsedPage(
            name=normalize_whitespace(page.title),
            description=description,
            fields=self._extract_fields(soup),
            page=page,
        )

    def _extract_fields(self, soup: BeautifulSoup) -> dict[str, FieldSpec]:
        """
        Pair field name cells with Details cells.

        Columns of unequal length are paired up to the shorter one.
        Nameless rows are dropped; a repeated name keeps its first row.
        """
        name_cells: list[Tag] = []
        for selector in FIELD_NAME_SELECTORS:
            name_cells = soup.select(selector)
            if name_cells:
                break

        details_cells = soup.select(DETAILS_SELECTOR)

        fields: dict[str, FieldSpec] = {}
        for name_cell, details in zip(name_cells, details_cells):
            name = normalize_whitespace(name_cell.get_text())
            if not name or name in fields:
                continue
            fields[name] = FieldSpec(
                name=name,
                type=type_column(details),
                description=description_column(details),
            )
        return fields
