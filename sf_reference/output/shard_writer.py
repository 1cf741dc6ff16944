"""JSON output generation.

Writes object units, per-cloud listings and the master index to a
structured JSON directory.
"""

import json
import logging
import os
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from sf_reference.config import CONFIGURATION, CloudConfig, cloud_by_label, cloud_file_name
from sf_reference.domain.buckets import BUCKETS, object_path
from sf_reference.domain.constants import ERRORS_FILE, INDEX_FILE, OBJECTS_DIR
from sf_reference.domain.models import CategoryListing, EntityRecord, FailedItem, IndexEntry
from sf_reference.synthesis.merger import merge_records

logger = logging.getLogger(__name__)


@dataclass
class WriteResult:
    """Result summary of a write."""

    objects_written: int
    clouds_written: int
    total_objects: int
    index_path: str


class ShardWriter:
    """Writes object records to a sharded JSON directory.

    Output structure:
        output_dir/
        ├── index.json
        ├── {cloud-file-name}.json (one listing per cloud)
        ├── errors.json (only if errors)
        └── objects/{A-Z,_}/{name}.json

    Apart from the ``generated`` timestamp of index.json, writing the same
    records twice produces identical files.

    Args:
        output_dir: Root directory for output files.
        clouds: Cloud configuration used for listing descriptions.
        pretty: Whether to pretty-print JSON (default True).
    """

    def __init__(self, output_dir: str, clouds: dict[str, CloudConfig] | None = None,
                 pretty: bool = True) -> None:
        self._output_dir = output_dir
        self._clouds = CONFIGURATION if clouds is None else clouds
        self._indent = 2 if pretty else None

    def write(self, records: list[EntityRecord], version: str, incremental: bool = False) -> WriteResult:
        """Persist records, listings and the master index.

        In incremental mode objects already on disk keep their stored
        description and fields and only gain cloud membership, listings
        grow instead of being replaced, and index entries of objects not in
        ``records`` are kept.

        Either way, every listing left on disk names only objects whose
        index entry includes that cloud. A full write removes listing files
        it did not produce; an incremental write prunes them.
        """
        records = [r for r in records if self._is_storable(r.name)]
        existing_index = self._read_json(os.path.join(self._output_dir, INDEX_FILE))
        existing_entries: dict[str, Any] = {}
        if isinstance(existing_index, dict) and isinstance(existing_index.get('objects'), dict):
            existing_entries = {k: v for k, v in existing_index['objects'].items() if isinstance(v, dict)}

        if incremental:
            records = [self._merge_with_stored(r) for r in records]

        self._write_objects(records)

        entries: dict[str, IndexEntry] = {}
        if incremental:
            entries = {name: IndexEntry.from_dict(data) for name, data in existing_entries.items()}
        for record in records:
            previous = existing_entries.get(record.name) or {}
            entries[record.name] = IndexEntry(
                cloud=record.cloud,
                file=object_path(record.name),
                description=record.description,
                field_count=len(record.fields),
                clouds=list(record.clouds),
                source_url=record.source_url,
                extras=IndexEntry.from_dict(previous).extras if previous else {},
            )

        listings = self._build_listings(records, entries if incremental else None)
        for listing in listings.values():
            self._write_json(self._listing_path(listing.cloud), listing.to_dict())
            logger.info("Created listing for %s with %d objects", listing.cloud, listing.object_count)

        if incremental:
            cloud_summaries = self._prune_listings(entries)
        else:
            cloud_summaries = {cloud_file_name(l.cloud): self._cloud_summary(l) for l in listings.values()}
            self._remove_listings(exclude=set(cloud_summaries))

        index = {
            'generated': datetime.now(timezone.utc).isoformat(),
            'version': version,
            'totalObjects': len(entries),
            'totalClouds': len(cloud_summaries),
            'objects': {name: entries[name].to_dict() for name in sorted(entries)},
            'clouds': {key: cloud_summaries[key] for key in sorted(cloud_summaries)},
        }
        index_path = os.path.join(self._output_dir, INDEX_FILE)
        self._write_json(index_path, index)
        logger.info("Created main index with %d objects across %d cloud(s)", len(entries), len(cloud_summaries))

        return WriteResult(
            objects_written=len(records),
            clouds_written=len(listings),
            total_objects=len(entries),
            index_path=index_path,
        )

    def write_errors(self, errors: list[FailedItem]) -> None:
        """Write dropped items (only if any exist); a stale file is removed."""
        path = os.path.join(self._output_dir, ERRORS_FILE)
        if not errors:
            if os.path.isfile(path):
                os.remove(path)
            return
        self._write_json(path, [e.to_dict() for e in errors])

    def _write_objects(self, records: list[EntityRecord]) -> None:
        objects_dir = os.path.join(self._output_dir, OBJECTS_DIR)
        for bucket in BUCKETS:
            os.makedirs(os.path.join(objects_dir, bucket), exist_ok=True)
        for record in records:
            self._write_json(self._object_file(record.name), {record.name: record.to_dict()})

    def _merge_with_stored(self, record: EntityRecord) -> EntityRecord:
        stored = self._read_json(self._object_file(record.name))
        if not stored or record.name not in stored:
            return record
        return merge_records([EntityRecord.from_dict(stored[record.name]), record])[0]

    def _build_listings(
        self,
        records: list[EntityRecord],
        entries: dict[str, IndexEntry] | None,
    ) -> dict[str, CategoryListing]:
        """Listings of this run's clouds; with ``entries``, stored members are kept too."""
        listings: dict[str, CategoryListing] = {}
        for record in records:
            for cloud in record.clouds:
                listing = listings.get(cloud)
                if listing is None:
                    listing = self._new_listing(cloud, entries)
                    listings[cloud] = listing
                if record.name not in listing.objects:
                    listing.objects.append(record.name)
        for listing in listings.values():
            listing.objects.sort()
        return listings

    def _new_listing(self, cloud: str, entries: dict[str, IndexEntry] | None) -> CategoryListing:
        config = cloud_by_label(cloud, self._clouds)
        listing = CategoryListing(cloud=cloud, description=config.description if config else '')
        if entries is not None:
            stored = self._read_json(self._listing_path(cloud))
            if isinstance(stored, dict) and stored.get('cloud') == cloud:
                previous = CategoryListing.from_dict(stored)
                listing.objects = self._members(previous, entries)
                listing.description = listing.description or previous.description
        return listing

    @staticmethod
    def _members(listing: CategoryListing, entries: dict[str, IndexEntry]) -> list[str]:
        """Names of ``listing`` whose index entry still includes its cloud."""
        return [
            name for name in listing.objects
            if name in entries and listing.cloud in entries[name].clouds
        ]

    def _listing_files(self) -> list[tuple[str, CategoryListing]]:
        """(file stem, listing) for every listing file already in output_dir."""
        found: list[tuple[str, CategoryListing]] = []
        if not os.path.isdir(self._output_dir):
            return found
        for name in sorted(os.listdir(self._output_dir)):
            if not name.endswith('.json') or name in (INDEX_FILE, ERRORS_FILE):
                continue
            data = self._read_json(os.path.join(self._output_dir, name))
            # Only files with the listing structure
            if isinstance(data, dict) and data.get('cloud') and isinstance(data.get('objects'), list):
                found.append((name[:-len('.json')], CategoryListing.from_dict(data)))
        return found

    def _prune_listings(self, entries: dict[str, IndexEntry]) -> dict[str, dict]:
        """Drop non-members from every listing on disk and summarize what is left."""
        summaries: dict[str, dict] = {}
        for stem, listing in self._listing_files():
            members = self._members(listing, entries)
            path = os.path.join(self._output_dir, f"{stem}.json")
            if not members:
                os.remove(path)
                logger.info("Removed listing for %s: no remaining members", listing.cloud)
                continue
            if sorted(members) != sorted(listing.objects):
                logger.info("Pruned %d stale name(s) from listing for %s",
                            listing.object_count - len(members), listing.cloud)
                listing.objects = members
                self._write_json(path, listing.to_dict())
            summaries[stem] = self._cloud_summary(listing)
        return summaries

    def _remove_listings(self, exclude: set[str]) -> None:
        for stem, listing in self._listing_files():
            if stem in exclude:
                continue
            os.remove(os.path.join(self._output_dir, f"{stem}.json"))
            logger.info("Removed stale listing for %s", listing.cloud)

    @staticmethod
    def _cloud_summary(listing: CategoryListing) -> dict[str, Any]:
        return {
            'cloud': listing.cloud,
            'fileName': cloud_file_name(listing.cloud),
            'description': listing.description,
            'objectCount': listing.object_count,
        }

    @staticmethod
    def _is_storable(name: str) -> bool:
        if not name or name in ('.', '..') or '/' in name or '\\' in name:
            logger.warning("Skipping object with unusable storage name: %r", name)
            return False
        return True

    def _object_file(self, name: str) -> str:
        return os.path.join(self._output_dir, *object_path(name).split('/'))

    def _listing_path(self, cloud: str) -> str:
        return os.path.join(self._output_dir, f"{cloud_file_name(cloud)}.json")

    @staticmethod
    def _read_json(path: str) -> Any:
        try:
            with open(path, encoding='utf-8') as f:
                return json.load(f)
        except (OSError, ValueError):
            return None

    def _write_json(self, path: str, data: Any) -> None:
        """Write data as JSON to a file."""
        os.makedirs(os.path.dirname(path), exist_ok=True)
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=self._indent, ensure_ascii=False)
            f.write('\n')
