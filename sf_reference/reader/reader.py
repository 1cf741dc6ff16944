"""Tiered read access to written reference data.

Three tiers, each loaded on first use and cached by the reader's
``ReaderCache``:

    index.json              master index, resident once loaded
    {cloud-file-name}.json  one listing per cloud
    objects/{B}/{name}.json one object per name, bucketed by first letter

Not-found lookups return None or an empty result; they never raise.
A unit that could not be retrieved reads as missing but is not cached,
so the next lookup tries storage again.
"""

import logging
import re
from dataclasses import replace
from threading import Lock
from typing import Any, Iterable, Pattern

from sf_reference.config import cloud_file_name
from sf_reference.domain.buckets import object_path
from sf_reference.domain.constants import INDEX_FILE
from sf_reference.domain.models import ENRICHMENT_KEYS, CategoryListing, EntityRecord, IndexEntry
from sf_reference.reader.cache import ReaderCache
from sf_reference.reader.storage import StorageAdapter, StorageError

logger = logging.getLogger(__name__)


def _compile(pattern: str | Pattern[str]) -> Pattern[str]:
    if isinstance(pattern, str):
        return re.compile(pattern, re.IGNORECASE)
    return pattern



def _sanitize_index(index: Any) -> dict[str, Any]:
    """Index with dict-valued ``objects`` and ``clouds``; malformed entries are dropped."""
    if not isinstance(index, dict):
        index = {}
    for key in ('objects', 'clouds'):
        section = index.get(key)
        if not isinstance(section, dict):
            if section is not None:
                logger.warning("Index %r is not an object; ignoring it", key)
            section = {}
        index[key] = {name: value for name, value in section.items() if isinstance(value, dict)}
    return index


class TieredReader:
    """Query API over the master index, cloud listings and object units.

    Args:
        storage: Where storage units are loaded from.
        cache: Cache to populate; a fresh one is created if omitted.
    """

    def __init__(self, storage: StorageAdapter, cache: ReaderCache | None = None):
        self._storage = storage
        self._cache = cache or ReaderCache()
        self._swap_lock = Lock()

    @property
    def cache(self) -> ReaderCache:
        with self._swap_lock:
            return self._cache

    def invalidate(self) -> None:
        """Drop every cached tier."""
        with self._swap_lock:
            self._cache = ReaderCache()

    # ── Tier 1: master index ────────────────────────────────────────────

    def load_index(self) -> dict[str, Any]:
        cache = self.cache
        index = cache.get_index()
        if index is not None:
            return index
        try:
            index = self._storage.load_json(INDEX_FILE)
        except FileNotFoundError:
            logger.warning("Index file not found; the reference data may not be generated yet")
            index = {}
        except (StorageError, OSError) as e:
            logger.error("Could not load index: %s", e)
            return _sanitize_index({})
        except ValueError as e:
            logger.warning("Index file is not valid JSON: %s", e)
            index = {}
        index = _sanitize_index(index)
        cache.set_index(index)
        return index

    def list_clouds(self) -> list[str]:
        """Every cloud referenced by the index, sorted."""
        index = self.load_index()
        clouds = {summary.get('cloud') for summary in index['clouds'].values()}
        for entry in index['objects'].values():
            clouds.add(entry.get('cloud'))
            clouds.update(entry.get('clouds') or [])
        return sorted(c for c in clouds if c)

    def get_index_entry(self, name: str) -> IndexEntry | None:
        entry = self.load_index()['objects'].get(name)
        return IndexEntry.from_dict(entry) if entry is not None else None

    def search_by_name(self, pattern: str | Pattern[str]) -> list[dict[str, Any]]:
        """Objects whose name matches a regex (strings match case-insensitively)."""
        regex = _compile(pattern)
        return [
            {'name': name, 'cloud': entry.get('cloud', ''), 'file': entry.get('file', '')}
            for name, entry in self.load_index()['objects'].items()
            if regex.search(name)
        ]

    def search_by_description(self, pattern: str | Pattern[str]) -> list[dict[str, Any]]:
        """Objects whose description matches a regex."""
        regex = _compile(pattern)
        results = []
        for name, entry in self.load_index()['objects'].items():
            description = entry.get('description') or ''
            if not regex.search(description):
                continue
            result = {
                'name': name,
                'description': description,
                'cloud': entry.get('cloud', ''),
                'fieldCount': entry.get('fieldCount', 0),
            }
            result.update({k: entry[k] for k in ENRICHMENT_KEYS if k in entry})
            results.append(result)
        return results

    def get_descriptions_by_cloud(self, cloud: str) -> dict[str, dict[str, Any]]:
        """Lightweight description data for every object in a cloud."""
        descriptions = {}
        for name, entry in self.load_index()['objects'].items():
            if cloud not in (entry.get('clouds') or [entry.get('cloud')]):
                continue
            data = {'description': entry.get('description', ''), 'fieldCount': entry.get('fieldCount', 0)}
            data.update({k: entry[k] for k in ENRICHMENT_KEYS if k in entry})
            descriptions[name] = data
        return descriptions

    # ── Tier 2: cloud listings ──────────────────────────────────────────

    def get_cloud_listing(self, cloud: str) -> CategoryListing:
        """Listing for a cloud label (or its file name); empty if unknown."""
        cache = self.cache
        listing = cache.get_listing(cloud)
        if listing is not None:
            return CategoryListing(listing.cloud, listing.description, list(listing.objects))

        listing = CategoryListing(cloud=cloud)
        file_name = self._listing_file_name(cloud)
        if file_name is not None:
            try:
                data = self._storage.load_json(f"{file_name}.json")
                if isinstance(data, dict):
                    listing = CategoryListing.from_dict(data)
            except FileNotFoundError:
                logger.warning("Cloud file not found: %s.json", file_name)
            except (StorageError, OSError) as e:
                logger.error("Could not load cloud file %s.json: %s", file_name, e)
                return listing
            except ValueError as e:
                logger.warning("Cloud file %s.json is not valid JSON: %s", file_name, e)
        cache.set_listing(cloud, listing)
        return CategoryListing(listing.cloud, listing.description, list(listing.objects))

    def get_objects_in_cloud(self, cloud: str) -> list[EntityRecord]:
        """Full records of a cloud's objects, each reported under that cloud."""
        listing = self.get_cloud_listing(cloud)
        records = []
        for name in listing.objects:
            record = self.get_object(name, cloud=listing.cloud)
            if record is not None:
                records.append(record)
        return records

    def preload_clouds(self, clouds: Iterable[str]) -> None:
        for cloud in clouds:
            self.get_objects_in_cloud(cloud)

    # ── Tier 3: objects ─────────────────────────────────────────────────

    def get_object(self, name: str, cloud: str | None = None) -> EntityRecord | None:
        """Full record for ``name``, or None if it is not indexed.

        When ``cloud`` is one of the object's clouds, the returned record
        reports it as its cloud. Stored and cached data are left untouched.
        """
        if name not in self.load_index()['objects']:
            return None
        record = self._load_object(name)
        if record is None:
            return None
        result = replace(record, fields=dict(record.fields), clouds=list(record.clouds))
        if cloud and cloud in record.clouds:
            result.cloud = cloud
        return result

    def _load_object(self, name: str) -> EntityRecord | None:
        cache = self.cache
        if cache.has_object(name):
            return cache.get_object(name)
        record = None
        path = object_path(name)
        try:
            data = self._storage.load_json(path)
            if isinstance(data, dict) and isinstance(data.get(name), dict):
                record = EntityRecord.from_dict(data[name])
            else:
                logger.warning("Object file %s does not contain %s", path, name)
        except FileNotFoundError:
            logger.warning("Object file not found: %s", path)
        except (StorageError, OSError) as e:
            logger.error("Could not load object file %s: %s", path, e)
            return None
        except ValueError as e:
            logger.warning("Object file %s is not valid JSON: %s", path, e)
        cache.set_object(name, record)
        return record

    def _listing_file_name(self, cloud: str) -> str | None:
        summaries = self.load_index()['clouds']
        if cloud in summaries:
            return cloud
        file_name = cloud_file_name(cloud)
        if file_name in summaries:
            return file_name
        return None
