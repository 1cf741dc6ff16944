"""First-character bucketing of object storage units."""

import string

from sf_reference.domain.constants import FALLBACK_BUCKET, OBJECTS_DIR

BUCKETS = tuple(string.ascii_uppercase) + (FALLBACK_BUCKET,)


def bucket_for(name: str) -> str:
    """Return the bucket holding ``name``: its upper-cased first letter, or '_'.

    Raises:
        ValueError: If ``name`` is empty.
    """
    if not name:
        raise ValueError("Cannot bucket an empty object name")
    first = name[0].upper()
    return first if first in string.ascii_uppercase else FALLBACK_BUCKET


def object_path(name: str) -> str:
    """Relative storage path of an object unit, with '/' separators."""
    return f"{OBJECTS_DIR}/{bucket_for(name)}/{name}.json"
