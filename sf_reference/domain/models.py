"""Shared data models used across the ingestion and read modules."""

from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

from sf_reference.config import CHUNK_SIZE, DEFAULT_ITEM_TIMEOUT, DEFAULT_VERSION

T = TypeVar('T')

# Index attributes written by enrichment scripts; carried through untouched.
ENRICHMENT_KEYS = ('keyPrefix', 'label', 'icon')


@dataclass
class CatalogNode:
    """A node of a documentation table of contents."""

    identifier: str
    text: str = ''
    reference: str | None = None
    children: list['CatalogNode'] = field(default_factory=list)
    is_branch: bool = False

    @classmethod
    def from_dict(cls, raw: Any) -> 'CatalogNode | None':
        """Build a node from toc JSON; returns None for non-object entries.

        A missing id is kept as an empty string: branches are still walked,
        and such leaves never match an object page prefix.
        """
        if not isinstance(raw, dict):
            return None
        identifier = raw.get('id')
        if not isinstance(identifier, str):
            identifier = ''
        attrs = raw.get('a_attr') or {}
        reference = attrs.get('href') if isinstance(attrs, dict) else None
        raw_children = raw.get('children')
        if not isinstance(raw_children, list):
            raw_children = []
        children = []
        for child in raw_children:
            node = cls.from_dict(child)
            if node is not None:
                children.append(node)
        return cls(
            identifier=identifier,
            text=raw['text'] if isinstance(raw.get('text'), str) else '',
            reference=reference,
            children=children,
            is_branch=bool(raw_children),
        )


@dataclass
class CatalogDocument:
    """Header and table of contents for one documentation id."""

    documentation_id: str
    deliverable: str
    doc_version: str
    toc: list[Any] = field(default_factory=list)


@dataclass
class LeafReference:
    """An entity page discovered in a table of contents."""

    identifier: str
    text: str
    reference: str
    documentation_id: str


@dataclass
class RawPage:
    """Unparsed content for one leaf reference."""

    documentation_id: str
    reference: str
    markup: str
    title: str = ''
    deliverable: str = ''


@dataclass
class FieldSpec:
    """One documented field of an object."""

    name: str
    type: str = ''
    description: str = ''

    def to_dict(self) -> dict[str, str]:
        return {'type': self.type, 'description': self.description}


@dataclass
class ParsedPage:
    """Successful parser output for one page."""

    name: str
    description: str
    fields: dict[str, FieldSpec]
    page: RawPage


@dataclass
class FailedItem:
    """A pipeline item that was dropped, and why."""

    ref: str
    reason: str

    def to_dict(self) -> dict[str, str]:
        return {'ref': self.ref, 'reason': self.reason}


@dataclass
class StageSummary(Generic[T]):
    """Successes and failures of one pipeline stage."""

    succeeded: list[T] = field(default_factory=list)
    failed: list[FailedItem] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.succeeded) + len(self.failed)


@dataclass
class EntityRecord:
    """A documented object with its fields and cloud membership.

    ``cloud`` is the primary cloud (the first one that produced the object);
    ``clouds`` lists every cloud that references it, primary first.
    """

    name: str
    description: str
    fields: dict[str, FieldSpec]
    cloud: str
    clouds: list[str] = field(default_factory=list)
    source_url: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            'name': self.name,
            'description': self.description,
            'properties': {name: spec.to_dict() for name, spec in self.fields.items()},
            'module': self.cloud,
        }
        if self.source_url:
            data['sourceUrl'] = self.source_url
        data['clouds'] = list(self.clouds)
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> 'EntityRecord':
        properties = data.get('properties') or {}
        fields = {
            name: FieldSpec(name=name, type=spec.get('type', ''), description=spec.get('description', ''))
            for name, spec in properties.items()
            if name
        }
        cloud = data.get('module') or ''
        return cls(
            name=data.get('name', ''),
            description=data.get('description', ''),
            fields=fields,
            cloud=cloud,
            clouds=list(data.get('clouds') or ([cloud] if cloud else [])),
            source_url=data.get('sourceUrl'),
        )


@dataclass
class IndexEntry:
    """Master-index summary of one object."""

    cloud: str
    file: str
    description: str = ''
    field_count: int = 0
    clouds: list[str] = field(default_factory=list)
    source_url: str | None = None
    extras: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            'cloud': self.cloud,
            'file': self.file,
            'description': self.description,
            'fieldCount': self.field_count,
        }
        if self.source_url:
            data['sourceUrl'] = self.source_url
        data['clouds'] = list(self.clouds)
        for key in sorted(self.extras):
            data[key] = self.extras[key]
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> 'IndexEntry':
        cloud = data.get('cloud', '')
        return cls(
            cloud=cloud,
            file=data.get('file', ''),
            description=data.get('description', ''),
            field_count=data.get('fieldCount', 0),
            clouds=list(data.get('clouds') or ([cloud] if cloud else [])),
            source_url=data.get('sourceUrl'),
            extras={k: data[k] for k in ENRICHMENT_KEYS if k in data},
        )


@dataclass
class CategoryListing:
    """Names of the objects belonging to one cloud."""

    cloud: str
    description: str = ''
    objects: list[str] = field(default_factory=list)

    @property
    def object_count(self) -> int:
        return len(self.objects)

    def to_dict(self) -> dict[str, Any]:
        return {
            'cloud': self.cloud,
            'description': self.description,
            'objectCount': self.object_count,
            'objects': sorted(self.objects),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> 'CategoryListing':
        return cls(
            cloud=data.get('cloud', ''),
            description=data.get('description', ''),
            objects=list(data.get('objects') or []),
        )


@dataclass
class IngestOptions:
    """Options controlling an ingestion run."""

    version: str = DEFAULT_VERSION
    documentation_ids: list[str] = field(default_factory=list)
    concurrency: int = CHUNK_SIZE
    item_timeout: float = DEFAULT_ITEM_TIMEOUT
    incremental: bool = False
    pretty: bool = True


@dataclass
class IngestResult:
    """Result summary of an ingestion run."""

    leaves_found: int
    fetched: int
    parsed: int
    objects_written: int
    clouds_written: int
    output_dir: str
    snapshot_hash: str = ''
    fetch_failures: list[FailedItem] = field(default_factory=list)
    parse_failures: list[FailedItem] = field(default_factory=list)

    @property
    def errors_count(self) -> int:
        return len(self.fetch_failures) + len(self.parse_failures)
