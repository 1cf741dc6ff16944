"""Table of contents traversal.

Walks the nested toc of a documentation set and collects the leaf pages
that document objects.
"""

from typing import Any, Iterator

from sf_reference.domain.constants import ENTITY_PAGE_PREFIXES
from sf_reference.domain.models import CatalogNode, LeafReference


def walk_catalog(
    documentation_id: str,
    toc: list[Any] | None,
    prefixes: tuple[str, ...] = ENTITY_PAGE_PREFIXES,
) -> list[LeafReference]:
    """Collect object pages from a table of contents.

    Args:
        documentation_id: Documentation set the toc belongs to.
        toc: Top-level toc nodes as decoded JSON.
        prefixes: Identifier prefixes that mark an object page.

    Returns:
        Leaf references, deduplicated by identifier (first wins) and
        sorted by display text.
    """
    seen: set[str] = set()
    leaves: list[LeafReference] = []
    for raw in toc or []:
        node = CatalogNode.from_dict(raw)
        if node is None:
            continue
        for leaf in _iter_leaves(node, prefixes):
            if leaf.identifier in seen:
                continue
            seen.add(leaf.identifier)
            leaves.append(LeafReference(
                identifier=leaf.identifier,
                text=leaf.text,
                reference=leaf.reference,
                documentation_id=documentation_id,
            ))
    return sorted(leaves, key=lambda leaf: leaf.text)


def _iter_leaves(node: CatalogNode, prefixes: tuple[str, ...]) -> Iterator[CatalogNode]:
    if node.is_branch:
        for child in node.children:
            yield from _iter_leaves(child, prefixes)
        return
    # Pages without a link cannot be fetched.
    if node.identifier.startswith(prefixes) and node.reference:
        yield node
