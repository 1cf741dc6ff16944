"""
Salesforce Object Reference MCP Server.

Exposes generated object reference data (master index, cloud listings,
object field tables) to LLM clients via the Model Context Protocol.

Usage:
    # Local mode (reads from filesystem)
    python -m mcp_server --data-dir /path/to/doc

    # GitHub mode (reads raw files from a GitHub repo)
    python -m mcp_server --github owner/repo [--branch main] [--data-prefix doc]

    # Any static mirror
    python -m mcp_server --base-url https://cdn.example.com/sf-reference
"""

from __future__ import annotations

import json
import os
import re
import sys

from mcp.server.fastmcp import FastMCP

from sf_reference.config import DATA_DIR_ENV
from sf_reference.reader import HttpStorage, LocalStorage, TieredReader

# ── Globals ─────────────────────────────────────────────────────────────

_reader: TieredReader | None = None
mcp = FastMCP("sf-object-reference")


def _get_reader() -> TieredReader:
    if _reader is None:
        raise RuntimeError("Reader not initialized")
    return _reader


def _truncate(data: dict | list, max_chars: int = 80_000) -> dict | list:
    text = json.dumps(data, ensure_ascii=False)
    if len(text) <= max_chars:
        return data
    return {
        "_truncated": True,
        "_message": f"Response too large ({len(text):,} chars). Use get_object for individual objects.",
    }


# ── Tools ───────────────────────────────────────────────────────────────


@mcp.tool()
def list_clouds() -> list[dict]:
    """List all Salesforce clouds in the reference with their object counts.

    Call this first to discover what's available.
    """
    reader = _get_reader()
    return [
        {"cloud": cloud, "object_count": reader.get_cloud_listing(cloud).object_count}
        for cloud in reader.list_clouds()
    ]


@mcp.tool()
def get_cloud(cloud: str) -> dict:
    """Get the description and object names of one cloud.

    Args:
        cloud: Cloud name (e.g. "Financial Services Cloud") or its file name
               (e.g. "financial-services-cloud").
    """
    listing = _get_reader().get_cloud_listing(cloud)
    return listing.to_dict()


@mcp.tool()
def search_objects(query: str, cloud: str | None = None) -> list[dict] | dict:
    """Search objects by name.

    Args:
        query: Case-insensitive regular expression matched against object names.
        cloud: Optional cloud name to restrict results to its members.
    """
    reader = _get_reader()
    try:
        results = reader.search_by_name(query)
    except re.error as e:
        return {"error": f"Invalid pattern: {e}", "query": query}
    if cloud:
        members = set(reader.get_cloud_listing(cloud).objects)
        results = [r for r in results if r["name"] in members]
    return results[:50]


@mcp.tool()
def search_descriptions(query: str) -> list[dict] | dict:
    """Search objects by the text of their description.

    Args:
        query: Case-insensitive regular expression matched against descriptions.
    """
    try:
        return _get_reader().search_by_description(query)[:50]
    except re.error as e:
        return {"error": f"Invalid pattern: {e}", "query": query}


@mcp.tool()
def get_object_summary(name: str) -> dict:
    """Get the lightweight index entry (clouds, field count, doc link) for an object.

    Args:
        name: Exact object API name (e.g. "Account").
    """
    entry = _get_reader().get_index_entry(name)
    if entry is None:
        return {"error": f"Object '{name}' not found", "name": name}
    return entry.to_dict()


@mcp.tool()
def get_object(name: str, cloud: str | None = None) -> dict:
    """Get an object's full field table.

    Args:
        name: Exact object API name (e.g. "FinancialAccount").
        cloud: Optional cloud the object is being viewed from; reported as the
               object's cloud when the object belongs to it.
    """
    record = _get_reader().get_object(name, cloud=cloud)
    if record is None:
        return {"error": f"Object '{name}' not found", "name": name}
    return _truncate(record.to_dict())


# ── Entry point ─────────────────────────────────────────────────────────

def main():
    import argparse

    parser = argparse.ArgumentParser(description="Salesforce Object Reference MCP Server")
    group = parser.add_mutually_exclusive_group()
    group.add_argument("--data-dir", help=f"Local directory written by 'sf-reference fetch' (or ${DATA_DIR_ENV})")
    group.add_argument("--github", metavar="OWNER/REPO", help="GitHub repository holding generated data")
    group.add_argument("--base-url", help="Base URL of a static mirror of generated data")
    parser.add_argument("--branch", default="main", help="Git branch (default: main)")
    parser.add_argument("--data-prefix", default="doc", help="Path prefix in repo for generated data (default: doc)")

    args = parser.parse_args()

    global _reader
    if args.github:
        parts = args.github.split("/", 1)
        if len(parts) != 2:
            print("Error: --github must be OWNER/REPO format", file=sys.stderr)
            sys.exit(1)
        storage = HttpStorage(
            f"https://raw.githubusercontent.com/{parts[0]}/{parts[1]}/{args.branch}/{args.data_prefix}"
        )
    elif args.base_url:
        storage = HttpStorage(args.base_url)
    else:
        data_dir = args.data_dir or os.environ.get(DATA_DIR_ENV)
        if not data_dir:
            print(f"Error: pass --data-dir, --github or --base-url, or set {DATA_DIR_ENV}", file=sys.stderr)
            sys.exit(1)
        data_dir = os.path.abspath(data_dir)
        if not os.path.isdir(data_dir):
            print(f"Error: {data_dir} is not a directory", file=sys.stderr)
            sys.exit(1)
        storage = LocalStorage(data_dir)

    _reader = TieredReader(storage)
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
