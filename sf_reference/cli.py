"""CLI for sf-reference."""

import argparse
import json
import logging
import os
import sys
import time

from sf_reference.catalog.client import CatalogFetchError, DocsClient
from sf_reference.catalog.walker import walk_catalog
from sf_reference.config import CONFIGURATION, resolve_clouds
from sf_reference.domain.models import IngestOptions, IngestResult, LeafReference, RawPage
from sf_reference.fetcher import BoundedFetcher
from sf_reference.output.shard_writer import ShardWriter
from sf_reference.parsers.field_table_parser import FieldTableParser
from sf_reference.reader import LocalStorage, TieredReader
from sf_reference.snapshot_hash import SnapshotHashService
from sf_reference.synthesis.merger import merge_records
from sf_reference.synthesis.synthesizer import EntitySynthesizer

logger = logging.getLogger(__name__)


def ingest(output_dir: str, options: IngestOptions, client: DocsClient | None = None) -> IngestResult:
    """Main orchestration: tables of contents -> pages -> objects -> JSON output."""
    start_time = time.time()
    clouds = resolve_clouds(options.documentation_ids)
    owns_client = client is None
    client = client or DocsClient(timeout=options.item_timeout)
    try:
        return _run_pipeline(output_dir, options, clouds, client, start_time)
    finally:
        if owns_client:
            client.close()


def _run_pipeline(output_dir, options, clouds, client, start_time) -> IngestResult:
    # Walk every toc first; leaves keep configuration order across clouds
    leaves: list[LeafReference] = []
    for documentation_id, config in clouds.items():
        logger.info("Fetching %s (%s)...", config.label, documentation_id)
        try:
            document = client.get_document(documentation_id)
        except CatalogFetchError as e:
            logger.error("Error fetching %s: %s", documentation_id, e)
            continue
        found = walk_catalog(documentation_id, document.toc)
        logger.info("  Found %d objects", len(found))
        leaves.extend(found)

    fetcher: BoundedFetcher[LeafReference, RawPage] = BoundedFetcher(
        client.get_content,
        concurrency=options.concurrency,
        item_timeout=options.item_timeout,
        describe=lambda leaf: leaf.reference,
    )
    fetched = fetcher.run(leaves)

    parsed = FieldTableParser().parse_all(fetched.succeeded)
    candidates = EntitySynthesizer(clouds).synthesize_all(parsed.succeeded)
    records = merge_records(candidates)

    writer = ShardWriter(output_dir, clouds=CONFIGURATION, pretty=options.pretty)
    written = writer.write(records, version=options.version, incremental=options.incremental)
    writer.write_errors(fetched.failed + parsed.failed)

    logger.info("Ingestion finished in %.2fs", time.time() - start_time)
    return IngestResult(
        leaves_found=len(leaves),
        fetched=len(fetched.succeeded),
        parsed=len(parsed.succeeded),
        objects_written=written.objects_written,
        clouds_written=written.clouds_written,
        output_dir=output_dir,
        snapshot_hash=SnapshotHashService.hash_directory(output_dir),
        fetch_failures=fetched.failed,
        parse_failures=parsed.failed,
    )


def main():
    parser = argparse.ArgumentParser(prog='sf-reference', description='Salesforce object reference scraper')
    parser.add_argument('-v', '--verbose', action='store_true', help='Enable debug logging')
    subparsers = parser.add_subparsers(dest='command')

    # fetch command
    fetch_parser = subparsers.add_parser('fetch', help='Scrape documentation and write JSON')
    fetch_parser.add_argument('output', help='Output directory')
    fetch_parser.add_argument('--version', dest='doc_version', default=IngestOptions.version,
                              help=f'API version recorded in the index (default: {IngestOptions.version})')
    fetch_parser.add_argument('--cloud', action='append', dest='clouds', metavar='DOC_ID',
                              help='Only fetch this documentation ID (repeatable); merges into existing output')
    fetch_parser.add_argument('--concurrency', type=int, default=IngestOptions.concurrency,
                              help=f'Pages fetched per batch (default: {IngestOptions.concurrency})')
    fetch_parser.add_argument('--timeout', type=float, default=IngestOptions.item_timeout,
                              help=f'Per-page deadline in seconds (default: {IngestOptions.item_timeout:g})')
    fetch_parser.add_argument('--no-pretty', action='store_true', help='Disable pretty printing')

    # clouds command
    subparsers.add_parser('clouds', help='List configured documentation sets')

    # show command
    show_parser = subparsers.add_parser('show', help='Print one object from generated data')
    show_parser.add_argument('data_dir', help='Directory written by the fetch command')
    show_parser.add_argument('name', help='Object name')
    show_parser.add_argument('--cloud', help='Report the object under this cloud')

    args = parser.parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )

    if args.command == 'fetch':
        options = IngestOptions(
            version=args.doc_version,
            documentation_ids=args.clouds or [],
            concurrency=args.concurrency,
            item_timeout=args.timeout,
            incremental=bool(args.clouds),
            pretty=not args.no_pretty,
        )
        try:
            resolve_clouds(options.documentation_ids)
        except ValueError as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)

        print(f"Fetching documents for version {options.version}...")
        result = ingest(args.output, options)
        print(f"Done! Wrote {result.objects_written} objects in {result.clouds_written} clouds "
              f"({len(result.fetch_failures)} fetch errors, {len(result.parse_failures)} parse errors)")
        print(f"Found {result.leaves_found} pages, fetched {result.fetched}, parsed {result.parsed}")
        print(f"Output: {result.output_dir}")

    elif args.command == 'clouds':
        for documentation_id, config in CONFIGURATION.items():
            print(f"  {config.label:<32} {documentation_id}")

    elif args.command == 'show':
        if not os.path.isdir(args.data_dir):
            print(f"Error: {args.data_dir} not found", file=sys.stderr)
            sys.exit(1)
        reader = TieredReader(LocalStorage(args.data_dir))
        record = reader.get_object(args.name, cloud=args.cloud)
        if record is None:
            print(f"Object '{args.name}' not found", file=sys.stderr)
            sys.exit(1)
        print(json.dumps(record.to_dict(), indent=2, ensure_ascii=False))

    else:
        parser.print_help()


if __name__ == '__main__':
    main()
