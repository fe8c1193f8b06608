"""
esgateway CLI — Command-Line Interface
======================================

Command-line access to the gateway, mostly for poking at a cluster.

Usage:
    python -m esgateway nodes
    python -m esgateway indices
    python -m esgateway create products --mapping products.json
    python -m esgateway delete products -f
    python -m esgateway refresh products
    python -m esgateway mapping products
    python -m esgateway get products 1
    python -m esgateway search products match bike --field skuName --sort id
"""

import argparse
import json
import logging
from pathlib import Path
from typing import List, Optional

from . import query as q
from .config import ConnectionConfig, parse_hosts
from .core import Gateway
from .errors import GatewayError

# variant name -> builder taking (text, field)
SEARCH_VARIANTS = {
    "match_all": lambda text, field: q.match_all(),
    "match": lambda text, field: q.match(field, text),
    "match_phrase_prefix": lambda text, field: q.match_phrase_prefix(field, text),
    "term": lambda text, field: q.term(field, text),
    "fuzzy": lambda text, field: q.fuzzy(field, text),
    "wildcard": lambda text, field: q.wildcard(field, text),
    "query_string": lambda text, field: q.query_string(text),
    "span_term": lambda text, field: q.span_term(field, text),
    "ids": lambda text, field: q.ids(text.split(",")),
}

# variants that search one field and need --field
FIELD_VARIANTS = {"match", "match_phrase_prefix", "term", "fuzzy", "wildcard", "span_term"}


def get_config(args) -> ConnectionConfig:
    """Environment settings, overridden by command-line options."""
    config = ConnectionConfig.from_env(env_file=args.env_file)
    if args.hosts:
        config.hosts = parse_hosts(args.hosts)
    if args.api_key:
        config.api_key = args.api_key
    if args.username:
        config.username = args.username
        config.password = args.password
    return config


def cmd_nodes(gw: Gateway, args):
    """List cluster nodes."""
    nodes = gw.cluster.get_all_nodes()

    print(f"\n{'Node':<30} {'IP':<16} {'Roles':<12} {'Heap %':>8}")
    print("-" * 70)
    for node in nodes:
        print(
            f"{node.get('name', ''):<30} "
            f"{node.get('ip', ''):<16} "
            f"{node.get('node.role', ''):<12} "
            f"{node.get('heap.percent', ''):>8}"
        )


def cmd_indices(gw: Gateway, args):
    """List all indices."""
    indices = gw.indices.get_all_indices()

    print(f"\n{'Index':<30} {'Health':<8} {'Docs':>12} {'Size':>10}")
    print("-" * 65)
    for idx in indices:
        if idx["index"].startswith("."):
            continue
        print(
            f"{idx['index']:<30} "
            f"{idx.get('health', 'unknown'):<8} "
            f"{int(idx.get('docs.count') or 0):>12,} "
            f"{idx.get('store.size') or '0b':>10}"
        )


def cmd_create(gw: Gateway, args):
    """Create (or recreate) an index."""
    mapping = None
    if args.mapping:
        mapping = Path(args.mapping).read_text(encoding="utf-8")

    settings = {"number_of_shards": args.shards, "number_of_replicas": args.replicas}
    acknowledged = gw.indices.create(args.index, mapping, settings)
    print(f"Created index: {args.index} (acknowledged: {acknowledged})")


def cmd_delete(gw: Gateway, args):
    """Delete an index."""
    if not args.force:
        confirm = input(f"Delete index '{args.index}'? [y/N] ")
        if confirm.lower() != 'y':
            print("Aborted.")
            return

    gw.indices.delete(args.index)
    print(f"Deleted index: {args.index}")


def cmd_refresh(gw: Gateway, args):
    ok = gw.indices.refresh(args.index)
    print(f"Refresh {args.index}: {'ok' if ok else 'FAILED'}")


def cmd_flush(gw: Gateway, args):
    ok = gw.indices.flush(args.index)
    print(f"Flush {args.index}: {'ok' if ok else 'FAILED'}")


def cmd_mapping(gw: Gateway, args):
    """Print an index mapping."""
    print(json.dumps(gw.indices.get_mapping(args.index), indent=2, ensure_ascii=False))


def cmd_get(gw: Gateway, args):
    """Print one document."""
    hit = gw.search.search_by_id(args.index, args.id)
    if hit is None:
        print(f"Not found: {args.index}/{args.id}")
        return
    print(json.dumps(hit.source, indent=2, ensure_ascii=False))


def cmd_search(gw: Gateway, args):
    """Search an index with one query variant."""
    query = SEARCH_VARIANTS[args.variant](args.text, args.field)
    results = gw.search.execute(
        args.index, query, args.sort, args.from_index, args.size, args.desc
    )

    print(f"\nQuery: {json.dumps(query.to_dict(), ensure_ascii=False)}")
    print(f"Results: {len(results)}\n")
    for doc in results:
        print(json.dumps(doc, ensure_ascii=False))


COMMANDS = {
    "nodes": cmd_nodes,
    "indices": cmd_indices,
    "create": cmd_create,
    "delete": cmd_delete,
    "refresh": cmd_refresh,
    "flush": cmd_flush,
    "mapping": cmd_mapping,
    "get": cmd_get,
    "search": cmd_search,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="esgateway",
        description="esgateway — search engine client gateway"
    )

    # Global options
    parser.add_argument("--hosts", help="Node URLs (comma-separated)", default=None)
    parser.add_argument("--api-key", dest="api_key", help="API key", default=None)
    parser.add_argument("--username", help="Basic auth user", default=None)
    parser.add_argument("--password", help="Basic auth password", default=None)
    parser.add_argument("--env-file", dest="env_file", help=".env file", default=None)
    parser.add_argument("-v", "--verbose", action="store_true", help="Log requests")

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    subparsers.add_parser("nodes", help="List cluster nodes")
    subparsers.add_parser("indices", help="List all indices")

    create_parser = subparsers.add_parser("create", help="Create (or recreate) an index")
    create_parser.add_argument("index", help="Index name")
    create_parser.add_argument("--mapping", help="JSON mapping file")
    create_parser.add_argument("--shards", type=int, default=1, help="Primary shards")
    create_parser.add_argument("--replicas", type=int, default=1, help="Replica shards")

    delete_parser = subparsers.add_parser("delete", help="Delete an index")
    delete_parser.add_argument("index", help="Index name")
    delete_parser.add_argument("-f", "--force", action="store_true", help="Skip confirmation")

    for name in ("refresh", "flush", "mapping"):
        sub = subparsers.add_parser(name, help=f"{name.capitalize()} an index")
        sub.add_argument("index", help="Index name")

    get_parser = subparsers.add_parser("get", help="Show one document")
    get_parser.add_argument("index", help="Index name")
    get_parser.add_argument("id", help="Document id")

    search_parser = subparsers.add_parser("search", help="Search an index")
    search_parser.add_argument("index", help="Index name")
    search_parser.add_argument("variant", choices=sorted(SEARCH_VARIANTS), help="Query variant")
    search_parser.add_argument("text", nargs="?", default="", help="Search text")
    search_parser.add_argument("--field", help="Field to search")
    search_parser.add_argument("--sort", help="Field to sort on")
    search_parser.add_argument("--from", dest="from_index", type=int, default=0,
                               help="Offset of the first hit")
    search_parser.add_argument("--size", type=int, default=10, help="Max results")
    search_parser.add_argument("--desc", action="store_true", help="Sort descending")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )

    command = COMMANDS.get(args.command)
    if command is None:
        parser.print_help()
        return 1

    if args.command == "search" and args.variant in FIELD_VARIANTS and not args.field:
        parser.error(f"search variant '{args.variant}' requires --field")

    with Gateway(config=get_config(args)) as gw:
        try:
            command(gw, args)
        except GatewayError as e:
            print(f"Error: {e}")
            return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
