#!/usr/bin/env python3
"""
Maintenance commands for the durable translation cache.

Usage:
    python scripts/cache_admin.py sweep
    python scripts/cache_admin.py clear --yes
    python scripts/cache_admin.py invalidate --text "謝謝" --lang ja
    python scripts/cache_admin.py stats

Run ``sweep`` periodically (cron, scheduler) to delete expired entries that
are never read again; reads already drop expired entries on their own.
"""

import argparse
import logging
import sys

from translation_cache.config import Settings, get_settings
from translation_cache.repositories import InMemoryEntryRepository, RedisEntryRepository
from translation_cache.services import CacheKeyCodec, TierTwoCache

logger = logging.getLogger("cache_admin")


def build_tier_two(settings: Settings) -> TierTwoCache:
    """Build the durable tier the API would use with these settings."""
    if settings.tier_two_backend == "memory":
        logger.warning("TIER_TWO_BACKEND=memory: operating on an empty in-process store")
        store = InMemoryEntryRepository()
    else:
        store = RedisEntryRepository.create(settings)
    return TierTwoCache(store=store, ttl=settings.tier_two_ttl)


def cmd_sweep(cache: TierTwoCache, settings: Settings, args: argparse.Namespace) -> int:
    deleted = cache.sweep_expired()
    print(f"Removed {deleted} expired entries (ttl {settings.cache_expiration_days} days)")
    return 0


def cmd_clear(cache: TierTwoCache, settings: Settings, args: argparse.Namespace) -> int:
    if not args.yes:
        print("Refusing to clear the cache without --yes", file=sys.stderr)
        return 2
    deleted = cache.clear()
    print(f"Deleted {deleted} entries from {settings.cache_namespace}")
    return 0


def cmd_invalidate(cache: TierTwoCache, settings: Settings, args: argparse.Namespace) -> int:
    codec = CacheKeyCodec(prefix_chars=settings.key_prefix_chars)
    key = codec.derive(args.text, args.lang, args.schema_version or settings.schema_version)
    if cache.invalidate(key):
        print(f"Deleted entry {key.token[:12]}... for {args.lang}")
        return 0
    print(f"No entry cached for {args.lang}")
    return 1


def cmd_stats(cache: TierTwoCache, settings: Settings, args: argparse.Namespace) -> int:
    stats = cache.get_stats()
    print(f"Namespace:      {settings.cache_namespace}")
    print(f"Schema version: {settings.schema_version}")
    print(f"Entries:        {stats['total_entries']}")
    print(f"TTL (seconds):  {stats['ttl']}")
    print(f"Healthy:        {cache.health_check()}")
    return 0


COMMANDS = {
    "sweep": cmd_sweep,
    "clear": cmd_clear,
    "invalidate": cmd_invalidate,
    "stats": cmd_stats,
}


def build_arg_parser() -> argparse.ArgumentParser:
    """Build argument parser for the maintenance CLI."""
    p = argparse.ArgumentParser(
        prog="cache_admin",
        description="Maintenance commands for the durable translation cache",
    )
    sub = p.add_subparsers(dest="cmd", required=True)

    sub.add_parser("sweep", help="Delete entries older than CACHE_EXPIRATION_DAYS")

    clear = sub.add_parser("clear", help="Delete every entry in the namespace")
    clear.add_argument("--yes", action="store_true", help="Confirm the bulk delete")

    invalidate = sub.add_parser("invalidate", help="Delete the entry for one text and language")
    invalidate.add_argument("--text", required=True, help="Source text exactly as it was sent")
    invalidate.add_argument("--lang", required=True, help="Target language code")
    invalidate.add_argument(
        "--schema-version",
        default=None,
        help="Schema version the entry was written under (default: current)",
    )

    sub.add_parser("stats", help="Show entry count and TTL")

    return p


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the maintenance CLI."""
    args = build_arg_parser().parse_args(argv)
    settings = get_settings()
    logging.basicConfig(level=settings.log_level.upper(), format="%(levelname)s %(message)s")

    cache = build_tier_two(settings)
    if not cache.health_check():
        print("Durable tier is not reachable", file=sys.stderr)
        return 1
    return COMMANDS[args.cmd](cache, settings, args)


if __name__ == "__main__":
    sys.exit(main())
