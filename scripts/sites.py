#!/usr/bin/env python3
"""
Manage directory sites from the command line.

Actions go to the sites API first (SITES_API_URL) and fall back to the
client-local store (LOCAL_STORAGE_PATH) when the API cannot be reached.

Usage:
  python scripts/sites.py list [--query anime]
  python scripts/sites.py add --name Foo --url https://foo.test --description "..." --category Movies
  python scripts/sites.py update 1712345678901 --name Bar --url https://bar.test --description "..." --category Movies
  python scripts/sites.py delete 1712345678901
  python scripts/sites.py seed
  python scripts/sites.py reset
"""
from __future__ import annotations

import argparse
from pathlib import Path
import sys
from typing import Sequence

# Make the streamverse package importable when run directly
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from streamverse.core.config import get_settings
from streamverse.core.logging_config import setup_logging
from streamverse.domain.sites import CATEGORIES, Site, SiteDraft, validate_draft
from streamverse.repositories.factory import local_storage
from streamverse.services.site_directory import DirectoryResult, SiteDirectory
from streamverse.services.site_display import search_sites


def _add_site_fields(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--name", required=True)
    parser.add_argument("--url", required=True, help="http:// or https:// URL")
    parser.add_argument("--description", required=True)
    parser.add_argument("--category", required=True, help=f"one of: {', '.join(CATEGORIES)}")
    parser.add_argument("--image-url", default="", help="optional image URL")


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(description="Manage StreamVerse directory sites")
    ap.add_argument("--log-level", default=None, help="DEBUG, INFO, WARNING...")
    sub = ap.add_subparsers(dest="command", required=True)

    p_list = sub.add_parser("list", help="list sites")
    p_list.add_argument("--query", default="", help="filter by name/description")

    _add_site_fields(sub.add_parser("add", help="add a site"))

    p_update = sub.add_parser("update", help="replace a site's fields")
    p_update.add_argument("site_id")
    _add_site_fields(p_update)

    p_delete = sub.add_parser("delete", help="delete a site")
    p_delete.add_argument("site_id")

    sub.add_parser("seed", help="write the default sites into the local store if it is empty")
    sub.add_parser("reset", help="clear the local store; it reads as the default sites again")
    return ap


def _draft_from_args(args: argparse.Namespace) -> SiteDraft:
    payload = {
        "name": args.name.strip(),
        "url": args.url.strip(),
        "description": args.description.strip(),
        "category": args.category.strip(),
        "imageUrl": (args.image_url or "").strip(),
    }
    errors = validate_draft(payload)
    if errors:
        raise SystemExit("Invalid site: " + "; ".join(f"{k}: {v}" for k, v in errors.items()))
    return SiteDraft.from_dict(payload)


def _print_site(site: Site) -> None:
    print(f"  [{site.id}] {site.name} ({site.category}) {site.url}")


def _report(result: DirectoryResult) -> None:
    via = f"via {result.backend}"
    if result.fell_back:
        via += " (fallback after: " + ", ".join(f.backend for f in result.failures) + ")"
    print(via)
    if result.sites is not None:
        print(f"{len(result.sites)} sites:")
        for site in result.sites:
            _print_site(site)


def main(argv: Sequence[str] | None = None, directory: SiteDirectory | None = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level or "WARNING")

    if args.command == "seed":
        sites = local_storage(get_settings()).initialize()
        print(f"OK: local store holds {len(sites)} sites")
        return 0

    if args.command == "reset":
        store = local_storage(get_settings())
        store.reset()
        print(f"OK: local slot '{store.slot}' cleared")
        return 0

    directory = directory or SiteDirectory.default()
    if args.command == "list":
        result = directory.list_all()
        matches = search_sites(result.value, args.query)
        print(f"{len(matches)} sites via {result.backend}:")
        for site in matches:
            _print_site(site)
        return 0

    if args.command == "add":
        result = directory.add(_draft_from_args(args))
        print(f"OK: site added with id {result.value.id}")
        _report(result)
        return 0

    if args.command == "update":
        result = directory.update(args.site_id, _draft_from_args(args))
        if result.value is None:
            print(f"Site '{args.site_id}' not found", file=sys.stderr)
            return 1
        print(f"OK: site {args.site_id} updated")
        _report(result)
        return 0

    if args.command == "delete":
        result = directory.delete(args.site_id)
        if not result.value:
            print(f"Site '{args.site_id}' not found", file=sys.stderr)
            return 1
        print(f"OK: site {args.site_id} deleted")
        _report(result)
        return 0
    return 2


if __name__ == "__main__":
    try:
        raise SystemExit(main())
    except SystemExit:
        raise
    except Exception as exc:  # pragma: no cover - CLI usage
        sys.stderr.write(f"Error: {exc}\n")
        raise SystemExit(1)
