"""One-off migration script: data/sites.json -> KV store (REST or SQL)."""
from __future__ import annotations

import argparse
import json
from pathlib import Path
import sys

# Make the streamverse package importable when run directly
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from streamverse.core.config import get_settings
from streamverse.domain.sites import Site
from streamverse.repositories.base import StorageError, sites_to_json
from streamverse.repositories.kv_storage import build_kv_client


def _load_sites(path: Path) -> list[Site]:
    if not path.exists():
        raise SystemExit(f"File not found: {path}")
    with path.open("r", encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, list):
        raise SystemExit(f"{path} does not hold a list of sites")
    return [Site.from_dict(item) for item in data if isinstance(item, dict)]


def migrate(path: Path, *, overwrite: bool = False) -> int:
    settings = get_settings()
    client = build_kv_client(settings)
    if client is None:
        raise SystemExit("Configure KV_REST_API_URL/KV_REST_API_TOKEN or DATABASE_URL first")
    sites = _load_sites(path)
    if len({site.id for site in sites}) != len(sites):
        raise SystemExit(f"{path} has duplicate ids; fix the file before migrating")
    if client.get(settings.sites_key) is not None and not overwrite:
        raise SystemExit(f"Key '{settings.sites_key}' already holds data (use --overwrite)")
    client.set(settings.sites_key, sites_to_json(sites))
    return len(sites)


def main() -> None:
    ap = argparse.ArgumentParser(description="Copy the JSON sites file into the KV store")
    ap.add_argument("--file", default=None, help="path to sites.json (default: SITES_DATA_FILE)")
    ap.add_argument("--overwrite", action="store_true", help="replace an existing KV value")
    args = ap.parse_args()
    path = Path(args.file or get_settings().sites_data_file)
    try:
        count = migrate(path, overwrite=args.overwrite)
    except StorageError as exc:
        raise SystemExit(f"Migration failed: {exc}") from exc
    print(f"Migration completed: {count} sites under '{get_settings().sites_key}'.")


if __name__ == "__main__":
    main()
