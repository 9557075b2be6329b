from __future__ import annotations

import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from streamverse.domain.sites import SiteDraft, validate_draft
from streamverse.repositories.base import SiteStorage, StorageError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/sites", tags=["sites"])


def _get_storage(request: Request) -> SiteStorage:
    storage = getattr(getattr(request.app, "state", None), "site_storage", None)
    if storage is None:
        raise RuntimeError("Site storage not configured")
    return storage


def _error(message: str, status_code: int, **extra) -> JSONResponse:
    return JSONResponse({"error": message, **extra}, status_code=status_code)


def _draft_or_error(payload: dict) -> SiteDraft | JSONResponse:
    errors = validate_draft(payload)
    if errors:
        return _error("Invalid site", 422, fields=errors)
    return SiteDraft.from_dict({k: (v.strip() if isinstance(v, str) else v) for k, v in payload.items()})


@router.get("")
def list_sites(request: Request):
    try:
        sites = _get_storage(request).list_all()
    except StorageError as exc:
        logger.error("Error reading sites: %s", exc)
        return _error("Failed to load sites", 500)
    return [site.to_dict() for site in sites]


@router.post("", status_code=201)
def add_site(payload: dict, request: Request):
    draft = _draft_or_error(payload)
    if isinstance(draft, JSONResponse):
        return draft
    try:
        site = _get_storage(request).add(draft)
    except StorageError as exc:
        logger.error("Error adding site %r: %s", draft.name, exc)
        return _error("Failed to add site", 500)
    return JSONResponse(site.to_dict(), status_code=201)


@router.put("/{site_id}")
def update_site(site_id: str, payload: dict, request: Request):
    draft = _draft_or_error(payload)
    if isinstance(draft, JSONResponse):
        return draft
    try:
        site = _get_storage(request).update(site_id, draft)
    except StorageError as exc:
        logger.error("Error updating site %s: %s", site_id, exc)
        return _error("Failed to update site", 500)
    if site is None:
        return _error("Site not found", 404)
    return site.to_dict()


@router.delete("/{site_id}")
def delete_site(site_id: str, request: Request):
    try:
        removed = _get_storage(request).delete(site_id)
    except StorageError as exc:
        logger.error("Error deleting site %s: %s", site_id, exc)
        return _error("Failed to delete site", 500)
    if not removed:
        return _error("Site not found", 404)
    return {"success": True}
