from __future__ import annotations

import logging

from fastapi import APIRouter, Form, Request
from fastapi.responses import HTMLResponse, RedirectResponse

from streamverse.domain.sites import CATEGORIES, SiteDraft, validate_draft
from streamverse.repositories.base import SiteStorage, StorageError
from streamverse.services.site_display import group_by_category, search_sites, site_card

logger = logging.getLogger(__name__)

router = APIRouter(prefix="", tags=["pages"])


def _templates(request: Request):
    tpl = getattr(getattr(request.app, "state", None), "templates", None)
    if tpl:
        return tpl
    raise RuntimeError("Templates not configured")


def _storage(request: Request) -> SiteStorage:
    storage = getattr(getattr(request.app, "state", None), "site_storage", None)
    if storage is None:
        raise RuntimeError("Site storage not configured")
    return storage


def _render(
    request: Request,
    *,
    q: str = "",
    form: dict | None = None,
    errors: dict | None = None,
    notice: str = "",
    status_code: int = 200,
):
    try:
        sites = _storage(request).list_all()
    except StorageError as exc:
        logger.error("Error loading sites for the directory page: %s", exc)
        sites = []
        notice = notice or "Sites are unavailable right now."
    query = (q or "").strip()
    context = {
        "request": request,
        "query": query,
        "results": [site_card(site) for site in search_sites(sites, query)] if query else [],
        "groups": group_by_category(sites),
        "categories": CATEGORIES,
        "form": form or {},
        "errors": errors or {},
        "notice": notice,
    }
    return _templates(request).TemplateResponse(request, "index.html", context, status_code=status_code)


@router.get("/", response_class=HTMLResponse)
def directory(request: Request, q: str = "", edit: str = "", category: str = "", error: str = ""):
    form: dict = {"category": category} if category else {}
    if edit:
        try:
            match = next((s for s in _storage(request).list_all() if s.id == edit), None)
        except StorageError as exc:
            logger.error("Error loading site %s for editing: %s", edit, exc)
            match = None
        if match:
            form = {"id": match.id, **match.draft().to_dict()}
    return _render(request, q=q, form=form, notice=error)


@router.post("/sites")
def save_site(
    request: Request,
    site_id: str = Form(""),
    name: str = Form(""),
    url: str = Form(""),
    description: str = Form(""),
    category: str = Form(""),
    image_url: str = Form(""),
):
    payload = {
        "name": name.strip(),
        "url": url.strip(),
        "description": description.strip(),
        "category": category.strip(),
        "imageUrl": image_url.strip(),
    }
    errors = validate_draft(payload)
    if errors:
        return _render(request, form={"id": site_id, **payload}, errors=errors, status_code=400)
    draft = SiteDraft.from_dict(payload)
    storage = _storage(request)
    try:
        if site_id:
            if storage.update(site_id, draft) is None:
                return RedirectResponse("/?error=Site+not+found", status_code=303)
        else:
            storage.add(draft)
    except StorageError as exc:
        logger.error("Error saving site %r from the form: %s", draft.name, exc)
        return _render(
            request, form={"id": site_id, **payload}, notice="Could not save the site.", status_code=500
        )
    return RedirectResponse("/", status_code=303)


@router.post("/sites/{site_id}/delete")
def delete_site(site_id: str, request: Request):
    try:
        removed = _storage(request).delete(site_id)
    except StorageError as exc:
        logger.error("Error deleting site %s from the form: %s", site_id, exc)
        return RedirectResponse("/?error=Could+not+delete+the+site", status_code=303)
    if not removed:
        return RedirectResponse("/?error=Site+not+found", status_code=303)
    return RedirectResponse("/", status_code=303)
