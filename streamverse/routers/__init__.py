"""
FastAPI routers grouped by surface.

- ``sites``: JSON CRUD endpoints under /api/sites.
- ``pages``: the server-rendered directory page and its HTML form actions.
"""
