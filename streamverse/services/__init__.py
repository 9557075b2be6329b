"""
Use cases for the StreamVerse directory.

- ``api_client``: the remote /api/sites endpoints as a SiteStorage.
- ``site_directory``: ordered fallback between backends for client callers.
- ``site_display``: search/grouping helpers for the directory page.

Routers and scripts call these instead of touching files or KV keys directly.
"""
