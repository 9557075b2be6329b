"""
Core utilities shared across the StreamVerse app.

This package hosts configuration (env vars, paths, backend selection flags)
and logging setup. Other layers depend on these primitives instead of reading
os.environ or configuring handlers themselves.
"""
