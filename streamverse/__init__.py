"""StreamVerse: a directory of streaming sites with pluggable storage backends."""

__version__ = "0.1.0"
