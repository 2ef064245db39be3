"""Parse configuration and data files of many formats into a uniform, comment-aware tree."""

__version__ = "1.0.0"