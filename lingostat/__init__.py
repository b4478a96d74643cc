"""
lingostat: per-language statistics over heterogeneous content trees.

Walks directories, archives, documents, media, spreadsheets and the links
embedded in them, and aggregates watch time, line counts and item counts
per detected language.
"""

__version__ = "0.1.0"
