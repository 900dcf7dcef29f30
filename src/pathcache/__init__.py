"""Command-line frontend for the pathcache identifier cache."""
