"""Implementations of the pathcache CLI commands."""
