"""Helpers shared by the pathcache CLI commands."""
