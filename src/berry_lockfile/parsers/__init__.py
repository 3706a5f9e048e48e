"""Lockfile parsing engine."""

from .yarn_lock import parse_lockfile

__all__ = ["parse_lockfile"]
