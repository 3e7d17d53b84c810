"""Repository adapters - Snapshot-backed implementations."""

from .json_file import JsonFileIdentityRepository

__all__ = ["JsonFileIdentityRepository"]
