"""Flags – entity, repository and domain service."""
from flagkeeper.flags.flag import Flag
from flagkeeper.flags.repository import FLAG_KEY_PREFIX, FlagRepository
from flagkeeper.flags.service import FlagService

__all__ = ["FLAG_KEY_PREFIX", "Flag", "FlagRepository", "FlagService"]
