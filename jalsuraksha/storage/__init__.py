"""
Storage backends behind the entity repositories.
"""

from jalsuraksha.storage.base import RecordBackend
from jalsuraksha.storage.memory import MemoryBackend
from jalsuraksha.storage.sql import SqlBackend

__all__ = ["RecordBackend", "MemoryBackend", "SqlBackend"]
