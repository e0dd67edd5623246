"""
Storage Module.

Anonymous statistics persistence.
"""

from pitchtrainer.storage.database import StatisticsStore, StorageError

__all__ = ["StatisticsStore", "StorageError"]
