"""
Dedup bags.

A dedup bag remembers which value and reference nodes were already
written during one export run, keyed by content hash.
"""

from abc import ABC, abstractmethod
from typing import Dict, Optional


class DedupBag(ABC):
    @abstractmethod
    def already_seen(self, hash_value: str, namespace: str = "") -> bool:
        """
        Check whether a hash was seen before, and record it.

        Returns:
            True if the hash was seen before, False if this is (or may be)
            the first occurrence
        """
        ...


class HashDedupBag(DedupBag):
    """
    In-memory dedup bag.

    With a ``cutoff``, only that many leading characters of each hash are
    used as the bucket key and a bucket remembers just the last full hash
    stored in it. Memory stays bounded; a collision evicts the older hash,
    so a repeated node may be written twice, but a node seen for the first
    time is never reported as seen.

    Args:
        cutoff: Bucket key length, or None to remember every hash
    """

    def __init__(self, cutoff: Optional[int] = 5):
        if cutoff is not None and cutoff < 1:
            raise ValueError(f"cutoff must be positive: {cutoff}")
        self.cutoff = cutoff
        self._buckets: Dict[str, str] = {}

    def already_seen(self, hash_value: str, namespace: str = "") -> bool:
        prefix = hash_value if self.cutoff is None else hash_value[: self.cutoff]
        key = namespace + prefix
        if self._buckets.get(key) == hash_value:
            return True
        self._buckets[key] = hash_value
        return False

    def __len__(self) -> int:
        return len(self._buckets)


class NullDedupBag(DedupBag):
    """Dedup bag that never dedups."""

    def already_seen(self, hash_value: str, namespace: str = "") -> bool:
        return False
