"""
Full-dictionary policies and the trackers behind LRU and LFU eviction.

A tracker answers one question: which dynamic code goes next? LRU picks
the smallest last-use time, LFU the smallest use count, and both break ties
on the smallest code. Both are heaps of (key, code) pairs with lazy
deletion: stale pairs are dropped when they reach the top.
"""

import heapq
from enum import IntEnum
from typing import Callable, List, Optional, Set, Tuple


class Policy(IntEnum):
    FREEZE = 0
    RESET = 1
    LRU = 2
    LFU = 3

    @classmethod
    def from_name(cls, name):
        try:
            return cls[name.upper()]
        except KeyError:
            raise ValueError(f"Unknown policy: {name}") from None

    @property
    def label(self):
        return self.name.lower()


POLICY_NAMES = [p.label for p in Policy]


class HeapTracker:
    __slots__ = ('key_of', 'heap', 'live')

    def __init__(self, key_of: Callable[[int], int]) -> None:
        self.key_of = key_of
        self.heap: List[Tuple[int, int]] = []
        self.live: Set[int] = set()

    def use(self, code: int) -> None:
        """Record the code's current key. Call after every metadata change."""
        self.live.add(code)
        heapq.heappush(self.heap, (self.key_of(code), code))
        if len(self.heap) > 2 * len(self.live) + 64:
            self._compact()

    def find_victim(self) -> Optional[int]:
        heap = self.heap
        while heap:
            key, code = heap[0]
            if code in self.live and self.key_of(code) == key:
                return code
            heapq.heappop(heap)
        return None

    def clear(self) -> None:
        self.heap.clear()
        self.live.clear()

    def _compact(self) -> None:
        self.heap = [(self.key_of(code), code) for code in self.live]
        heapq.heapify(self.heap)


def make_tracker(policy, frequency, last_used):
    """
    Build the victim tracker for a policy, or None if the policy never evicts.

    'frequency' and 'last_used' are the dictionary's per-code metadata lists;
    the tracker reads them live, so it always ranks by current values.
    """
    if policy == Policy.LRU:
        return HeapTracker(last_used.__getitem__)
    if policy == Policy.LFU:
        return HeapTracker(frequency.__getitem__)
    return None
