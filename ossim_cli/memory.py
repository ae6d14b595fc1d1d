"""
Partition-based memory allocation.

The pool starts as one free block covering the whole capacity. Each
allocation picks a free block (first-fit or best-fit), shrinks it to the
requested size and hands the remainder back as a new free block placed right
after it. Blocks are never merged or released.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Callable, Dict, Iterable, List, Optional, Tuple, Union

from .errors import InvalidSize, OutOfMemory, UnknownStrategy
from .models import AllocationOutcome, MemoryBlock, Strategy

logger = logging.getLogger(__name__)


def first_fit(blocks: List[MemoryBlock], size: int) -> Optional[int]:
    """
    Index of the lowest-offset free block that can hold ``size``.
    """
    for i, block in enumerate(blocks):
        if block.free and block.size >= size:
            return i
    return None


def best_fit(blocks: List[MemoryBlock], size: int) -> Optional[int]:
    """
    Index of the free block that leaves the smallest leftover. Only a strictly
    smaller leftover replaces the current candidate, so ties keep the lowest
    offset.
    """
    best_index = None
    best_leftover = None
    for i, block in enumerate(blocks):
        if block.free and block.size >= size:
            leftover = block.size - size
            if best_leftover is None or leftover < best_leftover:
                best_index = i
                best_leftover = leftover
    return best_index


STRATEGIES: Dict[Strategy, Callable[[List[MemoryBlock], int], Optional[int]]] = {
    Strategy.FIRST_FIT: first_fit,
    Strategy.BEST_FIT: best_fit,
}


def parse_strategy(strategy: Union[Strategy, str]) -> Strategy:
    if isinstance(strategy, Strategy):
        return strategy
    try:
        return Strategy(str(strategy).lower().replace("_", "-"))
    except ValueError as exc:
        choices = ", ".join(s.value for s in Strategy)
        raise UnknownStrategy(f"Unknown placement strategy '{strategy}' (choose from {choices})") from exc


class MemoryPool:
    """
    Ordered list of contiguous blocks whose sizes always add up to
    ``capacity``.
    """

    def __init__(self, capacity: int) -> None:
        if capacity <= 0:
            raise InvalidSize(f"Pool capacity must be > 0 (got {capacity})")
        self.capacity = capacity
        self._next_block_id = 1
        self.blocks: List[MemoryBlock] = [self._new_block(0, capacity)]

    def _new_block(self, offset: int, size: int, owner_id: Optional[int] = None) -> MemoryBlock:
        block = MemoryBlock(block_id=self._next_block_id, offset=offset, size=size, owner_id=owner_id)
        self._next_block_id += 1
        return block

    def allocate(self, owner_id: int, size: int, strategy: Union[Strategy, str] = Strategy.FIRST_FIT) -> MemoryBlock:
        """
        Place ``size`` units for ``owner_id`` and return a copy of the
        allocated block.

        Raises:
            InvalidSize: ``size`` is not positive.
            OutOfMemory: no free block is large enough; the pool is unchanged.
        """
        if size <= 0:
            raise InvalidSize(f"Requested size must be > 0 (got {size})")
        strategy = parse_strategy(strategy)

        index = STRATEGIES[strategy](self.blocks, size)
        if index is None:
            logger.warning("%s: no free block for owner %s (%d units)", strategy.value, owner_id, size)
            raise OutOfMemory(owner_id, size, self.largest_free_block())

        chosen = self.blocks[index]
        leftover = chosen.size - size
        chosen.owner_id = owner_id
        chosen.size = size
        if leftover > 0:
            self.blocks.insert(index + 1, self._new_block(chosen.end, leftover))

        logger.debug(
            "%s: owner %s -> block %d [%d, %d), leftover %d",
            strategy.value,
            owner_id,
            chosen.block_id,
            chosen.offset,
            chosen.end,
            leftover,
        )
        return replace(chosen)

    def snapshot(self) -> Tuple[MemoryBlock, ...]:
        """
        Copies of the blocks in offset order. Changing them does not affect
        the pool.
        """
        return tuple(replace(b) for b in self.blocks)

    def largest_free_block(self) -> int:
        return max((b.size for b in self.blocks if b.free), default=0)

    def usage(self) -> dict:
        free_blocks = [b for b in self.blocks if b.free]
        free = sum(b.size for b in free_blocks)
        return {
            "capacity": self.capacity,
            "used": self.capacity - free,
            "free": free,
            "largest_free": self.largest_free_block(),
            "free_blocks": len(free_blocks),
        }


def initialize(capacity: int) -> MemoryPool:
    return MemoryPool(capacity)


def allocate(
    pool: MemoryPool, owner_id: int, size: int, strategy: Union[Strategy, str] = Strategy.FIRST_FIT
) -> MemoryBlock:
    return pool.allocate(owner_id, size, strategy)


def snapshot(pool: MemoryPool) -> Tuple[MemoryBlock, ...]:
    return pool.snapshot()


def simulate_allocations(
    capacity: int,
    requests: Iterable[Tuple[int, int]],
    strategy: Union[Strategy, str] = Strategy.FIRST_FIT,
) -> List[AllocationOutcome]:
    """
    Run a sequence of ``(owner_id, size)`` requests against a fresh pool.

    A request that does not fit is recorded as a failed outcome and the run
    moves on to the next request. Sizes are all checked before the first
    placement, so an invalid one raises ``InvalidSize`` without a partial run.
    """
    strategy = parse_strategy(strategy)
    requests = list(requests)
    for owner_id, size in requests:
        if size <= 0:
            raise InvalidSize(f"Requested size for owner {owner_id} must be > 0 (got {size})")

    pool = MemoryPool(capacity)
    outcomes: List[AllocationOutcome] = []

    for owner_id, size in requests:
        try:
            block = pool.allocate(owner_id, size, strategy)
        except OutOfMemory as exc:
            outcomes.append(
                AllocationOutcome(owner_id=owner_id, size=size, success=False, error=str(exc), snapshot=pool.snapshot())
            )
            continue
        outcomes.append(
            AllocationOutcome(owner_id=owner_id, size=size, success=True, block=block, snapshot=pool.snapshot())
        )

    logger.info(
        "%s: %d/%d requests placed in a pool of %d",
        strategy.value,
        sum(1 for o in outcomes if o.success),
        len(outcomes),
        capacity,
    )
    return outcomes
