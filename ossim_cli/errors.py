from __future__ import annotations


class SimulationError(ValueError):
    """
    Base class for every input or simulation failure raised by the engines.

    Subclasses ``ValueError`` so callers that only care about bad input can
    keep catching that.
    """


class InvalidProcess(SimulationError):
    pass


class InvalidQuantum(SimulationError):
    pass


class UnknownAlgorithm(SimulationError):
    pass


class UnknownStrategy(SimulationError):
    pass


class EmptyProcessSet(SimulationError):
    pass


class InvalidSize(SimulationError):
    pass


class OutOfMemory(SimulationError):
    """
    No free block is large enough for a request. The pool is left untouched.
    """

    def __init__(self, owner_id: int, size: int, largest_free: int) -> None:
        self.owner_id = owner_id
        self.size = size
        self.largest_free = largest_free
        super().__init__(
            f"Cannot allocate {size} units for owner {owner_id}: largest free block is {largest_free}"
        )
