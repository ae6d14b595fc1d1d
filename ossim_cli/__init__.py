"""
OS simulation CLI package.

Provides deterministic CPU scheduling (FCFS, SPN, Round Robin) and
partition-based memory allocation (first-fit, best-fit) simulations together
with a command-line interface to run and compare them.
"""

__all__ = ["algorithms", "cli", "memory", "metrics"]
