"""
The apply module defines the contract used to push the desired objects into a
cluster, and an in-memory implementation of it.

- Objects are identified by NamedResource.
- Every call carries an owner and the complete set of objects for that owner.
- Objects previously applied for an owner that are missing from a later call
  are deleted.
"""

from .apply import Apply, ApplyResult
from .in_memory import InMemoryApply

__all__ = [
    "Apply",
    "ApplyResult",
    "InMemoryApply",
]
