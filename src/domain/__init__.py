"""Domain models and errors for the price reference store.

Rates are fixed-point integers: a stored rate is scaled by 10^9 and a
cross-rate by 10^18. The models here are plain Pydantic objects, kept apart
from the persisted representation so that the resolver can be exercised
without a database.
"""

__all__ = [
    "errors",
    "reference",
]
