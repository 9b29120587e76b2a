"""Repository layer for metadata access."""

from fragments.repositories.fragment_repository import FragmentRepository

__all__ = [
    "FragmentRepository",
]
