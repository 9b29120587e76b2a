"""Fragment domain model: entity, type negotiation, conversion and validation."""

from fragments.model.fragment import Fragment
from fragments.model.validation import validate_fragment_data

__all__ = [
    "Fragment",
    "validate_fragment_data",
]
