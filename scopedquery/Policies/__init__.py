from __future__ import annotations

from .VisibilityPolicy import (
    Indexable,
    VisibilityPolicy,
    OwnershipPolicy
)

__all__ = [
    'Indexable',
    'VisibilityPolicy',
    'OwnershipPolicy'
]
