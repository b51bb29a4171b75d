"""
==============================================================================
Utilities Package
==============================================================================

Modules:
--------
- validators: location filter and transition input normalisation

==============================================================================
"""

from .validators import LocationFilterValidator, PickInputValidator

__all__ = [
    "LocationFilterValidator",
    "PickInputValidator",
]
