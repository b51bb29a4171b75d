"""
==============================================================================
Validation Utilities Module
==============================================================================

Normalisation of raw picker input before it reaches storage.

This module implements:
- LocationFilterValidator: trims and bounds the location substring filter
- PickInputValidator: item id and action normalisation

Rules:
-----
- Location filter: optional; blank after trimming means "no filter";
  at most 100 characters
- Item id: required, trimmed, at most 64 characters
- Action: 'pick' or 'unpick', case-insensitive, surrounding spaces ignored

==============================================================================
"""

from __future__ import annotations

from typing import Optional, Union

from picklist.core import exceptions
from picklist.db.models import PickAction


class LocationFilterValidator:
    """
    Validator for the location substring filter.

    Example:
        >>> LocationFilterValidator().normalize("  C3-Front ")
        'C3-Front'
        >>> LocationFilterValidator().normalize("   ") is None
        True
    """

    MAX_LENGTH = 100

    def normalize(self, value: Optional[str]) -> Optional[str]:
        """
        Trim the filter, treating blank as absent.

        Raises:
            AppException: INVALID_REQUEST if the filter is too long
        """
        if value is None:
            return None

        value = value.strip()
        if not value:
            return None

        if len(value) > self.MAX_LENGTH:
            raise exceptions.InvalidRequest(
                f"Location filter must be at most {self.MAX_LENGTH} characters",
                details={"location_filter": value[:self.MAX_LENGTH]}
            )

        return value


class PickInputValidator:
    """Validator for transition input (item id + action)."""

    MAX_ID_LENGTH = 64

    def normalize_item_id(self, item_id: Optional[str]) -> str:
        """
        Trim the item id.

        Raises:
            AppException: MISSING_FIELDS if absent or blank,
                INVALID_REQUEST if too long
        """
        if item_id is None or not str(item_id).strip():
            raise exceptions.missing_fields(["id"])

        item_id = str(item_id).strip()
        if len(item_id) > self.MAX_ID_LENGTH:
            raise exceptions.InvalidRequest(
                f"Item id must be at most {self.MAX_ID_LENGTH} characters"
            )
        return item_id

    def normalize_action(self, action: Union[PickAction, str, None]) -> PickAction:
        """
        Coerce an action to PickAction.

        Raises:
            AppException: MISSING_FIELDS if absent, INVALID_ACTION if unknown
        """
        if isinstance(action, PickAction):
            return action

        if action is None or not str(action).strip():
            raise exceptions.missing_fields(["action"])

        raw = str(action).strip().lower()
        try:
            return PickAction(raw)
        except ValueError:
            raise exceptions.invalid_action(raw)
