"""Expression package exceptions."""

from __future__ import annotations

from tileschema_core.exceptions import ValidationError


class MalformedFilterError(ValidationError):
    """Raised when a filter document mixes a combinator with sibling keys
    or holds a node shape the filter language does not define."""
