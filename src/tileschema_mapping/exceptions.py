"""Mapping package exceptions."""

from __future__ import annotations

from difflib import get_close_matches
from typing import Any

from tileschema_core.exceptions import ValidationError


class UnsupportedColumnKindError(ValidationError):
    """
    A column kind outside the supported set.

    Raised eagerly so schema drift is caught at generation time; provides
    fuzzy-matched suggestions for likely intended kinds.
    """

    def __init__(
        self,
        kind: str,
        column: str,
        valid_kinds: list[str],
        table: str | None = None,
    ) -> None:
        self.kind = kind
        self.column = column
        self.table = table
        self.valid_kinds = valid_kinds
        self.suggestions = get_close_matches(kind, valid_kinds, n=3, cutoff=0.6)

        message = f"Unsupported column kind '{kind}' for column '{column}'."
        if self.suggestions:
            message += f" Did you mean: {', '.join(self.suggestions)}?"
        message += f" Supported kinds: {', '.join(sorted(valid_kinds))}"
        super().__init__(message, path=_column_path(table, column))

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": "UNSUPPORTED_COLUMN_KIND",
            "kind": self.kind,
            "column": self.column,
            "table": self.table,
            "suggestions": self.suggestions,
            "valid_kinds": sorted(self.valid_kinds),
        }


class ColumnDefinitionError(ValidationError):
    """A column is missing an attribute its kind requires (e.g. ``key``)."""

    def __init__(self, column: str, message: str, table: str | None = None) -> None:
        self.column = column
        self.table = table
        super().__init__(message, path=_column_path(table, column))


class ConflictingFieldTypeError(ValidationError):
    """One attribute name declared with two different types across tables."""

    def __init__(
        self,
        field: str,
        existing_type: str,
        new_type: str,
        table: str | None = None,
        existing_table: str | None = None,
    ) -> None:
        self.field = field
        self.existing_type = existing_type
        self.new_type = new_type
        self.table = table
        self.existing_table = existing_table

        message = f"Field '{field}' has both {existing_type} and {new_type} types"
        if existing_table:
            message += f" (first declared in table '{existing_table}')"
        super().__init__(message, path=_column_path(table, field))

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": "CONFLICTING_FIELD_TYPE",
            "field": self.field,
            "existing_type": self.existing_type,
            "new_type": self.new_type,
            "table": self.table,
            "existing_table": self.existing_table,
        }


def _column_path(table: str | None, column: str) -> str:
    return f"tables.{table}.columns.{column}" if table else f"columns.{column}"
