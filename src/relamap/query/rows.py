"""
Row access used by the materializer.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Mapping

if TYPE_CHECKING:
    from ..core.columns import Column


class QueryRow:
    """
    One fetched row keyed by column label.

    Joined queries select every column under its label, so columns with the
    same physical name on different tables stay apart.
    """

    __slots__ = ("data",)

    def __init__(self, data: Mapping[str, Any]) -> None:
        self.data = dict(data)

    def __repr__(self) -> str:
        return f"<QueryRow {self.data!r}>"

    def has_column(self, column: "Column") -> bool:
        return column.label in self.data

    def __getitem__(self, column: "Column") -> Any:
        try:
            raw = self.data[column.label]
        except KeyError as exc:
            raise KeyError(f"Column {column} is not selected in this row.") from exc
        return column.to_python(raw)
