from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field


@dataclass(frozen=True)
class StagedColumn:
    table: str
    column: str
    legacy_column: str


@dataclass
class TransitoryColumnLedger:
    """
    Legacy columns created during one migration run.

    Append-only; read once at the end of the run to drop every entry. The same
    (table, column) pair may be recorded more than once (a staged primary key
    is re-registered whenever it is used as a join target), so readers get the
    de-duplicated view from `unique()`.
    """

    _entries: list[tuple[str, str]] = field(default_factory=list)

    def record(self, table: str, column: str) -> None:
        self._entries.append((table, column))

    def unique(self) -> list[tuple[str, str]]:
        return list(dict.fromkeys(self._entries))

    def __contains__(self, item: object) -> bool:
        return item in self._entries

    def __iter__(self) -> Iterator[tuple[str, str]]:
        return iter(self.unique())

    def __len__(self) -> int:
        return len(self.unique())
