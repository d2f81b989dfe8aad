"""Data models for column-based tablature."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Final, Iterable, Mapping

BAR_TOKEN: Final[str] = "|"
_LEADING_FRET = re.compile(r"^(\d+)")


@dataclass(frozen=True)
class Played:
    """A plain fretted note."""

    fret: int

    @property
    def token(self) -> str:
        return str(self.fret)


@dataclass(frozen=True)
class Technique:
    """A technique-annotated token such as ``5h7``, ``12b14``, ``x`` or ``|``."""

    token: str

    @property
    def base_fret(self) -> int | None:
        """Fret the technique starts from, or None for mutes and bar lines."""
        match = _LEADING_FRET.match(self.token)
        return int(match.group(1)) if match else None


FretValue = Played | Technique


def parse_fret_token(token: str) -> FretValue:
    """
    Turn an external tab token into a :data:`FretValue`.

    Raises:
        ValueError: If ``token`` is blank.
    """
    cleaned = token.strip()
    if not cleaned:
        raise ValueError("Tab token must not be blank.")
    if cleaned.isdigit():
        return Played(int(cleaned))
    return Technique(cleaned)


@dataclass(frozen=True)
class TabEntry:
    """One string sounding in a column."""

    string: int
    value: FretValue

    @property
    def token(self) -> str:
        return self.value.token


class ColumnKind(Enum):
    NOTES = "notes"
    BAR = "bar"
    REST = "rest"


@dataclass(frozen=True)
class TabColumn:
    """Entries sounding together, a full-width bar line, or a rest."""

    kind: ColumnKind
    entries: tuple[TabEntry, ...] = ()

    @classmethod
    def of(cls, *entries: TabEntry) -> TabColumn:
        return cls(kind=ColumnKind.NOTES, entries=tuple(entries))

    @classmethod
    def played(cls, string: int, fret: int) -> TabColumn:
        return cls.of(TabEntry(string=string, value=Played(fret)))

    @classmethod
    def bar(cls, num_strings: int) -> TabColumn:
        entries = tuple(TabEntry(string=s, value=Technique(BAR_TOKEN)) for s in range(num_strings))
        return cls(kind=ColumnKind.BAR, entries=entries)

    @classmethod
    def rest(cls) -> TabColumn:
        return cls(kind=ColumnKind.REST)

    @property
    def is_bar(self) -> bool:
        return self.kind is ColumnKind.BAR

    @property
    def is_rest(self) -> bool:
        return self.kind is ColumnKind.REST

    def entry_for(self, string: int) -> TabEntry | None:
        for entry in self.entries:
            if entry.string == string:
                return entry
        return None


@dataclass(frozen=True)
class StructuredTab:
    """
    Time-ordered tab columns.

    Immutable once built; :meth:`closed` returns a new tab rather than
    appending in place.
    """

    columns: tuple[TabColumn, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "columns", tuple(self.columns))

    @property
    def ends_with_bar(self) -> bool:
        return bool(self.columns) and self.columns[-1].is_bar

    def closed(self, num_strings: int) -> StructuredTab:
        """Return this tab with a trailing bar line, unless it is empty or already has one."""
        if not self.columns or self.ends_with_bar:
            return self
        return StructuredTab(self.columns + (TabColumn.bar(num_strings),))

    def __len__(self) -> int:
        return len(self.columns)

    @classmethod
    def from_raw(cls, raw_columns: Iterable[Iterable[Mapping[str, Any]]], num_strings: int) -> StructuredTab:
        """
        Build a tab from ``[[{"string": 0, "fret": "5"}, ...], ...]`` data.

        A column whose every token is ``|`` becomes a full-width bar line;
        an empty column becomes a rest.
        """
        columns: list[TabColumn] = []
        for raw in raw_columns:
            entries = tuple(
                TabEntry(string=int(item["string"]), value=parse_fret_token(str(item["fret"])))
                for item in raw
            )
            if not entries:
                columns.append(TabColumn.rest())
            elif all(entry.token == BAR_TOKEN for entry in entries):
                columns.append(TabColumn.bar(num_strings))
            else:
                columns.append(TabColumn.of(*entries))
        return cls(tuple(columns))
