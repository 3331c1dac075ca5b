"""Picker data models: match scores, rendered choices and results."""

from dataclasses import dataclass
from typing import Optional, Union

CREATE_VALUE = "__create__"


@dataclass(frozen=True)
class MatchResult:
    """Score of one query against one candidate. score is 0 unless matched."""

    matched: bool
    score: float = 0


@dataclass(frozen=True)
class Choice:
    """One row of the picker list."""

    label: str
    value: str
    description: Optional[str] = None
    deletable: bool = False

    @property
    def is_create(self) -> bool:
        return self.value == CREATE_VALUE


@dataclass(frozen=True)
class Select:
    path: str


@dataclass(frozen=True)
class Create:
    name: str


@dataclass(frozen=True)
class Delete:
    path: str


@dataclass(frozen=True)
class Cancel:
    pass


PickerResult = Union[Select, Create, Delete, Cancel]
