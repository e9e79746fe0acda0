from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Tuple


class FilterKind(str, Enum):
    STRING = "string"
    ENUM = "enum"
    DATE = "date"
    BOOLEAN = "boolean"


@dataclass(frozen=True)
class FilterField:
    """Declaration of one filter input on a list screen.

    ``live`` fields are promoted to the applied filters on every change
    (search-as-you-type); the others wait for an explicit commit.
    """

    name: str
    kind: FilterKind = FilterKind.STRING
    default: Any = ""
    choices: Tuple[str, ...] = ()
    live: bool = False
    label: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "kind", FilterKind(self.kind))
        object.__setattr__(self, "choices", tuple(self.choices))
        if self.kind is FilterKind.ENUM and not self.choices:
            raise ValueError(f"enum filter {self.name!r} needs choices")

    @property
    def display_name(self) -> str:
        return self.label or self.name


def is_unset(value: Any) -> bool:
    """Empty strings and ``None`` mean "no constraint" for every kind."""
    return value is None or value == ""
