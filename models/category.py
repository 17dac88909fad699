"""Category model for the three-level taxonomy."""

from dataclasses import dataclass
from enum import Enum


class Kind(str, Enum):
    """Top-level class of a category or transaction (유형)."""

    INCOME = "수입"
    EXPENSE = "지출"

    @classmethod
    def parse(cls, value) -> "Kind":
        """Convert a raw label or enum value into a Kind.

        Raises:
            ValueError: If the value is neither 수입 nor 지출.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            return cls(value.strip())
        raise ValueError(f"Invalid kind: {value!r}")


@dataclass(frozen=True)
class Category:
    """A taxonomy leaf, identified by all four of its fields.

    Attributes:
        kind: Income or expense.
        level1: 관, the first classification tier.
        level2: 항, the second tier under level1.
        level3: 목, the leaf tier under level2.
    """

    kind: Kind
    level1: str
    level2: str
    level3: str

    @property
    def path(self) -> tuple:
        return (self.level1, self.level2, self.level3)

    def to_dict(self) -> dict:
        """Convert category to a JSON-friendly dictionary."""
        return {
            "kind": self.kind.value,
            "level1": self.level1,
            "level2": self.level2,
            "level3": self.level3,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Category":
        return cls(
            kind=Kind.parse(data["kind"]),
            level1=data["level1"],
            level2=data["level2"],
            level3=data["level3"],
        )
