from dataclasses import dataclass, replace
from datetime import date
from typing import Optional
import uuid

from models.category import Category, Kind


def new_transaction_id() -> str:
    """Generate a process-unique transaction id."""
    return uuid.uuid4().hex


@dataclass(frozen=True)
class Transaction:
    id: str  # assigned at creation, never changes
    date: date
    kind: Kind
    level1: str
    level2: str
    level3: str
    amount: int  # won, always positive
    memo: Optional[str] = None

    @classmethod
    def create(
        cls,
        date: date,
        kind: Kind,
        level1: str,
        level2: str,
        level3: str,
        amount: int,
        memo: Optional[str] = None,
    ) -> "Transaction":
        """Create a Transaction with a freshly generated id."""
        return cls(
            id=new_transaction_id(),
            date=date,
            kind=kind,
            level1=level1,
            level2=level2,
            level3=level3,
            amount=amount,
            memo=memo,
        )

    @property
    def category(self) -> Category:
        """The category this transaction is filed under, by value."""
        return Category(self.kind, self.level1, self.level2, self.level3)

    def with_changes(self, **changes) -> "Transaction":
        """Return a copy with the given fields replaced. The id is kept."""
        changes.pop("id", None)
        return replace(self, **changes)

    def to_dict(self) -> dict:
        """Convert transaction to dictionary for snapshot storage."""
        return {
            "id": self.id,
            "date": self.date.isoformat(),
            "kind": self.kind.value,
            "level1": self.level1,
            "level2": self.level2,
            "level3": self.level3,
            "amount": self.amount,
            "memo": self.memo,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Transaction":
        return cls(
            id=str(data["id"]),
            date=date.fromisoformat(data["date"]),
            kind=Kind.parse(data["kind"]),
            level1=data["level1"],
            level2=data["level2"],
            level3=data["level3"],
            amount=int(data["amount"]),
            memo=data.get("memo"),
        )
