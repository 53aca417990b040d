"""Menu domain models."""

from dataclasses import dataclass
from decimal import Decimal


@dataclass(frozen=True)
class MenuItem:
    """A menu entry as edited by operators."""

    id: int
    name: str
    category: str
    price: Decimal
    available: bool = True
    sugar_free_capable: bool = True
