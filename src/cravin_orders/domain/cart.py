"""Client-local cart models."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Variant:
    """Modifier that turns an item into a distinct line."""

    sugar_free: bool = False

    def toggled(self) -> "Variant":
        return Variant(sugar_free=not self.sugar_free)


@dataclass(frozen=True)
class CartKey:
    """Composite identity of a cart line."""

    item_id: int
    variant: Variant


@dataclass(frozen=True)
class CartLine:
    """Draft quantity for one (item, variant) pair."""

    key: CartKey
    quantity: int
    instructions: str = ""

    @property
    def item_id(self) -> int:
        return self.key.item_id

    @property
    def variant(self) -> Variant:
        return self.key.variant
