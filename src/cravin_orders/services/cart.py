"""Cart aggregation for a single customer device."""

from dataclasses import dataclass, field, replace
from decimal import Decimal
from typing import Protocol

from cravin_orders.domain.cart import CartKey, CartLine, Variant
from cravin_orders.domain.errors import (
    CartLineNotFound,
    ItemUnavailable,
    VariantUnavailable,
)
from cravin_orders.domain.menu import MenuItem


class MenuCatalog(Protocol):
    """Read access to the live menu."""

    def get_item(self, item_id: int) -> MenuItem | None:
        """Return the menu item for an id, if present."""


@dataclass
class CartAggregator:
    """Builds an order draft from selection events.

    Lines are keyed by ``(item_id, variant)`` so the same drink ordered plain
    and sugar-free occupies two lines. The cart holds no server state; a fresh
    instance is always a valid empty cart.
    """

    catalog: MenuCatalog
    _lines: dict[CartKey, CartLine] = field(default_factory=dict, init=False)

    def add_line(self, item_id: int, variant: Variant | None = None) -> CartLine:
        """Increment the matching line, creating it at quantity 1."""
        resolved = variant or Variant()
        self._require_orderable(item_id, resolved)
        key = CartKey(item_id=item_id, variant=resolved)
        current = self._lines.get(key)
        if current is None:
            line = CartLine(key=key, quantity=1)
        else:
            line = replace(current, quantity=current.quantity + 1)
        self._lines[key] = line
        return line

    def remove_line(self, item_id: int, variant: Variant | None = None) -> None:
        """Decrement the matching line and drop it at zero."""
        key = CartKey(item_id=item_id, variant=variant or Variant())
        current = self._lines.get(key)
        if current is None:
            return
        if current.quantity > 1:
            self._lines[key] = replace(current, quantity=current.quantity - 1)
        else:
            del self._lines[key]

    def set_instructions(self, key: CartKey, text: str) -> CartLine:
        """Attach free-form instructions to one line."""
        current = self._get(key)
        line = replace(current, instructions=text.strip())
        self._lines[key] = line
        return line

    def toggle_variant(self, key: CartKey) -> CartLine:
        """Move a line to the opposite variant, merging on collision."""
        current = self._get(key)
        target_variant = current.variant.toggled()
        if target_variant.sugar_free:
            item = self.catalog.get_item(key.item_id)
            if item is None or not item.sugar_free_capable:
                raise VariantUnavailable(key.item_id)
        target_key = CartKey(item_id=key.item_id, variant=target_variant)
        del self._lines[key]
        existing = self._lines.get(target_key)
        if existing is None:
            line = CartLine(
                key=target_key,
                quantity=current.quantity,
                instructions=current.instructions,
            )
        else:
            line = CartLine(
                key=target_key,
                quantity=existing.quantity + current.quantity,
                instructions=existing.instructions or current.instructions,
            )
        self._lines[target_key] = line
        return line

    def total(self) -> Decimal:
        """Sum of live menu price times quantity."""
        total = Decimal("0")
        for line in self._lines.values():
            item = self.catalog.get_item(line.item_id)
            if item is None:
                continue
            total += item.price * line.quantity
        return total

    def lines(self) -> list[CartLine]:
        """Return lines in the order they were first added."""
        return list(self._lines.values())

    def get(self, key: CartKey) -> CartLine | None:
        return self._lines.get(key)

    def count(self) -> int:
        return sum(line.quantity for line in self._lines.values())

    def clear(self) -> None:
        self._lines.clear()

    @property
    def is_empty(self) -> bool:
        return not self._lines

    def _get(self, key: CartKey) -> CartLine:
        line = self._lines.get(key)
        if line is None:
            raise CartLineNotFound(key)
        return line

    def _require_orderable(self, item_id: int, variant: Variant) -> None:
        item = self.catalog.get_item(item_id)
        if item is None:
            raise ItemUnavailable(item_id, reason="not on the menu")
        if not item.available:
            raise ItemUnavailable(item_id)
        if variant.sugar_free and not item.sugar_free_capable:
            raise VariantUnavailable(item_id)
