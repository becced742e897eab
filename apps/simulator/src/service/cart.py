"""
Transient cart used while building one synthesized order.
"""

from collections import OrderedDict
from typing import List

from libs.models.orders import LineItem


class Cart:
    """
    Accumulates product additions for a single run.

    Adding a product that is already present bumps its quantity instead of
    opening a second line, matching how the storefront cart merges items.
    """

    def __init__(self) -> None:
        self._quantities: "OrderedDict[int, int]" = OrderedDict()

    def add(self, product_id: int, quantity: int = 1) -> None:
        self._quantities[product_id] = self._quantities.get(product_id, 0) + quantity

    def line_items(self) -> List[LineItem]:
        return [LineItem(product_id=pid, quantity=qty) for pid, qty in self._quantities.items()]

    def item_count(self) -> int:
        return sum(self._quantities.values())

    def empty(self) -> None:
        self._quantities.clear()
