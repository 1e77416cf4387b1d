"""Inventory stock ledger.

A product's stock is tracked at three granularities kept in lockstep:
the total, per size, per color, and per color x size. Every update goes
through :func:`apply_stock_delta`, which validates all touched counters
before committing any of them and never mutates its input.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Iterable, Optional

from storeadmin.core.constants import IN_STOCK, NEWLY_ADDED, NEWLY_ADDED_TAG, OUT_OF_STOCK
from storeadmin.core.errors import InsufficientStockError, ValidationError

DIMENSION_TOTAL = "total"
DIMENSION_SIZE = "size"
DIMENSION_COLOR = "color"
DIMENSION_COMBINATION = "combination"


@dataclass
class StockLedger:
    stock: int = 0
    size_stock: dict[str, int] = field(default_factory=dict)
    color_stock: dict[str, int] = field(default_factory=dict)
    color_size_stock: dict[str, dict[str, int]] = field(default_factory=dict)
    status: str = OUT_OF_STOCK
    tags: list[str] = field(default_factory=list)

    def copy(self) -> "StockLedger":
        return StockLedger(
            stock=self.stock,
            size_stock=dict(self.size_stock),
            color_stock=dict(self.color_stock),
            color_size_stock=copy.deepcopy(self.color_size_stock),
            status=self.status,
            tags=list(self.tags),
        )

    def known_sizes(self, extra: Iterable[str] = ()) -> list[str]:
        sizes = dict.fromkeys(self.size_stock)
        for row in self.color_size_stock.values():
            sizes.update(dict.fromkeys(row))
        sizes.update(dict.fromkeys(extra))
        return list(sizes)

    def known_colors(self, extra: Iterable[str] = ()) -> list[str]:
        colors = dict.fromkeys(self.color_stock)
        colors.update(dict.fromkeys(self.color_size_stock))
        colors.update(dict.fromkeys(extra))
        return list(colors)


def derive_inventory_status(stock: int, tags: Iterable[str] = ()) -> str:
    if NEWLY_ADDED_TAG in tags:
        return NEWLY_ADDED
    if stock == 0:
        return OUT_OF_STOCK
    return IN_STOCK


def _fill_grid(ledger: StockLedger, colors: Iterable[str], sizes: Iterable[str]) -> None:
    sizes = list(sizes)
    for color in colors:
        row = ledger.color_size_stock.setdefault(color, {})
        for size in sizes:
            row.setdefault(size, 0)


def complete_grid(ledger: StockLedger, colors: Iterable[str] = (), sizes: Iterable[str] = ()) -> StockLedger:
    """Register colors/sizes with zero counts; existing counts are kept."""
    colors = list(colors)
    sizes = list(sizes)
    result = ledger.copy()
    for color in colors:
        result.color_stock.setdefault(color, 0)
    for size in sizes:
        result.size_stock.setdefault(size, 0)
    _fill_grid(result, result.known_colors(), result.known_sizes())
    return result


def new_ledger(sizes: Iterable[str] = (), colors: Iterable[str] = (), *, default_size: str = "default") -> StockLedger:
    sizes = [size for size in sizes if size] or [default_size]
    ledger = StockLedger(status=NEWLY_ADDED, tags=[NEWLY_ADDED_TAG])
    return complete_grid(ledger, colors=colors, sizes=sizes)


def _check(candidate: int, dimension: str, message: str, *, label, available: int, delta: int) -> int:
    if candidate < 0:
        raise InsufficientStockError(
            dimension,
            message,
            label=label,
            available=available,
            delta=delta,
        )
    return candidate


def apply_stock_delta(
    ledger: StockLedger,
    delta: int,
    *,
    size: Optional[str] = None,
    color: Optional[str] = None,
) -> StockLedger:
    if isinstance(delta, bool) or not isinstance(delta, int):
        raise ValidationError("delta must be an integer.", details={"delta": repr(delta)})
    if delta == 0:
        raise ValidationError("delta must be non-zero.", details={"delta": delta})
    size = size or None
    color = color or None

    new_stock = _check(
        ledger.stock + delta,
        DIMENSION_TOTAL,
        "Stock cannot be reduced below zero!",
        label=None,
        available=ledger.stock,
        delta=delta,
    )

    new_size_count = None
    if size is not None:
        current = ledger.size_stock.get(size, 0)
        new_size_count = _check(
            current + delta,
            DIMENSION_SIZE,
            "Size {} stock cannot be reduced below zero!".format(size),
            label=size,
            available=current,
            delta=delta,
        )

    new_color_count = None
    if color is not None:
        current = ledger.color_stock.get(color, 0)
        new_color_count = _check(
            current + delta,
            DIMENSION_COLOR,
            "Color {} stock cannot be reduced below zero!".format(color),
            label=color,
            available=current,
            delta=delta,
        )

    new_combo_count = None
    if size is not None and color is not None:
        current = ledger.color_size_stock.get(color, {}).get(size, 0)
        new_combo_count = _check(
            current + delta,
            DIMENSION_COMBINATION,
            "{} in size {} stock cannot be reduced below zero!".format(color, size),
            label="{}/{}".format(color, size),
            available=current,
            delta=delta,
        )

    result = ledger.copy()
    result.stock = new_stock
    if new_size_count is not None:
        result.size_stock[size] = new_size_count
    if new_color_count is not None:
        result.color_stock[color] = new_color_count
    if new_combo_count is not None:
        result.color_size_stock.setdefault(color, {})[size] = new_combo_count

    extra_sizes = [size] if size is not None else []
    extra_colors = [color] if color is not None else []
    _fill_grid(result, result.known_colors(extra_colors), result.known_sizes(extra_sizes))

    result.tags = [tag for tag in result.tags if tag != NEWLY_ADDED_TAG]
    result.status = derive_inventory_status(result.stock, result.tags)
    return result


def find_discrepancies(ledger: StockLedger) -> list[str]:
    """Describe where the aggregates disagree with the finer-grained counters."""
    issues = []
    if ledger.size_stock:
        size_total = sum(ledger.size_stock.values())
        if size_total != ledger.stock:
            issues.append(
                "Size counts sum to {} but total stock is {}.".format(size_total, ledger.stock)
            )
    if not ledger.color_size_stock:
        return issues

    for color, row in ledger.color_size_stock.items():
        if color not in ledger.color_stock:
            continue
        row_total = sum(row.values())
        if row_total != ledger.color_stock[color]:
            issues.append(
                "Color {}: sizes sum to {} but color stock is {}.".format(
                    color, row_total, ledger.color_stock[color]
                )
            )

    for size in ledger.known_sizes():
        if size not in ledger.size_stock:
            continue
        column_total = sum(row.get(size, 0) for row in ledger.color_size_stock.values())
        if column_total != ledger.size_stock[size]:
            issues.append(
                "Size {}: colors sum to {} but size stock is {}.".format(
                    size, column_total, ledger.size_stock[size]
                )
            )
    return issues


__all__ = [
    "DIMENSION_COLOR",
    "DIMENSION_COMBINATION",
    "DIMENSION_SIZE",
    "DIMENSION_TOTAL",
    "StockLedger",
    "apply_stock_delta",
    "complete_grid",
    "derive_inventory_status",
    "find_discrepancies",
    "new_ledger",
]
