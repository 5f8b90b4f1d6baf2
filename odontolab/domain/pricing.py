"""
Pricing rules for service orders.

These functions implement the rules used when an operator builds a
service order: the catalog lookup that prefills the unit price, the
resolution of which discount percentage applies, and the calculation of
the absolute discount and the final total.

All functions are pure: they depend solely on their inputs and do not
modify any external state. Amounts are handled as ``Decimal`` with exact
arithmetic; rounding to cents is a presentation concern.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Iterable, Optional, Union

from odontolab.domain.models import CatalogEntry, PaymentMethod

Number = Union[int, float, str, Decimal]

ZERO = Decimal("0")
HUNDRED = Decimal("100")


def to_decimal(value: Optional[Number]) -> Decimal:
    """Convert ``value`` to ``Decimal``; ``None`` and blanks become zero.

    Floats go through ``str`` so that ``0.1`` becomes ``Decimal("0.1")``
    and not its binary expansion.
    """
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        value = str(value)
    s = str(value).strip()
    if not s:
        return ZERO
    try:
        return Decimal(s)
    except InvalidOperation:
        raise ValueError(f"valor numérico inválido: {value!r}") from None


def find_by_name(catalog: Iterable[CatalogEntry], name: Optional[str]) -> Optional[CatalogEntry]:
    """Return the catalog entry whose ``name`` is exactly ``name``.

    Parameters
    ----------
    catalog: Iterable[CatalogEntry]
        Catalog snapshot.
    name: str
        Procedure name as selected by the operator.

    Returns
    -------
    CatalogEntry or None
        The first entry with a matching name, or ``None`` when nothing
        matches (the caller then keeps the unit value it already had).
    """
    if not name:
        return None
    for entry in catalog:
        if entry.name == name:
            return entry
    return None


def find_payment_method(methods: Iterable[PaymentMethod], method_id) -> Optional[PaymentMethod]:
    """Return the payment method with id ``method_id`` (``None`` if unset or absent)."""
    if method_id in (None, ""):
        return None
    for m in methods:
        if m.id == method_id or str(m.id) == str(method_id):
            return m
    return None


def resolve_discount_percent(
    payment_method: Optional[PaymentMethod],
    global_discount_percent: Optional[Number],
    is_editing_existing: bool,
) -> Decimal:
    """Determine the discount percentage that applies to an order.

    Rules, in order:

    1. a selected payment method with a positive ``discount_percent``
       wins, whatever the global policy says;
    2. otherwise a *new* order gets the positive global discount;
    3. otherwise no discount.

    Editing an existing order never falls back to the global discount,
    even when the payment method gives none. This asymmetry is kept on
    purpose; see DESIGN.md.

    Returns
    -------
    Decimal
        A percentage in [0, 100].
    """
    if payment_method is not None:
        method_pct = to_decimal(payment_method.discount_percent)
        if method_pct > ZERO:
            return method_pct
    if not is_editing_existing:
        global_pct = to_decimal(global_discount_percent)
        if global_pct > ZERO:
            return global_pct
    return ZERO


@dataclass(frozen=True)
class OrderTotals:
    discount_value: Decimal
    total_value: Decimal


def compute_order_totals(quantity: Number, unit_value: Number, discount_percent: Number) -> OrderTotals:
    """Compute the absolute discount and the total of an order.

        subtotal = quantity * unit_value
        discount = subtotal * discount_percent / 100
        total    = max(0, subtotal - discount)
    """
    subtotal = to_decimal(quantity) * to_decimal(unit_value)
    discount = subtotal * to_decimal(discount_percent) / HUNDRED
    total = subtotal - discount
    return OrderTotals(discount_value=discount, total_value=total if total > ZERO else ZERO)


def order_total_is_consistent(quantity: Number, unit_value: Number, discount_value: Number, total_value: Number) -> bool:
    """Check the stored invariant ``total == max(0, quantity*unit - discount)``."""
    expected = to_decimal(quantity) * to_decimal(unit_value) - to_decimal(discount_value)
    if expected < ZERO:
        expected = ZERO
    return to_decimal(total_value) == expected
