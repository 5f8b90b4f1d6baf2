"""
Reactive draft of a service order.

``OrderDraft`` holds the form state of an order while the operator is
building or editing it. Every change to an input that affects pricing
(quantity, unit value, selected payment method, selected procedure or the
global discount) recomputes ``discount_percent``, ``discount_value`` and
``total_value`` immediately, so the pair shown to the operator is always
current before the record is persisted.

Once ``to_order()`` has produced the ``ServiceOrder`` and it is stored,
the stored values are authoritative: nothing recomputes them on read.
"""

from __future__ import annotations

from datetime import date, timedelta
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional

from odontolab.config import DEFAULTS
from odontolab.domain.models import (
    CatalogEntry,
    OrderStatus,
    PaymentMethod,
    ServiceOrder,
)
from odontolab.domain.pricing import (
    Number,
    ZERO,
    compute_order_totals,
    find_by_name,
    find_payment_method,
    resolve_discount_percent,
    to_decimal,
)
from odontolab.domain.validation import validar_ordem


class OrderDraft:
    """Mutable order form with pricing recomputed on every input change."""

    def __init__(
        self,
        catalog: Iterable[CatalogEntry] = (),
        payment_methods: Iterable[PaymentMethod] = (),
        global_discount_percent: Optional[Number] = None,
        editing_id: Optional[int] = None,
        today: Optional[date] = None,
    ):
        today = today or date.today()
        self._catalog: List[CatalogEntry] = list(catalog)
        self._payment_methods: List[PaymentMethod] = list(payment_methods)
        self._editing_id = editing_id
        self._values: Dict[str, Any] = {
            "quantity": 1,
            "unit_value": ZERO,
            "payment_method_id": None,
            "global_discount_percent": global_discount_percent,
        }
        self.dentist_name = ""
        self.patient_name = ""
        self._service_type = ""
        self.material = DEFAULTS.material_padrao
        self.entry_date = today
        self.due_date = today + timedelta(days=DEFAULTS.prazo_entrega_dias)
        self.status = OrderStatus.PENDING
        self.notes: Optional[str] = None
        self.discount_percent = ZERO
        self.discount_value = ZERO
        self.total_value = ZERO
        self._recalculate()

    @classmethod
    def from_order(
        cls,
        order: ServiceOrder,
        catalog: Iterable[CatalogEntry] = (),
        payment_methods: Iterable[PaymentMethod] = (),
        global_discount_percent: Optional[Number] = None,
    ) -> "OrderDraft":
        """Open an existing order for editing.

        The procedure name is restored without a catalog lookup, so the
        unit value the order was sold for is kept even if the catalog
        price changed since.
        """
        draft = cls(catalog, payment_methods, global_discount_percent, editing_id=order.id)
        draft.dentist_name = order.dentist_name
        draft.patient_name = order.patient_name
        draft._service_type = order.service_type
        draft.material = order.material
        draft.entry_date = order.entry_date
        draft.due_date = order.due_date
        draft.status = order.status
        draft.notes = order.notes
        draft._values.update(
            quantity=order.quantity,
            unit_value=to_decimal(order.unit_value),
            payment_method_id=order.payment_method_id,
        )
        draft._recalculate()
        return draft

    # -------------------------
    # pricing inputs
    # -------------------------

    def _set(self, name: str, value: Any) -> None:
        self._values[name] = value
        self._recalculate()

    @property
    def quantity(self) -> int:
        return self._values["quantity"]

    @quantity.setter
    def quantity(self, value: int) -> None:
        self._set("quantity", value)

    @property
    def unit_value(self) -> Decimal:
        return self._values["unit_value"]

    @unit_value.setter
    def unit_value(self, value: Number) -> None:
        self._set("unit_value", to_decimal(value))

    @property
    def payment_method_id(self) -> Optional[int]:
        return self._values["payment_method_id"]

    @payment_method_id.setter
    def payment_method_id(self, value: Optional[int]) -> None:
        self._set("payment_method_id", value)

    @property
    def global_discount_percent(self) -> Optional[Number]:
        return self._values["global_discount_percent"]

    @global_discount_percent.setter
    def global_discount_percent(self, value: Optional[Number]) -> None:
        self._set("global_discount_percent", value)

    @property
    def service_type(self) -> str:
        return self._service_type

    @service_type.setter
    def service_type(self, name: str) -> None:
        """Select a procedure; a catalog match prefills the unit value."""
        self._service_type = name
        entry = find_by_name(self._catalog, name)
        if entry is not None:
            self.unit_value = entry.base_price

    @property
    def is_editing(self) -> bool:
        return self._editing_id is not None

    @property
    def editing_id(self) -> Optional[int]:
        return self._editing_id

    @property
    def subtotal(self) -> Decimal:
        return to_decimal(self.quantity) * to_decimal(self.unit_value)

    # -------------------------
    # reactive recomputation
    # -------------------------

    def _recalculate(self) -> None:
        method = find_payment_method(self._payment_methods, self._values["payment_method_id"])
        pct = resolve_discount_percent(method, self._values["global_discount_percent"], self.is_editing)
        totals = compute_order_totals(self._values["quantity"] or 0, self._values["unit_value"], pct)
        self.discount_percent = pct
        self.discount_value = totals.discount_value
        self.total_value = totals.total_value

    def as_fields(self) -> Dict[str, Any]:
        """Form state as a field dict, the shape repositories and validators take."""
        return {
            "dentist_name": self.dentist_name,
            "patient_name": self.patient_name,
            "service_type": self.service_type,
            "material": self.material,
            "quantity": self.quantity,
            "unit_value": self.unit_value,
            "discount_value": self.discount_value,
            "total_value": self.total_value,
            "entry_date": self.entry_date,
            "due_date": self.due_date,
            "status": self.status,
            "payment_method_id": self.payment_method_id,
            "notes": self.notes,
        }

    def to_order(self) -> ServiceOrder:
        """Freeze the draft into a ``ServiceOrder``; raises ``ValidationError``."""
        fields = self.as_fields()
        validar_ordem(fields)
        return ServiceOrder(id=self._editing_id, **fields)
