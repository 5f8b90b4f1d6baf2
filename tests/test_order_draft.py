from datetime import date, timedelta
from decimal import Decimal

import pytest

from odontolab.domain.errors import ValidationError
from odontolab.domain.models import (
    CatalogEntry,
    OrderStatus,
    PaymentMethod,
    PaymentType,
    ServiceOrder,
)
from odontolab.domain.order_draft import OrderDraft


HOJE = date(2024, 3, 10)

CATALOGO = [
    CatalogEntry(id=1, code="PRO-001", name="Coroa de Zircônia", base_price=Decimal("220")),
    CatalogEntry(id=2, code="PRO-002", name="Faceta", base_price=Decimal("180")),
]
METODOS = [
    PaymentMethod(id=1, name="PIX", type=PaymentType.PIX, discount_percent=Decimal("10")),
    PaymentMethod(id=2, name="Cartão", type=PaymentType.CREDIT),
]


def _rascunho(global_pct=None):
    return OrderDraft(CATALOGO, METODOS, global_discount_percent=global_pct, today=HOJE)


def test_new_draft_defaults():
    d = _rascunho()
    assert d.quantity == 1
    assert d.status == OrderStatus.PENDING
    assert d.entry_date == HOJE
    assert d.due_date == HOJE + timedelta(days=7)
    assert d.material == "Padrão"
    assert not d.is_editing
    assert d.total_value == Decimal("0")


def test_selecting_procedure_prefills_unit_value_and_recomputes():
    d = _rascunho()
    d.service_type = "Coroa de Zircônia"
    assert d.unit_value == Decimal("220")
    assert d.total_value == Decimal("220")

    d.quantity = 2
    assert d.total_value == Decimal("440")

    d.payment_method_id = 1
    assert d.discount_percent == Decimal("10")
    assert d.discount_value == Decimal("44")
    assert d.total_value == Decimal("396")


def test_unknown_procedure_keeps_typed_unit_value():
    d = _rascunho()
    d.unit_value = "150"
    d.service_type = "Provisório"
    assert d.service_type == "Provisório"
    assert d.unit_value == Decimal("150")


def test_global_discount_change_recomputes_new_draft():
    d = _rascunho()
    d.unit_value = Decimal("100")
    assert d.total_value == Decimal("100")
    d.global_discount_percent = Decimal("5")
    assert d.discount_value == Decimal("5")
    assert d.total_value == Decimal("95")


def test_method_without_discount_falls_back_to_global_on_new_draft():
    d = _rascunho(Decimal("5"))
    d.unit_value = 100
    d.payment_method_id = 2
    assert d.discount_percent == Decimal("5")
    assert d.total_value == Decimal("95")


def _ordem_gravada(**kw):
    base = dict(
        id=42,
        dentist_name="Dra. Ana",
        patient_name="João",
        service_type="Coroa de Zircônia",
        material="Zircônia",
        quantity=1,
        unit_value=Decimal("100"),
        discount_value=Decimal("5"),
        total_value=Decimal("95"),
        entry_date=date(2024, 3, 1),
        due_date=date(2024, 3, 8),
        status=OrderStatus.IN_PRODUCTION,
    )
    base.update(kw)
    return ServiceOrder(**base)


def test_editing_never_uses_global_discount():
    d = OrderDraft.from_order(_ordem_gravada(), CATALOGO, METODOS, global_discount_percent=Decimal("5"))
    assert d.is_editing
    assert d.editing_id == 42
    # preço vendido é mantido, sem buscar o catálogo (220)
    assert d.unit_value == Decimal("100")
    assert d.discount_value == Decimal("0")
    assert d.total_value == Decimal("100")


def test_editing_uses_method_discount():
    d = OrderDraft.from_order(_ordem_gravada(payment_method_id=1), CATALOGO, METODOS, Decimal("5"))
    assert d.discount_percent == Decimal("10")
    assert d.total_value == Decimal("90")


def test_to_order_freezes_current_values():
    d = _rascunho()
    d.dentist_name = "Dr. Bruno"
    d.patient_name = "Maria"
    d.service_type = "Faceta"
    d.quantity = 3
    ordem = d.to_order()
    assert ordem.id is None
    assert ordem.unit_value == Decimal("180")
    assert ordem.total_value == Decimal("540")
    assert ordem.status == OrderStatus.PENDING


@pytest.mark.parametrize("campo", ["dentist_name", "patient_name", "service_type"])
def test_to_order_requires_names(campo):
    d = _rascunho()
    d.dentist_name = "Dr. Bruno"
    d.patient_name = "Maria"
    d.service_type = "Faceta"
    setattr(d, campo, "")
    with pytest.raises(ValidationError) as exc:
        d.to_order()
    assert exc.value.field == campo


def test_to_order_rejects_zero_quantity():
    d = _rascunho()
    d.dentist_name, d.patient_name = "Dr. Bruno", "Maria"
    d.service_type = "Faceta"
    d.quantity = 0
    assert d.total_value == Decimal("0")
    with pytest.raises(ValidationError):
        d.to_order()
