from datetime import date, timedelta
from decimal import Decimal

from odontolab.domain.dashboard import catalog_stats, rollup, task_stats, weekly_revenue
from odontolab.domain.models import (
    CatalogEntry,
    OrderStatus,
    ServiceOrder,
    Task,
    TaskPriority,
    Transaction,
    TransactionStatus,
    TransactionType,
)

HOJE = date(2024, 3, 10)


def _receita(valor, dia, status=TransactionStatus.PAID, tipo=TransactionType.INCOME):
    return Transaction(description="x", type=tipo, amount=Decimal(valor), date=dia, category="Serviço", status=status)


def _os(status, prazo=HOJE):
    return ServiceOrder(
        dentist_name="Dra. Ana", patient_name="P", service_type="Coroa", material="Padrão",
        quantity=1, unit_value=Decimal("100"), discount_value=Decimal("0"), total_value=Decimal("100"),
        entry_date=HOJE - timedelta(days=3), due_date=prazo, status=status,
    )


def test_weekly_revenue_rolling_window():
    txs = [_receita("500", date(2024, 3, 5)), _receita("999", date(2024, 2, 1))]
    assert weekly_revenue(txs, HOJE) == Decimal("500")


def test_weekly_revenue_window_bound_is_inclusive():
    txs = [
        _receita("10", HOJE - timedelta(days=7)),
        _receita("20", HOJE - timedelta(days=8)),
        _receita("40", HOJE, status=TransactionStatus.PENDING),
        _receita("80", HOJE, tipo=TransactionType.EXPENSE),
    ]
    assert weekly_revenue(txs, HOJE) == Decimal("10")


def test_rollup_counts():
    ordens = [
        _os(OrderStatus.PENDING),
        _os(OrderStatus.IN_PRODUCTION, prazo=HOJE + timedelta(days=1)),
        _os(OrderStatus.FINISHED),
        _os(OrderStatus.DELIVERED),
        _os(OrderStatus.DELIVERED, prazo=HOJE - timedelta(days=30)),
    ]
    r = rollup(ordens, [_receita("500", date(2024, 3, 5))], HOJE)
    assert r.weekly_revenue == Decimal("500")
    assert r.delivered_count == 2
    assert r.active_count == 2
    assert r.pending_start_count == 1
    # Finalizado com prazo hoje conta; Entregue não
    assert r.due_today_count == 2


def test_task_stats():
    tarefas = [
        Task(title="a", due_date=HOJE, priority=TaskPriority.HIGH),
        Task(title="b", due_date=HOJE, priority=TaskPriority.HIGH, completed=True),
        Task(title="c", due_date=HOJE),
    ]
    s = task_stats(tarefas)
    assert (s.completed, s.pending, s.high_priority) == (1, 2, 1)


def test_catalog_stats():
    assert catalog_stats([]).average_price == 0
    s = catalog_stats([
        CatalogEntry(code="PRO-001", name="a", base_price=Decimal("100")),
        CatalogEntry(code="PRO-002", name="b", base_price=Decimal("200")),
    ])
    assert s.total == 2
    assert s.average_price == Decimal("150")
