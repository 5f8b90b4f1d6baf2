"""
Indicadores do painel inicial.

Todos os números são recalculados a partir do snapshot completo em
memória a cada chamada; não há manutenção incremental.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal
from typing import Iterable, Optional

from odontolab.config import DEFAULTS
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
from odontolab.domain.pricing import ZERO, to_decimal

_ACTIVE = (OrderStatus.PENDING, OrderStatus.IN_PRODUCTION)


@dataclass(frozen=True)
class DashboardRollup:
    weekly_revenue: Decimal
    delivered_count: int
    active_count: int
    pending_start_count: int
    due_today_count: int


def weekly_revenue(transactions: Iterable[Transaction], today: date, window_days: Optional[int] = None) -> Decimal:
    """Soma das receitas pagas com data >= hoje - janela (janela móvel, limite inclusivo)."""
    days = DEFAULTS.janela_faturamento_dias if window_days is None else window_days
    start = today - timedelta(days=days)
    total = ZERO
    for tx in transactions:
        if tx.type == TransactionType.INCOME and tx.status == TransactionStatus.PAID and tx.date >= start:
            total += to_decimal(tx.amount)
    return total


def rollup(
    orders: Iterable[ServiceOrder],
    transactions: Iterable[Transaction],
    today: date,
    window_days: Optional[int] = None,
) -> DashboardRollup:
    """Calcula faturamento da janela e as contagens operacionais das O.S."""
    orders = list(orders)
    return DashboardRollup(
        weekly_revenue=weekly_revenue(transactions, today, window_days),
        delivered_count=sum(1 for o in orders if o.status == OrderStatus.DELIVERED),
        active_count=sum(1 for o in orders if o.status in _ACTIVE),
        pending_start_count=sum(1 for o in orders if o.status == OrderStatus.PENDING),
        due_today_count=sum(
            1 for o in orders if o.due_date == today and o.status != OrderStatus.DELIVERED
        ),
    )


@dataclass(frozen=True)
class TaskStats:
    completed: int
    pending: int
    high_priority: int  # alta prioridade ainda em aberto


def task_stats(tasks: Iterable[Task]) -> TaskStats:
    tasks = list(tasks)
    completed = sum(1 for t in tasks if t.completed)
    return TaskStats(
        completed=completed,
        pending=len(tasks) - completed,
        high_priority=sum(1 for t in tasks if t.priority == TaskPriority.HIGH and not t.completed),
    )


@dataclass(frozen=True)
class CatalogStats:
    total: int
    average_price: Decimal


def catalog_stats(catalog: Iterable[CatalogEntry]) -> CatalogStats:
    """Total de procedimentos e preço médio (zero para catálogo vazio)."""
    catalog = list(catalog)
    soma = sum((to_decimal(c.base_price) for c in catalog), ZERO)
    return CatalogStats(total=len(catalog), average_price=soma / (len(catalog) or 1))
