"""
Cash-flow aggregation over financial transactions.

Transactions are bucketed by the calendar month/year of their ``date``
(not a rolling window) and, inside the period, by type (income/expense)
and by status: ``Pago`` goes to the realized buckets, anything else to
the pending ones.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable

from odontolab.domain.errors import ValidationError
from odontolab.domain.models import Transaction, TransactionStatus, TransactionType
from odontolab.domain.pricing import ZERO, to_decimal


@dataclass(frozen=True)
class PeriodSummary:
    real_income: Decimal = ZERO
    real_expense: Decimal = ZERO
    pending_income: Decimal = ZERO
    pending_expense: Decimal = ZERO

    @property
    def current_balance(self) -> Decimal:
        """Saldo realizado: receitas pagas menos despesas pagas."""
        return self.real_income - self.real_expense

    @property
    def projected_balance(self) -> Decimal:
        """Saldo previsto, contando também o que ainda está pendente."""
        return (self.real_income + self.pending_income) - (self.real_expense + self.pending_expense)


def in_period(tx: Transaction, month: int, year: int) -> bool:
    return tx.date.month == month and tx.date.year == year


def aggregate(transactions: Iterable[Transaction], month: int, year: int) -> PeriodSummary:
    """Summarize the transactions of ``month``/``year``.

    Parameters
    ----------
    transactions: Iterable[Transaction]
        Full transaction snapshot.
    month: int
        Calendar month, 1 to 12.
    year: int
        Calendar year.
    """
    if not 1 <= int(month) <= 12:
        raise ValidationError("month deve estar entre 1 e 12", field="month")

    real_in = real_out = pend_in = pend_out = ZERO
    for tx in transactions:
        if not in_period(tx, month, year):
            continue
        amount = to_decimal(tx.amount)
        paid = tx.status == TransactionStatus.PAID
        if tx.type == TransactionType.INCOME:
            if paid:
                real_in += amount
            else:
                pend_in += amount
        else:
            if paid:
                real_out += amount
            else:
                pend_out += amount
    return PeriodSummary(
        real_income=real_in,
        real_expense=real_out,
        pending_income=pend_in,
        pending_expense=pend_out,
    )
