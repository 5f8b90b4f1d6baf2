"""
Filtros e ordenação das listagens.

Cada listagem combina predicados com E lógico (busca, categoria, período,
dentista, ...). A busca textual é uma substring sem diferenciar
maiúsculas/minúsculas, combinada com OU entre os campos da listagem. O
período é inclusivo nas duas pontas e vale só de um lado quando apenas
um limite é informado.

A ordenação usa ``sorted`` (estável), então aplicar o mesmo filtro duas
vezes devolve a mesma lista.
"""

from __future__ import annotations

from datetime import date
from typing import Any, Callable, Iterable, List, Optional, Sequence, TypeVar

from odontolab.domain.models import (
    CatalogEntry,
    Client,
    ClientStatus,
    ServiceOrder,
    Task,
    Transaction,
    TransactionType,
)

T = TypeVar("T")
Predicate = Callable[[Any], bool]

TODAS_CATEGORIAS = "Todos"


# -------------------------
# Predicados genéricos
# -------------------------

def text_search(term: Optional[str], *fields: str) -> Predicate:
    """Substring sem caixa em qualquer um dos ``fields`` (vazio casa tudo)."""
    needle = (term or "").strip().lower()

    def pred(rec: Any) -> bool:
        if not needle:
            return True
        for f in fields:
            val = getattr(rec, f, None)
            if val is not None and needle in str(val).lower():
                return True
        return False

    return pred


def equals(field: str, value: Any) -> Predicate:
    """Igualdade exata; valor vazio (ou "Todos") desliga o filtro."""

    def pred(rec: Any) -> bool:
        if value in (None, "", TODAS_CATEGORIAS):
            return True
        return getattr(rec, field, None) == value

    return pred


def date_between(field: str, start: Optional[date] = None, end: Optional[date] = None) -> Predicate:
    def pred(rec: Any) -> bool:
        d = getattr(rec, field, None)
        if start is None and end is None:
            return True
        if d is None:
            return False
        if start is not None and d < start:
            return False
        if end is not None and d > end:
            return False
        return True

    return pred


def filter_records(records: Iterable[T], predicates: Sequence[Predicate] = ()) -> List[T]:
    return [r for r in records if all(p(r) for p in predicates)]


def sort_records(records: Iterable[T], key: Callable[[T], Any], reverse: bool = False) -> List[T]:
    return sorted(records, key=key, reverse=reverse)


# -------------------------
# Listagens
# -------------------------

def filter_orders(
    orders: Iterable[ServiceOrder],
    search: Optional[str] = None,
    dentist: Optional[str] = None,
    service_type: Optional[str] = None,
    start: Optional[date] = None,
    end: Optional[date] = None,
) -> List[ServiceOrder]:
    """O.S. filtradas e ordenadas pela data de entrada, mais recentes primeiro.

    A busca olha paciente, dentista, tipo de serviço e o número da O.S.
    """
    preds = [
        text_search(search, "patient_name", "dentist_name", "service_type", "id"),
        equals("dentist_name", dentist),
        equals("service_type", service_type),
        date_between("entry_date", start, end),
    ]
    return sort_records(filter_records(orders, preds), key=lambda o: o.entry_date, reverse=True)


def filter_transactions(
    transactions: Iterable[Transaction],
    search: Optional[str] = None,
    month: Optional[int] = None,
    year: Optional[int] = None,
    category: Optional[str] = None,
    type: Optional[TransactionType] = None,
    start: Optional[date] = None,
    end: Optional[date] = None,
) -> List[Transaction]:
    """Lançamentos filtrados e ordenados por data, mais recentes primeiro."""
    preds = [
        text_search(search, "description", "category"),
        equals("category", category),
        equals("type", type),
        date_between("date", start, end),
    ]
    if month is not None:
        preds.append(lambda t: t.date.month == month)
    if year is not None:
        preds.append(lambda t: t.date.year == year)
    return sort_records(filter_records(transactions, preds), key=lambda t: t.date, reverse=True)


def filter_catalog(
    catalog: Iterable[CatalogEntry],
    search: Optional[str] = None,
    category: Optional[str] = None,
) -> List[CatalogEntry]:
    preds = [text_search(search, "name", "code"), equals("category", category)]
    return sort_records(filter_records(catalog, preds), key=lambda c: c.display_order or 0)


def filter_tasks(tasks: Iterable[Task], search: Optional[str] = None) -> List[Task]:
    """Tarefas em aberto sempre antes das concluídas; dentro de cada grupo, por prazo."""
    preds = [text_search(search, "title", "description")]
    return sort_records(filter_records(tasks, preds), key=lambda t: (t.completed, t.due_date))


def filter_clients(
    clients: Iterable[Client],
    search: Optional[str] = None,
    status: Optional[ClientStatus] = None,
) -> List[Client]:
    preds = [
        text_search(search, "name", "email", "professional_registration"),
        equals("status", status),
    ]
    return sort_records(filter_records(clients, preds), key=lambda c: c.name.lower())


# -------------------------
# Opções de seleção
# -------------------------

def dentist_options(clients: Iterable[Client], orders: Iterable[ServiceOrder]) -> List[str]:
    """Dentistas cadastrados mais os que só aparecem em O.S. antigas."""
    names = {c.name for c in clients if c.name}
    names.update(o.dentist_name for o in orders if o.dentist_name)
    return sorted(names)


def service_type_options(catalog: Iterable[CatalogEntry], orders: Iterable[ServiceOrder]) -> List[str]:
    types = {c.name for c in catalog if c.name}
    types.update(o.service_type for o in orders if o.service_type)
    return sorted(types)
