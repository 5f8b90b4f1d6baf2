# odontolab/usecases/snapshot.py
"""
UC: carregar o snapshot completo do banco.

O snapshot é a única visão que as regras de cálculo enxergam: tudo é lido
de uma vez, e qualquer alteração só passa a valer depois de uma nova
carga (não há merge incremental nem atualização otimista).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from odontolab.config import DB_PATH
from odontolab.domain.models import (
    CatalogEntry,
    Client,
    CompanySettings,
    PaymentMethod,
    ServiceOrder,
    Task,
    Transaction,
)
from odontolab.infra.repositories import (
    CatalogRepo,
    ClientRepo,
    CompanySettingsRepo,
    PaymentMethodRepo,
    ServiceOrderRepo,
    TaskRepo,
    TransactionRepo,
)
from odontolab.infra.logger import log_database_operation, log_system_event


@dataclass(frozen=True)
class Snapshot:
    clients: Tuple[Client, ...] = ()
    orders: Tuple[ServiceOrder, ...] = ()
    transactions: Tuple[Transaction, ...] = ()
    tasks: Tuple[Task, ...] = ()
    catalog: Tuple[CatalogEntry, ...] = ()
    payment_methods: Tuple[PaymentMethod, ...] = ()
    settings: Optional[CompanySettings] = None

    @property
    def global_discount_percent(self):
        return self.settings.global_discount_percent if self.settings else None

    def find(self, kind: str, record_id):
        """Registro ``record_id`` da coleção ``kind`` (ex.: 'orders'), ou None."""
        for rec in getattr(self, kind):
            if rec.id == record_id or str(rec.id) == str(record_id):
                return rec
        return None


def carregar_snapshot(db_path: str = DB_PATH) -> Snapshot:
    """Lê todas as tabelas e devolve um Snapshot imutável."""
    snap = Snapshot(
        clients=tuple(ClientRepo(db_path).list_all()),
        orders=tuple(ServiceOrderRepo(db_path).list_all()),
        transactions=tuple(TransactionRepo(db_path).list_all()),
        tasks=tuple(TaskRepo(db_path).list_all()),
        catalog=tuple(CatalogRepo(db_path).list_all()),
        payment_methods=tuple(PaymentMethodRepo(db_path).list_all()),
        settings=CompanySettingsRepo(db_path).get(),
    )
    log_database_operation(
        "*", "SELECT_ALL", 0,
        clients=len(snap.clients), orders=len(snap.orders),
        transactions=len(snap.transactions), tasks=len(snap.tasks),
    )
    log_system_event("snapshot_loaded", {"db_path": db_path})
    return snap
