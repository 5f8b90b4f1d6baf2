# odontolab/infra/repositories.py
"""
Repositórios (DAO) para acesso e manipulação de dados no SQLite.

Todos os repositórios de entidade expõem a mesma interface:
- list_all()            -> lista completa, na ordem da listagem
- get(id)               -> registro ou None
- insert(registro)      -> id gerado
- update(id, campos)    -> NotFoundError se o id não existir
- delete(id)            -> NotFoundError se o id não existir

Falhas do SQLite (restrição, arquivo inacessível, ...) chegam como
PersistenceError (ver infra.db.connect).

Classes:
- ClientRepo
- CatalogRepo
- PaymentMethodRepo
- ServiceOrderRepo
- TransactionRepo
- TaskRepo
- CompanySettingsRepo (registro único, com upsert)
"""

from __future__ import annotations

from dataclasses import asdict, fields, is_dataclass
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Optional

from .db import connect
from odontolab.domain.errors import NotFoundError, ValidationError
from odontolab.domain.models import (
    CatalogEntry,
    Client,
    ClientStatus,
    CompanySettings,
    OrderStatus,
    PaymentMethod,
    PaymentType,
    ServiceOrder,
    Task,
    TaskPriority,
    Transaction,
    TransactionStatus,
    TransactionType,
)


# -------------------------
# Helpers
# -------------------------

def _as_dict(row: Any) -> Dict[str, Any]:
    if isinstance(row, dict):
        return dict(row)
    if is_dataclass(row):
        return asdict(row)
    raise TypeError("row must be dict or dataclass")


def _to_db(val: Any) -> Any:
    """Serializa valores do domínio para as colunas SQLite."""
    if isinstance(val, Enum):
        return val.value
    if isinstance(val, bool):
        return int(val)
    if isinstance(val, Decimal):
        return str(val)
    if isinstance(val, float):
        return str(Decimal(str(val)))
    if isinstance(val, date):
        return val.isoformat()
    return val


def _decimal(v: Any) -> Decimal:
    return Decimal(str(v))


def _date(v: Any) -> date:
    return date.fromisoformat(str(v)[:10])


# -------------------------
# Base
# -------------------------

class _EntityRepo:
    """CRUD genérico de uma tabela mapeada para uma dataclass do domínio."""

    table: str = ""
    model: type = object
    order_by: str = "id"
    converters: Dict[str, Callable[[Any], Any]] = {}

    def __init__(self, db_path: str):
        self.db_path = db_path

    @property
    def columns(self) -> List[str]:
        return [f.name for f in fields(self.model)]

    def _from_row(self, row) -> Any:
        data: Dict[str, Any] = {}
        for col in self.columns:
            val = row[col]
            conv = self.converters.get(col)
            if val is not None and conv is not None:
                val = conv(val)
            data[col] = val
        return self.model(**data)

    def _payload(self, values: Dict[str, Any]) -> Dict[str, Any]:
        unknown = set(values) - set(self.columns)
        if unknown:
            raise ValidationError(f"{self.table}: campos desconhecidos {sorted(unknown)}")
        return {k: _to_db(v) for k, v in values.items()}

    def list_all(self) -> List[Any]:
        with connect(self.db_path) as c:
            cur = c.execute(f"SELECT * FROM {self.table} ORDER BY {self.order_by}")
            return [self._from_row(r) for r in cur.fetchall()]

    def get(self, record_id) -> Optional[Any]:
        with connect(self.db_path) as c:
            row = c.execute(f"SELECT * FROM {self.table} WHERE id = ?", (record_id,)).fetchone()
            return self._from_row(row) if row else None

    def insert(self, record: Any) -> int:
        values = _as_dict(record)
        values.pop("id", None)
        payload = self._payload(values)
        cols = ",".join(payload.keys())
        placeholders = ",".join(f":{k}" for k in payload.keys())
        with connect(self.db_path) as c:
            cur = c.execute(f"INSERT INTO {self.table} ({cols}) VALUES ({placeholders})", payload)
            return int(cur.lastrowid)

    def insert_many(self, records: Iterable[Any]) -> int:
        """Insere vários registros numa única transação (tudo ou nada)."""
        payloads = []
        for r in records:
            values = _as_dict(r)
            values.pop("id", None)
            payloads.append(self._payload(values))
        if not payloads:
            return 0
        with connect(self.db_path) as c:
            for payload in payloads:
                cols = ",".join(payload.keys())
                placeholders = ",".join(f":{k}" for k in payload.keys())
                c.execute(f"INSERT INTO {self.table} ({cols}) VALUES ({placeholders})", payload)
        return len(payloads)

    def update(self, record_id, changes: Dict[str, Any]) -> None:
        values = dict(changes)
        values.pop("id", None)
        payload = self._payload(values)
        with connect(self.db_path) as c:
            if not payload:
                found = c.execute(f"SELECT 1 FROM {self.table} WHERE id = ?", (record_id,)).fetchone()
                if not found:
                    raise NotFoundError(self.table, record_id)
                return
            sets = ", ".join(f"{k} = :{k}" for k in payload.keys())
            cur = c.execute(
                f"UPDATE {self.table} SET {sets} WHERE id = :_id",
                {**payload, "_id": record_id},
            )
            if cur.rowcount == 0:
                raise NotFoundError(self.table, record_id)

    def delete(self, record_id) -> None:
        with connect(self.db_path) as c:
            cur = c.execute(f"DELETE FROM {self.table} WHERE id = ?", (record_id,))
            if cur.rowcount == 0:
                raise NotFoundError(self.table, record_id)


# -------------------------
# Entidades
# -------------------------

class ClientRepo(_EntityRepo):
    table = "clients"
    model = Client
    order_by = "name COLLATE NOCASE"
    converters = {"status": ClientStatus}


class CatalogRepo(_EntityRepo):
    table = "catalog_entries"
    model = CatalogEntry
    order_by = "display_order, id"
    converters = {"base_price": _decimal}


class PaymentMethodRepo(_EntityRepo):
    table = "payment_methods"
    model = PaymentMethod
    order_by = "name COLLATE NOCASE"
    converters = {"type": PaymentType, "active": bool, "discount_percent": _decimal}


class ServiceOrderRepo(_EntityRepo):
    table = "service_orders"
    model = ServiceOrder
    order_by = "entry_date DESC, id DESC"
    converters = {
        "unit_value": _decimal,
        "discount_value": _decimal,
        "total_value": _decimal,
        "entry_date": _date,
        "due_date": _date,
        "status": OrderStatus,
    }


class TransactionRepo(_EntityRepo):
    table = "transactions"
    model = Transaction
    order_by = "date DESC, id DESC"
    converters = {
        "type": TransactionType,
        "amount": _decimal,
        "date": _date,
        "status": TransactionStatus,
    }


class TaskRepo(_EntityRepo):
    table = "tasks"
    model = Task
    order_by = "due_date, id"
    converters = {"priority": TaskPriority, "completed": bool, "due_date": _date}


# -------------------------
# Empresa (registro único)
# -------------------------

class CompanySettingsRepo:
    table = "company_settings"

    def __init__(self, db_path: str):
        self.db_path = db_path
        self._mapper = _SettingsMapper(db_path)

    def get(self) -> Optional[CompanySettings]:
        """Registro da empresa, ou None se ainda não foi salvo nenhuma vez."""
        with connect(self.db_path) as c:
            row = c.execute(f"SELECT * FROM {self.table} ORDER BY id LIMIT 1").fetchone()
            return self._mapper._from_row(row) if row else None

    def upsert(self, changes: Dict[str, Any]) -> int:
        """Atualiza o registro existente ou cria o primeiro. Retorna o id."""
        current = self.get()
        if current is not None:
            self._mapper.update(current.id, changes)
            return int(current.id)
        return self._mapper.insert(changes)


class _SettingsMapper(_EntityRepo):
    table = "company_settings"
    model = CompanySettings
    converters = {"global_discount_percent": _decimal}
