# odontolab/infra/migrations.py
"""
Migrações de schema usando PRAGMA user_version.

V1: tabelas base (clientes, catálogo, canais de pagamento, empresa,
    ordens de serviço, lançamentos financeiros e tarefas)
V2: índices das listagens mais usadas

Convenções de armazenamento:
- dinheiro e percentuais em TEXT (Decimal serializado, sem perda)
- datas em TEXT ISO (YYYY-MM-DD)
- booleanos em INTEGER 0/1
"""

from __future__ import annotations

from typing import List
from .db import connect


SCHEMA_V1: List[str] = [
    # Dentistas / profissionais parceiros
    """
    CREATE TABLE IF NOT EXISTS clients (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        name TEXT NOT NULL,
        contact_phone TEXT NOT NULL,
        email TEXT,
        tax_registration TEXT,
        professional_registration TEXT,
        specialty TEXT,
        address TEXT,
        status TEXT NOT NULL DEFAULT 'Ativo'
    );
    """,
    # Catálogo de preços
    """
    CREATE TABLE IF NOT EXISTS catalog_entries (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        code TEXT NOT NULL UNIQUE,
        name TEXT NOT NULL,
        base_price TEXT NOT NULL DEFAULT '0',
        category TEXT,
        display_order INTEGER NOT NULL DEFAULT 0
    );
    """,
    # Canais de pagamento
    """
    CREATE TABLE IF NOT EXISTS payment_methods (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        name TEXT NOT NULL,
        type TEXT NOT NULL, -- 'pix' | 'credit' | 'debit' | 'cash' | 'transfer'
        active INTEGER NOT NULL DEFAULT 1,
        discount_percent TEXT,
        email TEXT,
        phone TEXT,
        address TEXT
    );
    """,
    # Dados da empresa (registro único, criado no primeiro salvamento)
    """
    CREATE TABLE IF NOT EXISTS company_settings (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        name TEXT,
        tax_id TEXT,
        email TEXT,
        phone TEXT,
        address TEXT,
        logo_url TEXT,
        global_discount_percent TEXT
    );
    """,
    # Ordens de serviço. dentist_name/service_type são cópias do nome
    # (sem FK): renomear o cadastro não altera O.S. antigas.
    """
    CREATE TABLE IF NOT EXISTS service_orders (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        dentist_name TEXT NOT NULL,
        patient_name TEXT NOT NULL,
        service_type TEXT NOT NULL,
        material TEXT,
        quantity INTEGER NOT NULL DEFAULT 1,
        unit_value TEXT NOT NULL DEFAULT '0',
        discount_value TEXT NOT NULL DEFAULT '0',
        total_value TEXT NOT NULL DEFAULT '0',
        entry_date TEXT,
        due_date TEXT,
        status TEXT NOT NULL DEFAULT 'Pendente',
        payment_method_id INTEGER,
        notes TEXT
    );
    """,
    # Lançamentos financeiros
    """
    CREATE TABLE IF NOT EXISTS transactions (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        description TEXT NOT NULL,
        type TEXT NOT NULL,   -- 'Receita' | 'Despesa'
        amount TEXT NOT NULL,
        date TEXT,
        category TEXT,
        status TEXT NOT NULL DEFAULT 'Pago',
        related_order_id INTEGER,
        payment_method_id INTEGER
    );
    """,
    # Tarefas
    """
    CREATE TABLE IF NOT EXISTS tasks (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        title TEXT NOT NULL,
        description TEXT,
        priority TEXT NOT NULL DEFAULT 'Média',
        completed INTEGER NOT NULL DEFAULT 0,
        due_date TEXT,
        assignee TEXT
    );
    """,
]

SCHEMA_V2: List[str] = [
    "CREATE INDEX IF NOT EXISTS idx_orders_entry_date ON service_orders(entry_date);",
    "CREATE INDEX IF NOT EXISTS idx_orders_due_date   ON service_orders(due_date);",
    "CREATE INDEX IF NOT EXISTS idx_tx_date           ON transactions(date);",
    "CREATE INDEX IF NOT EXISTS idx_tasks_due_date    ON tasks(due_date);",
]


def _apply(conn, statements: List[str]) -> None:
    for sql in statements:
        conn.executescript(sql)


def schema_version(db_path: str) -> int:
    with connect(db_path) as conn:
        return conn.execute("PRAGMA user_version;").fetchone()[0] or 0


def apply_migrations(db_path: str) -> None:
    """Aplica migrações incrementais de acordo com PRAGMA user_version."""
    with connect(db_path) as conn:
        ver = conn.execute("PRAGMA user_version;").fetchone()[0] or 0

        if ver < 1:
            _apply(conn, SCHEMA_V1)
            conn.execute("PRAGMA user_version = 1;")
            ver = 1

        if ver < 2:
            _apply(conn, SCHEMA_V2)
            conn.execute("PRAGMA user_version = 2;")
            ver = 2

        # versões futuras: if ver < 3: _apply(conn, SCHEMA_V3)
