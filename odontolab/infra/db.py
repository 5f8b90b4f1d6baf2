# odontolab/infra/db.py
"""
Utilidades de conexão SQLite.
"""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from typing import Iterator

from odontolab.domain.errors import PersistenceError


@contextmanager
def connect(db_path: str) -> Iterator[sqlite3.Connection]:
    """
    Context manager para abrir conexão SQLite com:
    - foreign_keys ON
    - row_factory = sqlite3.Row
    - commit ao sair (rollback em caso de exceção)
    - erros do sqlite3 convertidos em PersistenceError
    """
    try:
        conn = sqlite3.connect(db_path)
    except sqlite3.Error as e:
        raise PersistenceError(f"não foi possível abrir {db_path}: {e}") from e
    try:
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON;")
        yield conn
        conn.commit()
    except sqlite3.Error as e:
        conn.rollback()
        raise PersistenceError(str(e)) from e
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()
