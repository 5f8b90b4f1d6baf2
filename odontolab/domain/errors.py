# odontolab/domain/errors.py
"""
Hierarquia de erros do OdontoLab.

- ValidationError:  campo obrigatório ausente ou valor fora da faixa;
                    verificado antes de qualquer acesso ao banco.
- NotFoundError:    alvo de update/delete inexistente.
- PersistenceError: qualquer falha do banco (restrição, conexão, ...).
"""

from __future__ import annotations

from typing import Optional


class OdontoLabError(Exception):
    """Base de todos os erros do sistema."""


class ValidationError(OdontoLabError, ValueError):
    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class NotFoundError(OdontoLabError, LookupError):
    def __init__(self, table: str, record_id):
        super().__init__(f"{table}: registro {record_id} não encontrado")
        self.table = table
        self.record_id = record_id


class PersistenceError(OdontoLabError):
    """Falha ao gravar/ler no banco. Não há distinção entre falha transitória e permanente."""
