"""
Regras de validação dos cadastros.

Todas as funções recebem um dicionário de campos (registro completo ou,
com ``parcial=True``, apenas os campos de um update) e lançam
``ValidationError`` na primeira falha. Nenhuma delas acessa o banco: a
validação sempre roda antes de qualquer chamada ao repositório.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Dict, Iterable

from odontolab.domain.errors import ValidationError
from odontolab.domain.pricing import ZERO, HUNDRED, to_decimal


def _blank(val: Any) -> bool:
    return val is None or (isinstance(val, str) and not val.strip())


def _obrigatorios(campos: Dict[str, Any], nomes: Iterable[str], parcial: bool) -> None:
    for nome in nomes:
        if parcial and nome not in campos:
            continue
        if _blank(campos.get(nome)):
            raise ValidationError(f"campo obrigatório: {nome}", field=nome)


def _decimal(campos: Dict[str, Any], nome: str) -> Decimal:
    try:
        return to_decimal(campos.get(nome))
    except ValueError as e:
        raise ValidationError(str(e), field=nome) from None


def _nao_negativo(campos: Dict[str, Any], nome: str) -> None:
    if nome in campos and campos[nome] is not None and _decimal(campos, nome) < ZERO:
        raise ValidationError(f"{nome} não pode ser negativo", field=nome)


def _percentual(campos: Dict[str, Any], nome: str) -> None:
    """Percentual opcional, mas quando presente deve estar em [0, 100]."""
    if campos.get(nome) is None:
        return
    pct = _decimal(campos, nome)
    if pct < ZERO or pct > HUNDRED:
        raise ValidationError(f"{nome} deve estar entre 0 e 100", field=nome)


def validar_cliente(campos: Dict[str, Any], parcial: bool = False) -> None:
    _obrigatorios(campos, ("name", "contact_phone"), parcial)


def validar_ordem(campos: Dict[str, Any], parcial: bool = False) -> None:
    _obrigatorios(
        campos, ("dentist_name", "patient_name", "service_type", "entry_date", "due_date"), parcial
    )
    if not parcial or "quantity" in campos:
        qtd = campos.get("quantity")
        try:
            ok = qtd is not None and int(qtd) == qtd and int(qtd) >= 1
        except (TypeError, ValueError):
            ok = False
        if not ok:
            raise ValidationError("quantity deve ser um inteiro >= 1", field="quantity")
    for nome in ("unit_value", "discount_value", "total_value"):
        _nao_negativo(campos, nome)


def validar_transacao(campos: Dict[str, Any], parcial: bool = False) -> None:
    _obrigatorios(campos, ("description", "date"), parcial)
    if not parcial or "amount" in campos:
        if _blank(campos.get("amount")) or _decimal(campos, "amount") == ZERO:
            raise ValidationError("campo obrigatório: amount", field="amount")
        _nao_negativo(campos, "amount")


def validar_tarefa(campos: Dict[str, Any], parcial: bool = False) -> None:
    _obrigatorios(campos, ("title", "due_date"), parcial)


def validar_catalogo(campos: Dict[str, Any], parcial: bool = False) -> None:
    _obrigatorios(campos, ("code", "name"), parcial)
    _nao_negativo(campos, "base_price")


def validar_pagamento(campos: Dict[str, Any], parcial: bool = False) -> None:
    _obrigatorios(campos, ("name",), parcial)
    _percentual(campos, "discount_percent")


def validar_empresa(campos: Dict[str, Any], parcial: bool = True) -> None:
    _percentual(campos, "global_discount_percent")
