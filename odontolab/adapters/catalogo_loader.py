# odontolab/adapters/catalogo_loader.py
"""
Loader da tabela de preços (XLSX) para o catálogo.

Esta função:
- lê a planilha usando pandas;
- normaliza cabeçalhos (acentos, variações, sinônimos);
- retorna CatalogEntry prontos para o CatalogRepo.

Observações:
- Preços aceitam o formato brasileiro ("1.100,00" ou "1.100"); preço
  ilegível rejeita a planilha inteira, célula vazia vale 0.
- Linhas sem código ou sem nome são ignoradas.
- Sem coluna de ordem, a ordem de exibição segue a posição na planilha.
"""

from __future__ import annotations

import re
from decimal import Decimal
from typing import Any, List, Optional

import pandas as pd

from odontolab.adapters.parsers import parse_valor
from odontolab.domain.errors import ValidationError
from odontolab.domain.models import CatalogEntry
from odontolab.infra.logger import log_file_operation


def _slug(s: str) -> str:
    """Normaliza cabeçalhos: minúsculas, sem acentos, sem não-alfanumérico."""
    if s is None:
        return ""
    s = str(s).strip().lower()
    acentos = dict(zip("áàâãäéèêëíìîïóòôõöúùûüç", "aaaaaeeeeiiiiooooouuuuc"))
    s = "".join(acentos.get(ch, ch) for ch in s)
    s = re.sub(r"[^a-z0-9]+", " ", s)
    s = re.sub(r"\s+", " ", s).strip()
    return s


def _safe_get(row, key) -> Optional[str]:
    """Valor da linha sem NA e sem espaços; vazio vira None."""
    val = row.get(key)
    if val is None or pd.isna(val):
        return None
    s = str(val).strip()
    return s or None


_ALIASES = {
    "codigo": "code",
    "cod": "code",
    "code": "code",

    "nome": "name",
    "procedimento": "name",
    "servico": "name",
    "descricao": "name",

    "preco": "base_price",
    "preco base": "base_price",
    "valor": "base_price",
    "valor base": "base_price",

    "categoria": "category",
    "tipo": "category",

    "ordem": "display_order",
    "ordem exibicao": "display_order",
}


def _normalize_columns(df: pd.DataFrame) -> pd.DataFrame:
    """Renomeia colunas com base em sinônimos/variações."""
    new_cols = {}
    for col in df.columns:
        key = _slug(col)
        new_cols[col] = _ALIASES.get(key, key)
    return df.rename(columns=new_cols)


def load_catalogo_from_xlsx(path: str, ordem_inicial: int = 1) -> List[CatalogEntry]:
    """Lê a tabela de preços e retorna as entradas do catálogo."""
    df = pd.read_excel(path, dtype="string")
    df = _normalize_columns(df)
    out: List[CatalogEntry] = []
    for pos, (_, row) in enumerate(df.iterrows()):
        code = _safe_get(row, "code")
        name = _safe_get(row, "name")
        if not code or not name:
            continue
        ordem: Any = _safe_get(row, "display_order")
        try:
            ordem = int(float(ordem)) if ordem is not None else ordem_inicial + pos
        except ValueError:
            ordem = ordem_inicial + pos
        bruto = _safe_get(row, "base_price")
        preco = parse_valor(bruto) if bruto is not None else Decimal("0")
        if preco is None:
            raise ValidationError(f"linha {pos + 2}: preço inválido {bruto!r}", field="base_price")
        out.append(
            CatalogEntry(
                code=code,
                name=name,
                base_price=preco,
                category=_safe_get(row, "category"),
                display_order=ordem,
            )
        )
    log_file_operation("import", path, rows_processed=len(out))
    return out
