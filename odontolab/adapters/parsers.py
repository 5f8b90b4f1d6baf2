"""
Utilidades de parsing para valores digitados pelo operador.

Este módulo interpreta os formatos que aparecem na CLI e nas planilhas
do laboratório: valores em reais no padrão brasileiro ("R$ 1.234,56",
"220", "99,9") e datas em DD/MM/AAAA ou ISO. Também formata valores de
volta para exibição.
"""

from __future__ import annotations

import re
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

_NUM_RE = re.compile(r"[-+]?[\d.,]+")
_MILHAR_RE = re.compile(r"[-+]?[1-9]\d{0,2}\.\d{3}")


def parse_valor(txt: Any) -> Optional[Decimal]:
    """Interpreta um valor monetário/percentual.

    Regras de separador:
        - com vírgula, a vírgula é o decimal e os pontos são milhar
          ("1.234,56" → 1234.56);
        - sem vírgula, o ponto é decimal ("220.5" → 220.5), a não ser
          que haja mais de um ponto ("1.234.567" → 1234567) ou um único
          ponto seguido de exatamente três dígitos ("1.100" → 1100).

    Exemplos:
        "R$ 1.234,56" → Decimal("1234.56")
        "220"         → Decimal("220")
        "10%"         → Decimal("10")

    Returns:
        ``Decimal`` ou ``None`` se não houver número reconhecível.
    """
    if txt is None:
        return None
    if isinstance(txt, Decimal):
        return txt
    if isinstance(txt, (int, float)):
        return Decimal(str(txt))
    s = str(txt).strip()
    if not s:
        return None
    m = _NUM_RE.search(s.replace(" ", ""))
    if not m:
        return None
    num = m.group(0)
    if "," in num:
        num = num.replace(".", "").replace(",", ".")
    elif num.count(".") > 1 or _MILHAR_RE.fullmatch(num):
        num = num.replace(".", "")
    try:
        return Decimal(num)
    except InvalidOperation:
        return None


def parse_data(txt: Any) -> Optional[date]:
    """Converte DD/MM/AAAA, DD-MM-AAAA, DD/MM/AA ou AAAA-MM-DD em ``date``."""
    if txt is None:
        return None
    if isinstance(txt, datetime):
        return txt.date()
    if isinstance(txt, date):
        return txt
    s = str(txt).strip()
    if not s:
        return None
    for fmt in ("%Y-%m-%d", "%d/%m/%Y", "%d-%m-%Y", "%d/%m/%y"):
        try:
            return datetime.strptime(s[:10], fmt).date()
        except ValueError:
            continue
    return None


def formatar_moeda(valor: Any) -> str:
    """Decimal → 'R$ 1.234,56' (duas casas, arredondamento bancário do format)."""
    if valor is None:
        return "R$ 0,00"
    s = f"{Decimal(str(valor)):,.2f}"
    return "R$ " + s.replace(",", "X").replace(".", ",").replace("X", ".")


def formatar_data(d: Optional[date]) -> str:
    return d.strftime("%d/%m/%Y") if d else ""
