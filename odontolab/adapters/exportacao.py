# odontolab/adapters/exportacao.py
"""
Exportação de planilhas XLSX (pandas + openpyxl).

- exportar_ordens_xlsx:  lista de O.S. (normalmente já filtrada), aba "Serviços"
- exportar_backup_xlsx:  backup completo, uma aba por cadastro

Os valores monetários vão como número (float com duas casas) para que a
planilha permita somas; datas vão como texto DD/MM/AAAA.
"""

from __future__ import annotations

from dataclasses import asdict
from datetime import date
from decimal import Decimal
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

import pandas as pd

from odontolab.adapters.parsers import formatar_data
from odontolab.domain.models import ServiceOrder
from odontolab.infra.logger import log_file_operation, log_system_event
from odontolab.usecases.snapshot import Snapshot

COLUNAS_ORDENS = [
    "Protocolo", "Dentista", "Paciente", "Serviço", "Quantidade",
    "Valor Unitário", "Desconto (R$)", "Total (R$)",
    "Data Entrada", "Prazo Entrega", "Status",
]

ABAS_BACKUP = {
    "EMPRESA": "settings",
    "PAGAMENTOS": "payment_methods",
    "SERVICOS_OS": "orders",
    "CLIENTES_DENTISTAS": "clients",
    "CATALOGO": "catalog",
    "FINANCEIRO": "transactions",
    "TAREFAS": "tasks",
}


def _dinheiro(v: Any) -> Optional[float]:
    if v is None:
        return None
    return float(Decimal(str(v)).quantize(Decimal("0.01")))


def _celula(v: Any) -> Any:
    """Valor do domínio → valor aceito pelo openpyxl."""
    if isinstance(v, Enum):
        return v.value
    if isinstance(v, Decimal):
        return _dinheiro(v)
    if isinstance(v, date):
        return formatar_data(v)
    return v


def _linhas_ordens(ordens: Iterable[ServiceOrder]) -> List[Dict[str, Any]]:
    return [
        {
            "Protocolo": o.id,
            "Dentista": o.dentist_name,
            "Paciente": o.patient_name,
            "Serviço": o.service_type,
            "Quantidade": o.quantity,
            "Valor Unitário": _dinheiro(o.unit_value),
            "Desconto (R$)": _dinheiro(o.discount_value),
            "Total (R$)": _dinheiro(o.total_value),
            "Data Entrada": formatar_data(o.entry_date),
            "Prazo Entrega": formatar_data(o.due_date),
            "Status": o.status.value,
        }
        for o in ordens
    ]


def exportar_ordens_xlsx(ordens: Iterable[ServiceOrder], path: str = "Ordens_de_Servico.xlsx") -> Dict[str, Any]:
    """Grava as O.S. em XLSX. Retorna {"arquivo", "linhas"}."""
    linhas = _linhas_ordens(ordens)
    df = pd.DataFrame(linhas, columns=COLUNAS_ORDENS)
    Path(path).parent.mkdir(parents=True, exist_ok=True)
    df.to_excel(path, sheet_name="Serviços", index=False, engine="openpyxl")
    log_file_operation("export", path, rows_processed=len(linhas), sheet="Serviços")
    return {"arquivo": str(path), "linhas": len(linhas)}


def nome_backup_padrao(hoje: Optional[date] = None) -> str:
    return f"BACKUP_TOTAL_ODONTOLAB_{(hoje or date.today()).isoformat()}.xlsx"


def exportar_backup_xlsx(snapshot: Snapshot, path: Optional[str] = None) -> Dict[str, Any]:
    """Backup completo: uma aba por cadastro. Retorna {"arquivo", "abas": {aba: linhas}}."""
    path = path or nome_backup_padrao()
    Path(path).parent.mkdir(parents=True, exist_ok=True)
    contagem: Dict[str, int] = {}
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        for aba, atributo in ABAS_BACKUP.items():
            valor = getattr(snapshot, atributo)
            if atributo == "settings":
                registros = [valor] if valor is not None else []
            else:
                registros = list(valor)
            linhas = [{k: _celula(v) for k, v in asdict(r).items()} for r in registros]
            # Aba vazia ainda leva uma linha de cabeçalho para manter o layout
            df = pd.DataFrame(linhas) if linhas else pd.DataFrame(columns=["id"])
            df.to_excel(writer, sheet_name=aba, index=False)
            contagem[aba] = len(linhas)
    log_file_operation("backup", path, rows_processed=sum(contagem.values()), abas=contagem)
    log_system_event("backup_exported", {"path": path})
    return {"arquivo": str(path), "abas": contagem}
