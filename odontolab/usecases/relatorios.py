# odontolab/usecases/relatorios.py
"""
Relatórios do laboratório:
- resumo financeiro do mês (realizado x pendente, saldos)
- painel inicial (faturamento da janela, contagens das O.S.)
- O.S. com prazo vencendo (hoje ou atrasadas e não entregues)

Todos retornam dicionários/listas prontos para exibição tabular.
"""

from __future__ import annotations

from datetime import date
from typing import Any, Dict, List, Optional

from odontolab.config import DB_PATH
from odontolab.domain.models import OrderStatus
from odontolab.infra.logger import log_system_event
from odontolab.usecases.laboratorio import Laboratorio


def relatorio_financeiro(mes: int, ano: int, db_path: str = DB_PATH) -> Dict[str, Any]:
    """Quatro baldes do período e os dois saldos derivados, mais os lançamentos do mês."""
    log_system_event("relatorio_financeiro_start", {"mes": mes, "ano": ano, "db_path": db_path})
    lab = Laboratorio(db_path)
    resumo = lab.resumo_financeiro(mes, ano)
    lancamentos = lab.listar_transacoes(month=mes, year=ano)
    return {
        "periodo": f"{mes:02d}/{ano}",
        "receitas_realizadas": resumo.real_income,
        "despesas_realizadas": resumo.real_expense,
        "receitas_pendentes": resumo.pending_income,
        "despesas_pendentes": resumo.pending_expense,
        "saldo_atual": resumo.current_balance,
        "saldo_previsto": resumo.projected_balance,
        "lancamentos": [
            {
                "id": t.id,
                "data": t.date,
                "descricao": t.description,
                "categoria": t.category,
                "tipo": t.type.value,
                "status": t.status.value,
                "valor": t.amount,
            }
            for t in lancamentos
        ],
    }


def relatorio_painel(hoje: Optional[date] = None, db_path: str = DB_PATH) -> Dict[str, Any]:
    hoje = hoje or date.today()
    lab = Laboratorio(db_path)
    p = lab.painel(hoje)
    tarefas = lab.estatisticas_tarefas()
    return {
        "data": hoje,
        "faturamento_semanal": p.weekly_revenue,
        "pecas_entregues": p.delivered_count,
        "servicos_ativos": p.active_count,
        "aguardando_inicio": p.pending_start_count,
        "entregas_hoje": p.due_today_count,
        "tarefas_pendentes": tarefas.pending,
        "tarefas_alta_prioridade": tarefas.high_priority,
    }


def relatorio_prazos(hoje: Optional[date] = None, db_path: str = DB_PATH) -> List[Dict[str, Any]]:
    """O.S. não entregues com prazo até hoje (inclusive), das mais atrasadas para as de hoje."""
    hoje = hoje or date.today()
    lab = Laboratorio(db_path)
    abertas = [
        o for o in lab.listar_ordens()
        if o.status != OrderStatus.DELIVERED and o.due_date <= hoje
    ]
    abertas.sort(key=lambda o: (o.due_date, o.id or 0))
    return [
        {
            "os": o.id,
            "dentista": o.dentist_name,
            "paciente": o.patient_name,
            "servico": o.service_type,
            "prazo": o.due_date,
            "dias_atraso": (hoje - o.due_date).days,
            "status": o.status.value,
        }
        for o in abertas
    ]
