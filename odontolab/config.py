# odontolab/config.py
"""
Configurações globais e valores padrão do OdontoLab.
"""

import os
from dataclasses import dataclass


# Caminho padrão do banco de dados SQLite (sobrescrevível por ODONTOLAB_DB)
DB_PATH = os.environ.get("ODONTOLAB_DB") or os.path.join(os.getcwd(), "odontolab.db")


@dataclass
class DefaultConfig:
    """Valores padrão usados ao montar novos registros."""
    material_padrao: str = "Padrão"
    prazo_entrega_dias: int = 7           # prazo de uma nova O.S.
    janela_faturamento_dias: int = 7      # faturamento "semanal" do dashboard
    categoria_catalogo_padrao: str = "Prótese Fixa"
    categoria_financeira_padrao: str = "Serviço"
    prefixo_codigo_catalogo: str = "PRO"


# Instância global dos valores padrão
DEFAULTS = DefaultConfig()
