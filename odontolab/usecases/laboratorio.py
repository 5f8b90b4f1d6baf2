# odontolab/usecases/laboratorio.py
"""
UC: cadastros do laboratório (clientes, catálogo, canais de pagamento,
empresa, ordens de serviço, lançamentos e tarefas).

A classe ``Laboratorio`` guarda o snapshot atual e expõe:
- as operações de inserir/alterar/excluir, que validam os dados, chamam o
  repositório e recarregam o snapshot inteiro;
- as visões calculadas (listagens filtradas, resumo financeiro, painel).

Regras de erro:
- ValidationError é lançado antes de qualquer acesso ao banco;
- NotFoundError / PersistenceError do repositório são registrados no log
  e propagados sem retry; o snapshot em memória fica como estava.
"""

from __future__ import annotations

from dataclasses import asdict, is_dataclass
from datetime import date
from typing import Any, Callable, Dict, Iterable, List, Optional

from odontolab.config import DB_PATH, DEFAULTS
from odontolab.domain.dashboard import (
    CatalogStats,
    DashboardRollup,
    TaskStats,
    catalog_stats,
    rollup,
    task_stats,
)
from odontolab.domain.errors import NotFoundError, OdontoLabError, ValidationError
from odontolab.domain.filters import (
    dentist_options,
    filter_catalog,
    filter_clients,
    filter_orders,
    filter_tasks,
    filter_transactions,
    service_type_options,
)
from odontolab.domain.finance import PeriodSummary, aggregate
from odontolab.domain.models import (
    CatalogEntry,
    Client,
    OrderStatus,
    PaymentMethod,
    ServiceOrder,
    Task,
    Transaction,
)
from odontolab.domain.order_draft import OrderDraft
from odontolab.domain.validation import (
    validar_catalogo,
    validar_cliente,
    validar_empresa,
    validar_ordem,
    validar_pagamento,
    validar_tarefa,
    validar_transacao,
)
from odontolab.infra.migrations import apply_migrations
from odontolab.infra.repositories import (
    CatalogRepo,
    ClientRepo,
    CompanySettingsRepo,
    PaymentMethodRepo,
    ServiceOrderRepo,
    TaskRepo,
    TransactionRepo,
)
from odontolab.infra.logger import (
    log_database_operation,
    log_operacao,
    log_system_event,
)
from odontolab.usecases.snapshot import Snapshot, carregar_snapshot

# Campos da O.S. que alteram o preço: mudar qualquer um deles recalcula
# desconto e total pelo rascunho. Desconto e total nunca são gravados
# diretamente.
_CAMPOS_PRECO = {"quantity", "unit_value", "payment_method_id", "service_type"}
_CAMPOS_DERIVADOS = {"discount_value", "total_value"}


def _campos(registro: Any) -> Dict[str, Any]:
    if is_dataclass(registro):
        dados = asdict(registro)
    else:
        dados = dict(registro)
    dados.pop("id", None)
    return dados


def proximo_codigo_catalogo(catalog) -> str:
    """Próximo código sequencial do catálogo (PRO-001, PRO-002, ...)."""
    return f"{DEFAULTS.prefixo_codigo_catalogo}-{len(tuple(catalog)) + 1:03d}"


class Laboratorio:
    """Fachada dos cadastros com recarga completa após cada alteração."""

    def __init__(self, db_path: str = DB_PATH, migrar: bool = True):
        self.db_path = db_path
        if migrar:
            apply_migrations(db_path)
        self.clientes = ClientRepo(db_path)
        self.catalogo = CatalogRepo(db_path)
        self.pagamentos = PaymentMethodRepo(db_path)
        self.ordens = ServiceOrderRepo(db_path)
        self.transacoes = TransactionRepo(db_path)
        self.tarefas = TaskRepo(db_path)
        self.empresa = CompanySettingsRepo(db_path)
        self.snapshot: Snapshot = Snapshot()
        self.recarregar()

    # -------------------------
    # infra
    # -------------------------

    def recarregar(self) -> Snapshot:
        self.snapshot = carregar_snapshot(self.db_path)
        return self.snapshot

    def _executar(self, operacao: str, dados: Dict[str, Any], acao: Callable[[], Any]) -> Any:
        """Chama o repositório, registra o resultado e recarrega o snapshot."""
        try:
            resultado = acao()
        except OdontoLabError as e:
            log_operacao(operacao, dados, error=str(e))
            log_system_event(f"{operacao}_error", {"error": str(e)}, level="error")
            raise
        log_operacao(operacao, dados, result=resultado)
        self.recarregar()
        return resultado

    def _inserir(self, nome: str, repo, validar, registro) -> int:
        dados = _campos(registro)
        validar(dados)
        novo_id = self._executar(f"{nome}.insert", dados, lambda: repo.insert(dados))
        log_database_operation(repo.table, "INSERT", 1, id=novo_id)
        return novo_id

    def _atualizar(self, nome: str, repo, validar, registro_id, campos: Dict[str, Any]) -> None:
        dados = dict(campos)
        validar(dados, parcial=True)
        self._executar(f"{nome}.update", {"id": registro_id, **dados}, lambda: repo.update(registro_id, dados))
        log_database_operation(repo.table, "UPDATE", 1, id=registro_id)

    def _remover(self, nome: str, repo, registro_id) -> None:
        self._executar(f"{nome}.delete", {"id": registro_id}, lambda: repo.delete(registro_id))
        log_database_operation(repo.table, "DELETE", 1, id=registro_id)

    # -------------------------
    # clientes (dentistas)
    # -------------------------

    def adicionar_cliente(self, cliente) -> int:
        return self._inserir("cliente", self.clientes, validar_cliente, cliente)

    def atualizar_cliente(self, cliente_id, campos: Dict[str, Any]) -> None:
        self._atualizar("cliente", self.clientes, validar_cliente, cliente_id, campos)

    def remover_cliente(self, cliente_id) -> None:
        self._remover("cliente", self.clientes, cliente_id)

    # -------------------------
    # catálogo
    # -------------------------

    def adicionar_procedimento(self, procedimento) -> int:
        return self._inserir("catalogo", self.catalogo, validar_catalogo, procedimento)

    def novo_procedimento(self, name: str, base_price, category: Optional[str] = None) -> int:
        """Cria um procedimento com código e ordem de exibição automáticos."""
        entry = CatalogEntry(
            code=proximo_codigo_catalogo(self.snapshot.catalog),
            name=name,
            base_price=base_price,
            category=category or DEFAULTS.categoria_catalogo_padrao,
            display_order=len(self.snapshot.catalog) + 1,
        )
        return self.adicionar_procedimento(entry)

    def importar_catalogo(self, entradas: Iterable[CatalogEntry]) -> int:
        """Insere uma tabela de preços inteira; nada é gravado se uma linha falhar."""
        registros = [_campos(e) for e in entradas]
        for r in registros:
            validar_catalogo(r)
        n = self._executar(
            "catalogo.import", {"linhas": len(registros)},
            lambda: self.catalogo.insert_many(registros),
        )
        log_database_operation("catalog_entries", "INSERT_MANY", n)
        return n

    def atualizar_procedimento(self, procedimento_id, campos: Dict[str, Any]) -> None:
        # O.S. já gravadas guardam o próprio unit_value: mudar o preço aqui não as altera.
        self._atualizar("catalogo", self.catalogo, validar_catalogo, procedimento_id, campos)

    def remover_procedimento(self, procedimento_id) -> None:
        self._remover("catalogo", self.catalogo, procedimento_id)

    # -------------------------
    # canais de pagamento
    # -------------------------

    def adicionar_pagamento(self, metodo) -> int:
        return self._inserir("pagamento", self.pagamentos, validar_pagamento, metodo)

    def atualizar_pagamento(self, metodo_id, campos: Dict[str, Any]) -> None:
        self._atualizar("pagamento", self.pagamentos, validar_pagamento, metodo_id, campos)

    def alternar_pagamento_ativo(self, metodo_id) -> None:
        metodo = self._exigir("payment_methods", "payment_methods", metodo_id)
        self.atualizar_pagamento(metodo_id, {"active": not metodo.active})

    def remover_pagamento(self, metodo_id) -> None:
        # Sem cascata: O.S. e lançamentos mantêm o id antigo.
        self._remover("pagamento", self.pagamentos, metodo_id)

    # -------------------------
    # empresa
    # -------------------------

    def salvar_empresa(self, campos: Dict[str, Any]) -> int:
        """Atualiza os dados da empresa, criando o registro no primeiro uso."""
        dados = dict(campos)
        dados.pop("id", None)
        validar_empresa(dados)
        empresa_id = self._executar("empresa.upsert", dados, lambda: self.empresa.upsert(dados))
        log_database_operation("company_settings", "UPSERT", 1, id=empresa_id)
        return empresa_id

    # -------------------------
    # ordens de serviço
    # -------------------------

    def novo_rascunho(self, today: Optional[date] = None) -> OrderDraft:
        """Formulário de nova O.S. já ligado ao catálogo, canais e desconto global."""
        return OrderDraft(
            catalog=self.snapshot.catalog,
            payment_methods=self.snapshot.payment_methods,
            global_discount_percent=self.snapshot.global_discount_percent,
            today=today,
        )

    def editar_rascunho(self, ordem_id) -> OrderDraft:
        ordem = self._exigir("orders", "service_orders", ordem_id)
        return OrderDraft.from_order(
            ordem,
            catalog=self.snapshot.catalog,
            payment_methods=self.snapshot.payment_methods,
            global_discount_percent=self.snapshot.global_discount_percent,
        )

    def salvar_rascunho(self, rascunho: OrderDraft) -> int:
        """Grava o formulário: insere se for novo, atualiza se for edição."""
        ordem = rascunho.to_order()
        if rascunho.is_editing:
            dados = _campos(ordem)
            self._executar(
                "ordem.update", {"id": ordem.id, **dados},
                lambda: self.ordens.update(ordem.id, dados),
            )
            log_database_operation("service_orders", "UPDATE", 1, id=ordem.id)
            return ordem.id
        return self._inserir("ordem", self.ordens, validar_ordem, ordem)

    def adicionar_ordem(self, ordem: ServiceOrder) -> int:
        """Insere uma O.S. já precificada (desconto/total gravados como vieram)."""
        return self._inserir("ordem", self.ordens, validar_ordem, ordem)

    def atualizar_ordem(self, ordem_id, campos: Dict[str, Any]) -> None:
        """Alteração parcial de uma O.S.

        Se algum campo de preço mudar, o rascunho de edição recalcula
        desconto e total e todos os campos são gravados juntos. Caso
        contrário (status, prazo, observações, ...) só os campos
        informados são gravados e o desconto/total ficam como estavam.
        """
        derivados = _CAMPOS_DERIVADOS & set(campos)
        if derivados:
            raise ValidationError(
                f"campos calculados não podem ser gravados diretamente: {sorted(derivados)}",
                field=sorted(derivados)[0],
            )
        if _CAMPOS_PRECO & set(campos):
            rascunho = self.editar_rascunho(ordem_id)
            desconhecidos = set(campos) - set(rascunho.as_fields())
            if desconhecidos:
                raise ValidationError(f"service_orders: campos desconhecidos {sorted(desconhecidos)}")
            # service_type primeiro: o preço do catálogo não pode sobrescrever
            # um unit_value informado na mesma alteração.
            for nome in sorted(campos, key=lambda n: n != "service_type"):
                setattr(rascunho, nome, campos[nome])
            self.salvar_rascunho(rascunho)
            return
        self._atualizar("ordem", self.ordens, validar_ordem, ordem_id, campos)

    def mudar_status_ordem(self, ordem_id, status: OrderStatus) -> None:
        self.atualizar_ordem(ordem_id, {"status": OrderStatus(status)})

    def remover_ordem(self, ordem_id) -> None:
        self._remover("ordem", self.ordens, ordem_id)

    # -------------------------
    # financeiro
    # -------------------------

    def adicionar_transacao(self, transacao) -> int:
        return self._inserir("transacao", self.transacoes, validar_transacao, transacao)

    def atualizar_transacao(self, transacao_id, campos: Dict[str, Any]) -> None:
        self._atualizar("transacao", self.transacoes, validar_transacao, transacao_id, campos)

    def remover_transacao(self, transacao_id) -> None:
        self._remover("transacao", self.transacoes, transacao_id)

    # -------------------------
    # tarefas
    # -------------------------

    def adicionar_tarefa(self, tarefa) -> int:
        return self._inserir("tarefa", self.tarefas, validar_tarefa, tarefa)

    def atualizar_tarefa(self, tarefa_id, campos: Dict[str, Any]) -> None:
        self._atualizar("tarefa", self.tarefas, validar_tarefa, tarefa_id, campos)

    def alternar_tarefa(self, tarefa_id) -> None:
        tarefa = self._exigir("tasks", "tasks", tarefa_id)
        self.atualizar_tarefa(tarefa_id, {"completed": not tarefa.completed})

    def remover_tarefa(self, tarefa_id) -> None:
        self._remover("tarefa", self.tarefas, tarefa_id)

    # -------------------------
    # visões calculadas
    # -------------------------

    def _exigir(self, colecao: str, tabela: str, registro_id):
        rec = self.snapshot.find(colecao, registro_id)
        if rec is None:
            raise NotFoundError(tabela, registro_id)
        return rec

    def listar_ordens(self, **filtros) -> List[ServiceOrder]:
        return filter_orders(self.snapshot.orders, **filtros)

    def listar_transacoes(self, **filtros) -> List[Transaction]:
        return filter_transactions(self.snapshot.transactions, **filtros)

    def listar_catalogo(self, **filtros) -> List[CatalogEntry]:
        return filter_catalog(self.snapshot.catalog, **filtros)

    def listar_tarefas(self, **filtros) -> List[Task]:
        return filter_tasks(self.snapshot.tasks, **filtros)

    def listar_clientes(self, **filtros) -> List[Client]:
        return filter_clients(self.snapshot.clients, **filtros)

    def listar_pagamentos(self, apenas_ativos: bool = False) -> List[PaymentMethod]:
        return [m for m in self.snapshot.payment_methods if m.active or not apenas_ativos]

    def opcoes_dentistas(self) -> List[str]:
        return dentist_options(self.snapshot.clients, self.snapshot.orders)

    def opcoes_servicos(self) -> List[str]:
        return service_type_options(self.snapshot.catalog, self.snapshot.orders)

    def resumo_financeiro(self, mes: int, ano: int) -> PeriodSummary:
        return aggregate(self.snapshot.transactions, mes, ano)

    def painel(self, hoje: Optional[date] = None) -> DashboardRollup:
        return rollup(self.snapshot.orders, self.snapshot.transactions, hoje or date.today())

    def estatisticas_tarefas(self) -> TaskStats:
        return task_stats(self.snapshot.tasks)

    def estatisticas_catalogo(self) -> CatalogStats:
        return catalog_stats(self.snapshot.catalog)
