from datetime import date
from decimal import Decimal

import pytest

from odontolab.domain.errors import NotFoundError, PersistenceError, ValidationError
from odontolab.domain.models import (
    CatalogEntry,
    Client,
    OrderStatus,
    PaymentMethod,
    PaymentType,
    ServiceOrder,
    Task,
    Transaction,
    TransactionStatus,
    TransactionType,
)
from odontolab.usecases.laboratorio import Laboratorio, proximo_codigo_catalogo

HOJE = date(2024, 3, 10)


@pytest.fixture
def lab(tmp_path):
    return Laboratorio(str(tmp_path / "odontolab_test.sqlite"))


def _nova_os(lab, servico="Coroa de Zircônia", quantidade=1, valor=None, pagamento=None):
    r = lab.novo_rascunho(today=HOJE)
    r.dentist_name = "Dra. Ana"
    r.patient_name = "João"
    r.service_type = servico
    if valor is not None:
        r.unit_value = valor
    r.quantity = quantidade
    r.payment_method_id = pagamento
    return lab.salvar_rascunho(r)


# -----------------------------
# Recarga do snapshot
# -----------------------------

def test_every_mutation_reloads_snapshot(lab):
    assert lab.snapshot.clients == ()
    cid = lab.adicionar_cliente(Client(name="Dra. Ana", contact_phone="11 9999-0000"))
    assert [c.name for c in lab.snapshot.clients] == ["Dra. Ana"]

    lab.atualizar_cliente(cid, {"specialty": "Implantodontia"})
    assert lab.snapshot.find("clients", cid).specialty == "Implantodontia"

    lab.remover_cliente(cid)
    assert lab.snapshot.clients == ()


def test_validation_runs_before_database(lab):
    antes = lab.snapshot
    with pytest.raises(ValidationError):
        lab.adicionar_cliente(Client(name="", contact_phone="1"))
    assert lab.snapshot is antes


def test_registros_sem_data_nao_sao_gravados(lab):
    with pytest.raises(ValidationError):
        lab.adicionar_transacao(Transaction(
            description="Coroa", type=TransactionType.INCOME, amount=Decimal("500"),
            date=None, category="Serviço",
        ))
    with pytest.raises(ValidationError):
        lab.adicionar_tarefa(Task(title="Comprar gesso", due_date=None))
    with pytest.raises(ValidationError):
        lab.adicionar_ordem(ServiceOrder(
            dentist_name="Dra. Ana", patient_name="João", service_type="Coroa", material="Padrão",
            quantity=1, unit_value=Decimal("100"), discount_value=Decimal("0"),
            total_value=Decimal("100"), entry_date=None, due_date=None,
        ))
    assert lab.transacoes.list_all() == []
    assert lab.tarefas.list_all() == []
    assert lab.ordens.list_all() == []

    tid = lab.adicionar_tarefa(Task(title="Comprar gesso", due_date=HOJE))
    with pytest.raises(ValidationError):
        lab.atualizar_tarefa(tid, {"due_date": None})
    assert lab.resumo_financeiro(3, 2024).current_balance == Decimal("0")
    assert [t.due_date for t in lab.listar_tarefas()] == [HOJE]
    assert lab.clientes.list_all() == []


def test_collaborator_failure_keeps_snapshot(lab):
    lab.adicionar_procedimento(CatalogEntry(code="PRO-001", name="Coroa", base_price=Decimal("220")))
    antes = lab.snapshot
    with pytest.raises(PersistenceError):
        lab.adicionar_procedimento(CatalogEntry(code="PRO-001", name="Outra", base_price=Decimal("1")))
    assert lab.snapshot is antes
    with pytest.raises(NotFoundError):
        lab.remover_tarefa(999)
    assert lab.snapshot is antes


# -----------------------------
# Catálogo
# -----------------------------

def test_novo_procedimento_generates_code_and_order(lab):
    lab.novo_procedimento("Coroa de Zircônia", Decimal("220"))
    lab.novo_procedimento("Faceta", Decimal("180"), category="Estética")
    codes = [(c.code, c.display_order, c.category) for c in lab.listar_catalogo()]
    assert codes == [("PRO-001", 1, "Prótese Fixa"), ("PRO-002", 2, "Estética")]
    assert proximo_codigo_catalogo(lab.snapshot.catalog) == "PRO-003"


def test_importar_catalogo(lab):
    n = lab.importar_catalogo([
        CatalogEntry(code="A1", name="Coroa", base_price=Decimal("220"), display_order=1),
        CatalogEntry(code="A2", name="Faceta", base_price=Decimal("180"), display_order=2),
    ])
    assert n == 2
    assert lab.estatisticas_catalogo().average_price == Decimal("200")


# -----------------------------
# Ordens de serviço
# -----------------------------

def test_catalog_and_method_discount_end_to_end(lab):
    lab.novo_procedimento("Coroa de Zircônia", Decimal("220"))
    pid = lab.adicionar_pagamento(PaymentMethod(name="PIX", type=PaymentType.PIX, discount_percent=Decimal("10")))
    oid = _nova_os(lab, quantidade=2, pagamento=pid)
    o = lab.snapshot.find("orders", oid)
    assert o.unit_value == Decimal("220")
    assert o.discount_value == Decimal("44")
    assert o.total_value == Decimal("396")


def test_global_discount_applies_only_to_new_orders(lab):
    lab.salvar_empresa({"name": "Lab Sorriso", "global_discount_percent": Decimal("5")})
    oid = _nova_os(lab, servico="Provisório", valor=Decimal("100"))
    o = lab.snapshot.find("orders", oid)
    assert (o.discount_value, o.total_value) == (Decimal("5"), Decimal("95"))

    r = lab.editar_rascunho(oid)
    assert (r.discount_value, r.total_value) == (Decimal("0"), Decimal("100"))


def test_status_change_keeps_stored_totals(lab):
    lab.salvar_empresa({"global_discount_percent": Decimal("5")})
    oid = _nova_os(lab, servico="Provisório", valor=Decimal("100"))
    lab.mudar_status_ordem(oid, OrderStatus.IN_PRODUCTION)
    o = lab.snapshot.find("orders", oid)
    assert o.status == OrderStatus.IN_PRODUCTION
    assert o.total_value == Decimal("95")


def test_pricing_update_recomputes_through_draft(lab):
    lab.novo_procedimento("Coroa de Zircônia", Decimal("220"))
    lab.novo_procedimento("Faceta", Decimal("180"))
    oid = _nova_os(lab)
    lab.atualizar_ordem(oid, {"quantity": 3})
    o = lab.snapshot.find("orders", oid)
    assert (o.quantity, o.total_value) == (3, Decimal("660"))

    # unit_value informado vence o preço do catálogo na mesma alteração
    lab.atualizar_ordem(oid, {"unit_value": Decimal("150"), "service_type": "Faceta"})
    o = lab.snapshot.find("orders", oid)
    assert o.service_type == "Faceta"
    assert o.total_value == Decimal("450")


def test_derived_fields_cannot_be_written(lab):
    oid = _nova_os(lab, servico="Provisório", valor=Decimal("100"))
    with pytest.raises(ValidationError):
        lab.atualizar_ordem(oid, {"total_value": Decimal("1")})


def test_update_missing_order(lab):
    with pytest.raises(NotFoundError):
        lab.atualizar_ordem(999, {"quantity": 2})
    with pytest.raises(NotFoundError):
        lab.atualizar_ordem(999, {"notes": "x"})


def test_removing_payment_method_does_not_cascade(lab):
    pid = lab.adicionar_pagamento(PaymentMethod(name="PIX", type=PaymentType.PIX, discount_percent=Decimal("10")))
    oid = _nova_os(lab, servico="Provisório", valor=Decimal("100"), pagamento=pid)
    lab.remover_pagamento(pid)
    assert lab.snapshot.find("orders", oid).payment_method_id == pid


def test_toggles(lab):
    pid = lab.adicionar_pagamento(PaymentMethod(name="Dinheiro", type=PaymentType.CASH))
    lab.alternar_pagamento_ativo(pid)
    assert lab.listar_pagamentos(apenas_ativos=True) == []
    tid = lab.adicionar_tarefa(Task(title="Comprar gesso", due_date=HOJE))
    lab.alternar_tarefa(tid)
    assert lab.estatisticas_tarefas().completed == 1


# -----------------------------
# Visões
# -----------------------------

def test_resumo_e_painel(lab):
    lab.adicionar_transacao(Transaction(
        description="Coroa", type=TransactionType.INCOME, amount=Decimal("500"),
        date=date(2024, 3, 5), category="Serviço",
    ))
    lab.adicionar_transacao(Transaction(
        description="Gesso", type=TransactionType.EXPENSE, amount=Decimal("80"),
        date=date(2024, 3, 7), category="Material", status=TransactionStatus.PENDING,
    ))
    lab.adicionar_transacao(Transaction(
        description="Antiga", type=TransactionType.INCOME, amount=Decimal("999"),
        date=date(2024, 2, 1), category="Serviço",
    ))
    resumo = lab.resumo_financeiro(3, 2024)
    assert resumo.current_balance == Decimal("500")
    assert resumo.projected_balance == Decimal("420")
    assert lab.painel(HOJE).weekly_revenue == Decimal("500")


def test_options_include_historical_names(lab):
    lab.adicionar_cliente(Client(name="Dr. Bruno", contact_phone="1"))
    _nova_os(lab, servico="Provisório", valor=Decimal("100"))
    assert lab.opcoes_dentistas() == ["Dr. Bruno", "Dra. Ana"]
    assert lab.opcoes_servicos() == ["Provisório"]
