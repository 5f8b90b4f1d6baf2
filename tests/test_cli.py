from decimal import Decimal
from pathlib import Path

import pandas as pd
from typer.testing import CliRunner

from odontolab.adapters.cli import app
from odontolab.domain.models import OrderStatus
from odontolab.usecases.laboratorio import Laboratorio

runner = CliRunner()


def _db(tmp_path: Path) -> str:
    db_path = str(tmp_path / "odontolab_test.sqlite")
    result = runner.invoke(app, ["migrate", "--db", db_path])
    assert result.exit_code == 0, result.output
    return db_path


def test_cli_migrate(tmp_path: Path):
    db_path = tmp_path / "odontolab_test.sqlite"
    result = runner.invoke(app, ["migrate", "--db", str(db_path)])
    assert result.exit_code == 0, result.output
    assert "versão 2" in result.output
    assert db_path.exists()


def test_cli_empresa_set_and_show(tmp_path: Path):
    db = _db(tmp_path)
    result = runner.invoke(app, ["empresa", "show", "--db", db])
    assert result.exit_code == 0
    assert "Nenhum dado encontrado" in result.output

    result = runner.invoke(app, ["empresa", "set", "--nome", "Lab Sorriso", "--desconto-global", "5", "--db", db])
    assert result.exit_code == 0, result.output

    result = runner.invoke(app, ["empresa", "show", "--db", db])
    assert result.exit_code == 0
    assert "Lab Sorriso" in result.output
    assert "5%" in result.output


def test_cli_empresa_set_rejects(tmp_path: Path):
    db = _db(tmp_path)
    result = runner.invoke(app, ["empresa", "set", "--db", db])
    assert result.exit_code == 1

    result = runner.invoke(app, ["empresa", "set", "--desconto-global", "150", "--db", db])
    assert result.exit_code == 1
    assert "Erro" in result.output
    assert Laboratorio(db).snapshot.settings is None


def test_cli_order_with_catalog_price_and_method_discount(tmp_path: Path):
    db = _db(tmp_path)
    result = runner.invoke(app, ["catalogo", "adicionar", "Coroa de Zircônia", "--preco", "220", "--db", db])
    assert result.exit_code == 0, result.output
    assert "PRO-001" in result.output

    result = runner.invoke(app, ["pagamentos", "adicionar", "PIX", "--tipo", "pix", "--desconto", "10", "--db", db])
    assert result.exit_code == 0, result.output

    result = runner.invoke(app, [
        "os", "nova",
        "--dentista", "Dra. Ana",
        "--paciente", "João",
        "--servico", "Coroa de Zircônia",
        "--quantidade", "2",
        "--pagamento", "1",
        "--db", db,
    ])
    assert result.exit_code == 0, result.output
    assert "R$ 44,00" in result.output
    assert "R$ 396,00" in result.output

    ordem = Laboratorio(db).snapshot.orders[0]
    assert ordem.total_value == Decimal("396")


def test_cli_order_edit_and_status(tmp_path: Path):
    db = _db(tmp_path)
    result = runner.invoke(app, [
        "os", "nova", "--dentista", "Dra. Ana", "--paciente", "João",
        "--servico", "Provisório", "--valor", "100", "--db", db,
    ])
    assert result.exit_code == 0, result.output

    result = runner.invoke(app, ["os", "editar", "1", "--quantidade", "3", "--db", db])
    assert result.exit_code == 0, result.output
    assert "R$ 300,00" in result.output

    result = runner.invoke(app, ["os", "status", "1", "Entregue", "--db", db])
    assert result.exit_code == 0, result.output
    assert Laboratorio(db).snapshot.orders[0].status == OrderStatus.DELIVERED

    result = runner.invoke(app, ["os", "listar", "--busca", "joão", "--db", db])
    assert result.exit_code == 0, result.output


def test_cli_order_edit_clears_payment_method(tmp_path: Path):
    db = _db(tmp_path)
    result = runner.invoke(app, ["pagamentos", "adicionar", "PIX", "--tipo", "pix", "--desconto", "10", "--db", db])
    assert result.exit_code == 0, result.output
    result = runner.invoke(app, [
        "os", "nova", "--dentista", "Dra. Ana", "--paciente", "João",
        "--servico", "Provisório", "--valor", "100", "--pagamento", "1", "--db", db,
    ])
    assert result.exit_code == 0, result.output
    assert Laboratorio(db).snapshot.orders[0].total_value == Decimal("90")

    result = runner.invoke(app, ["os", "editar", "1", "--pagamento", "1", "--sem-pagamento", "--db", db])
    assert result.exit_code == 1

    result = runner.invoke(app, ["os", "editar", "1", "--sem-pagamento", "--db", db])
    assert result.exit_code == 0, result.output
    ordem = Laboratorio(db).snapshot.orders[0]
    assert ordem.payment_method_id is None
    assert ordem.discount_value == Decimal("0")
    assert ordem.total_value == Decimal("100")


def test_cli_not_found_exits_1(tmp_path: Path):
    db = _db(tmp_path)
    result = runner.invoke(app, ["os", "remover", "99", "--db", db])
    assert result.exit_code == 1
    assert "não encontrado" in result.output


def test_cli_invalid_order(tmp_path: Path):
    db = _db(tmp_path)
    result = runner.invoke(app, [
        "os", "nova", "--dentista", "Dra. Ana", "--paciente", "João",
        "--servico", "Provisório", "--quantidade", "0", "--db", db,
    ])
    assert result.exit_code == 1
    assert Laboratorio(db).snapshot.orders == ()


def test_cli_financeiro(tmp_path: Path):
    db = _db(tmp_path)
    result = runner.invoke(app, [
        "financeiro", "lancar", "Coroa", "--valor", "1.234,56", "--data", "05/03/2024", "--db", db,
    ])
    assert result.exit_code == 0, result.output
    result = runner.invoke(app, [
        "financeiro", "lancar", "Gesso", "--valor", "80", "--tipo", "Despesa",
        "--data", "07/03/2024", "--pendente", "--db", db,
    ])
    assert result.exit_code == 0, result.output

    result = runner.invoke(app, ["financeiro", "resumo", "--mes", "3", "--ano", "2024", "--db", db])
    assert result.exit_code == 0, result.output
    assert "R$ 1.234,56" in result.output
    assert "R$ 1.154,56" in result.output

    result = runner.invoke(app, ["financeiro", "lancar", "Nada", "--valor", "0", "--db", db])
    assert result.exit_code == 1


def test_cli_tarefas(tmp_path: Path):
    db = _db(tmp_path)
    result = runner.invoke(app, ["tarefas", "adicionar", "Comprar gesso", "--prioridade", "Alta", "--db", db])
    assert result.exit_code == 0, result.output
    result = runner.invoke(app, ["tarefas", "concluir", "1", "--db", db])
    assert result.exit_code == 0, result.output
    assert "concluída" in result.output
    result = runner.invoke(app, ["tarefas", "listar", "--db", db])
    assert result.exit_code == 0, result.output
    assert "Concluídas: 1" in result.output


def test_cli_dashboard_and_prazos(tmp_path: Path):
    db = _db(tmp_path)
    runner.invoke(app, [
        "os", "nova", "--dentista", "Dra. Ana", "--paciente", "João", "--servico", "Provisório",
        "--valor", "100", "--entrada", "01/03/2024", "--prazo", "08/03/2024", "--db", db,
    ])
    result = runner.invoke(app, ["dashboard", "--hoje", "10/03/2024", "--db", db])
    assert result.exit_code == 0, result.output
    result = runner.invoke(app, ["prazos", "--hoje", "10/03/2024", "--db", db])
    assert result.exit_code == 0, result.output
    assert "João" in result.output

    result = runner.invoke(app, ["dashboard", "--hoje", "ontem", "--db", db])
    assert result.exit_code == 1


def test_cli_catalogo_importar(tmp_path: Path):
    db = _db(tmp_path)
    xlsx = tmp_path / "tabela.xlsx"
    pd.DataFrame({
        "Código": ["PRO-001", "PRO-002"],
        "Procedimento": ["Coroa", "Faceta"],
        "Preço": ["220", "180"],
    }).to_excel(xlsx, index=False)
    result = runner.invoke(app, ["catalogo", "importar", str(xlsx), "--db", db])
    assert result.exit_code == 0, result.output
    assert "2 procedimento(s)" in result.output

    # códigos repetidos: nada é gravado
    result = runner.invoke(app, ["catalogo", "importar", str(xlsx), "--db", db])
    assert result.exit_code == 1
    assert len(Laboratorio(db).snapshot.catalog) == 2


def test_cli_exportar(tmp_path: Path):
    db = _db(tmp_path)
    runner.invoke(app, [
        "os", "nova", "--dentista", "Dra. Ana", "--paciente", "João",
        "--servico", "Provisório", "--valor", "100", "--db", db,
    ])
    ordens = tmp_path / "ordens.xlsx"
    result = runner.invoke(app, ["exportar", "os", str(ordens), "--db", db])
    assert result.exit_code == 0, result.output
    assert len(pd.read_excel(ordens)) == 1

    backup = tmp_path / "backup.xlsx"
    result = runner.invoke(app, ["exportar", "backup", str(backup), "--db", db])
    assert result.exit_code == 0, result.output
    assert "SERVICOS_OS" in pd.read_excel(backup, sheet_name=None)
