from decimal import Decimal

import pandas as pd
import pytest

from odontolab.adapters.catalogo_loader import _normalize_columns, load_catalogo_from_xlsx
from odontolab.domain.errors import ValidationError


def test_normalize_columns_aliases():
    df = pd.DataFrame({"Código": ["1"], "Procedimento": ["x"], "Preço Base": ["1"], "Ordem Exibição": ["1"]})
    assert list(_normalize_columns(df).columns) == ["code", "name", "base_price", "display_order"]


def test_load_catalogo_from_xlsx(tmp_path):
    path = tmp_path / "tabela.xlsx"
    pd.DataFrame({
        "Código": ["PRO-001", None, "PRO-003"],
        "Procedimento": ["Coroa de Zircônia", "Sem código", "Protocolo"],
        "Preço": ["220", "10", "1.100,00"],
        "Categoria": ["Prótese Fixa", None, None],
    }).to_excel(path, index=False)

    entradas = load_catalogo_from_xlsx(str(path), ordem_inicial=5)
    assert [e.code for e in entradas] == ["PRO-001", "PRO-003"]
    assert entradas[0].base_price == Decimal("220")
    assert entradas[1].base_price == Decimal("1100.00")
    assert entradas[0].category == "Prótese Fixa"
    assert entradas[1].category is None
    assert entradas[0].display_order == 5


def test_explicit_order_column(tmp_path):
    path = tmp_path / "tabela.xlsx"
    pd.DataFrame({
        "cod": ["A", "B"],
        "nome": ["Faceta", "Coroa"],
        "valor": [180, 220],
        "ordem": [2, 1],
    }).to_excel(path, index=False)

    entradas = load_catalogo_from_xlsx(str(path))
    assert [(e.code, e.display_order) for e in entradas] == [("A", 2), ("B", 1)]
    assert entradas[1].base_price == Decimal("220")


def test_preco_com_ponto_de_milhar(tmp_path):
    path = tmp_path / "tabela.xlsx"
    pd.DataFrame({
        "Código": ["PRO-010", "PRO-011"],
        "Procedimento": ["Protocolo", "Placa"],
        "Preço": ["1.100", None],
    }).to_excel(path, index=False)

    entradas = load_catalogo_from_xlsx(str(path))
    assert [e.base_price for e in entradas] == [Decimal("1100"), Decimal("0")]


def test_preco_ilegivel_rejeita_planilha(tmp_path):
    path = tmp_path / "tabela.xlsx"
    pd.DataFrame({
        "Código": ["PRO-001", "PRO-002"],
        "Procedimento": ["Coroa", "Faceta"],
        "Preço": ["220", "a combinar"],
    }).to_excel(path, index=False)

    with pytest.raises(ValidationError) as exc:
        load_catalogo_from_xlsx(str(path))
    assert exc.value.field == "base_price"
    assert "linha 3" in str(exc.value)
