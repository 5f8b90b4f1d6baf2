# odontolab/adapters/cli.py
"""
CLI do OdontoLab (Typer).

Comandos principais:
- migrate                          -> aplica migrações
- empresa show/set                 -> dados da empresa e desconto global
- clientes listar/adicionar/remover
- catalogo listar/adicionar/importar/remover
- pagamentos listar/adicionar/alternar/remover
- os nova/editar/listar/status/remover
- financeiro resumo/listar/lancar/remover
- tarefas listar/adicionar/concluir/remover
- dashboard                        -> indicadores do painel
- prazos                           -> O.S. vencendo hoje ou atrasadas
- exportar os/backup               -> planilhas XLSX
"""

from __future__ import annotations

import json
from contextlib import contextmanager
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional

import typer
from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich import box
from rich.markup import escape

from odontolab.config import DB_PATH, DEFAULTS
from odontolab.adapters.catalogo_loader import load_catalogo_from_xlsx
from odontolab.adapters.exportacao import exportar_backup_xlsx, exportar_ordens_xlsx
from odontolab.adapters.parsers import formatar_data, formatar_moeda, parse_data, parse_valor
from odontolab.domain.errors import OdontoLabError, ValidationError
from odontolab.domain.models import (
    CatalogEntry,
    Client,
    OrderStatus,
    PaymentMethod,
    PaymentType,
    ServiceOrder,
    Task,
    TaskPriority,
    Transaction,
    TransactionStatus,
    TransactionType,
)
from odontolab.infra.logger import configure_logging
from odontolab.infra.migrations import apply_migrations, schema_version
from odontolab.usecases.laboratorio import Laboratorio
from odontolab.usecases.relatorios import relatorio_financeiro, relatorio_painel, relatorio_prazos


app = typer.Typer(help="OdontoLab — CLI do laboratório de prótese")
console = Console()


@app.callback()
def _main(
    log: bool = typer.Option(False, "--log", help="Grava logs em ./logs (ou ODONTOLAB_LOGS)"),
):
    if log:
        configure_logging(True)


# -----------------------
# util
# -----------------------

def _print_json(obj) -> None:
    """Fallback para impressão de JSON quando necessário."""
    typer.echo(json.dumps(obj, ensure_ascii=False, indent=2, default=str))


@contextmanager
def _tratando_erros() -> Iterator[None]:
    """Erros do domínio viram mensagem em vermelho e exit code 1."""
    try:
        yield
    except OdontoLabError as e:
        console.print(f"[bold red]Erro:[/] {escape(str(e))}")
        raise typer.Exit(code=1)


def _fmt(val: Any) -> str:
    if val is None:
        return ""
    if isinstance(val, Enum):
        return str(val.value)
    if isinstance(val, bool):
        return "sim" if val else "não"
    if isinstance(val, Decimal):
        return formatar_moeda(val)
    if isinstance(val, date):
        return formatar_data(val)
    return str(val)


def _pct(val: Any) -> str:
    if val is None:
        return ""
    return f"{Decimal(str(val)).normalize():f}%"


def _valor(txt: Optional[str], campo: str) -> Optional[Decimal]:
    if txt is None:
        return None
    val = parse_valor(txt)
    if val is None:
        raise ValidationError(f"valor inválido para {campo}: {txt!r}", field=campo)
    return val


def _data(txt: Optional[str], campo: str) -> Optional[date]:
    if txt is None:
        return None
    val = parse_data(txt)
    if val is None:
        raise ValidationError(f"data inválida para {campo}: {txt!r} (use DD/MM/AAAA)", field=campo)
    return val


def _display_table(data: Dict[str, Any] | List[Dict[str, Any]], title: str = "Resultado") -> None:
    """Exibe os dados em tabelas formatadas usando Rich."""
    if not data:
        console.print(Panel("Nenhum dado encontrado", title=title, border_style="yellow"))
        return

    # Lista de registros
    if isinstance(data, list) and isinstance(data[0], dict):
        table = Table(title=title, box=box.ROUNDED)
        columns = list(data[0].keys())
        for column in columns:
            amostra = data[0].get(column)
            if isinstance(amostra, (int, Decimal)) and not isinstance(amostra, bool):
                table.add_column(column, justify="right")
            elif isinstance(amostra, date):
                table.add_column(column, justify="center")
            else:
                table.add_column(column)
        for row in data:
            table.add_row(*[_fmt(row.get(col)) for col in columns])
        console.print(table)
        return

    # Resumo financeiro: saldos + lançamentos do período
    if isinstance(data, dict) and "lancamentos" in data:
        resumo = Table(title=title, box=box.ROUNDED)
        resumo.add_column("Campo")
        resumo.add_column("Valor", justify="right")
        for chave, valor in data.items():
            if chave == "lancamentos":
                continue
            estilo = ""
            if chave.startswith("saldo") and isinstance(valor, Decimal):
                estilo = "bold green" if valor >= 0 else "bold red"
            texto = _fmt(valor)
            resumo.add_row(chave, f"[{estilo}]{texto}[/]" if estilo else texto)
        console.print(resumo)
        if data["lancamentos"]:
            _display_table(data["lancamentos"], title="Lançamentos do Período")
        return

    # Registro único / indicadores
    if isinstance(data, dict):
        table = Table(title=title, box=box.ROUNDED)
        table.add_column("Campo")
        table.add_column("Valor")
        for chave, valor in data.items():
            table.add_row(chave, _fmt(valor))
        console.print(table)
        return

    # Fallback para outros formatos de dados - usar JSON
    _print_json(data)


def _linha_cliente(c: Client) -> Dict[str, Any]:
    return {
        "id": c.id,
        "nome": c.name,
        "telefone": c.contact_phone,
        "email": c.email,
        "cro": c.professional_registration or "",
        "status": c.status,
    }


def _linha_procedimento(p: CatalogEntry) -> Dict[str, Any]:
    return {
        "id": p.id,
        "codigo": p.code,
        "procedimento": p.name,
        "categoria": p.category or "",
        "preco": p.base_price,
        "ordem": p.display_order,
    }


def _linha_pagamento(m: PaymentMethod) -> Dict[str, Any]:
    return {
        "id": m.id,
        "nome": m.name,
        "tipo": m.type,
        "desconto": _pct(m.discount_percent),
        "ativo": m.active,
    }


def _linha_ordem(o: ServiceOrder) -> Dict[str, Any]:
    return {
        "os": o.id,
        "entrada": o.entry_date,
        "dentista": o.dentist_name,
        "paciente": o.patient_name,
        "servico": o.service_type,
        "qtd": o.quantity,
        "total": o.total_value,
        "prazo": o.due_date,
        "status": o.status,
    }


def _linha_transacao(t: Transaction) -> Dict[str, Any]:
    return {
        "id": t.id,
        "data": t.date,
        "descricao": t.description,
        "categoria": t.category,
        "tipo": t.type,
        "status": t.status,
        "valor": t.amount,
    }


def _linha_tarefa(t: Task) -> Dict[str, Any]:
    return {
        "id": t.id,
        "titulo": t.title,
        "prioridade": t.priority,
        "prazo": t.due_date,
        "responsavel": t.assignee or "",
        "concluida": t.completed,
    }


def _painel_ordem(o: ServiceOrder, desconto_percent: Optional[Decimal] = None, titulo: str = "O.S.") -> None:
    linhas = [
        f"Protocolo: {o.id}",
        f"Dentista: {o.dentist_name}",
        f"Paciente: {o.patient_name}",
        f"Serviço: {o.service_type} ({o.material})",
        f"Quantidade: {o.quantity}",
        f"Valor unitário: {formatar_moeda(o.unit_value)}",
    ]
    if desconto_percent is not None:
        linhas.append(f"Desconto aplicado: {_pct(desconto_percent)}")
    linhas += [
        f"Desconto: {formatar_moeda(o.discount_value)}",
        f"Total: {formatar_moeda(o.total_value)}",
        f"Prazo: {formatar_data(o.due_date)}",
        f"Status: {o.status.value}",
    ]
    console.print(Panel("\n".join(linhas), title=titulo))


# -----------------------
# comandos de infra
# -----------------------

@app.command("migrate")
def cmd_migrate(db_path: str = typer.Option(DB_PATH, "--db", help="Caminho do SQLite")):
    """Aplica as migrações do banco."""
    with _tratando_erros():
        apply_migrations(db_path)
        typer.echo(f">> Migrações aplicadas em: {db_path} (versão {schema_version(db_path)})")


# -----------------------
# empresa
# -----------------------

empresa_app = typer.Typer(help="Dados da empresa e desconto global.")
app.add_typer(empresa_app, name="empresa")


@empresa_app.command("show")
def cmd_empresa_show(db_path: str = typer.Option(DB_PATH, "--db", help="Caminho do SQLite")):
    """Exibe os dados da empresa (vazio até o primeiro `empresa set`)."""
    with _tratando_erros():
        s = Laboratorio(db_path).snapshot.settings
    if s is None:
        _display_table({}, title="Empresa")
        return
    _display_table(
        {
            "nome": s.name,
            "cnpj": s.tax_id,
            "email": s.email,
            "telefone": s.phone,
            "endereco": s.address,
            "logo": s.logo_url,
            "desconto_global": _pct(s.global_discount_percent),
        },
        title="Empresa",
    )


@empresa_app.command("set")
def cmd_empresa_set(
    nome: Optional[str] = typer.Option(None, help="Razão social / nome fantasia"),
    cnpj: Optional[str] = typer.Option(None),
    email: Optional[str] = typer.Option(None),
    telefone: Optional[str] = typer.Option(None),
    endereco: Optional[str] = typer.Option(None),
    logo: Optional[str] = typer.Option(None, help="URL do logotipo"),
    desconto_global: Optional[str] = typer.Option(None, help="Percentual para O.S. novas (ex.: 5)"),
    db_path: str = typer.Option(DB_PATH, "--db", help="Caminho do SQLite"),
):
    """Atualiza os dados da empresa (apenas os informados são alterados)."""
    with _tratando_erros():
        campos: Dict[str, Any] = {}
        for chave, valor in (
            ("name", nome), ("tax_id", cnpj), ("email", email),
            ("phone", telefone), ("address", endereco), ("logo_url", logo),
        ):
            if valor is not None:
                campos[chave] = valor
        if desconto_global is not None:
            campos["global_discount_percent"] = _valor(desconto_global, "desconto_global")
        if not campos:
            typer.echo("Nada a alterar. Informe pelo menos um campo.")
            raise typer.Exit(code=1)
        Laboratorio(db_path).salvar_empresa(campos)
    typer.echo(">> Dados da empresa atualizados.")


# -----------------------
# clientes
# -----------------------

clientes_app = typer.Typer(help="Dentistas / parceiros.")
app.add_typer(clientes_app, name="clientes")


@clientes_app.command("listar")
def cmd_clientes_listar(
    busca: Optional[str] = typer.Option(None, help="Nome, email ou CRO"),
    db_path: str = typer.Option(DB_PATH, "--db", help="Caminho do SQLite"),
):
    with _tratando_erros():
        clientes = Laboratorio(db_path).listar_clientes(search=busca)
    _display_table([_linha_cliente(c) for c in clientes], title="Clientes")


@clientes_app.command("adicionar")
def cmd_clientes_adicionar(
    nome: str = typer.Argument(..., help="Nome do dentista"),
    telefone: str = typer.Option("", help="Telefone de contato"),
    email: str = typer.Option(""),
    cpf: Optional[str] = typer.Option(None),
    cro: Optional[str] = typer.Option(None),
    especialidade: Optional[str] = typer.Option(None),
    endereco: Optional[str] = typer.Option(None),
    db_path: str = typer.Option(DB_PATH, "--db", help="Caminho do SQLite"),
):
    """Cadastra um dentista."""
    with _tratando_erros():
        novo_id = Laboratorio(db_path).adicionar_cliente(
            Client(
                name=nome,
                contact_phone=telefone,
                email=email,
                tax_registration=cpf,
                professional_registration=cro,
                specialty=especialidade,
                address=endereco,
            )
        )
    typer.echo(f">> Cliente cadastrado (id {novo_id}).")


@clientes_app.command("remover")
def cmd_clientes_remover(
    cliente_id: int = typer.Argument(...),
    db_path: str = typer.Option(DB_PATH, "--db", help="Caminho do SQLite"),
):
    with _tratando_erros():
        Laboratorio(db_path).remover_cliente(cliente_id)
    typer.echo(f">> Cliente {cliente_id} removido.")


# -----------------------
# catálogo
# -----------------------

catalogo_app = typer.Typer(help="Tabela de preços dos procedimentos.")
app.add_typer(catalogo_app, name="catalogo")


@catalogo_app.command("listar")
def cmd_catalogo_listar(
    busca: Optional[str] = typer.Option(None, help="Nome ou código"),
    categoria: Optional[str] = typer.Option(None),
    db_path: str = typer.Option(DB_PATH, "--db", help="Caminho do SQLite"),
):
    with _tratando_erros():
        lab = Laboratorio(db_path)
        itens = lab.listar_catalogo(search=busca, category=categoria)
        stats = lab.estatisticas_catalogo()
    _display_table([_linha_procedimento(p) for p in itens], title="Catálogo")
    console.print(f"[dim]Procedimentos: {stats.total} | Preço médio: {formatar_moeda(stats.average_price)}[/dim]")


@catalogo_app.command("adicionar")
def cmd_catalogo_adicionar(
    nome: str = typer.Argument(..., help="Nome do procedimento"),
    preco: str = typer.Option(..., help="Preço base (ex.: 220 ou 1.100,00)"),
    categoria: str = typer.Option(DEFAULTS.categoria_catalogo_padrao),
    db_path: str = typer.Option(DB_PATH, "--db", help="Caminho do SQLite"),
):
    """Cadastra um procedimento com código sequencial automático."""
    with _tratando_erros():
        lab = Laboratorio(db_path)
        novo_id = lab.novo_procedimento(nome, _valor(preco, "preco"), categoria)
        entry = lab.snapshot.find("catalog", novo_id)
    typer.echo(f">> Procedimento {entry.code} cadastrado (id {novo_id}).")


@catalogo_app.command("importar")
def cmd_catalogo_importar(
    path: str = typer.Argument(..., help="Caminho do XLSX da tabela de preços"),
    db_path: str = typer.Option(DB_PATH, "--db", help="Caminho do SQLite"),
):
    """Importa uma tabela de preços inteira (nada é gravado se uma linha falhar)."""
    with _tratando_erros():
        lab = Laboratorio(db_path)
        entradas = load_catalogo_from_xlsx(path, ordem_inicial=len(lab.snapshot.catalog) + 1)
        n = lab.importar_catalogo(entradas)
    typer.echo(f">> {n} procedimento(s) importado(s).")


@catalogo_app.command("remover")
def cmd_catalogo_remover(
    procedimento_id: int = typer.Argument(...),
    db_path: str = typer.Option(DB_PATH, "--db", help="Caminho do SQLite"),
):
    with _tratando_erros():
        Laboratorio(db_path).remover_procedimento(procedimento_id)
    typer.echo(f">> Procedimento {procedimento_id} removido.")


# -----------------------
# canais de pagamento
# -----------------------

pagamentos_app = typer.Typer(help="Canais de recebimento e seus descontos.")
app.add_typer(pagamentos_app, name="pagamentos")


@pagamentos_app.command("listar")
def cmd_pagamentos_listar(
    ativos: bool = typer.Option(False, "--ativos", help="Somente canais ativos"),
    db_path: str = typer.Option(DB_PATH, "--db", help="Caminho do SQLite"),
):
    with _tratando_erros():
        metodos = Laboratorio(db_path).listar_pagamentos(apenas_ativos=ativos)
    _display_table([_linha_pagamento(m) for m in metodos], title="Canais de Pagamento")


@pagamentos_app.command("adicionar")
def cmd_pagamentos_adicionar(
    nome: str = typer.Argument(...),
    tipo: PaymentType = typer.Option(PaymentType.PIX),
    desconto: Optional[str] = typer.Option(None, help="Desconto do canal em % (ex.: 10)"),
    email: Optional[str] = typer.Option(None),
    telefone: Optional[str] = typer.Option(None),
    db_path: str = typer.Option(DB_PATH, "--db", help="Caminho do SQLite"),
):
    with _tratando_erros():
        novo_id = Laboratorio(db_path).adicionar_pagamento(
            PaymentMethod(
                name=nome,
                type=tipo,
                discount_percent=_valor(desconto, "desconto"),
                email=email,
                phone=telefone,
            )
        )
    typer.echo(f">> Canal de pagamento cadastrado (id {novo_id}).")


@pagamentos_app.command("alternar")
def cmd_pagamentos_alternar(
    metodo_id: int = typer.Argument(...),
    db_path: str = typer.Option(DB_PATH, "--db", help="Caminho do SQLite"),
):
    """Ativa/desativa um canal."""
    with _tratando_erros():
        lab = Laboratorio(db_path)
        lab.alternar_pagamento_ativo(metodo_id)
        ativo = lab.snapshot.find("payment_methods", metodo_id).active
    typer.echo(f">> Canal {metodo_id} {'ativado' if ativo else 'desativado'}.")


@pagamentos_app.command("remover")
def cmd_pagamentos_remover(
    metodo_id: int = typer.Argument(...),
    db_path: str = typer.Option(DB_PATH, "--db", help="Caminho do SQLite"),
):
    with _tratando_erros():
        Laboratorio(db_path).remover_pagamento(metodo_id)
    typer.echo(f">> Canal {metodo_id} removido.")


# -----------------------
# ordens de serviço
# -----------------------

os_app = typer.Typer(help="Ordens de serviço.")
app.add_typer(os_app, name="os")


@os_app.command("nova")
def cmd_os_nova(
    dentista: str = typer.Option(..., help="Nome do dentista"),
    paciente: str = typer.Option(..., help="Nome do paciente"),
    servico: str = typer.Option(..., help="Procedimento (preço vem do catálogo)"),
    quantidade: int = typer.Option(1),
    valor: Optional[str] = typer.Option(None, help="Valor unitário; sobrescreve o do catálogo"),
    pagamento: Optional[int] = typer.Option(None, help="Id do canal de pagamento"),
    material: str = typer.Option(DEFAULTS.material_padrao),
    entrada: Optional[str] = typer.Option(None, help="Data de entrada (DD/MM/AAAA), padrão hoje"),
    prazo: Optional[str] = typer.Option(None, help="Prazo de entrega (DD/MM/AAAA)"),
    obs: Optional[str] = typer.Option(None),
    db_path: str = typer.Option(DB_PATH, "--db", help="Caminho do SQLite"),
):
    """Abre uma O.S. com desconto e total calculados."""
    with _tratando_erros():
        lab = Laboratorio(db_path)
        rascunho = lab.novo_rascunho(today=_data(entrada, "entrada"))
        rascunho.dentist_name = dentista
        rascunho.patient_name = paciente
        rascunho.material = material
        rascunho.notes = obs
        rascunho.service_type = servico
        if valor is not None:
            rascunho.unit_value = _valor(valor, "valor")
        rascunho.quantity = quantidade
        rascunho.payment_method_id = pagamento
        if prazo is not None:
            rascunho.due_date = _data(prazo, "prazo")
        novo_id = lab.salvar_rascunho(rascunho)
        ordem = lab.snapshot.find("orders", novo_id)
    _painel_ordem(ordem, rascunho.discount_percent, titulo="O.S. Registrada")


@os_app.command("editar")
def cmd_os_editar(
    ordem_id: int = typer.Argument(...),
    servico: Optional[str] = typer.Option(None),
    quantidade: Optional[int] = typer.Option(None),
    valor: Optional[str] = typer.Option(None, help="Valor unitário"),
    pagamento: Optional[int] = typer.Option(None, help="Id do canal de pagamento"),
    sem_pagamento: bool = typer.Option(False, "--sem-pagamento", help="Remove o canal de pagamento da O.S."),
    prazo: Optional[str] = typer.Option(None, help="Prazo de entrega (DD/MM/AAAA)"),
    obs: Optional[str] = typer.Option(None),
    db_path: str = typer.Option(DB_PATH, "--db", help="Caminho do SQLite"),
):
    """Altera uma O.S.; mudanças de preço recalculam desconto e total."""
    with _tratando_erros():
        campos: Dict[str, Any] = {}
        if servico is not None:
            campos["service_type"] = servico
        if quantidade is not None:
            campos["quantity"] = quantidade
        if valor is not None:
            campos["unit_value"] = _valor(valor, "valor")
        if pagamento is not None:
            campos["payment_method_id"] = pagamento
        if sem_pagamento:
            if pagamento is not None:
                raise ValidationError("use --pagamento ou --sem-pagamento, não os dois", field="payment_method_id")
            campos["payment_method_id"] = None
        if prazo is not None:
            campos["due_date"] = _data(prazo, "prazo")
        if obs is not None:
            campos["notes"] = obs
        if not campos:
            typer.echo("Nada a alterar. Informe pelo menos um campo.")
            raise typer.Exit(code=1)
        lab = Laboratorio(db_path)
        lab.atualizar_ordem(ordem_id, campos)
        ordem = lab.snapshot.find("orders", ordem_id)
    _painel_ordem(ordem, titulo="O.S. Atualizada")


@os_app.command("listar")
def cmd_os_listar(
    busca: Optional[str] = typer.Option(None, help="Paciente, dentista, serviço ou número"),
    dentista: Optional[str] = typer.Option(None),
    servico: Optional[str] = typer.Option(None),
    de: Optional[str] = typer.Option(None, help="Entrada a partir de (DD/MM/AAAA)"),
    ate: Optional[str] = typer.Option(None, help="Entrada até (DD/MM/AAAA)"),
    db_path: str = typer.Option(DB_PATH, "--db", help="Caminho do SQLite"),
):
    with _tratando_erros():
        ordens = Laboratorio(db_path).listar_ordens(
            search=busca,
            dentist=dentista,
            service_type=servico,
            start=_data(de, "de"),
            end=_data(ate, "ate"),
        )
    _display_table([_linha_ordem(o) for o in ordens], title="Ordens de Serviço")


@os_app.command("status")
def cmd_os_status(
    ordem_id: int = typer.Argument(...),
    status: OrderStatus = typer.Argument(..., help="Pendente | Em Produção | Finalizado | Entregue"),
    db_path: str = typer.Option(DB_PATH, "--db", help="Caminho do SQLite"),
):
    with _tratando_erros():
        Laboratorio(db_path).mudar_status_ordem(ordem_id, status)
    typer.echo(f">> O.S. {ordem_id}: {status.value}.")


@os_app.command("remover")
def cmd_os_remover(
    ordem_id: int = typer.Argument(...),
    db_path: str = typer.Option(DB_PATH, "--db", help="Caminho do SQLite"),
):
    with _tratando_erros():
        Laboratorio(db_path).remover_ordem(ordem_id)
    typer.echo(f">> O.S. {ordem_id} removida.")


# -----------------------
# financeiro
# -----------------------

fin_app = typer.Typer(help="Fluxo de caixa.")
app.add_typer(fin_app, name="financeiro")


@fin_app.command("resumo")
def cmd_fin_resumo(
    mes: Optional[int] = typer.Option(None, help="1-12 (padrão: mês atual)"),
    ano: Optional[int] = typer.Option(None, help="Padrão: ano atual"),
    db_path: str = typer.Option(DB_PATH, "--db", help="Caminho do SQLite"),
):
    """Realizado x pendente do mês, com saldo atual e previsto."""
    hoje = date.today()
    with _tratando_erros():
        res = relatorio_financeiro(mes or hoje.month, ano or hoje.year, db_path=db_path)
    _display_table(res, title=f"Financeiro {res['periodo']}")


@fin_app.command("listar")
def cmd_fin_listar(
    mes: Optional[int] = typer.Option(None),
    ano: Optional[int] = typer.Option(None),
    busca: Optional[str] = typer.Option(None, help="Descrição ou categoria"),
    categoria: Optional[str] = typer.Option(None),
    tipo: Optional[TransactionType] = typer.Option(None),
    db_path: str = typer.Option(DB_PATH, "--db", help="Caminho do SQLite"),
):
    with _tratando_erros():
        lancamentos = Laboratorio(db_path).listar_transacoes(
            search=busca, month=mes, year=ano, category=categoria, type=tipo,
        )
    _display_table([_linha_transacao(t) for t in lancamentos], title="Lançamentos")


@fin_app.command("lancar")
def cmd_fin_lancar(
    descricao: str = typer.Argument(...),
    valor: str = typer.Option(..., help="Valor em R$"),
    tipo: TransactionType = typer.Option(TransactionType.INCOME),
    data: Optional[str] = typer.Option(None, help="DD/MM/AAAA (padrão hoje)"),
    categoria: str = typer.Option(DEFAULTS.categoria_financeira_padrao),
    pendente: bool = typer.Option(False, "--pendente", help="Ainda não pago/recebido"),
    ordem: Optional[int] = typer.Option(None, "--os", help="O.S. relacionada"),
    pagamento: Optional[int] = typer.Option(None, help="Id do canal de pagamento"),
    db_path: str = typer.Option(DB_PATH, "--db", help="Caminho do SQLite"),
):
    """Registra uma receita ou despesa."""
    with _tratando_erros():
        novo_id = Laboratorio(db_path).adicionar_transacao(
            Transaction(
                description=descricao,
                type=tipo,
                amount=_valor(valor, "valor"),
                date=_data(data, "data") or date.today(),
                category=categoria,
                status=TransactionStatus.PENDING if pendente else TransactionStatus.PAID,
                related_order_id=ordem,
                payment_method_id=pagamento,
            )
        )
    typer.echo(f">> Lançamento registrado (id {novo_id}).")


@fin_app.command("remover")
def cmd_fin_remover(
    transacao_id: int = typer.Argument(...),
    db_path: str = typer.Option(DB_PATH, "--db", help="Caminho do SQLite"),
):
    with _tratando_erros():
        Laboratorio(db_path).remover_transacao(transacao_id)
    typer.echo(f">> Lançamento {transacao_id} removido.")


# -----------------------
# tarefas
# -----------------------

tarefas_app = typer.Typer(help="Tarefas da equipe.")
app.add_typer(tarefas_app, name="tarefas")


@tarefas_app.command("listar")
def cmd_tarefas_listar(
    busca: Optional[str] = typer.Option(None),
    db_path: str = typer.Option(DB_PATH, "--db", help="Caminho do SQLite"),
):
    with _tratando_erros():
        lab = Laboratorio(db_path)
        tarefas = lab.listar_tarefas(search=busca)
        stats = lab.estatisticas_tarefas()
    _display_table([_linha_tarefa(t) for t in tarefas], title="Tarefas")
    console.print(
        f"[dim]Concluídas: {stats.completed} | Pendentes: {stats.pending} | "
        f"Alta prioridade: {stats.high_priority}[/dim]"
    )


@tarefas_app.command("adicionar")
def cmd_tarefas_adicionar(
    titulo: str = typer.Argument(...),
    prazo: Optional[str] = typer.Option(None, help="DD/MM/AAAA (padrão hoje)"),
    prioridade: TaskPriority = typer.Option(TaskPriority.MEDIUM),
    descricao: str = typer.Option(""),
    responsavel: Optional[str] = typer.Option(None),
    db_path: str = typer.Option(DB_PATH, "--db", help="Caminho do SQLite"),
):
    with _tratando_erros():
        novo_id = Laboratorio(db_path).adicionar_tarefa(
            Task(
                title=titulo,
                due_date=_data(prazo, "prazo") or date.today(),
                description=descricao,
                priority=prioridade,
                assignee=responsavel,
            )
        )
    typer.echo(f">> Tarefa cadastrada (id {novo_id}).")


@tarefas_app.command("concluir")
def cmd_tarefas_concluir(
    tarefa_id: int = typer.Argument(...),
    db_path: str = typer.Option(DB_PATH, "--db", help="Caminho do SQLite"),
):
    """Marca/desmarca a tarefa como concluída."""
    with _tratando_erros():
        lab = Laboratorio(db_path)
        lab.alternar_tarefa(tarefa_id)
        concluida = lab.snapshot.find("tasks", tarefa_id).completed
    typer.echo(f">> Tarefa {tarefa_id} {'concluída' if concluida else 'reaberta'}.")


@tarefas_app.command("remover")
def cmd_tarefas_remover(
    tarefa_id: int = typer.Argument(...),
    db_path: str = typer.Option(DB_PATH, "--db", help="Caminho do SQLite"),
):
    with _tratando_erros():
        Laboratorio(db_path).remover_tarefa(tarefa_id)
    typer.echo(f">> Tarefa {tarefa_id} removida.")


# -----------------------
# painel e relatórios
# -----------------------

@app.command("dashboard")
def cmd_dashboard(
    hoje: Optional[str] = typer.Option(None, help="Data de referência (DD/MM/AAAA)"),
    db_path: str = typer.Option(DB_PATH, "--db", help="Caminho do SQLite"),
):
    """Faturamento dos últimos dias e contagens das O.S."""
    with _tratando_erros():
        res = relatorio_painel(_data(hoje, "hoje"), db_path=db_path)
    _display_table(res, title="Painel")


@app.command("prazos")
def cmd_prazos(
    hoje: Optional[str] = typer.Option(None, help="Data de referência (DD/MM/AAAA)"),
    db_path: str = typer.Option(DB_PATH, "--db", help="Caminho do SQLite"),
):
    """O.S. não entregues com prazo vencendo hoje ou já vencido."""
    with _tratando_erros():
        res = relatorio_prazos(_data(hoje, "hoje"), db_path=db_path)
    _display_table(res, title="Prazos de Entrega")


# -----------------------
# exportação
# -----------------------

exportar_app = typer.Typer(help="Planilhas XLSX.")
app.add_typer(exportar_app, name="exportar")


@exportar_app.command("os")
def cmd_exportar_os(
    path: str = typer.Argument("Ordens_de_Servico.xlsx", help="Arquivo de saída"),
    busca: Optional[str] = typer.Option(None),
    dentista: Optional[str] = typer.Option(None),
    servico: Optional[str] = typer.Option(None),
    de: Optional[str] = typer.Option(None, help="Entrada a partir de (DD/MM/AAAA)"),
    ate: Optional[str] = typer.Option(None, help="Entrada até (DD/MM/AAAA)"),
    db_path: str = typer.Option(DB_PATH, "--db", help="Caminho do SQLite"),
):
    """Exporta as O.S. (com os mesmos filtros de `os listar`)."""
    with _tratando_erros():
        ordens = Laboratorio(db_path).listar_ordens(
            search=busca,
            dentist=dentista,
            service_type=servico,
            start=_data(de, "de"),
            end=_data(ate, "ate"),
        )
        info = exportar_ordens_xlsx(ordens, path)
    typer.echo(f">> {info['linhas']} O.S. exportada(s) para {info['arquivo']}")


@exportar_app.command("backup")
def cmd_exportar_backup(
    path: Optional[str] = typer.Argument(None, help="Padrão: BACKUP_TOTAL_ODONTOLAB_<data>.xlsx"),
    db_path: str = typer.Option(DB_PATH, "--db", help="Caminho do SQLite"),
):
    """Backup completo do banco em uma planilha (uma aba por cadastro)."""
    with _tratando_erros():
        info = exportar_backup_xlsx(Laboratorio(db_path).snapshot, path)
    _display_table(info["abas"], title=f"Backup: {info['arquivo']}")


# Entry point opcional:
def main():
    app()


if __name__ == "__main__":
    main()
