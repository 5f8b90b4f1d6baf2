# odontolab/infra/logger.py
"""
Sistema de logging das operações do OdontoLab.

Este módulo configura e fornece loggers para registrar as operações
críticas do sistema: cadastros (inserção, alteração, exclusão), acesso ao
banco, eventos do sistema e exportação de planilhas.

Os loggers só são criados (e o diretório de logs só é criado) no primeiro
registro efetivo; importar o pacote não grava nada em disco.
"""

import logging
import os
from datetime import datetime
from functools import lru_cache
from pathlib import Path
from typing import Dict, Any, Optional


# Flag global para habilitar/desabilitar logging (ODONTOLAB_LOG=1 liga)
ENABLE_LOGGING = os.environ.get("ODONTOLAB_LOG", "").strip().lower() in {"1", "true", "sim", "yes"}
# Configuração base dos loggers
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

# Diretório base para logs (sobrescrevível por ODONTOLAB_LOGS)
LOGS_DIR = Path(os.environ.get("ODONTOLAB_LOGS") or Path.cwd() / "logs")

LOG_FILES = {
    "operacoes": "operacoes.log",
    "database": "database.log",
    "system": "system.log",
}


def configure_logging(enabled: bool = True, logs_dir: Optional[str] = None) -> None:
    """Liga/desliga o logging em tempo de execução (usado pela CLI e pelos testes)."""
    global ENABLE_LOGGING, LOGS_DIR
    ENABLE_LOGGING = enabled
    if logs_dir is not None:
        LOGS_DIR = Path(logs_dir)
        get_logger.cache_clear()


def setup_logger(name: str, log_file: str, level: int = logging.INFO) -> logging.Logger:
    """
    Configura um logger específico com arquivo de saída.

    Args:
        name: Nome do logger
        log_file: Caminho do arquivo de log
        level: Nível de logging (DEBUG, INFO, WARNING, ERROR, CRITICAL)

    Returns:
        Logger configurado
    """
    log_path = Path(log_file)
    log_path.parent.mkdir(parents=True, exist_ok=True)

    logger = logging.getLogger(name)
    logger.setLevel(level)
    logger.propagate = False

    # Remove handlers anteriores (ex.: LOGS_DIR trocado em tempo de execução)
    while logger.handlers:
        handler = logger.handlers[0]
        logger.removeHandler(handler)
        handler.close()

    file_handler = logging.FileHandler(log_file, encoding='utf-8')
    file_handler.setLevel(level)
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))
    logger.addHandler(file_handler)

    return logger


@lru_cache(maxsize=None)
def get_logger(kind: str) -> logging.Logger:
    """Logger de um tipo ('operacoes', 'database', 'system'), criado sob demanda."""
    return setup_logger(f"odontolab.{kind}", str(LOGS_DIR / LOG_FILES[kind]))


def log_operacao(operation: str, data: Dict[str, Any], result: Optional[Any] = None, error: Optional[str] = None) -> None:
    """
    Registra uma operação de cadastro completa no log.

    Args:
        operation: Tipo de operação (ex.: 'ordem.insert', 'cliente.delete')
        data: Dados da operação
        result: Resultado da operação (opcional)
        error: Mensagem de erro (opcional)
    """
    if not ENABLE_LOGGING:
        return
    logger = get_logger("operacoes")
    if error:
        logger.error(f"OPERACAO_FALHOU: {operation} - {error} - Data: {data}")
    else:
        logger.info(f"OPERACAO_OK: {operation} - Result: {result} - Data: {data}")


def log_database_operation(table: str, operation: str, affected_rows: int = 0, **kwargs) -> None:
    """
    Log específico para operações no banco de dados.

    Args:
        table: Nome da tabela
        operation: Operação SQL (INSERT, UPDATE, DELETE, SELECT)
        affected_rows: Número de linhas afetadas
        **kwargs: Dados adicionais
    """
    if not ENABLE_LOGGING:
        return
    log_data = {
        "table": table,
        "operation": operation,
        "affected_rows": affected_rows,
        **kwargs
    }
    get_logger("database").info(f"DB_{operation}: {log_data}")


def log_system_event(event: str, details: Dict[str, Any] = None, level: str = "info") -> None:
    """
    Log para eventos do sistema.

    Args:
        event: Descrição do evento
        details: Detalhes adicionais (opcional)
        level: Nível do log (info, warning, error)
    """
    if not ENABLE_LOGGING:
        return
    logger = get_logger("system")
    log_method = getattr(logger, level.lower(), logger.info)
    log_method(f"SYSTEM_EVENT: {event} - {details or {}}")


def log_file_operation(operation: str, file_path: str, rows_processed: int = 0, **kwargs) -> None:
    """
    Log para operações de arquivo (exportação de planilhas).
    """
    if not ENABLE_LOGGING:
        return
    log_data = {
        "operation": operation,
        "file_path": file_path,
        "rows_processed": rows_processed,
        "timestamp": datetime.now().isoformat(),
        **kwargs
    }
    get_logger("system").info(f"FILE_{operation.upper()}: {log_data}")


def get_log_summary(log_type: str = "operacoes", lines: int = 100) -> str:
    """
    Obtém as últimas linhas de um log.

    Args:
        log_type: Tipo de log (operacoes, database, system)
        lines: Número de linhas a retornar

    Returns:
        Conteúdo do log como string
    """
    name = LOG_FILES.get(log_type)
    log_file = LOGS_DIR / name if name else None
    if not log_file or not log_file.exists():
        return f"Log {log_type} não encontrado."

    try:
        with open(log_file, 'r', encoding='utf-8') as f:
            all_lines = f.readlines()
    except OSError as e:
        return f"Erro ao ler log {log_type}: {str(e)}"
    return ''.join(all_lines[-lines:])
