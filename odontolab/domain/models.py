# odontolab/domain/models.py
"""
Modelos (dataclasses) do domínio.

Observação importante:
- Os registros lidos do banco são imutáveis (frozen); alterações passam
  sempre pelo repositório, seguidas de uma recarga completa do snapshot.
- Os valores dos enums são os rótulos usados pelo laboratório e são
  exatamente o que fica gravado no banco.
- Dinheiro é sempre ``Decimal``; datas são ``datetime.date``.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional


class OrderStatus(str, Enum):
    PENDING = "Pendente"
    IN_PRODUCTION = "Em Produção"
    FINISHED = "Finalizado"
    DELIVERED = "Entregue"


class TransactionType(str, Enum):
    INCOME = "Receita"
    EXPENSE = "Despesa"


class TransactionStatus(str, Enum):
    PAID = "Pago"
    PENDING = "Pendente"


class TaskPriority(str, Enum):
    LOW = "Baixa"
    MEDIUM = "Média"
    HIGH = "Alta"


class ClientStatus(str, Enum):
    ACTIVE = "Ativo"
    INACTIVE = "Inativo"


class PaymentType(str, Enum):
    PIX = "pix"
    CREDIT = "credit"
    DEBIT = "debit"
    CASH = "cash"
    TRANSFER = "transfer"


@dataclass(frozen=True)
class CatalogEntry:
    """Procedimento do catálogo de preços (modelo para preencher a O.S.)."""
    code: str
    name: str
    base_price: Decimal
    id: Optional[int] = None
    category: Optional[str] = None
    display_order: int = 0


@dataclass(frozen=True)
class PaymentMethod:
    """Canal de recebimento; pode carregar um desconto próprio (%)."""
    name: str
    type: PaymentType
    id: Optional[int] = None
    active: bool = True
    discount_percent: Optional[Decimal] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None


@dataclass(frozen=True)
class CompanySettings:
    """Dados da empresa (registro único, criado no primeiro salvamento)."""
    name: str = ""
    tax_id: str = ""                  # CNPJ
    email: str = ""
    phone: str = ""
    address: str = ""
    id: Optional[int] = None
    logo_url: Optional[str] = None
    global_discount_percent: Optional[Decimal] = None


@dataclass(frozen=True)
class ServiceOrder:
    """Ordem de serviço (O.S.).

    ``dentist_name`` e ``service_type`` são cópias do nome no momento da
    criação: renomear o dentista ou o procedimento não altera O.S. antigas.
    ``discount_value`` é valor absoluto em reais, não percentual.
    """
    dentist_name: str
    patient_name: str
    service_type: str
    material: str
    quantity: int
    unit_value: Decimal
    discount_value: Decimal
    total_value: Decimal
    entry_date: date
    due_date: date
    id: Optional[int] = None
    status: OrderStatus = OrderStatus.PENDING
    payment_method_id: Optional[int] = None
    notes: Optional[str] = None


@dataclass(frozen=True)
class Transaction:
    """Lançamento financeiro (receita ou despesa)."""
    description: str
    type: TransactionType
    amount: Decimal
    date: date
    category: str
    id: Optional[int] = None
    status: TransactionStatus = TransactionStatus.PAID
    related_order_id: Optional[int] = None
    payment_method_id: Optional[int] = None


@dataclass(frozen=True)
class Task:
    title: str
    due_date: date
    id: Optional[int] = None
    description: str = ""
    priority: TaskPriority = TaskPriority.MEDIUM
    completed: bool = False
    assignee: Optional[str] = None


@dataclass(frozen=True)
class Client:
    """Dentista / profissional parceiro."""
    name: str
    contact_phone: str
    email: str = ""
    id: Optional[int] = None
    tax_registration: Optional[str] = None          # CPF
    professional_registration: Optional[str] = None  # CRO
    specialty: Optional[str] = None
    address: Optional[str] = None
    status: ClientStatus = ClientStatus.ACTIVE
