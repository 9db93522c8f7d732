from __future__ import annotations

import enum
from datetime import datetime, date
from decimal import Decimal
from typing import Optional, List

from sqlalchemy import (
    String, Integer, DateTime, Date, Numeric, ForeignKey, Text, JSON,
    Enum as SAEnum, UniqueConstraint, Index, func
)

from sqlalchemy.orm import (
    DeclarativeBase, Mapped, mapped_column, relationship
)


# base
class Base(DeclarativeBase):
    pass

# enums = status
class SaleStatus(str, enum.Enum):
    PENDING = "pending"
    PARTIAL = "partial"
    PAID = "paid"
    CANCELLED = "cancelled"

class PaymentMethod(str, enum.Enum):
    CASH = "cash"
    CARD = "card"
    PIX = "pix"
    TRANSFER = "transfer"
    INSTALLMENT = "installment"


def _enum_values(e):
    return [m.value for m in e]


# models
class ClientORM(Base):
    __tablename__ = "clients"
    __table_args__ = (
        Index("ix_clients_name", "name"),
        Index("ix_clients_phone", "phone"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str]= mapped_column(String(140), nullable=False)
    phone: Mapped[str]= mapped_column(String(20), nullable=False)
    email: Mapped[Optional[str]]= mapped_column(String(160), nullable=True)
    cpf: Mapped[Optional[str]] = mapped_column(String(14), nullable=True)
    address: Mapped[Optional[str]]= mapped_column(String(255), nullable=True)
    birth_date: Mapped[Optional[str]]= mapped_column(String(20), nullable=True)

    # receita: {spherical, cylindrical, axis, addition, dnp, co}
    right_eye: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    left_eye: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)

    notes: Mapped[Optional[str]]= mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    sales: Mapped[List["SaleORM"]] = relationship(back_populates="client")
    appointments: Mapped[List["AppointmentORM"]] = relationship(back_populates="client")

class SaleORM(Base):
    __tablename__ = "sales"
    __table_args__ = (
        UniqueConstraint("service_order_number", name="uq_sales_service_order_number"),
        Index("ix_sales_client_id", "client_id"),
        Index("ix_sales_status", "status"),
    )

    id:Mapped[int]=mapped_column(Integer, primary_key=True)

    # O.S. exibida ao cliente (701, 702, ...)
    service_order_number:Mapped[int]=mapped_column(Integer, nullable=False)

    client_id:Mapped[Optional[int]]=mapped_column(
        ForeignKey("clients.id", ondelete="SET NULL"), nullable=True
    )
    # snapshot do nome no momento da venda
    client_name:Mapped[str]=mapped_column(String(140), nullable=False)

    frame_value:Mapped[Optional[Decimal]]=mapped_column(Numeric(12, 2), nullable=True)
    lens_value:Mapped[Optional[Decimal]]=mapped_column(Numeric(12, 2), nullable=True)

    subtotal:Mapped[Decimal]=mapped_column(Numeric(12, 2), nullable=False)
    discount:Mapped[Decimal]=mapped_column(Numeric(12, 2), nullable=False, default=0)
    total:Mapped[Decimal]=mapped_column(Numeric(12, 2), nullable=False)

    payment_method:Mapped[PaymentMethod]=mapped_column(
        SAEnum(PaymentMethod, name="payment_method", values_callable=_enum_values),
        nullable=False,
        default=PaymentMethod.CASH,
    )
    installments:Mapped[Optional[int]]=mapped_column(Integer, nullable=True)

    paid_amount:Mapped[Decimal]=mapped_column(Numeric(12, 2), nullable=False, default=0)
    pending_amount:Mapped[Decimal]=mapped_column(Numeric(12, 2), nullable=False)

    status:Mapped[SaleStatus]=mapped_column(
        SAEnum(SaleStatus, name="sale_status", values_callable=_enum_values),
        nullable=False,
        default=SaleStatus.PENDING,
    )

    delivery_date:Mapped[Optional[date]]=mapped_column(Date, nullable=True)
    notes:Mapped[Optional[str]]=mapped_column(Text, nullable=True)

    created_at:Mapped[datetime]=mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    # lock otimista p/ read-modify-write dos pagamentos
    version:Mapped[int]=mapped_column(Integer, nullable=False, default=1)

    __mapper_args__ = {"version_id_col": version}

    # relações
    client:Mapped[Optional["ClientORM"]]=relationship(back_populates="sales")

    items:Mapped[List["SaleItemORM"]]=relationship(
        back_populates="sale",
        cascade="all, delete-orphan",
        order_by="SaleItemORM.position",
    )

class SaleItemORM(Base):
    __tablename__ = "sale_items"
    __table_args__ = (
        UniqueConstraint("sale_id", "position", name="uq_sale_items_sale_position"),
    )

    id:Mapped[int]=mapped_column(Integer, primary_key=True)
    sale_id:Mapped[int]=mapped_column(ForeignKey("sales.id"), nullable=False)
    position:Mapped[int]=mapped_column(Integer, nullable=False)

    description:Mapped[str]=mapped_column(String(200), nullable=False)
    quantity:Mapped[int]=mapped_column(Integer, nullable=False)
    unit_price:Mapped[Decimal]=mapped_column(Numeric(12, 2), nullable=False)
    total:Mapped[Decimal]=mapped_column(Numeric(12, 2), nullable=False)

    sale:Mapped["SaleORM"]=relationship(back_populates="items")

class PaymentORM(Base):
    __tablename__ = "payments"
    __table_args__ = (
        Index("ix_payments_sale_id", "sale_id"),
    )

    id:Mapped[int]=mapped_column(Integer, primary_key=True)
    sale_id:Mapped[int]=mapped_column(ForeignKey("sales.id"), nullable=False)

    amount:Mapped[Decimal]=mapped_column(Numeric(12, 2), nullable=False)
    payment_method:Mapped[PaymentMethod]=mapped_column(
        SAEnum(PaymentMethod, name="payment_method", values_callable=_enum_values),
        nullable=False,
    )
    payment_date:Mapped[datetime]=mapped_column(DateTime(timezone=True), nullable=False)
    notes:Mapped[Optional[str]]=mapped_column(Text, nullable=True)

    # pagamentos são removidos explicitamente pelo ledger (sem cascade no ORM)
    sale:Mapped["SaleORM"]=relationship()

class AppointmentORM(Base):
    __tablename__ = "appointments"
    __table_args__ = (
        UniqueConstraint("date", name="uq_appointments_date"),
    )

    id:Mapped[int]=mapped_column(Integer, primary_key=True)
    client_id:Mapped[Optional[int]]=mapped_column(
        ForeignKey("clients.id", ondelete="SET NULL"), nullable=True
    )
    client_name:Mapped[str]=mapped_column(String(140), nullable=False)

    # horário exato (UTC, sem tz); unicidade por slot
    date:Mapped[datetime]=mapped_column(DateTime, nullable=False)
    notes:Mapped[Optional[str]]=mapped_column(Text, nullable=True)

    created_at:Mapped[datetime]=mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    client:Mapped[Optional["ClientORM"]]=relationship(back_populates="appointments")

class CompanyProfileORM(Base):
    """Perfil da ótica (linha única, id fixo) usado no recibo."""
    __tablename__ = "company_profile"

    SINGLETON_ID = 1

    id:Mapped[int]=mapped_column(Integer, primary_key=True)
    fantasy_name:Mapped[Optional[str]]=mapped_column(String(160), nullable=True)
    cnpj:Mapped[Optional[str]]=mapped_column(String(20), nullable=True)
    contact_phone:Mapped[Optional[str]]=mapped_column(String(20), nullable=True)

    updated_at:Mapped[datetime]=mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )
