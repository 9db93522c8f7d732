from __future__ import annotations
from pydantic import BaseModel, Field, ConfigDict
from typing import Optional
from decimal import Decimal
from datetime import date, datetime
from optica.infra.models import SaleStatus, PaymentMethod


class SaleItemIn(BaseModel):
    description: str = Field(min_length=1, max_length=200)
    quantity: int = Field(gt=0)
    unit_price: Decimal = Field(ge=0)
    # calculado pelo form; conferido no servidor
    total: Optional[Decimal] = Field(default=None, ge=0)


class SaleCreate(BaseModel):
    client_id: int
    items: list[SaleItemIn] = Field(min_length=1)

    frame_value: Optional[Decimal] = Field(default=None, ge=0)
    lens_value: Optional[Decimal] = Field(default=None, ge=0)
    discount: Decimal = Field(default=Decimal("0.00"), ge=0)

    payment_method: PaymentMethod = PaymentMethod.CASH
    installments: Optional[int] = Field(default=None, ge=1, le=24)
    paid_amount: Decimal = Field(default=Decimal("0.00"), ge=0)

    delivery_date: Optional[date] = None
    notes: Optional[str] = None

    # opcional: se vier, servidor valida; se não, atribui max+1
    service_order_number: Optional[int] = Field(default=None, ge=1)

    # valores que o form já calcula (re-derivados no servidor)
    subtotal: Optional[Decimal] = None
    total: Optional[Decimal] = None
    pending_amount: Optional[Decimal] = None


class SaleUpdate(BaseModel):
    status: Optional[SaleStatus] = None
    paid_amount: Optional[Decimal] = Field(default=None, ge=0)
    pending_amount: Optional[Decimal] = None
    payment_method: Optional[PaymentMethod] = None
    installments: Optional[int] = Field(default=None, ge=1, le=24)
    delivery_date: Optional[date] = None
    notes: Optional[str] = None


class SaleItemOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    description: str
    quantity: int
    unit_price: Decimal
    total: Decimal


class SaleOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    service_order_number: int
    client_id: Optional[int]
    client_name: str
    items: list[SaleItemOut]
    frame_value: Optional[Decimal]
    lens_value: Optional[Decimal]
    subtotal: Decimal
    discount: Decimal
    total: Decimal
    payment_method: PaymentMethod
    installments: Optional[int]
    paid_amount: Decimal
    pending_amount: Decimal
    status: SaleStatus
    delivery_date: Optional[date]
    notes: Optional[str]
    created_at: datetime


class PaymentCreate(BaseModel):
    amount: Decimal = Field(gt=0)
    payment_method: PaymentMethod = PaymentMethod.CASH
    notes: Optional[str] = None


class PaymentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    sale_id: int
    amount: Decimal
    payment_method: PaymentMethod
    payment_date: datetime
    notes: Optional[str]


class SalesStats(BaseModel):
    total_sales: Decimal
    total_count: int
    total_paid: Decimal
    total_pending: Decimal
    paid_count: int
