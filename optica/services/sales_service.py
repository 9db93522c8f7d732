# optica/services/sales_service.py
from __future__ import annotations

import logging
import os
from datetime import datetime, date, timezone
from decimal import Decimal
from typing import Any, Optional, Tuple

from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload
from sqlalchemy.orm.exc import StaleDataError

from optica.infra.models import (
    SaleORM,
    SaleItemORM,
    PaymentORM,
    ClientORM,
    CompanyProfileORM,
    SaleStatus,
    PaymentMethod,
)
from optica.services.errors import NotFoundError, ConflictError, ValidationError
from optica.services.profile_service import get_profile

logger = logging.getLogger(__name__)

SERVICE_ORDER_START = int(os.getenv("SERVICE_ORDER_START", "701"))

# tentativas quando o número da O.S. é atribuído pelo servidor
_MAX_NUMBER_ATTEMPTS = 5

ZERO = Decimal("0.00")


# helpers
def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


def _quantize_money(v) -> Decimal:
    return Decimal(v).quantize(Decimal("0.01"))


def _money_or_zero(v) -> Decimal:
    return _quantize_money(v) if v is not None else ZERO


def derive_status(paid_amount: Decimal, pending_amount: Decimal) -> SaleStatus:
    """
    Regra única de status (criação, pagamento, estorno e ajuste manual):
      pending <= 0 -> paid
      paid > 0     -> partial
      senão        -> pending
    """
    if pending_amount <= 0:
        return SaleStatus.PAID
    if paid_amount > 0:
        return SaleStatus.PARTIAL
    return SaleStatus.PENDING


def _sale_query():
    return select(SaleORM).options(selectinload(SaleORM.items))


def _get_sale_or_404(db: Session, sale_id: int) -> SaleORM:
    sale = db.execute(_sale_query().where(SaleORM.id == sale_id)).scalars().first()
    if not sale:
        raise NotFoundError("Venda não encontrada.")
    return sale


def _lock_sale(db: Session, sale_id: int) -> Optional[SaleORM]:
    # relê a venda do banco (estado mais recente) antes do read-modify-write
    stmt = (
        select(SaleORM)
        .where(SaleORM.id == sale_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    return db.execute(stmt).scalars().first()


def _flush_balance(db: Session, sale: SaleORM) -> None:
    try:
        db.flush()
    except StaleDataError:
        logger.warning("[sales] concurrent update on sale id=%s", sale.id)
        raise ConflictError("A venda foi alterada por outra operação. Tente novamente.")


def _check_supplied(label: str, supplied: Optional[Decimal], derived: Decimal) -> None:
    if supplied is not None and _quantize_money(supplied) != derived:
        raise ValidationError(f"{label} informado ({supplied}) não confere com o calculado ({derived}).")


# use cases - services
def get_next_service_order_number(db: Session) -> int:
    current = db.scalar(select(func.max(SaleORM.service_order_number)))
    if current is None:
        return SERVICE_ORDER_START
    return int(current) + 1


def _service_order_number_taken(db: Session, number: int) -> bool:
    return db.scalar(
        select(SaleORM.id).where(SaleORM.service_order_number == number)
    ) is not None


def create_sale(
    db: Session,
    *,
    client_id: int,
    items: list[dict[str, Any]],
    frame_value: Optional[Decimal] = None,
    lens_value: Optional[Decimal] = None,
    discount: Decimal = ZERO,
    payment_method: PaymentMethod = PaymentMethod.CASH,
    installments: Optional[int] = None,
    paid_amount: Decimal = ZERO,
    delivery_date: Optional[date] = None,
    notes: Optional[str] = None,
    service_order_number: Optional[int] = None,
    subtotal: Optional[Decimal] = None,
    total: Optional[Decimal] = None,
    pending_amount: Optional[Decimal] = None,
) -> SaleORM:
    """
    cria a ordem de serviço.
    rules:
      - itens: descrição obrigatória, quantidade > 0, preço unitário >= 0
      - subtotal = soma dos itens + armação + lentes; total = subtotal - desconto
      - total > 0 e 0 <= pago <= total
      - valores calculados pelo form (subtotal/total/pendente) precisam bater
      - nome do cliente é copiado (snapshot) para a venda
      - sem número informado: max+1 (701 no início), com nova tentativa em colisão
    """
    if not items:
        raise ValidationError("Informe ao menos um item.")

    lines: list[dict[str, Any]] = []
    for idx, raw in enumerate(items, start=1):
        description = (raw.get("description") or "").strip()
        quantity = int(raw.get("quantity") or 0)
        unit_price = _money_or_zero(raw.get("unit_price"))

        if not description:
            raise ValidationError(f"Item {idx}: descrição obrigatória.")
        if quantity <= 0:
            raise ValidationError(f"Item {idx}: quantidade deve ser maior que zero.")
        if unit_price < 0:
            raise ValidationError(f"Item {idx}: preço unitário não pode ser negativo.")

        line_total = _quantize_money(unit_price * quantity)
        _check_supplied(f"Total do item {idx}", raw.get("total"), line_total)
        lines.append({
            "position": idx,
            "description": description,
            "quantity": quantity,
            "unit_price": unit_price,
            "total": line_total,
        })

    frame = _quantize_money(frame_value) if frame_value else None
    lens = _quantize_money(lens_value) if lens_value else None
    discount = _money_or_zero(discount)
    paid = _money_or_zero(paid_amount)

    if (frame is not None and frame < 0) or (lens is not None and lens < 0):
        raise ValidationError("Valores de armação/lentes não podem ser negativos.")
    if discount < 0:
        raise ValidationError("Desconto não pode ser negativo.")

    calc_subtotal = _quantize_money(
        sum((ln["total"] for ln in lines), ZERO) + (frame or ZERO) + (lens or ZERO)
    )
    calc_total = _quantize_money(calc_subtotal - discount)
    _check_supplied("Subtotal", subtotal, calc_subtotal)
    _check_supplied("Total", total, calc_total)

    if calc_total <= 0:
        raise ValidationError("O total da venda deve ser maior que zero.")
    if paid < 0 or paid > calc_total:
        raise ValidationError("Valor pago deve estar entre 0 e o total da venda.")

    calc_pending = _quantize_money(calc_total - paid)
    _check_supplied("Valor pendente", pending_amount, calc_pending)

    if payment_method == PaymentMethod.INSTALLMENT:
        installments = installments or 1
    else:
        installments = None

    notes = (notes or "").strip() or None

    for attempt in range(1, _MAX_NUMBER_ATTEMPTS + 1):
        client = db.get(ClientORM, client_id)
        if not client:
            raise NotFoundError("Cliente não encontrado.")

        if service_order_number is not None:
            number = service_order_number
            if _service_order_number_taken(db, number):
                raise ConflictError(f"O.S. #{number} já existe.")
        else:
            number = get_next_service_order_number(db)

        sale = SaleORM(
            service_order_number=number,
            client_id=client.id,
            client_name=client.name,
            frame_value=frame,
            lens_value=lens,
            subtotal=calc_subtotal,
            discount=discount,
            total=calc_total,
            payment_method=payment_method,
            installments=installments,
            paid_amount=paid,
            pending_amount=calc_pending,
            status=derive_status(paid, calc_pending),
            delivery_date=delivery_date,
            notes=notes,
        )
        sale.items = [SaleItemORM(**ln) for ln in lines]

        try:
            # savepoint: só o insert da venda é desfeito, o resto da request fica
            with db.begin_nested():
                db.add(sale)
                db.flush()
        except IntegrityError:
            # outra venda gravou o mesmo número entre o max() e o insert
            if service_order_number is not None:
                raise ConflictError(f"O.S. #{number} já existe.")
            logger.warning(
                "[sales] service order number %s taken, retrying (attempt %s/%s)",
                number, attempt, _MAX_NUMBER_ATTEMPTS,
            )
            continue

        logger.info(
            "[sales] created sale id=%s os=%s client_id=%s total=%s paid=%s status=%s",
            sale.id, sale.service_order_number, sale.client_id,
            sale.total, sale.paid_amount, sale.status.value,
        )
        return sale

    raise ConflictError("Não foi possível reservar um número de O.S. Tente novamente.")


def get_sale(db: Session, sale_id: int) -> SaleORM:
    return _get_sale_or_404(db, sale_id)


def list_sales(
    db: Session,
    *,
    status: Optional[SaleStatus] = None,
    client_id: Optional[int] = None,
) -> list[SaleORM]:
    # ordem: O.S. mais recente primeiro
    stmt = _sale_query().order_by(SaleORM.service_order_number.desc())

    if status is not None:
        stmt = stmt.where(SaleORM.status == status)
    if client_id is not None:
        stmt = stmt.where(SaleORM.client_id == client_id)

    return list(db.execute(stmt).scalars().all())


def get_sales_by_client(db: Session, client_id: int) -> list[SaleORM]:
    return list_sales(db, client_id=client_id)


def search_sales(db: Session, text: str) -> list[SaleORM]:
    """
    busca por nome do cliente (contém, sem diferenciar maiúsculas)
    ou pelo número exato da O.S. quando o texto é um inteiro.
    filtro em Python com casefold: o lower() do SQLite não trata acentos
    e o texto não vira padrão de LIKE (% e _ são literais).
    """
    q = (text or "").strip()
    if not q:
        return []

    needle = q.casefold()
    try:
        number = int(q)
    except ValueError:
        number = None

    stmt = _sale_query().order_by(SaleORM.service_order_number.desc())
    return [
        s for s in db.execute(stmt).scalars().all()
        if needle in (s.client_name or "").casefold()
        or (number is not None and s.service_order_number == number)
    ]


# campos que o PATCH pode alterar
UPDATABLE_FIELDS = (
    "status",
    "paid_amount",
    "pending_amount",
    "payment_method",
    "installments",
    "delivery_date",
    "notes",
)


def update_sale(db: Session, *, sale_id: int, fields: dict[str, Any]) -> SaleORM:
    """
    patch dos campos mutáveis.
    status pode ser definido manualmente (inclusive cancelled), sem guarda de transição.
    se pago/pendente forem alterados, revalida: pago + pendente == total e 0 <= pago <= total;
    informando só um dos dois, o outro é derivado do total.
    """
    unknown = set(fields) - set(UPDATABLE_FIELDS)
    if unknown:
        raise ValidationError(f"Campos não editáveis: {', '.join(sorted(unknown))}.")

    sale = _lock_sale(db, sale_id)
    if not sale:
        raise NotFoundError("Venda não encontrada.")

    if "paid_amount" in fields or "pending_amount" in fields:
        paid = fields.get("paid_amount")
        pending = fields.get("pending_amount")
        if paid is None and pending is None:
            raise ValidationError("Informe o valor pago ou o valor pendente.")

        total = _quantize_money(sale.total)
        paid = _quantize_money(paid) if paid is not None else _quantize_money(total - Decimal(pending))
        pending = _quantize_money(pending) if pending is not None else _quantize_money(total - paid)

        if paid < 0 or paid > total:
            raise ValidationError("Valor pago deve estar entre 0 e o total da venda.")
        if paid + pending != total:
            raise ValidationError("Valor pago + valor pendente deve ser igual ao total da venda.")

        sale.paid_amount = paid
        sale.pending_amount = pending
        if fields.get("status") is None:
            sale.status = derive_status(paid, pending)

    if fields.get("status") is not None:
        sale.status = SaleStatus(fields["status"])
    if fields.get("payment_method") is not None:
        sale.payment_method = PaymentMethod(fields["payment_method"])
    if "installments" in fields:
        sale.installments = fields["installments"]
    # mesma regra da criação: parcelas só existem no crediário
    if sale.payment_method == PaymentMethod.INSTALLMENT:
        sale.installments = sale.installments or 1
    else:
        sale.installments = None
    if "delivery_date" in fields:
        sale.delivery_date = fields["delivery_date"]
    if "notes" in fields:
        sale.notes = (fields["notes"] or "").strip() or None

    _flush_balance(db, sale)
    logger.info("[sales] updated sale id=%s fields=%s status=%s", sale.id, sorted(fields), sale.status.value)
    return _get_sale_or_404(db, sale_id)


def add_payment(
    db: Session,
    *,
    sale_id: int,
    amount: Decimal,
    payment_method: PaymentMethod = PaymentMethod.CASH,
    notes: Optional[str] = None,
) -> PaymentORM:
    """
    registra pagamento e recalcula a venda na mesma transação:
      pago' = pago + valor; pendente' = total - pago'; status derivado.
    """
    amount = _quantize_money(amount)
    if amount <= 0:
        raise ValidationError("Valor deve ser maior que zero.")

    sale = _lock_sale(db, sale_id)
    if not sale:
        raise NotFoundError("Venda não encontrada.")

    if amount > sale.pending_amount:
        raise ValidationError("Valor não pode ser maior que o valor pendente.")

    payment = PaymentORM(
        sale_id=sale.id,
        amount=amount,
        payment_method=payment_method,
        payment_date=_now_utc(),
        notes=(notes or "").strip() or None,
    )
    db.add(payment)

    paid = _quantize_money(sale.paid_amount + amount)
    pending = _quantize_money(sale.total - paid)
    sale.paid_amount = paid
    sale.pending_amount = pending
    sale.status = derive_status(paid, pending)

    _flush_balance(db, sale)
    logger.info(
        "[sales] payment id=%s added to sale id=%s amount=%s paid=%s pending=%s status=%s",
        payment.id, sale.id, amount, paid, pending, sale.status.value,
    )
    return payment


def get_payments(db: Session, sale_id: int) -> list[PaymentORM]:
    _get_sale_or_404(db, sale_id)
    stmt = (
        select(PaymentORM)
        .where(PaymentORM.sale_id == sale_id)
        .order_by(PaymentORM.payment_date.desc(), PaymentORM.id.desc())
    )
    return list(db.execute(stmt).scalars().all())


def delete_payment(db: Session, payment_id: int) -> None:
    """
    estorna um pagamento: recalcula a venda a partir do valor gravado
    no pagamento e só então remove a linha.
    """
    payment = db.get(PaymentORM, payment_id)
    if not payment:
        raise NotFoundError("Pagamento não encontrado.")

    sale = _lock_sale(db, payment.sale_id)
    if not sale:
        raise NotFoundError("Venda do pagamento não encontrada.")

    paid = _quantize_money(sale.paid_amount - payment.amount)
    pending = _quantize_money(sale.total - paid)
    sale.paid_amount = paid
    sale.pending_amount = pending
    sale.status = derive_status(paid, pending)
    _flush_balance(db, sale)

    db.delete(payment)
    db.flush()
    logger.info(
        "[sales] payment id=%s removed from sale id=%s paid=%s pending=%s status=%s",
        payment_id, sale.id, paid, pending, sale.status.value,
    )


def delete_sale(db: Session, sale_id: int) -> int:
    """
    exclui a venda e seus pagamentos (mesma transação).
    reexecutar após falha parcial encontra 0 pagamentos e segue.
    retorna quantos pagamentos foram removidos.
    """
    sale = _lock_sale(db, sale_id)
    if not sale:
        raise NotFoundError("Venda não encontrada.")

    payments = db.execute(
        select(PaymentORM).where(PaymentORM.sale_id == sale_id)
    ).scalars().all()
    for p in payments:
        db.delete(p)
    db.flush()
    removed = len(payments)

    db.delete(sale)
    db.flush()
    logger.info("[sales] deleted sale id=%s os=%s payments_removed=%s", sale_id, sale.service_order_number, removed)
    return removed


def get_total_sales(db: Session) -> dict[str, Any]:
    rows = db.execute(
        select(SaleORM.total, SaleORM.paid_amount, SaleORM.pending_amount, SaleORM.status)
    ).all()

    stats = {
        "total_sales": ZERO,
        "total_count": 0,
        "total_paid": ZERO,
        "total_pending": ZERO,
        "paid_count": 0,
    }
    for total, paid, pending, status in rows:
        stats["total_sales"] += total or ZERO
        stats["total_count"] += 1
        stats["total_paid"] += paid or ZERO
        stats["total_pending"] += pending or ZERO
        if status == SaleStatus.PAID:
            stats["paid_count"] += 1
    return stats


def get_sale_for_receipt(
    db: Session, sale_id: int
) -> Tuple[SaleORM, Optional[ClientORM], Optional[CompanyProfileORM]]:
    sale = _get_sale_or_404(db, sale_id)
    client = db.get(ClientORM, sale.client_id) if sale.client_id is not None else None
    return sale, client, get_profile(db)
