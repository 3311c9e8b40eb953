from datetime import date, datetime
from typing import Literal, Optional
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy import func
from sqlalchemy.orm import Session
from eduportal_backend.api.exceptions import BadRequestException
from eduportal_backend.interface.base import EntityInterface, ListQuery
from eduportal_backend.model.finance import Fee, Payment
from eduportal_backend.repositories import TenantRepository

PaymentMethod = Literal["credit_card", "bank_transfer", "cash"]

class PaymentCreate(BaseModel):
    fee_id: str
    amount: float = Field(gt=0)
    payment_date: Optional[date] = None
    payment_method: PaymentMethod
    transaction_id: Optional[str] = None

class PaymentUpdate(BaseModel):
    payment_date: Optional[date] = None
    payment_method: Optional[PaymentMethod] = None
    transaction_id: Optional[str] = None

class PaymentGet(BaseModel):
    id: str
    tenant_id: str
    fee_id: str
    amount: float
    payment_date: Optional[date] = None
    payment_method: str
    transaction_id: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

class PaymentQuery(ListQuery):
    fee_id: Optional[str] = None
    payment_method: Optional[PaymentMethod] = None

def payment_search(db: Session, query, params: Optional[PaymentQuery]):
    if params.fee_id != None:
        query = query.filter(Payment.fee_id == params.fee_id)
    if params.payment_method != None:
        query = query.filter(Payment.payment_method == params.payment_method)
    return query.order_by(Payment.created_at.desc())

def total_paid(db: Session, tenant_id: str, fee_id: str) -> float:
    total = (
        db.query(func.coalesce(func.sum(Payment.amount), 0.0))
        .filter(Payment.tenant_id == tenant_id, Payment.fee_id == fee_id, Payment.deleted == False)
        .scalar()
    )
    return float(total or 0.0)

def payment_pre_create(db: Session, principal, values: dict) -> dict:
    fee = TenantRepository(db, Fee, principal.tenant_id).get_by_id_optional(values["fee_id"])
    if fee is None:
        raise BadRequestException("Fee not found")

    amount = values["amount"]
    if amount > fee.amount:
        raise BadRequestException("Payment amount exceeds fee amount")

    already_paid = total_paid(db, principal.tenant_id, fee.id)
    if already_paid + amount > fee.amount:
        raise BadRequestException(f"Payment exceeds remaining balance of {fee.amount - already_paid:.2f}")

    return values

def payment_post_create(db: Session, principal, payment: Payment):
    fee = TenantRepository(db, Fee, principal.tenant_id).get_by_id(payment.fee_id)
    if total_paid(db, principal.tenant_id, fee.id) >= fee.amount and fee.status != "paid":
        fee.status = "paid"
        db.commit()

class PaymentInterface(EntityInterface):
    create = PaymentCreate
    get = PaymentGet
    list = PaymentGet
    update = PaymentUpdate
    query = PaymentQuery
    search = payment_search
    endpoint = "payments"
    resource = "payments"
    model = Payment
    pre_create = payment_pre_create
    post_create = payment_post_create
