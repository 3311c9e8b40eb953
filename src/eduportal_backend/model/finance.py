from sqlalchemy import Column, Date, Float, ForeignKey, String, Text

from .base import Base, TenantScopedMixin

FEE_STATUSES = ("paid", "unpaid", "overdue")
PAYMENT_METHODS = ("credit_card", "bank_transfer", "cash")


class Fee(Base, TenantScopedMixin):
    __tablename__ = 'fee'

    student_id = Column(ForeignKey('student.id', ondelete='CASCADE'), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text)
    amount = Column(Float, nullable=False)
    due_date = Column(Date, nullable=False)
    status = Column(String(16), nullable=False, default="unpaid")


class Payment(Base, TenantScopedMixin):
    __tablename__ = 'payment'

    fee_id = Column(ForeignKey('fee.id', ondelete='CASCADE'), nullable=False, index=True)
    amount = Column(Float, nullable=False)
    payment_date = Column(Date)
    payment_method = Column(String(32), nullable=False)
    transaction_id = Column(String(255))
