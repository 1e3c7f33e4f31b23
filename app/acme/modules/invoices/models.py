from __future__ import annotations

import datetime as dt

from sqlalchemy import CheckConstraint, Date, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.acme.models import Base, new_id

INVOICE_STATUSES = ("pending", "paid")


class Invoice(Base):
    __tablename__ = "invoices"
    __table_args__ = (
        CheckConstraint("status IN ('pending', 'paid')", name="ck_invoices_status"),
        CheckConstraint("amount > 0", name="ck_invoices_amount_positive"),
        Index("idx_invoices_customer_id", "customer_id"),
        Index("idx_invoices_date", "date"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    customer_id: Mapped[str] = mapped_column(
        ForeignKey("customers.id", ondelete="RESTRICT"),
        nullable=False,
    )
    amount: Mapped[int] = mapped_column(Integer, nullable=False)  # cents, > 0
    status: Mapped[str] = mapped_column(String(16), nullable=False)
    date: Mapped[dt.date] = mapped_column(Date, nullable=False, default=dt.date.today)

    customer: Mapped["Customer"] = relationship("Customer", back_populates="invoices", lazy="joined")  # noqa: F821
