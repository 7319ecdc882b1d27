"""
Customer Orders API - Order Table Mapping
==========================================

What:  ORM mapping for the `orders` table of the sample schema.
Who:   OrderService builds every order statement from these columns.

Invariants:
    - ord_num is unique across all customers (primary key)
    - every order belongs to exactly one customer via cust_code
    - amounts are non-negative with two decimals; ord_description is 1-60
      characters after trimming (enforced by the request schemas)
"""

from datetime import date
from decimal import Decimal

from sqlalchemy import Date, ForeignKey, Index, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from orders_api.database import Base


class Order(Base):
    """A row of the `orders` table."""

    __tablename__ = "orders"

    ord_num: Mapped[str] = mapped_column(String(6), primary_key=True)
    ord_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    advance_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    ord_date: Mapped[date] = mapped_column(Date, nullable=False)
    cust_code: Mapped[str] = mapped_column(
        String(6),
        ForeignKey("customer.cust_code"),
        nullable=False,
    )
    agent_code: Mapped[str] = mapped_column(String(6), nullable=False)
    ord_description: Mapped[str] = mapped_column(String(60), nullable=False)

    # Every order lookup filters on the owning customer.
    __table_args__ = (
        Index("idx_orders_cust_code", "cust_code"),
    )

    def __repr__(self) -> str:
        return f"<Order(ord_num='{self.ord_num}', cust_code='{self.cust_code}')>"


# Columns a client may write through POST, PUT and PATCH. cust_code comes
# from the path and is never taken from a request body.
MUTABLE_COLUMNS = (
    "ord_num",
    "ord_amount",
    "advance_amount",
    "ord_date",
    "agent_code",
    "ord_description",
)
