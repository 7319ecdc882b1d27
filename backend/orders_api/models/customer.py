"""
Customer Orders API - Customer Table Mapping
=============================================

What:  ORM mapping for the `customer` table of the sample schema.
Who:   Read by CustomerService and by the order existence checks; never
       written by this service.

Customers are created and destroyed outside this API. Every column is
returned verbatim by GET /customers and GET /customers/{id}.
"""

from decimal import Decimal

from sqlalchemy import Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from orders_api.database import Base


class Customer(Base):
    """A row of the `customer` table, keyed by its 6-character code."""

    __tablename__ = "customer"

    cust_code: Mapped[str] = mapped_column(String(6), primary_key=True)
    cust_name: Mapped[str] = mapped_column(String(40), nullable=False)
    cust_city: Mapped[str | None] = mapped_column(String(35), nullable=True)
    working_area: Mapped[str] = mapped_column(String(35), nullable=False)
    cust_country: Mapped[str] = mapped_column(String(20), nullable=False)
    grade: Mapped[int | None] = mapped_column(Integer, nullable=True)
    opening_amt: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    receive_amt: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    payment_amt: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    outstanding_amt: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    phone_no: Mapped[str] = mapped_column(String(17), nullable=False)
    agent_code: Mapped[str | None] = mapped_column(String(6), nullable=True)

    def __repr__(self) -> str:
        return f"<Customer(cust_code='{self.cust_code}', cust_name='{self.cust_name}')>"
