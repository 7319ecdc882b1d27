"""
Customer Orders API - Customer Service
=======================================

What:  Read-only access to the `customer` table.
Who:   GET /customers and GET /customers/{id}; OrderService uses
       customer_exists() before creating an order.

GET-by-code returns a list: an unknown code yields [] with HTTP 200, the same
shape as a hit, rather than a 404.
"""

import logging
from typing import Any, Dict, List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from orders_api.database import backend_errors, fetch_rows
from orders_api.models.customer import Customer

logger = logging.getLogger(__name__)

customer_table = Customer.__table__


class CustomerService:
    """Stateless; every call receives the request's session."""

    async def list_customers(self, db: AsyncSession) -> List[Dict[str, Any]]:
        with backend_errors("list customers"):
            return await fetch_rows(db, select(customer_table))

    async def get_customer(self, db: AsyncSession, cust_code: str) -> List[Dict[str, Any]]:
        with backend_errors("get customer"):
            return await fetch_rows(
                db,
                select(customer_table).where(customer_table.c.cust_code == cust_code),
            )

    async def customer_exists(self, db: AsyncSession, cust_code: str) -> bool:
        """
        Existence check for a dependent write. Takes a shared row lock where
        the dialect supports one, so the customer cannot vanish before the
        order referencing it is inserted.
        """
        with backend_errors("check customer"):
            result = await db.execute(
                select(Customer.cust_code)
                .where(Customer.cust_code == cust_code)
                .with_for_update(read=True)
            )
            exists = result.first() is not None
        logger.debug("Customer %s exists: %s", cust_code, exists)
        return exists


customer_service = CustomerService()
