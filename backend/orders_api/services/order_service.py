"""
Customer Orders API - Order Service
====================================

What:  Existence checks and mutations for the `orders` table.
How:   Each method runs on the request's session. Inputs have already passed
       the schema rules; this layer decides between 303 / 204 / 404 outcomes.
Who:   Route handlers in orders_api.routes.orders.

Check-then-act:
    The existence check and the mutation share one transaction. The check
    locks the order row (SELECT ... FOR UPDATE) on dialects that support it,
    so a concurrent DELETE cannot slip between the two statements. On
    create, a concurrent insert of the same order number surfaces as an
    IntegrityError; the transaction is rolled back and the request resolves
    to the same 303 redirect a sequential duplicate would get.

    POST  create():   customer exists? → order number taken? → insert
    PUT   replace():  order exists for customer? → update every column
    PATCH patch():    order exists for customer? → update supplied columns
    DELETE delete():  order exists for customer? → delete
"""

import logging
from typing import Any, Dict, List

from sqlalchemy import delete, insert, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from orders_api.database import backend_errors, fetch_rows
from orders_api.exceptions import NotFoundError, ValidationError, violation
from orders_api.models.order import MUTABLE_COLUMNS, Order
from orders_api.schemas.order import OrderCreate, OrderPatch, OrderReplace
from orders_api.services.customer_service import customer_service

logger = logging.getLogger(__name__)

orders_table = Order.__table__


def order_location(cust_code: str, ord_num: str) -> str:
    """Path of a single order resource, used as the redirect target."""
    return f"/customers/{cust_code}/orders/{ord_num}"


class OrderService:
    """
    Business logic for order endpoints.

    Every method either returns normally or raises NotFoundError,
    ValidationError or DatabaseError; HTTP shaping is left to the routes.
    """

    # ── Reads ─────────────────────────────────────────────────────────────

    async def list_orders(self, db: AsyncSession, cust_code: str) -> List[Dict[str, Any]]:
        with backend_errors("list orders"):
            return await fetch_rows(
                db,
                select(orders_table).where(orders_table.c.cust_code == cust_code),
            )

    async def get_order(
        self, db: AsyncSession, cust_code: str, ord_num: str
    ) -> List[Dict[str, Any]]:
        with backend_errors("get order"):
            return await fetch_rows(
                db,
                select(orders_table).where(
                    orders_table.c.cust_code == cust_code,
                    orders_table.c.ord_num == ord_num,
                ),
            )

    # ── Existence Checks ──────────────────────────────────────────────────

    async def _lock_order(self, db: AsyncSession, cust_code: str, ord_num: str) -> bool:
        """True when (cust_code, ord_num) exists; the row stays locked until commit."""
        result = await db.execute(
            select(Order.ord_num)
            .where(Order.cust_code == cust_code, Order.ord_num == ord_num)
            .with_for_update()
        )
        return result.first() is not None

    async def _order_number_taken(self, db: AsyncSession, ord_num: str) -> bool:
        # Order numbers are unique across all customers.
        result = await db.execute(select(Order.ord_num).where(Order.ord_num == ord_num))
        return result.first() is not None

    # ── Mutations ─────────────────────────────────────────────────────────

    async def create_order(
        self, db: AsyncSession, cust_code: str, payload: OrderCreate
    ) -> str:
        """
        Create an order for a customer, idempotently on the order number.

        Returns:
            The location of the order, whether it was inserted now or
            already existed.

        Raises:
            NotFoundError: the customer does not exist (nothing is inserted)
            DatabaseError: the store failed
        """
        location = order_location(cust_code, payload.ord_num)

        if not await customer_service.customer_exists(db, cust_code):
            raise NotFoundError(resource="customer", resource_id=cust_code)

        with backend_errors("create order"):
            if await self._order_number_taken(db, payload.ord_num):
                logger.info("Order %s already exists; redirecting", payload.ord_num)
                return location

            values = payload.model_dump(include=set(MUTABLE_COLUMNS))
            values["cust_code"] = cust_code
            try:
                await db.execute(insert(orders_table).values(**values))
                await db.commit()
            except IntegrityError:
                # Lost a race with another insert of the same number, or the
                # row breaks some other constraint. Only the first is benign.
                await db.rollback()
                if await self._order_number_taken(db, payload.ord_num):
                    logger.info("Order %s inserted concurrently; redirecting", payload.ord_num)
                    return location
                raise

        logger.info("Created order %s for customer %s", payload.ord_num, cust_code)
        return location

    async def replace_order(
        self, db: AsyncSession, cust_code: str, ord_num: str, payload: OrderReplace
    ) -> None:
        """
        Overwrite every mutable column of an existing order.

        The body's ord_num may differ from the path's; the order is then
        renumbered.

        Raises:
            NotFoundError: no order `ord_num` for customer `cust_code`
        """
        await self._update(
            db,
            cust_code,
            ord_num,
            payload.model_dump(include=set(MUTABLE_COLUMNS)),
            operation="replace order",
        )
        logger.info("Replaced order %s for customer %s", ord_num, cust_code)

    async def patch_order(
        self, db: AsyncSession, cust_code: str, ord_num: str, payload: OrderPatch
    ) -> None:
        """
        Update exactly the columns present in the request body.

        Raises:
            ValidationError: a body key is not an allow-listed column
            NotFoundError: no order `ord_num` for customer `cust_code`
        """
        values = payload.model_dump(exclude_unset=True)
        unknown = sorted(set(values) - set(MUTABLE_COLUMNS))
        if unknown:
            raise ValidationError(
                [violation("Unknown field", None, name) for name in unknown],
            )
        if not values:
            raise ValidationError([violation("At least one field must be supplied")])

        await self._update(db, cust_code, ord_num, values, operation="patch order")
        logger.info(
            "Patched order %s for customer %s: %s", ord_num, cust_code, ", ".join(values)
        )

    async def delete_order(self, db: AsyncSession, cust_code: str, ord_num: str) -> None:
        """
        Remove an order.

        Raises:
            NotFoundError: no order `ord_num` for customer `cust_code`
        """
        with backend_errors("delete order"):
            if not await self._lock_order(db, cust_code, ord_num):
                raise NotFoundError(resource="order", resource_id=ord_num)
            await db.execute(
                delete(orders_table).where(
                    orders_table.c.cust_code == cust_code,
                    orders_table.c.ord_num == ord_num,
                )
            )
            await db.commit()
        logger.info("Deleted order %s for customer %s", ord_num, cust_code)

    async def _update(
        self,
        db: AsyncSession,
        cust_code: str,
        ord_num: str,
        values: Dict[str, Any],
        operation: str,
    ) -> None:
        with backend_errors(operation):
            if not await self._lock_order(db, cust_code, ord_num):
                raise NotFoundError(resource="order", resource_id=ord_num)
            await db.execute(
                update(orders_table)
                .where(
                    orders_table.c.cust_code == cust_code,
                    orders_table.c.ord_num == ord_num,
                )
                .values(**values)
            )
            await db.commit()


order_service = OrderService()
