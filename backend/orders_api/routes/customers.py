"""
Customer Orders API - Customer Route Handlers
==============================================

What:  GET /customers and GET /customers/{id}.
How:   Validates the customer code, delegates to CustomerService, returns
       the rows as a JSON array.
"""

import logging
from typing import Any, Dict, List

from fastapi import APIRouter, Depends, Path
from sqlalchemy.ext.asyncio import AsyncSession

from orders_api.database import get_db_session
from orders_api.schemas.order import ErrorResponse
from orders_api.services.customer_service import customer_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Customers"])


@router.get(
    "/customers",
    responses={
        200: {"description": "A list of customers."},
        500: {"description": "When a server error occurs.", "model": ErrorResponse},
    },
    summary="Returns a list of customers.",
)
async def list_customers(
    db: AsyncSession = Depends(get_db_session),
) -> List[Dict[str, Any]]:
    return await customer_service.list_customers(db)


@router.get(
    "/customers/{id}",
    responses={
        200: {"description": "The customer information (empty array if unknown)."},
        400: {"description": "One or more parameters are invalid.", "model": ErrorResponse},
        500: {"description": "When a server error occurs.", "model": ErrorResponse},
    },
    summary="Return a single customer.",
)
async def get_customer(
    id: str = Path(min_length=6, max_length=6, description="Customer code"),
    db: AsyncSession = Depends(get_db_session),
) -> List[Dict[str, Any]]:
    """An unknown customer code yields an empty array, not a 404."""
    return await customer_service.get_customer(db, id)
