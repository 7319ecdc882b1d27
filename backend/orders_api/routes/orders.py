"""
Customer Orders API - Order Route Handlers
===========================================

What:  The order sub-resources of a customer.

    GET    /customers/{id}/orders               list a customer's orders
    POST   /customers/{id}/orders               create (303 to the order)
    GET    /customers/{id}/orders/{order_num}   fetch one order (array)
    PUT    /customers/{id}/orders/{order_num}   full replacement (204)
    PATCH  /customers/{id}/orders/{order_num}   partial update (204)
    DELETE /customers/{id}/orders/{order_num}   delete (204)

How:   FastAPI validates path parameters and the body model together, so a
       400 lists every violation at once and no database work happens
       before validation passes. Handlers then delegate to OrderService.

The path `order_num` accepts any numeric string (sign and decimal point
allowed), while the body `ord_num` must be exactly six digits.
"""

import logging
from typing import Any, Dict, List

from fastapi import APIRouter, Depends, Path, Response, status
from fastapi.responses import RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession

from orders_api.database import get_db_session
from orders_api.schemas.order import ErrorResponse, OrderCreate, OrderPatch, OrderReplace
from orders_api.services.order_service import order_service
from orders_api.validators import NUMERIC_PATTERN

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Orders"])

_BAD_REQUEST = {"description": "One or more parameters are invalid.", "model": ErrorResponse}
_SERVER_ERROR = {"description": "When a server error occurs.", "model": ErrorResponse}


@router.get(
    "/customers/{id}/orders",
    responses={
        200: {"description": "The list of orders for the customer."},
        400: _BAD_REQUEST,
        500: _SERVER_ERROR,
    },
    summary="Return all orders for a customer.",
)
async def list_orders(
    id: str = Path(min_length=6, max_length=6, description="Customer code"),
    db: AsyncSession = Depends(get_db_session),
) -> List[Dict[str, Any]]:
    return await order_service.list_orders(db, id)


@router.post(
    "/customers/{id}/orders",
    status_code=status.HTTP_303_SEE_OTHER,
    response_class=RedirectResponse,
    responses={
        303: {"description": "Redirect to the new (or already existing) order."},
        400: _BAD_REQUEST,
        404: {"description": "If the customer does not exist."},
        500: _SERVER_ERROR,
    },
    summary="Create a new order for a customer.",
)
async def create_order(
    payload: OrderCreate,
    id: str = Path(min_length=6, max_length=6, description="Customer code"),
    db: AsyncSession = Depends(get_db_session),
) -> RedirectResponse:
    """
    Create an order and redirect to it.

    Posting an order number that already exists does not create a second
    row: the response is the same 303, pointing at the existing order.
    """
    location = await order_service.create_order(db, id, payload)
    return RedirectResponse(url=location, status_code=status.HTTP_303_SEE_OTHER)


@router.get(
    "/customers/{id}/orders/{order_num}",
    responses={
        200: {"description": "The order information for the customer (empty array if unknown)."},
        400: _BAD_REQUEST,
        500: _SERVER_ERROR,
    },
    summary="Return an order for a customer.",
)
async def get_order(
    id: str = Path(min_length=6, max_length=6, description="Customer code"),
    order_num: str = Path(pattern=NUMERIC_PATTERN, description="Order number"),
    db: AsyncSession = Depends(get_db_session),
) -> List[Dict[str, Any]]:
    return await order_service.get_order(db, id, order_num)


@router.put(
    "/customers/{id}/orders/{order_num}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    responses={
        204: {"description": "When the order for the customer is updated."},
        400: _BAD_REQUEST,
        404: {"description": "When either the customer or the order does not exist."},
        500: _SERVER_ERROR,
    },
    summary="Update an order for a customer.",
)
async def replace_order(
    payload: OrderReplace,
    id: str = Path(min_length=6, max_length=6, description="Customer code"),
    order_num: str = Path(pattern=NUMERIC_PATTERN, description="Order number"),
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    await order_service.replace_order(db, id, order_num, payload)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.patch(
    "/customers/{id}/orders/{order_num}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    responses={
        204: {"description": "The order for the customer was patched."},
        400: _BAD_REQUEST,
        404: {"description": "When either the customer or the order does not exist."},
        500: _SERVER_ERROR,
    },
    summary="Partially update an order for a customer.",
)
async def patch_order(
    payload: OrderPatch,
    id: str = Path(min_length=6, max_length=6, description="Customer code"),
    order_num: str = Path(pattern=NUMERIC_PATTERN, description="Order number"),
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    """Only the fields present in the body are written; an empty body is a 400."""
    await order_service.patch_order(db, id, order_num, payload)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete(
    "/customers/{id}/orders/{order_num}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    responses={
        204: {"description": "The order for the customer was deleted."},
        400: _BAD_REQUEST,
        404: {"description": "The order does not exist for the customer."},
        500: _SERVER_ERROR,
    },
    summary="Deletes an order for a customer.",
)
async def delete_order(
    id: str = Path(min_length=6, max_length=6, description="Customer code"),
    order_num: str = Path(pattern=NUMERIC_PATTERN, description="Order number"),
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    await order_service.delete_order(db, id, order_num)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
