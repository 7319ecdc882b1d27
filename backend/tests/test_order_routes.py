"""
Customer Orders API - Order Endpoint Tests
===========================================

What we test:
    ✅ Reads: list, single order as an array, unknown order as []
    ✅ Path checks: customer code length, numeric order number
    ✅ POST: all violations reported together, 404 for unknown customer,
       303 for new and duplicate order numbers, stored values round-trip
    ✅ PUT / PATCH / DELETE: 204 on success, 404 leaves data untouched
    ✅ PATCH: empty body and unknown keys are 400
"""

import pytest
from sqlalchemy import func, select

from orders_api.models.order import Order

ORDERS_URL = "/customers/C00001/orders"
ORDER_URL = "/customers/C00001/orders/200100"


async def _count_orders(session_factory) -> int:
    async with session_factory() as session:
        result = await session.execute(select(func.count()).select_from(Order))
        return result.scalar_one()


# ══════════════════════════════════════════════════════════════════════════
# Reads
# ══════════════════════════════════════════════════════════════════════════

class TestReadOrders:

    @pytest.mark.asyncio
    async def test_list_orders_for_customer(self, test_client):
        response = await test_client.get(ORDERS_URL)

        assert response.status_code == 200
        assert [row["ord_num"] for row in response.json()] == ["200100"]

    @pytest.mark.asyncio
    async def test_get_order_returns_single_element_array(self, test_client):
        response = await test_client.get(ORDER_URL)

        assert response.status_code == 200
        assert response.json() == [
            {
                "ord_num": "200100",
                "ord_amount": "1000.00",
                "advance_amount": "600.00",
                "ord_date": "2008-08-01",
                "cust_code": "C00001",
                "agent_code": "A003",
                "ord_description": "SOD",
            }
        ]

    @pytest.mark.asyncio
    async def test_order_of_another_customer_is_not_returned(self, test_client):
        response = await test_client.get("/customers/C00001/orders/200101")

        assert response.status_code == 200
        assert response.json() == []

    @pytest.mark.asyncio
    async def test_non_numeric_order_number_is_rejected(self, test_client):
        response = await test_client.get("/customers/C00001/orders/20A100")

        assert response.status_code == 400
        [error] = response.json()["errors"]
        assert error["param"] == "order_num"
        assert error["value"] == "20A100"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "method,url",
        [
            ("GET", "/customers/C0001/orders"),
            ("POST", "/customers/C0001/orders"),
            ("GET", "/customers/C0001/orders/200100"),
            ("PUT", "/customers/C0001/orders/200100"),
            ("PATCH", "/customers/C0001/orders/200100"),
            ("DELETE", "/customers/C0001/orders/200100"),
        ],
    )
    async def test_short_customer_code_is_rejected_everywhere(
        self, test_client, order_payload, method, url
    ):
        body = order_payload if method in ("POST", "PUT", "PATCH") else None
        response = await test_client.request(method, url, json=body)

        assert response.status_code == 400
        params = [error["param"] for error in response.json()["errors"]]
        assert params == ["id"]


# ══════════════════════════════════════════════════════════════════════════
# Create
# ══════════════════════════════════════════════════════════════════════════

class TestCreateOrder:

    @pytest.mark.asyncio
    async def test_created_order_redirects_and_round_trips(self, test_client, order_payload):
        response = await test_client.post(ORDERS_URL, json=order_payload)

        assert response.status_code == 303
        assert response.headers["location"] == "/customers/C00001/orders/200150"

        fetched = await test_client.get(response.headers["location"])
        assert fetched.json() == [{**order_payload, "cust_code": "C00001"}]

    @pytest.mark.asyncio
    async def test_grouped_amount_is_stored_without_commas(self, test_client, order_payload):
        order_payload["ord_amount"] = "1,500.00"

        await test_client.post(ORDERS_URL, json=order_payload)

        fetched = await test_client.get("/customers/C00001/orders/200150")
        assert fetched.json()[0]["ord_amount"] == "1500.00"

    @pytest.mark.asyncio
    async def test_posting_twice_creates_one_row(
        self, test_client, session_factory, order_payload
    ):
        first = await test_client.post(ORDERS_URL, json=order_payload)
        second = await test_client.post(ORDERS_URL, json=order_payload)

        assert first.status_code == second.status_code == 303
        assert first.headers["location"] == second.headers["location"]
        assert await _count_orders(session_factory) == 3

    @pytest.mark.asyncio
    async def test_existing_order_number_redirects_without_overwriting(
        self, test_client, order_payload
    ):
        order_payload.update(ord_num="200100", ord_description="Something else")

        response = await test_client.post(ORDERS_URL, json=order_payload)

        assert response.status_code == 303
        assert response.headers["location"] == ORDER_URL
        fetched = await test_client.get(ORDER_URL)
        assert fetched.json()[0]["ord_description"] == "SOD"

    @pytest.mark.asyncio
    async def test_unknown_customer_is_404_and_inserts_nothing(
        self, test_client, session_factory, order_payload
    ):
        response = await test_client.post("/customers/C99999/orders", json=order_payload)

        assert response.status_code == 404
        assert response.content == b""
        assert await _count_orders(session_factory) == 2

    @pytest.mark.asyncio
    async def test_missing_fields_are_all_reported(self, test_client, session_factory):
        response = await test_client.post(ORDERS_URL, json={})

        assert response.status_code == 400
        params = {error["param"] for error in response.json()["errors"]}
        assert params == {
            "ord_num",
            "ord_amount",
            "advance_amount",
            "ord_date",
            "agent_code",
            "ord_description",
        }
        assert await _count_orders(session_factory) == 2

    @pytest.mark.asyncio
    async def test_invalid_values_are_reported_with_their_input(
        self, test_client, order_payload
    ):
        order_payload.update(ord_amount="-5.00", ord_date="2008-02-30")

        response = await test_client.post(ORDERS_URL, json=order_payload)

        assert response.status_code == 400
        errors = {error["param"]: error for error in response.json()["errors"]}
        assert set(errors) == {"ord_amount", "ord_date"}
        assert errors["ord_amount"]["value"] == "-5.00"
        assert errors["ord_date"]["msg"] == "Must be an ISO-8601 date"

    @pytest.mark.asyncio
    async def test_malformed_json_is_400(self, test_client):
        response = await test_client.post(
            ORDERS_URL,
            content=b"{not json",
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 400
        assert response.json()["errors"][0]["param"] is None


# ══════════════════════════════════════════════════════════════════════════
# Replace / Patch / Delete
# ══════════════════════════════════════════════════════════════════════════

class TestMutateOrder:

    @pytest.mark.asyncio
    async def test_put_replaces_every_column(self, test_client, order_payload):
        order_payload["ord_num"] = "200100"

        response = await test_client.put(ORDER_URL, json=order_payload)

        assert response.status_code == 204
        fetched = await test_client.get(ORDER_URL)
        assert fetched.json() == [{**order_payload, "cust_code": "C00001"}]

    @pytest.mark.asyncio
    async def test_put_on_missing_order_is_404(self, test_client, order_payload):
        response = await test_client.put("/customers/C00001/orders/999999", json=order_payload)

        assert response.status_code == 404
        assert (await test_client.get("/customers/C00001/orders/200150")).json() == []

    @pytest.mark.asyncio
    async def test_patch_changes_only_supplied_field(self, test_client):
        response = await test_client.patch(ORDER_URL, json={"ord_description": "  Rush  "})

        assert response.status_code == 204
        [order] = (await test_client.get(ORDER_URL)).json()
        assert order["ord_description"] == "Rush"
        assert order["ord_amount"] == "1000.00"
        assert order["agent_code"] == "A003"

    @pytest.mark.asyncio
    async def test_patch_with_empty_body_is_400(self, test_client):
        response = await test_client.patch(ORDER_URL, json={})

        assert response.status_code == 400
        assert response.json() == {
            "errors": [
                {"msg": "At least one field must be supplied", "value": None, "param": None}
            ]
        }

    @pytest.mark.asyncio
    async def test_patch_with_unknown_key_is_400(self, test_client):
        response = await test_client.patch(ORDER_URL, json={"cust_code": "C00002"})

        assert response.status_code == 400
        [error] = response.json()["errors"]
        assert error["param"] == "cust_code"
        assert error["value"] == "C00002"
        [order] = (await test_client.get(ORDER_URL)).json()
        assert order["cust_code"] == "C00001"

    @pytest.mark.asyncio
    async def test_patch_on_other_customers_order_is_404(self, test_client):
        response = await test_client.patch(
            "/customers/C00001/orders/200101", json={"ord_description": "Stolen"}
        )

        assert response.status_code == 404
        [order] = (await test_client.get("/customers/C00002/orders/200101")).json()
        assert order["ord_description"] == "SOD"

    @pytest.mark.asyncio
    async def test_delete_removes_the_order(self, test_client):
        response = await test_client.delete(ORDER_URL)

        assert response.status_code == 204
        assert response.content == b""
        assert (await test_client.get(ORDER_URL)).json() == []

    @pytest.mark.asyncio
    async def test_delete_missing_order_is_404(self, test_client, session_factory):
        response = await test_client.delete("/customers/C00001/orders/999999")

        assert response.status_code == 404
        assert await _count_orders(session_factory) == 2
