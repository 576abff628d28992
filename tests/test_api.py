"""End-to-end tests of the order API: guards, named errors and serialization."""

from __future__ import annotations

from decimal import Decimal

import pytest

from services.order_service.main import order_app
from shared.errors import ServiceError


@pytest.fixture()
def buyer(identity, token_factory):
    """A token the user service recognises, plus matching headers."""
    token = token_factory("u1", "user")
    identity.register(token, id="u1", name="Ana", email="ana@example.com")
    return {"Authorization": f"Bearer {token}"}


async def _create(api, headers, product_id="p1", quantity=3):
    return await api.post("/", json={"productId": product_id, "quantity": quantity}, headers=headers)


class TestHealth:
    @pytest.mark.asyncio()
    async def test_health_is_public(self, api) -> None:
        resp = await api.get("/health")
        assert resp.status_code == 200
        assert resp.json() == {"service": "order", "status": "running"}


class TestCreateOrderEndpoint:
    @pytest.mark.asyncio()
    async def test_scenario_u1_p1_quantity_three(self, api, buyer) -> None:
        resp = await _create(api, buyer)
        assert resp.status_code == 201
        body = resp.json()
        assert Decimal(body["total_price"]) == Decimal("30.00")
        assert Decimal(body["product_price"]) == Decimal("10.00")
        assert body["status"] == "CREATED"
        assert body["quantity"] == 3
        assert body["user_id"] == "u1"
        assert body["product_id"] == "p1"

    @pytest.mark.asyncio()
    async def test_snake_case_body_is_accepted(self, api, buyer) -> None:
        resp = await api.post("/", json={"product_id": "p1", "quantity": 1}, headers=buyer)
        assert resp.status_code == 201

    @pytest.mark.asyncio()
    async def test_missing_credential(self, api, identity, catalog) -> None:
        resp = await _create(api, {})
        assert resp.status_code == 401
        assert resp.json()["error"] == "UNAUTHORIZED"
        assert resp.headers["WWW-Authenticate"] == "Bearer"
        assert identity.calls == [] and catalog.calls == []

    @pytest.mark.asyncio()
    async def test_credential_failing_local_verification(self, api, identity) -> None:
        resp = await _create(api, {"Authorization": "Bearer forged.token.value"})
        assert resp.status_code == 401
        assert identity.calls == []

    @pytest.mark.asyncio()
    async def test_credential_rejected_by_user_service(self, api, auth_headers) -> None:
        resp = await _create(api, auth_headers("ghost"))
        assert resp.status_code == 404
        assert resp.json() == {"error": "NOT_FOUND", "detail": "User not found"}

    @pytest.mark.asyncio()
    async def test_unknown_product(self, api, buyer) -> None:
        resp = await _create(api, buyer, product_id="p404")
        assert resp.status_code == 404
        assert resp.json()["detail"] == "Product not found"

    @pytest.mark.asyncio()
    async def test_insufficient_stock(self, api, buyer) -> None:
        resp = await _create(api, buyer, quantity=6)
        assert resp.status_code == 409
        assert resp.json()["error"] == "INSUFFICIENT_STOCK"
        mine = await api.get("/mine", headers=buyer)
        assert mine.json() == []

    @pytest.mark.asyncio()
    async def test_zero_quantity_rejected_by_validation(self, api, buyer) -> None:
        resp = await _create(api, buyer, quantity=0)
        assert resp.status_code == 422


class TestQueries:
    @pytest.mark.asyncio()
    async def test_my_orders_is_owner_only_and_most_recent_first(
        self, api, buyer, identity, catalog, token_factory
    ) -> None:
        catalog.add("p2", "Mouse", "5.50", 10)
        other_token = token_factory("u2", "user")
        identity.register(other_token, id="u2", name="Bo", email="bo@example.com")

        first = (await _create(api, buyer, quantity=1)).json()
        await _create(api, {"Authorization": f"Bearer {other_token}"}, quantity=1)
        second = (await _create(api, buyer, product_id="p2", quantity=2)).json()

        resp = await api.get("/mine", headers=buyer)
        assert resp.status_code == 200
        assert [o["id"] for o in resp.json()] == [second["id"], first["id"]]

    @pytest.mark.asyncio()
    async def test_my_orders_empty(self, api, auth_headers) -> None:
        resp = await api.get("/mine", headers=auth_headers("u-new"))
        assert resp.status_code == 200
        assert resp.json() == []

    @pytest.mark.asyncio()
    async def test_my_orders_requires_identity(self, api) -> None:
        resp = await api.get("/mine")
        assert resp.status_code == 401

    @pytest.mark.asyncio()
    async def test_order_by_id_returns_frozen_snapshot(self, api, buyer, catalog) -> None:
        created = (await _create(api, buyer)).json()
        catalog.add("p1", "Mechanical Keyboard", "12.00", 5)

        resp = await api.get(f"/{created['id']}", headers=buyer)
        assert resp.status_code == 200
        assert resp.json() == created

    @pytest.mark.asyncio()
    async def test_order_by_id_absent_is_null(self, api, auth_headers) -> None:
        resp = await api.get("/12345", headers=auth_headers())
        assert resp.status_code == 200
        assert resp.json() is None

    @pytest.mark.asyncio()
    async def test_order_by_id_with_expired_token(self, api, auth_headers) -> None:
        resp = await api.get("/1", headers=auth_headers(expires_in=-10))
        assert resp.status_code == 401


class TestAdminMutations:
    @pytest.mark.asyncio()
    async def test_admin_updates_status(self, api, buyer, auth_headers) -> None:
        created = (await _create(api, buyer)).json()
        resp = await api.patch(f"/{created['id']}/status", json={"status": "SHIPPED"}, headers=auth_headers("root", "admin"))
        assert resp.status_code == 200
        assert resp.json()["status"] == "SHIPPED"
        assert resp.json()["total_price"] == created["total_price"]

    @pytest.mark.asyncio()
    async def test_non_admin_cannot_update_or_delete(self, api, buyer, auth_headers) -> None:
        created = (await _create(api, buyer)).json()

        resp = await api.patch(f"/{created['id']}/status", json={"status": "CANCELLED"}, headers=auth_headers())
        assert resp.status_code == 403
        assert resp.json() == {"error": "FORBIDDEN", "detail": "Admin only"}

        resp = await api.delete(f"/{created['id']}", headers=auth_headers())
        assert resp.status_code == 403

        unchanged = await api.get(f"/{created['id']}", headers=buyer)
        assert unchanged.json() == created

    @pytest.mark.asyncio()
    async def test_anonymous_admin_call_is_unauthorized(self, api) -> None:
        resp = await api.delete("/1")
        assert resp.status_code == 401

    @pytest.mark.asyncio()
    async def test_update_unknown_order(self, api, auth_headers) -> None:
        resp = await api.patch("/999/status", json={"status": "PAID"}, headers=auth_headers("root", "admin"))
        assert resp.status_code == 404
        assert resp.json()["detail"] == "Order not found"

    @pytest.mark.asyncio()
    async def test_unknown_status_value_rejected(self, api, auth_headers) -> None:
        resp = await api.patch("/1/status", json={"status": "TELEPORTED"}, headers=auth_headers("root", "admin"))
        assert resp.status_code == 422

    @pytest.mark.asyncio()
    async def test_delete_is_idempotent(self, api, buyer, auth_headers) -> None:
        created = (await _create(api, buyer)).json()
        admin = auth_headers("root", "admin")

        first = await api.delete(f"/{created['id']}", headers=admin)
        second = await api.delete(f"/{created['id']}", headers=admin)
        assert first.status_code == second.status_code == 200
        assert first.json() is True and second.json() is True

        gone = await api.get(f"/{created['id']}", headers=buyer)
        assert gone.json() is None


class TestErrorRendering:
    def test_every_service_error_is_handled(self) -> None:
        assert ServiceError in order_app.exception_handlers
