"""
Quotation endpoints: aggregate read, revision, export flag and delete.
"""
from decimal import Decimal

import pytest
from httpx import AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models import Quotation, QuotationProduct
from app.services import quotation_service


async def read_header(db: AsyncSession, quotation_id: int):
    result = await db.execute(
        select(*Quotation.__table__.c).where(Quotation.id == quotation_id)
    )
    return result.mappings().first()


async def read_products(db: AsyncSession, quotation_id: int):
    result = await db.execute(
        select(*QuotationProduct.__table__.c)
        .where(QuotationProduct.quotation_id == quotation_id)
        .order_by(QuotationProduct.id)
    )
    return result.mappings().all()


REVISION_PAYLOAD = {
    "client_id": None,
    "delivery_date": "2024-07-15",
    "delivery_type": "pickup",
    "products": [
        {"section": "A", "type": "material", "description": "Tiles", "quantity": "3", "price": "19.99"},
        {"section": "B", "type": "material", "description": "Glue", "quantity": 2, "price": 5.5},
    ],
}


# ==================== GET ====================

class TestGetQuotation:

    @pytest.mark.asyncio
    async def test_returns_aggregate(self, client: AsyncClient, seeded):
        response = await client.get(f"/api/quotations/{seeded['quotation_id']}")
        assert response.status_code == 200

        data = response.json()
        assert data["id"] == seeded["quotation_id"]
        assert data["custom_id"] == "Q-1001"
        assert data["client_name"] == "Nour Al-Harbi"
        assert data["company_name"] == "Nour Trading"
        assert data["city"] == "Riyadh"
        assert data["supervisor_name"] == "Salem Nasser"
        assert data["salesRep"] == {
            "name": "Omar Faris",
            "email": "omar@example.com",
            "phone": "+966 500 000 002",
        }
        assert [p["description"] for p in data["products"]] == ["Cement", "Steel"]
        assert data["total_subtotal"] == pytest.approx(287.5)

    @pytest.mark.asyncio
    async def test_without_sales_rep_or_supervisor(self, client: AsyncClient, db_session: AsyncSession):
        from app.models import Client
        owner = Client(client_name="Lone Client", company_name="Solo Co")
        db_session.add(owner)
        await db_session.flush()
        quotation = Quotation(custom_id="Q-2", client_id=owner.id)
        db_session.add(quotation)
        await db_session.commit()

        response = await client.get(f"/api/quotations/{quotation.id}")
        assert response.status_code == 200
        data = response.json()
        assert data["salesRep"] is None
        assert data["supervisor_name"] is None
        assert data["products"] == []

    @pytest.mark.asyncio
    async def test_missing_totals_are_null(self, client: AsyncClient, db_session: AsyncSession, seeded):
        from sqlalchemy import update
        await db_session.execute(
            update(Quotation)
            .where(Quotation.id == seeded["quotation_id"])
            .values(total_price=None, total_vat=None, total_subtotal=None)
        )
        await db_session.commit()

        response = await client.get(f"/api/quotations/{seeded['quotation_id']}")
        assert response.status_code == 200
        assert response.json()["total_price"] is None
        assert response.json()["total_subtotal"] is None

    @pytest.mark.asyncio
    async def test_not_found(self, client: AsyncClient, seeded):
        response = await client.get("/api/quotations/999999")
        assert response.status_code == 404
        assert response.json()["error"] == "Quotation not found"

    @pytest.mark.asyncio
    async def test_non_numeric_id_is_rejected(self, client: AsyncClient):
        response = await client.get("/api/quotations/abc")
        assert response.status_code == 400
        assert response.json()["error"] == "Invalid request"

    @pytest.mark.asyncio
    async def test_database_failure_is_internal_error(self, client: AsyncClient, seeded, monkeypatch):
        async def broken_fetch(db, statement):
            raise RuntimeError("connection reset")

        monkeypatch.setattr(quotation_service, "fetch", broken_fetch)
        response = await client.get(f"/api/quotations/{seeded['quotation_id']}")
        assert response.status_code == 500
        assert response.json()["error"] == "Internal Server Error"
        assert response.json()["details"] == "connection reset"


# ==================== PUT (revision) ====================

class TestUpdateQuotation:

    @pytest.mark.asyncio
    async def test_revision_resets_approvals_and_bumps_id(
        self, client: AsyncClient, db_session: AsyncSession, seeded
    ):
        quotation_id = seeded["quotation_id"]
        response = await client.put(f"/api/quotations/{quotation_id}", json=REVISION_PAYLOAD)
        assert response.status_code == 200
        assert response.json() == {
            "message": "Quotation and products updated successfully",
            "custom_id": "Q-1001 Rev1",
        }

        header = await read_header(db_session, quotation_id)
        assert header["custom_id"] == "Q-1001 Rev1"
        assert header["storekeeperaccept"] == "pending"
        assert header["supervisoraccept"] == "pending"
        assert header["manageraccept"] == "pending"
        assert header["status"] == "not Delivered"
        assert header["delivery_type"] == "pickup"
        assert header["updated_at"] is not None

    @pytest.mark.asyncio
    async def test_products_replaced_and_totals_recomputed(
        self, client: AsyncClient, db_session: AsyncSession, seeded
    ):
        quotation_id = seeded["quotation_id"]
        response = await client.put(f"/api/quotations/{quotation_id}", json=REVISION_PAYLOAD)
        assert response.status_code == 200

        products = await read_products(db_session, quotation_id)
        assert [p["description"] for p in products] == ["Tiles", "Glue"]
        assert [p["section"] for p in products] == ["A", "B"]
        assert products[0]["vat"] == Decimal("9.00")
        assert products[0]["subtotal"] == Decimal("68.97")
        assert products[1]["subtotal"] == Decimal("12.65")

        header = await read_header(db_session, quotation_id)
        assert header["total_price"] == Decimal("70.97")
        assert header["total_vat"] == Decimal("10.65")
        assert header["total_subtotal"] == header["total_price"] + header["total_vat"]

    @pytest.mark.asyncio
    async def test_consecutive_revisions(self, client: AsyncClient, seeded):
        quotation_id = seeded["quotation_id"]
        first = await client.put(f"/api/quotations/{quotation_id}", json=REVISION_PAYLOAD)
        second = await client.put(f"/api/quotations/{quotation_id}", json=REVISION_PAYLOAD)
        assert first.json()["custom_id"] == "Q-1001 Rev1"
        assert second.json()["custom_id"] == "Q-1001 Rev2"

    @pytest.mark.asyncio
    async def test_non_numeric_price_counts_as_zero(
        self, client: AsyncClient, db_session: AsyncSession, seeded
    ):
        quotation_id = seeded["quotation_id"]
        payload = {"products": [
            {"description": "Sample", "quantity": "lots", "price": "free"},
            {"description": "Bolts", "quantity": 10, "price": "2"},
        ]}
        response = await client.put(f"/api/quotations/{quotation_id}", json=payload)
        assert response.status_code == 200

        header = await read_header(db_session, quotation_id)
        assert header["total_price"] == Decimal("20.00")
        assert header["total_vat"] == Decimal("3.00")
        assert header["total_subtotal"] == Decimal("23.00")

    @pytest.mark.asyncio
    async def test_without_products_keeps_stored_items(
        self, client: AsyncClient, db_session: AsyncSession, seeded
    ):
        quotation_id = seeded["quotation_id"]
        response = await client.put(f"/api/quotations/{quotation_id}", json={"notes": "Call first"})
        assert response.status_code == 200

        products = await read_products(db_session, quotation_id)
        assert [p["description"] for p in products] == ["Cement", "Steel"]

        header = await read_header(db_session, quotation_id)
        assert header["notes"] == "Call first"
        assert header["storekeeper_notes"] == "Gate 3"
        assert header["delivery_date"] == "2024-06-01"
        assert header["total_subtotal"] == Decimal("287.50")

    @pytest.mark.asyncio
    async def test_out_of_range_amount_is_rejected(
        self, client: AsyncClient, db_session: AsyncSession, seeded
    ):
        quotation_id = seeded["quotation_id"]
        payload = {"products": [{"description": "Gold", "quantity": 1, "price": "1e30"}]}
        response = await client.put(f"/api/quotations/{quotation_id}", json=payload)
        assert response.status_code == 400
        assert response.json()["error"] == "Price or quantity out of range"

        header = await read_header(db_session, quotation_id)
        assert header["custom_id"] == "Q-1001"
        assert header["storekeeperaccept"] == "accepted"
        products = await read_products(db_session, quotation_id)
        assert [p["description"] for p in products] == ["Cement", "Steel"]

    @pytest.mark.asyncio
    async def test_delivered_sets_actual_delivery_date_once(
        self, client: AsyncClient, db_session: AsyncSession, seeded
    ):
        quotation_id = seeded["quotation_id"]
        header = await read_header(db_session, quotation_id)
        assert header["actual_delivery_date"] is None

        response = await client.put(f"/api/quotations/{quotation_id}", json={"status": "delivered"})
        assert response.status_code == 200
        header = await read_header(db_session, quotation_id)
        assert header["status"] == "delivered"
        delivered_at = header["actual_delivery_date"]
        assert delivered_at is not None

        response = await client.put(f"/api/quotations/{quotation_id}", json={})
        assert response.status_code == 200
        header = await read_header(db_session, quotation_id)
        assert header["status"] == "not Delivered"
        assert header["actual_delivery_date"] == delivered_at

    @pytest.mark.asyncio
    async def test_not_found(self, client: AsyncClient, seeded):
        response = await client.put("/api/quotations/999999", json=REVISION_PAYLOAD)
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_failure_mid_revision_leaves_quotation_untouched(
        self, client: AsyncClient, db_session: AsyncSession, seeded, monkeypatch
    ):
        from sqlalchemy import delete

        async def failing_replace(db, quotation_id, products, lines):
            await db.execute(
                delete(QuotationProduct).where(QuotationProduct.quotation_id == quotation_id)
            )
            raise RuntimeError("insert failed")

        monkeypatch.setattr(quotation_service, "_replace_line_items", failing_replace)

        quotation_id = seeded["quotation_id"]
        response = await client.put(f"/api/quotations/{quotation_id}", json=REVISION_PAYLOAD)
        assert response.status_code == 500
        assert response.json()["details"] == "insert failed"

        header = await read_header(db_session, quotation_id)
        assert header["custom_id"] == "Q-1001"
        assert header["storekeeperaccept"] == "accepted"
        assert header["total_subtotal"] == Decimal("287.50")
        products = await read_products(db_session, quotation_id)
        assert [p["description"] for p in products] == ["Cement", "Steel"]


# ==================== EXPORT ====================

class TestExportQuotation:

    @pytest.mark.asyncio
    async def test_marks_exported(self, client: AsyncClient, db_session: AsyncSession, seeded):
        quotation_id = seeded["quotation_id"]
        response = await client.put(f"/api/quotations/{quotation_id}/export")
        assert response.status_code == 200
        assert response.json() == {
            "message": "Quotation marked as exported",
            "quotation": {"id": quotation_id, "exported": True},
        }
        header = await read_header(db_session, quotation_id)
        assert header["exported"] is True

    @pytest.mark.asyncio
    async def test_is_idempotent(self, client: AsyncClient, db_session: AsyncSession, seeded):
        quotation_id = seeded["quotation_id"]
        first = await client.put(f"/api/quotations/{quotation_id}/export")
        second = await client.put(f"/api/quotations/{quotation_id}/export")
        assert first.status_code == second.status_code == 200

        header = await read_header(db_session, quotation_id)
        assert header["exported"] is True
        assert header["custom_id"] == "Q-1001"
        assert header["storekeeperaccept"] == "accepted"

    @pytest.mark.asyncio
    async def test_not_found(self, client: AsyncClient):
        response = await client.put("/api/quotations/424242/export")
        assert response.status_code == 404
        assert response.json()["error"] == "Quotation not found"


# ==================== DELETE ====================

class TestDeleteQuotation:

    @pytest.mark.asyncio
    async def test_removes_quotation_and_items(
        self, client: AsyncClient, db_session: AsyncSession, seeded
    ):
        quotation_id = seeded["quotation_id"]
        response = await client.delete(f"/api/quotations/{quotation_id}")
        assert response.status_code == 200
        assert response.json()["message"] == "Quotation and associated products deleted successfully"

        assert await read_header(db_session, quotation_id) is None
        assert await read_products(db_session, quotation_id) == []

        response = await client.get(f"/api/quotations/{quotation_id}")
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_failure_after_item_delete_keeps_everything(
        self, client: AsyncClient, db_session: AsyncSession, seeded, monkeypatch
    ):
        real_run_once = quotation_service.run_once
        statements = []

        async def header_delete_fails(awaitable, timeout=10):
            statements.append(awaitable)
            if len(statements) == 2:
                awaitable.close()
                raise RuntimeError("header delete failed")
            return await real_run_once(awaitable, timeout)

        monkeypatch.setattr(quotation_service, "run_once", header_delete_fails)

        quotation_id = seeded["quotation_id"]
        response = await client.delete(f"/api/quotations/{quotation_id}")
        assert response.status_code == 500
        assert response.json()["details"] == "header delete failed"

        header = await read_header(db_session, quotation_id)
        assert header is not None
        assert header["custom_id"] == "Q-1001"
        products = await read_products(db_session, quotation_id)
        assert [p["description"] for p in products] == ["Cement", "Steel"]

    @pytest.mark.asyncio
    async def test_second_delete_is_not_found(self, client: AsyncClient, seeded):
        quotation_id = seeded["quotation_id"]
        await client.delete(f"/api/quotations/{quotation_id}")
        response = await client.delete(f"/api/quotations/{quotation_id}")
        assert response.status_code == 404


class TestServiceLevel:

    @pytest.mark.asyncio
    async def test_get_quotation_returns_schema(self, db_session: AsyncSession, seeded):
        detail = await quotation_service.get_quotation(db_session, seeded["quotation_id"])
        assert detail.custom_id == "Q-1001"
        assert len(detail.products) == 2

    @pytest.mark.asyncio
    async def test_missing_id_is_client_error(self, db_session: AsyncSession):
        from app.core.exceptions import ClientError
        with pytest.raises(ClientError):
            await quotation_service.fetch_quotation_detail(db_session, None)
