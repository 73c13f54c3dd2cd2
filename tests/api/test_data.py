"""Tests for GET /api/data read endpoints."""

import pytest

from core.models import CatalogKind, CatalogRef, ReferenceData, SelectedMenu


class TestBooking:

    def test_fresh_screen(self, client):
        response = client.get("/api/data/booking")

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["state"] == "drafting_new"
        assert data["totals"]["bill_amount"] == 0
        assert data["receipts"] == []
        assert data["date_range"] == {"valid": True, "message": None}
        assert data["busy"] == {
            "load": False, "save": False, "invoice": False, "receipt": False, "delete_receipt": False,
        }
        assert data["edit"]["is_edit_mode"] is False

    def test_reads_need_no_operator(self, anonymous_client):
        assert anonymous_client.get("/api/data/booking").status_code == 200

    def test_response_envelope(self, client):
        body = client.get("/api/data/booking").json()

        assert body["success"] is True
        assert body["error"] is None
        assert "request_id" in body["meta"]


class TestValidation:

    def test_lists_violations_in_order(self, client):
        data = client.get("/api/data/validation").json()["data"]

        assert data["ok"] is False
        assert data["violations"][0] == {
            "field": "billingCompany",
            "message": "Please select Billing Company",
            "target_selector": "#billing-company",
        }
        assert data["violations"][-1]["field"] == "itemDetails"

    def test_loaded_quotation_is_valid(self, client):
        client.post("/api/actions", json={"domain": "booking", "action": "load", "data": {"quotation_id": "4410"}})
        assert client.get("/api/data/validation").json()["data"] == {"ok": True, "violations": []}


class TestReference:

    def test_reference_data(self, client, booking_client):
        booking_client.fetch_reference_data.return_value = ReferenceData(
            server_date="10-03-2026",
            statuses=(CatalogRef(id="1", name="Confirmed"),),
        )

        data = client.get("/api/data/reference").json()["data"]

        assert data["server_date"] == "10-03-2026"
        assert data["statuses"][0]["name"] == "Confirmed"
        booking_client.fetch_reference_data.assert_called_once_with("290")

    def test_requires_operator(self, anonymous_client):
        response = anonymous_client.get("/api/data/reference")
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "OPERATOR_MISSING"


class TestCatalog:

    def test_search(self, client, booking_client):
        booking_client.search_catalog.return_value = [CatalogRef(id="8", name="Crystal Hall")]

        response = client.get("/api/data/catalog/venue", params={"q": "cry"})

        assert response.json()["data"] == [{"id": "8", "name": "Crystal Hall", "extra": {}}]
        booking_client.search_catalog.assert_called_once_with(CatalogKind.VENUE, "cry", "290")

    def test_unknown_kind(self, client):
        response = client.get("/api/data/catalog/planet")
        assert response.status_code == 400
        assert "Valid kinds" in response.json()["error"]["message"]

    @pytest.mark.parametrize("kind", ["menu", "paymode"])
    def test_kinds_needing_q(self, client, kind):
        assert client.get(f"/api/data/catalog/{kind}").status_code == 400

    def test_menus(self, client, booking_client):
        booking_client.fetch_package_menus.return_value = [{
            "category_id": "1",
            "category_name": "Starters",
            "menus": [SelectedMenu(category_id="1", menu_id="10", menu_name="Paneer Tikka")],
        }]

        data = client.get("/api/data/catalog/menu", params={"q": "33"}).json()["data"]

        assert data[0]["menus"][0]["menu_id"] == "10"
        booking_client.fetch_package_menus.assert_called_once_with("33")

    def test_accounts_and_paymodes(self, client, booking_client):
        booking_client.list_accounts.return_value = [CatalogRef(id="21", name="HDFC Current")]
        booking_client.list_paymodes.return_value = [CatalogRef(id="2", name="UPI")]

        accounts = client.get("/api/data/catalog/account").json()["data"]
        paymodes = client.get("/api/data/catalog/paymode", params={"q": "21"}).json()["data"]

        assert accounts[0]["name"] == "HDFC Current"
        assert paymodes[0]["id"] == "2"
        booking_client.list_accounts.assert_called_once_with("290")
        booking_client.list_paymodes.assert_called_once_with("21")
