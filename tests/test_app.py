"""
Tests for the FastAPI host adapter.

Tests cover:
- Service info and health
- Piece catalogue, auth validation, actions and dropdowns
- Error to status mapping
- Trigger enable -> delivery -> disable round trip
"""

import pytest
from fastapi.testclient import TestClient

from flowpieces.app import dependencies
from flowpieces.app.main import app
from flowpieces.framework import PieceRegistry
from flowpieces.framework.base import AuthValidation
from flowpieces.integrations.base import IntegrationError
from flowpieces.integrations.kommo import KommoLead
from flowpieces.integrations.zagomail import ZagomailAPIError
from flowpieces.pieces.kommo import create_kommo_piece
from flowpieces.pieces.zagomail import create_zagomail_piece

from fakes import factory_for, make_fake_client

KOMMO_AUTH = {"access_token": "kommo_test_token", "props": {"account_subdomain": "acme"}}
ZAGOMAIL_AUTH = {"publicKey": "pub_test_key", "privateKey": "priv_test_key"}


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def kommo_client():
    return make_fake_client(
        find_companies=[{"id": 3, "name": "Acme"}],
        list_leads=[KommoLead(id=1, name="Deal")],
        get_lead=IntegrationError("Request failed", "kommo", status_code=500),
        create_webhook={"id": 55},
        delete_webhook=None,
    )


@pytest.fixture
def zagomail_client():
    return make_fake_client(
        test_auth=AuthValidation(valid=True),
        create_subscriber=ZagomailAPIError("Email already exists"),
        create_webhook=None,
    )


@pytest.fixture
def client(monkeypatch, kommo_client, zagomail_client):
    """TestClient over a registry whose pieces talk to fake vendor clients."""
    dependencies.reset_services()

    registry = PieceRegistry()
    registry.register(create_kommo_piece(client_factory=factory_for(kommo_client)))
    registry.register(create_zagomail_piece(client_factory=factory_for(zagomail_client)))
    monkeypatch.setattr(dependencies, "_registry", registry)

    yield TestClient(app)

    dependencies.reset_services()


# =============================================================================
# Service Endpoints
# =============================================================================


class TestServiceEndpoints:
    def test_root(self, client):
        response = client.get("/")

        assert response.status_code == 200
        assert response.json()["service"] == "flowpieces"
        assert response.json()["status"] == "running"

    def test_health(self, client):
        response = client.get("/health")

        assert response.json() == {
            "status": "healthy",
            "pieces": ["kommo", "zagomail"],
            "active_triggers": 0,
        }


# =============================================================================
# Piece Endpoints
# =============================================================================


class TestPieceEndpoints:
    def test_list_pieces(self, client):
        response = client.get("/api/v1/pieces")

        assert response.status_code == 200
        assert [piece["name"] for piece in response.json()["pieces"]] == ["kommo", "zagomail"]

    def test_unknown_piece(self, client):
        response = client.post("/api/v1/pieces/hubspot/actions/anything", json={})
        assert response.status_code == 404

    def test_unknown_action(self, client):
        response = client.post("/api/v1/pieces/kommo/actions/anything", json={})
        assert response.status_code == 404

    def test_validate_auth(self, client, zagomail_client):
        response = client.post("/api/v1/pieces/zagomail/auth/validate", json={"auth": ZAGOMAIL_AUTH})

        assert response.json() == {"valid": True}
        zagomail_client.test_auth.assert_awaited_once()

    def test_run_action(self, client, kommo_client):
        response = client.post(
            "/api/v1/pieces/kommo/actions/find_company",
            json={"auth": KOMMO_AUTH, "props": {"name_query": "Acme"}},
        )

        assert response.status_code == 200
        assert response.json() == [{"id": 3, "name": "Acme"}]
        kommo_client.find_companies.assert_awaited_once_with("Acme", with_=[])

    def test_input_error_is_400(self, client):
        response = client.post(
            "/api/v1/pieces/kommo/actions/update_lead",
            json={"auth": KOMMO_AUTH, "props": {}},
        )

        assert response.status_code == 400
        assert response.json()["detail"] == "Lead ID is required."

    def test_configuration_error_is_400(self, client):
        response = client.post(
            "/api/v1/pieces/kommo/actions/find_company",
            json={"auth": {"access_token": "t"}, "props": {"name_query": "Acme"}},
        )

        assert response.status_code == 400

    def test_vendor_error_is_502(self, client):
        response = client.post(
            "/api/v1/pieces/kommo/actions/find_lead_by_id",
            json={"auth": KOMMO_AUTH, "props": {"lead_id": 1}},
        )

        assert response.status_code == 502
        assert response.json()["detail"].startswith("[kommo]")

    def test_action_error_is_502(self, client):
        response = client.post(
            "/api/v1/pieces/zagomail/actions/create_subscriber",
            json={"auth": ZAGOMAIL_AUTH, "props": {"list_uid": "l1", "email": "a@b.c"}},
        )

        assert response.status_code == 502
        assert "Error creating Zagomail subscriber" in response.json()["detail"]

    def test_dropdown_options(self, client):
        response = client.post(
            "/api/v1/pieces/kommo/actions/update_lead/options/lead_id",
            json={"auth": KOMMO_AUTH},
        )

        assert response.json() == {
            "disabled": False,
            "options": [{"label": "Deal", "value": 1}],
        }

    def test_dropdown_unauthenticated(self, client):
        response = client.post(
            "/api/v1/pieces/kommo/actions/update_lead/options/lead_id",
            json={},
        )

        assert response.json()["disabled"] is True

    def test_unknown_dropdown(self, client):
        response = client.post(
            "/api/v1/pieces/kommo/actions/update_lead/options/name",
            json={"auth": KOMMO_AUTH},
        )

        assert response.status_code == 404

    def test_trigger_sample(self, client):
        response = client.post("/api/v1/pieces/kommo/triggers/task_completed/test", json={})

        assert response.status_code == 200
        assert response.json()["events"][0]["tasks"][0]["is_completed"] is True


# =============================================================================
# Trigger Lifecycle
# =============================================================================


class TestTriggerLifecycle:
    ENABLE = "/api/v1/flows/flow-1/triggers/kommo/new_lead_created/enable"
    DISABLE = "/api/v1/flows/flow-1/triggers/kommo/new_lead_created/disable"
    HOOK = "/api/v1/webhooks/flow-1"

    def test_round_trip(self, client, kommo_client):
        response = client.post(self.ENABLE, json={"auth": KOMMO_AUTH})

        assert response.status_code == 200
        webhook_url = response.json()["webhook_url"]
        assert webhook_url == "http://testserver/api/v1/webhooks/flow-1"
        kommo_client.create_webhook.assert_awaited_once_with(webhook_url, ["add_lead"])
        assert "flow-1:kommo.new_lead_created.webhook_id" in dependencies.get_store()

        response = client.post(self.HOOK, json={"leads": {"add": [{"id": 1}]}})
        assert response.json() == {"events": [{"id": 1}]}

        response = client.post(self.DISABLE, json={})
        assert response.json() == {"flow_id": "flow-1", "enabled": False}
        kommo_client.delete_webhook.assert_awaited_once_with(webhook_url)
        assert len(dependencies.get_store()) == 0

        assert client.post(self.HOOK, json=[{"id": 2}]).status_code == 404

    def test_enable_twice_conflicts(self, client):
        assert client.post(self.ENABLE, json={"auth": KOMMO_AUTH}).status_code == 200
        assert client.post(self.ENABLE, json={"auth": KOMMO_AUTH}).status_code == 409

    def test_registration_failure(self, client):
        response = client.post(
            "/api/v1/flows/flow-2/triggers/zagomail/new_subscriber_added/enable",
            json={"auth": ZAGOMAIL_AUTH},
        )

        assert response.status_code == 400
        assert "flow-2" not in dependencies.get_activations()
        assert len(dependencies.get_store()) == 0

    def test_unknown_flow_delivery(self, client):
        assert client.post("/api/v1/webhooks/nope", json={}).status_code == 404

    def test_invalid_json_delivery(self, client):
        client.post(self.ENABLE, json={"auth": KOMMO_AUTH})

        response = client.post(
            self.HOOK, content=b"{not json", headers={"Content-Type": "application/json"}
        )

        assert response.status_code == 400

    def test_disable_without_enable(self, client, kommo_client):
        response = client.post(self.DISABLE, json={"auth": KOMMO_AUTH})

        assert response.status_code == 200
        kommo_client.delete_webhook.assert_not_called()

    def test_disable_other_trigger_conflicts(self, client, kommo_client, zagomail_client):
        client.post(self.ENABLE, json={"auth": KOMMO_AUTH})

        response = client.post(
            "/api/v1/flows/flow-1/triggers/zagomail/subscriber_unsubscribed/disable",
            json={"auth": ZAGOMAIL_AUTH},
        )

        assert response.status_code == 409
        assert dependencies.get_activations()["flow-1"].trigger_name == "new_lead_created"
        assert "flow-1:kommo.new_lead_created.webhook_id" in dependencies.get_store()
        kommo_client.delete_webhook.assert_not_called()

        assert client.post(self.DISABLE, json={}).status_code == 200
        kommo_client.delete_webhook.assert_awaited_once()
