"""
Tests for the Kommo piece.

Tests cover:
- Piece assembly
- Action input handling and client calls
- Dynamic lead/contact dropdowns
- Trigger registration, teardown and event filtering
"""

import pytest

from flowpieces.framework import (
    ActionContext,
    ConfigurationError,
    InputValidationError,
    WebhookRegistrationError,
)
from flowpieces.integrations.base import IntegrationError
from flowpieces.integrations.kommo import KommoContact, KommoLead
from flowpieces.pieces.kommo import (
    KommoCreateContactAction,
    KommoCreateLeadAction,
    KommoFindCompanyAction,
    KommoFindContactAction,
    KommoFindLeadAction,
    KommoLeadStatusChangedTrigger,
    KommoNewContactAddedTrigger,
    KommoNewLeadCreatedTrigger,
    KommoTaskCompletedTrigger,
    KommoUpdateContactAction,
    KommoUpdateLeadAction,
    create_kommo_piece,
    kommo,
)

from fakes import factory_for, make_fake_client

NO_SUBDOMAIN = {"access_token": "kommo_test_token", "props": {}}


# =============================================================================
# Piece
# =============================================================================


class TestKommoPiece:
    def test_default_piece(self):
        assert kommo.name == "kommo"
        assert [action.name for action in kommo.actions] == [
            "create_new_lead",
            "update_lead",
            "find_lead_by_id",
            "create_new_contact",
            "update_contact",
            "find_contact_by_email",
            "find_company",
        ]
        assert [trigger.name for trigger in kommo.triggers] == [
            "new_lead_created",
            "lead_status_changed",
            "new_contact_added",
            "task_completed",
        ]

    def test_auth_schema(self):
        schema = kommo.auth.to_schema()
        assert schema["type"] == "oauth2"
        assert schema["token_url"] == "https://{account_subdomain}.kommo.com/oauth2/access_token"
        assert schema["props"]["required"] == ["account_subdomain"]

    def test_token_url_expansion(self):
        assert kommo.auth.token_url_for({"account_subdomain": "acme"}) == (
            "https://acme.kommo.com/oauth2/access_token"
        )

    def test_factory_injected(self):
        client = make_fake_client()
        piece = create_kommo_piece(client_factory=factory_for(client))
        assert piece.get_action("create_new_lead")._client_factory() is client


# =============================================================================
# Lead Actions
# =============================================================================


class TestLeadActions:
    @pytest.mark.asyncio
    async def test_create_lead(self, kommo_connection):
        client = make_fake_client(create_lead={"_embedded": {"leads": [{"id": 1}]}})
        action = KommoCreateLeadAction(client_factory=factory_for(client))

        result = await action.run(
            ActionContext(
                auth=kommo_connection,
                props={
                    "name": "Deal",
                    "price": 0,
                    "contact_ids": [{"id": 4}, {"id": "5"}],
                    "tags": [{"name": "vip"}],
                    "custom_fields_values": '[{"field_id": 1, "values": [{"value": "x"}]}]',
                },
            )
        )

        assert result == {"_embedded": {"leads": [{"id": 1}]}}
        lead = client.create_lead.call_args.args[0]
        assert lead.to_api_dict() == {
            "name": "Deal",
            "price": 0,
            "_embedded": {
                "contacts": [{"id": 4}, {"id": 5}],
                "tags": [{"name": "vip"}],
            },
            "custom_fields_values": [{"field_id": 1, "values": [{"value": "x"}]}],
        }

    @pytest.mark.asyncio
    async def test_create_lead_requires_name(self, kommo_connection):
        client = make_fake_client(create_lead={})
        action = KommoCreateLeadAction(client_factory=factory_for(client))

        with pytest.raises(InputValidationError):
            await action.run(ActionContext(auth=kommo_connection, props={}))

        client.create_lead.assert_not_called()

    @pytest.mark.asyncio
    async def test_missing_subdomain(self):
        client = make_fake_client(update_lead={})
        action = KommoUpdateLeadAction(client_factory=factory_for(client))

        with pytest.raises(ConfigurationError, match="subdomain"):
            await action.run(ActionContext(auth=NO_SUBDOMAIN, props={"lead_id": 1}))

        client.update_lead.assert_not_called()

    @pytest.mark.asyncio
    async def test_update_lead_requires_id(self, kommo_connection):
        client = make_fake_client(update_lead={})
        action = KommoUpdateLeadAction(client_factory=factory_for(client))

        with pytest.raises(InputValidationError, match="Lead ID is required"):
            await action.run(ActionContext(auth=kommo_connection, props={"name": "x"}))

        client.update_lead.assert_not_called()

    @pytest.mark.asyncio
    async def test_update_lead_sends_only_supplied(self, kommo_connection):
        client = make_fake_client(update_lead={"id": 8})
        action = KommoUpdateLeadAction(client_factory=factory_for(client))

        await action.run(
            ActionContext(
                auth=kommo_connection,
                props={"lead_id": 8, "status_id": 142, "tags_to_delete": [{"id": 3}]},
            )
        )

        lead_id, update = client.update_lead.call_args.args
        assert lead_id == 8
        assert update.to_api_dict() == {
            "status_id": 142,
            "_embedded": {"tags_to_delete": [{"id": 3}]},
        }

    @pytest.mark.asyncio
    async def test_find_lead_with(self, kommo_connection):
        client = make_fake_client(get_lead={"id": 8})
        action = KommoFindLeadAction(client_factory=factory_for(client))

        result = await action.run(
            ActionContext(auth=kommo_connection, props={"lead_id": 8, "with_param": ["contacts"]})
        )

        assert result == {"id": 8}
        client.get_lead.assert_called_once_with(8, with_=["contacts"])

    @pytest.mark.asyncio
    async def test_vendor_error_propagates(self, kommo_connection):
        client = make_fake_client(get_lead=IntegrationError("Request failed", "kommo"))
        action = KommoFindLeadAction(client_factory=factory_for(client))

        with pytest.raises(IntegrationError):
            await action.run(ActionContext(auth=kommo_connection, props={"lead_id": 8}))

    @pytest.mark.asyncio
    async def test_static_with_options(self):
        state = await KommoFindLeadAction().options("with_param", None)
        assert len(state.options) == 6
        assert state.disabled is False


# =============================================================================
# Dropdowns
# =============================================================================


class TestDropdowns:
    @pytest.mark.asyncio
    async def test_lead_dropdown_unauthenticated(self):
        state = await KommoUpdateLeadAction().options("lead_id", None)
        assert state.disabled is True
        assert state.placeholder == "Please authenticate first and connect your Kommo account."

    @pytest.mark.asyncio
    async def test_lead_dropdown_missing_subdomain(self):
        state = await KommoUpdateLeadAction().options("lead_id", NO_SUBDOMAIN)
        assert state.placeholder == "Account subdomain is missing from connection."

    @pytest.mark.asyncio
    async def test_lead_dropdown_options(self, kommo_connection):
        client = make_fake_client(
            list_leads=[KommoLead(id=1, name="Deal"), KommoLead(id=2)]
        )
        action = KommoUpdateLeadAction(client_factory=factory_for(client))

        state = await action.options("lead_id", kommo_connection)

        assert state.to_dict() == {
            "disabled": False,
            "options": [
                {"label": "Deal", "value": 1},
                {"label": "Lead ID: 2", "value": 2},
            ],
        }

    @pytest.mark.asyncio
    async def test_lead_dropdown_vendor_error(self, kommo_connection):
        client = make_fake_client(list_leads=IntegrationError("boom", "kommo"))
        action = KommoUpdateLeadAction(client_factory=factory_for(client))

        state = await action.options("lead_id", kommo_connection)

        assert state.disabled is True
        assert state.placeholder == "Error fetching leads."

    @pytest.mark.asyncio
    async def test_lead_dropdown_empty(self, kommo_connection):
        client = make_fake_client(list_leads=[])
        action = KommoUpdateLeadAction(client_factory=factory_for(client))

        state = await action.options("lead_id", kommo_connection)

        assert state.placeholder == "Could not load leads."

    @pytest.mark.asyncio
    async def test_contact_dropdown(self, kommo_connection):
        client = make_fake_client(
            list_contacts=[KommoContact(id=3, first_name="Jane", last_name="Doe")]
        )
        action = KommoUpdateContactAction(client_factory=factory_for(client))

        state = await action.options("contact_id", kommo_connection)

        assert [option.to_dict() for option in state.options] == [
            {"label": "Jane Doe", "value": 3}
        ]

    @pytest.mark.asyncio
    async def test_unknown_dropdown(self, kommo_connection):
        with pytest.raises(KeyError):
            await KommoUpdateLeadAction().options("name", kommo_connection)


# =============================================================================
# Contact and Company Actions
# =============================================================================


class TestContactActions:
    @pytest.mark.asyncio
    async def test_create_contact(self, kommo_connection):
        client = make_fake_client(create_contact={"_embedded": {"contacts": [{"id": 3}]}})
        action = KommoCreateContactAction(client_factory=factory_for(client))

        await action.run(
            ActionContext(auth=kommo_connection, props={"name": "Jane Doe", "first_name": "Jane"})
        )

        contact = client.create_contact.call_args.args[0]
        assert contact.to_api_dict() == {"name": "Jane Doe", "first_name": "Jane"}

    @pytest.mark.asyncio
    async def test_update_contact_requires_id(self, kommo_connection):
        action = KommoUpdateContactAction(client_factory=factory_for(make_fake_client()))

        with pytest.raises(InputValidationError, match="Contact ID is required"):
            await action.run(ActionContext(auth=kommo_connection, props={}))

    @pytest.mark.asyncio
    async def test_find_contact_by_email(self, kommo_connection):
        client = make_fake_client(find_contacts=[{"id": 3}])
        action = KommoFindContactAction(client_factory=factory_for(client))

        result = await action.run(
            ActionContext(
                auth=kommo_connection,
                props={"email": "jane@example.com", "with_param": ["leads"]},
            )
        )

        assert result == [{"id": 3}]
        client.find_contacts.assert_called_once_with("jane@example.com", with_=["leads"])

    @pytest.mark.asyncio
    async def test_find_company(self, kommo_connection):
        client = make_fake_client(find_companies=[])
        action = KommoFindCompanyAction(client_factory=factory_for(client))

        result = await action.run(ActionContext(auth=kommo_connection, props={"name_query": "Acme"}))

        assert result == []
        client.find_companies.assert_called_once_with("Acme", with_=[])


# =============================================================================
# Triggers
# =============================================================================


class TestKommoTriggers:
    @pytest.mark.asyncio
    async def test_enable_registers_event(self, kommo_connection, trigger_context):
        client = make_fake_client(create_webhook={"id": 55})
        trigger = KommoNewLeadCreatedTrigger(client_factory=factory_for(client))
        context = trigger_context(auth=kommo_connection)

        await trigger.on_enable(context)

        client.create_webhook.assert_called_once_with(context.webhook_url, ["add_lead"])
        id_key, destination_key = trigger.store_keys(context)
        assert id_key == "kommo.new_lead_created.webhook_id"
        assert await context.store.get(id_key) == 55
        assert await context.store.get(destination_key) == context.webhook_url

    @pytest.mark.asyncio
    async def test_enable_without_id(self, kommo_connection, trigger_context, memory_store):
        client = make_fake_client(create_webhook={"destination": "x"})
        trigger = KommoLeadStatusChangedTrigger(client_factory=factory_for(client))

        with pytest.raises(WebhookRegistrationError):
            await trigger.on_enable(trigger_context(auth=kommo_connection))

        assert memory_store.keys() == []

    @pytest.mark.asyncio
    async def test_disable_deletes_by_destination(self, kommo_connection, trigger_context):
        client = make_fake_client(create_webhook={"id": 55}, delete_webhook=None)
        trigger = KommoNewContactAddedTrigger(client_factory=factory_for(client))
        context = trigger_context(auth=kommo_connection)
        await trigger.on_enable(context)

        await trigger.on_disable(context)

        client.delete_webhook.assert_called_once_with(context.webhook_url)
        id_key, _ = trigger.store_keys(context)
        assert await context.store.get(id_key) is None

    @pytest.mark.asyncio
    async def test_disable_without_record(self, kommo_connection, trigger_context):
        client = make_fake_client(delete_webhook=None)
        trigger = KommoNewContactAddedTrigger(client_factory=factory_for(client))

        await trigger.on_disable(trigger_context(auth=kommo_connection))

        client.delete_webhook.assert_not_called()

    @pytest.mark.asyncio
    async def test_disable_swallows_vendor_error(self, kommo_connection, trigger_context):
        client = make_fake_client(
            create_webhook={"id": 55},
            delete_webhook=IntegrationError("gone", "kommo"),
        )
        trigger = KommoNewLeadCreatedTrigger(client_factory=factory_for(client))
        context = trigger_context(auth=kommo_connection)
        await trigger.on_enable(context)

        await trigger.on_disable(context)

        _, destination_key = trigger.store_keys(context)
        assert await context.store.get(destination_key) is None

    @pytest.mark.asyncio
    async def test_new_lead_shapes(self, trigger_context):
        trigger = KommoNewLeadCreatedTrigger()

        assert await trigger.run(trigger_context(payload={"leads": {"add": [{"id": 1}]}})) == [
            {"id": 1}
        ]
        assert await trigger.run(trigger_context(payload={"leads": [{"id": 2}]})) == [{"id": 2}]
        assert await trigger.run(trigger_context(payload=[{"id": 3}])) == [{"id": 3}]
        assert await trigger.run(trigger_context(payload={"unrelated": True})) == []

    @pytest.mark.asyncio
    async def test_status_change_uses_status_key(self, trigger_context):
        trigger = KommoLeadStatusChangedTrigger()
        payload = {"leads": {"status": [{"id": 9, "status_id": "142"}]}}

        assert await trigger.run(trigger_context(payload=payload)) == [
            {"id": 9, "status_id": "142"}
        ]

    @pytest.mark.asyncio
    async def test_task_completed_filter(self, trigger_context):
        trigger = KommoTaskCompletedTrigger()
        payload = {
            "tasks": {
                "update": [
                    {"id": 1, "is_completed": True},
                    {"id": 2, "is_completed": False},
                    {"id": 3, "is_completed": "true"},
                    {"id": 4},
                ]
            }
        }

        assert await trigger.run(trigger_context(payload=payload)) == [
            {"id": 1, "is_completed": True}
        ]

    @pytest.mark.asyncio
    async def test_task_completed_status_key(self, trigger_context):
        trigger = KommoTaskCompletedTrigger()
        payload = {"tasks": {"status": [{"id": 1, "is_completed": True}]}}

        assert await trigger.run(trigger_context(payload=payload)) == [
            {"id": 1, "is_completed": True}
        ]

    @pytest.mark.asyncio
    async def test_sample_data(self, trigger_context):
        events = await KommoTaskCompletedTrigger().test(trigger_context())
        assert events[0]["tasks"][0]["is_completed"] is True
