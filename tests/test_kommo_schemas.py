"""
Tests for Kommo request schemas.

Tests cover:
- Optional-field omission
- Tag references (id preferred over name)
- _embedded associations
- Custom field coercion
- Connection parsing
"""

import pytest
from pydantic import ValidationError

from flowpieces.framework.errors import ConfigurationError, InputValidationError
from flowpieces.integrations.kommo.schemas import (
    ContactCreate,
    ContactUpdate,
    KommoAuth,
    KommoContact,
    KommoLead,
    LeadCreate,
    LeadUpdate,
    TagRef,
    coerce_custom_fields,
    embedded_items,
    normalize_tags,
)


class TestLeadCreate:
    def test_minimal_payload(self):
        assert LeadCreate(name="Deal").to_api_dict() == {"name": "Deal"}

    def test_zero_price_is_kept(self):
        assert LeadCreate(name="Deal", price=0).to_api_dict() == {"name": "Deal", "price": 0}

    def test_associations(self):
        lead = LeadCreate(
            name="Deal",
            price=1500,
            status_id=142,
            contact_ids=[1, 2],
            company_id=9,
            tags=["vip"],
        )

        data = lead.to_api_dict()

        assert data["price"] == 1500
        assert data["status_id"] == 142
        assert data["_embedded"] == {
            "contacts": [{"id": 1}, {"id": 2}],
            "companies": [{"id": 9}],
            "tags": [{"name": "vip"}],
        }
        assert "pipeline_id" not in data

    def test_custom_fields_passed_through(self):
        fields = [{"field_id": 123, "values": [{"value": "data"}]}]
        data = LeadCreate(name="Deal", custom_fields_values=fields).to_api_dict()
        assert data["custom_fields_values"] == fields

    def test_empty_custom_fields_omitted(self):
        assert "custom_fields_values" not in LeadCreate(name="Deal", custom_fields_values=[]).to_api_dict()

    def test_name_required(self):
        with pytest.raises(ValidationError):
            LeadCreate(name="")


class TestLeadUpdate:
    def test_empty_update(self):
        assert LeadUpdate().to_api_dict() == {}

    def test_tag_changes(self):
        update = LeadUpdate(
            name="Renamed",
            tags_to_add=[{"id": 5, "name": "ignored"}, {"name": "new"}],
            tags_to_delete=[{"id": 7}],
        )

        assert update.to_api_dict() == {
            "name": "Renamed",
            "_embedded": {
                "tags_to_add": [{"id": 5}, {"name": "new"}],
                "tags_to_delete": [{"id": 7}],
            },
        }

    def test_empty_tag_entries_dropped(self):
        update = LeadUpdate(tags_to_add=[{}], tags_to_delete=[{"name": ""}])
        assert update.to_api_dict() == {}


class TestContactSchemas:
    def test_contact_create(self):
        contact = ContactCreate(name="Jane Doe", first_name="Jane", last_name="", tags=[3])

        assert contact.to_api_dict() == {
            "name": "Jane Doe",
            "first_name": "Jane",
            "_embedded": {"tags": [{"id": 3}]},
        }

    def test_contact_update_only_supplied(self):
        update = ContactUpdate(responsible_user_id=11)
        assert update.to_api_dict() == {"responsible_user_id": 11}


class TestTags:
    @pytest.mark.parametrize(
        "value, expected",
        [
            ("vip", {"name": "vip"}),
            (4, {"id": 4}),
            ({"id": 4, "name": "vip"}, {"id": 4}),
            ({"name": "vip"}, {"name": "vip"}),
            ({}, {}),
        ],
    )
    def test_tag_ref(self, value, expected):
        assert TagRef.parse(value).to_api_dict() == expected

    def test_normalize_tags(self):
        assert normalize_tags(["a", {}, {"id": 2}]) == [{"name": "a"}, {"id": 2}]
        assert normalize_tags(None) == []


class TestCustomFields:
    def test_json_string(self):
        assert coerce_custom_fields('[{"field_id": 1}]') == [{"field_id": 1}]

    @pytest.mark.parametrize("value", [None, "", []])
    def test_absent(self, value):
        assert coerce_custom_fields(value) is None

    def test_invalid_json(self):
        with pytest.raises(InputValidationError):
            coerce_custom_fields("[not json")

    def test_not_a_list(self):
        with pytest.raises(InputValidationError):
            coerce_custom_fields({"field_id": 1})


class TestKommoAuth:
    def test_from_connection(self, kommo_connection):
        auth = KommoAuth.from_connection(kommo_connection)
        assert auth.access_token.get_secret_value() == "kommo_test_token"
        assert auth.require_subdomain() == "acme"

    def test_missing_subdomain(self):
        auth = KommoAuth.from_connection({"access_token": "t", "props": {}})
        with pytest.raises(ConfigurationError):
            auth.require_subdomain()

    def test_malformed_connection(self):
        with pytest.raises(ConfigurationError):
            KommoAuth.from_connection(None)


class TestResponseModels:
    def test_embedded_items(self):
        body = {"_embedded": {"leads": [{"id": 1}]}}
        assert embedded_items(body, "leads") == [{"id": 1}]
        assert embedded_items(None, "leads") == []
        assert embedded_items({"_embedded": {}}, "leads") == []

    def test_lead_label(self):
        assert KommoLead(id=1, name="Deal").label == "Deal"
        assert KommoLead(id=2).label == "Lead ID: 2"

    def test_contact_label(self):
        assert KommoContact(id=1, first_name="Jane", last_name="Doe").label == "Jane Doe"
        assert KommoContact(id=2).label == "Contact ID: 2"
