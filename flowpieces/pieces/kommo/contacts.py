"""
Kommo contact actions.

- KommoCreateContactAction: create_new_contact
- KommoUpdateContactAction: update_contact (dynamic contact dropdown)
- KommoFindContactAction: find_contact_by_email
"""

from __future__ import annotations

import logging
from typing import Any

import pydantic

from flowpieces.framework.base import ActionContext, DropdownOption, DropdownState, Property
from flowpieces.framework.errors import ConfigurationError
from flowpieces.integrations.base import IntegrationError
from flowpieces.integrations.kommo import (
    ContactCreate,
    ContactUpdate,
    KommoAuth,
    coerce_custom_fields,
)

from .common import (
    KommoAction,
    build_model,
    custom_fields_prop,
    require_value,
    tag_item_props,
    with_values,
)

logger = logging.getLogger(__name__)

CONTACT_WITH_OPTIONS = (
    DropdownOption("Leads", "leads"),
    DropdownOption("Catalog Elements", "catalog_elements"),
)


class KommoCreateContactAction(KommoAction):
    @property
    def name(self) -> str:
        return "create_new_contact"

    @property
    def display_name(self) -> str:
        return "Create New Contact"

    @property
    def description(self) -> str:
        return "Adds a new contact to Kommo."

    @property
    def props(self) -> tuple[Property, ...]:
        return (
            Property.short_text(
                "name", "Full Name", description="Contact's full name.", required=True
            ),
            Property.short_text("first_name", "First Name"),
            Property.short_text("last_name", "Last Name"),
            Property.number(
                "responsible_user_id",
                "Responsible User ID",
                description="The ID of the user responsible for the contact.",
            ),
            custom_fields_prop(
                'JSON array of custom field values, e.g., [{"field_id": 123, "values": [{"value": "data"}]}]'
            ),
            Property.array(
                "tags",
                "Tags",
                description=(
                    "An array of tags to associate with the contact. "
                    "Provide name or ID for each tag."
                ),
                properties=(
                    Property.number("id", "Tag ID"),
                    Property.short_text("name", "Tag Name"),
                ),
            ),
        )

    async def run(self, context: ActionContext) -> Any:
        props = context.props
        KommoAuth.from_connection(context.auth).require_subdomain()

        contact = build_model(
            ContactCreate,
            name=props.get("name"),
            first_name=props.get("first_name"),
            last_name=props.get("last_name"),
            responsible_user_id=props.get("responsible_user_id"),
            tags=props.get("tags") or [],
            custom_fields_values=coerce_custom_fields(props.get("custom_fields_values")),
        )

        async with self.client(context.auth) as client:
            return await client.create_contact(contact)


class KommoUpdateContactAction(KommoAction):
    """Update a contact. Only the supplied fields are changed."""

    @property
    def name(self) -> str:
        return "update_contact"

    @property
    def display_name(self) -> str:
        return "Update Contact"

    @property
    def description(self) -> str:
        return "Updates an existing contact in Kommo."

    @property
    def props(self) -> tuple[Property, ...]:
        return (
            Property.dropdown(
                "contact_id",
                "Contact ID",
                description=(
                    "The ID of the contact to update. Choose from the list or map a custom ID."
                ),
                required=True,
            ),
            Property.short_text("name", "New Full Name"),
            Property.short_text("first_name", "New First Name"),
            Property.short_text("last_name", "New Last Name"),
            Property.number(
                "responsible_user_id",
                "New Responsible User ID",
                description="The ID of the new user responsible for the contact.",
            ),
            custom_fields_prop(
                "JSON array of custom field values to update, e.g., "
                '[{"field_id": 123, "values": [{"value": "new_data"}]}]'
            ),
            Property.array(
                "tags_to_add",
                "Tags to Add",
                description="Array of tags to add. Provide either name or ID for each tag.",
                properties=tag_item_props("Add"),
            ),
            Property.array(
                "tags_to_delete",
                "Tags to Delete",
                description="Array of tags to delete. Provide either name or ID for each tag.",
                properties=tag_item_props("Delete"),
            ),
        )

    async def options(self, prop_name: str, auth: Any) -> DropdownState:
        if prop_name != "contact_id":
            return await super().options(prop_name, auth)

        if not auth:
            return DropdownState.unavailable(
                "Please authenticate first and connect your Kommo account."
            )
        try:
            KommoAuth.from_connection(auth).require_subdomain()
        except (ConfigurationError, pydantic.ValidationError):
            return DropdownState.unavailable("Account subdomain is missing from connection.")

        try:
            async with self.client(auth) as client:
                contacts = await client.list_contacts()
        except (IntegrationError, pydantic.ValidationError) as e:
            return DropdownState.failure("Error fetching contacts.", e)

        if not contacts:
            return DropdownState.failure("Could not load contacts.", "no contacts returned")
        return DropdownState.of(
            [DropdownOption(contact.label, contact.id) for contact in contacts]
        )

    async def run(self, context: ActionContext) -> Any:
        props = context.props
        KommoAuth.from_connection(context.auth).require_subdomain()
        contact_id = require_value(props, "contact_id", "Contact ID")

        update = build_model(
            ContactUpdate,
            name=props.get("name"),
            first_name=props.get("first_name"),
            last_name=props.get("last_name"),
            responsible_user_id=props.get("responsible_user_id"),
            tags_to_add=props.get("tags_to_add") or [],
            tags_to_delete=props.get("tags_to_delete") or [],
            custom_fields_values=coerce_custom_fields(props.get("custom_fields_values")),
        )

        async with self.client(context.auth) as client:
            return await client.update_contact(contact_id, update)


class KommoFindContactAction(KommoAction):
    """Search contacts by email. An empty search yields []."""

    @property
    def name(self) -> str:
        return "find_contact_by_email"

    @property
    def display_name(self) -> str:
        return "Find Contact by Email"

    @property
    def description(self) -> str:
        return (
            "Looks up contacts that match a specific email address. "
            "Returns a list of contacts found."
        )

    @property
    def props(self) -> tuple[Property, ...]:
        return (
            Property.short_text(
                "email",
                "Email Address",
                description="The email address to search for.",
                required=True,
            ),
            Property.multi_select(
                "with_param",
                "Include Related Entities (With)",
                description="Select which related entities to include in the response.",
                options=CONTACT_WITH_OPTIONS,
            ),
        )

    async def run(self, context: ActionContext) -> list[dict[str, Any]]:
        KommoAuth.from_connection(context.auth).require_subdomain()
        email = require_value(context.props, "email", "Email")

        async with self.client(context.auth) as client:
            contacts = await client.find_contacts(email, with_=with_values(context.props))

        logger.info(f"[kommo.find_contact_by_email] Found {len(contacts)} contact(s)")
        return contacts
