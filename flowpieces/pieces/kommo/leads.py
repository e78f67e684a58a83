"""
Kommo lead actions.

- KommoCreateLeadAction: create_new_lead
- KommoUpdateLeadAction: update_lead (dynamic lead dropdown)
- KommoFindLeadAction: find_lead_by_id
"""

from __future__ import annotations

import logging
from typing import Any

import pydantic

from flowpieces.framework.base import ActionContext, DropdownOption, DropdownState, Property
from flowpieces.framework.errors import ConfigurationError
from flowpieces.integrations.base import IntegrationError
from flowpieces.integrations.kommo import KommoAuth, LeadCreate, LeadUpdate, coerce_custom_fields

from .common import (
    KommoAction,
    build_model,
    custom_fields_prop,
    id_list,
    require_value,
    tag_item_props,
    with_values,
)

logger = logging.getLogger(__name__)

LEAD_WITH_OPTIONS = (
    DropdownOption("Contacts", "contacts"),
    DropdownOption("Loss Reason", "loss_reason"),
    DropdownOption("Catalog Elements", "catalog_elements"),
    DropdownOption("Is Price Modified by Robot", "is_price_modified_by_robot"),
    DropdownOption("Only Deleted", "only_deleted"),
    DropdownOption("Source ID", "source_id"),
)


class KommoCreateLeadAction(KommoAction):
    """Create a lead with optional contact, company and tag associations."""

    @property
    def name(self) -> str:
        return "create_new_lead"

    @property
    def display_name(self) -> str:
        return "Create New Lead"

    @property
    def description(self) -> str:
        return "Adds a new lead to Kommo."

    @property
    def props(self) -> tuple[Property, ...]:
        return (
            Property.short_text("name", "Lead Name", required=True),
            Property.number("price", "Price"),
            Property.number(
                "status_id", "Status ID", description="The ID of the status (stage) the lead is in."
            ),
            Property.number(
                "pipeline_id", "Pipeline ID", description="The ID of the pipeline the lead belongs to."
            ),
            Property.number(
                "responsible_user_id",
                "Responsible User ID",
                description="The ID of the user responsible for the lead.",
            ),
            Property.array(
                "contact_ids",
                "Contact IDs",
                description="An array of contact IDs to associate with the lead.",
                properties=(Property.number("id", "Contact ID", required=True),),
            ),
            Property.number(
                "company_id",
                "Company ID",
                description="The ID of the company to associate with the lead.",
            ),
            Property.array(
                "tags",
                "Tags",
                description="An array of tag names to add to the lead.",
                properties=(Property.short_text("name", "Tag Name", required=True),),
            ),
            custom_fields_prop(
                'JSON array of custom field values, e.g., [{"field_id": 123, "values": [{"value": "data"}]}]'
            ),
        )

    async def run(self, context: ActionContext) -> Any:
        props = context.props
        KommoAuth.from_connection(context.auth).require_subdomain()
        lead = build_model(
            LeadCreate,
            name=props.get("name"),
            price=props.get("price"),
            status_id=props.get("status_id"),
            pipeline_id=props.get("pipeline_id"),
            responsible_user_id=props.get("responsible_user_id"),
            contact_ids=id_list(props.get("contact_ids")),
            company_id=props.get("company_id"),
            tags=props.get("tags") or [],
            custom_fields_values=coerce_custom_fields(props.get("custom_fields_values")),
        )

        async with self.client(context.auth) as client:
            return await client.create_lead(lead)


class KommoUpdateLeadAction(KommoAction):
    """Update a lead. Only the supplied fields are changed."""

    @property
    def name(self) -> str:
        return "update_lead"

    @property
    def display_name(self) -> str:
        return "Update Lead"

    @property
    def description(self) -> str:
        return "Updates an existing lead in Kommo."

    @property
    def props(self) -> tuple[Property, ...]:
        return (
            Property.dropdown(
                "lead_id",
                "Lead ID",
                description="The ID of the lead to update. Choose from the list or map a custom ID.",
                required=True,
            ),
            Property.short_text("name", "New Lead Name"),
            Property.number("price", "New Price"),
            Property.number(
                "status_id",
                "New Status ID",
                description="The ID of the new status (stage) for the lead.",
            ),
            Property.number(
                "pipeline_id",
                "New Pipeline ID",
                description="The ID of the new pipeline for the lead.",
            ),
            Property.number(
                "responsible_user_id",
                "New Responsible User ID",
                description="The ID of the new user responsible for the lead.",
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
        if prop_name != "lead_id":
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
                leads = await client.list_leads()
        except (IntegrationError, pydantic.ValidationError) as e:
            return DropdownState.failure("Error fetching leads.", e)

        if not leads:
            return DropdownState.failure("Could not load leads.", "no leads returned")
        return DropdownState.of([DropdownOption(lead.label, lead.id) for lead in leads])

    async def run(self, context: ActionContext) -> Any:
        props = context.props
        # Connection is checked before inputs
        KommoAuth.from_connection(context.auth).require_subdomain()
        lead_id = require_value(props, "lead_id", "Lead ID")

        update = build_model(
            LeadUpdate,
            name=props.get("name"),
            price=props.get("price"),
            status_id=props.get("status_id"),
            pipeline_id=props.get("pipeline_id"),
            responsible_user_id=props.get("responsible_user_id"),
            tags_to_add=props.get("tags_to_add") or [],
            tags_to_delete=props.get("tags_to_delete") or [],
            custom_fields_values=coerce_custom_fields(props.get("custom_fields_values")),
        )

        async with self.client(context.auth) as client:
            return await client.update_lead(lead_id, update)


class KommoFindLeadAction(KommoAction):
    @property
    def name(self) -> str:
        return "find_lead_by_id"

    @property
    def display_name(self) -> str:
        return "Find Lead by ID"

    @property
    def description(self) -> str:
        return "Retrieves the details of a specific lead by its ID."

    @property
    def props(self) -> tuple[Property, ...]:
        return (
            Property.number(
                "lead_id", "Lead ID", description="The ID of the lead to retrieve.", required=True
            ),
            Property.multi_select(
                "with_param",
                "Include Related Entities (With)",
                description="Select which related entities to include in the response.",
                options=LEAD_WITH_OPTIONS,
            ),
        )

    async def run(self, context: ActionContext) -> Any:
        KommoAuth.from_connection(context.auth).require_subdomain()
        lead_id = require_value(context.props, "lead_id", "Lead ID")

        async with self.client(context.auth) as client:
            return await client.get_lead(lead_id, with_=with_values(context.props))
