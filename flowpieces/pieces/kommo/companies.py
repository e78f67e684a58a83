"""Kommo company actions."""

from __future__ import annotations

from typing import Any

from flowpieces.framework.base import ActionContext, DropdownOption, Property
from flowpieces.integrations.kommo import KommoAuth

from .common import KommoAction, require_value, with_values

COMPANY_WITH_OPTIONS = (
    DropdownOption("Leads", "leads"),
    DropdownOption("Contacts", "contacts"),
    DropdownOption("Catalog Elements", "catalog_elements"),
)


class KommoFindCompanyAction(KommoAction):
    @property
    def name(self) -> str:
        return "find_company"

    @property
    def display_name(self) -> str:
        return "Find Company"

    @property
    def description(self) -> str:
        return "Finds companies by partial or full name. Returns a list of companies found."

    @property
    def props(self) -> tuple[Property, ...]:
        return (
            Property.short_text(
                "name_query",
                "Name Query",
                description="Partial or full name of the company to search for.",
                required=True,
            ),
            Property.multi_select(
                "with_param",
                "Include Related Entities (With)",
                description="Select which related entities to include in the response.",
                options=COMPANY_WITH_OPTIONS,
            ),
        )

    async def run(self, context: ActionContext) -> list[dict[str, Any]]:
        KommoAuth.from_connection(context.auth).require_subdomain()
        query = require_value(context.props, "name_query", "Name query")

        async with self.client(context.auth) as client:
            return await client.find_companies(query, with_=with_values(context.props))
