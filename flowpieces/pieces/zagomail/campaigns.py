"""Zagomail campaign actions."""

from __future__ import annotations

from typing import Any

from flowpieces.framework.base import ActionContext, Property
from flowpieces.framework.errors import ActionError
from flowpieces.integrations.base import IntegrationError

from .common import ZagomailAction, require_text


class ZagomailGetCampaignStatsAction(ZagomailAction):
    """Delivery statistics of one campaign. Unknown campaigns yield found=False."""

    @property
    def name(self) -> str:
        return "get_campaign_stats"

    @property
    def display_name(self) -> str:
        return "Get Campaign Stats"

    @property
    def description(self) -> str:
        return "Retrieves statistics for a specific campaign."

    @property
    def props(self) -> tuple[Property, ...]:
        return (
            Property.short_text(
                "campaign_uid",
                "Campaign UID",
                description="The UID of the campaign to retrieve stats for.",
                required=True,
            ),
            Property.number(
                "page",
                "Page",
                description=(
                    "Page number for pagination "
                    "(if stats are paginated, usually not for single campaign stats)."
                ),
            ),
            Property.number(
                "perPage",
                "Per Page",
                description="Number of items per page (if stats are paginated).",
            ),
        )

    async def run(self, context: ActionContext) -> Any:
        props = context.props
        campaign_uid = require_text(props, "campaign_uid", "Campaign UID")

        try:
            async with self.client(context.auth) as client:
                return await client.get_campaign_stats(
                    campaign_uid,
                    page=props.get("page"),
                    per_page=props.get("perPage"),
                )
        except IntegrationError as e:
            if "not found" in str(e).lower():
                return {"message": "Campaign not found.", "found": False}
            raise ActionError(f"Error retrieving Zagomail campaign stats: {e}") from e
