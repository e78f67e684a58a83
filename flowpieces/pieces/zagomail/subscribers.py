"""
Zagomail subscriber actions.

Lookups treat Zagomail's "The subscriber does not exist in this list"
error as a structured not-found result; every other failure raises
ActionError.
"""

from __future__ import annotations

import logging
from typing import Any

from flowpieces.framework.base import ActionContext, DropdownOption, DropdownState, Property
from flowpieces.framework.errors import ActionError, ConfigurationError, InputValidationError
from flowpieces.integrations.base import IntegrationError
from flowpieces.integrations.zagomail import SUBSCRIBER_NOT_FOUND, ZagomailAPIError

from .common import ZagomailAction, optional_text, require_id, require_text

logger = logging.getLogger(__name__)


def _not_found(message: str) -> dict[str, Any]:
    return {"message": message, "found": False}


class ZagomailCreateSubscriberAction(ZagomailAction):
    @property
    def name(self) -> str:
        return "create_subscriber"

    @property
    def display_name(self) -> str:
        return "Create Subscriber"

    @property
    def description(self) -> str:
        return "Creates a new subscriber in a list."

    @property
    def props(self) -> tuple[Property, ...]:
        return (
            Property.short_text(
                "list_uid",
                "List UID",
                description="The UID of the list to add the subscriber to.",
                required=True,
            ),
            Property.short_text(
                "email", "Email", description="The subscriber's email address.", required=True
            ),
            Property.short_text("fname", "First Name", description="The subscriber's first name."),
            Property.short_text("lname", "Last Name", description="The subscriber's last name."),
        )

    async def run(self, context: ActionContext) -> dict[str, Any]:
        props = context.props
        list_uid = require_text(props, "list_uid", "List UID")
        email = require_text(props, "email", "Email")

        try:
            async with self.client(context.auth) as client:
                return await client.create_subscriber(
                    list_uid,
                    email,
                    fname=optional_text(props, "fname"),
                    lname=optional_text(props, "lname"),
                )
        except IntegrationError as e:
            raise ActionError(f"Error creating Zagomail subscriber: {e}") from e


class ZagomailUpdateSubscriberAction(ZagomailAction):
    """Update a subscriber. At least one of email, fname, lname is required."""

    @property
    def name(self) -> str:
        return "update_subscriber"

    @property
    def display_name(self) -> str:
        return "Update Subscriber"

    @property
    def description(self) -> str:
        return "Updates an existing subscriber in a list."

    @property
    def props(self) -> tuple[Property, ...]:
        return (
            Property.dropdown(
                "list_uid",
                "List",
                description="The list where the subscriber exists.",
                required=True,
            ),
            Property.short_text(
                "subscriber_uid",
                "Subscriber UID",
                description="The UID of the subscriber to update.",
                required=True,
            ),
            Property.short_text(
                "email",
                "Email",
                description="The new email address for the subscriber. (Optional)",
            ),
            Property.short_text(
                "fname", "First Name", description="The new first name for the subscriber. (Optional)"
            ),
            Property.short_text(
                "lname", "Last Name", description="The new last name for the subscriber. (Optional)"
            ),
        )

    async def options(self, prop_name: str, auth: Any) -> DropdownState:
        if prop_name != "list_uid":
            return await super().options(prop_name, auth)

        if not auth:
            return DropdownState.unavailable("Please authenticate first")

        try:
            async with self.client(auth) as client:
                lists = await client.get_all_lists()
        except (ConfigurationError, IntegrationError) as e:
            return DropdownState.failure("Error loading lists. Check the logs.", e)

        if not lists:
            return DropdownState.unavailable("No lists found in your account.")
        return DropdownState.of([DropdownOption(mail_list.name, mail_list.uid) for mail_list in lists])

    async def run(self, context: ActionContext) -> dict[str, Any]:
        props = context.props
        list_uid = require_text(props, "list_uid", "List")
        subscriber_uid = require_text(props, "subscriber_uid", "Subscriber UID")

        changes = {
            "email": optional_text(props, "email"),
            "fname": optional_text(props, "fname"),
            "lname": optional_text(props, "lname"),
        }
        if not any(changes.values()):
            raise InputValidationError("No update fields provided.")

        try:
            async with self.client(context.auth) as client:
                return await client.update_subscriber(list_uid, subscriber_uid, **changes)
        except IntegrationError as e:
            raise ActionError(f"Error updating Zagomail subscriber: {e}") from e


class ZagomailTagSubscriberAction(ZagomailAction):
    @property
    def name(self) -> str:
        return "tag_subscriber"

    @property
    def display_name(self) -> str:
        return "Tag Subscriber"

    @property
    def description(self) -> str:
        return "Adds a tag to an existing subscriber."

    @property
    def props(self) -> tuple[Property, ...]:
        return (
            Property.short_text(
                "list_uid",
                "List UID",
                description="The UID of the list where the subscriber exists.",
                required=True,
            ),
            Property.short_text(
                "subscriber_uid",
                "Subscriber UID",
                description="The UID of the subscriber to tag.",
                required=True,
            ),
            Property.number(
                "ztag_id",
                "Tag ID (ztag_id)",
                description="The numerical ID of the tag to add.",
                required=True,
            ),
        )

    async def run(self, context: ActionContext) -> dict[str, Any]:
        props = context.props
        list_uid = require_text(props, "list_uid", "List UID")
        subscriber_uid = require_text(props, "subscriber_uid", "Subscriber UID")
        ztag_id = require_id(props, "ztag_id", "Tag ID")

        try:
            async with self.client(context.auth) as client:
                envelope = await client.add_tag(list_uid, subscriber_uid, ztag_id)
        except IntegrationError as e:
            raise ActionError(f"Error tagging Zagomail subscriber: {e}") from e

        return {"success": True, "message": envelope.message or "Tag added successfully!"}


class ZagomailFindSubscriberByEmailAction(ZagomailAction):
    @property
    def name(self) -> str:
        return "find_subscriber_by_email"

    @property
    def display_name(self) -> str:
        return "Find Subscriber by Email"

    @property
    def description(self) -> str:
        return "Searches for a subscriber in a list by their email address."

    @property
    def props(self) -> tuple[Property, ...]:
        return (
            Property.short_text(
                "list_uid",
                "List UID",
                description="The UID of the list to search within.",
                required=True,
            ),
            Property.short_text(
                "email", "Email", description="The email address to search for.", required=True
            ),
        )

    async def run(self, context: ActionContext) -> dict[str, Any]:
        props = context.props
        list_uid = require_text(props, "list_uid", "List UID")
        email = require_text(props, "email", "Email")

        try:
            async with self.client(context.auth) as client:
                record = await client.search_by_email(list_uid, email)
        except ZagomailAPIError as e:
            if SUBSCRIBER_NOT_FOUND in str(e):
                return _not_found("Subscriber not found.")
            raise ActionError(f"Error finding Zagomail subscriber by email: {e}") from e
        except IntegrationError as e:
            raise ActionError(f"Error finding Zagomail subscriber by email: {e}") from e

        if record is None:
            return _not_found("Subscriber not found or API returned success without data.")
        return record


class ZagomailGetSubscriberDetailsAction(ZagomailAction):
    @property
    def name(self) -> str:
        return "get_subscriber_details"

    @property
    def display_name(self) -> str:
        return "Get Subscriber Details"

    @property
    def description(self) -> str:
        return "Retrieves the details of a specific subscriber in a list."

    @property
    def props(self) -> tuple[Property, ...]:
        return (
            Property.short_text(
                "list_uid",
                "List UID",
                description="The UID of the list where the subscriber exists.",
                required=True,
            ),
            Property.short_text(
                "subscriber_uid",
                "Subscriber UID",
                description="The UID of the subscriber to retrieve.",
                required=True,
            ),
        )

    async def run(self, context: ActionContext) -> dict[str, Any]:
        props = context.props
        list_uid = require_text(props, "list_uid", "List UID")
        subscriber_uid = require_text(props, "subscriber_uid", "Subscriber UID")

        try:
            async with self.client(context.auth) as client:
                record = await client.get_subscriber(list_uid, subscriber_uid)
        except ZagomailAPIError as e:
            if SUBSCRIBER_NOT_FOUND in str(e):
                return _not_found("Subscriber not found.")
            raise ActionError(f"Error retrieving Zagomail subscriber details: {e}") from e
        except IntegrationError as e:
            raise ActionError(f"Error retrieving Zagomail subscriber details: {e}") from e

        if record is None:
            return _not_found("Subscriber details not found or API returned success without data.")
        return record
