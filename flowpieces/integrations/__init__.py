"""
Vendor Integrations Layer.

HTTP clients for the services the bundled pieces talk to. Each
integration follows the same pattern:

1. Client: Handles authentication and API communication
2. Schemas: Pydantic models for credentials, payloads and records

Directory Structure:
    integrations/
    ├── base.py           # IntegrationClient and the error hierarchy
    ├── kommo/            # Kommo CRM (REST v4, OAuth2 bearer)
    │   ├── client.py
    │   └── schemas.py
    └── zagomail/         # Zagomail email marketing (publicKey in body)
        ├── client.py
        └── schemas.py

Usage:
    from flowpieces.integrations.kommo import KommoClient

    async with KommoClient.from_auth(connection) as client:
        contacts = await client.find_contacts("jane@example.com")
"""

from flowpieces.integrations.base import (
    AuthenticationError,
    IntegrationClient,
    IntegrationConfig,
    IntegrationError,
    NotFoundError,
    RateLimitError,
    ValidationError,
)

__all__ = [
    "IntegrationClient",
    "IntegrationConfig",
    "IntegrationError",
    "AuthenticationError",
    "RateLimitError",
    "NotFoundError",
    "ValidationError",
]
