"""Basic NangoClient usage: list integrations, fetch one, handle a missing one.

Run with NANGO_API_KEY set:
    python -m examples.basic
"""

import asyncio
import os

from nango_gateway.client.client import NangoClient
from nango_gateway.client.models import ClientConfig
from nango_gateway.errors import NangoError, NotFoundError


async def main() -> None:
    config = ClientConfig(
        api_key=os.environ.get("NANGO_API_KEY", "your-api-key-here"),
        base_url=os.environ.get("NANGO_BASE_URL", "https://api.nango.dev"),
        timeout=30.0,
    )

    async with NangoClient(config) as client:
        print("=== Listing Integrations ===")
        try:
            integrations = await client.list_integrations()
        except NangoError as e:
            print(f"Error listing integrations: {e}")
            integrations = []
        else:
            print(f"Found {len(integrations)} integrations:")
            for integration in integrations:
                print(f"- ID: {integration.id}, Name: {integration.name}, Provider: {integration.provider}")

        if integrations:
            print("\n=== Getting Specific Integration ===")
            try:
                integration = await client.get_integration(integrations[0].id)
            except NangoError as e:
                print(f"Error getting integration: {e}")
            else:
                print("Integration Details:")
                print(f"  ID: {integration.id}")
                print(f"  Name: {integration.name}")
                print(f"  Provider: {integration.provider}")
                print(f"  Created: {integration.created_at}")
                print(f"  Updated: {integration.updated_at}")

        print("\n=== Error Handling Example ===")
        try:
            await client.get_integration("non-existent-id")
        except NotFoundError as e:
            print(f"Expected error: {e}")
        except NangoError as e:
            print(f"Request failed: {e}")


if __name__ == "__main__":
    asyncio.run(main())
