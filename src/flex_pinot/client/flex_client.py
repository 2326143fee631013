"""Flex API client.

Thin wrappers around the Flex endpoints used by the importer.
"""

from typing import Any
from urllib.parse import quote_plus

from flex_pinot.client.base_client import BaseAPIClient
from flex_pinot.client.exceptions import APIError
from flex_pinot.utils.logging import get_logger

logger = get_logger(__name__)

ResourceId = int | str


class FlexClient(BaseAPIClient):
    """Client for the Flex resource API."""

    def list_accounts(self) -> list[dict[str, Any]]:
        """Return the accounts visible to the authenticated user."""
        data = self.get("api/accounts")
        return list(data.get("accounts") or []) if isinstance(data, dict) else []

    def count_resources_named(self, name: str) -> int:
        """Return how many resources carry exactly this name."""
        data = self.get(f"api/resources;name={quote_plus(name)}")
        count = data.get("totalCount", 0) if isinstance(data, dict) else 0
        if isinstance(count, bool) or not isinstance(count, int):
            raise APIError(
                message=f"Unexpected totalCount in resource lookup: {count!r}",
                response=data if isinstance(data, dict) else None,
            )
        return count

    def probe(self, endpoint: str) -> bool:
        """Return True if GET on the endpoint answers 200 OK.

        Raises:
            TransportError: For network-related errors
        """
        return self.send("GET", endpoint).status_code == 200

    def workflow_definition_exists(self, workflow_id: str) -> bool:
        return self.probe(f"api/workflowDefinitions/{workflow_id}")

    def user_exists(self, user_id: str) -> bool:
        return self.probe(f"api/users/{user_id}")

    def metadata_definition_exists(self, metadata_id: str) -> bool:
        return self.probe(f"api/metadataDefinitions/{metadata_id}")

    def create_resource(self, payload: dict[str, Any]) -> dict[str, Any]:
        """Create a resource; returns the created resource as sent back by Flex."""
        result = self.post("api/resources", json_data=payload)
        return result if isinstance(result, dict) else {}

    def configure_resource(self, resource_id: ResourceId, configuration: dict[str, Any]) -> Any:
        return self.put(f"api/resources/{resource_id}/configuration", json_data=configuration)

    def add_tags(self, resource_id: ResourceId, tags: list[str]) -> Any:
        return self.post(f"api/resources/{resource_id}/tags", json_data=tags)

    def perform_action(
        self, resource_id: ResourceId, action: str, options: dict[str, Any] | None = None
    ) -> Any:
        """Run a lifecycle action (e.g. ``enable``) on a resource."""
        logger.debug("resource_action", resource_id=resource_id, action=action)
        return self.post(
            f"api/resources/{resource_id}/actions",
            json_data={"action": action, "options": options or {}},
        )

    def enable_resource(self, resource_id: ResourceId) -> Any:
        return self.perform_action(resource_id, "enable")
