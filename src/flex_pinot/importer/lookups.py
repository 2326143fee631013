"""Remote existence checks with per-run caching.

Every lookup has the same contract: it returns a bool and never raises. Any
failure to reach or understand Flex counts as "does not exist", and that
answer is cached like any other so a key is queried at most once per run.
"""

from collections.abc import Callable

from flex_pinot.client.exceptions import FlexPinotError
from flex_pinot.client.flex_client import FlexClient
from flex_pinot.utils.logging import get_logger

logger = get_logger(__name__)


class ExistenceCache:
    """Maps a queried key to the last observed existence result."""

    def __init__(self, kind: str):
        self.kind = kind
        self._results: dict[str, bool] = {}

    def __contains__(self, key: str) -> bool:
        return key in self._results

    def __len__(self) -> int:
        return len(self._results)

    def lookup(self, key: str, probe: Callable[[str], bool]) -> bool:
        """Return the cached result for ``key``, probing Flex on a miss.

        Args:
            key: Name or identifier to look up
            probe: Callable asking Flex whether ``key`` exists; may raise

        Returns:
            True if the object exists; False if it does not or the probe failed
        """
        if key in self._results:
            return self._results[key]

        try:
            exists = bool(probe(key))
        except (FlexPinotError, TypeError, ValueError) as e:
            logger.debug("existence_check_failed", kind=self.kind, key=key, error=str(e))
            exists = False

        self._results[key] = exists
        logger.debug("existence_checked", kind=self.kind, key=key, exists=exists)
        return exists


class ExistenceChecker:
    """The four existence lookups used during validation."""

    def __init__(self, client: FlexClient | None):
        self.client = client
        self.resources = ExistenceCache("resource")
        self.workflows = ExistenceCache("workflow")
        self.users = ExistenceCache("user")
        self.metadata = ExistenceCache("metadata")

    def _require_client(self) -> FlexClient:
        if self.client is None:
            raise FlexPinotError("No Flex client available for existence checks")
        return self.client

    def resource_exists(self, name: str) -> bool:
        """True if a resource with exactly this name exists."""
        return self.resources.lookup(
            name, lambda key: self._require_client().count_resources_named(key) > 0
        )

    def workflow_exists(self, workflow_id: str) -> bool:
        return self.workflows.lookup(
            workflow_id, lambda key: self._require_client().workflow_definition_exists(key)
        )

    def user_exists(self, user_id: str) -> bool:
        return self.users.lookup(user_id, lambda key: self._require_client().user_exists(key))

    def metadata_exists(self, metadata_id: str) -> bool:
        return self.metadata.lookup(
            metadata_id, lambda key: self._require_client().metadata_definition_exists(key)
        )
