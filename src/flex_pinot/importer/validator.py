"""Validation of CSV headers and individual rows.

Header problems are fatal (SchemaError). Row problems raise RowError, which
the importer reports before moving on to the next row.
"""

from flex_pinot.client.exceptions import RowError, SchemaError
from flex_pinot.client.flex_client import ResourceId
from flex_pinot.config import ImportOptions
from flex_pinot.importer.csv_loader import Row
from flex_pinot.importer.lookups import ExistenceChecker
from flex_pinot.resources import ResourceType, get_info

REQUIRED_HEADERS = ("Type", "Ref")


def validate_headers(headers: list[str]) -> None:
    """Ensure the header row has the columns every row needs.

    Raises:
        SchemaError: If ``Type`` or ``Ref`` is missing
    """
    missing = [header for header in REQUIRED_HEADERS if header not in headers]
    if missing:
        raise SchemaError(f"Missing required CSV headers: {', '.join(missing)}")


class RowValidator:
    """Per-row checks run before anything is created."""

    def __init__(self, options: ImportOptions, checker: ExistenceChecker):
        self.options = options
        self.checker = checker

    def ensure_absent(self, ref: str) -> None:
        """Refuse to create a resource whose name is already taken.

        Skipped with --force, --skip-validation or --dry-run.
        """
        if not self.options.check_existing:
            return
        if self.checker.resource_exists(ref):
            raise RowError(
                f"Resource with name '{ref}' already exists. Use --force to create anyway.",
                warning=True,
            )

    def ensure_link(
        self,
        resource_type: ResourceType,
        ref: str,
        row: Row,
        storage_refs: dict[str, ResourceId],
    ) -> None:
        """Folders and inboxes must name a storage created earlier in this run."""
        if not get_info(resource_type).requires_link:
            return

        linked_ref = row.get("Link to")
        if not linked_ref:
            raise RowError(f"Missing 'Link to' field for {resource_type.value}: {ref}")

        # Dry runs may reference storages that were only simulated or skipped
        if not self.options.dry_run and linked_ref not in storage_refs:
            raise RowError(f"Referenced storage '{linked_ref}' not found")

    def ensure_dependencies(self, resource_type: ResourceType, row: Row) -> None:
        """Check that the workflow, owner and metadata an inbox names exist."""
        if resource_type is not ResourceType.INBOX or not self.options.check_dependencies:
            return

        workflow_id = row.get("WorkflowID")
        if workflow_id and not self.checker.workflow_exists(workflow_id):
            raise RowError(f"Workflow ID '{workflow_id}' not found")

        owner_id = row.get("WorkflowOwner")
        if owner_id and not self.checker.user_exists(owner_id):
            raise RowError(f"User ID '{owner_id}' not found")

        metadata_id = row.get("InboxMetadata")
        if metadata_id and not self.checker.metadata_exists(metadata_id):
            raise RowError(f"Metadata Definition ID '{metadata_id}' not found")
