"""Resource importer: drives the dependency-ordered import passes.

The CSV is loaded once and walked three times, storage first, then folders,
then inboxes, because folders and inboxes mount on storage resources whose
Flex ids only become known once the storage pass has created them.

Per row the importer runs: type/ref filter, existence guard, link check,
dependency check, payload build, then either the dry-run short-circuit or
create, configure, tag and enable. A problem with one row is reported and the
run moves on; only setup problems (bad CSV headers, no account) are fatal.
"""

import json
from dataclasses import dataclass, field
from pathlib import Path

from flex_pinot.client.exceptions import APIError, FlexPinotError, RowError, SetupError
from flex_pinot.client.flex_client import FlexClient, ResourceId
from flex_pinot.config import RunConfig
from flex_pinot.importer.csv_loader import CsvTable, Row, load_csv
from flex_pinot.importer.lookups import ExistenceChecker
from flex_pinot.importer.payloads import build_configuration, build_create_payload, parse_tags
from flex_pinot.importer.validator import RowValidator, validate_headers
from flex_pinot.reporting.console import ImportReporter, RowResult, RowStatus
from flex_pinot.resources import ResourceType, ResourceTypeInfo, get_import_order, is_valid_type
from flex_pinot.utils.logging import get_logger, sanitize_payload, truncate_payload

logger = get_logger(__name__)

DRY_RUN_ACCOUNT_ID = "dry-run-account-id"


def dry_run_storage_id(ref: str) -> str:
    return f"dry-run-storage-id-{ref}"


def describe_failure(error: FlexPinotError) -> str:
    """Render an API failure as `` (status): body`` or ``: error`` for the console."""
    if isinstance(error, APIError) and error.status_code:
        body = error.response or {}
        if set(body) == {"detail"}:
            text = str(body["detail"])
        else:
            text = json.dumps(body, default=str)
        return f" ({error.status_code}): {text}"
    return f": {error}"


@dataclass
class ImportRunContext:
    """Mutable state owned by one import run.

    Attributes:
        account_id: Account every created resource is made visible to
        checker: Existence lookups and their caches
        storage_refs: Storage ``Ref`` -> Flex resource id, filled by the storage pass
        results: Outcome of every processed row, in processing order
    """

    account_id: ResourceId
    checker: ExistenceChecker
    storage_refs: dict[str, ResourceId] = field(default_factory=dict)
    results: list[RowResult] = field(default_factory=list)


class ResourceImporter:
    """Creates Flex resources from a CSV file.

    Args:
        client: Flex API client; may be None for dry runs
        config: Immutable run configuration
        reporter: Console reporter for user-facing messages
    """

    def __init__(
        self,
        client: FlexClient | None,
        config: RunConfig,
        reporter: ImportReporter | None = None,
    ):
        self.client = client
        self.config = config
        self.options = config.options
        self.reporter = reporter or ImportReporter()

    def run(self, csv_path: str | Path) -> list[RowResult]:
        """Import every row of the CSV file.

        Raises:
            InputError: If the CSV cannot be read
            SchemaError: If required headers are missing
            SetupError: If account discovery fails
        """
        logger.info("import_started", csv_path=str(csv_path), dry_run=self.options.dry_run)

        table = load_csv(csv_path)
        validate_headers(table.headers)
        self._warn_unknown_types(table)

        context = ImportRunContext(
            account_id=self.discover_account(),
            checker=ExistenceChecker(self.client),
        )

        for index, info in enumerate(get_import_order()):
            self.reporter.pass_started(index, info)
            self.import_pass(context, table, info)

        logger.info("import_finished", rows=len(context.results))
        return context.results

    def discover_account(self) -> ResourceId:
        """Return the id of the first account visible to the user.

        Raises:
            SetupError: If the call fails or no account is returned
        """
        if self.options.dry_run:
            self.reporter.info(f"Using placeholder Account ID for dry run: {DRY_RUN_ACCOUNT_ID}")
            return DRY_RUN_ACCOUNT_ID

        if self.client is None:
            raise SetupError("Error while fetching account ID: no Flex client configured")

        logger.debug("discovering_account")
        try:
            accounts = self.client.list_accounts()
        except FlexPinotError as e:
            raise SetupError(f"Error while fetching account ID: {e}") from e

        first = accounts[0] if accounts else None
        account_id = first.get("id") if isinstance(first, dict) else None
        if account_id is None:
            raise SetupError("Error while fetching account ID: No account ID found in response.")

        self.reporter.info(f"Auto-discovered Account ID: {account_id}")
        return account_id

    def _warn_unknown_types(self, table: CsvTable) -> None:
        for line, row in table.iter_rows():
            type_name = (row.get("Type") or "").lower()
            if type_name and not is_valid_type(type_name):
                logger.warning("unknown_resource_type", line=line, type=row.get("Type"))

    def import_pass(
        self, context: ImportRunContext, table: CsvTable, info: ResourceTypeInfo
    ) -> None:
        """Process every row whose Type matches this pass."""
        for line, row in table.iter_rows():
            if (row.get("Type") or "").lower() != info.name:
                continue

            ref = row.get("Ref") or ""
            if not ref:
                self.reporter.row_skipped(line, "Missing 'Ref' value")
                context.results.append(
                    RowResult(info.name, ref, line, RowStatus.SKIPPED, detail="Missing 'Ref' value")
                )
                continue

            context.results.append(self.import_row(context, info, ref, row, line))

    def import_row(
        self,
        context: ImportRunContext,
        info: ResourceTypeInfo,
        ref: str,
        row: Row,
        line: int,
    ) -> RowResult:
        """Validate, create, configure, tag and enable one resource."""
        self.reporter.resource_started(info, ref)
        resource_type = info.resource_type
        validator = RowValidator(self.options, context.checker)

        try:
            validator.ensure_absent(ref)
            validator.ensure_link(resource_type, ref, row, context.storage_refs)
            validator.ensure_dependencies(resource_type, row)
            create_payload = build_create_payload(info, ref, row, context.account_id).to_wire()
            configuration = build_configuration(resource_type, row, context.storage_refs).to_wire()
        except RowError as e:
            if e.warning:
                self.reporter.warning(e.message)
                status = RowStatus.SKIPPED
            else:
                self.reporter.error(e.message)
                status = RowStatus.FAILED
            logger.debug("row_rejected", ref=ref, line=line, reason=e.message)
            return RowResult(info.name, ref, line, status, detail=e.message)

        if self.options.dry_run:
            return self._dry_run(context, info, ref, line, create_payload, configuration)

        return self._create(context, info, ref, row, line, create_payload, configuration)

    def _dry_run(
        self,
        context: ImportRunContext,
        info: ResourceTypeInfo,
        ref: str,
        line: int,
        create_payload: dict,
        configuration: dict,
    ) -> RowResult:
        self.reporter.info(f"DRY RUN: Would create {info.name} resource with ref: {ref}")
        if self.options.verbose:
            max_size = self.config.max_payload_size
            logger.debug(
                "dry_run_payloads",
                ref=ref,
                create=truncate_payload(sanitize_payload(create_payload), max_size),
                configuration=truncate_payload(sanitize_payload(configuration), max_size),
            )

        resource_id = None
        if info.resource_type is ResourceType.STORAGE:
            resource_id = dry_run_storage_id(ref)
            context.storage_refs[ref] = resource_id
        return RowResult(info.name, ref, line, RowStatus.DRY_RUN, resource_id=resource_id)

    def _create(
        self,
        context: ImportRunContext,
        info: ResourceTypeInfo,
        ref: str,
        row: Row,
        line: int,
        create_payload: dict,
        configuration: dict,
    ) -> RowResult:
        assert self.client is not None

        try:
            created = self.client.create_resource(create_payload)
        except FlexPinotError as e:
            message = f"Create failed{describe_failure(e)}"
            self.reporter.error(message)
            return RowResult(info.name, ref, line, RowStatus.FAILED, detail=message)

        resource_id = created.get("id")
        if resource_id in (None, ""):
            message = f"Could not extract ID for {ref}"
            self.reporter.error(message)
            return RowResult(info.name, ref, line, RowStatus.FAILED, detail=message)

        logger.info("resource_created", resource_type=info.name, ref=ref, resource_id=resource_id)

        # Each follow-up step reports on its own; one failing does not stop the next
        problems = [
            problem
            for problem in (
                self._configure(resource_id, configuration),
                self._apply_tags(resource_id, row.get("Tags")),
                self._enable(resource_id),
            )
            if problem
        ]

        if info.resource_type is ResourceType.STORAGE:
            context.storage_refs[ref] = resource_id
            logger.debug("storage_id_mapped", ref=ref, resource_id=resource_id)

        return RowResult(
            info.name,
            ref,
            line,
            RowStatus.PARTIAL if problems else RowStatus.CREATED,
            resource_id=resource_id,
            detail="; ".join(problems) or None,
        )

    def _configure(self, resource_id: ResourceId, configuration: dict) -> str | None:
        try:
            self.client.configure_resource(resource_id, configuration)
        except FlexPinotError as e:
            message = f"Config failed{describe_failure(e)}"
            self.reporter.error(message)
            return message
        self.reporter.success("Configured", icon="⚙️")
        return None

    def _apply_tags(self, resource_id: ResourceId, raw_tags: str | None) -> str | None:
        tags = parse_tags(raw_tags)
        if not tags:
            return None

        self.reporter.info(f"Applying tags: {', '.join(tags)}", icon="🏷️")
        try:
            self.client.add_tags(resource_id, tags)
        except FlexPinotError as e:
            message = f"Tagging failed{describe_failure(e)}"
            self.reporter.warning(message)
            return message
        self.reporter.success("Tags applied", icon="🏷️")
        return None

    def _enable(self, resource_id: ResourceId) -> str | None:
        try:
            self.client.enable_resource(resource_id)
        except FlexPinotError as e:
            message = f"Enable failed{describe_failure(e)}"
            self.reporter.warning(message)
            return message
        self.reporter.success("Enabled", icon="🟢")
        return None
