"""Request payloads for creating and configuring Flex resources.

Each resource type has its own configuration model; ``build_configuration``
picks the variant for a row and ``to_wire()`` renders the JSON shape Flex
expects.
"""

import re
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from flex_pinot.client.exceptions import RowError
from flex_pinot.client.flex_client import ResourceId
from flex_pinot.importer.csv_loader import Row
from flex_pinot.resources import ResourceType, ResourceTypeInfo

DEFAULT_DESCRIPTION = "Auto-created from CSV"
DEFAULT_POLLING_INTERVAL = 30
DEFAULT_HOUSEKEEPING_PERIOD = 86400000000
METADATA_FORM_PLUGIN = "mioMetadataForm"
METADATA_VARIANT = "###"
SHARD_TRUE_VALUES = frozenset({"yes", "true", "1"})

_LINE_BREAKS = re.compile(r"[\r\n]+")


class WireModel(BaseModel):
    """Base for models serialized with hyphenated/camelCase aliases."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class IdRef(WireModel):
    id: ResourceId | None


class VfsLocation(BaseModel):
    """Object-store location of a VFS storage resource."""

    model_config = ConfigDict(frozen=True)

    protocol: str | None = None
    bucket: str | None = None
    hostname: str | None = None
    path: str | None = None
    key: str | None = None
    secret: str | None = None
    sharded: bool = False


class StorageConfiguration(WireModel):
    kind: Literal["storage"] = Field(default="storage", exclude=True)
    vfs_location: VfsLocation = Field(alias="vfs-location")

    def to_wire(self) -> dict[str, Any]:
        # Absent location columns are sent as null
        return self.model_dump(by_alias=True)


class FolderStorageEntry(WireModel):
    storage_resource: IdRef = Field(alias="Storage Resource")


class FolderConfiguration(WireModel):
    kind: Literal["folder"] = Field(default="folder", exclude=True)
    storage_resources: list[FolderStorageEntry] = Field(alias="Storage Resources")


class InboxStorageResources(WireModel):
    storage_resource: list[IdRef] = Field(alias="Storage Resource")


class InboxPlugin(WireModel):
    plugin_name: str = Field(default=METADATA_FORM_PLUGIN, alias="plugin-name")


class VariantAndMetadataDefinition(WireModel):
    variant: str = METADATA_VARIANT
    metadata_definition: IdRef = Field(alias="metadata-definition")


class InboxConfiguration(WireModel):
    kind: Literal["inbox"] = Field(default="inbox", exclude=True)
    housekeeping_period: int = Field(
        default=DEFAULT_HOUSEKEEPING_PERIOD, alias="housekeeping-period"
    )
    storage_resources: InboxStorageResources = Field(alias="storage-resources")
    plugins: list[InboxPlugin] = Field(default_factory=lambda: [InboxPlugin()])
    workflow: IdRef | None = None
    workflow_owner: IdRef | None = Field(default=None, alias="workflowOwner")
    variant_and_metadata_definition: VariantAndMetadataDefinition | None = Field(
        default=None, alias="variant-and-metadata-definition"
    )


ResourceConfiguration = Annotated[
    StorageConfiguration | FolderConfiguration | InboxConfiguration,
    Field(discriminator="kind"),
]


class CreateResourcePayload(WireModel):
    """Body of ``POST /api/resources``."""

    name: str
    description: str = DEFAULT_DESCRIPTION
    plugin_class: str = Field(alias="pluginClass")
    polling_interval: int = Field(default=DEFAULT_POLLING_INTERVAL, alias="pollingInterval")
    use_latest_available_version: bool = Field(default=True, alias="useLatestAvailableVersion")
    visibility_ids: list[ResourceId] = Field(alias="visibilityIds")


def parse_int(row: Row, column: str, default: int | None = None) -> int | None:
    """Read an integer column, falling back to ``default`` when blank.

    Raises:
        RowError: If the value is present but not an integer
    """
    value = row.get(column) or ""
    if not value:
        return default
    try:
        return int(value)
    except ValueError as e:
        raise RowError(f"Invalid integer for '{column}': '{value}'") from e


def is_sharded(value: str | None) -> bool:
    """Interpret the Shard column; only yes/true/1 (any case) mean sharded."""
    return (value or "").strip().lower() in SHARD_TRUE_VALUES


def parse_tags(raw: str | None) -> list[str]:
    """Split the Tags column into clean tag names.

    Quotes and line breaks are removed, whitespace trimmed, empties dropped:
    ``'a, b,,c\\r\\n'`` gives ``['a', 'b', 'c']``.
    """
    if not raw:
        return []
    tags = (_LINE_BREAKS.sub("", part.strip()) for part in raw.replace('"', "").split(","))
    return [tag for tag in tags if tag]


def build_create_payload(
    info: ResourceTypeInfo, ref: str, row: Row, account_id: ResourceId
) -> CreateResourcePayload:
    return CreateResourcePayload(
        name=ref,
        description=row.get("Description") or DEFAULT_DESCRIPTION,
        plugin_class=info.plugin_class,
        polling_interval=parse_int(row, "PollingInterval", DEFAULT_POLLING_INTERVAL),
        visibility_ids=[account_id],
    )


def build_storage_configuration(row: Row) -> StorageConfiguration:
    return StorageConfiguration(
        vfs_location=VfsLocation(
            protocol=row.get("Protocol"),
            bucket=row.get("Bucket"),
            hostname=row.get("Hostname"),
            path=row.get("Path"),
            key=row.get("Key"),
            secret=row.get("Secret"),
            sharded=is_sharded(row.get("Shard")),
        )
    )


def build_folder_configuration(storage_id: ResourceId | None) -> FolderConfiguration:
    return FolderConfiguration(
        storage_resources=[FolderStorageEntry(storage_resource=IdRef(id=storage_id))]
    )


def build_inbox_configuration(row: Row, storage_id: ResourceId | None) -> InboxConfiguration:
    workflow_id = parse_int(row, "WorkflowID")
    owner_id = parse_int(row, "WorkflowOwner")
    metadata_id = parse_int(row, "InboxMetadata")

    return InboxConfiguration(
        housekeeping_period=parse_int(row, "HousekeepingPeriod", DEFAULT_HOUSEKEEPING_PERIOD),
        storage_resources=InboxStorageResources(storage_resource=[IdRef(id=storage_id)]),
        workflow=IdRef(id=workflow_id) if workflow_id is not None else None,
        workflow_owner=IdRef(id=owner_id) if owner_id is not None else None,
        variant_and_metadata_definition=(
            VariantAndMetadataDefinition(metadata_definition=IdRef(id=metadata_id))
            if metadata_id is not None
            else None
        ),
    )


def build_configuration(
    resource_type: ResourceType, row: Row, storage_refs: dict[str, ResourceId]
) -> ResourceConfiguration:
    """Build the configuration variant for a row.

    Folder and inbox rows resolve ``Link to`` through ``storage_refs``; an
    unresolved link (only possible in dry-run) yields a null storage id.
    """
    if resource_type is ResourceType.STORAGE:
        return build_storage_configuration(row)

    storage_id = storage_refs.get(row.get("Link to") or "")
    if resource_type is ResourceType.FOLDER:
        return build_folder_configuration(storage_id)
    return build_inbox_configuration(row, storage_id)
