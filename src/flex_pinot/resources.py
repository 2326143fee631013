"""Central resource type definitions - single source of truth.

Every module that needs to know which resource types exist, in which order
they are imported, or which Flex plugin implements them imports from here.
"""

from dataclasses import dataclass
from enum import Enum


class ResourceType(str, Enum):
    """Resource types that can be created from the CSV."""

    STORAGE = "storage"
    FOLDER = "folder"
    INBOX = "inbox"


@dataclass(frozen=True)
class ResourceTypeInfo:
    """Metadata for a resource type."""

    resource_type: ResourceType
    plugin_class: str
    icon: str
    import_order: int  # Lower = earlier pass (dependency order)
    requires_link: bool = False  # Must mount on a storage via "Link to"

    @property
    def name(self) -> str:
        return self.resource_type.value

    @property
    def label(self) -> str:
        return self.name.capitalize()


RESOURCE_REGISTRY: dict[ResourceType, ResourceTypeInfo] = {
    ResourceType.STORAGE: ResourceTypeInfo(
        resource_type=ResourceType.STORAGE,
        plugin_class=(
            "tv.nativ.mio.enterprise.resources.impl.capacity.storage.vfs.VFSStorageResource"
        ),
        icon="📀",
        import_order=10,
    ),
    # Folders and inboxes reference storage ids, so they come after storage
    ResourceType.FOLDER: ResourceTypeInfo(
        resource_type=ResourceType.FOLDER,
        plugin_class="tv.nativ.mio.enterprise.resources.impl.capacity.folder.MioFolderResource",
        icon="📂",
        import_order=20,
        requires_link=True,
    ),
    ResourceType.INBOX: ResourceTypeInfo(
        resource_type=ResourceType.INBOX,
        plugin_class=(
            "tv.nativ.mio.enterprise.resources.impl.capacity.folder.inbox.InboxResource"
        ),
        icon="📥",
        import_order=30,
        requires_link=True,
    ),
}


def get_import_order() -> list[ResourceTypeInfo]:
    """Get resource types in the order their passes run."""
    return sorted(RESOURCE_REGISTRY.values(), key=lambda info: info.import_order)


def get_info(resource_type: ResourceType | str) -> ResourceTypeInfo:
    """Get full metadata for a resource type.

    Raises:
        ValueError: If the name is not a known resource type
    """
    return RESOURCE_REGISTRY[ResourceType(resource_type)]


def is_valid_type(resource_type: str) -> bool:
    """Check if a (lower-case) type name is a known resource type."""
    return resource_type in {t.value for t in ResourceType}
