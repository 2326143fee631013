import pytest

from flex_pinot.client.exceptions import RowError, SchemaError
from flex_pinot.config import ImportOptions
from flex_pinot.importer.lookups import ExistenceChecker
from flex_pinot.importer.validator import RowValidator, validate_headers
from flex_pinot.resources import ResourceType


def test_headers_with_type_and_ref_pass():
    validate_headers(["Ref", "Type", "Tags"])


def test_missing_headers_are_listed():
    with pytest.raises(SchemaError, match="Missing required CSV headers: Type, Ref"):
        validate_headers(["Link to"])


def test_existing_resource_is_skipped_with_warning(fake_flex, client):
    fake_flex.add("GET", r"/api/resources;name=S1", json={"totalCount": 1})
    validator = RowValidator(ImportOptions(), ExistenceChecker(client))

    with pytest.raises(RowError, match="already exists") as exc_info:
        validator.ensure_absent("S1")

    assert exc_info.value.warning is True


@pytest.mark.parametrize("flag", ["force", "skip_validation", "dry_run"])
def test_existence_guard_is_bypassed(fake_flex, client, flag):
    fake_flex.add("GET", r"/api/resources;name=S1", json={"totalCount": 1})
    validator = RowValidator(ImportOptions(**{flag: True}), ExistenceChecker(client))

    validator.ensure_absent("S1")

    assert fake_flex.requests == []


def test_link_is_required_for_folders():
    validator = RowValidator(ImportOptions(), ExistenceChecker(None))

    with pytest.raises(RowError, match="Missing 'Link to' field for folder: F1"):
        validator.ensure_link(ResourceType.FOLDER, "F1", {"Link to": ""}, {})


def test_link_must_resolve_outside_dry_run():
    validator = RowValidator(ImportOptions(), ExistenceChecker(None))

    with pytest.raises(RowError, match="Referenced storage 'S9' not found"):
        validator.ensure_link(ResourceType.INBOX, "I1", {"Link to": "S9"}, {"S1": 101})

    validator.ensure_link(ResourceType.INBOX, "I1", {"Link to": "S1"}, {"S1": 101})


def test_dry_run_accepts_unresolved_link():
    validator = RowValidator(ImportOptions(dry_run=True), ExistenceChecker(None))

    validator.ensure_link(ResourceType.FOLDER, "F1", {"Link to": "S9"}, {})


def test_storage_needs_no_link():
    validator = RowValidator(ImportOptions(), ExistenceChecker(None))

    validator.ensure_link(ResourceType.STORAGE, "S1", {}, {})


def test_dependencies_checked_in_order(fake_flex, client):
    fake_flex.add("GET", r"/api/workflowDefinitions/1", json={"id": 1})
    validator = RowValidator(ImportOptions(), ExistenceChecker(client))
    row = {"WorkflowID": "1", "WorkflowOwner": "2", "InboxMetadata": "3"}

    with pytest.raises(RowError, match="User ID '2' not found"):
        validator.ensure_dependencies(ResourceType.INBOX, row)

    paths = [r.url.path for r in fake_flex.requests]
    assert paths == ["/api/workflowDefinitions/1", "/api/users/2"]


def test_missing_metadata_definition(fake_flex, client):
    validator = RowValidator(ImportOptions(), ExistenceChecker(client))

    with pytest.raises(RowError, match="Metadata Definition ID '3' not found"):
        validator.ensure_dependencies(ResourceType.INBOX, {"InboxMetadata": "3"})


def test_dependencies_ignored_for_folders_and_when_skipping(fake_flex, client):
    row = {"WorkflowID": "999"}

    RowValidator(ImportOptions(), ExistenceChecker(client)).ensure_dependencies(
        ResourceType.FOLDER, row
    )
    RowValidator(ImportOptions(skip_validation=True), ExistenceChecker(client)).ensure_dependencies(
        ResourceType.INBOX, row
    )

    assert fake_flex.requests == []
