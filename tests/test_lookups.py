import httpx
import pytest

from flex_pinot.client.exceptions import APIError, TransportError
from flex_pinot.importer.lookups import ExistenceCache, ExistenceChecker


def test_cache_probes_once_per_key():
    calls = []

    def probe(key):
        calls.append(key)
        return True

    cache = ExistenceCache("workflow")

    assert cache.lookup("5", probe) is True
    assert cache.lookup("5", probe) is True
    assert calls == ["5"]
    assert "5" in cache


def test_cache_failure_counts_as_not_found_and_is_cached():
    calls = []

    def probe(key):
        calls.append(key)
        raise TransportError("connection refused")

    cache = ExistenceCache("user")

    assert cache.lookup("9", probe) is False
    assert cache.lookup("9", probe) is False
    assert calls == ["9"]


def test_resource_exists_uses_total_count(fake_flex, client):
    fake_flex.add("GET", r"/api/resources;name=Main\+Store", json={"totalCount": 1})
    checker = ExistenceChecker(client)

    assert checker.resource_exists("Main Store") is True
    assert checker.resource_exists("Other") is False


def test_repeat_lookups_issue_one_request(fake_flex, client):
    checker = ExistenceChecker(client)

    checker.resource_exists("S1")
    checker.resource_exists("S1")

    assert len(fake_flex.calls("GET", "/api/resources;name=S1")) == 1


def test_dependency_lookups_need_status_200(fake_flex, client):
    fake_flex.add("GET", r"/api/workflowDefinitions/12", json={"id": 12})
    fake_flex.add("GET", r"/api/users/34", status=204, text="")
    fake_flex.add("GET", r"/api/metadataDefinitions/56", json={"id": 56})
    checker = ExistenceChecker(client)

    assert checker.workflow_exists("12") is True
    assert checker.workflow_exists("999") is False
    assert checker.user_exists("34") is False
    assert checker.metadata_exists("56") is True


def test_caches_are_independent(fake_flex, client):
    fake_flex.add("GET", r"/api/users/5", json={"id": 5})
    checker = ExistenceChecker(client)

    assert checker.user_exists("5") is True
    assert checker.workflow_exists("5") is False
    assert len(checker.users) == 1
    assert len(checker.workflows) == 1


def test_transport_error_fails_open(flex_config):
    from flex_pinot.client.flex_client import FlexClient

    def broken(request):
        raise httpx.ConnectError("boom", request=request)

    with FlexClient(flex_config, transport=httpx.MockTransport(broken)) as client:
        checker = ExistenceChecker(client)
        assert checker.resource_exists("S1") is False
        assert checker.metadata_exists("1") is False


def test_server_error_and_bad_json_fail_open(fake_flex, client):
    fake_flex.add("GET", r"/api/resources;name=S1", status=500, json={"message": "oops"})
    fake_flex.add("GET", r"/api/resources;name=S2", text="<html>not json</html>")
    checker = ExistenceChecker(client)

    assert checker.resource_exists("S1") is False
    assert checker.resource_exists("S2") is False


def test_checker_without_client_fails_open():
    assert ExistenceChecker(None).workflow_exists("1") is False


@pytest.mark.parametrize("total", [None, {"value": 1}, "1", True])
def test_malformed_total_count_fails_open(fake_flex, client, total):
    fake_flex.add("GET", r"/api/resources;name=S1", json={"totalCount": total})
    checker = ExistenceChecker(client)

    assert checker.resource_exists("S1") is False
    assert checker.resource_exists("S1") is False
    assert len(fake_flex.calls("GET", "/api/resources;name=S1")) == 1


def test_malformed_total_count_raises_api_error(fake_flex, client):
    fake_flex.add("GET", r"/api/resources;name=S1", json={"totalCount": None})

    with pytest.raises(APIError, match="Unexpected totalCount"):
        client.count_resources_named("S1")
