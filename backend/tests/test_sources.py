from decimal import Decimal

import httpx

from app.services.records import create_record
from app.services.sources import RemoteRecordSource, RepositoryRecordSource, TieredRecordSource, build_record_source


class _MemoryRepository:
    def __init__(self, records) -> None:
        self.records = records

    def load(self, project_id: str):
        return [row for row in self.records if row.project_id == project_id]


def _local():
    return _MemoryRepository(
        [
            create_record(
                date="2026-01-01",
                type="income",
                amount="10",
                category="Local",
                project_id="p1",
                description="local row",
                user_id="u1",
            )
        ]
    )


def _client(handler) -> httpx.Client:
    return httpx.Client(transport=httpx.MockTransport(handler))


def test_remote_source_is_used_when_available() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.params["project_id"] == "p1"
        return httpx.Response(
            200,
            json={
                "data": [
                    {
                        "id": "12",
                        "date": "2026-02-01T10:00:00Z",
                        "type": "expense",
                        "amount": 42.5,
                        "category": "Cloud",
                        "costType": "variable",
                        "projectId": "p1",
                        "description": "Remote row",
                        "userId": "u9",
                    },
                    {
                        "id": "13",
                        "date": "2026-02-02",
                        "type": "income",
                        "amount": 10,
                        "category": "Sales",
                        "projectId": "p1",
                        "description": "Deleted",
                        "deletedAt": "2026-02-03T00:00:00Z",
                    },
                ]
            },
        )

    remote = RemoteRecordSource("https://records.example/api", client=_client(handler))
    loaded = TieredRecordSource(remote, RepositoryRecordSource(_local())).load("p1")

    assert loaded.source == "remote"
    assert len(loaded.records) == 1
    assert loaded.records[0].id == 12
    assert loaded.records[0].amount == Decimal("42.50")
    assert loaded.records[0].user_id == "u9"


def test_falls_back_to_local_on_http_error() -> None:
    remote = RemoteRecordSource(
        "https://records.example/api",
        client=_client(lambda request: httpx.Response(503, json={"error": "down"})),
    )
    loaded = TieredRecordSource(remote, RepositoryRecordSource(_local())).load("p1")
    assert loaded.source == "local"
    assert loaded.records[0].category == "Local"


def test_falls_back_on_malformed_payload() -> None:
    remote = RemoteRecordSource(
        "https://records.example/api",
        client=_client(lambda request: httpx.Response(200, json={"data": [{"type": "gift"}]})),
    )
    assert TieredRecordSource(remote, RepositoryRecordSource(_local())).load("p1").source == "local"

    not_json = RemoteRecordSource(
        "https://records.example/api",
        client=_client(lambda request: httpx.Response(200, text="<html>")),
    )
    assert TieredRecordSource(not_json, RepositoryRecordSource(_local())).load("p1").source == "local"


def test_falls_back_on_transport_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    remote = RemoteRecordSource("https://records.example/api", client=_client(handler))
    assert TieredRecordSource(remote, RepositoryRecordSource(_local())).load("p1").source == "local"


def test_no_remote_url_reads_local_only() -> None:
    source = build_record_source(_local(), remote_url="")
    assert source.primary is None
    assert source.load("p1").source == "local"
