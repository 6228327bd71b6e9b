from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Any, Protocol

import httpx

from app.core.errors import ValidationError
from app.services.records import FinancialRecordData, create_record


logger = logging.getLogger(__name__)


class RecordSource(Protocol):
    name: str

    def load(self, project_id: str) -> list[FinancialRecordData]: ...


@dataclass(frozen=True)
class SourcedRecords:
    records: list[FinancialRecordData]
    source: str


def _first(payload: dict[str, Any], *keys: str) -> Any:
    for key in keys:
        if key in payload and payload[key] is not None:
            return payload[key]
    return None


def parse_remote_record(payload: dict[str, Any], project_id: str) -> FinancialRecordData:
    if not isinstance(payload, dict):
        raise ValidationError("Remote record must be a JSON object.")
    record = create_record(
        date=_first(payload, "date"),
        type=_first(payload, "type"),
        amount=_first(payload, "amount"),
        category=_first(payload, "category"),
        project_id=_first(payload, "project_id", "projectId") or project_id,
        description=_first(payload, "description") or "-",
        user_id=str(_first(payload, "user_id", "userId") or ""),
        cost_type=_first(payload, "cost_type", "costType"),
    )
    # remote ids are opaque strings; only numeric ones map onto local rows
    remote_id = _first(payload, "id")
    if remote_id is not None and str(remote_id).isdigit():
        record = replace(record, id=int(remote_id))
    return record


class RemoteRecordSource:
    name = "remote"

    def __init__(self, url: str, *, timeout: float = 10.0, client: httpx.Client | None = None) -> None:
        self.url = url
        self.timeout = timeout
        self._client = client

    def _fetch(self, client: httpx.Client, project_id: str) -> Any:
        response = client.get(self.url, params={"project_id": project_id})
        response.raise_for_status()
        return response.json()

    def load(self, project_id: str) -> list[FinancialRecordData]:
        if self._client is not None:
            body = self._fetch(self._client, project_id)
        else:
            with httpx.Client(timeout=self.timeout) as client:
                body = self._fetch(client, project_id)

        rows = body.get("data") if isinstance(body, dict) else body
        if not isinstance(rows, list):
            raise ValidationError("Remote records payload must be a list.")
        records = [
            parse_remote_record(row, project_id)
            for row in rows
            if not (isinstance(row, dict) and _first(row, "deleted_at", "deletedAt"))
        ]
        return [row for row in records if row.project_id == project_id]


class RepositoryRecordSource:
    name = "local"

    def __init__(self, repository: Any) -> None:
        self.repository = repository

    def load(self, project_id: str) -> list[FinancialRecordData]:
        return self.repository.load(project_id)


class TieredRecordSource:
    """Read from the primary source, falling back to the secondary on transport or payload errors."""

    def __init__(self, primary: RecordSource | None, fallback: RecordSource) -> None:
        self.primary = primary
        self.fallback = fallback

    def load(self, project_id: str) -> SourcedRecords:
        if self.primary is not None:
            try:
                return SourcedRecords(records=self.primary.load(project_id), source=self.primary.name)
            except (httpx.HTTPError, httpx.InvalidURL, ValidationError, ValueError) as exc:
                logger.warning(
                    "Record source %s failed for project %s, using %s: %s",
                    self.primary.name,
                    project_id,
                    self.fallback.name,
                    exc,
                )
        return SourcedRecords(records=self.fallback.load(project_id), source=self.fallback.name)


def build_record_source(repository: Any, *, remote_url: str = "", timeout: float = 10.0) -> TieredRecordSource:
    primary = RemoteRecordSource(remote_url, timeout=timeout) if remote_url.strip() else None
    return TieredRecordSource(primary, RepositoryRecordSource(repository))
