from collections.abc import Generator
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.api.deps import get_db
from app.core.config import Settings, get_settings
from app.db.base import Base
from app.db.repository import TeamMemberRepository
from app.main import _request_buckets, _take_slot, app


PREFIX = "/api/v1"
SPLIT = {"Technology": 25, "Growth": 20, "Team": 30, "Marketing": 15, "Emergency": 5, "Investments": 5}


@pytest.fixture()
def client(tmp_path) -> Generator[TestClient, None, None]:
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        future=True,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    factory = sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False)

    def _db() -> Generator[Session, None, None]:
        db = factory()
        try:
            yield db
        finally:
            db.close()

    with factory() as db:
        team = TeamMemberRepository(db)
        team.add("Ana", 50)
        team.add("Ben", 50)
        db.commit()

    app.dependency_overrides[get_db] = _db
    app.dependency_overrides[get_settings] = lambda: Settings(reports_dir=str(tmp_path))
    yield TestClient(app)
    app.dependency_overrides.clear()


def _add(client: TestClient, **payload) -> dict:
    response = client.post(f"{PREFIX}/projects/p1/records", json=payload, headers={"X-User-Id": "u1"})
    assert response.status_code == 201, response.text
    return response.json()


def _seed_records(client: TestClient) -> None:
    _add(client, date="2026-01-05", type="income", amount="5000", category="Sales", description="Jan sales")
    _add(
        client,
        date="2026-01-20",
        type="expense",
        amount="8000",
        category="Salaries",
        description="Jan payroll",
        cost_type="fixed",
    )
    _add(client, date="2026-02-05", type="income", amount="3500", category="Sales", description="Feb sales")


def test_healthz(client: TestClient) -> None:
    assert client.get("/healthz").json()["ok"] is True
    assert client.get(f"{PREFIX}/health").status_code == 200


def test_record_lifecycle(client: TestClient) -> None:
    created = _add(client, date="2026-03-01", type="expense", amount="12.345", category="Cloud", description="VM")
    assert created["user_id"] == "u1"
    assert Decimal(created["amount"]) == Decimal("12.35")

    patched = client.patch(f"{PREFIX}/projects/p1/records/{created['id']}", json={"amount": "20"})
    assert patched.status_code == 200
    assert Decimal(patched.json()["amount"]) == Decimal("20")

    deleted = client.delete(f"{PREFIX}/projects/p1/records/{created['id']}")
    assert deleted.json()["deleted_at"] is not None
    assert client.get(f"{PREFIX}/projects/p1/records").json() == []
    assert len(client.get(f"{PREFIX}/projects/p1/records", params={"include_deleted": True}).json()) == 1

    missing = client.patch(f"{PREFIX}/projects/p1/records/999", json={"amount": "1"})
    assert missing.status_code == 404
    assert missing.json()["code"] == "not_found"


def test_periods_and_trends(client: TestClient) -> None:
    _seed_records(client)

    periods = client.get(f"{PREFIX}/projects/p1/analytics/periods").json()
    assert periods["available_years"] == [2026]
    assert [Decimal(row["profit"]) for row in periods["periods"]] == [Decimal("-3000"), Decimal("3500")]

    trends = client.get(f"{PREFIX}/projects/p1/analytics/trends", params={"forecast_periods": 2}).json()
    assert trends["source"] == "local"
    assert Decimal(trends["points"][1]["income_growth"]) == Decimal("-30")
    assert [row["is_forecast"] for row in trends["points"]] == [False, False, True, True]

    bad = client.get(f"{PREFIX}/projects/p1/analytics/periods", params={"year": 2026, "quarter": 7})
    assert bad.status_code == 422
    assert bad.json()["code"] == "validation_error"


def test_distribute_and_funds(client: TestClient) -> None:
    response = client.post(
        f"{PREFIX}/projects/p1/funds/distribute",
        json={"total_budget": "100000", "percentages": SPLIT},
    )
    assert response.status_code == 201, response.text
    body = response.json()
    balances = {row["name"]: Decimal(row["balance"]) for row in body["funds"]}
    assert balances["Technology"] == Decimal("25000")
    assert balances["Team"] == Decimal("30000")
    assert body["allocation"]["status"] == "distributed"
    assert len(body["allocation"]["notifications"]) == 2

    funds = client.get(f"{PREFIX}/projects/p1/funds").json()
    assert all(row["status"] == "healthy" for row in funds)

    fund_id = funds[0]["id"]
    same = client.patch(
        f"{PREFIX}/projects/p1/funds/{fund_id}/category",
        json={"allocation_category": funds[0]["allocation_category"]},
    )
    assert same.status_code == 422
    moved = client.patch(f"{PREFIX}/projects/p1/funds/{fund_id}/category", json={"allocation_category": "growth"})
    assert moved.json()["allocation_category"] == "Growth"

    history = client.get(f"{PREFIX}/projects/p1/allocations").json()
    assert len(history) == 1


def test_distribute_rejects_bad_sum(client: TestClient) -> None:
    response = client.post(
        f"{PREFIX}/projects/p1/funds/distribute",
        json={"total_budget": "1000", "percentages": dict(SPLIT, Team=40)},
    )
    assert response.status_code == 422
    assert response.json()["code"] == "allocation_invalid"
    assert client.get(f"{PREFIX}/projects/p1/funds").json() == []


def test_profit_share_flow(client: TestClient) -> None:
    preview = client.post(
        f"{PREFIX}/projects/p1/profit-shares/from-availability",
        json={"total_revenue": "100000"},
    ).json()
    assert [Decimal(row["amount"]) for row in preview["shares"]] == [Decimal("50000"), Decimal("50000")]
    assert client.get(f"{PREFIX}/projects/p1/profit-shares").json()["shares"] == []

    rejected = client.put(
        f"{PREFIX}/projects/p1/profit-shares",
        json={"shares": [dict(row, percentage="40") for row in preview["shares"]]},
    )
    assert rejected.status_code == 422
    assert rejected.json()["code"] == "invariant_violation"

    saved = client.put(
        f"{PREFIX}/projects/p1/profit-shares",
        json={"shares": preview["shares"], "total_revenue": "80000"},
    )
    assert saved.status_code == 200, saved.text
    assert Decimal(saved.json()["shares"][0]["amount"]) == Decimal("40000")
    assert Decimal(client.get(f"{PREFIX}/projects/p1/profit-shares").json()["total_percentage"]) == Decimal("100")


def test_summary_and_metrics(client: TestClient) -> None:
    _seed_records(client)
    client.post(f"{PREFIX}/projects/p1/funds/distribute", json={"total_budget": "20000", "percentages": SPLIT})

    summary = client.get(f"{PREFIX}/projects/p1/analytics/summary").json()
    assert Decimal(summary["budget"]) == Decimal("20000")
    assert Decimal(summary["spent"]) == Decimal("8000")
    assert Decimal(summary["percentage_used"]) == Decimal("40")
    assert Decimal(summary["net_profit"]) == Decimal("500")
    assert [row["month"] for row in summary["cash_flow"]] == ["2026-01", "2026-02"]

    metrics = client.get(
        f"{PREFIX}/analytics/metrics",
        params={"marketing_spend": 1000, "new_customers": 0, "investment": 100, "returns": 150},
    ).json()
    assert metrics["cac"] == "Infinity"
    assert Decimal(metrics["roi"]) == Decimal("50")
    assert metrics["valuation"] is None


def test_exports_and_report(client: TestClient, tmp_path) -> None:
    _seed_records(client)

    csv_response = client.get(f"{PREFIX}/projects/p1/exports/cost-breakdown.csv")
    assert csv_response.status_code == 200
    assert csv_response.headers["content-type"].startswith("text/csv")
    assert csv_response.text == (
        "Category,Cost Type,Amount,Percentage of Total\n"
        "Salaries,fixed,8000.00,100.00%\n"
        "\n"
        "Total Expenses,,8000.00,100%"
    )

    records_json = client.get(f"{PREFIX}/projects/p1/exports/records.json").json()
    assert records_json["summary"]["recordCount"] == 1

    assert client.get(f"{PREFIX}/projects/p1/exports/records.csv").status_code == 200
    assert client.get(f"{PREFIX}/projects/p1/exports/cost-breakdown.xlsx").content[:2] == b"PK"

    report = client.get(f"{PREFIX}/projects/p1/reports/summary.pdf")
    assert report.status_code == 200
    assert report.content.startswith(b"%PDF")
    assert report.headers["x-record-source"] == "local"
    assert list(tmp_path.glob("summary-p1-*.pdf"))


def test_large_record_amount_is_accepted(client: TestClient) -> None:
    created = _add(client, date="2026-03-01", type="income", amount="1e26", category="Sales", description="Exit")
    assert Decimal(created["amount"]) == Decimal("1e26")


def test_rate_limit_drops_expired_buckets() -> None:
    _request_buckets.clear()
    assert _take_slot("client:/records/1", 0.0, limit=1, window=60)
    assert not _take_slot("client:/records/1", 10.0, limit=1, window=60)
    assert _take_slot("client:/records/2", 100.0, limit=1, window=60)
    assert list(_request_buckets) == ["client:/records/2"]
    _request_buckets.clear()
