"""API tests: real TollSystem on tmp files, in-memory DB mirror."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
from decimal import Decimal
from types import SimpleNamespace
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from tollgate.database import create_tables, get_db
from tollgate.main import app
from tollgate.services.toll_system import build_toll_system

REGISTRY_CSV = "plate,rfid,balance,type\nABC-123,RF1,100.0,car\nMOP-7,RF7,20,moped\n"


@pytest.fixture
def client(tmp_path):
    (tmp_path / "registered_vehicles.csv").write_text(REGISTRY_CSV)
    paths = SimpleNamespace(
        CONFIG_PATH=str(tmp_path / "config.txt"),
        REGISTRY_PATH=str(tmp_path / "registered_vehicles.csv"),
        TRANSACTION_LOG_PATH=str(tmp_path / "transaction_log.csv"),
        ERROR_LOG_PATH=str(tmp_path / "error_log.txt"),
    )
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    create_tables(bind=engine)
    Session = sessionmaker(bind=engine)

    def override_get_db():
        db = Session()
        try:
            yield db
        finally:
            db.close()

    system = build_toll_system(paths, session_factory=Session)
    app.state.toll_system = system
    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
        del app.state.toll_system
        system.close()


class TestTollEndpoints:
    def test_rfid_charge_then_insufficient(self, client):
        first = client.post("/api/v1/toll/rfid/RF1").json()
        assert first["outcome"] == "accepted"
        assert Decimal(first["balance"]) == Decimal("50.0")

        client.post("/api/v1/toll/rfid/RF1")
        third = client.post("/api/v1/toll/rfid/RF1").json()
        assert third["outcome"] == "rejected-insufficient-funds"
        assert Decimal(third["balance"]) == Decimal("0.0")

        history = client.get("/api/v1/transactions").json()
        assert len(history) == 2
        assert len(client.get("/api/v1/errors").json()) == 1

    def test_anpr_unregistered(self, client):
        body = client.post("/api/v1/toll/anpr/UNKNOWN123").json()
        assert body["outcome"] == "rejected-unregistered"
        assert body["payment_method"] == "anpr-billing"

    def test_webhook_always_200(self, client):
        resp = client.post("/api/v1/events/identity", json={"plate": "ABC-123", "lane_id": "L1"})
        assert resp.status_code == 200
        assert resp.json()["result"]["outcome"] == "accepted"

        resp = client.post("/api/v1/events/identity", json={"lane_id": "L1"})
        assert resp.status_code == 200
        assert resp.json()["status"] == "ignored"

    def test_today_summary(self, client):
        client.post("/api/v1/toll/rfid/RF1")
        summary = client.get("/api/v1/transactions/summary/today").json()
        assert summary["transactions"] == 1
        assert Decimal(summary["revenue"]) == Decimal("50.0")


class TestVehicleEndpoints:
    def test_list_and_lookup(self, client):
        assert {v["rfid_tag"] for v in client.get("/api/v1/vehicles").json()} == {"RF1", "RF7"}
        known = client.get("/api/v1/vehicles/lookup/ABC-123").json()
        assert known["registered"] is True
        assert known["vehicle"]["vehicle_class"] == "car"
        assert client.get("/api/v1/vehicles/lookup/NOPE").json()["registered"] is False

    def test_register_and_duplicate(self, client):
        body = {"plate": "BUS-1", "rfid": "RF3", "balance": "75", "type": "bus"}
        assert client.post("/api/v1/vehicles", json=body).status_code == 200
        assert client.post("/api/v1/vehicles", json=body).status_code == 400
        assert client.post("/api/v1/toll/rfid/RF3").json()["outcome"] == "accepted"

    def test_top_up(self, client):
        resp = client.post("/api/v1/vehicles/RF7/top-up", json={"amount": "100"})
        assert Decimal(resp.json()["balance"]) == Decimal("120")
        assert client.post("/api/v1/vehicles/NOPE/top-up", json={"amount": "5"}).status_code == 404
        assert client.post("/api/v1/vehicles/RF7/top-up", json={"amount": "0"}).status_code == 422

    def test_unknown_class_charged_fallback(self, client):
        client.post("/api/v1/vehicles/RF7/top-up", json={"amount": "100"})
        body = client.post("/api/v1/toll/rfid/RF7").json()
        assert body["fallback_rate_applied"] is True
        assert Decimal(body["amount"]) == Decimal("100.0")


class TestRatesAndHealth:
    def test_rates_default_when_config_missing(self, client):
        rates = client.get("/api/v1/rates").json()
        assert rates["from_defaults"] is True
        assert {k: Decimal(v) for k, v in rates["toll_rates"].items()} == {
            "car": Decimal("50.0"), "truck": Decimal("100.0"), "bus": Decimal("75.0"),
        }

    def test_reload_picks_up_new_rates(self, client, tmp_path):
        (tmp_path / "config.txt").write_text("toll_rate_car=20\n")
        rates = client.post("/api/v1/rates/reload").json()
        assert Decimal(rates["toll_rates"]["car"]) == Decimal("20")
        assert Decimal(client.post("/api/v1/toll/rfid/RF1").json()["amount"]) == Decimal("20")

    def test_health(self, client):
        body = client.get("/api/v1/health").json()
        assert body["status"] == "ok"
        assert body["registered_vehicles"] == 2
        assert body["ledger"] == {"transactions": "ok", "errors": "ok"}
