from datetime import UTC, datetime, timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError
from sqlmodel import Session, select

from ..models import PaymentRequestModel, UpiIndexEntryModel
from ..services import PaymentRequestRepository


def _create(client: TestClient, **fields):
    payload = {"upiId": "merchant@upi", "amount": 10}
    payload.update(fields)
    return client.post("/api/payment-request", json=payload)


def test_create_payment_request_defaults(client: TestClient) -> None:
    response = _create(client)
    assert response.status_code == 201
    body = response.json()
    assert body["message"] == "Payment request created successfully"
    created = body["paymentRequest"]
    assert created["status"] == "pending"
    assert created["amount"] == 10
    assert created["payeeName"] == ""
    assert created["note"] == ""
    assert created["contractRequestId"] is None
    assert created["walletAddress"] == ""
    assert created["daiAmount"] == 0
    assert created["ethFee"] == 0
    assert created["requesterId"] == "anonymous"


def test_requester_is_wallet_address(client: TestClient) -> None:
    wallet = "0x" + "12" * 20
    response = _create(client, walletAddress=wallet, daiAmount=12.5, ethFee=0.001)
    created = response.json()["paymentRequest"]
    assert created["requesterId"] == wallet
    assert created["daiAmount"] == 12.5
    assert created["ethFee"] == 0.001


@pytest.mark.parametrize("amount", [-5, 0, "10", True, 10**400])
def test_create_rejects_bad_amounts(client: TestClient, amount) -> None:
    response = _create(client, amount=amount)
    assert response.status_code == 400
    assert response.json() == {"error": "Amount must be a positive number"}


def test_create_requires_upi_and_amount(client: TestClient) -> None:
    no_upi = client.post("/api/payment-request", json={"amount": 10})
    no_amount = client.post("/api/payment-request", json={"upiId": "merchant@upi"})
    for response in (no_upi, no_amount):
        assert response.status_code == 400
        assert response.json() == {"error": "UPI ID and amount are required"}


def test_upi_index_keeps_latest_write(client: TestClient, engine) -> None:
    _create(client, upiId="first@upi", payeeName="First", note="one", contractRequestId="42")
    _create(client, upiId="second@upi", payeeName="Second", note="two", contractRequestId="42")
    _create(client, upiId="third@upi", contractRequestId="42")

    lookup = client.get("/api/upi-id/contract/42")
    assert lookup.status_code == 200
    assert lookup.json() == {
        "message": "UPI ID retrieved successfully",
        "contractRequestId": "42",
        "upiId": "third@upi",
        "payeeName": "",
        "note": "",
    }

    with Session(engine) as session:
        entries = session.exec(select(UpiIndexEntryModel)).all()
        requests = session.exec(select(PaymentRequestModel)).all()
    assert len(entries) == 1
    assert len(requests) == 3


def test_no_contract_id_means_no_index_entry(client: TestClient, engine) -> None:
    response = _create(client, contractRequestId="")
    assert response.status_code == 201
    assert response.json()["paymentRequest"]["contractRequestId"] is None

    with Session(engine) as session:
        assert session.exec(select(UpiIndexEntryModel)).all() == []

    lookup = client.get("/api/upi-id/contract/anything")
    assert lookup.status_code == 404
    assert lookup.json() == {"error": "UPI ID not found for the given contract ID"}


def test_blank_contract_id_is_treated_as_absent(client: TestClient, engine) -> None:
    response = _create(client, contractRequestId=" ")
    assert response.status_code == 201
    assert response.json()["paymentRequest"]["contractRequestId"] is None

    with Session(engine) as session:
        assert session.exec(select(UpiIndexEntryModel)).all() == []


def test_created_at_carries_utc_offset(client: TestClient) -> None:
    created = _create(client).json()["paymentRequest"]["createdAt"]
    parsed = datetime.fromisoformat(created.replace("Z", "+00:00"))
    assert parsed.utcoffset() == timedelta(0)

    listed = client.get("/api/payment-requests").json()["paymentRequests"][0]["createdAt"]
    assert datetime.fromisoformat(listed.replace("Z", "+00:00")).utcoffset() == timedelta(0)


def test_numeric_contract_id_is_looked_up_as_string(client: TestClient) -> None:
    _create(client, upiId="numeric@upi", contractRequestId=7)

    assert client.get("/api/upi-id/contract/7").json()["upiId"] == "numeric@upi"
    by_contract = client.get("/api/payment-request/contract/7")
    assert by_contract.status_code == 200
    assert by_contract.json()["paymentRequest"]["contractRequestId"] == "7"


def test_get_payment_request_by_contract(client: TestClient) -> None:
    _create(client, upiId="payee@upi", contractRequestId="abc")

    found = client.get("/api/payment-request/contract/abc")
    assert found.status_code == 200
    assert found.json()["message"] == "Payment request retrieved successfully"
    assert found.json()["paymentRequest"]["upiId"] == "payee@upi"

    missing = client.get("/api/payment-request/contract/zzz")
    assert missing.status_code == 404


def test_blank_contract_id_is_bad_request(client: TestClient) -> None:
    assert client.get("/api/upi-id/contract/%20").status_code == 400
    assert client.get("/api/payment-request/contract/%20").status_code == 400


def test_list_returns_pending_newest_first(client: TestClient, engine) -> None:
    for upi_id in ("a@upi", "b@upi", "c@upi"):
        assert _create(client, upiId=upi_id).status_code == 201

    with Session(engine) as session:
        session.add(
            PaymentRequestModel(
                upi_id="settled@upi",
                amount=1,
                requester_id="anonymous",
                status="completed",
                created_at=datetime.now(UTC) + timedelta(hours=1),
            )
        )
        session.commit()

    response = client.get("/api/payment-requests")
    assert response.status_code == 200
    items = response.json()["paymentRequests"]
    assert [item["upiId"] for item in items] == ["c@upi", "b@upi", "a@upi"]
    assert {item["status"] for item in items} == {"pending"}
    assert set(items[0]) == {
        "id",
        "upiId",
        "amount",
        "payeeName",
        "note",
        "requesterId",
        "status",
        "createdAt",
    }


def test_failed_index_write_fails_the_request(client: TestClient, engine, monkeypatch) -> None:
    def _broken_upsert(self, **kwargs):
        raise OperationalError("INSERT INTO upiIndex", {}, Exception("database is locked"))

    monkeypatch.setattr(PaymentRequestRepository, "upsert_upi_index", _broken_upsert)

    response = _create(client, contractRequestId="99")
    assert response.status_code == 500
    assert response.json() == {"error": "Internal server error"}

    with Session(engine) as session:
        assert session.exec(select(PaymentRequestModel)).all() == []
