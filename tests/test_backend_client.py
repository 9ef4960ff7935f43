import json

import pytest
import requests

from warranty_tracker.models import WarrantyCreate
from warranty_tracker.services.backend import ApiError, BackendClient


def _response(status: int, body=None, reason: str = "OK") -> requests.Response:
    resp = requests.Response()
    resp.status_code = status
    resp.reason = reason
    resp._content = json.dumps(body).encode() if body is not None else b""
    return resp


class FakeSession:
    def __init__(self, *responses) -> None:
        self.responses = list(responses)
        self.calls = []

    def request(self, method, url, **kwargs):
        self.calls.append((method, url, kwargs))
        item = self.responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item


def _warranty(wid="w1", name="Toaster"):
    return {"_id": wid, "productName": name, "purchaseDate": "2024-01-01", "warrantyEndDate": "2025-01-01"}


def test_bearer_token_injected_when_set():
    session = FakeSession(_response(200, [_warranty()]))
    client = BackendClient("http://api.test/api/", token="abc", session=session)
    items = client.list_warranties()
    method, url, kwargs = session.calls[0]
    assert method == "GET"
    assert url == "http://api.test/api/warranties"
    assert kwargs["headers"]["Authorization"] == "Bearer abc"
    assert kwargs["headers"]["Content-Type"] == "application/json"
    assert items[0].id == "w1"
    assert items[0].product_name == "Toaster"


def test_no_authorization_header_without_token():
    session = FakeSession(_response(200, {"categories": ["tools"]}))
    client = BackendClient("http://api.test", session=session)
    assert client.product_categories() == ["tools"]
    assert "Authorization" not in session.calls[0][2]["headers"]


def test_with_token_shares_session():
    session = FakeSession(_response(200, []))
    client = BackendClient("http://api.test", session=session).with_token("t2")
    client.expiring_warranties()
    assert session.calls[0][1] == "http://api.test/warranties/expiring"
    assert session.calls[0][2]["headers"]["Authorization"] == "Bearer t2"


def test_empty_query_params_are_dropped():
    session = FakeSession(_response(200, {"products": [], "total": 0, "pages": 0}))
    client = BackendClient("http://api.test", session=session)
    page = client.list_products(page=2, search="", category="tools")
    params = session.calls[0][2]["params"]
    assert params == {"page": 2, "limit": 10, "category": "tools", "sort": "nameAsc"}
    assert page.total == 0


def test_error_message_taken_from_body():
    session = FakeSession(_response(401, {"message": "Invalid credentials"}, reason="Unauthorized"))
    client = BackendClient("http://api.test", session=session)
    with pytest.raises(ApiError) as exc_info:
        client.login("a@example.com", "bad")
    assert exc_info.value.status == 401
    assert exc_info.value.message == "Invalid credentials"
    assert session.calls[0][2]["json"] == {"email": "a@example.com", "password": "bad"}


def test_error_without_body_uses_reason():
    session = FakeSession(_response(404, reason="Not Found"))
    client = BackendClient("http://api.test", session=session)
    with pytest.raises(ApiError) as exc_info:
        client.get_warranty("missing")
    assert exc_info.value.status == 404
    assert exc_info.value.message == "Not Found"


def test_transport_failure_becomes_bad_gateway():
    session = FakeSession(requests.exceptions.ConnectionError("refused"))
    client = BackendClient("http://api.test", session=session)
    with pytest.raises(ApiError) as exc_info:
        client.expiring_warranties()
    assert exc_info.value.status == 502


def test_delete_accepts_no_content():
    session = FakeSession(_response(204))
    client = BackendClient("http://api.test", token="t", session=session)
    assert client.delete_warranty("w1") is None
    assert session.calls[0][0] == "DELETE"
    assert session.calls[0][1] == "http://api.test/warranties/w1"


def test_login_parses_auth_response():
    body = {"token": "tok", "user": {"_id": "u1", "username": "alice", "email": "a@example.com", "role": "user"}}
    session = FakeSession(_response(200, body))
    auth = BackendClient("http://api.test", session=session).login("a@example.com", "pw")
    assert auth.token == "tok"
    assert auth.user.id == "u1"


def test_create_warranty_posts_wire_payload():
    session = FakeSession(_response(201, _warranty("w9", "Dishwasher")))
    client = BackendClient("http://api.test", token="abc", session=session)
    payload = WarrantyCreate(product_name="Dishwasher", purchase_date="2024-01-01", warranty_length=12)
    created = client.create_warranty(payload)
    method, url, kwargs = session.calls[0]
    assert (method, url) == ("POST", "http://api.test/warranties")
    assert kwargs["json"] == {"productName": "Dishwasher", "purchaseDate": "2024-01-01", "warrantyLength": 12}
    assert created.id == "w9"


def test_update_warranty_puts_to_record_url():
    session = FakeSession(_response(200, _warranty("w1", "Toaster Plus")))
    client = BackendClient("http://api.test", token="abc", session=session)
    payload = WarrantyCreate(
        product_name="Toaster Plus", purchase_date="2024-01-01", warranty_end_date="2025-01-01"
    )
    updated = client.update_warranty("w1", payload)
    method, url, kwargs = session.calls[0]
    assert (method, url) == ("PUT", "http://api.test/warranties/w1")
    assert kwargs["json"]["warrantyEndDate"] == "2025-01-01"
    assert updated.product_name == "Toaster Plus"


def test_warranty_payload_needs_length_or_end_date():
    with pytest.raises(ValueError):
        WarrantyCreate(product_name="Lamp", purchase_date="2024-01-01")
