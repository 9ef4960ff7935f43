import logging
import os
from typing import Any, Dict, List, Optional

import requests

from ..models import AuthResponse, Product, ProductPage, Warranty, WarrantyCreate

logger = logging.getLogger(__name__)

API_BASE_URL = os.getenv("WARRANTY_API_URL", "http://localhost:5000/api")
API_TIMEOUT = float(os.getenv("WARRANTY_API_TIMEOUT", "15"))


class ApiError(Exception):
    def __init__(self, status: int, message: str, data: Any = None) -> None:
        super().__init__(message)
        self.status = status
        self.message = message
        self.data = data


class BackendClient:
    """
    Thin client for the remote warranty REST API. Injects the bearer token on
    every request and raises ApiError for non-2xx responses.
    """

    def __init__(
        self,
        base_url: str = API_BASE_URL,
        token: Optional[str] = None,
        timeout: float = API_TIMEOUT,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout = timeout
        self.session = session or requests.Session()

    def with_token(self, token: Optional[str]) -> "BackendClient":
        return BackendClient(self.base_url, token=token, timeout=self.timeout, session=self.session)

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json", "Accept": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def request(self, method: str, path: str, params: Optional[dict] = None, json: Any = None) -> Any:
        url = f"{self.base_url}/{path.lstrip('/')}"
        if params:
            params = {k: v for k, v in params.items() if v not in (None, "")}
        try:
            resp = self.session.request(
                method,
                url,
                params=params or None,
                json=json,
                headers=self._headers(),
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as exc:
            logger.warning("backend call %s %s failed: %s", method, url, exc)
            raise ApiError(502, f"Backend unreachable: {exc}") from exc

        if resp.status_code == 204 or not resp.content:
            if resp.ok:
                return None
            raise ApiError(resp.status_code, resp.reason or f"HTTP {resp.status_code}")
        try:
            data = resp.json()
        except ValueError:
            data = None
        if not resp.ok:
            message = None
            if isinstance(data, dict):
                message = data.get("message") or data.get("error")
            raise ApiError(resp.status_code, message or resp.reason or f"HTTP {resp.status_code}", data)
        if data is None:
            raise ApiError(502, "Backend returned a non-JSON response")
        return data

    # auth --------------------------------------------------------------------------

    def login(self, email: str, password: str) -> AuthResponse:
        data = self.request("POST", "/auth/login", json={"email": email, "password": password})
        return AuthResponse.model_validate(data)

    def register(self, username: str, email: str, password: str) -> AuthResponse:
        data = self.request(
            "POST",
            "/auth/register",
            json={"username": username, "email": email, "password": password},
        )
        return AuthResponse.model_validate(data)

    # warranties --------------------------------------------------------------------

    def list_warranties(
        self,
        page: Optional[int] = None,
        limit: Optional[int] = None,
        search: Optional[str] = None,
        category: Optional[str] = None,
        status: Optional[str] = None,
    ) -> List[Warranty]:
        params = {"page": page, "limit": limit, "search": search, "category": category, "status": status}
        data = self.request("GET", "/warranties", params=params)
        return [Warranty.model_validate(item) for item in data or []]

    def expiring_warranties(self) -> List[Warranty]:
        data = self.request("GET", "/warranties/expiring")
        return [Warranty.model_validate(item) for item in data or []]

    def get_warranty(self, warranty_id: str) -> Warranty:
        return Warranty.model_validate(self.request("GET", f"/warranties/{warranty_id}"))

    def create_warranty(self, payload: WarrantyCreate) -> Warranty:
        return Warranty.model_validate(self.request("POST", "/warranties", json=payload.to_wire()))

    def update_warranty(self, warranty_id: str, payload: WarrantyCreate) -> Warranty:
        data = self.request("PUT", f"/warranties/{warranty_id}", json=payload.to_wire())
        return Warranty.model_validate(data)

    def delete_warranty(self, warranty_id: str) -> None:
        self.request("DELETE", f"/warranties/{warranty_id}")

    # catalog -----------------------------------------------------------------------

    def list_products(
        self,
        page: int = 1,
        limit: int = 10,
        search: Optional[str] = None,
        category: Optional[str] = None,
        manufacturer: Optional[str] = None,
        sort: str = "nameAsc",
    ) -> ProductPage:
        params = {
            "page": page,
            "limit": limit,
            "search": search,
            "category": category,
            "manufacturer": manufacturer,
            "sort": sort,
        }
        return ProductPage.model_validate(self.request("GET", "/products", params=params))

    def product_categories(self) -> List[str]:
        data = self.request("GET", "/products/categories") or {}
        return list(data.get("categories") or [])

    def get_product(self, product_id: str) -> Product:
        return Product.model_validate(self.request("GET", f"/products/{product_id}"))
