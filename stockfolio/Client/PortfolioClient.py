"""Thin HTTP client for the Stockfolio API.

The client keeps the bearer token it received at login. Any 401 on an
authenticated call drops the token again, so an expired session is noticed
on the next request rather than ahead of time.
"""
from collections import defaultdict
from enum import Enum
from typing import Dict, List, Optional, Union
from urllib.parse import quote

import requests

DEFAULT_BASE_URL = "http://localhost:4000/api"


class AuthState(str, Enum):
    anonymous = "anonymous"
    authenticated = "authenticated"


class ApiError(Exception):
    def __init__(self, status_code: int, message: str):
        super().__init__(f"{status_code}: {message}")
        self.status_code = status_code
        self.message = message


class AuthenticationRequired(ApiError):
    pass


class PortfolioClient:
    def __init__(self, base_url: str = DEFAULT_BASE_URL, session=None, timeout: float = 8):
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout
        self.token: Optional[str] = None
        self.username: Optional[str] = None

    @property
    def state(self) -> AuthState:
        return AuthState.authenticated if self.token else AuthState.anonymous

    def _request(self, method: str, path: str, json=None, params=None, auth: bool = True):
        headers = {"Content-Type": "application/json"}
        if auth and self.token:
            headers["Authorization"] = f"Bearer {self.token}"

        resp = self.session.request(
            method,
            f"{self.base_url}{path}",
            json=json,
            params=params,
            headers=headers,
            timeout=self.timeout,
        )
        if resp.status_code == 401 and auth:
            self.logout()
            raise AuthenticationRequired(401, _error_message(resp))
        if resp.status_code >= 400:
            raise ApiError(resp.status_code, _error_message(resp))
        if resp.status_code == 204 or not resp.content:
            return None
        return resp.json()

    # --- auth ---

    def register(self, username: str, password: str, auto_login: bool = False) -> bool:
        self._request("POST", "/register", json={"username": username, "password": password}, auth=False)
        if auto_login:
            self.login(username, password)
        return True

    def login(self, username: str, password: str) -> str:
        try:
            data = self._request("POST", "/login", json={"username": username, "password": password}, auth=False)
        except ApiError as e:
            if e.status_code == 401:
                raise AuthenticationRequired(e.status_code, e.message)
            raise
        self.token = data["token"]
        self.username = data["username"]
        return self.token

    def logout(self):
        self.token = None
        self.username = None

    def health(self) -> dict:
        return self._request("GET", "/health", auth=False)

    # --- stocks ---

    def get_stocks(self, bookmark_color: Optional[str] = None, bookmarked: bool = False) -> List[dict]:
        params = {}
        if bookmark_color is not None:
            params["bookmark_color"] = bookmark_color
        elif bookmarked:
            params["bookmarked"] = "true"
        return self._request("GET", "/stocks", params=params or None)

    def add_stock(self, ticker_symbol: str, display_name: str, **fields) -> dict:
        body = {"ticker_symbol": ticker_symbol, "display_name": display_name, **fields}
        return self._request("POST", "/stocks", json=body)

    def update_stock(self, ticker_symbol: str, **updates) -> bool:
        self._request("PUT", f"/stocks/{_segment(ticker_symbol)}", json=updates)
        return True

    def delete_stock(self, ticker_symbol: str) -> bool:
        self._request("DELETE", f"/stocks/{_segment(ticker_symbol)}")
        return True

    # --- notes ---

    def get_notes(self, stock_id: str) -> List[dict]:
        return self._request("GET", f"/notes/{_segment(stock_id)}")

    def add_note(self, stock_id: str, content: Union[str, dict], note_id: Optional[str] = None) -> dict:
        body = {"stock_id": stock_id, "content": content}
        if note_id:
            body["id"] = note_id
        return self._request("POST", "/notes", json=body)

    def update_note(self, note_id: str, content: Union[str, dict]) -> bool:
        self._request("PUT", f"/notes/{_segment(note_id)}", json={"content": content})
        return True

    def delete_note(self, note_id: str) -> bool:
        self._request("DELETE", f"/notes/{_segment(note_id)}")
        return True

    # --- bookmarks ---

    def get_bookmarked_stocks(self) -> List[dict]:
        return [s for s in self.get_stocks() if s.get("bookmark_color")]

    def get_stocks_by_bookmark_color(self, color: str) -> List[dict]:
        return [s for s in self.get_stocks() if s.get("bookmark_color") == color]

    def group_stocks_by_bookmark_color(self) -> Dict[str, List[dict]]:
        groups = defaultdict(list)
        for stock in self.get_stocks():
            groups[stock.get("bookmark_color") or "none"].append(stock)
        return dict(groups)


def _segment(value: str) -> str:
    return quote(value, safe="")


def _error_message(resp) -> str:
    try:
        data = resp.json()
    except ValueError:
        return resp.text or resp.reason
    if isinstance(data, dict) and data.get("error"):
        return data["error"]
    return resp.reason
