# app/services/httpclient.py
import base64
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import httpx

from app.services.payloads import DATA_URI_PREFIX


class LocalFsApiError(Exception):
    """A non-2xx answer from the API, carrying its {error, code} body."""

    def __init__(self, status: int, error: str, code: Optional[str] = None):
        super().__init__(f"{status} {error}" + (f" ({code})" if code else ""))
        self.status = status
        self.error = error
        self.code = code


class LocalFsClient:
    """
    Client for scripts that reach the sandboxed tree over HTTP.

    Pass `client` to reuse an existing httpx.Client (its base_url is used);
    otherwise one is created for `base_url`.
    """

    def __init__(self, base_url: str = "http://127.0.0.1:3000", token: Optional[str] = None,
                 timeout_sec: float = 30.0, client: Optional[httpx.Client] = None):
        self.token = token
        self._client = client or httpx.Client(base_url=base_url, timeout=timeout_sec)

    def close(self):
        self._client.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    # ---------- Auth ----------

    def setup_auth(self, token: Optional[str] = None) -> Dict[str, Any]:
        token = token or self.token
        if not token:
            raise ValueError("No token provided")
        resp = self._client.post("/api/auth/setup", json={"token": token})
        self._check(resp)
        self.token = token
        return resp.json()

    # ---------- Files ----------

    def read_bytes(self, path: str) -> bytes:
        return self._request("GET", self._url("files", path)).content

    def read_file(self, path: str) -> str:
        return self.read_bytes(path).decode("utf-8")

    def create_file(self, path: str, content: str) -> Dict[str, Any]:
        return self._request("POST", self._url("files", path), json={"content": content}).json()

    def upload_file(self, path: str, data: bytes) -> Dict[str, Any]:
        file_data = DATA_URI_PREFIX + base64.b64encode(data).decode("ascii")
        return self._request("POST", self._url("files", path), json={"fileData": file_data}).json()

    def update_file(self, path: str, content: str) -> Dict[str, Any]:
        return self._request("PUT", self._url("files", path), json={"content": content}).json()

    def delete_file(self, path: str) -> Dict[str, Any]:
        return self._request("DELETE", self._url("files", path)).json()

    # ---------- Directories ----------

    def list_directory(self, path: str = "") -> List[Dict[str, Any]]:
        return self._request("GET", self._url("directories", path)).json()

    def create_directory(self, path: str) -> Dict[str, Any]:
        return self._request("POST", self._url("directories", path)).json()

    def delete_directory(self, path: str) -> Dict[str, Any]:
        return self._request("DELETE", self._url("directories", path)).json()

    # ---------- Internals ----------

    def _url(self, kind: str, path: str) -> str:
        path = path.strip("/")
        return f"/api/{kind}/{quote(path, safe='/')}" if path else f"/api/{kind}"

    def _request(self, method: str, url: str, **kwargs) -> httpx.Response:
        if not self.token:
            raise ValueError("No token provided; call setup_auth() or pass token=")
        headers = {"Authorization": f"Bearer {self.token}"}
        resp = self._client.request(method, url, headers=headers, **kwargs)
        self._check(resp)
        return resp

    @staticmethod
    def _check(resp: httpx.Response):
        if resp.is_success:
            return
        try:
            body = resp.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}
        raise LocalFsApiError(resp.status_code, body.get("error") or resp.reason_phrase, body.get("code"))
