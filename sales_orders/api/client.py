# api/client.py
"""
Transport for the sales-order web service.

Every operation is an HTTP GET against one endpoint; the operation name goes
in the `op` query key and writes carry a JSON array in the `json` key.
Responses are JSON arrays. Save/delete responses follow the ErrCode/ErrMsg
convention: `[{"ErrCode": "1", ...}]` on success, anything else is failure.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import requests
from requests.adapters import HTTPAdapter

from .. import config
from ..constants import SAVE_OPS, SUCCESS_CODE

log = logging.getLogger(__name__)


class ApiError(Exception):
    """
    Transport or decode failure: the request never produced a usable body.
    Server-reported business failures are ApiResult(ok=False), not ApiError.
    """
    def __init__(
        self,
        message: str,
        *,
        op: str | None = None,
        status: int | None = None,
        raw_response_text: str | None = None,
    ):
        super().__init__(message)
        self.op = op
        self.status = status
        self.raw_response_text = raw_response_text


@dataclass
class ApiResult:
    ok: bool
    message: Optional[str] = None
    data: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_response(cls, body: Any) -> "ApiResult":
        """
        Decode the ErrCode/ErrMsg convention. Empty arrays, non-arrays and
        missing ErrCode all count as failure.
        """
        if not isinstance(body, list) or not body or not isinstance(body[0], dict):
            return cls(ok=False)
        first = body[0]
        code = first.get("ErrCode")
        ok = code is not None and str(code) == SUCCESS_CODE
        msg = first.get("ErrMsg") or None
        return cls(ok=ok, message=msg, data=first)


def _make_session() -> requests.Session:
    session = requests.Session()
    # No retry policy: failures are surfaced and the user re-triggers.
    adapter = HTTPAdapter(max_retries=0)
    session.mount("http://", adapter)
    session.mount("https://", adapter)
    session.headers.update({"Accept": "application/json"})
    return session


class ApiClient:
    def __init__(
        self,
        base_url: str | None = None,
        *,
        session: requests.Session | None = None,
        timeout: float | None = None,
    ):
        self.base_url = base_url or config.API_URL
        self.session = session or _make_session()
        self.timeout = config.API_TIMEOUT if timeout is None else timeout

    # ---- low level --------------------------------------------------------

    def _params(self, op: str, params: Dict[str, Any]) -> Dict[str, Any]:
        key = "OP" if op in SAVE_OPS else "op"
        out: Dict[str, Any] = {key: op}
        for k, v in params.items():
            if v is not None:
                out[k] = v
        return out

    def _get(self, op: str, **params) -> Any:
        query = self._params(op, params)
        log.debug("GET %s %s", op, query)
        try:
            resp = self.session.get(self.base_url, params=query, timeout=self.timeout)
        except requests.RequestException as e:
            log.warning("Request for %s failed: %s", op, e)
            raise ApiError(f"Network error: {e}", op=op) from e

        if resp.status_code >= 400:
            log.warning("HTTP %s for %s: %s", resp.status_code, op, resp.text[:500])
            raise ApiError(
                f"Server returned HTTP {resp.status_code}",
                op=op, status=resp.status_code, raw_response_text=resp.text,
            )
        try:
            body = resp.json()
        except ValueError as e:
            log.warning("Invalid JSON for %s: %s", op, resp.text[:500])
            raise ApiError(
                f"Invalid response: {e}",
                op=op, status=resp.status_code, raw_response_text=resp.text,
            ) from e
        log.debug("Response %s: %s", op, body)
        return body

    # ---- public -----------------------------------------------------------

    def fetch(self, op: str, **params) -> List[Dict[str, Any]]:
        """Read operation; a null or non-array body is an empty list."""
        body = self._get(op, **params)
        if not isinstance(body, list):
            return []
        return [r for r in body if isinstance(r, dict)]

    def call(self, op: str, **params) -> ApiResult:
        """Delete-style operation decoded with the ErrCode convention."""
        return ApiResult.from_response(self._get(op, **params))

    def save(self, op: str, payload: List[Dict[str, Any]]) -> ApiResult:
        """Write operation: `payload` travels JSON-encoded in the `json` key."""
        return ApiResult.from_response(self._get(op, json=json.dumps(payload)))
