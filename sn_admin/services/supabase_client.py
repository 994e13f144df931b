# === supabase_client.py ===
# Thin PostgREST wrapper. Every failure becomes a BackendError carrying the
# Postgres/PostgREST error code so callers never match on message text.

import json
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

import requests

from sn_admin.config import logger, settings
from sn_admin.services.errors import BackendError, NOT_FOUND

Filter = Tuple[str, str, Any]

FILTER_OPERATORS = {"eq", "neq", "gt", "gte", "lt", "lte", "is", "in", "ilike"}


def _format_value(op: str, value: Any) -> str:
    if op == "in":
        return "(" + ",".join(str(v) for v in value) + ")"
    if op == "is":
        return "null" if value is None else str(value).lower()
    if isinstance(value, bool):
        return str(value).lower()
    return str(value)


def _quote(text: str) -> str:
    # , . : ( ) are reserved inside an or=(...) group
    return '"' + text.replace("\\", "\\\\").replace('"', '\\"') + '"'


def build_query_params(filters: Optional[Iterable[Filter]]) -> List[Tuple[str, str]]:
    params = []
    for column, op, value in filters or []:
        if column == "or":
            # value is a sequence of (column, op, value) alternatives
            terms = ",".join(f"{c}.{o}.{_quote(_format_value(o, v))}" for c, o, v in value)
            params.append(("or", f"({terms})"))
            continue
        if op not in FILTER_OPERATORS:
            raise ValueError(f"Unsupported filter operator: {op}")
        params.append((column, f"{op}.{_format_value(op, value)}"))
    return params


class SupabaseClient:
    def __init__(self, url: str = None, service_key: str = None, timeout: float = None, session=None):
        self.url = (url if url is not None else settings.SUPABASE_URL).rstrip("/")
        self.service_key = service_key if service_key is not None else settings.SUPABASE_SERVICE_KEY
        self.timeout = timeout or settings.REQUEST_TIMEOUT
        self.session = session or requests.Session()

    # === Internals ===

    def _headers(self, prefer: str = None) -> Dict[str, str]:
        headers = {
            "apikey": self.service_key,
            "Authorization": f"Bearer {self.service_key}",
            "Content-Type": "application/json",
        }
        if prefer:
            headers["Prefer"] = prefer
        return headers

    def _table_url(self, table: str) -> str:
        return f"{self.url}/rest/v1/{table}"

    def _request(self, method: str, url: str, **kwargs) -> requests.Response:
        try:
            res = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            logger.error(f"❌ Supabase {method} {url} failed: {e}")
            raise BackendError(None, f"Backend unreachable: {e}", status=503)

        if res.ok:
            return res

        try:
            body = res.json()
        except ValueError:
            body = {"message": res.text}
        if not isinstance(body, dict):
            body = {"message": json.dumps(body)}

        code = body.get("code")
        message = body.get("message") or res.text
        logger.error(f"❌ Supabase {method} {url} → {res.status_code} [{code}] {message}")
        raise BackendError(code, message, status=res.status_code)

    # === Table Operations ===

    def select_with_count(
        self,
        table: str,
        filters: Optional[Sequence[Filter]] = None,
        columns: str = "*",
        order: str = None,
        ascending: bool = True,
        limit: int = None,
        offset: int = None,
    ) -> Tuple[List[dict], Optional[int]]:
        params = [("select", columns)] + build_query_params(filters)
        if order:
            params.append(("order", f"{order}.{'asc' if ascending else 'desc'}"))
        if limit is not None:
            params.append(("limit", str(limit)))
        if offset:
            params.append(("offset", str(offset)))

        res = self._request("GET", self._table_url(table), headers=self._headers("count=exact"), params=params)

        total = None
        content_range = res.headers.get("Content-Range", "")
        if "/" in content_range:
            tail = content_range.split("/")[-1]
            if tail.isdigit():
                total = int(tail)
        return res.json(), total

    def select(self, table: str, filters: Optional[Sequence[Filter]] = None, **kwargs) -> List[dict]:
        rows, _ = self.select_with_count(table, filters, **kwargs)
        return rows

    def get_one(self, table: str, record_id: Any) -> dict:
        rows = self.select(table, [("id", "eq", record_id)], limit=1)
        if not rows:
            raise BackendError(NOT_FOUND, f"{table} {record_id} not found", status=404)
        return rows[0]

    def insert(self, table: str, rows) -> List[dict]:
        res = self._request(
            "POST", self._table_url(table), headers=self._headers("return=representation"), json=rows
        )
        return res.json()

    def update(self, table: str, values: dict, filters: Sequence[Filter]) -> List[dict]:
        if not filters:
            raise ValueError("Refusing to update without filters")
        res = self._request(
            "PATCH",
            self._table_url(table),
            headers=self._headers("return=representation"),
            params=build_query_params(filters),
            json=values,
        )
        return res.json()

    def delete(self, table: str, filters: Sequence[Filter]) -> List[dict]:
        if not filters:
            raise ValueError("Refusing to delete without filters")
        res = self._request(
            "DELETE",
            self._table_url(table),
            headers=self._headers("return=representation"),
            params=build_query_params(filters),
        )
        return res.json()

    # === Edge Functions ===

    def invoke(self, function_name: str, body: dict) -> dict:
        res = self._request("POST", f"{self.url}/functions/v1/{function_name}", headers=self._headers(), json=body)
        try:
            return res.json()
        except ValueError:
            return {}


_client = None


def get_db() -> SupabaseClient:
    global _client
    if _client is None:
        _client = SupabaseClient()
    return _client
