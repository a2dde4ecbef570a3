"""
Test fixtures for the admin hooks and pages.

Provides an in-memory stand-in for the Supabase client (query builder and
storage API), picked-file objects shaped like Streamlit's UploadedFile and a
session_state replacement with attribute access.
"""

import threading
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, List, Optional, Tuple


class FakeAPIError(Exception):
    """Shaped like the REST client's APIError: carries message and code."""

    def __init__(self, message: str, code: str = "PGRST000"):
        super().__init__(message)
        self.message = message
        self.code = code


class FakeStorageError(Exception):
    """Shaped like the storage client's error: message is a dict."""

    def __init__(self, message: str, status: int = 400):
        super().__init__(message)
        self.message = {"statusCode": status, "error": "Bad Request", "message": message}


class FakeResponse:
    def __init__(self, data: Any):
        self.data = data


class FakeUploadedFile:
    """Picked file with the attributes the app reads from UploadedFile."""

    def __init__(self, name: str = "photo.png", size: Optional[int] = None,
                 type: Optional[str] = "image/png", content: Optional[bytes] = None):
        self.name = name
        self.type = type
        self._content = content if content is not None else b"x" * (size if size is not None else 16)
        self.size = size if size is not None else len(self._content)

    def getvalue(self) -> bytes:
        return self._content


class MockSessionState(dict):
    """Minimal session_state stand-in supporting attribute access."""

    def __getattr__(self, key: str) -> Any:
        try:
            return self[key]
        except KeyError as exc:
            raise AttributeError(key) from exc

    def __setattr__(self, key: str, value: Any) -> None:
        self[key] = value

    def __delattr__(self, key: str) -> None:
        del self[key]


def _sort_key(value: Any) -> Tuple[bool, Any]:
    return (value is None, value if value is not None else 0)


class FakeQuery:
    """Chainable query mimicking ``client.table(name)``."""

    def __init__(self, db: "FakeSupabaseClient", table: str):
        self.db = db
        self.table = table
        self.op = "select"
        self.columns = "*"
        self.payload: Any = None
        self.filters: List[Tuple[str, Any]] = []
        self.order_by: Optional[Tuple[str, bool]] = None
        self.is_single = False

    def select(self, columns: str = "*"):
        self.op = "select"
        self.columns = columns
        return self

    def insert(self, payload: Dict[str, Any]):
        self.op = "insert"
        self.payload = payload
        return self

    def update(self, payload: Dict[str, Any]):
        self.op = "update"
        self.payload = payload
        return self

    def delete(self):
        self.op = "delete"
        return self

    def eq(self, column: str, value: Any):
        self.filters.append((column, value))
        return self

    def order(self, column: str, desc: bool = False):
        self.order_by = (column, desc)
        return self

    def single(self):
        self.is_single = True
        return self

    def _project(self, row: Dict[str, Any]) -> Dict[str, Any]:
        if self.columns.strip() == "*":
            return dict(row)
        return {name.strip(): row.get(name.strip()) for name in self.columns.split(",")}

    def execute(self) -> FakeResponse:
        with self.db.lock:
            return self._execute()

    def _execute(self) -> FakeResponse:
        self.db.calls.append({
            "table": self.table,
            "op": self.op,
            "payload": self.payload,
            "filters": dict(self.filters),
        })
        self.db.raise_if_failing(self.table, self.op, self.payload, dict(self.filters))

        rows = self.db.tables.setdefault(self.table, [])
        matched = [row for row in rows if all(row.get(col) == value for col, value in self.filters)]

        if self.op == "select":
            result = [self._project(row) for row in matched]
            if self.order_by:
                column, desc = self.order_by
                result.sort(key=lambda r: _sort_key(r.get(column)), reverse=desc)
            if self.is_single:
                if len(result) != 1:
                    raise FakeAPIError("JSON object requested, multiple (or no) rows returned", "PGRST116")
                return FakeResponse(result[0])
            return FakeResponse(result)

        if self.op == "insert":
            row = dict(self.payload)
            row.setdefault("id", self.db.next_id(self.table))
            row.setdefault("created_at", self.db.next_timestamp())
            rows.append(row)
            return FakeResponse([dict(row)])

        if self.op == "update":
            for row in matched:
                row.update(self.payload)
            return FakeResponse([dict(row) for row in matched])

        if self.op == "delete":
            self.db.tables[self.table] = [row for row in rows if row not in matched]
            return FakeResponse([dict(row) for row in matched])

        raise AssertionError(f"Unsupported operation {self.op}")


class FakeBucket:
    def __init__(self, storage: "FakeStorage", name: str):
        self.storage = storage
        self.name = name

    def upload(self, path: str, file: bytes, file_options: Optional[Dict[str, Any]] = None):
        self.storage.db.raise_if_failing(f"storage:{self.name}", "upload", path, {})
        self.storage.objects[(self.name, path)] = {"content": file, "options": dict(file_options or {})}
        return FakeResponse({"path": path})

    def get_public_url(self, path: str) -> str:
        return f"https://example.supabase.co/storage/v1/object/public/{self.name}/{path}?"

    def remove(self, paths: List[str]):
        self.storage.db.raise_if_failing(f"storage:{self.name}", "remove", list(paths), {})
        self.storage.removed.append((self.name, list(paths)))
        for path in paths:
            self.storage.objects.pop((self.name, path), None)
        return [{"name": path} for path in paths]


class FakeStorage:
    def __init__(self, db: "FakeSupabaseClient"):
        self.db = db
        self.objects: Dict[Tuple[str, str], Dict[str, Any]] = {}
        self.removed: List[Tuple[str, List[str]]] = []

    def from_(self, bucket: str) -> FakeBucket:
        return FakeBucket(self, bucket)

    def paths(self, bucket: str) -> List[str]:
        return sorted(path for (name, path) in self.objects if name == bucket)


class FakeAuth:
    def __init__(self, users: Optional[Dict[str, str]] = None):
        self.users = users or {}
        self.signed_out = False

    def sign_in_with_password(self, credentials: Dict[str, str]):
        email = credentials.get("email")
        if self.users.get(email) != credentials.get("password"):
            raise FakeAPIError("Invalid login credentials", "400")
        user = type("User", (), {"id": f"user-{email}", "email": email})()
        return type("AuthResponse", (), {"user": user, "session": object()})()

    def sign_out(self):
        self.signed_out = True


class FakeSupabaseClient:
    """
    In-memory backend. Tables are lists of dict rows; ``fail`` makes matching
    requests raise so error paths can be exercised.
    """

    def __init__(self, tables: Optional[Dict[str, List[Dict[str, Any]]]] = None):
        self.tables: Dict[str, List[Dict[str, Any]]] = {
            name: [dict(row) for row in rows] for name, rows in (tables or {}).items()
        }
        self.calls: List[Dict[str, Any]] = []
        self.storage = FakeStorage(self)
        self.auth = FakeAuth()
        self.lock = threading.RLock()
        self._failures: List[Dict[str, Any]] = []
        self._counters: Dict[str, int] = {}
        self._clock = datetime(2025, 1, 1, 0, 0, 0)

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)

    def next_id(self, table: str) -> str:
        self._counters[table] = self._counters.get(table, 0) + 1
        return f"{table}-{self._counters[table]}"

    def next_timestamp(self) -> str:
        self._clock += timedelta(seconds=1)
        return self._clock.isoformat() + "+00:00"

    def fail(self, table: str, op: str, error: Optional[Exception] = None,
             when: Optional[Callable[[Any, Dict[str, Any]], bool]] = None, times: Optional[int] = None):
        """
        Make requests fail.

        Args:
            table: Table name, or "storage:<bucket>" for storage calls
            op: select, insert, update, delete, upload or remove
            error: Exception to raise (an APIError lookalike by default)
            when: Predicate on (payload, filters) selecting the failing requests
            times: Number of failures before the request succeeds again
        """
        self._failures.append({
            "table": table,
            "op": op,
            "error": error or FakeAPIError(f"{op} on {table} failed"),
            "when": when,
            "remaining": times,
        })

    def raise_if_failing(self, table: str, op: str, payload: Any, filters: Dict[str, Any]):
        for failure in self._failures:
            if failure["table"] != table or failure["op"] != op:
                continue
            if failure["when"] is not None and not failure["when"](payload, filters):
                continue
            if failure["remaining"] is not None:
                if failure["remaining"] <= 0:
                    continue
                failure["remaining"] -= 1
            raise failure["error"]

    def rows(self, table: str) -> List[Dict[str, Any]]:
        return [dict(row) for row in self.tables.get(table, [])]

    def calls_for(self, table: str, op: Optional[str] = None) -> List[Dict[str, Any]]:
        return [c for c in self.calls if c["table"] == table and (op is None or c["op"] == op)]
