"""
Shared fixtures.

FakeSupabase mimics the slice of the Supabase client the app uses
(table().select/update/eq/order/execute and auth.*) so no test needs a
network connection or credentials.
"""

from types import SimpleNamespace
from typing import Any, Callable, Dict, List, Optional

import pytest


# ============================================================
# Fake Supabase client
# ============================================================

class FakeTable:
    def __init__(self, rows: List[Dict[str, Any]]):
        self.rows = rows
        self.error: Optional[Exception] = None
        self.queries: List["FakeQuery"] = []
        # RLS stand-in: which rows the current session may update
        self.can_update: Callable[[Dict[str, Any]], bool] = lambda row: True


class FakeQuery:
    def __init__(self, table: FakeTable):
        self.table = table
        self.op = "select"
        self.columns: Optional[str] = None
        self.payload: Optional[Dict[str, Any]] = None
        self.filters: List[tuple] = []
        self.order_by: Optional[str] = None

    def select(self, columns: str):
        self.columns = columns
        return self

    def update(self, payload: Dict[str, Any]):
        self.op = "update"
        self.payload = payload
        return self

    def eq(self, column: str, value: Any):
        self.filters.append((column, value))
        return self

    def order(self, column: str):
        self.order_by = column
        return self

    def execute(self):
        self.table.queries.append(self)
        if self.table.error is not None:
            raise self.table.error

        rows = [r for r in self.table.rows if all(r.get(c) == v for c, v in self.filters)]

        if self.op == "update":
            rows = [r for r in rows if self.table.can_update(r)]
            for r in rows:
                r.update(self.payload)

        if self.order_by:
            rows = sorted(rows, key=lambda r: r[self.order_by])

        return SimpleNamespace(data=[dict(r) for r in rows])


class FakeAuth:
    def __init__(self, user_id: Optional[str] = None, email: Optional[str] = None, storage: Any = None):
        self.user = SimpleNamespace(id=user_id, email=email) if user_id else None
        self.storage = storage
        self.exchanged: List[str] = []
        self.otp_requests: List[Dict[str, Any]] = []
        self.issued_codes: Dict[str, str] = {}
        self.signed_out = False
        self.get_user_error: Optional[Exception] = None
        # Called on get_user(); lets a test simulate a token refresh
        self.on_get_user: Optional[Callable[[], None]] = None

    def get_user(self):
        if self.on_get_user is not None:
            self.on_get_user()
        if self.get_user_error is not None:
            raise self.get_user_error
        if self.user is None:
            return None
        return SimpleNamespace(user=self.user)

    def exchange_code_for_session(self, params: Dict[str, Any]):
        self.exchanged.append(params["auth_code"])
        return SimpleNamespace(user=SimpleNamespace(id="user-from-code", email="new@example.org"))

    def sign_in_with_otp(self, credentials: Dict[str, Any]):
        self.otp_requests.append(credentials)
        self.issued_codes[credentials["email"]] = "123456"

    def verify_otp(self, params: Dict[str, Any]):
        if self.issued_codes.get(params["email"]) != params["token"] or params["type"] != "email":
            raise RuntimeError("Token has expired or is invalid")
        del self.issued_codes[params["email"]]
        self.user = SimpleNamespace(id=f"user-{params['email']}", email=params["email"])
        if self.storage is not None:
            self.storage.set_item("auth-token", f"session-for-{params['email']}")
        return SimpleNamespace(user=self.user)

    def sign_out(self):
        self.signed_out = True
        self.user = None
        if self.storage is not None:
            self.storage.remove_item("auth-token")


class FakeSupabase:
    def __init__(
        self,
        rows: Optional[List[Dict[str, Any]]] = None,
        user_id: Optional[str] = None,
        storage: Any = None,
    ):
        self.tables = {"species": FakeTable(rows if rows is not None else [])}
        self.auth = FakeAuth(
            user_id=user_id,
            email=f"{user_id}@example.org" if user_id else None,
            storage=storage,
        )

    def table(self, name: str):
        return FakeQuery(self.tables.setdefault(name, FakeTable([])))


# ============================================================
# Fixtures
# ============================================================

AUTHOR_ID = "7f1d2c3e-author"


@pytest.fixture
def species_rows():
    return [
        {
            "id": 1,
            "common_name": "Snow leopard",
            "scientific_name": "Panthera uncia",
            "kingdom": "Animalia",
            "total_population": 4500,
            "image": "https://example.org/snow-leopard.jpg",
            "description": "Large cat of the high mountains.",
            "author": AUTHOR_ID,
            "created_at": "2024-01-01T00:00:00Z",
        },
        {
            "id": 2,
            "common_name": "Axolotl",
            "scientific_name": "Ambystoma mexicanum",
            "kingdom": "Animalia",
            "total_population": None,
            "image": None,
            "description": None,
            "author": "someone-else",
            "created_at": "2024-01-02T00:00:00Z",
        },
    ]


@pytest.fixture
def author_id():
    return AUTHOR_ID


@pytest.fixture
def fake_supabase(species_rows):
    return FakeSupabase(rows=species_rows, user_id=AUTHOR_ID)


@pytest.fixture
def anonymous_supabase(species_rows):
    return FakeSupabase(rows=species_rows, user_id=None)


@pytest.fixture
def write_csv(tmp_path):
    """Write CSV text to a temp file and return its path."""
    def _write(text: str, name: str = "animals.csv") -> str:
        path = tmp_path / name
        path.write_text(text, encoding="utf-8")
        return str(path)

    return _write


@pytest.fixture
def make_supabase(species_rows):
    """Factory for a fake client over caller-supplied session storage."""
    def _make(user_id: Optional[str] = None, storage: Any = None) -> FakeSupabase:
        return FakeSupabase(rows=species_rows, user_id=user_id, storage=storage)

    return _make
