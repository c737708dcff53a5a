"""
Shared fixtures: an in-memory stand-in for the Supabase async client and a
recording stand-in for aiohttp.ClientSession.
"""
import itertools
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

import pytest
from postgrest.exceptions import APIError

from pixgallery.supabase_service import GalleryBackend

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32
JPEG_BYTES = b"\xff\xd8\xff\xe0" + b"\x00" * 32


# --- SUPABASE ---

class FakeResult:
    def __init__(self, data: List[Dict[str, Any]]):
        self.data = data
        self.count = None


class FakeQuery:
    """Subset of the PostgREST builder chain used by GalleryBackend"""

    def __init__(self, db: "FakeSupabase", table: str):
        self.db = db
        self.table_name = table
        self.op = "select"
        self.columns = "*"
        self.payload: Any = None
        self.filters: List[tuple] = []
        self.order_by: Optional[tuple] = None
        self.limit_count: Optional[int] = None

    def select(self, columns: str = "*", **kwargs):
        self.op = "select"
        self.columns = columns
        return self

    def insert(self, payload):
        self.op = "insert"
        self.payload = payload
        return self

    def delete(self):
        self.op = "delete"
        return self

    def eq(self, column: str, value):
        self.filters.append((column, value))
        return self

    def order(self, column: str, desc: bool = False):
        self.order_by = (column, desc)
        return self

    def limit(self, count: int):
        self.limit_count = count
        return self

    async def execute(self):
        return self.db.run(self)


class FakeBucket:
    def __init__(self, storage: "FakeStorage", name: str):
        self.storage = storage
        self.name = name

    async def upload(self, path: str, file: bytes, file_options: Optional[dict] = None):
        if self.storage.fail_upload is not None:
            raise self.storage.fail_upload
        self.storage.objects[(self.name, path)] = (file, file_options or {})
        return {"Key": f"{self.name}/{path}"}

    async def get_public_url(self, path: str) -> str:
        return f"https://cdn.test/storage/v1/object/public/{self.name}/{path}"


class FakeStorage:
    def __init__(self):
        self.objects: Dict[tuple, tuple] = {}
        self.fail_upload: Optional[Exception] = None

    def from_(self, name: str) -> FakeBucket:
        return FakeBucket(self, name)


class FakeSupabase:
    """
    In-memory tables with the behaviour the core relies on: equality filters,
    ordering, limits, the user_profiles join on comments, and the unique
    (image_id, user_id) constraint on likes.
    """

    def __init__(self):
        self.tables: Dict[str, List[Dict[str, Any]]] = {
            "images": [],
            "likes": [],
            "comments": [],
            "user_profiles": [],
        }
        self.calls: List[tuple] = []
        self.failures: Dict[tuple, Exception] = {}
        self.refused_deletes: set = set()
        self.storage = FakeStorage()
        self._tick = itertools.count(1)
        self._epoch = datetime(2024, 1, 1, tzinfo=timezone.utc)

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)

    def fail_next(self, table: str, op: str, error: Exception):
        self.failures[(table, op)] = error

    def refuse_deletes(self, table: str):
        """Row-level security refusal: the delete matches nothing and raises nothing"""
        self.refused_deletes.add(table)

    def calls_to(self, table: str) -> List[str]:
        return [op for name, op in self.calls if name == table]

    def _now(self) -> str:
        return (self._epoch + timedelta(seconds=next(self._tick))).isoformat()

    def _project(self, query: FakeQuery, row: Dict[str, Any]) -> Dict[str, Any]:
        if query.columns == "id":
            return {"id": row["id"]}
        result = dict(row)
        if "user_profiles(" in query.columns:
            profile = next((p for p in self.tables["user_profiles"] if p["id"] == row.get("user_id")), None)
            result["user_profiles"] = (
                {"full_name": profile.get("full_name"), "username": profile.get("username"), "email": profile["email"]}
                if profile else None
            )
        return result

    def run(self, query: FakeQuery) -> FakeResult:
        self.calls.append((query.table_name, query.op))
        error = self.failures.pop((query.table_name, query.op), None)
        if error is not None:
            raise error

        rows = self.tables[query.table_name]

        if query.op == "insert":
            items = query.payload if isinstance(query.payload, list) else [query.payload]
            created = []
            for item in items:
                row = dict(item)
                row.setdefault("id", str(uuid.uuid4()))
                row.setdefault("created_at", self._now())
                if query.table_name == "likes" and any(
                    r["image_id"] == row["image_id"] and r["user_id"] == row["user_id"] for r in rows
                ):
                    raise APIError({
                        "message": 'duplicate key value violates unique constraint "likes_user_id_image_id_key"',
                        "code": "23505",
                        "hint": None,
                        "details": None,
                    })
                if query.table_name == "images":
                    row.setdefault("like_count", 0)
                    row.setdefault("comment_count", 0)
                rows.append(row)
                created.append(dict(row))
            return FakeResult(created)

        matched = [r for r in rows if all(r.get(column) == value for column, value in query.filters)]

        if query.op == "delete":
            if query.table_name in self.refused_deletes:
                return FakeResult([])
            doomed = {r["id"] for r in matched}
            self.tables[query.table_name] = [r for r in rows if r["id"] not in doomed]
            return FakeResult([dict(r) for r in matched])

        if query.order_by:
            column, desc = query.order_by
            matched = sorted(matched, key=lambda r: r[column], reverse=desc)
        if query.limit_count is not None:
            matched = matched[:query.limit_count]
        return FakeResult([self._project(query, r) for r in matched])

    # helpers for arranging data

    def add_profile(self, user_id: str, email: str, username: Optional[str] = None, full_name: Optional[str] = None):
        self.tables["user_profiles"].append(
            {"id": user_id, "email": email, "username": username, "full_name": full_name}
        )

    def add_image(self, **fields) -> Dict[str, Any]:
        row = {
            "id": str(uuid.uuid4()),
            "title": "Sunset",
            "description": None,
            "tags": [],
            "image_url": "https://cdn.test/sunset.png",
            "user_id": "owner",
            "is_ai_generated": False,
            "ai_prompt": None,
            "ai_model": None,
            "like_count": 0,
            "comment_count": 0,
            "created_at": self._now(),
        }
        row.update(fields)
        self.tables["images"].append(row)
        return row


@pytest.fixture
def fake_supabase() -> FakeSupabase:
    """Provide an empty in-memory store with two user profiles."""
    db = FakeSupabase()
    db.add_profile("u1", "ann@example.com", username="ann")
    db.add_profile("u2", "bob@example.com", full_name="Bob Stone")
    return db


@pytest.fixture
def backend(fake_supabase: FakeSupabase) -> GalleryBackend:
    return GalleryBackend(fake_supabase, bucket="images")


# --- HTTP ---

class FakeHttpResponse:
    def __init__(self, status: int, body: bytes, content_type: Optional[str]):
        self.status = status
        self._body = body
        self.headers = {"Content-Type": content_type} if content_type else {}

    async def read(self) -> bytes:
        return self._body

    async def text(self) -> str:
        return self._body.decode("utf-8", errors="replace")


class FakeRequestContext:
    def __init__(self, response: Optional[FakeHttpResponse], error: Optional[Exception]):
        self.response = response
        self.error = error

    async def __aenter__(self):
        if self.error is not None:
            raise self.error
        return self.response

    async def __aexit__(self, exc_type, exc, tb):
        return False


class RecordedRequest:
    def __init__(self, method: str, url: str, kwargs: Dict[str, Any]):
        self.method = method
        self.url = url
        self.kwargs = kwargs

    @property
    def headers(self) -> Dict[str, str]:
        return self.kwargs.get("headers") or {}

    @property
    def json(self) -> Any:
        return self.kwargs.get("json")


class FakeHttpSession:
    """Answers registered (method, url prefix) routes and records every request"""

    def __init__(self):
        self.routes: List[tuple] = []
        self.requests: List[RecordedRequest] = []

    def add(
        self,
        method: str,
        url: str,
        status: int = 200,
        body: bytes = PNG_BYTES,
        content_type: Optional[str] = "image/png",
        error: Optional[Exception] = None,
    ):
        self.routes.append((method, url, FakeHttpResponse(status, body, content_type), error))

    def _request(self, method: str, url: str, kwargs: Dict[str, Any]) -> FakeRequestContext:
        self.requests.append(RecordedRequest(method, str(url), kwargs))
        candidates = [r for r in self.routes if r[0] == method and str(url).startswith(r[1])]
        if not candidates:
            raise AssertionError(f"Unexpected {method} {url}")
        # longest prefix wins
        _, _, response, error = max(candidates, key=lambda r: len(r[1]))
        return FakeRequestContext(response, error)

    def get(self, url, **kwargs):
        return self._request("GET", url, kwargs)

    def post(self, url, **kwargs):
        return self._request("POST", url, kwargs)


@pytest.fixture
def http_session() -> FakeHttpSession:
    return FakeHttpSession()
