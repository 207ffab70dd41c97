"""
Shared fixtures: an in-memory Supabase stand-in and a TestClient wired to it.

FakeSupabase implements the slice of the supabase-py query builder, auth and
functions APIs that the services call. Rows live in plain dicts per table.
"""

import copy
import json
import uuid
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace
from typing import Any, Dict, List, Optional

import pytest
from fastapi import Depends
from fastapi.testclient import TestClient

from toolhub.config.permissions_config import Role
from toolhub.core.dependencies import get_access_token, get_admin_client, get_session_client
from toolhub.database.supabase_client import get_supabase
from toolhub.modules.auth.service import clear_auth_cache
from toolhub.modules.users.schemas import UserProfile

BASE_TIME = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def ts(minutes: int = 0) -> str:
    return (BASE_TIME + timedelta(minutes=minutes)).isoformat()


class FakeQuery:
    def __init__(self, db: "FakeSupabase", table: str):
        self.db = db
        self.table = table
        self.operation = "select"
        self.payload: Any = None
        self.filters: List[Any] = []
        self.order_by: Optional[tuple] = None
        self.limit_count: Optional[int] = None
        self.offset_count = 0
        self.count_mode: Optional[str] = None

    # builder
    def select(self, columns: str = "*", count: Optional[str] = None):
        self.operation = "select"
        self.count_mode = count
        return self

    def insert(self, payload):
        self.operation = "insert"
        self.payload = payload
        return self

    def update(self, payload):
        self.operation = "update"
        self.payload = payload
        return self

    def upsert(self, payload):
        self.operation = "upsert"
        self.payload = payload
        return self

    def delete(self):
        self.operation = "delete"
        return self

    def eq(self, column, value):
        self.filters.append(lambda row: row.get(column) == value)
        return self

    def in_(self, column, values):
        allowed = list(values)
        self.filters.append(lambda row: row.get(column) in allowed)
        return self

    def gte(self, column, value):
        self.filters.append(lambda row: row.get(column) is not None and str(row.get(column)) >= str(value))
        return self

    def lte(self, column, value):
        self.filters.append(lambda row: row.get(column) is not None and str(row.get(column)) <= str(value))
        return self

    def order(self, column, desc: bool = False):
        self.order_by = (column, desc)
        return self

    def limit(self, count: int):
        self.limit_count = count
        return self

    def offset(self, count: int):
        self.offset_count = count
        return self

    def _matches(self, row: Dict[str, Any]) -> bool:
        return all(check(row) for check in self.filters)

    def execute(self):
        self.db.calls.append((self.table, self.operation))
        failure = self.db.failures.get((self.table, self.operation))
        if failure is not None:
            raise failure
        rows = self.db.tables.setdefault(self.table, [])

        if self.operation in ("insert", "upsert"):
            items = self.payload if isinstance(self.payload, list) else [self.payload]
            created = []
            for item in items:
                row = dict(item)
                row.setdefault("id", str(uuid.uuid4()))
                if self.operation == "upsert":
                    rows[:] = [r for r in rows if r.get("id") != row["id"]]
                rows.append(row)
                created.append(copy.deepcopy(row))
            return SimpleNamespace(data=created, count=None)

        matched = [row for row in rows if self._matches(row)]

        if self.operation == "update":
            for row in matched:
                row.update(self.payload)
            return SimpleNamespace(data=copy.deepcopy(matched), count=None)

        if self.operation == "delete":
            self.db.tables[self.table] = [row for row in rows if not self._matches(row)]
            return SimpleNamespace(data=copy.deepcopy(matched), count=None)

        if self.order_by:
            column, desc = self.order_by
            matched = sorted(matched, key=lambda row: str(row.get(column) or ""), reverse=desc)
        total = len(matched)
        matched = matched[self.offset_count:]
        if self.limit_count is not None:
            matched = matched[:self.limit_count]
        return SimpleNamespace(
            data=copy.deepcopy(matched),
            count=total if self.count_mode else None
        )


class FakeAdminAuth:
    def __init__(self, auth: "FakeAuth"):
        self.auth = auth

    def create_user(self, attributes: Dict[str, Any]):
        email = attributes["email"]
        if any(user.email == email for user in self.auth.users.values()):
            raise Exception("A user with this email address has already been registered")
        user = self.auth.add_user(email, attributes.get("password", ""), user_metadata=attributes.get("user_metadata"))
        return SimpleNamespace(user=user)

    def update_user_by_id(self, user_id: str, attributes: Dict[str, Any]):
        user = self.auth.users.get(user_id)
        if user is None:
            return SimpleNamespace(user=None)
        if "password" in attributes:
            self.auth.passwords[user_id] = attributes["password"]
        return SimpleNamespace(user=user)


class FakeMFA:
    """auth.mfa for one signed-in user; "123456" is the only valid TOTP code."""

    VALID_CODE = "123456"

    def __init__(self, auth: "FakeAuth", user_id: str):
        self.auth = auth
        self.user_id = user_id

    @property
    def factors(self) -> List[Dict[str, Any]]:
        return self.auth.users[self.user_id].factors

    def list_factors(self):
        factors = [SimpleNamespace(**factor) for factor in self.factors]
        return SimpleNamespace(
            all=factors,
            totp=[f for f in factors if f.factor_type == "totp" and f.status == "verified"],
        )

    def enroll(self, params: Dict[str, Any]):
        factor_id = f"factor-{self.user_id}-{len(self.factors) + 1}"
        self.factors.append({
            "id": factor_id,
            "factor_type": params["factor_type"],
            "status": "unverified",
            "friendly_name": params.get("friendly_name"),
        })
        self.auth.enrollments.append(params)
        totp = SimpleNamespace(
            qr_code="data:image/svg+xml;utf-8,<svg/>",
            secret="JBSWY3DPEHPK3PXP",
            uri=f"otpauth://totp/{params.get('issuer')}:{params.get('friendly_name')}",
        )
        return SimpleNamespace(id=factor_id, type="totp", friendly_name=params.get("friendly_name"), totp=totp)

    def challenge_and_verify(self, params: Dict[str, Any]):
        factor = next((f for f in self.factors if f["id"] == params["factor_id"]), None)
        if factor is None:
            raise Exception("Factor not found")
        if params["code"] != self.VALID_CODE:
            raise Exception("Invalid TOTP code entered")
        factor["status"] = "verified"
        return SimpleNamespace(access_token=self.auth.issue_token(self.user_id), token_type="bearer")

    def unenroll(self, params: Dict[str, Any]):
        before = len(self.factors)
        self.factors[:] = [f for f in self.factors if f["id"] != params["factor_id"]]
        if len(self.factors) == before:
            raise Exception("Factor not found")
        return SimpleNamespace(id=params["factor_id"])


class FakeAuth:
    def __init__(self):
        self.enrollments: List[Dict[str, Any]] = []
        self.users: Dict[str, SimpleNamespace] = {}
        self.passwords: Dict[str, str] = {}
        self.tokens: Dict[str, str] = {}
        self.sign_outs = 0
        self.admin = FakeAdminAuth(self)

    def add_user(
        self,
        email: str,
        password: str,
        user_id: Optional[str] = None,
        mfa: bool = False,
        user_metadata: Optional[Dict[str, Any]] = None
    ) -> SimpleNamespace:
        user_id = user_id or str(uuid.uuid4())
        factors = [{"id": f"factor-{user_id}", "factor_type": "totp", "status": "verified", "friendly_name": email}] if mfa else []
        user = SimpleNamespace(
            id=user_id,
            email=email,
            user_metadata=user_metadata or {},
            app_metadata={},
            factors=factors,
            created_at=ts(),
            updated_at=ts(),
        )
        self.users[user_id] = user
        self.passwords[user_id] = password
        return user

    def issue_token(self, user_id: str) -> str:
        token = f"token-{user_id}"
        self.tokens[token] = user_id
        return token

    def sign_in_with_password(self, credentials: Dict[str, str]):
        for user_id, user in self.users.items():
            if user.email == credentials["email"] and self.passwords[user_id] == credentials["password"]:
                session = SimpleNamespace(access_token=self.issue_token(user_id))
                return SimpleNamespace(user=user, session=session)
        raise Exception("Invalid login credentials")

    def get_user(self, jwt: Optional[str] = None):
        user_id = self.tokens.get(jwt)
        if user_id is None:
            raise Exception("invalid JWT: unable to parse or verify signature")
        return SimpleNamespace(user=self.users[user_id])

    def sign_out(self):
        self.sign_outs += 1


class FakeFunctions:
    def __init__(self):
        self.calls: List[tuple] = []
        self.response: Any = json.dumps({"message": "User invited successfully", "user": {"id": "invited-1"}}).encode()
        self.error: Optional[Exception] = None

    def invoke(self, function_name: str, invoke_options: Optional[Dict[str, Any]] = None):
        self.calls.append((function_name, invoke_options or {}))
        if self.error is not None:
            raise self.error
        return self.response


class FakeSupabase:
    def __init__(self):
        self.tables: Dict[str, List[Dict[str, Any]]] = {}
        self.failures: Dict[tuple, Exception] = {}
        self.calls: List[tuple] = []
        self.auth = FakeAuth()
        self.functions = FakeFunctions()

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)

    def session_for(self, token: Optional[str]) -> SimpleNamespace:
        """Client bound to the token's user, as get_session_client returns."""
        user_id = self.auth.tokens.get(token)
        if user_id is None:
            raise Exception("invalid JWT: unable to parse or verify signature")
        return SimpleNamespace(auth=SimpleNamespace(mfa=FakeMFA(self.auth, user_id)))

    def rows(self, name: str) -> List[Dict[str, Any]]:
        return self.tables.setdefault(name, [])

    def add_user(self, name: str, role: Role, mfa: bool = True, must_change_password: bool = False,
                 password: str = "password123", minutes: int = 0) -> UserProfile:
        slug = name.lower().replace(" ", ".")
        email = f"{slug}@example.com"
        user = self.auth.add_user(email, password, user_id=f"user-{slug}", mfa=mfa)
        row = {
            "id": user.id,
            "email": email,
            "name": name,
            "role": role.value,
            "must_change_password": must_change_password,
            "created_at": ts(minutes),
        }
        self.rows("users").append(row)
        return UserProfile(**row)

    def add_tool(self, name: str, owner_id: Optional[str], status: str = "approved", minutes: int = 0) -> Dict[str, Any]:
        row = {
            "id": f"tool-{name.lower().replace(' ', '-')}",
            "name": name,
            "description": None,
            "url": None,
            "owner_id": owner_id,
            "created_by": owner_id,
            "approval_status": status,
            "created_at": ts(minutes),
        }
        self.rows("tools").append(row)
        return row

    def add_request(self, request_id: str, tool_id: str, created_by: str, status: str = "pending",
                    minutes: int = 0, created_at: Optional[str] = None) -> Dict[str, Any]:
        row = {
            "id": request_id,
            "tool_id": tool_id,
            "title": f"Request {request_id}",
            "description": None,
            "status": status,
            "created_by": created_by,
            "created_at": created_at or ts(minutes),
        }
        self.rows("requests").append(row)
        return row

    def add_notification(self, notification_id: str, user_id: str, is_read: bool = False, minutes: int = 0) -> Dict[str, Any]:
        row = {
            "id": notification_id,
            "user_id": user_id,
            "type": "tool_added",
            "title": f"Notification {notification_id}",
            "message": "Something happened",
            "related_id": None,
            "related_type": None,
            "is_read": is_read,
            "created_at": ts(minutes),
        }
        self.rows("notifications").append(row)
        return row


@pytest.fixture(autouse=True)
def _clear_auth_cache():
    clear_auth_cache()
    yield
    clear_auth_cache()


@pytest.fixture
def fake_db() -> FakeSupabase:
    return FakeSupabase()


@pytest.fixture
def admin(fake_db) -> UserProfile:
    return fake_db.add_user("Ada Admin", Role.ADMIN)


@pytest.fixture
def owner(fake_db) -> UserProfile:
    return fake_db.add_user("Olga Owner", Role.OWNER)


@pytest.fixture
def observer(fake_db) -> UserProfile:
    return fake_db.add_user("Otto Observer", Role.OBSERVER)


@pytest.fixture
def client(fake_db):
    from toolhub.main import app

    app.dependency_overrides[get_supabase] = lambda: fake_db
    app.dependency_overrides[get_admin_client] = lambda: fake_db

    def session_client(token: Optional[str] = Depends(get_access_token)):
        return fake_db.session_for(token) if token else None

    app.dependency_overrides[get_session_client] = session_client
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def auth_headers(fake_db: FakeSupabase, user: UserProfile) -> Dict[str, str]:
    return {"Authorization": f"Bearer {fake_db.auth.issue_token(user.id)}"}


@pytest.fixture
def headers_for(fake_db):
    return lambda user: auth_headers(fake_db, user)
