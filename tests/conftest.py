"""Shared fixtures: isolated storage and an in-process fake notes service."""

from collections.abc import AsyncIterator
from datetime import UTC
from datetime import datetime
from pathlib import Path
from typing import Any

import httpx
import pytest
import pytest_asyncio
from fastapi import Body
from fastapi import Depends
from fastapi import FastAPI
from fastapi import Header
from fastapi import Request
from fastapi.responses import JSONResponse

from notes_client.app import NotesClient
from notes_client.config.settings import ClientSettings
from notes_client.remote.client import ApiClient
from notes_client.storage.token_store import MemoryTokenStore

VALID_CODE = "123456"
VALID_GOOGLE_TOKEN = "google-id-token"
BASE_URL = "http://testserver/api"


class ServiceError(Exception):
    def __init__(self, status_code: int, message: str) -> None:
        self.status_code = status_code
        self.message = message


class FakeNotesService:
    """In-memory stand-in for the remote notes service.

    Speaks the same envelope as the real one: ``{"data": {...}}`` on
    success and ``{"message": "..."}`` on failure.
    """

    def __init__(self) -> None:
        self.users: dict[str, dict[str, Any]] = {}
        self.tokens: dict[str, str] = {}
        self.notes: dict[int, dict[str, Any]] = {}
        self.codes_sent: list[str] = []
        self.requests: list[tuple[str, str, str | None]] = []
        self.failures: dict[tuple[str, str], tuple[int, str | None]] = {}
        self._next_user_id = 1
        self._next_note_id = 1
        self._tokens_issued = 0
        self.app = self._build_app()

    # --- Test helpers ---

    def add_user(self, email: str, name: str = "Ada Lovelace", google: bool = False) -> dict[str, Any]:
        user = {
            "id": self._next_user_id,
            "name": name,
            "email": email,
            "dob": None,
            "is_google_user": google,
        }
        self._next_user_id += 1
        self.users[email] = user
        return user

    def issue_token(self, email: str) -> str:
        self._tokens_issued += 1
        token = f"token-{self._tokens_issued}-{self.users[email]['id']}"
        self.tokens[token] = email
        return token

    def add_note(self, email: str, title: str, content: str) -> dict[str, Any]:
        now = datetime.now(UTC).isoformat()
        note = {
            "id": self._next_note_id,
            "title": title,
            "content": content,
            "created_at": now,
            "updated_at": now,
            "user_id": self.users[email]["id"],
        }
        self._next_note_id += 1
        self.notes[note["id"]] = note
        return note

    def fail_next(self, method: str, path: str, status_code: int = 500, message: str | None = None) -> None:
        """Make the next matching request fail with the given status."""
        self.failures[(method, f"/api{path}")] = (status_code, message)

    def revoke_all_tokens(self) -> None:
        self.tokens.clear()

    # --- App ---

    def _build_app(self) -> FastAPI:
        app = FastAPI()
        service = self

        @app.exception_handler(ServiceError)
        async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
            return JSONResponse({"success": False, "message": exc.message}, status_code=exc.status_code)

        @app.middleware("http")
        async def record_and_inject(request: Request, call_next: Any) -> Any:
            service.requests.append((request.method, request.url.path, request.headers.get("authorization")))
            failure = service.failures.pop((request.method, request.url.path), None)
            if failure is not None:
                status_code, message = failure
                body = {"success": False, "message": message} if message else {}
                return JSONResponse(body, status_code=status_code)
            return await call_next(request)

        def current_email(authorization: str | None = Header(default=None)) -> str:
            if not authorization or not authorization.startswith("Bearer "):
                raise ServiceError(401, "Access denied. No token provided.")
            token = authorization.removeprefix("Bearer ")
            if token not in service.tokens:
                raise ServiceError(401, "Invalid token")
            return service.tokens[token]

        def ok(data: dict[str, Any] | None = None, status_code: int = 200) -> JSONResponse:
            return JSONResponse({"success": True, "data": data or {}}, status_code=status_code)

        def auth_response(email: str) -> JSONResponse:
            return ok({"user": service.users[email], "token": service.issue_token(email)})

        @app.post("/api/auth/send-signup-otp")
        async def send_signup_otp(payload: dict[str, Any] = Body(...)) -> JSONResponse:
            if payload["email"] in service.users:
                raise ServiceError(400, "User already exists")
            service.codes_sent.append(payload["email"])
            return ok()

        @app.post("/api/auth/send-login-otp")
        async def send_login_otp(payload: dict[str, Any] = Body(...)) -> JSONResponse:
            if payload["email"] not in service.users:
                raise ServiceError(404, "User not found")
            service.codes_sent.append(payload["email"])
            return ok()

        @app.post("/api/auth/signup")
        async def signup(payload: dict[str, Any] = Body(...)) -> JSONResponse:
            if payload["otp"] != VALID_CODE:
                raise ServiceError(400, "Invalid or expired OTP")
            user = service.add_user(payload["email"], payload["name"])
            user["dob"] = payload["dob"]
            return auth_response(payload["email"])

        @app.post("/api/auth/login")
        async def login(payload: dict[str, Any] = Body(...)) -> JSONResponse:
            if payload["email"] not in service.users:
                raise ServiceError(404, "User not found")
            if payload["otp"] != VALID_CODE:
                raise ServiceError(400, "Invalid or expired OTP")
            return auth_response(payload["email"])

        @app.post("/api/auth/google")
        async def google(payload: dict[str, Any] = Body(...)) -> JSONResponse:
            if payload.get("idToken") != VALID_GOOGLE_TOKEN:
                raise ServiceError(401, "Invalid Google token")
            email = "google.user@example.com"
            if email not in service.users:
                service.add_user(email, "Google User", google=True)
            return auth_response(email)

        @app.get("/api/auth/me")
        async def me(email: str = Depends(current_email)) -> JSONResponse:
            return ok({"user": service.users[email]})

        @app.post("/api/auth/logout")
        async def logout(
            authorization: str | None = Header(default=None), email: str = Depends(current_email)
        ) -> JSONResponse:
            service.tokens.pop((authorization or "").removeprefix("Bearer "), None)
            return ok()

        @app.get("/api/notes")
        async def list_notes(email: str = Depends(current_email)) -> JSONResponse:
            user_id = service.users[email]["id"]
            owned = [n for n in service.notes.values() if n["user_id"] == user_id]
            owned.sort(key=lambda n: n["id"], reverse=True)
            return ok({"notes": owned})

        @app.post("/api/notes")
        async def create_note(payload: dict[str, Any] = Body(...), email: str = Depends(current_email)) -> JSONResponse:
            note = service.add_note(email, payload["title"], payload["content"])
            return ok({"note": note}, status_code=201)

        def owned_note(note_id: int, email: str) -> dict[str, Any]:
            note = service.notes.get(note_id)
            if note is None or note["user_id"] != service.users[email]["id"]:
                raise ServiceError(404, "Note not found")
            return note

        @app.put("/api/notes/{note_id}")
        async def update_note(
            note_id: int, payload: dict[str, Any] = Body(...), email: str = Depends(current_email)
        ) -> JSONResponse:
            note = owned_note(note_id, email)
            if "title" in payload:
                note["title"] = payload["title"]
            if "content" in payload:
                note["content"] = payload["content"]
            note["updated_at"] = datetime.now(UTC).isoformat()
            return ok({"note": note})

        @app.delete("/api/notes/{note_id}")
        async def delete_note(note_id: int, email: str = Depends(current_email)) -> JSONResponse:
            owned_note(note_id, email)
            del service.notes[note_id]
            return ok()

        return app


@pytest.fixture
def mock_storage_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point NOTES_CLIENT_HOME at a temporary directory.

    Returns:
        The temporary home directory
    """
    home = (tmp_path / "notes_home").resolve()
    monkeypatch.setenv("NOTES_CLIENT_HOME", str(home))
    for var in (
        "NOTES_CLIENT_CONFIG_DIR",
        "NOTES_CLIENT_STATE_DIR",
        "NOTES_CLIENT_API_BASE_URL",
        "NOTES_CLIENT_TIMEOUT_SECONDS",
        "NOTES_CLIENT_LOG_LEVEL",
        "NOTES_CLIENT_TOKEN_FILE",
        "NOTES_CLIENT_STATE_PATH",
    ):
        monkeypatch.delenv(var, raising=False)
    return home


@pytest.fixture
def fake_service() -> FakeNotesService:
    return FakeNotesService()


@pytest.fixture
def transport(fake_service: FakeNotesService) -> httpx.ASGITransport:
    return httpx.ASGITransport(app=fake_service.app)


@pytest.fixture
def settings(mock_storage_env: Path) -> ClientSettings:
    return ClientSettings(api_base_url=BASE_URL)


@pytest_asyncio.fixture
async def api_client(transport: httpx.ASGITransport) -> AsyncIterator[ApiClient]:
    async with ApiClient(BASE_URL, MemoryTokenStore(), transport=transport) as client:
        yield client


@pytest_asyncio.fixture
async def notes_client(settings: ClientSettings, transport: httpx.ASGITransport) -> AsyncIterator[NotesClient]:
    async with NotesClient(settings, token_store=MemoryTokenStore(), transport=transport) as client:
        yield client
