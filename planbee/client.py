"""
Command line client for the Plan Bee auth endpoints.

Keeps the bearer token in a local JSON file after login/register and removes
it on logout. Example::

    planbee-client --server http://127.0.0.1:5000 register \\
        --email a@x.com --tag john_doe --username John --password secret1
    planbee-client whoami
"""

from __future__ import annotations

import argparse
import json
import os
import sys
import urllib.error
import urllib.request
from pathlib import Path
from typing import Any, Optional

DEFAULT_SERVER = "http://127.0.0.1:5000"
DEFAULT_TOKEN_FILE = Path.home() / ".planbee" / "session.json"


class ClientError(Exception):
    """Request failed; ``message`` is what the user should see."""

    def __init__(self, status: Optional[int], message: str) -> None:
        super().__init__(message)
        self.status = status
        self.message = message


class TokenStore:
    """Single-writer token file. Not synchronised across processes."""

    def __init__(self, path: Path = DEFAULT_TOKEN_FILE) -> None:
        self.path = Path(path)

    def load(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            with self.path.open("r", encoding="utf-8") as fh:
                data = json.load(fh)
        except (OSError, json.JSONDecodeError):
            return {}
        return data if isinstance(data, dict) else {}

    @property
    def token(self) -> Optional[str]:
        return self.load().get("token")

    def save(self, token: str, user: Optional[dict[str, Any]] = None) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("w", encoding="utf-8") as fh:
            json.dump({"token": token, "user": user}, fh)
        os.chmod(self.path, 0o600)

    def clear(self) -> None:
        if self.path.exists():
            self.path.unlink()


def http_request_json(
    url: str,
    payload: Optional[dict[str, Any]] = None,
    headers: Optional[dict[str, str]] = None,
    method: str = "POST",
    timeout: int = 15,
) -> tuple[int, bytes]:
    data = json.dumps(payload).encode("utf-8") if payload is not None else None
    req_headers = {"Content-Type": "application/json", "Accept": "application/json"}
    if headers:
        req_headers.update(headers)
    req = urllib.request.Request(url, data=data, headers=req_headers, method=method)
    try:
        with urllib.request.urlopen(req, timeout=timeout) as resp:
            return resp.status, resp.read()
    except urllib.error.HTTPError as exc:
        return exc.code, exc.read()


class AuthClient:
    def __init__(self, server: str = DEFAULT_SERVER, store: Optional[TokenStore] = None) -> None:
        self.server = server.rstrip("/")
        self.store = store or TokenStore()

    def _call(self, path: str, payload: Optional[dict[str, Any]] = None, method: str = "POST",
              authenticated: bool = False) -> dict[str, Any]:
        headers = {}
        if authenticated:
            token = self.store.token
            if not token:
                raise ClientError(None, "Not logged in")
            headers["Authorization"] = f"Bearer {token}"

        try:
            status, body = http_request_json(self.server + path, payload, headers=headers, method=method)
        except (urllib.error.URLError, OSError) as exc:
            raise ClientError(
                None,
                "Network error: Unable to reach the server. "
                "Please check your connection or try again later.",
            ) from exc

        try:
            data = json.loads(body.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise ClientError(
                status,
                "Sorry, there was a problem with the server response. Please try again later.",
            ) from exc

        if status >= 400:
            message = data.get("message") if isinstance(data, dict) else None
            raise ClientError(
                status, message or "Something went wrong. Please check your input and try again."
            )
        return data

    def _remember(self, data: dict[str, Any]) -> dict[str, Any]:
        if data.get("token"):
            self.store.save(data["token"], data.get("user"))
        return data

    def register(self, email: str, password: str, tag: str, username: str) -> dict[str, Any]:
        data = self._call(
            "/api/auth/register",
            {"email": email, "tag": tag, "username": username, "password": password},
        )
        return self._remember(data)

    def login(self, password: str, email: Optional[str] = None, tag: Optional[str] = None) -> dict[str, Any]:
        data = self._call("/api/auth/login", {"identifier": email or tag, "password": password})
        return self._remember(data)

    def change_tag(self, new_tag: str) -> dict[str, Any]:
        data = self._call("/api/auth/change-tag", {"newTag": new_tag}, authenticated=True)
        state = self.store.load()
        user = state.get("user") or {}
        if state.get("token") and user:
            user["tag"] = data.get("newTag", new_tag)
            self.store.save(state["token"], user)
        return data

    def me(self) -> dict[str, Any]:
        return self._call("/api/auth/me", method="GET", authenticated=True)

    def logout(self) -> None:
        self.store.clear()


def render_view(user: Optional[dict[str, Any]]) -> str:
    if not user:
        return "You are not logged in. Use 'login' or 'register' to continue."
    return f"Welcome, {user.get('username')} (@{user.get('tag')})"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="planbee-client", description="Plan Bee account client")
    parser.add_argument("--server", default=os.getenv("PLANBEE_SERVER", DEFAULT_SERVER), help="API base URL")
    parser.add_argument("--token-file", type=Path, default=DEFAULT_TOKEN_FILE, help="Where the token is kept")
    sub = parser.add_subparsers(dest="command", required=True)

    register = sub.add_parser("register", help="Create an account")
    register.add_argument("--email", required=True)
    register.add_argument("--tag", required=True)
    register.add_argument("--username", required=True)
    register.add_argument("--password", required=True)

    login = sub.add_parser("login", help="Log in with email or tag")
    who = login.add_mutually_exclusive_group(required=True)
    who.add_argument("--email")
    who.add_argument("--tag")
    login.add_argument("--password", required=True)

    change = sub.add_parser("change-tag", help="Change your tag (once every 3 months)")
    change.add_argument("new_tag")

    sub.add_parser("whoami", help="Show the logged in account")
    sub.add_parser("logout", help="Forget the stored token")
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    client = AuthClient(args.server, TokenStore(args.token_file))

    try:
        if args.command == "register":
            data = client.register(args.email, args.password, args.tag, args.username)
            print(data.get("message", "Success!"))
            print(render_view(data.get("user")))
        elif args.command == "login":
            data = client.login(args.password, email=args.email, tag=args.tag)
            print(data.get("message", "Success!"))
            print(render_view(data.get("user")))
        elif args.command == "change-tag":
            data = client.change_tag(args.new_tag)
            print(f"{data['message']}: @{data['oldTag']} -> @{data['newTag']}")
        elif args.command == "whoami":
            if not client.store.token:
                print(render_view(None))
            else:
                print(render_view(client.me().get("user")))
        elif args.command == "logout":
            client.logout()
            print(render_view(None))
    except ClientError as exc:
        print(exc.message, file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
