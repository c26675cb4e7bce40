import json
import os
from pathlib import Path

DEFAULT_PATH = Path.home() / ".moops" / "credentials.json"


class TokenStore:
    """
    Keeps the bearer token and API URL in a small JSON file between runs.

    A missing or unreadable file behaves like an empty store.
    """

    def __init__(self, path: str | Path | None = None):
        self.path = Path(path or os.environ.get("MOOPS_CREDENTIALS") or DEFAULT_PATH)

    def _read(self) -> dict:
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            return {}
        return data if isinstance(data, dict) else {}

    def _write(self, data: dict) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data, indent=2), encoding="utf-8")
        # Owner read/write only
        self.path.chmod(0o600)

    @property
    def token(self) -> str | None:
        return self._read().get("token")

    @property
    def api_url(self) -> str | None:
        return self._read().get("api_url")

    def save(self, token: str, api_url: str | None = None) -> None:
        data = self._read()
        data["token"] = token
        if api_url:
            data["api_url"] = api_url
        self._write(data)

    def clear(self) -> None:
        """Forget the token, keeping the API URL."""
        data = self._read()
        if "token" not in data:
            return
        data.pop("token")
        self._write(data)
