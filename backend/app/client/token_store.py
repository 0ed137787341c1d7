"""Where the API client keeps the session token and the signed-in user."""

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


class TokenStore:
    """Interface; the in-memory store below is also the reference behaviour."""

    def get_token(self) -> Optional[str]:
        raise NotImplementedError

    def get_user(self) -> Optional[Dict[str, Any]]:
        raise NotImplementedError

    def save(self, token: str, user: Optional[Dict[str, Any]] = None):
        raise NotImplementedError

    def clear(self):
        raise NotImplementedError


class MemoryTokenStore(TokenStore):

    def __init__(self, token: Optional[str] = None, user: Optional[Dict[str, Any]] = None):
        self._token = token
        self._user = user

    def get_token(self) -> Optional[str]:
        return self._token

    def get_user(self) -> Optional[Dict[str, Any]]:
        return self._user

    def save(self, token: str, user: Optional[Dict[str, Any]] = None):
        self._token = token
        if user is not None:
            self._user = user

    def clear(self):
        self._token = None
        self._user = None


class FileTokenStore(TokenStore):
    """
    JSON file holding {"token": ..., "user": ...}

    A missing or unreadable file reads as signed out.
    """

    def __init__(self, path):
        self.path = Path(path)

    def _read(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable token file {self.path}: {e}")
            return {}
        return data if isinstance(data, dict) else {}

    def get_token(self) -> Optional[str]:
        return self._read().get("token")

    def get_user(self) -> Optional[Dict[str, Any]]:
        return self._read().get("user")

    def save(self, token: str, user: Optional[Dict[str, Any]] = None):
        data = self._read()
        data["token"] = token
        if user is not None:
            data["user"] = user

        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(data, f)
        os.replace(tmp_path, self.path)

    def clear(self):
        if self.path.exists():
            self.path.unlink()
