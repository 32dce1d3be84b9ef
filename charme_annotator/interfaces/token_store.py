"""Token caches."""

import json
import logging
import os
from pathlib import Path
from typing import Optional

from ..core.annotation.collaborators import TokenStore
from ..core.annotation.state import Token

logger = logging.getLogger(__name__)


class MemoryTokenStore(TokenStore):
    def __init__(self, token: Optional[Token] = None):
        self._token = token

    def load(self) -> Optional[Token]:
        return self._token

    def save(self, token: Token) -> None:
        self._token = token

    def wipe(self) -> None:
        self._token = None


class FileTokenStore(TokenStore):
    """
    Token cached as JSON on disk.

    The file is created with owner-only permissions. A file that cannot be
    parsed is treated as no token.
    """

    def __init__(self, path):
        self.path = Path(path).expanduser()

    def load(self) -> Optional[Token]:
        if not self.path.exists():
            return None
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                return Token.from_dict(json.load(f))
        except (ValueError, KeyError, TypeError) as e:
            logger.warning("Ignoring unreadable token file %s: %s", self.path, e)
            return None

    def save(self, token: Token) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd = os.open(self.path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(token.to_dict(), f)

    def wipe(self) -> None:
        if self.path.exists():
            self.path.unlink()
