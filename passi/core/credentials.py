"""
Registry of login principals used for HTTP Basic authentication.

One store is created per application instance at startup and handed to
request handlers as a dependency. It is filled from the ``users`` table with
``load()`` and kept in step with it through ``sync()`` and ``revoke()``.
"""

import logging
from dataclasses import dataclass
from threading import Lock
from typing import Iterable, Optional

from passi.core.security import verify_password

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Credential:
    user_id: int
    username: str
    password_hash: str


class CredentialStore:
    def __init__(self) -> None:
        self._lock = Lock()
        self._by_username: dict[str, Credential] = {}

    def load(self, credentials: Iterable[Credential]) -> None:
        fresh = {c.username.lower(): c for c in credentials}
        with self._lock:
            self._by_username = fresh
        logger.info("Loaded %d login credentials", len(fresh))

    def sync(self, credential: Credential) -> None:
        with self._lock:
            self._by_username[credential.username.lower()] = credential

    def revoke(self, username: str) -> None:
        with self._lock:
            self._by_username.pop(username.lower(), None)

    def get(self, username: str) -> Optional[Credential]:
        with self._lock:
            return self._by_username.get(username.strip().lower())

    def authenticate(self, username: str, password: str) -> Optional[Credential]:
        credential = self.get(username)
        if credential is None or not verify_password(password, credential.password_hash):
            return None
        return credential

    def __contains__(self, username: str) -> bool:
        return self.get(username) is not None

    def __len__(self) -> int:
        with self._lock:
            return len(self._by_username)
