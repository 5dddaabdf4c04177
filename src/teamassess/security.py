"""Credential hashing for protected test edits and client fingerprints."""

from __future__ import annotations

import hashlib
import json
from dataclasses import dataclass
from typing import Mapping

import structlog
from argon2 import PasswordHasher, Type

_logger = structlog.get_logger(__name__)


@dataclass
class CredentialConfig:
    """Argon2id cost parameters. ``memory_cost`` is in KiB."""

    memory_cost: int = 65536
    time_cost: int = 3
    parallelism: int = 4


class CredentialVerifier:
    """One-way hashing of test admin passwords."""

    def __init__(self, *, config: CredentialConfig | None = None) -> None:
        self._config = config or CredentialConfig()
        self._hasher = PasswordHasher(
            time_cost=self._config.time_cost,
            memory_cost=self._config.memory_cost,
            parallelism=self._config.parallelism,
            type=Type.ID,
        )

    def hash(self, password: str) -> str:
        return self._hasher.hash(password)

    def verify(self, digest: str, password: str) -> bool:
        """Return True only for a matching password.

        Every failure, including a corrupt or foreign digest, yields False.
        """
        try:
            return self._hasher.verify(digest, password)
        except Exception as exc:  # noqa: BLE001
            _logger.debug("credentials.verify_failed", error_type=type(exc).__name__)
            return False

    def needs_rehash(self, digest: str) -> bool:
        try:
            return self._hasher.check_needs_rehash(digest)
        except Exception:  # noqa: BLE001
            return True


def hash_test_password(password: str) -> str:
    return CredentialVerifier().hash(password)


def verify_test_password(digest: str, password: str) -> bool:
    return CredentialVerifier().verify(digest, password)


def generate_client_fingerprint(
    *,
    user_agent: str,
    timezone: str | None = None,
    platform: str | None = None,
    language: str | None = None,
) -> str:
    """SHA-256 hex digest of the reported browser characteristics."""
    data = {"userAgent": user_agent}
    for name, value in (("timezone", timezone), ("platform", platform), ("language", language)):
        if value is not None:
            data[name] = value
    payload = json.dumps(data, separators=(",", ":"), ensure_ascii=False)
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


def client_ip(headers: Mapping[str, str]) -> str | None:
    """First ``X-Forwarded-For`` hop, else ``X-Real-IP``."""
    lowered = {name.lower(): value for name, value in headers.items()}
    forwarded = (lowered.get("x-forwarded-for") or "").split(",")[0].strip()
    return forwarded or lowered.get("x-real-ip") or None
