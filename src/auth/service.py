"""
Access key service for dashboard sessions.
"""

import os
import json
import logging
import secrets
from datetime import datetime
from typing import Iterable, List, Optional

from pydantic import ValidationError

from .models import AccessKey

logger = logging.getLogger(__name__)

ACCESS_KEYS_PATH = os.getenv("ACCESS_KEYS_PATH", "access_keys.json")


class AccessKeyService:
    """
    Validates session keys against a JSON list of access keys:

        [{"key": "abc123", "until": "2026-12-31"}]

    A missing or unreadable file means no key is valid.
    """

    def __init__(self, path: Optional[str] = None, keys: Optional[Iterable[AccessKey]] = None):
        self.path = path
        self._keys: List[AccessKey] = list(keys) if keys is not None else []
        if keys is None and path:
            self.load()

    def load(self) -> int:
        """
        (Re)load keys from ``self.path``; returns the number of keys loaded.

        Each entry is validated on its own, so a malformed entry only drops
        that key.
        """
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                entries = json.load(f)
        except FileNotFoundError:
            logger.warning(f"{self.path} not found, dashboard login disabled")
            self._keys = []
            return 0
        except (OSError, ValueError) as e:
            logger.error(f"Could not read {self.path}: {e}")
            self._keys = []
            return 0

        if not isinstance(entries, list):
            logger.error(f"{self.path} must contain a JSON list of access keys")
            self._keys = []
            return 0

        keys = []
        for index, entry in enumerate(entries):
            try:
                keys.append(AccessKey.model_validate(entry))
            except ValidationError as e:
                logger.error(f"Skipping access key #{index} in {self.path}: {e}")
        self._keys = keys
        logger.info(f"Loaded {len(self._keys)} access keys")
        return len(self._keys)

    def replace_keys(self, keys: Iterable[AccessKey]):
        self._keys = list(keys)

    def get_key(self, key: str) -> Optional[AccessKey]:
        for access_key in self._keys:
            if secrets.compare_digest(access_key.key.encode(), key.encode()):
                return access_key
        return None

    def is_valid(self, key: Optional[str], now: Optional[datetime] = None) -> bool:
        if not key:
            return False
        access_key = self.get_key(key)
        return access_key is not None and access_key.is_active(now)

    def __len__(self) -> int:
        return len(self._keys)


# Global access key service instance
access_key_service = AccessKeyService(ACCESS_KEYS_PATH)
