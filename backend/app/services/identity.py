"""Per-browser device identity used to deduplicate likes.

The identity is an opaque random token. It is not authentication: clearing
storage yields a new device.
"""

from __future__ import annotations

import json
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

DEVICE_ID_KEY = "philia_device_id"


class KeyValueStore(Protocol):
    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...


def load_or_create_device_id(store: KeyValueStore) -> str:
    """Return the stored device id, generating and persisting one on first use."""

    existing = store.get(DEVICE_ID_KEY)
    if existing:
        return existing

    device_id = uuid.uuid4().hex
    store.set(DEVICE_ID_KEY, device_id)
    return device_id


@dataclass(slots=True)
class JsonFileStore:
    """Tiny persistent key/value store kept in a JSON file."""

    path: Path

    def _read(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except json.JSONDecodeError:
            return {}
        return {str(k): str(v) for k, v in data.items()} if isinstance(data, dict) else {}

    def get(self, key: str) -> str | None:
        return self._read().get(key)

    def set(self, key: str, value: str) -> None:
        data = self._read()
        data[key] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")
