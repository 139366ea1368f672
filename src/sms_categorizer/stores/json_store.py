import json
import os
import threading
from typing import Any

from pydantic import ValidationError

from sms_categorizer.errors import StoreUnavailableError
from sms_categorizer.logger import get_logger
from sms_categorizer.models import MerchantProfile

from .memory import InMemoryKeywordStore, InMemoryMerchantStore

logger = get_logger(__name__)


def _read_json(path: str) -> Any | None:
    if not os.path.exists(path):
        return None
    try:
        with open(path, encoding="utf-8") as f:
            return json.load(f)
    except json.JSONDecodeError:
        logger.warning("[STORE] Corrupt data file %s; starting empty.", path)
        return None
    except OSError as exc:
        raise StoreUnavailableError(f"Cannot read {path}: {exc}") from exc


def _write_json(path: str, payload: Any) -> None:
    tmp_path = f"{path}.tmp"
    try:
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(payload, f, indent=2)
        os.replace(tmp_path, path)
    except OSError as exc:
        raise StoreUnavailableError(f"Cannot write {path}: {exc}") from exc


class JsonMerchantStore(InMemoryMerchantStore):
    """Merchant profiles persisted to a JSON file after every write."""

    def __init__(self, data_path: str = "merchants.json"):
        super().__init__()
        self.data_path = data_path
        self._save_lock = threading.Lock()
        self.load()

    def load(self) -> None:
        data = _read_json(self.data_path)
        profiles: dict[str, MerchantProfile] = {}
        if not isinstance(data, dict):
            data = {}
        for raw in data.get("merchants", []):
            try:
                profile = MerchantProfile.model_validate(raw)
            except ValidationError:
                logger.warning("[STORE] Skipping invalid merchant record: %s", raw)
                continue
            profiles[profile.normalized_name] = profile
        with self._lock:
            self.profiles = profiles
        logger.debug("[STORE] Loaded %d merchant profiles from %s.", len(profiles), self.data_path)

    def save(self) -> None:
        with self._save_lock:
            payload = {"merchants": [profile.model_dump() for profile in self.all()]}
            _write_json(self.data_path, payload)

    def put(self, profile: MerchantProfile) -> None:
        previous = self.get(profile.normalized_name)
        super().put(profile)
        try:
            self.save()
        except StoreUnavailableError:
            with self._lock:
                if previous is None:
                    self.profiles.pop(profile.normalized_name, None)
                else:
                    self.profiles[previous.normalized_name] = previous
            raise


class JsonKeywordStore(InMemoryKeywordStore):
    """
    Keyword table persisted to JSON.

    Only user mappings and removed defaults are written; the default
    table is re-seeded from code on load.
    """

    def __init__(self, data_path: str = "keywords.json"):
        super().__init__()
        self.data_path = data_path
        self._save_lock = threading.Lock()
        self._removed_defaults: set[str] = set()
        self.load()

    def load(self) -> None:
        data = _read_json(self.data_path)
        if not isinstance(data, dict):
            data = {}
        for keyword in data.get("removed", []):
            super().remove(keyword)
            self._removed_defaults.add(keyword)
        for entry in data.get("user", []):
            try:
                super().add(str(entry["keyword"]), int(entry["category_id"]), is_default=False)
            except (KeyError, TypeError, ValueError):
                logger.warning("[STORE] Skipping invalid keyword record: %s", entry)

    def save(self) -> None:
        with self._save_lock:
            payload = {
                "user": [
                    {"keyword": keyword, "category_id": category_id}
                    for keyword, category_id, is_default in self.items()
                    if not is_default
                ],
                "removed": sorted(self._removed_defaults),
            }
            _write_json(self.data_path, payload)

    def _snapshot(self) -> tuple[dict[str, int], dict[str, int], set[str]]:
        with self._lock:
            return dict(self._user), dict(self._defaults), set(self._removed_defaults)

    def _save_or_restore(self, snapshot: tuple[dict[str, int], dict[str, int], set[str]]) -> None:
        try:
            self.save()
        except StoreUnavailableError:
            with self._lock:
                self._user, self._defaults, self._removed_defaults = snapshot
            raise

    def add(self, keyword: str, category_id: int, is_default: bool = False) -> None:
        snapshot = self._snapshot()
        super().add(keyword, category_id, is_default=is_default)
        self._removed_defaults.discard(keyword.lower().strip())
        self._save_or_restore(snapshot)

    def remove(self, keyword: str) -> bool:
        key = keyword.lower().strip()
        snapshot = self._snapshot()
        was_default = key in snapshot[1]
        removed = super().remove(key)
        if removed:
            if was_default:
                self._removed_defaults.add(key)
            self._save_or_restore(snapshot)
        return removed
