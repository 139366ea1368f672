import threading
from dataclasses import dataclass


@dataclass(frozen=True)
class AccountMapping:
    account_id: int
    bank_name: str
    account_suffix: str


class AccountDirectory:
    """Resolves the account suffix printed in an SMS to a user account id."""

    def __init__(self, default_account_id: int | None = None):
        self.default_account_id = default_account_id
        self._lock = threading.Lock()
        self._mappings: dict[tuple[str, str], AccountMapping] = {}

    @staticmethod
    def _key(bank_name: str, account_suffix: str) -> tuple[str, str]:
        return bank_name.strip().lower(), account_suffix.strip().upper()

    def add(self, account_id: int, bank_name: str, account_suffix: str) -> AccountMapping:
        mapping = AccountMapping(account_id=account_id, bank_name=bank_name, account_suffix=account_suffix)
        with self._lock:
            self._mappings[self._key(bank_name, account_suffix)] = mapping
        return mapping

    def remove(self, bank_name: str, account_suffix: str) -> bool:
        with self._lock:
            return self._mappings.pop(self._key(bank_name, account_suffix), None) is not None

    def resolve(self, bank_name: str, account_suffix: str | None) -> int | None:
        if account_suffix:
            with self._lock:
                mapping = self._mappings.get(self._key(bank_name, account_suffix))
            if mapping:
                return mapping.account_id
        return self.default_account_id

    def mappings(self) -> list[AccountMapping]:
        with self._lock:
            return list(self._mappings.values())
