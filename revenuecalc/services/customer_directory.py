from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional

from ..models.report_models import CustomerInfo, CustomerOption
from ..resources import get_customer_directory_path

logger = logging.getLogger(__name__)


class CustomerDirectory:
    """Static lookup of customer identifiers to display names and emails.

    Entries may be partial: a customer with a name but no email is kept as-is
    and missing fields simply resolve to ``None``.
    """

    def __init__(self, entries: Optional[Mapping[str, CustomerInfo]] = None) -> None:
        self._entries: Dict[str, CustomerInfo] = dict(entries or {})

    @classmethod
    def from_mapping(cls, raw: Mapping[object, object]) -> "CustomerDirectory":
        entries: Dict[str, CustomerInfo] = {}
        for key, value in raw.items():
            if not isinstance(value, Mapping):
                logger.warning("Skipping malformed customer directory entry %r", key)
                continue
            entries[str(key)] = CustomerInfo(
                name=_optional_text(value.get("name")),
                email=_optional_text(value.get("email")),
            )
        return cls(entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, identifier: object) -> bool:
        return identifier is not None and str(identifier) in self._entries

    def lookup(self, identifier: object) -> Optional[CustomerInfo]:
        if identifier is None:
            return None
        return self._entries.get(str(identifier))

    def resolve(self, identifier: object) -> str:
        if identifier is None:
            return ""
        info = self._entries.get(str(identifier))
        if info is not None and info.name:
            return info.name
        return str(identifier)

    def email_for(self, identifier: object) -> Optional[str]:
        info = self.lookup(identifier)
        return info.email if info else None


def load_customer_directory(path: Optional[Path] = None) -> CustomerDirectory:
    source = Path(path) if path else get_customer_directory_path()
    with source.open("r", encoding="utf-8") as handle:
        raw = json.load(handle)
    if not isinstance(raw, dict):
        logger.warning("Customer directory %s is not an object; using an empty directory", source)
        return CustomerDirectory()
    directory = CustomerDirectory.from_mapping(raw)
    logger.info("Loaded %d customer directory entries from %s", len(directory), source)
    return directory


def build_customer_options(customers: Iterable[object], directory: CustomerDirectory) -> List[CustomerOption]:
    options: List[CustomerOption] = []
    for customer in customers:
        if not isinstance(customer, Mapping) or customer.get("id") is None:
            continue
        customer_id = str(customer["id"])
        options.append(CustomerOption(label=directory.resolve(customer_id), value=customer_id))
    return options


def _optional_text(value: object) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None
