from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Callable, Dict, Iterable, Mapping, Optional, Sequence, Tuple

from ..common.datetime_utils import as_date, today_utc
from ..core.constants import DEFAULT_LOOKUPS
from ..core.logging_config import get_logger
from ..database.record_store import RecordStore

logger = get_logger("lookups.catalog")

LOOKUP_VALUES_TABLE = "lookup_values"


@dataclass(frozen=True)
class LookupValue:
    lookup_id: str
    category: str
    code: str
    name: str
    description: Optional[str] = None
    display_order: int = 0
    is_default: bool = False


def _defaults() -> Dict[str, Tuple[LookupValue, ...]]:
    return {
        category: tuple(
            LookupValue(lookup_id=f"default:{category}:{code}", category=category, code=code, name=name, display_order=i)
            for i, (code, name) in enumerate(values)
        )
        for category, values in DEFAULT_LOOKUPS.items()
    }


class LookupCatalog:
    """Runtime-configurable sets of tagged constants, keyed by category.

    Values come from the lookup_values table; categories with no active rows fall
    back to the built-in defaults.
    """

    def __init__(self, values: Mapping[str, Sequence[LookupValue]]):
        merged = _defaults()
        merged.update({k: tuple(v) for k, v in values.items() if v})
        self._values: Dict[str, Tuple[LookupValue, ...]] = merged
        self._store: Optional[RecordStore] = None
        self._categories: Optional[Tuple[str, ...]] = None
        self._today: Callable[[], date] = today_utc

    @classmethod
    def load(
        cls,
        store: RecordStore,
        categories: Optional[Iterable[str]] = None,
        *,
        today: Callable[[], date] = today_utc,
    ) -> "LookupCatalog":
        wanted = tuple(categories) if categories is not None else None
        day = today()

        filters = {"is_active": True}
        if wanted is not None:
            filters["category"] = list(wanted)

        grouped: Dict[str, list] = {}
        for r in store.select(LOOKUP_VALUES_TABLE, filters, order=["category", "display_order", "name"]):
            start, end = as_date(r.get("start_date")), as_date(r.get("end_date"))
            if (start and start > day) or (end and end < day):
                continue
            grouped.setdefault(r["category"], []).append(
                LookupValue(
                    lookup_id=str(r["id"]),
                    category=r["category"],
                    code=r["code"],
                    name=r.get("name") or r["code"],
                    description=r.get("description"),
                    display_order=int(r.get("display_order") or 0),
                    is_default=bool(r.get("is_default")),
                )
            )

        catalog = cls(grouped)
        catalog._store = store
        catalog._categories = wanted
        catalog._today = today
        logger.info("Lookup catalog loaded", extra={"categories": len(catalog.categories())})
        return catalog

    def refresh(self) -> None:
        if self._store is None:
            return
        fresh = LookupCatalog.load(self._store, self._categories, today=self._today)
        self._values = fresh._values

    def categories(self) -> Sequence[str]:
        return sorted(self._values)

    def values(self, category: str) -> Tuple[LookupValue, ...]:
        return self._values.get(category, ())

    def codes(self, category: str) -> Tuple[str, ...]:
        return tuple(v.code for v in self.values(category))

    def label(self, category: str, code: str) -> str:
        for v in self.values(category):
            if v.code == code:
                return v.name
        return code
