"""
Carrier Registry

Immutable routing table: which origin countries each carrier ships from and
the priority order used when no usable preference is given. Built once at
startup (from settings by default) and handed to the resolver.
"""
import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Dict, FrozenSet, Iterable, List, Mapping, Optional, Tuple

from carrier_routing.models.carrier import CarrierCode

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CarrierRegistryEntry:
    """
    One row of the routing table.

    ``any_origin`` carriers accept every origin country but are only chosen
    by preference, never by the priority scan.
    """
    carrier: CarrierCode
    supported_origin_countries: FrozenSet[str]
    priority: int
    any_origin: bool = False

    def supports_origin(self, country: Optional[str]) -> bool:
        if self.any_origin:
            return True
        if not country:
            return False
        return country.upper() in self.supported_origin_countries

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "CarrierRegistryEntry":
        carrier = CarrierCode.parse(data.get("carrier"))
        if carrier is None:
            raise ValueError(f"Unknown carrier in registry: {data.get('carrier')!r}")
        return cls(
            carrier=carrier,
            supported_origin_countries=frozenset(
                str(country).strip().upper() for country in data.get("supported_origin_countries") or ()
            ),
            priority=int(data["priority"]),
            any_origin=bool(data.get("any_origin", False)),
        )


class CarrierRegistry:
    """
    Read-only carrier table ordered by ascending priority.

    Safe to share between concurrent requests; nothing mutates it after
    construction.
    """

    def __init__(self, entries: Iterable[CarrierRegistryEntry]):
        ordered = sorted(entries, key=lambda entry: entry.priority)

        seen_carriers = set()
        seen_priorities = set()
        for entry in ordered:
            if entry.carrier in seen_carriers:
                raise ValueError(f"Carrier {entry.carrier.value} registered twice")
            if entry.priority in seen_priorities:
                raise ValueError(f"Priority {entry.priority} is used by more than one carrier")
            seen_carriers.add(entry.carrier)
            seen_priorities.add(entry.priority)

        self._entries: Tuple[CarrierRegistryEntry, ...] = tuple(ordered)
        self._by_carrier = MappingProxyType({entry.carrier: entry for entry in ordered})

    @classmethod
    def from_config(cls, rows: Optional[List[Dict[str, Any]]] = None) -> "CarrierRegistry":
        """Build the registry from settings.CARRIER_REGISTRY (or the given rows)."""
        if rows is None:
            from carrier_routing.core.config import settings
            rows = settings.CARRIER_REGISTRY

        registry = cls(CarrierRegistryEntry.from_dict(row) for row in rows)
        logger.info(
            "Carrier registry loaded: "
            + ", ".join(f"{e.carrier.value}(p{e.priority})" for e in registry.entries)
        )
        return registry

    @property
    def entries(self) -> Tuple[CarrierRegistryEntry, ...]:
        """Entries in ascending priority order."""
        return self._entries

    def get(self, carrier: Any) -> Optional[CarrierRegistryEntry]:
        code = CarrierCode.parse(carrier)
        if code is None:
            return None
        return self._by_carrier.get(code)

    def __contains__(self, carrier: Any) -> bool:
        return self.get(carrier) is not None

    def __len__(self) -> int:
        return len(self._entries)

    def supports(self, carrier: Any, origin_country: Optional[str]) -> bool:
        entry = self.get(carrier)
        return bool(entry and entry.supports_origin(origin_country))

    def first_for_origin(self, origin_country: Optional[str]) -> Optional[CarrierRegistryEntry]:
        """Lowest-priority-number carrier that lists ``origin_country``."""
        for entry in self._entries:
            if entry.any_origin:
                continue
            if entry.supports_origin(origin_country):
                return entry
        return None
