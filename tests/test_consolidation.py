"""
Tests for pickup consolidation.
"""
from carrier_routing.modules.shipping.consolidation import (
    CountryPickupCount,
    PickupConsolidator,
    PickupRequest,
)


def pickup(location, country, fulfillment_id):
    return PickupRequest(warehouse_id=location, shipping_country=country, fulfillment_id=fulfillment_id)


class TestPickupConsolidator:

    def test_two_locations(self):
        requests = [
            pickup("L1", "DE", 1),
            pickup("L2", "NL", 2),
            pickup("L1", "FR", 3),
            pickup("L1", "DE", 4),
            pickup("L2", "NL", 5),
        ]

        batches = PickupConsolidator().consolidate(requests)

        assert [b.location_id for b in batches] == ["L1", "L2"]
        assert batches[0].country_counts() == [
            CountryPickupCount(country="DE", count=2),
            CountryPickupCount(country="FR", count=1),
        ]
        assert batches[1].country_counts() == [CountryPickupCount(country="NL", count=2)]
        assert batches[0].fulfillment_ids == [1, 3, 4]

    def test_count_preserved(self):
        requests = [pickup(n % 4, "NL" if n % 3 else "BE", n) for n in range(25)]

        batches = PickupConsolidator().consolidate(requests)

        assert sum(len(b.pickups) for b in batches) == len(requests)
        assert sum(c.count for b in batches for c in b.country_counts()) == len(requests)
        for batch in batches:
            assert all(p.warehouse_id == batch.location_id for p in batch.pickups)

    def test_grouping_is_stable(self):
        requests = [pickup("L2", "NL", 1), pickup("L1", "DE", 2), pickup("L2", "BE", 3)]

        first = PickupConsolidator().consolidate(requests)
        second = PickupConsolidator().consolidate(requests)

        assert [b.location_id for b in first] == ["L2", "L1"]
        assert [b.pickups for b in first] == [b.pickups for b in second]

    def test_raw_records_accepted(self):
        records = [
            {"warehouse_id": 7, "shipping_country": "de", "fulfillment_id": 10, "order_id": 99, "carrier": "UPS"},
            {"warehouse_id": 7, "shipping_country": "DE", "fulfillment_id": 11},
        ]

        batches = PickupConsolidator().consolidate(records)

        assert len(batches) == 1
        assert batches[0].country_counts() == [CountryPickupCount(country="DE", count=2)]
        assert batches[0].pickups[0].order_id == 99
        assert batches[0].pickups[0].extra == {"carrier": "UPS"}

    def test_empty_input(self):
        assert PickupConsolidator().consolidate([]) == []
