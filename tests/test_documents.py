"""
Tests for request document validation.
"""
import pytest

from carrier_routing.core.exceptions import DocumentValidationError, UnsupportedOperationError
from carrier_routing.models.carrier import PreferenceKind, RequestType
from carrier_routing.modules.shipping.documents import (
    PickupDocument,
    ShipmentDocument,
    UpdateDocument,
    build_document,
    parse_request_type,
)


class TestShipmentDocument:
    """ShipmentDocument construction and normalization."""

    def test_valid_fields_build_document(self, shipment_fields):
        document = build_document("Shipment", shipment_fields)

        assert isinstance(document, ShipmentDocument)
        assert document.order_id == 42
        assert document.warehouse_id == 7
        assert document.platform_order_id == 1042
        assert document.store_hash == "abc123"
        assert document.customer_reference == "REF-42"
        assert document.fulfillment_lines == [{"line_id": 1, "quantity": 2}]

    def test_country_codes_are_upper_cased(self, shipment_fields):
        document = build_document(RequestType.SHIPMENT, shipment_fields)
        assert document.from_country == "NL"
        assert document.to_country == "US"

    def test_no_preference(self, shipment_fields):
        document = build_document("Shipment", shipment_fields)
        assert document.carrier is None
        assert document.preference_kind is None

    def test_preferred_carrier_is_soft(self, shipment_fields):
        shipment_fields["preferred_shipper"] = "dhl"
        document = build_document("Shipment", shipment_fields)

        assert document.carrier == "DHL"
        assert document.preference_kind == PreferenceKind.SOFT
        assert not document.is_explicit_selection

    def test_selected_carrier_is_explicit(self, shipment_fields):
        shipment_fields["selected_shipper"] = "Wuunder"
        document = build_document("Shipment", shipment_fields)

        assert document.carrier == "WUUNDER"
        assert document.preference_kind == PreferenceKind.EXPLICIT
        assert document.is_explicit_selection

    def test_selected_carrier_beats_preferred(self, shipment_fields):
        shipment_fields["preferred_shipper"] = "DHL"
        shipment_fields["selected_shipper"] = "UPS"
        document = build_document("Shipment", shipment_fields)

        assert document.carrier == "UPS"
        assert document.preference_kind == PreferenceKind.EXPLICIT

    def test_blank_selected_carrier_falls_back_to_preferred(self, shipment_fields):
        shipment_fields["selected_shipper"] = "  "
        shipment_fields["preferred_shipper"] = "DHL"
        document = build_document("Shipment", shipment_fields)

        assert document.carrier == "DHL"
        assert document.preference_kind == PreferenceKind.SOFT

    def test_supplied_explicit_carrier_is_kept(self, shipment_fields):
        shipment_fields["carrier"] = "wuunder"
        shipment_fields["preference_kind"] = "explicit"
        document = build_document("Shipment", shipment_fields)

        assert document.carrier == "WUUNDER"
        assert document.preference_kind == PreferenceKind.EXPLICIT

    def test_supplied_carrier_defaults_to_soft(self, shipment_fields):
        shipment_fields["carrier"] = "DHL"
        document = build_document("Shipment", shipment_fields)

        assert document.carrier == "DHL"
        assert document.preference_kind == PreferenceKind.SOFT

    def test_preference_kind_without_carrier_rejected(self, shipment_fields):
        shipment_fields["preference_kind"] = "explicit"

        with pytest.raises(DocumentValidationError) as exc_info:
            build_document("Shipment", shipment_fields)

        assert exc_info.value.field == "carrier"

    def test_selected_carrier_beats_supplied_carrier(self, shipment_fields):
        shipment_fields["carrier"] = "DHL"
        shipment_fields["preference_kind"] = "soft"
        shipment_fields["selected_shipper"] = "UPS"
        document = build_document("Shipment", shipment_fields)

        assert document.carrier == "UPS"
        assert document.preference_kind == PreferenceKind.EXPLICIT

    def test_missing_field_is_named(self, shipment_fields):
        del shipment_fields["from_country"]

        with pytest.raises(DocumentValidationError) as exc_info:
            build_document("Shipment", shipment_fields)

        assert exc_info.value.field == "from_country"
        assert exc_info.value.details["field"] == "from_country"
        assert "is required" in exc_info.value.message

    def test_blank_required_field_counts_as_missing(self, shipment_fields):
        shipment_fields["to_zip_code"] = "   "

        with pytest.raises(DocumentValidationError) as exc_info:
            build_document("Shipment", shipment_fields)

        assert exc_info.value.field == "to_zip_code"
        assert "is required" in exc_info.value.message

    def test_invalid_country_code(self, shipment_fields):
        shipment_fields["to_country"] = "Netherlands"

        with pytest.raises(DocumentValidationError) as exc_info:
            build_document("Shipment", shipment_fields)

        assert exc_info.value.field == "to_country"

    def test_empty_fulfillment_lines_rejected(self, shipment_fields):
        shipment_fields["fulfillmentlines"] = []

        with pytest.raises(DocumentValidationError) as exc_info:
            build_document("Shipment", shipment_fields)

        assert exc_info.value.field == "fulfillment_lines"

    def test_drop_off_flag(self, shipment_fields):
        shipment_fields["pack_drop_off"] = True
        assert build_document("Shipment", shipment_fields).drop_off is True

    def test_document_is_immutable(self, shipment_fields):
        document = build_document("Shipment", shipment_fields)
        with pytest.raises(Exception):
            document.carrier = "UPS"


class TestPickupAndUpdateDocuments:

    def test_pickup_document(self):
        document = build_document("Pickup", {"carrier": "ups"})
        assert isinstance(document, PickupDocument)
        assert document.carrier == "UPS"

    def test_update_document_accepts_shipper_alias(self):
        document = build_document("Update", {"shipper": "dhl"})
        assert isinstance(document, UpdateDocument)
        assert document.carrier == "DHL"

    def test_pickup_without_carrier(self):
        with pytest.raises(DocumentValidationError) as exc_info:
            build_document("Pickup", {})
        assert exc_info.value.field == "carrier"


class TestRequestTypes:

    def test_unknown_request_type(self):
        with pytest.raises(UnsupportedOperationError) as exc_info:
            build_document("Cancel", {"carrier": "UPS"})
        assert exc_info.value.code == "UNSUPPORTED_OPERATION"
        assert exc_info.value.details["request_type"] == "Cancel"

    def test_request_type_is_case_insensitive(self):
        assert parse_request_type("pickup") == RequestType.PICKUP
        assert parse_request_type(" UPDATE ") == RequestType.UPDATE

    def test_non_mapping_data_rejected(self):
        with pytest.raises(DocumentValidationError):
            build_document("Shipment", None)
        with pytest.raises(DocumentValidationError):
            build_document("Pickup", ["UPS"])
