"""
Shipping request documents

Every inbound request is turned into one of three typed documents before any
carrier is contacted:
- ShipmentDocument: full origin/destination data plus the carrier preference
- PickupDocument: the carrier whose pending pickups should be booked
- UpdateDocument: the carrier whose tracking records should be pushed

Field names of the e-commerce platform payload (``from_warehouse_id``,
``selected_shipper``, ``fulfillmentlines`` ...) are accepted as aliases.
"""
import logging
from typing import Any, Dict, List, Mapping, Optional, Union

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    ValidationInfo,
    field_validator,
    model_validator,
)

from carrier_routing.core.exceptions import DocumentValidationError, UnsupportedOperationError
from carrier_routing.models.carrier import PreferenceKind, RequestType

logger = logging.getLogger(__name__)


def _blank_to_none(v):
    if isinstance(v, str) and not v.strip():
        return None
    return v


def _normalize_country(v):
    if v is None:
        return v
    code = str(v).strip().upper()
    if len(code) != 2 or not code.isalpha():
        raise ValueError(f"{v!r} is not an ISO 3166-1 alpha-2 country code")
    return code


def _normalize_carrier(v):
    if v is None:
        return v
    return str(v).strip().upper()


class _Document(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore", str_strip_whitespace=True)

    order_id: Optional[Union[int, str]] = None
    platform_order_id: Optional[Union[int, str]] = Field(
        default=None, validation_alias=AliasChoices("platform_order_id", "bc_id")
    )
    store_hash: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("store_hash", "bc_store_hash")
    )

    @field_validator("*", mode="before")
    @classmethod
    def blank_strings_are_absent(cls, v):
        return _blank_to_none(v)


class ShipmentDocument(_Document):
    """Normalized shipment request."""

    order_id: Union[int, str]
    warehouse_id: Union[int, str] = Field(
        validation_alias=AliasChoices("warehouse_id", "from_warehouse_id")
    )
    customer_reference: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("customer_reference", "pack_customer_reference"),
    )

    # Origin (dealer / warehouse)
    from_business: Optional[str] = None
    from_given_name: str
    from_family_name: str
    from_chamber_of_commerce_number: Optional[str] = None
    from_phone_number: Optional[str] = None
    from_street: str
    from_street2: Optional[str] = None
    from_house_number: Optional[str] = None
    from_zip_code: str
    from_locality: str
    from_province_code: Optional[str] = None
    from_country: str

    # Destination (customer)
    to_business: Optional[str] = None
    to_given_name: str
    to_family_name: str
    to_phone_number: Optional[str] = None
    to_street: str
    to_street2: Optional[str] = None
    to_house_number: Optional[str] = None
    to_zip_code: str
    to_locality: str
    to_province_code: Optional[str] = None
    to_country: str

    drop_off: Optional[bool] = Field(
        default=False, validation_alias=AliasChoices("drop_off", "pack_drop_off")
    )
    processed_by: Optional[str] = None
    fulfillment_lines: List[Dict[str, Any]] = Field(
        min_length=1,
        validation_alias=AliasChoices("fulfillment_lines", "fulfillmentlines"),
    )

    # Effective preference: selected carrier (explicit) beats preferred carrier (soft)
    # beats a directly supplied carrier. preference_kind is validated first so
    # carrier can check it.
    preference_kind: Optional[PreferenceKind] = None
    carrier: Optional[str] = Field(default=None, validate_default=True)

    @model_validator(mode="before")
    @classmethod
    def derive_carrier_preference(cls, data):
        if not isinstance(data, Mapping):
            return data
        data = dict(data)
        selected = _blank_to_none(data.get("selected_carrier")) or _blank_to_none(data.get("selected_shipper"))
        preferred = _blank_to_none(data.get("preferred_carrier")) or _blank_to_none(data.get("preferred_shipper"))

        if selected:
            data["carrier"] = selected
            data["preference_kind"] = PreferenceKind.EXPLICIT
        elif preferred:
            data["carrier"] = preferred
            data["preference_kind"] = PreferenceKind.SOFT
        elif _blank_to_none(data.get("carrier")) and not _blank_to_none(data.get("preference_kind")):
            data["preference_kind"] = PreferenceKind.SOFT
        return data

    @field_validator("from_country", "to_country")
    @classmethod
    def validate_country(cls, v):
        return _normalize_country(v)

    @field_validator("carrier")
    @classmethod
    def validate_carrier(cls, v, info: ValidationInfo):
        if v is None and info.data.get("preference_kind") is not None:
            raise ValueError("is required when preference_kind is given")
        return _normalize_carrier(v)

    @property
    def is_explicit_selection(self) -> bool:
        return self.preference_kind == PreferenceKind.EXPLICIT


class PickupDocument(_Document):
    """Pickup request for one carrier. The carrier is mandatory."""

    carrier: str = Field(validation_alias=AliasChoices("carrier", "shipper"))

    @field_validator("carrier")
    @classmethod
    def validate_carrier(cls, v):
        return _normalize_carrier(v)


class UpdateDocument(_Document):
    """Tracking update request for one carrier. The carrier is mandatory."""

    carrier: str = Field(validation_alias=AliasChoices("carrier", "shipper"))

    @field_validator("carrier")
    @classmethod
    def validate_carrier(cls, v):
        return _normalize_carrier(v)


Document = Union[ShipmentDocument, PickupDocument, UpdateDocument]

DOCUMENT_TYPES = {
    RequestType.SHIPMENT: ShipmentDocument,
    RequestType.PICKUP: PickupDocument,
    RequestType.UPDATE: UpdateDocument,
}


def _field_name(document_cls, loc) -> Optional[str]:
    """Map an error location (possibly an input alias) back to the model field name."""
    if not loc:
        return None
    key = str(loc[0])
    for name, info in document_cls.model_fields.items():
        alias = info.validation_alias
        choices = alias.choices if isinstance(alias, AliasChoices) else [alias]
        if key == name or key in choices:
            return name
    return ".".join(str(part) for part in loc)


def parse_request_type(request_type) -> RequestType:
    """Map a request-type tag to RequestType or raise UnsupportedOperationError."""
    if isinstance(request_type, RequestType):
        return request_type
    for candidate in RequestType:
        if isinstance(request_type, str) and request_type.strip().lower() == candidate.value.lower():
            return candidate
    raise UnsupportedOperationError(
        f"No request type matching Shipment, Pickup or Update found: {request_type!r}",
        request_type=str(request_type),
    )


def build_document(request_type, fields: Optional[Mapping[str, Any]]) -> Document:
    """
    Validate a raw field bag into the document for its request type.

    Args:
        request_type: "Shipment", "Pickup", "Update" or a RequestType
        fields: Raw request data

    Returns:
        ShipmentDocument, PickupDocument or UpdateDocument

    Raises:
        UnsupportedOperationError: unknown request type
        DocumentValidationError: missing or malformed field (named in ``field``)
    """
    kind = parse_request_type(request_type)
    document_cls = DOCUMENT_TYPES[kind]

    if fields is None or not isinstance(fields, Mapping):
        raise DocumentValidationError(
            f"{kind.value} request data must be a mapping",
            field=None,
        )

    try:
        return document_cls.model_validate(dict(fields))
    except ValidationError as e:
        first = e.errors()[0]
        field = _field_name(document_cls, first.get("loc", ()))
        # Blank strings reach validation as None
        if first.get("type") == "missing" or ("input" in first and first["input"] is None):
            reason = "is required"
        else:
            reason = first.get("msg", "is invalid")
        logger.info(f"{kind.value} document rejected: {field} {reason}")
        raise DocumentValidationError(
            f"{kind.value} document field '{field}' {reason}",
            field=field,
            details={"errors": [
                {"field": _field_name(document_cls, err.get("loc", ())), "type": err.get("type")}
                for err in e.errors()
            ]},
        ) from e
