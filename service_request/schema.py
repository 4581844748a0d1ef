# service_request/schema.py
"""
Service Request data contract.

One set of field rules, two profiles:
- ServiceRequest          strict: core fields required (generated/merged records)
- ServiceRequestOverrides partial: every field optional, unknown keys rejected

Wire names are camelCase (HTTP body, generator output), attributes are snake_case.
Validation never leaks pydantic's ValidationError: callers get
SchemaValidationError with a list of Violation(field, message).
"""

import re
from datetime import date
from enum import Enum
from typing import Annotated, Callable, List, Optional, Type

from email_validator import EmailNotValidError, validate_email
from pydantic import AfterValidator, BaseModel, ConfigDict, StrictInt, ValidationError
from pydantic.alias_generators import to_camel

from .errors import SchemaValidationError, UnknownFieldsError, Violation


# ============ Closed value sets ============

class PreferredContact(str, Enum):
    PHONE = "Phone"
    EMAIL = "Email"
    TEXT = "Text"


class VehicleMake(str, Enum):
    TOYOTA = "Toyota"
    HONDA = "Honda"
    FORD = "Ford"
    CHEVROLET = "Chevrolet"
    NISSAN = "Nissan"
    BMW = "BMW"
    MERCEDES_BENZ = "Mercedes-Benz"
    AUDI = "Audi"
    VOLKSWAGEN = "Volkswagen"
    HYUNDAI = "Hyundai"
    KIA = "Kia"
    MAZDA = "Mazda"
    SUBARU = "Subaru"
    OTHER = "Other"


class ServiceType(str, Enum):
    OIL_CHANGE = "Oil Change"
    BRAKE_SERVICE = "Brake Service"
    TIRE_ROTATION = "Tire Rotation"
    ENGINE_DIAGNOSTIC = "Engine Diagnostic"
    TRANSMISSION_SERVICE = "Transmission Service"
    ELECTRICAL_SYSTEM = "Electrical System"
    AC_HEATING = "AC/Heating"
    SUSPENSION = "Suspension"
    EXHAUST_SYSTEM = "Exhaust System"
    GENERAL_MAINTENANCE = "General Maintenance"
    EMERGENCY_REPAIR = "Emergency Repair"
    OTHER = "Other"


class Urgency(str, Enum):
    ROUTINE = "Routine"
    STANDARD = "Standard"
    URGENT = "Urgent"
    EMERGENCY = "Emergency"


class Budget(str, Enum):
    UNDER_100 = "Under $100"
    FROM_100_TO_300 = "$100-$300"
    FROM_300_TO_500 = "$300-$500"
    FROM_500_TO_1000 = "$500-$1000"
    OVER_1000 = "Over $1000"
    NO_LIMIT = "No Limit"


class ReferralSource(str, Enum):
    GOOGLE_SEARCH = "Google Search"
    SOCIAL_MEDIA = "Social Media"
    FRIEND_FAMILY = "Friend/Family"
    ONLINE_REVIEW = "Online Review"
    DRIVE_BY = "Drive By"
    OTHER = "Other"


# ============ Field rules ============

class FieldRuleError(ValueError):
    """Every rule a single value broke. Each message becomes its own Violation."""

    def __init__(self, messages: List[str]):
        self.messages = list(messages)
        super().__init__("; ".join(self.messages))


def _raise_if(problems: List[str]):
    if problems:
        raise FieldRuleError(problems)


def _text(
    *,
    min_length: int = 0,
    max_length: Optional[int] = None,
    pattern: Optional[str] = None,
    too_short: str = "",
    too_long: str = "",
    bad_chars: str = "",
) -> AfterValidator:
    """Length + charset rule with our own messages. All failures are reported together."""
    regex = re.compile(pattern) if pattern else None

    def check(value: str) -> str:
        problems = []
        if len(value) < min_length:
            problems.append(too_short)
        if max_length is not None and len(value) > max_length:
            problems.append(too_long)
        # empty value is a length problem only
        if regex and value and not regex.fullmatch(value):
            problems.append(bad_chars)
        _raise_if(problems)
        return value

    return AfterValidator(check)


def _int_range(low: int, high: int, too_low: str, too_high: str) -> AfterValidator:
    def check(value: int) -> int:
        if value < low:
            raise ValueError(too_low)
        if value > high:
            raise ValueError(too_high)
        return value

    return AfterValidator(check)


def _check_vin(value: str) -> str:
    problems = []
    if len(value) != 17:
        problems.append("VIN must be exactly 17 characters")
    if not re.fullmatch(r"[A-HJ-NPR-Z0-9]*", value):
        problems.append("VIN contains invalid characters (no I, O, Q)")
    _raise_if(problems)
    return value


def _check_email(value: str) -> str:
    """Format check only; the caller's text is kept as typed (no normalization)."""
    problems = []
    try:
        validate_email(value, check_deliverability=False, allow_display_name=False)
    except EmailNotValidError:
        problems.append("Valid email is required")
    if len(value) > 254:
        problems.append("Email address is too long")
    _raise_if(problems)
    return value


def _check_date(value: str) -> str:
    if not re.fullmatch(r"\d{4}-\d{2}-\d{2}", value):
        raise ValueError("Preferred date must be in YYYY-MM-DD format")
    try:
        parsed = date.fromisoformat(value)
    except ValueError:
        raise ValueError("Invalid date - date does not exist")
    if parsed.isoformat() != value:
        raise ValueError("Invalid date - date does not exist")
    return value


CustomerName = Annotated[str, _text(
    min_length=1, max_length=100, pattern=r"[a-zA-Z\s\-'.]+",
    too_short="Customer name is required",
    too_long="Customer name is too long",
    bad_chars="Customer name contains invalid characters",
)]
PhoneNumber = Annotated[str, _text(
    min_length=10, pattern=r"[\d\s\-+().]+",
    too_short="Valid phone number is required",
    bad_chars="Phone number contains invalid characters",
)]
Email = Annotated[str, AfterValidator(_check_email)]
VehicleModel = Annotated[str, _text(
    min_length=1, max_length=50, pattern=r"[a-zA-Z0-9\s\-.]+",
    too_short="Vehicle model is required",
    too_long="Vehicle model name is too long",
    bad_chars="Vehicle model contains invalid characters",
)]
# strict: JSON numbers only, no "2020" strings or booleans
Year = Annotated[StrictInt, _int_range(
    1900, 2030, "Year must be at least 1900", "Year cannot exceed 2030",
)]
Mileage = Annotated[StrictInt, _int_range(
    0, 999999, "Mileage must be non-negative", "Mileage seems unreasonably high",
)]
Vin = Annotated[str, AfterValidator(_check_vin)]
LicensePlate = Annotated[str, _text(
    max_length=10, pattern=r"[A-Z0-9\s\-]+",
    too_long="License plate is too long",
    bad_chars="License plate contains invalid characters",
)]
ProblemDescription = Annotated[str, _text(
    min_length=10, max_length=1000,
    too_short="Problem description must be at least 10 characters",
    too_long="Problem description is too long",
)]
Symptoms = Annotated[str, _text(max_length=500, too_long="Symptoms description is too long")]
PreferredDate = Annotated[str, AfterValidator(_check_date)]
PreviousRepairs = Annotated[str, _text(max_length=500, too_long="Previous repairs description is too long")]
WarrantyInfo = Annotated[str, _text(max_length=300, too_long="Warranty information is too long")]
SpecialInstructions = Annotated[str, _text(max_length=500, too_long="Special instructions are too long")]


# ============ Profiles ============

class _WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel)

    def to_wire(self) -> dict:
        """camelCase, JSON-ready dict without absent optional fields."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class ServiceRequest(_WireModel):
    """Complete service request (strict profile)."""

    # Customer
    customer_name: CustomerName
    phone_number: PhoneNumber
    email: Email
    preferred_contact: Optional[PreferredContact] = None

    # Vehicle
    make: VehicleMake
    model: VehicleModel
    year: Year
    mileage: Mileage
    vin: Optional[Vin] = None
    license_plate: Optional[LicensePlate] = None

    # Service
    service_type: ServiceType
    urgency: Urgency
    problem_description: ProblemDescription
    symptoms: Optional[Symptoms] = None
    preferred_date: Optional[PreferredDate] = None
    budget: Optional[Budget] = None

    # Additional
    previous_repairs: Optional[PreviousRepairs] = None
    warranty_info: Optional[WarrantyInfo] = None
    special_instructions: Optional[SpecialInstructions] = None
    how_did_you_hear: Optional[ReferralSource] = None


class ServiceRequestOverrides(_WireModel):
    """Caller-supplied subset of a service request (partial profile)."""

    model_config = ConfigDict(alias_generator=to_camel, extra="forbid")

    customer_name: Optional[CustomerName] = None
    phone_number: Optional[PhoneNumber] = None
    email: Optional[Email] = None
    preferred_contact: Optional[PreferredContact] = None

    make: Optional[VehicleMake] = None
    model: Optional[VehicleModel] = None
    year: Optional[Year] = None
    mileage: Optional[Mileage] = None
    vin: Optional[Vin] = None
    license_plate: Optional[LicensePlate] = None

    service_type: Optional[ServiceType] = None
    urgency: Optional[Urgency] = None
    problem_description: Optional[ProblemDescription] = None
    symptoms: Optional[Symptoms] = None
    preferred_date: Optional[PreferredDate] = None
    budget: Optional[Budget] = None

    previous_repairs: Optional[PreviousRepairs] = None
    warranty_info: Optional[WarrantyInfo] = None
    special_instructions: Optional[SpecialInstructions] = None
    how_did_you_hear: Optional[ReferralSource] = None


# Wire names in form order
SERVICE_REQUEST_FIELDS = tuple(f.alias for f in ServiceRequest.model_fields.values())

REQUIRED_FIELDS = tuple(
    f.alias for f in ServiceRequest.model_fields.values() if f.is_required()
)

ENUM_FIELDS = {
    "preferredContact": PreferredContact,
    "make": VehicleMake,
    "serviceType": ServiceType,
    "urgency": Urgency,
    "budget": Budget,
    "howDidYouHear": ReferralSource,
}


# ============ Validation ============

def violations_from(exc: ValidationError) -> List[Violation]:
    """Flatten pydantic errors into (field, message) pairs."""
    violations = []
    for err in exc.errors():
        field = ".".join(str(part) for part in err["loc"]) or "body"
        ctx = err.get("ctx") or {}
        cause = ctx.get("error") if err["type"] == "value_error" else None
        if isinstance(cause, FieldRuleError):
            violations.extend(Violation(field, message) for message in cause.messages)
        elif cause is not None:
            violations.append(Violation(field, str(cause)))
        else:
            violations.append(Violation(field, err["msg"]))
    return violations


def _validate(model: Type[BaseModel], data: dict, error_cls: Callable) -> BaseModel:
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise error_cls(violations_from(e)) from e


def validate_service_request(
    data: dict,
    error_cls: Type[SchemaValidationError] = SchemaValidationError,
) -> ServiceRequest:
    """Strict profile. Keys outside the known set are dropped."""
    if not isinstance(data, dict):
        raise error_cls([Violation("body", "Service request must be a JSON object")])
    return _validate(ServiceRequest, data, error_cls)


def find_unknown_fields(payload: dict) -> List[str]:
    return [key for key in payload if key not in SERVICE_REQUEST_FIELDS]


def validate_overrides(payload: dict) -> ServiceRequestOverrides:
    """
    Partial profile.

    Unknown keys are reported all at once before any field rule runs.
    JSON null counts as "not supplied".
    """
    unknown = find_unknown_fields(payload)
    if unknown:
        raise UnknownFieldsError(unknown)
    return _validate(ServiceRequestOverrides, payload, SchemaValidationError)
