"""
Synthetic service request pipeline: schema, generator, merge, orchestrator.

The orchestrator is imported from service_request.orchestrator directly
(it pulls in the browser package).
"""

from .errors import (
    DriverError,
    GenerationError,
    GenerationParseError,
    MergedRecordValidationError,
    SchemaValidationError,
    SectionGatingError,
    ServiceRequestError,
    UnknownFieldsError,
    Violation,
)
from .merge import merge
from .schema import (
    SERVICE_REQUEST_FIELDS,
    ServiceRequest,
    ServiceRequestOverrides,
    validate_overrides,
    validate_service_request,
)

__all__ = [
    "DriverError",
    "GenerationError",
    "GenerationParseError",
    "MergedRecordValidationError",
    "SchemaValidationError",
    "SectionGatingError",
    "ServiceRequestError",
    "UnknownFieldsError",
    "Violation",
    "merge",
    "SERVICE_REQUEST_FIELDS",
    "ServiceRequest",
    "ServiceRequestOverrides",
    "validate_overrides",
    "validate_service_request",
]
