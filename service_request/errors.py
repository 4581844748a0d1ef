"""
Error taxonomy for the service request pipeline.

    ServiceRequestError
    ├── SchemaValidationError          (400 at the HTTP boundary)
    │   ├── UnknownFieldsError
    │   └── MergedRecordValidationError (run failure, 500)
    ├── GenerationError
    │   └── GenerationParseError
    └── DriverError
        └── SectionGatingError
"""

from typing import List, NamedTuple


class Violation(NamedTuple):
    """One field-level rule failure."""
    field: str
    message: str

    def to_dict(self) -> dict:
        return {"field": self.field, "message": self.message}


class ServiceRequestError(Exception):
    """Base class for every pipeline failure."""


class SchemaValidationError(ServiceRequestError):
    """Payload broke one or more field rules."""

    prefix = "Validation failed"

    def __init__(self, violations: List[Violation]):
        self.violations = list(violations)
        super().__init__(self.summary())

    def summary(self) -> str:
        joined = ", ".join(f"{v.field}: {v.message}" for v in self.violations)
        return f"{self.prefix}: {joined}"

    def details(self) -> List[dict]:
        return [v.to_dict() for v in self.violations]


class UnknownFieldsError(SchemaValidationError):
    """Payload carried keys outside the known field set."""

    def __init__(self, fields: List[str]):
        self.fields = list(fields)
        super().__init__([Violation(f, "Unknown field") for f in self.fields])

    def summary(self) -> str:
        plural = "s" if len(self.fields) > 1 else ""
        return f"Unknown ServiceRequest field{plural}: {', '.join(self.fields)}"


class MergedRecordValidationError(SchemaValidationError):
    """Generated record with overrides applied is not a complete, valid record."""

    prefix = "Merged service request failed validation"


class GenerationError(ServiceRequestError):
    """Text-generation backend failed to produce output."""


class GenerationParseError(GenerationError):
    """Backend output could not be reduced to one JSON object."""


class DriverError(ServiceRequestError):
    """Form automation could not complete."""


class SectionGatingError(DriverError):
    """Field interaction attempted while its section is collapsed."""
