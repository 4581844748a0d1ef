"""
Form Driver - replays a ServiceRequest into the sectioned intake form.

The form is an accordion: one section expanded at a time, fields in a
collapsed section can't be interacted with. Customer section starts open.

Sequence:
1. Customer  (already open, never clicked: clicking would collapse it)
2. Vehicle   click header -> wait visible -> fields
3. Service   click header -> wait visible -> fields
4. Additional click header -> wait visible -> fields
5. Submit

SectionState tracks which section is open; touching a field outside it
raises SectionGatingError instead of relying on the page to ignore it.
Optional fields that are absent are skipped, never sent as empty values.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Protocol

from service_request.errors import SectionGatingError
from service_request.schema import ServiceRequest

from .config import SECTION_CONTENT, SECTION_HEADER, SUBMIT_SELECTOR

logger = logging.getLogger(__name__)


class FormPage(Protocol):
    """What the driver needs from a page. BrowserClient implements it for Playwright."""

    async def fill(self, selector: str, value: str) -> None: ...

    async def select_option(self, selector: str, value: str) -> None: ...

    async def click(self, selector: str) -> None: ...

    async def wait_for_visible(self, selector: str) -> None: ...


class FormSection(Enum):
    CUSTOMER = "customerInfo"
    VEHICLE = "vehicleInfo"
    SERVICE = "serviceRequest"
    ADDITIONAL = "additionalInfo"

    @property
    def header(self) -> str:
        return SECTION_HEADER.format(section=self.value)

    @property
    def content(self) -> str:
        return SECTION_CONTENT.format(section=self.value)


class FieldKind(Enum):
    FILL = "fill"
    SELECT = "select"


@dataclass(frozen=True)
class FieldBinding:
    """Record field (wire name) -> form control."""
    field: str
    kind: FieldKind = FieldKind.FILL

    @property
    def selector(self) -> str:
        return f"#{self.field}"


FILL, SELECT = FieldKind.FILL, FieldKind.SELECT

# Sections in the order they're driven, fields in the order they're set
FORM_LAYOUT: Dict[FormSection, List[FieldBinding]] = {
    FormSection.CUSTOMER: [
        FieldBinding("customerName"),
        FieldBinding("phoneNumber"),
        FieldBinding("email"),
        FieldBinding("preferredContact", SELECT),
    ],
    FormSection.VEHICLE: [
        FieldBinding("make", SELECT),
        FieldBinding("model"),
        FieldBinding("year"),
        FieldBinding("mileage"),
        FieldBinding("vin"),
        FieldBinding("licensePlate"),
    ],
    FormSection.SERVICE: [
        FieldBinding("serviceType", SELECT),
        FieldBinding("urgency", SELECT),
        FieldBinding("problemDescription"),
        FieldBinding("symptoms"),
        FieldBinding("preferredDate"),
        FieldBinding("budget", SELECT),
    ],
    FormSection.ADDITIONAL: [
        FieldBinding("previousRepairs"),
        FieldBinding("warrantyInfo"),
        FieldBinding("specialInstructions"),
        FieldBinding("howDidYouHear", SELECT),
    ],
}


class SectionState:
    """Which accordion section is currently expanded."""

    def __init__(self, initial: Optional[FormSection] = FormSection.CUSTOMER):
        self.expanded = initial
        self.history: List[FormSection] = [initial] if initial else []

    def is_expanded(self, section: FormSection) -> bool:
        return self.expanded is section

    def mark_expanded(self, section: FormSection):
        # page collapses the previous one itself
        self.expanded = section
        self.history.append(section)

    def require(self, section: FormSection):
        if self.expanded is not section:
            current = self.expanded.name if self.expanded else "none"
            raise SectionGatingError(
                f"Section {section.name} is collapsed (expanded: {current})"
            )


def form_values(record: ServiceRequest) -> Dict[str, str]:
    """Wire values as the strings typed/selected into the form; absent fields omitted."""
    return {field: str(value) for field, value in record.to_wire().items()}


class FormDriver:
    """Drives one record into one page. Any DriverError aborts the rest of the sequence."""

    def __init__(self, page: FormPage, state: Optional[SectionState] = None):
        self.page = page
        self.state = state or SectionState()

    async def expand(self, section: FormSection):
        if self.state.is_expanded(section):
            return
        await self.page.click(section.header)
        await self.page.wait_for_visible(section.content)
        self.state.mark_expanded(section)
        logger.debug(f"Expanded section {section.name}")

    async def set_field(self, section: FormSection, binding: FieldBinding, value: str):
        self.state.require(section)
        if binding.kind is FieldKind.SELECT:
            await self.page.select_option(binding.selector, value)
        else:
            await self.page.fill(binding.selector, value)

    async def submit(self, record: ServiceRequest):
        values = form_values(record)

        for section, bindings in FORM_LAYOUT.items():
            await self.expand(section)
            filled = 0
            for binding in bindings:
                value = values.get(binding.field)
                if not value:
                    continue
                await self.set_field(section, binding, value)
                filled += 1
            logger.info(f"Section {section.name}: {filled}/{len(bindings)} fields set")

        await self.page.click(SUBMIT_SELECTOR)
        logger.info("Form submitted")
