"""
Shared fixtures: a complete service request and an in-memory intake form.

FakeFormPage behaves like the real accordion page: one section open at a time,
clicking a header toggles it, fields in a collapsed section can't be touched.
No browser is launched anywhere in the suite.
"""

import sys
from contextlib import asynccontextmanager
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from browser.config import SUBMIT_SELECTOR
from browser.form_driver import FORM_LAYOUT, FormSection
from service_request.errors import DriverError


class FakeFormPage:
    """FormPage test double that records every interaction."""

    def __init__(self, missing=(), never_visible=()):
        self.open_section = FormSection.CUSTOMER
        self.values = {}
        self.calls = []
        self.submitted = False
        self.missing = set(missing)
        self.never_visible = set(never_visible)
        self.field_sections = {
            binding.selector: section
            for section, bindings in FORM_LAYOUT.items()
            for binding in bindings
        }

    def _touch(self, selector):
        if selector in self.missing:
            raise DriverError(f"Element not found: {selector}")
        if self.field_sections[selector] is not self.open_section:
            raise DriverError(f"{selector} is not interactable")

    async def fill(self, selector, value):
        self.calls.append(("fill", selector, value))
        self._touch(selector)
        self.values[selector] = value

    async def select_option(self, selector, value):
        self.calls.append(("select", selector, value))
        self._touch(selector)
        self.values[selector] = value

    async def click(self, selector):
        self.calls.append(("click", selector))
        if selector in self.missing:
            raise DriverError(f"Element not found: {selector}")
        if selector == SUBMIT_SELECTOR:
            self.submitted = True
            return
        for section in FormSection:
            if selector == section.header:
                self.open_section = None if self.open_section is section else section

    async def wait_for_visible(self, selector):
        self.calls.append(("wait", selector))
        section = next(s for s in FormSection if s.content == selector)
        if selector in self.never_visible or self.open_section is not section:
            raise DriverError(f"Timed out waiting for {selector} to become visible")

    @property
    def clicks(self):
        return [c[1] for c in self.calls if c[0] == "click"]


class FakeSessionFactory:
    """Stands in for BrowserClient: session_factory(url) -> async context yielding the page."""

    def __init__(self, page):
        self.page = page
        self.urls = []

    def __call__(self, url):
        self.urls.append(url)
        return self._session()

    @asynccontextmanager
    async def _session(self):
        yield self.page


# ============ Fixtures ============

@pytest.fixture
def valid_record():
    """Complete record in wire format (camelCase), every optional field set."""
    return {
        "customerName": "Maria Lopez",
        "phoneNumber": "(555) 201-3344",
        "email": "maria.lopez@gmail.com",
        "preferredContact": "Email",
        "make": "Honda",
        "model": "Civic",
        "year": 2018,
        "mileage": 64000,
        "vin": "1HGBH41JXMN109186",
        "licensePlate": "ABC-1234",
        "serviceType": "Brake Service",
        "urgency": "Standard",
        "problemDescription": "Brake pedal feels soft and the car takes longer to stop than usual.",
        "symptoms": "Squeaking when braking, ABS light flickers",
        "preferredDate": "2025-03-14",
        "budget": "$300-$500",
        "previousRepairs": "Front pads replaced in 2022",
        "warrantyInfo": "Powertrain warranty expired",
        "specialInstructions": "Call before any work over $200",
        "howDidYouHear": "Google Search",
    }


@pytest.fixture
def minimal_record(valid_record):
    """Only the required fields."""
    required = (
        "customerName", "phoneNumber", "email", "make", "model", "year",
        "mileage", "serviceType", "urgency", "problemDescription",
    )
    return {k: valid_record[k] for k in required}


@pytest.fixture
def fake_page():
    return FakeFormPage()
