"""
Browser automation for the service request intake form.

Usage:
    from browser import BrowserClient, FormDriver

    async with BrowserClient(FORM_URL) as page:
        await FormDriver(page).submit(service_request)
"""

from .client import BrowserClient
from .form_driver import FORM_LAYOUT, FormDriver, FormPage, FormSection, SectionState

__all__ = [
    "BrowserClient",
    "FormDriver",
    "FormPage",
    "FormSection",
    "SectionState",
    "FORM_LAYOUT",
]
