"""
Request Orchestrator: generate -> merge overrides -> validate -> drive form.

Stages run strictly in sequence; any failure aborts the run and nothing
partial is returned. Errors are logged here once, then re-raised typed.
"""

import logging
import time
from typing import Any, AsyncContextManager, Callable, Dict, Optional, Union

from browser.client import BrowserClient
from browser.form_driver import FormDriver, FormPage
from config import FORM_URL

from .errors import (
    DriverError,
    GenerationError,
    MergedRecordValidationError,
)
from .generator import ServiceRequestGenerator
from .llm_client import get_text_generator
from .merge import merge
from .schema import ServiceRequest, ServiceRequestOverrides, validate_service_request

logger = logging.getLogger(__name__)

# url -> async context manager yielding a FormPage
SessionFactory = Callable[[str], AsyncContextManager[FormPage]]


class ServiceRequestRunner:
    """One instance can serve many runs; each run opens its own page session."""

    def __init__(
        self,
        generator: ServiceRequestGenerator,
        session_factory: SessionFactory = BrowserClient,
        form_url: Optional[str] = None,
    ):
        self.generator = generator
        self.session_factory = session_factory
        self.form_url = form_url or FORM_URL

    async def run(
        self,
        overrides: Union[ServiceRequestOverrides, Dict[str, Any], None] = None,
    ) -> ServiceRequest:
        if isinstance(overrides, ServiceRequestOverrides):
            overrides = overrides.to_wire()
        overrides = overrides or {}
        start = time.time()

        # 1. Generate
        try:
            candidate = await self.generator.generate()
        except GenerationError as e:
            logger.error(f"Generation failed: {e}")
            raise

        # 2. Merge
        merged = merge(candidate, overrides)
        if overrides:
            logger.info(f"Applied {len(overrides)} override(s): {', '.join(overrides)}")

        # 3. Validate before anything touches the form
        try:
            record = validate_service_request(merged, error_cls=MergedRecordValidationError)
        except MergedRecordValidationError as e:
            logger.error(f"{e} | candidate keys: {sorted(candidate)}")
            raise

        # 4. Drive
        try:
            async with self.session_factory(self.form_url) as page:
                await FormDriver(page).submit(record)
        except DriverError as e:
            logger.error(f"Form driving failed: {e}")
            raise

        logger.info(f"Run complete for {record.customer_name} in {time.time() - start:.1f}s")
        logger.debug(f"Submitted record: {record.to_wire()}")
        return record

    async def aclose(self):
        """Release the generation backend's connections."""
        await self.generator.aclose()


_runner: Optional[ServiceRequestRunner] = None


def get_runner() -> ServiceRequestRunner:
    """Process-wide runner wired to the configured backend and a real browser."""
    global _runner
    if _runner is None:
        _runner = ServiceRequestRunner(ServiceRequestGenerator(get_text_generator()))
    return _runner


async def close_runner():
    global _runner
    if _runner is not None:
        await _runner.aclose()
        _runner = None
