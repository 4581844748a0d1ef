"""
Record Generator - asks a text model for one synthetic service request.

Flow:
1. Build prompt: schema shape + closed value lists + realism guidelines
2. Call backend with diversity-tuned sampling
3. Reduce the reply to one JSON object (code fences tolerated)

The parsed dict is NOT validated here. The orchestrator validates after
overrides are merged, since overrides may fill or fix what the model got wrong.
"""

import json
import logging
from typing import Dict, Optional

from .errors import GenerationError, GenerationParseError
from .llm_client import DEFAULT_SAMPLING, SamplingConfig, TextGenerator
from .schema import ENUM_FIELDS, ServiceRequest

logger = logging.getLogger(__name__)


GUIDELINES = """
Guidelines:
- Use realistic car makes/models (Toyota Camry, Honda Civic, Ford F-150, etc.)
- Describe realistic service problems (engine noise, brake issues, electrical faults, etc.)
- Use realistic mileage between 10,000 and 200,000
- Use realistic customer names and contact details
- year and mileage are JSON integers, not strings

Field guidelines:
- problemDescription: the main issue in detail, e.g. "Brake pedal feels soft and the car takes longer to stop than usual"
- symptoms: specific sounds or behaviours, e.g. "Squeaking when braking, dashboard warning light on"
- previousRepairs: recent repairs or modifications
- warrantyInfo: warranty or extended coverage details
- specialInstructions: requests or notes for the mechanic
- preferredDate: YYYY-MM-DD, e.g. "2025-01-15"
- vin (if given): exactly 17 characters, capital letters and digits, never I, O or Q
- licensePlate (if given): at most 10 capital letters, digits, spaces or dashes
"""


def describe_schema() -> Dict[str, str]:
    """Field name -> type hint for the prompt, from the strict model's JSON schema."""
    schema = ServiceRequest.model_json_schema(by_alias=True)
    required = set(schema.get("required", []))
    shape = {}
    for name, prop in schema["properties"].items():
        variants = [p for p in prop.get("anyOf", [prop]) if p.get("type") != "null"]
        spec = variants[0] if variants else prop
        kind = "string (one of the listed values)" if "$ref" in spec else spec.get("type", "string")
        shape[name] = kind if name in required else f"{kind} (optional)"
    return shape


def build_prompt() -> str:
    enum_lines = "\n".join(
        f"- {field}: Must be one of: " + ", ".join(f'"{m.value}"' for m in enum)
        for field, enum in ENUM_FIELDS.items()
    )
    return f"""You are a car service request generator.
Each time you respond, generate a *new, unique* service request with realistic vehicle and problem data.
Pick a random car make/model combination and a realistic service issue.

Output exactly ONE JSON object and nothing else: no prose, no markdown, no code fences.
The object has this shape:
{json.dumps(describe_schema(), indent=2)}
{GUIDELINES}
IMPORTANT: Use these EXACT values for the following fields:
{enum_lines}
"""


def _extract_first_object(text: str) -> Optional[str]:
    """First balanced top-level {...} in text, skipping braces inside JSON strings."""
    start = text.find("{")
    if start < 0:
        return None

    depth = 0
    in_string = False
    escaped = False
    for i in range(start, len(text)):
        ch = text[i]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"':
            in_string = True
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return text[start:i + 1]
    return None


def parse_generated_record(text: str) -> dict:
    """
    Reduce model output to a dict.

    Fenced output (```json ... ```) is unwrapped by brace matching.
    Raises GenerationParseError if no JSON object can be isolated.
    """
    text = (text or "").strip()
    if text.startswith("```"):
        extracted = _extract_first_object(text)
        if extracted is None:
            raise GenerationParseError("Could not extract JSON from generator output")
        text = extracted

    try:
        record = json.loads(text)
    except json.JSONDecodeError as e:
        raise GenerationParseError(f"Invalid JSON from generator: {e}") from e

    if not isinstance(record, dict):
        raise GenerationParseError(
            f"Generator returned JSON {type(record).__name__}, expected an object"
        )
    return record


class ServiceRequestGenerator:
    """Produces one candidate record per call."""

    def __init__(self, backend: TextGenerator, sampling: SamplingConfig = DEFAULT_SAMPLING):
        self.backend = backend
        self.sampling = sampling

    async def generate(self) -> dict:
        prompt = build_prompt()
        logger.debug(f"Generation prompt:\n{prompt}")

        try:
            text = await self.backend.generate(prompt, self.sampling)
        except GenerationError:
            raise
        except Exception as e:  # noqa: BLE001 - backend is opaque
            raise GenerationError(f"Generation backend failed: {e}") from e

        record = parse_generated_record(text)
        logger.info(f"Generated candidate with {len(record)} fields")
        return record

    async def aclose(self):
        await self.backend.aclose()
