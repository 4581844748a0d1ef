"""
Tests for the override merge.
"""

import sys
import copy
import pytest
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from service_request.merge import merge


@pytest.fixture
def generated(valid_record):
    return copy.deepcopy(valid_record)


class TestMerge:
    """Tests for merge()."""

    def test_override_wins(self, generated):
        merged = merge(generated, {"customerName": "Jane Doe", "year": 2020})

        assert merged["customerName"] == "Jane Doe"
        assert merged["year"] == 2020

    def test_absent_fields_keep_generated_values(self, generated):
        merged = merge(generated, {"customerName": "Jane Doe"})

        for key, value in generated.items():
            if key != "customerName":
                assert merged[key] == value

    def test_every_override_present(self, generated):
        overrides = {"make": "Toyota", "model": "Camry", "urgency": "Urgent", "vin": "JT2BF22K1Y0123456"}
        merged = merge(generated, overrides)

        assert {k: merged[k] for k in overrides} == overrides

    def test_none_is_not_an_override(self, generated):
        merged = merge(generated, {"symptoms": None})

        assert merged["symptoms"] == generated["symptoms"]

    def test_override_adds_missing_field(self, minimal_record):
        merged = merge(minimal_record, {"budget": "No Limit"})

        assert merged["budget"] == "No Limit"

    def test_inputs_not_mutated(self, generated):
        snapshot = copy.deepcopy(generated)
        overrides = {"customerName": "Jane Doe"}

        merged = merge(generated, overrides)

        assert generated == snapshot
        assert overrides == {"customerName": "Jane Doe"}
        assert merged is not generated

    def test_empty_overrides_returns_copy(self, generated):
        merged = merge(generated, {})

        assert merged == generated
        assert merged is not generated

    def test_idempotent(self, generated):
        overrides = {"customerName": "Jane Doe", "mileage": 12000}
        once = merge(generated, overrides)

        assert merge(once, overrides) == once
