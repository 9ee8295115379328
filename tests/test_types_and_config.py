"""Tests for value classification, configuration and error payloads."""

import sys
from datetime import date, datetime
from decimal import Decimal
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

import pytest
from pydantic import ValidationError

from eligibility import (
    UNDEFINED, EvaluatorConfig, InvalidCriteriaError, Operator,
    UnsupportedOperationError, EvaluationDepthError, ConfigurationError, ValueKind,
    classify, is_object
)
from eligibility.config import DEFAULT_MAX_DEPTH, MAX_DEPTH_LIMIT


class TestClassify:

    @pytest.mark.parametrize("value,kind", [
        (UNDEFINED, ValueKind.UNDEFINED),
        (None, ValueKind.NULL),
        (True, ValueKind.BOOL),
        (0, ValueKind.NUMBER),
        (1.5, ValueKind.NUMBER),
        (Decimal("2.5"), ValueKind.NUMBER),
        ("x", ValueKind.STRING),
        (date(2024, 1, 1), ValueKind.DATE),
        (datetime(2024, 1, 1), ValueKind.DATE),
        ({"a": 1}, ValueKind.MAPPING),
        ([1], ValueKind.SEQUENCE),
        ((1,), ValueKind.SEQUENCE),
        (b"raw", ValueKind.OTHER),
    ])
    def test_kinds(self, value, kind):
        assert classify(value) is kind


class TestIsObject:

    def test_composites(self):
        assert is_object({}) is True
        assert is_object([]) is True

    @pytest.mark.parametrize("value", [None, UNDEFINED, 0, "text", True, datetime(2024, 1, 1)])
    def test_primitives(self, value):
        assert is_object(value) is False


class TestOperator:

    def test_lookup(self):
        assert Operator.lookup("gte") is Operator.GTE
        assert Operator.lookup("between") is None
        assert Operator.lookup(3) is None

    def test_registered_names(self):
        assert {op.value for op in Operator} == {"gt", "lt", "gte", "lte", "in", "and", "or"}


class TestEvaluatorConfig:

    def test_defaults(self):
        config = EvaluatorConfig()

        assert config.max_depth == DEFAULT_MAX_DEPTH
        assert config.coerce_numeric_strings is False

    def test_from_env(self):
        config = EvaluatorConfig.from_env({
            "ELIGIBILITY_MAX_DEPTH": "32",
            "ELIGIBILITY_COERCE_NUMERIC_STRINGS": "1",
        })

        assert config.max_depth == 32
        assert config.coerce_numeric_strings is True

    def test_from_process_env(self, monkeypatch):
        monkeypatch.setenv("ELIGIBILITY_MAX_DEPTH", "12")
        monkeypatch.delenv("ELIGIBILITY_COERCE_NUMERIC_STRINGS", raising=False)

        config = EvaluatorConfig.from_env()

        assert config.max_depth == 12
        assert config.coerce_numeric_strings is False

    @pytest.mark.parametrize("value", ["abc", "", "1.5", str(MAX_DEPTH_LIMIT + 1), "-3"])
    def test_from_env_rejects_bad_max_depth(self, value):
        with pytest.raises(ConfigurationError) as exc_info:
            EvaluatorConfig.from_env({"ELIGIBILITY_MAX_DEPTH": value})

        assert exc_info.value.setting == "ELIGIBILITY_MAX_DEPTH"
        assert exc_info.value.error_code == "INVALID_CONFIG"

    def test_max_depth_upper_bound(self):
        assert EvaluatorConfig(max_depth=MAX_DEPTH_LIMIT).max_depth == MAX_DEPTH_LIMIT

        with pytest.raises(ValidationError):
            EvaluatorConfig(max_depth=MAX_DEPTH_LIMIT + 1)

    def test_max_depth_must_be_positive(self):
        with pytest.raises(ValidationError):
            EvaluatorConfig(max_depth=0)

    def test_frozen(self):
        config = EvaluatorConfig()

        with pytest.raises(ValidationError):
            config.max_depth = 3


class TestErrors:

    def test_invalid_criteria_to_dict(self):
        error = InvalidCriteriaError("bad criteria", context={"path": "a.b"})

        data = error.to_dict()
        assert data["error_type"] == "InvalidCriteriaError"
        assert data["error_code"] == "INVALID_CRITERIA"
        assert data["context"] == {"path": "a.b"}
        assert str(error) == "[INVALID_CRITERIA] bad criteria"

    def test_unsupported_operation_to_dict(self):
        error = UnsupportedOperationError("Unsupported operation: foo", operator="foo")

        assert error.to_dict()["operator"] == "foo"
        assert error.error_code == "UNSUPPORTED_OPERATION"

    def test_depth_error_to_dict(self):
        error = EvaluationDepthError("too deep", max_depth=8)

        assert error.to_dict()["max_depth"] == 8
        assert isinstance(error, Exception)
