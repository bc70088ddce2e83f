# ================================================================================
# Response Validator
# ================================================================================
#
# Rule-based validation of API payloads with Allure reporting.
#
# Key Features:
#   - Field-level validation with dot / index paths ("bookingdates.checkin")
#   - Type checks that keep booleans apart from numbers
#   - Every violation reported at once, not just the first
#   - Ready-made rule sets for the booking and auth payloads
#
# ================================================================================

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List

import allure

from booker_tools.common import get_logger


log = get_logger("ResponseValidator")

ISO_DATE_PATTERN = r"^\d{4}-\d{2}-\d{2}$"


class ValidationType(Enum):
    """Enumeration of supported validation types."""
    EQUAL = "equal"
    REGEX_MATCH = "regex_match"
    LENGTH_GREATER_THAN = "length_greater_than"
    TYPE_CHECK = "type_check"


@dataclass
class ValidationRule:
    """
    A single validation rule applied to a payload field.

    Attributes:
        field: The field path to validate (dot notation, ``items[0]`` indexing)
        validation_type: The type of validation to perform
        expected: The expected value, type name or pattern
        description: Human-readable description of the validation
        required: Whether the field must exist
    """
    field: str
    validation_type: ValidationType
    expected: Any = None
    description: str = ""
    required: bool = True


@dataclass
class ValidationResult:
    """Outcome of applying one rule."""
    passed: bool
    rule: ValidationRule
    actual_value: Any = None
    error_message: str = ""


# bool is a subclass of int; numeric checks must reject it explicitly.
TYPE_MAP = {
    "string": str,
    "int": int,
    "integer": int,
    "number": (int, float),
    "bool": bool,
    "boolean": bool,
    "list": list,
    "array": list,
    "dict": dict,
    "object": dict,
}
NUMERIC_TYPES = {"int", "integer", "number"}


def _type_rule(path: str, type_name: str, required: bool = True) -> ValidationRule:
    return ValidationRule(
        field=path,
        validation_type=ValidationType.TYPE_CHECK,
        expected=type_name,
        description=f"{path} is {type_name}",
        required=required,
    )


BOOKING_RULES = [
    _type_rule("firstname", "string"),
    _type_rule("lastname", "string"),
    _type_rule("totalprice", "number"),
    _type_rule("depositpaid", "boolean"),
    _type_rule("bookingdates", "object"),
    _type_rule("bookingdates.checkin", "string"),
    _type_rule("bookingdates.checkout", "string"),
    ValidationRule(
        field="bookingdates.checkin",
        validation_type=ValidationType.REGEX_MATCH,
        expected=ISO_DATE_PATTERN,
        description="checkin is YYYY-MM-DD",
    ),
    ValidationRule(
        field="bookingdates.checkout",
        validation_type=ValidationType.REGEX_MATCH,
        expected=ISO_DATE_PATTERN,
        description="checkout is YYYY-MM-DD",
    ),
    _type_rule("additionalneeds", "string", required=False),
]

CREATED_BOOKING_RULES = [
    _type_rule("bookingid", "integer"),
    _type_rule("booking", "object"),
]

AUTH_TOKEN_RULES = [
    _type_rule("token", "string"),
    ValidationRule(
        field="token",
        validation_type=ValidationType.LENGTH_GREATER_THAN,
        expected=10,
        description="token longer than 10 characters",
    ),
]

# /auth answers 200 for rejected credentials
BAD_CREDENTIALS_RULES = [
    ValidationRule(
        field="reason",
        validation_type=ValidationType.EQUAL,
        expected="Bad credentials",
        description="reason is Bad credentials",
    ),
]


def message_echo_rules(message: Dict[str, Any]) -> List[ValidationRule]:
    """Rules checking that a created contact message echoes what was sent."""
    return [
        ValidationRule(
            field=key,
            validation_type=ValidationType.EQUAL,
            expected=message[key],
            description=f"{key} echoed",
        )
        for key in ("name", "subject")
    ]


class ResponseValidator:
    """
    Validates parsed JSON payloads against lists of rules.

    Example:
        validator = ResponseValidator()
        validator.validate_and_assert(booking, BOOKING_RULES)
    """

    def __init__(self):
        self._validation_handlers = {
            ValidationType.EQUAL: self._validate_equal,
            ValidationType.REGEX_MATCH: self._validate_regex_match,
            ValidationType.LENGTH_GREATER_THAN: self._validate_length_greater_than,
            ValidationType.TYPE_CHECK: self._validate_type_check,
        }

    def validate(
        self,
        response_data: Any,
        rules: List[ValidationRule]
    ) -> List[ValidationResult]:
        """
        Validate response data against a list of validation rules.

        Args:
            response_data: The parsed JSON response data
            rules: List of validation rules to apply

        Returns:
            List of ValidationResult objects, one for each rule
        """
        results = []
        with allure.step(f"Validating response against {len(rules)} rules"):
            for rule in rules:
                result = self._apply_rule(response_data, rule)
                results.append(result)

                log_msg = f"{rule.description or rule.field}: {'ok' if result.passed else 'FAILED'}"
                if result.passed:
                    log.debug(log_msg)
                else:
                    log.warning(f"{log_msg} - {result.error_message}")

            self._attach_validation_summary(results)
        return results

    def validate_and_assert(
        self,
        response_data: Any,
        rules: List[ValidationRule],
    ) -> None:
        """
        Validate response and raise if any rule fails.

        Raises:
            AssertionError: Listing every failed rule
        """
        results = self.validate(response_data, rules)
        failures = [r for r in results if not r.passed]

        if failures:
            error_text = "\n".join(
                f"- {f.rule.field}: {f.error_message}" for f in failures
            )
            raise AssertionError(
                f"Response validation failed ({len(failures)}/{len(results)} rules):\n"
                f"{error_text}"
            )

    def _apply_rule(self, response_data: Any, rule: ValidationRule) -> ValidationResult:
        try:
            actual_value = self._get_nested_value(response_data, rule.field)
        except (KeyError, IndexError, TypeError):
            if rule.required:
                return ValidationResult(
                    passed=False,
                    rule=rule,
                    error_message=f"Required field not found: {rule.field}"
                )
            return ValidationResult(passed=True, rule=rule)

        handler = self._validation_handlers[rule.validation_type]
        passed, error_message = handler(actual_value, rule.expected)
        return ValidationResult(
            passed=passed,
            rule=rule,
            actual_value=actual_value,
            error_message=error_message
        )

    @staticmethod
    def _get_nested_value(data: Any, key_path: str) -> Any:
        """
        Get a value from nested data using dot notation.

        Raises:
            KeyError: If the path doesn't exist
        """
        current = data
        for key in key_path.split('.'):
            array_match = re.match(r'(\w+)\[(\d+)\]', key)
            if array_match:
                current = current[array_match.group(1)][int(array_match.group(2))]
            else:
                current = current[key]
        return current

    # Validation handlers
    def _validate_equal(self, actual: Any, expected: Any) -> tuple:
        passed = actual == expected
        error = "" if passed else f"Expected '{expected}', got '{actual}'"
        return passed, error

    def _validate_regex_match(self, actual: Any, expected: str) -> tuple:
        try:
            passed = re.match(expected, str(actual)) is not None
        except re.error as e:
            return False, f"Invalid regex pattern: {e}"
        error = "" if passed else f"'{actual}' does not match pattern '{expected}'"
        return passed, error

    def _validate_length_greater_than(self, actual: Any, expected: int) -> tuple:
        actual_len = len(actual) if hasattr(actual, '__len__') else 0
        passed = actual_len > expected
        error = "" if passed else f"Expected length > {expected}, got {actual_len}"
        return passed, error

    def _validate_type_check(self, actual: Any, expected: str) -> tuple:
        """Validate value type."""
        type_name = expected.lower()
        expected_type = TYPE_MAP.get(type_name)
        if expected_type is None:
            return False, f"Unknown type: {expected}"

        passed = isinstance(actual, expected_type)
        if type_name in NUMERIC_TYPES and isinstance(actual, bool):
            passed = False
        error = "" if passed else f"Expected type {expected}, got {type(actual).__name__}"
        return passed, error

    def _attach_validation_summary(self, results: List[ValidationResult]) -> None:
        """Attach validation summary to Allure report."""
        passed_count = sum(1 for r in results if r.passed)

        summary_lines = [
            f"Total Rules: {len(results)}",
            f"Passed: {passed_count}",
            f"Failed: {len(results) - passed_count}",
            "",
            "Details:",
            "-" * 40
        ]
        for result in results:
            status = "PASS" if result.passed else "FAIL"
            line = f"{status} | {result.rule.field}"
            if not result.passed:
                line += f" | {result.error_message}"
            summary_lines.append(line)

        allure.attach(
            "\n".join(summary_lines),
            name="Validation Summary",
            attachment_type=allure.attachment_type.TEXT
        )


__all__ = [
    "ResponseValidator",
    "ValidationRule",
    "ValidationResult",
    "ValidationType",
    "BOOKING_RULES",
    "CREATED_BOOKING_RULES",
    "AUTH_TOKEN_RULES",
    "BAD_CREDENTIALS_RULES",
    "message_echo_rules",
]
