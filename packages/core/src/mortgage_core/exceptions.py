"""Custom exceptions for the mortgage planner.

The affordability engine itself never raises on numeric input: degenerate
prices, rates and terms resolve to zero. These exceptions belong to the
collaborators around it (bracket-table editing, snapshot migration and
configuration). All of them inherit from MortgagePlannerError.

Example:
    try:
        state = load_household_state(document)
    except SnapshotError as e:
        logger.error("snapshot_rejected", error=str(e), **e.details)
        state = reset_household_state()
"""

from typing import Any, Optional


class MortgagePlannerError(Exception):
    """Base exception for all mortgage planner errors.

    Attributes:
        message: Human-readable error description.
        details: Optional dictionary with additional context.
        recoverable: Whether the error is potentially recoverable.

    Example:
        >>> raise MortgagePlannerError("Something went wrong", details={"code": 500})
        MortgagePlannerError: Something went wrong
    """

    def __init__(
        self,
        message: str,
        *,
        details: Optional[dict[str, Any]] = None,
        recoverable: bool = False,
    ) -> None:
        """Initialize MortgagePlannerError.

        Args:
            message: Human-readable error description.
            details: Optional dictionary with additional context about the error.
            recoverable: Whether the error is potentially recoverable through
                user correction. Defaults to False.
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.recoverable = recoverable

    def __str__(self) -> str:
        """Return string representation of the error."""
        return self.message

    def __repr__(self) -> str:
        """Return detailed representation of the error."""
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"details={self.details!r}, "
            f"recoverable={self.recoverable!r})"
        )


class ValidationError(MortgagePlannerError):
    """Error raised when user-edited data breaks a structural rule.

    Raised by the purchase-tax bracket editor when a change would leave the
    schedule out of order, overlapping, or without its open-ended bracket.

    Attributes:
        field: The field that failed validation.
        value: The invalid value.
        constraint: The validation constraint that was violated.

    Example:
        >>> raise ValidationError(
        ...     "Bracket ceiling must be greater than 1978745",
        ...     field="ceiling",
        ...     value=1500000,
        ...     constraint="ceiling > 1978745",
        ... )
        ValidationError: Bracket ceiling must be greater than 1978745
    """

    def __init__(
        self,
        message: str,
        *,
        field: Optional[str] = None,
        value: Optional[Any] = None,
        constraint: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
        recoverable: bool = True,
    ) -> None:
        """Initialize ValidationError.

        Args:
            message: Human-readable error description.
            field: The name of the field that failed validation.
            value: The invalid value.
            constraint: Description of the validation rule violated.
            details: Optional dictionary with additional context.
            recoverable: Whether the error can be fixed by user correction.
                Defaults to True.
        """
        super().__init__(message, details=details, recoverable=recoverable)
        self.field = field
        self.value = value
        self.constraint = constraint

        if field:
            self.details["field"] = field
        if value is not None:
            self.details["value"] = value
        if constraint:
            self.details["constraint"] = constraint


class SnapshotError(MortgagePlannerError):
    """Error raised when a persisted household snapshot cannot be loaded.

    Attributes:
        schema_version: The schema version found in the document (if any).

    Example:
        >>> raise SnapshotError("Unsupported snapshot schema", schema_version=7)
        SnapshotError: Unsupported snapshot schema
    """

    def __init__(
        self,
        message: str,
        *,
        schema_version: Optional[int] = None,
        details: Optional[dict[str, Any]] = None,
        recoverable: bool = False,
    ) -> None:
        """Initialize SnapshotError.

        Args:
            message: Human-readable error description.
            schema_version: Version stamp of the rejected document.
            details: Optional dictionary with additional context.
            recoverable: Defaults to False; a rejected snapshot has to be
                reset or repaired outside the engine.
        """
        super().__init__(message, details=details, recoverable=recoverable)
        self.schema_version = schema_version

        if schema_version is not None:
            self.details["schema_version"] = schema_version


class ConfigurationError(MortgagePlannerError):
    """Error raised when configuration is invalid or missing.

    Attributes:
        config_key: The configuration key that is problematic.
        expected: Description of the expected value or format.
        actual: The actual value found (if any).

    Example:
        >>> raise ConfigurationError(
        ...     "Broker fee rate out of range",
        ...     config_key="MORTGAGE_PREFS_BROKER_FEE_RATE",
        ...     expected="0-100",
        ... )
        ConfigurationError: Broker fee rate out of range
    """

    def __init__(
        self,
        message: str,
        *,
        config_key: Optional[str] = None,
        expected: Optional[str] = None,
        actual: Optional[Any] = None,
        details: Optional[dict[str, Any]] = None,
        recoverable: bool = False,
    ) -> None:
        """Initialize ConfigurationError.

        Args:
            message: Human-readable error description.
            config_key: The name of the configuration key that is problematic.
            expected: Description of what value was expected.
            actual: The actual value found.
            details: Optional dictionary with additional context.
            recoverable: Defaults to False.
        """
        super().__init__(message, details=details, recoverable=recoverable)
        self.config_key = config_key
        self.expected = expected
        self.actual = actual

        if config_key:
            self.details["config_key"] = config_key
        if expected:
            self.details["expected"] = expected
        if actual is not None:
            self.details["actual"] = actual


__all__ = [
    "MortgagePlannerError",
    "ValidationError",
    "SnapshotError",
    "ConfigurationError",
]
