"""
Result types for explicit success/failure tracking during reconciliation.

On-chain reads are best-effort: a failed read must not raise past the
reader, yet callers still need to know it happened and why. These types
carry that information alongside the data.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Generic, List, Optional, TypeVar

T = TypeVar("T")


class ErrorSeverity(Enum):
    """Severity levels for processing errors."""

    WARNING = "warning"  # Fell back to cached data, log issue
    ERROR = "error"  # Item excluded, continue others
    CRITICAL = "critical"  # Request cannot be served


class ReadFailureKind(Enum):
    """Why an on-chain read produced no state."""

    REVERTED = "reverted"
    TIMEOUT = "timeout"
    RPC_ERROR = "rpc_error"
    DECODE_ERROR = "decode_error"
    CANCELLED = "cancelled"


@dataclass
class ProcessingError:
    """
    Represents a single processing error with context.

    Attributes:
        source: Component that generated the error (e.g. "onchain_reader")
        message: Human-readable error description
        severity: How severe the error is (affects control flow)
        context: Additional context like campaign_id, contract, chain_id
        exception: Original exception if available
    """

    source: str
    message: str
    severity: ErrorSeverity
    context: Dict[str, Any] = field(default_factory=dict)
    exception: Optional[Exception] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "source": self.source,
            "message": self.message,
            "severity": self.severity.value,
            "context": self.context,
        }


@dataclass
class Result(Generic[T]):
    """
    Result type that carries success/failure information.

    Attributes:
        success: Whether the operation succeeded
        data: The result data if successful
        errors: Errors encountered (warnings may be present on success)
    """

    success: bool
    data: Optional[T] = None
    errors: List[ProcessingError] = field(default_factory=list)

    @classmethod
    def ok(cls, data: T) -> "Result[T]":
        """Create a successful result with data."""
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, error: ProcessingError) -> "Result[T]":
        """Create a failed result with an error."""
        return cls(success=False, errors=[error])

    @classmethod
    def fail_with_message(
        cls,
        source: str,
        message: str,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: Optional[Dict[str, Any]] = None,
        exception: Optional[Exception] = None,
    ) -> "Result[T]":
        """Create a failed result with a message (convenience method)."""
        error = ProcessingError(
            source=source,
            message=message,
            severity=severity,
            context=context or {},
            exception=exception,
        )
        return cls(success=False, errors=[error])

    def add_warning(
        self,
        source: str,
        message: str,
        context: Optional[Dict[str, Any]] = None,
    ) -> "Result[T]":
        """Add a warning to the result (convenience method)."""
        self.errors.append(
            ProcessingError(
                source=source,
                message=message,
                severity=ErrorSeverity.WARNING,
                context=context or {},
            )
        )
        return self

    def has_errors(self) -> bool:
        """Check if result has any ERROR or CRITICAL level errors."""
        return any(
            e.severity in (ErrorSeverity.ERROR, ErrorSeverity.CRITICAL)
            for e in self.errors
        )

    def has_warnings(self) -> bool:
        """Check if result has any WARNING level errors."""
        return any(e.severity == ErrorSeverity.WARNING for e in self.errors)

    def get_error_messages(self) -> List[str]:
        """Get all error messages as strings."""
        return [e.message for e in self.errors]

    @property
    def failure_kind(self) -> Optional[ReadFailureKind]:
        """Tagged failure kind of an on-chain read, if any."""
        for error in self.errors:
            kind = error.context.get("kind")
            if kind:
                return ReadFailureKind(kind)
        return None


@dataclass
class ReconciliationSummary:
    """
    Summary of one list/lookup request.

    Gives a complete picture of how many cached records were considered,
    why some were excluded, and how the on-chain reads went.
    """

    records_loaded: int = 0
    records_eligible: int = 0
    records_excluded: int = 0
    onchain_reads: int = 0
    onchain_failures: int = 0

    errors: List[ProcessingError] = field(default_factory=list)
    excluded_records: List[Dict[str, Any]] = field(default_factory=list)
    failed_reads: List[Dict[str, Any]] = field(default_factory=list)

    def add_error(self, error: ProcessingError) -> None:
        """Add an error to the summary."""
        self.errors.append(error)

    def record_exclusion(
        self, record_id: str, campaign_id: Optional[int], reason: str
    ) -> None:
        """Track a cached record dropped before reconciliation."""
        self.records_excluded += 1
        self.excluded_records.append(
            {
                "record_id": record_id,
                "campaign_id": campaign_id,
                "reason": reason,
            }
        )

    def record_read(self, result: Result) -> None:
        """Track the outcome of one on-chain read."""
        self.onchain_reads += 1
        if result.success:
            return
        self.onchain_failures += 1
        self.errors.extend(result.errors)
        for error in result.errors:
            self.failed_reads.append(
                {"message": error.message, **error.context}
            )

    def error_count(self) -> int:
        """Count total errors (excluding warnings)."""
        return sum(
            1
            for e in self.errors
            if e.severity in (ErrorSeverity.ERROR, ErrorSeverity.CRITICAL)
        )

    def warning_count(self) -> int:
        """Count total warnings."""
        return sum(
            1 for e in self.errors if e.severity == ErrorSeverity.WARNING
        )

    def _calculate_rate(self, success: int, failed: int) -> str:
        total = success + failed
        if total == 0:
            return "N/A"
        return f"{success}/{total}"

    def to_dict(self) -> Dict[str, Any]:
        """Convert summary to dictionary for JSON serialization."""
        return {
            "success_rate": {
                "records": self._calculate_rate(
                    self.records_eligible - self.records_excluded,
                    self.records_excluded,
                ),
                "onchain_reads": self._calculate_rate(
                    self.onchain_reads - self.onchain_failures,
                    self.onchain_failures,
                ),
            },
            "counts": {
                "records_loaded": self.records_loaded,
                "records_eligible": self.records_eligible,
                "records_excluded": self.records_excluded,
                "onchain_reads": self.onchain_reads,
                "onchain_failures": self.onchain_failures,
            },
            "error_count": self.error_count(),
            "warning_count": self.warning_count(),
            "excluded_records": self.excluded_records,
            "failed_reads": self.failed_reads[:100],  # Limit for large runs
        }
