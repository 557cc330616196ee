"""
Error Handler - Error classification and bookkeeping for chaos scenarios

Failures are sorted into the ones that abort a scenario (fatal) and the ones
the harness tolerates (traffic shaping during partition simulation).
"""
import logging
from typing import Optional, Any, Dict, List
from enum import Enum
from dataclasses import dataclass, field
import time

from ..errors import (
    FatalScenarioError, TrafficShapingError, NodeStartupTimeout, ConsistencyViolationError,
    CanaryWriteError, ClusterClientError, TopologyInvariantError
)

logger = logging.getLogger(__name__)


class ErrorSeverity(Enum):
    """Severity levels for errors"""
    LOW = "low"  # Tolerated, scenario continues
    MEDIUM = "medium"  # Degraded, scenario continues
    HIGH = "high"  # Unexpected failure, scenario aborts
    FATAL = "fatal"  # Assertion or startup failure, scenario aborts


class ErrorCategory(Enum):
    """Categories of errors for targeted handling"""
    NODE_LIFECYCLE = "node_lifecycle"
    NETWORK_PARTITION = "network_partition"
    DOMAIN_OPERATION = "domain_operation"
    CONSISTENCY = "consistency"
    TOPOLOGY = "topology"
    CONFIGURATION = "configuration"
    RESOURCE_CLEANUP = "resource_cleanup"
    UNEXPECTED = "unexpected"


@dataclass
class ErrorContext:
    """Context information for an error"""
    category: ErrorCategory
    severity: ErrorSeverity
    message: str
    exception: Optional[Exception] = None
    node_name: Optional[str] = None
    round_index: Optional[int] = None
    metadata: Optional[Dict[str, Any]] = None
    timestamp: float = field(default_factory=time.time)


class ErrorHandler:
    """
    Centralized error bookkeeping for the harness.

    handle_error() logs an error according to its severity, records it and
    tells the caller whether the scenario may continue.
    """

    def __init__(self):
        self.error_history: List[ErrorContext] = []

    def handle_error(self, error_context: ErrorContext) -> bool:
        """Record an error and return True if the scenario may continue"""
        self._log_error(error_context)
        self.error_history.append(error_context)
        return error_context.severity in (ErrorSeverity.LOW, ErrorSeverity.MEDIUM)

    def record_traffic_failure(self, node_name: str, exception: TrafficShapingError,
                               round_index: Optional[int] = None) -> bool:
        """Partitions are best-effort: traffic failures are logged and tolerated"""
        return self.handle_error(ErrorContext(
            category=ErrorCategory.NETWORK_PARTITION,
            severity=ErrorSeverity.MEDIUM,
            message=f"Traffic shaping failed: {exception}",
            exception=exception,
            node_name=node_name,
            round_index=round_index
        ))

    def record_fatal(self, exception: Exception, round_index: Optional[int] = None) -> bool:
        """Record the failure that aborted the scenario"""
        severity = ErrorSeverity.FATAL if isinstance(exception, FatalScenarioError) else ErrorSeverity.HIGH
        return self.handle_error(ErrorContext(
            category=self.categorize(exception),
            severity=severity,
            message=str(exception),
            exception=exception,
            node_name=getattr(exception, 'node_name', None),
            round_index=round_index
        ))

    @staticmethod
    def categorize(exception: Exception) -> ErrorCategory:
        """Map an exception to the category used in summaries"""
        if isinstance(exception, NodeStartupTimeout):
            return ErrorCategory.NODE_LIFECYCLE
        if isinstance(exception, (ConsistencyViolationError, CanaryWriteError)):
            return ErrorCategory.CONSISTENCY
        if isinstance(exception, ClusterClientError):
            return ErrorCategory.DOMAIN_OPERATION
        if isinstance(exception, TopologyInvariantError):
            return ErrorCategory.TOPOLOGY
        if isinstance(exception, TrafficShapingError):
            return ErrorCategory.NETWORK_PARTITION
        if isinstance(exception, ValueError):
            return ErrorCategory.CONFIGURATION
        return ErrorCategory.UNEXPECTED

    def _log_error(self, error_context: ErrorContext):
        """Log error with appropriate level based on severity"""
        log_message = f"[{error_context.category.value}] {error_context.message}"

        if error_context.node_name:
            log_message += f" (node: {error_context.node_name})"

        if error_context.round_index is not None:
            log_message += f" (round: {error_context.round_index})"

        if error_context.severity == ErrorSeverity.FATAL:
            logger.critical(log_message)
        elif error_context.severity == ErrorSeverity.HIGH:
            logger.error(log_message)
        elif error_context.severity == ErrorSeverity.MEDIUM:
            logger.warning(log_message)
        else:
            logger.info(log_message)

    def get_error_summary(self) -> Dict[str, Any]:
        """Get summary of all errors encountered"""
        errors_by_category = {}
        errors_by_severity = {}

        for error in self.error_history:
            category = error.category.value
            errors_by_category[category] = errors_by_category.get(category, 0) + 1

            severity = error.severity.value
            errors_by_severity[severity] = errors_by_severity.get(severity, 0) + 1

        return {
            'total_errors': len(self.error_history),
            'by_category': errors_by_category,
            'by_severity': errors_by_severity,
            'recent_errors': [
                {
                    'category': e.category.value,
                    'severity': e.severity.value,
                    'message': e.message
                }
                for e in self.error_history[-10:]
            ]
        }

