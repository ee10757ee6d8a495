"""Result objects and diagnostic types for structural XML binding.

A bind call returns either the populated target object or, through the
detailed entry points, a ``BindResult`` carrying the value together with
traversal metrics and diagnostics.
"""

import time
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Dict, Generic, List, Optional, TypeVar

T = TypeVar("T")


class DiagnosticSeverity(Enum):
    """Severity levels for diagnostic entries."""

    DEBUG = auto()      # Traversal detail (skipped elements, hooks taken)
    INFO = auto()       # Informational messages
    WARNING = auto()    # Soft failures such as an unconstructible root type
    ERROR = auto()      # The failure that aborted the bind


@dataclass
class DiagnosticEntry:
    """Single diagnostic entry with element context."""

    severity: DiagnosticSeverity
    message: str
    component: str
    path: Optional[str] = None
    details: Optional[Dict[str, Any]] = None
    timestamp: float = field(default_factory=time.time)
    correlation_id: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate diagnostic entry."""
        if not self.message:
            raise ValueError("Diagnostic message cannot be empty")
        if not self.component:
            raise ValueError("Diagnostic component cannot be empty")


@dataclass
class BindingMetrics:
    """Counters collected during one traversal."""

    processing_time_ms: float = 0.0
    elements_visited: int = 0
    elements_skipped: int = 0
    values_assigned: int = 0
    values_appended: int = 0
    custom_saves: int = 0
    containers_created: int = 0
    objects_constructed: int = 0
    max_depth_reached: int = 0

    @property
    def elements_per_second(self) -> float:
        """Calculate elements visited per second."""
        if self.processing_time_ms <= 0:
            return 0.0
        return (self.elements_visited * 1000.0) / self.processing_time_ms

    @property
    def skip_rate(self) -> float:
        """Fraction of visited elements the policy skipped."""
        if self.elements_visited == 0:
            return 0.0
        return self.elements_skipped / self.elements_visited

    def observe_depth(self, depth: int) -> None:
        """Record the deepest level reached so far."""
        if depth > self.max_depth_reached:
            self.max_depth_reached = depth

    def to_dict(self) -> Dict[str, Any]:
        """Convert metrics to dictionary representation."""
        return {
            "processing_time_ms": self.processing_time_ms,
            "elements_visited": self.elements_visited,
            "elements_skipped": self.elements_skipped,
            "values_assigned": self.values_assigned,
            "values_appended": self.values_appended,
            "custom_saves": self.custom_saves,
            "containers_created": self.containers_created,
            "objects_constructed": self.objects_constructed,
            "max_depth_reached": self.max_depth_reached,
        }


@dataclass
class BindResult(Generic[T]):
    """Outcome of a detailed bind call.

    ``value`` is ``None`` and ``success`` is False when the root target type
    could not be constructed; every other failure is raised, not recorded.
    """

    value: Optional[T] = None
    success: bool = True
    metrics: BindingMetrics = field(default_factory=BindingMetrics)
    diagnostics: List[DiagnosticEntry] = field(default_factory=list)
    correlation_id: Optional[str] = None
    target_type: Optional[str] = None

    def add_diagnostic(
        self,
        severity: DiagnosticSeverity,
        message: str,
        component: str,
        path: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ) -> None:
        """Add diagnostic entry to result."""
        self.diagnostics.append(
            DiagnosticEntry(
                severity=severity,
                message=message,
                component=component,
                path=path,
                details=details,
                correlation_id=self.correlation_id,
            )
        )

    def get_diagnostics_by_severity(
        self,
        severity: DiagnosticSeverity
    ) -> List[DiagnosticEntry]:
        """Get diagnostics of specific severity level."""
        return [diag for diag in self.diagnostics if diag.severity == severity]

    @property
    def skipped_paths(self) -> List[str]:
        """Paths of every element the policy skipped."""
        return [
            diag.path for diag in self.diagnostics
            if diag.component == "skip" and diag.path
        ]

    def summary(self) -> Dict[str, Any]:
        """Get summary statistics for the bind result."""
        by_severity: Dict[str, int] = {}
        for diag in self.diagnostics:
            by_severity[diag.severity.name] = by_severity.get(diag.severity.name, 0) + 1

        return {
            "success": self.success,
            "target_type": self.target_type,
            "correlation_id": self.correlation_id,
            "metrics": self.metrics.to_dict(),
            "diagnostics_by_severity": by_severity,
        }
