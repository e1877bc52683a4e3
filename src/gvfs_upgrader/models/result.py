"""Result and outcome models for upgrade stages."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Generic, List, Optional, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class Result(Generic[T]):
    """Success payload or error message returned by a collaborator call."""

    value: Optional[T] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: Optional[T] = None) -> "Result[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: str) -> "Result[T]":
        # An empty message would read as success
        return cls(error=error or "Unknown error")


@dataclass(frozen=True)
class StageError:
    """Failure of one upgrade stage.

    ``message`` is shown to the operator, ``metadata`` only goes to the log.
    """

    stage: str
    message: str
    metadata: Dict[str, Any] = field(default_factory=dict)

    def log_fields(self) -> Dict[str, Any]:
        """Structured fields attached to the log record for this failure."""
        fields = {"upgrade_step": self.stage, "error": self.message}
        fields.update(self.metadata)
        return fields


class OutcomeKind(str, Enum):
    """Terminal result of one orchestrator run."""

    SUCCESS = "success"
    NO_RING_CONFIGURED = "noRingConfigured"
    INVALID_RING_CONFIGURED = "invalidRingConfigured"
    FAILED = "failed"


@dataclass
class UpgradeOutcome:
    """Outcome of ``UpgradeOrchestrator.execute``.

    Remount problems are recorded in ``warnings`` and never change ``kind``.
    """

    kind: OutcomeKind = OutcomeKind.SUCCESS
    error: Optional[StageError] = None
    warnings: List[str] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return self.kind == OutcomeKind.SUCCESS

    @property
    def exit_code(self) -> int:
        return 1 if self.kind == OutcomeKind.FAILED else 0
