"""Publisher data types for static asset publishing.

Dataclasses representing staged file records, per-object publish outcomes,
the run summary, and the sequencer's job state.
"""

import enum
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path


class OutcomeStatus(enum.StrEnum):
    """Result of publishing a single object."""

    UPLOADED = "uploaded"
    SKIPPED = "skipped"
    FAILED = "failed"


class JobState(enum.StrEnum):
    """Lifecycle of a sequenced publish job."""

    IDLE = "idle"
    RUNNING = "running"
    DONE = "done"
    ERROR = "error"


@dataclass(frozen=True)
class FileRecord:
    """One local file staged for publication.

    Built through ``tagger.build_record``; ``remote_key`` is derived there
    and never recomputed.
    """

    source_path: Path
    base_dir: Path
    destination_folder: str
    remote_key: str
    headers: Mapping[str, str] = field(default_factory=dict)
    cacheable: bool = False


@dataclass(frozen=True)
class PublishOutcome:
    """Per-record result emitted by the Publisher."""

    remote_key: str
    status: OutcomeStatus
    headers: Mapping[str, str] = field(default_factory=dict)
    phase: int = 0
    fingerprint: str | None = None
    size_bytes: int = 0
    simulated: bool = False
    error: str | None = None


@dataclass
class PublishSummary:
    """Aggregated result of a publish job."""

    uploaded: int = 0
    skipped: int = 0
    failed: int = 0
    failed_keys: list[str] = field(default_factory=list)
    simulated: bool = False
    duration_seconds: float = 0.0

    @property
    def total(self) -> int:
        return self.uploaded + self.skipped + self.failed

    @property
    def ok(self) -> bool:
        """True when no object failed."""
        return self.failed == 0
