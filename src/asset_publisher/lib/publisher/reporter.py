"""Reporting of publish outcomes.

``SummaryReporter`` logs each outcome and aggregates counts for a real
publish.  ``SimulationReporter`` echoes the destination URL and headers of
every outcome for a dry run.  ``create_reporter`` picks one variant per job.
"""

import json
from collections.abc import Callable
from typing import Protocol

import typer
from loguru import logger

from asset_publisher.lib.publisher.types import OutcomeStatus, PublishOutcome, PublishSummary

_STATUS_TAGS = {
    OutcomeStatus.UPLOADED: "[upload]",
    OutcomeStatus.SKIPPED: "[skip]",
    OutcomeStatus.FAILED: "[fail]",
}


class Reporter(Protocol):
    """Consumes publish outcomes and produces a summary."""

    def report(self, outcome: PublishOutcome) -> None:
        """Record one outcome.

        Args:
            outcome: Outcome emitted by the sequencer.
        """
        ...

    def summary(self) -> PublishSummary:
        """Return the aggregate of every outcome reported so far."""
        ...


class SummaryReporter:
    """Counts outcomes and logs one line per object."""

    def __init__(self) -> None:
        self._summary = PublishSummary()

    def _count(self, outcome: PublishOutcome) -> None:
        if outcome.status is OutcomeStatus.UPLOADED:
            self._summary.uploaded += 1
        elif outcome.status is OutcomeStatus.SKIPPED:
            self._summary.skipped += 1
        else:
            self._summary.failed += 1
            self._summary.failed_keys.append(outcome.remote_key)

    def report(self, outcome: PublishOutcome) -> None:
        self._count(outcome)
        tag = _STATUS_TAGS[outcome.status]
        if outcome.status is OutcomeStatus.FAILED:
            logger.error("{} {} ({})", tag, outcome.remote_key, outcome.error)
        else:
            logger.info("{} {}", tag, outcome.remote_key)

    def summary(self) -> PublishSummary:
        return self._summary


class SimulationReporter(SummaryReporter):
    """Echoes what a real run would target, without any other side effect.

    Args:
        bucket: Target bucket name.
        scheme: URL scheme used in the echoed destination.
        echo: Output function, one call per line.
    """

    def __init__(self, bucket: str, scheme: str = "s3", echo: Callable[[str], None] = typer.echo) -> None:
        super().__init__()
        self._summary.simulated = True
        self._bucket = bucket
        self._scheme = scheme
        self._echo = echo

    def report(self, outcome: PublishOutcome) -> None:
        self._count(outcome)
        self._echo(f"{self._scheme}://{self._bucket}/{outcome.remote_key}")
        self._echo(json.dumps(dict(outcome.headers), sort_keys=True))


def create_reporter(
    simulate: bool,
    bucket: str,
    scheme: str = "s3",
    echo: Callable[[str], None] = typer.echo,
) -> Reporter:
    """Select the reporter variant for a job."""
    if simulate:
        return SimulationReporter(bucket, scheme=scheme, echo=echo)
    return SummaryReporter()
