"""Publisher library — public API for ordered static asset publishing.

Provides asset classification, metadata tagging, the content-hash cache,
S3 storage operations, the per-object Publisher, the phase sequencer, and
outcome reporters.
"""

from asset_publisher.lib.publisher.cache import PublishCache, cache_file_path, fingerprint, purge_cache_files
from asset_publisher.lib.publisher.classifier import ClassifiedAssets, classify, walk_files
from asset_publisher.lib.publisher.publisher import Publisher
from asset_publisher.lib.publisher.reporter import Reporter, SimulationReporter, SummaryReporter, create_reporter
from asset_publisher.lib.publisher.sequencer import PhaseSequencer
from asset_publisher.lib.publisher.storage import FatalTransportError, create_s3_client, validate_config
from asset_publisher.lib.publisher.tagger import build_record, tag_record
from asset_publisher.lib.publisher.types import FileRecord, JobState, OutcomeStatus, PublishOutcome, PublishSummary

__all__ = [
    "ClassifiedAssets",
    "FatalTransportError",
    "FileRecord",
    "JobState",
    "OutcomeStatus",
    "PhaseSequencer",
    "PublishCache",
    "PublishOutcome",
    "PublishSummary",
    "Publisher",
    "Reporter",
    "SimulationReporter",
    "SummaryReporter",
    "build_record",
    "cache_file_path",
    "classify",
    "create_reporter",
    "create_s3_client",
    "fingerprint",
    "purge_cache_files",
    "tag_record",
    "validate_config",
    "walk_files",
]
