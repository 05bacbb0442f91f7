"""
purger — Rate-limit-aware bulk collection and deletion of Discord messages.

Re-exports the public symbols so callers can write
``from purger import Collector, BulkMutator``.
"""

from purger.throttle import (
    BASE_URL,
    REQUEST_TIMEOUT,
    SEARCH_DELAY_MS,
    SEARCH_RATE_LIMIT_FLOOR_MS,
    SEARCH_DEFAULT_WAIT_MS,
    DELETE_DELAY_MS,
    DELETE_DEFAULT_WAIT_MS,
    RETRY_DELAY_BASE_MS,
    MAX_DELETE_ATTEMPTS,
    RECORDS_FILE,
)

from purger.requester import (
    OutcomeKind,
    Outcome,
    RequestSpec,
    RateLimitedRequester,
    compute_wait_ms,
)

from purger.errors import (
    PurgerError,
    ConfigError,
    MalformedInputError,
    UnauthorizedError,
    FailureKind,
    classify_outcome,
)

from purger.config import Settings, load_settings

from purger.headers import build_headers

from purger.collect import Collector, flatten_messages

from purger.delete import BulkMutator, DeletionRun, DeletionTally, record_key

from purger.storage import save_records, load_records

from purger.observability import (
    FAILURE_RATE_WARNING,
    FAILURE_RATE_CRITICAL,
    start_run,
    finish_run,
    record_collection,
    record_deletion,
    evaluate_alerts,
)

from purger.report import tally_frame, failures_frame, write_failure_report
