from __future__ import annotations

import json
import time
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import Protocol

import requests

from ..models.import_result import BatchStatsAccumulator
from ..models.projected_row import ProjectedRow

"""HTTP submission of projected rows.

Rows are POSTed as a JSON array of field-name keyed records (``__rowIndex``
stripped). By default the whole array goes in one request; ``batch_size``
splits it into several requests, each timed and reported through
``metrics_callback``.

A failed request raises SubmissionError. There is no automatic retry: rows
of batches that already succeeded stay submitted, and the error carries how
many that were.
"""

__all__ = [
    "SubmissionError",
    "BatchMetrics",
    "SubmissionResult",
    "submit_rows",
]

DEFAULT_TIMEOUT = 30.0


class SubmissionError(Exception):
    """Network / HTTP failure while posting rows (recoverable by the caller)."""

    def __init__(self, message: str, submitted_rows: int = 0, status_code: int | None = None) -> None:
        super().__init__(message)
        self.submitted_rows = submitted_rows
        self.status_code = status_code


class _Progress(Protocol):
    def update(self, n: int) -> None: ...


@dataclass(frozen=True)
class BatchMetrics:
    """Timing of a single POST request."""
    batch_size: int  # rows in this request
    elapsed_seconds: float
    start_time: float  # time.time()
    end_time: float  # time.time()
    status_code: int | None = None


@dataclass(frozen=True)
class SubmissionResult:
    submitted_rows: int
    total_batches: int = 0
    avg_batch_seconds: float = 0.0
    p95_batch_seconds: float = 0.0


def _batches(rows: Sequence[ProjectedRow], batch_size: int | None) -> list[Sequence[ProjectedRow]]:
    if not batch_size or batch_size >= len(rows):
        return [rows]
    return [rows[i:i + batch_size] for i in range(0, len(rows), batch_size)]


def _post_batch(
    session: requests.Session,
    url: str,
    batch: Sequence[ProjectedRow],
    timeout: float,
    headers: Mapping[str, str],
) -> requests.Response:
    # default=str: spreadsheet cells may hold datetimes
    body = json.dumps([r.as_payload() for r in batch], ensure_ascii=False, default=str)
    response = session.post(url, data=body.encode("utf-8"), headers=dict(headers), timeout=timeout)
    response.raise_for_status()
    return response


def submit_rows(
    rows: Sequence[ProjectedRow],
    url: str,
    *,
    session: requests.Session | None = None,
    timeout: float = DEFAULT_TIMEOUT,
    batch_size: int | None = None,
    headers: Mapping[str, str] | None = None,
    progress: _Progress | None = None,
    metrics_callback: Callable[[BatchMetrics], None] | None = None,
) -> SubmissionResult:
    """POST ``rows`` to ``url`` as JSON.

    Parameters
    ----------
    rows: projected rows (already gated by the ready predicate)
    url: import endpoint, e.g. http://host/api/hs-code/import
    session: requests session to reuse; a private one is created (and closed) otherwise
    timeout: per-request timeout in seconds
    batch_size: rows per request; None/0 sends everything at once
    headers: extra request headers (e.g. Authorization)
    progress: object with ``update(n)`` advanced by the rows of each sent batch
    metrics_callback: receives BatchMetrics after every request, failed ones included.
        Not invoked when ``rows`` is empty (nothing is sent).

    Raises
    ------
    SubmissionError: on connection errors, timeouts and non-2xx responses
    """
    rows = list(rows)
    if not rows:
        return SubmissionResult(submitted_rows=0)

    req_headers: dict[str, str] = {"Content-Type": "application/json; charset=utf-8"}
    if headers:
        req_headers.update(headers)

    own_session = session is None
    sess = session if session is not None else requests.Session()
    stats = BatchStatsAccumulator()
    submitted = 0
    try:
        for batch in _batches(rows, batch_size):
            start_time = time.time()
            status_code: int | None = None
            try:
                response = _post_batch(sess, url, batch, timeout, req_headers)
                status_code = response.status_code
            except requests.HTTPError as e:
                status_code = e.response.status_code if e.response is not None else None
                raise SubmissionError(
                    f"POST {url} failed with HTTP {status_code}: {e}",
                    submitted_rows=submitted,
                    status_code=status_code,
                ) from e
            except requests.RequestException as e:
                raise SubmissionError(f"POST {url} failed: {e}", submitted_rows=submitted) from e
            finally:
                end_time = time.time()
                stats.add_batch_time(end_time - start_time)
                if metrics_callback is not None:
                    metrics_callback(BatchMetrics(
                        batch_size=len(batch),
                        elapsed_seconds=end_time - start_time,
                        start_time=start_time,
                        end_time=end_time,
                        status_code=status_code,
                    ))
            submitted += len(batch)
            if progress is not None:
                progress.update(len(batch))
    finally:
        if own_session:
            sess.close()

    total, avg, p95 = stats.get_stats()
    return SubmissionResult(
        submitted_rows=submitted,
        total_batches=total,
        avg_batch_seconds=avg,
        p95_batch_seconds=p95,
    )
