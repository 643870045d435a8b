import threading
import time
import uuid
from dataclasses import dataclass, field
from typing import Optional

from fastapi import FastAPI, HTTPException, status
from pydantic import BaseModel, ConfigDict, Field

from arrangements.model import Row
from arrangements.parsing import parse_rows
from arrangements.rules import DEFAULT_UNFOLD_FACTOR
from arrangements.solver import count_rows
from arrangements.types import CountResult
from arrangements.unfold import unfold
from arrangements.validation import validate_count_method


class CountJobRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    records: list[str] = Field(..., description="Records such as '???.### 1,1,3', one per entry")
    unfold_factor: int = Field(default=1, ge=1, description="Copies each record is unfolded into before counting")
    method: str = Field(default="recursive", description="Counting method: recursive, iterative, or enumerate")


class CountRequest(CountJobRequest):
    use_multiprocessing: bool = Field(
        default=False,
        description="Count row chunks in worker processes, each with its own cache.",
    )
    workers: Optional[int] = Field(
        default=None,
        ge=1,
        description="Number of worker processes to use when multiprocessing is enabled.",
    )
    trace: bool = Field(default=False, description="Include counting trace output in the response")


class CountResponse(BaseModel):
    method: str
    unfold_factor: int
    complete: bool
    total: int
    row_counts: list[int]
    rows_counted: int
    cache_entries: int
    message: str
    trace: Optional[list[str]] = None


class UnfoldRequest(BaseModel):
    records: list[str] = Field(..., description="Records such as '???.### 1,1,3', one per entry")
    unfold_factor: int = Field(default=DEFAULT_UNFOLD_FACTOR, ge=1, description="Copies each record is unfolded into")


class UnfoldResponse(BaseModel):
    records: list[str]


class CountJobStartResponse(BaseModel):
    job_id: str
    status: str


class CountJobStatusResponse(BaseModel):
    job_id: str
    status: str
    elapsed_seconds: float
    rows_total: int
    rows_counted: int
    running_total: int
    total: Optional[int] = None
    error: Optional[str] = None


@dataclass
class CountJob:
    """A batch counted on a background thread; fields are guarded by ``_COUNT_JOBS_LOCK``."""

    job_id: str
    rows: list[Row]
    unfold_factor: int
    method: str
    status: str = "queued"
    started_at: Optional[float] = None
    finished_at: Optional[float] = None
    rows_counted: int = 0
    running_total: int = 0
    result: Optional[CountResult] = None
    error: Optional[str] = None
    cancel_event: threading.Event = field(default_factory=threading.Event)

    @property
    def finished(self) -> bool:
        return self.status in {"completed", "canceled", "failed"}

    def status_response(self) -> CountJobStatusResponse:
        if self.started_at is None:
            elapsed_seconds = 0.0
        else:
            elapsed_seconds = (self.finished_at or time.monotonic()) - self.started_at
        return CountJobStatusResponse(
            job_id=self.job_id,
            status=self.status,
            elapsed_seconds=elapsed_seconds,
            rows_total=len(self.rows),
            rows_counted=self.rows_counted,
            running_total=self.running_total,
            total=None if self.result is None or not self.result["complete"] else self.result["total"],
            error=self.error,
        )


app = FastAPI(
    title="Spring Arrangement Counter API",
    description="Count how many ways the unknown cells of each record resolve to match its run lengths.",
    version="0.1.0",
)

_COUNT_JOBS: dict[str, CountJob] = {}
_COUNT_JOBS_LOCK = threading.Lock()


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.post("/count", response_model=CountResponse)
def count(request: CountRequest) -> CountResponse:
    try:
        trace_log: list[str] = []
        result = count_rows(
            _parse_records(request.records),
            unfold_factor=request.unfold_factor,
            method=request.method,
            use_multiprocessing=request.use_multiprocessing,
            workers=request.workers,
            trace=request.trace,
            trace_log=trace_log,
        )
        return CountResponse(**result, trace=trace_log if request.trace else None)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


@app.post("/unfold", response_model=UnfoldResponse)
def unfold_records(request: UnfoldRequest) -> UnfoldResponse:
    try:
        rows = unfold(_parse_records(request.records), request.unfold_factor)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return UnfoldResponse(records=[str(row) for row in rows])


@app.post("/count/jobs/start", response_model=CountJobStartResponse, status_code=status.HTTP_202_ACCEPTED)
def count_start(request: CountJobRequest) -> CountJobStartResponse:
    try:
        validate_count_method(request.method)
        rows = _parse_records(request.records)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    job = CountJob(job_id=str(uuid.uuid4()), rows=rows, unfold_factor=request.unfold_factor, method=request.method)
    with _COUNT_JOBS_LOCK:
        _COUNT_JOBS[job.job_id] = job

    threading.Thread(target=_run_count_job, args=(job,), daemon=True).start()
    return CountJobStartResponse(job_id=job.job_id, status="queued")


@app.get("/count/jobs/{job_id}", response_model=CountJobStatusResponse)
def count_status(job_id: str) -> CountJobStatusResponse:
    with _COUNT_JOBS_LOCK:
        return _get_job(job_id).status_response()


@app.post("/count/jobs/{job_id}/cancel", response_model=CountJobStatusResponse)
def count_cancel(job_id: str) -> CountJobStatusResponse:
    with _COUNT_JOBS_LOCK:
        job = _get_job(job_id)
        if not job.finished:
            # the counting thread checks the event between rows
            job.cancel_event.set()
            job.status = "canceled" if job.status == "queued" else "canceling"
        return job.status_response()


def _parse_records(records: list[str]) -> list[Row]:
    return parse_rows("\n".join(records))


def _get_job(job_id: str) -> CountJob:
    job = _COUNT_JOBS.get(job_id)
    if job is None:
        raise HTTPException(status_code=404, detail="count job not found")
    return job


def _run_count_job(job: CountJob) -> None:
    with _COUNT_JOBS_LOCK:
        if job.status == "canceled":
            return
        job.status = "running"
        job.started_at = time.monotonic()

    def on_progress(progress: dict[str, int]) -> None:
        with _COUNT_JOBS_LOCK:
            job.rows_counted = progress["rows_counted"]
            job.running_total = progress["running_total"]

    result: Optional[CountResult] = None
    error: Optional[str] = None
    try:
        result = count_rows(
            job.rows,
            unfold_factor=job.unfold_factor,
            method=job.method,
            stop_requested=job.cancel_event.is_set,
            progress_callback=on_progress,
        )
    except Exception as exc:
        error = str(exc)

    with _COUNT_JOBS_LOCK:
        job.finished_at = time.monotonic()
        if result is None:
            job.status = "failed"
            job.error = error
            return
        job.result = result
        job.rows_counted = result["rows_counted"]
        job.running_total = result["total"]
        job.status = "completed" if result["complete"] else "canceled"
