# CleanCity Issue Desk
# FastAPI + pluggable store (memory / JSON file / MongoDB)

import uuid
import asyncio
import logging
from typing import List, Optional
from contextlib import asynccontextmanager
from concurrent.futures import ThreadPoolExecutor

import uvicorn
from fastapi import FastAPI, HTTPException, Depends, Query, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response
from starlette.requests import Request
from starlette.middleware.base import BaseHTTPMiddleware
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded

from . import config
from .assignment import AssignmentOutcome, AssignmentResult, assign_issue_to_nearest
from .config import now_ms
from .export import to_delimited_text, to_json_text
from .issues import ProofRequiredError, create_issue, filter_issues, list_issues, update_issue
from .models import (
    AnalyticsResponse, AssignmentResponse, Issue, IssueCategory, IssueCreate, IssuePatch,
    IssueResponse, IssueStatus, StatusChange, SubmissionResponse, Worker, WorkerActivation,
    WorkerAssignment,
)
from .sla import is_overdue, overdue_issues, sla_status
from .store import StoreEvent, open_store
from .workers import DuplicateWorkerError, add_worker, list_workers, seed_default_workers, set_worker_active

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# App & Globals
# ---------------------------------------------------------------------------
app = FastAPI(title="CleanCity Issue Desk")
limiter = Limiter(key_func=get_remote_address)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# ---------------------------------------------------------------------------
# Security Headers Middleware
# ---------------------------------------------------------------------------
class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request, call_next):
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        response.headers["Permissions-Policy"] = "geolocation=(self), camera=(self), microphone=()"
        return response

app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)
store = None
executor = ThreadPoolExecutor(max_workers=4)

# ---------------------------------------------------------------------------
# Startup / Shutdown
# ---------------------------------------------------------------------------
def _log_store_event(event: StoreEvent):
    logger.debug("Store event %s %s", event.kind, event.entity_id)

@asynccontextmanager
async def lifespan(app: FastAPI):
    global store
    loop = asyncio.get_event_loop()
    store = await loop.run_in_executor(executor, lambda: open_store(
        config.STORE_BACKEND, data_file=config.DATA_FILE,
        mongodb_url=config.MONGODB_URL, mongodb_db=config.MONGODB_DB))
    store.events.subscribe(_log_store_event)
    if config.SEED_DEFAULT_WORKERS:
        await loop.run_in_executor(executor, seed_default_workers, store)
    yield
    store.close()
    store = None

app.router.lifespan_context = lifespan

# ---------------------------------------------------------------------------
# Dependencies & Helpers
# ---------------------------------------------------------------------------
async def get_store():
    if store is None:
        raise HTTPException(status_code=503, detail="Store not initialised")
    return store

def validate_uuid(value: str, param_name: str = "id") -> str:
    """Validate that a string is a valid UUID format."""
    try:
        uuid.UUID(value)
    except (ValueError, AttributeError):
        raise HTTPException(status_code=400, detail=f"Invalid {param_name} format")
    return value

def issue_to_response(issue: Issue, now: Optional[int] = None) -> IssueResponse:
    return IssueResponse(**issue.model_dump(), sla=sla_status(issue, now))

def assignment_to_response(result: AssignmentResult, now: Optional[int] = None) -> AssignmentResponse:
    return AssignmentResponse(
        outcome=result.outcome.value, worker=result.worker, distance_m=result.distance_m,
        issue=issue_to_response(result.issue, now) if result.issue else None)

async def _filtered_issues(db, status: Optional[IssueStatus], q: Optional[str],
                           created_by: Optional[str]) -> List[Issue]:
    loop = asyncio.get_event_loop()
    issues = await loop.run_in_executor(executor, list_issues, db)
    return filter_issues(issues, status=status, search=q, created_by=created_by)

async def _get_issue_or_404(db, issue_id: str) -> Issue:
    loop = asyncio.get_event_loop()
    issue = await loop.run_in_executor(executor, db.get_issue, issue_id)
    if issue is None:
        raise HTTPException(status_code=404, detail="Issue not found")
    return issue

async def _apply_patch(db, issue_id: str, patch: IssuePatch) -> IssueResponse:
    loop = asyncio.get_event_loop()
    try:
        updated = await loop.run_in_executor(executor, update_issue, db, issue_id, patch)
    except ProofRequiredError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if updated is None:
        raise HTTPException(status_code=404, detail="Issue not found")
    return issue_to_response(updated)

# ---------------------------------------------------------------------------
# ISSUE ENDPOINTS
# ---------------------------------------------------------------------------
@app.post("/issues", response_model=SubmissionResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(config.SUBMIT_RATE_LIMIT)
async def submit_issue(request: Request, data: IssueCreate, db=Depends(get_store)):
    def submit():
        issue = create_issue(db, data)
        return issue, assign_issue_to_nearest(db, issue.id)
    try:
        loop = asyncio.get_event_loop()
        issue, result = await loop.run_in_executor(executor, submit)
    except Exception as e:
        logger.error("Error creating issue: %s", e)
        raise HTTPException(status_code=500, detail="Internal server error")
    now = now_ms()
    final = result.issue if result.assigned else issue
    return SubmissionResponse(issue=issue_to_response(final, now),
                              assignment=assignment_to_response(result, now))

@app.get("/issues", response_model=List[IssueResponse])
async def get_issues(status: Optional[IssueStatus] = None,
                     q: Optional[str] = Query(None, max_length=200),
                     created_by: Optional[str] = Query(None, max_length=100),
                     db=Depends(get_store)):
    issues = await _filtered_issues(db, status, q, created_by)
    now = now_ms()
    return [issue_to_response(i, now) for i in issues]

@app.get("/issues/export.csv")
async def export_csv(status: Optional[IssueStatus] = None,
                     q: Optional[str] = Query(None, max_length=200),
                     db=Depends(get_store)):
    issues = await _filtered_issues(db, status, q, None)
    return Response(
        content=to_delimited_text(issues), media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="cleancity-issues-{now_ms()}.csv"'})

@app.get("/issues/export.json")
async def export_json(status: Optional[IssueStatus] = None,
                      q: Optional[str] = Query(None, max_length=200),
                      db=Depends(get_store)):
    issues = await _filtered_issues(db, status, q, None)
    return Response(
        content=to_json_text(issues), media_type="application/json",
        headers={"Content-Disposition": f'attachment; filename="cleancity-issues-{now_ms()}.json"'})

@app.get("/issues/{issue_id}", response_model=IssueResponse)
async def get_issue(issue_id: str, db=Depends(get_store)):
    issue_id = validate_uuid(issue_id, "issue_id")
    return issue_to_response(await _get_issue_or_404(db, issue_id))

@app.patch("/issues/{issue_id}", response_model=IssueResponse)
async def patch_issue(issue_id: str, patch: IssuePatch, db=Depends(get_store)):
    issue_id = validate_uuid(issue_id, "issue_id")
    if patch.assigned_to_worker_id is not None:
        loop = asyncio.get_event_loop()
        worker = await loop.run_in_executor(executor, db.get_worker, patch.assigned_to_worker_id)
        if worker is None:
            raise HTTPException(status_code=404, detail="Worker not found")
    updated = await _apply_patch(db, issue_id, patch)
    logger.info("Issue %s patched: %s", issue_id, ", ".join(sorted(patch.model_fields_set)))
    return updated

@app.put("/issues/{issue_id}/status", response_model=IssueResponse)
async def update_status(issue_id: str, change: StatusChange, db=Depends(get_store)):
    issue_id = validate_uuid(issue_id, "issue_id")
    patch = IssuePatch(status=change.status)
    if change.proof_image_url:
        patch = IssuePatch(status=change.status, proof_image_url=change.proof_image_url)
    updated = await _apply_patch(db, issue_id, patch)
    logger.info("Issue %s status -> %s", issue_id, change.status.value)
    return updated

@app.post("/issues/{issue_id}/assign-nearest", response_model=AssignmentResponse)
async def assign_nearest(issue_id: str, db=Depends(get_store)):
    issue_id = validate_uuid(issue_id, "issue_id")
    loop = asyncio.get_event_loop()
    result = await loop.run_in_executor(executor, assign_issue_to_nearest, db, issue_id)
    if result.outcome == AssignmentOutcome.NOT_FOUND:
        raise HTTPException(status_code=404, detail="Issue not found")
    return assignment_to_response(result)

@app.put("/issues/{issue_id}/assign", response_model=IssueResponse)
async def assign_issue(issue_id: str, assignment: WorkerAssignment, db=Depends(get_store)):
    issue_id = validate_uuid(issue_id, "issue_id")
    await _get_issue_or_404(db, issue_id)
    loop = asyncio.get_event_loop()
    worker = await loop.run_in_executor(executor, db.get_worker, assignment.worker_id)
    if worker is None:
        raise HTTPException(status_code=404, detail="Worker not found")
    updated = await _apply_patch(db, issue_id, IssuePatch(assigned_to_worker_id=worker.id))
    logger.info("Issue %s manually assigned to %s", issue_id, worker.id)
    return updated

# ---------------------------------------------------------------------------
# SLA & ANALYTICS
# ---------------------------------------------------------------------------
@app.get("/sla/breaches", response_model=List[IssueResponse])
async def sla_breaches(db=Depends(get_store)):
    loop = asyncio.get_event_loop()
    issues = await loop.run_in_executor(executor, list_issues, db)
    now = now_ms()
    return [issue_to_response(i, now) for i in overdue_issues(issues, now)]

@app.get("/analytics", response_model=AnalyticsResponse)
async def get_analytics(db=Depends(get_store)):
    loop = asyncio.get_event_loop()
    issues = await loop.run_in_executor(executor, db.list_issues)
    now = now_ms()
    status_dist = {s.value: 0 for s in IssueStatus}
    category_dist = {c.value: 0 for c in IssueCategory}
    for i in issues:
        status_dist[i.status.value] += 1
        category_dist[i.category.value] += 1
    return AnalyticsResponse(
        total_issues=len(issues),
        pending_count=status_dist[IssueStatus.PENDING.value],
        sla_breached_count=sum(1 for i in issues if is_overdue(i, now)),
        unassigned_count=sum(1 for i in issues if not i.assigned_to_worker_id),
        status_distribution=status_dist,
        category_distribution=category_dist)

# ---------------------------------------------------------------------------
# WORKER ENDPOINTS
# ---------------------------------------------------------------------------
@app.get("/workers", response_model=List[Worker])
async def get_workers(active_only: bool = False, db=Depends(get_store)):
    loop = asyncio.get_event_loop()
    return await loop.run_in_executor(executor, list_workers, db, active_only)

@app.post("/workers", response_model=Worker, status_code=status.HTTP_201_CREATED)
async def create_worker(worker: Worker, db=Depends(get_store)):
    loop = asyncio.get_event_loop()
    try:
        created = await loop.run_in_executor(executor, add_worker, db, worker)
    except DuplicateWorkerError as e:
        raise HTTPException(status_code=400, detail=str(e))
    logger.info("Worker %s added (%s)", created.id, created.role.value)
    return created

@app.put("/workers/{worker_id}/active", response_model=Worker)
async def update_worker_active(worker_id: str, body: WorkerActivation, db=Depends(get_store)):
    loop = asyncio.get_event_loop()
    worker = await loop.run_in_executor(executor, set_worker_active, db, worker_id, body.active)
    if worker is None:
        raise HTTPException(status_code=404, detail="Worker not found")
    return worker

# ---------------------------------------------------------------------------
# HEALTH
# ---------------------------------------------------------------------------
@app.get("/health")
async def health():
    return {"status": "healthy", "system": "CleanCity Issue Desk",
            "store": store.name if store else None, "timestamp": now_ms()}

if __name__ == "__main__":
    uvicorn.run(app, host=config.HOST, port=config.PORT)
