# roadit/routers/issues.py
import logging
from typing import List, Optional

import requests
from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response

from roadit.core.ratelimit import limiter
from roadit.core.security import require_municipal
from roadit.schemas.issue import (
    Issue,
    IssueDraft,
    IssueReport,
    IssueStatus,
    IssueType,
    Municipality,
    StatusPatch,
    StatusUpdateResult,
)
from roadit.services.assessment import InvalidPhoto
from roadit.services.photos import upload_photo
from roadit.services.stats import is_overdue
from roadit.services.store import IssueStore, get_issue_store
from roadit.services.workflow import FAILED, NOT_FOUND, StatusWorkflow

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/issues", tags=["issues"])


def get_workflow(store: IssueStore = Depends(get_issue_store)) -> StatusWorkflow:
    return StatusWorkflow(store)


@router.get("", response_model=List[Issue], response_model_exclude_none=True)
def list_issues(
    status: Optional[IssueStatus] = Query(default=None),
    issue_type: Optional[IssueType] = Query(default=None, alias="type"),
    municipality: Optional[Municipality] = Query(default=None),
    overdue: int = Query(default=0, ge=0, le=1),
    store: IssueStore = Depends(get_issue_store),
):
    issues = store.get_all()
    if status:
        issues = [i for i in issues if i.status == status]
    if issue_type:
        issues = [i for i in issues if i.type == issue_type]
    if municipality:
        issues = [i for i in issues if i.municipality == municipality]
    if overdue:
        issues = [i for i in issues if is_overdue(i)]
    return issues


@router.get("/{issue_id}", response_model=Issue, response_model_exclude_none=True)
def get_issue(issue_id: str, store: IssueStore = Depends(get_issue_store)):
    issue = store.get(issue_id)
    if not issue:
        raise HTTPException(status_code=404, detail="Issue not found")
    return issue


@router.post("", response_model=Issue, response_model_exclude_none=True, status_code=201)
@limiter.limit("10/minute")
def report_issue(
    request: Request,
    body: IssueReport,
    store: IssueStore = Depends(get_issue_store),
):
    photo_url = body.photo_url or ""
    if body.photo_data_uri:
        try:
            photo_url = upload_photo(body.photo_data_uri, folder="reports")
        except InvalidPhoto as e:
            raise HTTPException(status_code=400, detail=str(e))
        except requests.RequestException as e:
            logger.error(f"Photo upload failed: {e}", exc_info=True)
            raise HTTPException(status_code=502, detail="Photo upload failed")

    draft = IssueDraft(
        type=body.type,
        severity=body.severity,
        status=IssueStatus.received,
        location=body.location,
        address=body.address.strip(),
        photo_url=photo_url,
        photo_hint=body.photo_hint or f"{body.type.value.lower()} road",
        description=body.description.strip(),
        municipality=body.municipality,
    )
    return store.add(draft)


@router.patch("/{issue_id}/status", response_model=StatusUpdateResult, response_model_exclude_none=True)
def update_status(
    issue_id: str,
    body: StatusPatch,
    response: Response,
    workflow: StatusWorkflow = Depends(get_workflow),
    _=Depends(require_municipal),
):
    result = workflow.set_status(issue_id, body.status)
    if not result.success:
        response.status_code = {NOT_FOUND: 404, FAILED: 500}.get(result.error, 400)
    return result
