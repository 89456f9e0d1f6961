# roadit/routers/issues_stats.py
from fastapi import APIRouter, Depends
from roadit.services import stats
from roadit.services.store import IssueStore, get_issue_store

router = APIRouter(prefix="/issues/stats", tags=["issues:stats"])

@router.get("/summary")
def summary(store: IssueStore = Depends(get_issue_store)):
    return stats.summary(store.get_all())

@router.get("/by-type")
def by_type(store: IssueStore = Depends(get_issue_store)):
    return stats.by_type(store.get_all())

@router.get("/resolution-time")
def resolution_time(store: IssueStore = Depends(get_issue_store)):
    return stats.resolution_time(store.get_all())
