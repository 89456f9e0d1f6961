# roadit/routers/actions.py
"""Action-style endpoints used by the report form and the dashboard.

Each returns a ``{"success": ...}`` envelope with status 200 so the client can
show a notification without inspecting HTTP errors.
"""
import logging
from functools import lru_cache

from fastapi import APIRouter, Depends, Request

from roadit.core.config import assessment_config, geocoding_config
from roadit.core.ratelimit import limiter
from roadit.core.security import require_municipal
from roadit.schemas.issue import (
    AssessIn,
    AssessOut,
    MunicipalityIn,
    MunicipalityOut,
    StatusUpdateIn,
    StatusUpdateResult,
)
from roadit.routers.issues import get_workflow
from roadit.services.assessment import AssessmentGateway, InvalidPhoto
from roadit.services.errors import MissingCredentials, UpstreamError
from roadit.services.geocoding import InvalidLocation, MunicipalityResolver, match_municipality
from roadit.services.workflow import StatusWorkflow

logger = logging.getLogger(__name__)

router = APIRouter(tags=["actions"])


@lru_cache
def get_assessment_gateway() -> AssessmentGateway:
    return AssessmentGateway(assessment_config())


@lru_cache
def get_municipality_resolver() -> MunicipalityResolver:
    return MunicipalityResolver(geocoding_config())


@router.post("/actions/update-status", response_model=StatusUpdateResult, response_model_exclude_none=True)
def update_issue_status_action(
    body: StatusUpdateIn,
    workflow: StatusWorkflow = Depends(get_workflow),
    _=Depends(require_municipal),
):
    return workflow.set_status(body.issue_id, body.status)


@router.post("/assess", response_model=AssessOut, response_model_exclude_none=True)
@limiter.limit("10/minute")
def assess_issue(
    request: Request,
    body: AssessIn,
    gateway: AssessmentGateway = Depends(get_assessment_gateway),
):
    try:
        result = gateway.assess(body.photo_data_uri)
    except InvalidPhoto as e:
        return AssessOut(success=False, error=str(e))
    except MissingCredentials as e:
        logger.error(f"AI assessment unavailable: {e}")
        return AssessOut(success=False, error="Photo assessment is not available. Please set the type and severity manually.")
    except UpstreamError as e:
        return AssessOut(success=False, error=f"Failed to assess issue: {e}")
    return AssessOut(success=True, issue_type=result.issue_type, severity=result.severity)


@router.post("/municipality", response_model=MunicipalityOut, response_model_exclude_none=True)
@limiter.limit("20/minute")
def find_municipality(
    request: Request,
    body: MunicipalityIn,
    resolver: MunicipalityResolver = Depends(get_municipality_resolver),
):
    try:
        name = resolver.resolve(body.lat, body.lng)
    except InvalidLocation as e:
        return MunicipalityOut(success=False, error=str(e))
    except MissingCredentials as e:
        logger.error(f"Municipality lookup unavailable: {e}")
        return MunicipalityOut(success=False, error="Municipality lookup is not available. Please enter the municipality manually.")
    except UpstreamError as e:
        return MunicipalityOut(success=False, error=f"Failed to find municipality: {e}")
    return MunicipalityOut(success=True, municipality=name, code=match_municipality(name))
