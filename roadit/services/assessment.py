# roadit/services/assessment.py
import base64
import binascii
import logging
import re
from typing import Callable, Optional

import google.generativeai as genai
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError

from roadit.core.config import AssessmentConfig
from roadit.schemas.issue import IssueType, Severity
from roadit.services.errors import MissingCredentials, UpstreamError

logger = logging.getLogger(__name__)

DATA_URI = re.compile(r"^data:(image/[\w.+-]+);base64,(.+)$", re.DOTALL)

PROMPT = """You are an expert AI assistant specializing in civil infrastructure assessment. Your task is to analyze an image of a road and identify any issues.

Based *only* on the visual information in the image provided, you must determine two things:
1.  **Issue Type**: Classify the problem into one of the following categories: 'Pothole', 'Waterlogging', 'Broken Road', or 'Other'.
2.  **Severity Level**: Assess the severity of the issue and classify it as 'Minor', 'Moderate', or 'Severe/Hazardous'. Consider factors like the size and depth of potholes, the extent of water coverage for waterlogging, or the degree of fragmentation for a broken road.

Respond with a single JSON object of the form {"issueType": "...", "severity": "..."}. Do not add any commentary or extra text."""


class InvalidPhoto(ValueError):
    pass


class AssessmentFailed(UpstreamError):
    pass


class Assessment(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    issue_type: IssueType = Field(validation_alias=AliasChoices("issueType", "issue_type"))
    severity: Severity = Field(validation_alias=AliasChoices("severity", "suggestedSeverity"))


def parse_photo_data_uri(photo_data_uri: str) -> tuple[str, bytes]:
    """Splits ``data:image/<type>;base64,<payload>`` into its media type and decoded bytes."""
    uri = (photo_data_uri or "").strip()
    if not uri:
        raise InvalidPhoto("Photo data URI cannot be empty.")
    m = DATA_URI.match(uri)
    if not m:
        raise InvalidPhoto("Photo must be a valid data URI for an image (e.g., data:image/jpeg;base64,...).")
    try:
        data = base64.b64decode(m.group(2), validate=True)
    except (binascii.Error, ValueError):
        raise InvalidPhoto("Photo data is not valid base64.")
    return m.group(1), data


def _gemini_model(config: AssessmentConfig):
    genai.configure(api_key=config.api_key)
    return genai.GenerativeModel(config.model)


def _strip_fences(text: str) -> str:
    text = text.strip()
    if text.startswith("```"):
        text = text.strip("`")
        if text.lower().startswith("json"):
            text = text[4:]
    return text.strip()


class AssessmentGateway:
    """Classifies a road photo into an issue type and a severity with a Gemini vision model."""

    def __init__(self, config: AssessmentConfig, model_factory: Optional[Callable] = None):
        self.config = config
        self.model_factory = model_factory or _gemini_model
        self._model = None

    def _get_model(self):
        if self._model is None:
            self._model = self.model_factory(self.config)
        return self._model

    def assess(self, photo_data_uri: str) -> Assessment:
        mime_type, data = parse_photo_data_uri(photo_data_uri)
        if not self.config.api_key:
            raise MissingCredentials("GEMINI_API_KEY")

        try:
            response = self._get_model().generate_content(
                [PROMPT, {"mime_type": mime_type, "data": data}],
                generation_config={"response_mime_type": "application/json"},
                request_options={"timeout": self.config.timeout},
            )
            text = response.text
        except Exception as e:
            logger.error(f"AI assessment call failed: {e}", exc_info=True)
            raise AssessmentFailed("The AI model could not assess this photo. Please try again.") from e

        if not text:
            raise AssessmentFailed("The AI model did not return a valid assessment. Please try again.")
        try:
            return Assessment.model_validate_json(_strip_fences(text))
        except ValidationError as e:
            logger.warning(f"Unexpected assessment output {text!r}: {e}")
            raise AssessmentFailed("The AI model did not return a valid assessment. Please try again.") from e
