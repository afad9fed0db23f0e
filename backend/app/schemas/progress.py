"""
Pydantic schemas for taking, saving and submitting tests.
"""
from datetime import datetime
from typing import Any, Literal, Optional

from pydantic import BaseModel, Field

from app.schemas.common import EnvelopeResponse
from app.schemas.tests import TestDetail


class SaveProgressRequest(BaseModel):
    """Partial answers snapshot. Values are validated by the progress tracker."""

    answers: Any = Field(None, description="Opaque snapshot of in-progress answers")
    time_remaining: Any = Field(None, description="Seconds left on the clock")


class SubmitTestRequest(BaseModel):
    answers: Any = Field(None, description="Mapping of question id to answer value")


class AttemptState(BaseModel):
    start_time: datetime
    time_remaining: Optional[int] = None
    saved_answers: Optional[Any] = None
    status: str

    class Config:
        """Pydantic configuration."""

        from_attributes = True


class TakeTestResponse(EnvelopeResponse):
    test: TestDetail
    attempt: AttemptState


class ActiveTest(BaseModel):
    test_id: int
    title: str
    time_limit: int
    start_time: datetime
    time_remaining: Optional[int] = None
    saved_answers: Optional[Any] = None
    test_type: str


class ActiveTestResponse(EnvelopeResponse):
    active_test: Optional[ActiveTest] = None


class ResultSummary(BaseModel):
    id: int
    score: int
    taken_at: datetime

    class Config:
        """Pydantic configuration."""

        from_attributes = True


class TestStatusResponse(EnvelopeResponse):
    status: Literal["not_started", "in_progress", "completed"]
    result: Optional[ResultSummary] = None
    start_time: Optional[datetime] = None
    time_remaining: Optional[int] = None
    saved_answers: Optional[Any] = None


class Submission(BaseModel):
    score: int
    total_questions: int
    correct_answers: int
    remarks: str


class SubmitTestResponse(EnvelopeResponse):
    submission: Submission
