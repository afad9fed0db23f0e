"""
Pydantic schemas for result listings and answer review.
"""
from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, Field

from app.schemas.common import EnvelopeResponse


class ResultItem(BaseModel):
    """A graded result with the candidate's contact details."""

    id: int
    candidate_id: int
    candidate_name: Optional[str] = None
    candidate_email: Optional[str] = None
    test_id: int
    total_questions: int
    correct_answers: int
    score: int
    remarks: str
    taken_at: datetime
    finished_at: datetime


class TestResultsResponse(EnvelopeResponse):
    results: List[ResultItem]


class ReviewQuestion(BaseModel):
    id: int
    question_text: str
    question_type: str
    options: List[Any] = Field(default_factory=list)
    correct_answer: Optional[str] = None
    explanation: Optional[str] = None
    user_answer: Optional[str] = Field(None, description="Recorded answer, null if skipped")
    is_correct: bool = False


class ReviewedTest(BaseModel):
    id: int
    title: str
    description: Optional[str] = None


class AnswerReviewResponse(EnvelopeResponse):
    test: ReviewedTest
    result: ResultItem
    questions: List[ReviewQuestion]
