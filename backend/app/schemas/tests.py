"""
Pydantic schemas for test authoring and listing endpoints.
"""
from datetime import datetime
from typing import Any, List, Literal, Optional, Union

from pydantic import BaseModel, Field

from app.schemas.common import EnvelopeResponse

RoleName = Literal["admin", "employer", "candidate"]


class QuestionCreate(BaseModel):
    """One question in a create/update request."""

    question_text: str = Field(..., min_length=1, description="Question prompt")
    question_type: str = Field(
        "multiple_choice",
        min_length=1,
        max_length=50,
        description="multiple_choice, true_false, free_text, ...",
    )
    options: Optional[Union[List[Any], str]] = Field(
        None, description="Answer options as a list, JSON text or comma-delimited text"
    )
    correct_answer: Optional[str] = Field(
        None, description="Answer key; only used for auto-graded types"
    )
    explanation: Optional[str] = Field(None, description="Shown after grading")


class TestCreateRequest(BaseModel):
    """Schema for creating a test. Omitted settings fall back to defaults."""

    title: Optional[str] = Field(None, max_length=255, description="Test title")
    description: Optional[str] = None
    time_limit: Optional[int] = Field(None, gt=0, description="Time limit in minutes")
    target_role: Optional[RoleName] = Field(None, description="Role allowed to take it")
    department_id: Optional[int] = Field(
        None, description="Required when target_role is candidate"
    )
    test_type: Optional[Literal["standard", "pdf_based"]] = None
    pdf_url: Optional[str] = Field(None, max_length=1000)
    google_drive_id: Optional[str] = Field(None, max_length=255)
    thumbnail_url: Optional[str] = Field(None, max_length=1000)
    enable_proctoring: Optional[bool] = None
    max_tab_switches: Optional[int] = Field(None, ge=0)
    allow_copy_paste: Optional[bool] = None
    require_fullscreen: Optional[bool] = None
    questions: Optional[List[QuestionCreate]] = None


class TestUpdateRequest(TestCreateRequest):
    """Same shape as create. A non-empty question list replaces the whole set."""


class QuestionOut(BaseModel):
    id: int
    test_id: int
    question_text: str
    question_type: str
    options: List[Any] = Field(default_factory=list)
    correct_answer: Optional[str] = Field(
        None, description="Omitted (null) for candidates"
    )
    explanation: Optional[str] = Field(None, description="Omitted (null) for candidates")


class QuestionListItem(QuestionOut):
    test_title: Optional[str] = None


class TestSummary(BaseModel):
    """Test metadata without questions."""

    id: int
    title: str
    description: Optional[str] = None
    time_limit: int
    created_by: int
    target_role: str
    department_id: Optional[int] = None
    test_type: str
    pdf_url: Optional[str] = None
    google_drive_id: Optional[str] = None
    thumbnail_url: Optional[str] = None
    enable_proctoring: bool
    max_tab_switches: int
    allow_copy_paste: bool
    require_fullscreen: bool
    is_active: bool
    created_at: datetime

    class Config:
        """Pydantic configuration."""

        from_attributes = True


class TestListItem(TestSummary):
    question_count: int = 0
    department_name: Optional[str] = None
    created_by_name: Optional[str] = None
    is_completed: Optional[bool] = Field(
        None, description="Caller already submitted (available listing only)"
    )
    is_in_progress: Optional[bool] = Field(
        None, description="Caller has an unfinished attempt (available listing only)"
    )


class TestDetail(TestSummary):
    questions: List[QuestionOut] = Field(default_factory=list)


class TestCreatedResponse(EnvelopeResponse):
    test_id: int


class TestListResponse(EnvelopeResponse):
    tests: List[TestListItem]


class TestDetailResponse(EnvelopeResponse):
    test: TestDetail


class QuestionListResponse(EnvelopeResponse):
    questions: List[QuestionListItem]
