from datetime import datetime
from typing import List, Optional

from pydantic import Field

from api.models.auth_schemas import UserResponse
from api.models.common import CamelModel
from models.interview import Difficulty, Interview


# ============ Shared ============

class QuestionSchema(CamelModel):
    question: str
    difficulty: Difficulty
    time_limit: int = Field(..., description="Seconds allotted to answer")
    answer: str = ""
    score: Optional[int] = Field(default=None, ge=0, le=100)


class InterviewSchema(CamelModel):
    """Interview as returned to clients; résumé text is only served by the résumé endpoint"""
    id: str
    candidate_id: str
    interviewer_id: Optional[str] = None
    candidate_phone: Optional[str] = None
    questions: List[QuestionSchema]
    total_score: int
    summary: Optional[str] = None
    status: str
    created_at: datetime
    updated_at: datetime
    completed_at: Optional[datetime] = None

    @classmethod
    def from_interview(cls, interview: Interview) -> "InterviewSchema":
        return cls(
            id=interview.id,
            candidate_id=interview.candidate_id,
            interviewer_id=interview.interviewer_id,
            candidate_phone=interview.candidate_phone,
            questions=[QuestionSchema.model_validate(q.model_dump()) for q in interview.get_questions()],
            total_score=interview.total_score,
            summary=interview.summary,
            status=interview.status,
            created_at=interview.created_at,
            updated_at=interview.updated_at,
            completed_at=interview.completed_at,
        )


class CandidateRef(CamelModel):
    id: str
    name: str
    email: str


# ============ Candidate Requests ============

class InterviewIdRequest(CamelModel):
    interview_id: Optional[str] = None


class SubmitAnswerRequest(CamelModel):
    interview_id: Optional[str] = None
    question_index: Optional[int] = None
    answer: Optional[str] = None

    model_config = CamelModel.model_config | {
        "json_schema_extra": {
            "example": {
                "interviewId": "3f6c1a2e-8f7b-4a53-9f0e-2b9d4c1e7a10",
                "questionIndex": 0,
                "answer": "I would start by profiling the slow endpoint..."
            }
        }
    }


# ============ Candidate Responses ============

class InterviewMessageResponse(CamelModel):
    message: str
    interview: InterviewSchema


class InterviewResponse(CamelModel):
    interview: InterviewSchema


class InterviewListResponse(CamelModel):
    interviews: List[InterviewSchema]


class SubmitAnswerResponse(CamelModel):
    message: str
    next_question_index: int
    is_finished: bool


class FinalizeResponse(CamelModel):
    message: str
    total_score: int
    summary: Optional[str] = None


# ============ Interviewer ============

class AssignedQuestion(CamelModel):
    question: str = Field(..., min_length=1)
    difficulty: Difficulty
    time_limit: int = Field(..., gt=0)


class AssignQuestionsRequest(CamelModel):
    questions: List[AssignedQuestion] = Field(..., min_length=1)

    model_config = CamelModel.model_config | {
        "json_schema_extra": {
            "example": {
                "questions": [
                    {"question": "What is a closure?", "difficulty": "easy", "timeLimit": 30},
                    {"question": "Design a rate limiter.", "difficulty": "hard", "timeLimit": 80}
                ]
            }
        }
    }


class ScoreboardEntry(CamelModel):
    id: str
    candidate: Optional[CandidateRef] = None
    total_score: int
    summary: Optional[str] = None
    created_at: datetime


class ScoreboardResponse(CamelModel):
    scoreboard: List[ScoreboardEntry]


class InterviewDetailSchema(InterviewSchema):
    candidate: Optional[CandidateRef] = None


class InterviewDetailResponse(CamelModel):
    interview: InterviewDetailSchema


class CandidateListResponse(CamelModel):
    candidates: List[UserResponse]
