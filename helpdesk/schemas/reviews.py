from datetime import date, datetime
from typing import Optional

from pydantic import Field

from .common import CamelModel, Entity


class ReviewCriteria(CamelModel):
    technical_quality: int = Field(ge=1, le=5)
    professional_attitude: int = Field(ge=1, le=5)
    communication: int = Field(ge=1, le=5)
    rule_compliance: int = Field(ge=1, le=5)
    initiative: int = Field(ge=1, le=5)


class OutsourceReview(Entity):
    id: str
    reviewee_id: str
    reviewee_name: str
    reviewer_id: str
    reviewer_name: str
    project_id: Optional[str] = None
    project_name: Optional[str] = None
    review_date: date
    criteria: ReviewCriteria
    strengths: Optional[str] = None
    areas_to_improve: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    @property
    def average_score(self) -> float:
        scores = list(self.criteria.model_dump().values())
        return round(sum(scores) / len(scores), 2)


class ReviewCreate(CamelModel):
    reviewee_id: str
    reviewee_name: str
    project_id: Optional[str] = None
    project_name: Optional[str] = None
    review_date: Optional[date] = None
    criteria: ReviewCriteria
    strengths: Optional[str] = None
    areas_to_improve: Optional[str] = None
