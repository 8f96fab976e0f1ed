from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class AnswerpointCreate(BaseModel):
    waypoint_id: int
    answer_text: Optional[str] = None
    image_url: Optional[str] = Field(default=None, max_length=1024)
    option_id: Optional[int] = None


class AnswersheetCreate(BaseModel):
    worksheet_id: int
    group_id: int
    user_id: int
    planning: Optional[str] = None
    answerpoints: list[AnswerpointCreate] = []


class AnswerpointRead(BaseModel):
    id: int
    waypoint_id: int
    answer_text: Optional[str] = None
    image_url: Optional[str] = None
    option_id: Optional[int] = None
    option_text: Optional[str] = None
    instructor_comment: Optional[str] = None
    instructor_rating: Optional[int] = None

    class Config:
        from_attributes = True


class AnswersheetRead(BaseModel):
    id: int
    worksheet_id: int
    group_id: int
    user_id: int
    planning: Optional[str] = None
    timestamp: datetime
    instructor_comment: Optional[str] = None
    feedback_complete: bool = False
    answerpoints: list[AnswerpointRead] = []

    class Config:
        from_attributes = True
