from pydantic import BaseModel, Field


class GroupJoin(BaseModel):
    join_key: str = Field(min_length=1, max_length=64)
