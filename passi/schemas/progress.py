from pydantic import BaseModel


class ProgressRead(BaseModel):
    completed: int
    total: int
