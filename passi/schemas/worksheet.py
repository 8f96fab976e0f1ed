from pydantic import BaseModel


class OptionRead(BaseModel):
    id: int
    text: str

    class Config:
        from_attributes = True


class WaypointRead(BaseModel):
    id: int
    task: str
    photo_enabled: bool = False
    options: list[OptionRead] = []

    class Config:
        from_attributes = True


class WorksheetRead(BaseModel):
    id: int
    header: str
    preface: str | None = None
    planning: str | None = None

    # computed per (worksheet, user), not stored
    completed: bool = False

    waypoints: list[WaypointRead] = []

    class Config:
        from_attributes = True


class CategoryRead(BaseModel):
    id: int
    name: str
    worksheets: list[WorksheetRead] = []

    class Config:
        from_attributes = True
