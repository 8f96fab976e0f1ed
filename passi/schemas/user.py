from pydantic import BaseModel, EmailStr, Field, field_validator


class UserCreate(BaseModel):
    username: str = Field(min_length=3, max_length=100)
    email: EmailStr
    password: str = Field(min_length=8, max_length=72)
    firstname: str | None = None
    lastname: str | None = None

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, value: str) -> str:
        # bcrypt only takes 72 bytes, not characters
        if len(value.encode("utf-8")) > 72:
            raise ValueError("password must be at most 72 bytes in UTF-8")
        return value


class InstructorRead(BaseModel):
    id: int
    firstname: str | None = None
    lastname: str | None = None
    email: str

    class Config:
        from_attributes = True


class GroupRead(BaseModel):
    id: int
    name: str
    instructors: list[InstructorRead] = []

    class Config:
        from_attributes = True


class UserProfile(BaseModel):
    id: int
    username: str
    firstname: str | None = None
    lastname: str | None = None
    email: str
    groups: list[GroupRead] = []

    class Config:
        from_attributes = True
