from datetime import date

from pydantic import BaseModel, EmailStr, Field, model_validator


class TermCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    start_date: date | None = None
    end_date: date | None = None

    @model_validator(mode="after")
    def validate_dates(self) -> "TermCreate":
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class TermOut(TermCreate):
    id: str

    model_config = {"from_attributes": True}


class ClassGroupCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)


class ClassGroupOut(ClassGroupCreate):
    id: str

    model_config = {"from_attributes": True}


class SchoolClassCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    class_group_id: str | None = Field(default=None, min_length=1, max_length=36)


class SchoolClassOut(SchoolClassCreate):
    id: str

    model_config = {"from_attributes": True}


class SubjectCreate(BaseModel):
    code: str = Field(min_length=1, max_length=50)
    name: str = Field(min_length=1, max_length=200)


class SubjectOut(SubjectCreate):
    id: str

    model_config = {"from_attributes": True}


class TeacherCreate(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    email: EmailStr
    department: str | None = Field(default=None, max_length=200)


class TeacherOut(TeacherCreate):
    id: str

    model_config = {"from_attributes": True}


class ClassroomCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    building: str | None = Field(default=None, max_length=200)
    capacity: int = Field(default=30, ge=1, le=1000)


class ClassroomOut(ClassroomCreate):
    id: str

    model_config = {"from_attributes": True}
