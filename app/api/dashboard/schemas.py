from pydantic import BaseModel


class LabelValue(BaseModel):
    label: str
    value: int


class Analytics(BaseModel):
    total_students: int
    total_departments: int
    average_year_level: str
    students_by_department: list[LabelValue]
    students_by_year: list[LabelValue]
    checked_in_count: int
