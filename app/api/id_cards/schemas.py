from typing import Optional

from pydantic import BaseModel


class StudentIdData(BaseModel):
    id: str
    name: str
    username: str
    department: Optional[str] = None
    photo: Optional[str] = None
    academic_year: str
    barcode_value: str
