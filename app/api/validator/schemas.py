from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator


class CheckStatus(str, Enum):
    ENTERED = 'Entered'


class Outcome(str, Enum):
    CHECKED_IN = 'CHECKED_IN'
    ALREADY_ENTERED = 'ALREADY_ENTERED'


class ValidatorRequest(BaseModel):
    barcode_id: str

    model_config = ConfigDict(str_strip_whitespace=True)

    @field_validator('barcode_id')
    @classmethod
    def validate_barcode_id(cls, value: str) -> str:
        if not value:
            raise ValueError('Barcode ID cannot be empty.')
        return value


class InternalCheckEventCreate(BaseModel):
    user_id: int
    status: CheckStatus = CheckStatus.ENTERED
    created_by: Optional[str] = None

    model_config = ConfigDict(use_enum_values=True, validate_default=True)


class StudentSummary(BaseModel):
    id: int
    name: Optional[str] = None
    username: str
    photo: Optional[str] = None
    department: Optional[str] = None
    batch: Optional[str] = None
    email: str
    year_label: str


class ValidatorResponse(BaseModel):
    outcome: Outcome
    message: str
    student: StudentSummary


class CheckEvent(BaseModel):
    id: int
    user_id: int
    status: CheckStatus
    created_at: datetime
    created_by: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)
