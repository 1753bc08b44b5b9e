import re
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

USERNAME_PATTERN = re.compile(r'^[a-zA-Z0-9_/]+$')
YEAR_LEVELS = ('1', '2', '3', '4', '5')


class Role(str, Enum):
    STUDENT = 'Student'
    REGISTRAR = 'Registrar'


class Department(str, Enum):
    SOFTWARE_ENGINEERING = 'Software Engineering'
    MECHANICAL_ENGINEERING = 'Mechanical Engineering'
    APPLIED_SCIENCE = 'Applied Science'
    LAW = 'Law'
    ACCOUNTING = 'Accounting'
    FINANCE = 'Finance'
    BUSINESS_ADMINISTRATION = 'Business Administration'


class Gender(str, Enum):
    MALE = 'Male'
    FEMALE = 'Female'
    OTHER = 'Other'
    PREFER_NOT_TO_SAY = 'Prefer not to say'


def _validate_year(value):
    if value is None:
        return None
    value = str(value).strip()
    if not value:
        return None
    if value not in YEAR_LEVELS:
        raise ValueError(f'Year must be one of {", ".join(YEAR_LEVELS)}')
    return value


def _reject_null(value):
    if value is None:
        raise ValueError('Field cannot be null')
    return value


def _empty_to_none(value):
    if isinstance(value, str) and not value.strip():
        return None
    return value


class Login(BaseModel):
    username: str
    password: str

    model_config = ConfigDict(str_strip_whitespace=True)


class ChangePassword(BaseModel):
    new_password: str = Field(min_length=8, max_length=72)


class StudentBase(BaseModel):
    name: str = Field(min_length=2)
    username: str = Field(min_length=3)
    email: EmailStr
    phone: Optional[str] = None
    department: Optional[Department] = None
    gender: Optional[Gender] = None

    model_config = ConfigDict(str_strip_whitespace=True, use_enum_values=True)

    @field_validator('username')
    @classmethod
    def validate_username(cls, value: str) -> str:
        if not USERNAME_PATTERN.match(value):
            raise ValueError('ID can only contain letters, numbers, and underscores.')
        return value

    @field_validator('email')
    @classmethod
    def lower_email(cls, value: str) -> str:
        return value.lower()

    @field_validator('phone', mode='before')
    @classmethod
    def clean_phone(cls, value):
        return _empty_to_none(value)


class StudentSignup(StudentBase):
    password: str = Field(min_length=6, max_length=72)
    department: Department
    gender: Gender
    year: str

    @field_validator('year', mode='before')
    @classmethod
    def validate_year(cls, value):
        year = _validate_year(value)
        if year is None:
            raise ValueError('Year is required')
        return year


class StudentCreate(StudentBase):
    password: str = Field(min_length=6, max_length=72)
    year: Optional[str] = None

    @field_validator('year', mode='before')
    @classmethod
    def validate_year(cls, value):
        return _validate_year(value)


class InternalUserCreate(BaseModel):
    name: str
    username: str
    email: str
    password: str
    phone: Optional[str] = None
    department: Optional[str] = None
    gender: Optional[str] = None
    batch: Optional[str] = None
    barcode_id: str
    role: Role = Role.STUDENT
    completed: bool = True
    completed_at: Optional[datetime] = None

    model_config = ConfigDict(use_enum_values=True, validate_default=True)


class StudentUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=2)
    username: Optional[str] = Field(default=None, min_length=3)
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    department: Optional[Department] = None
    gender: Optional[Gender] = None
    year: Optional[str] = None
    password: Optional[str] = None

    model_config = ConfigDict(str_strip_whitespace=True, use_enum_values=True)

    @field_validator('name', 'username', 'email', mode='before')
    @classmethod
    def required_when_sent(cls, value):
        return _reject_null(value)

    @field_validator('username')
    @classmethod
    def validate_username(cls, value):
        if value is not None and not USERNAME_PATTERN.match(value):
            raise ValueError('ID can only contain letters, numbers, and underscores.')
        return value

    @field_validator('phone', mode='before')
    @classmethod
    def clean_phone(cls, value):
        return _empty_to_none(value)

    @field_validator('email')
    @classmethod
    def lower_email(cls, value):
        return value.lower() if value else value

    @field_validator('year', mode='before')
    @classmethod
    def validate_year(cls, value):
        return _validate_year(value)

    @field_validator('password', mode='before')
    @classmethod
    def validate_password(cls, value):
        # An empty password means "keep the current one"
        value = _empty_to_none(value)
        if value is not None and not 6 <= len(value) <= 72:
            raise ValueError('Password must be between 6 and 72 characters')
        return value


class ProfileUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=2)
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    department: Optional[Department] = None
    gender: Optional[Gender] = None

    model_config = ConfigDict(str_strip_whitespace=True, use_enum_values=True)

    @field_validator('name', 'email', mode='before')
    @classmethod
    def required_when_sent(cls, value):
        return _reject_null(value)

    @field_validator('phone', mode='before')
    @classmethod
    def clean_phone(cls, value):
        return _empty_to_none(value)

    @field_validator('email')
    @classmethod
    def lower_email(cls, value):
        return value.lower() if value else value


class User(BaseModel):
    id: int
    name: Optional[str] = None
    username: str
    email: str
    phone: Optional[str] = None
    gender: Optional[str] = None
    department: Optional[str] = None
    batch: Optional[str] = None
    photo: Optional[str] = None
    barcode_id: Optional[str] = None
    role: Role
    completed: bool = False
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class StudentFilter(BaseModel):
    department: Optional[Department] = None
    batch: Optional[str] = None

    model_config = ConfigDict(use_enum_values=True)
