from datetime import date
from typing import List, Optional

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from app.api.id_cards import schemas
from app.api.users.crud import student as student_crud
from app.api.users.models import User
from app.core.logger import logger
from app.core.utils import academic_year


def parse_ids(ids_param: Optional[str]) -> List[int]:
    if not ids_param:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail='Missing student IDs parameter',
        )

    student_ids = []
    for raw_id in ids_param.split(','):
        raw_id = raw_id.strip()
        if raw_id.isdecimal():
            student_ids.append(int(raw_id))

    if not student_ids:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail='No valid student IDs provided',
        )
    return student_ids


def to_id_data(student: User, today: Optional[date] = None) -> schemas.StudentIdData:
    return schemas.StudentIdData(
        id=str(student.id),
        name=student.name or 'Unknown Student',
        username=student.username,
        department=student.department,
        photo=student.photo,
        academic_year=academic_year(student.batch, today),
        barcode_value=student.barcode_id or student.username,
    )


def get_id_cards(db: Session, ids_param: Optional[str]) -> List[schemas.StudentIdData]:
    student_ids = parse_ids(ids_param)
    students = student_crud.find_by_ids(db, student_ids)
    if not students:
        logger.error('No students found for ids %s', student_ids)
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail='No students found for the provided IDs',
        )

    by_id = {s.id: s for s in students}
    # Keep the order requested by the caller, skipping unknown ids
    ordered = [by_id[i] for i in dict.fromkeys(student_ids) if i in by_id]
    return [to_id_data(student) for student in ordered]
