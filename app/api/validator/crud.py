from typing import List, Optional

from fastapi import HTTPException, status
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.api.base_crud import CRUDBase
from app.api.users.crud import student as student_crud
from app.api.users.models import User
from app.core.logger import logger
from app.core.security import TokenData
from app.core.utils import year_label

from . import models, schemas

NOT_FOUND_MESSAGE = 'No student found with this barcode ID.'
SERVER_ERROR_MESSAGE = 'An unexpected error occurred on the server.'

MESSAGES = {
    schemas.Outcome.CHECKED_IN: 'User successfully checked in.',
    schemas.Outcome.ALREADY_ENTERED: 'This user has already been checked in.',
}


def _server_error() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=SERVER_ERROR_MESSAGE,
    )


class CRUDCheckEvent(
    CRUDBase[
        models.CheckEvent,
        schemas.InternalCheckEventCreate,
        schemas.InternalCheckEventCreate,
    ]
):
    def get_latest(self, db: Session, user_id: int) -> Optional[models.CheckEvent]:
        return (
            db.query(models.CheckEvent)
            .filter(models.CheckEvent.user_id == user_id)
            .order_by(models.CheckEvent.created_at.desc(), models.CheckEvent.id.desc())
            .first()
        )

    def _lookup_student(self, db: Session, barcode_id: str) -> User:
        try:
            student = student_crud.get_by_barcode(db, barcode_id)
        except SQLAlchemyError as e:
            logger.error('Error looking up barcode %s: %s', barcode_id, str(e))
            raise _server_error()

        logger.info('Student with barcode %s found: %s', barcode_id, student is not None)
        if not student:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND, detail=NOT_FOUND_MESSAGE
            )
        return student

    def _record_entry(self, db: Session, student: User, user: TokenData) -> bool:
        """Insert an Entered event. Returns False if one already exists."""
        new_event = schemas.InternalCheckEventCreate(
            user_id=student.id,
            created_by=user.username,
        )
        try:
            db.add(models.CheckEvent(**new_event.model_dump()))
            db.commit()
        except IntegrityError as e:
            db.rollback()
            logger.info(
                'Concurrent check-in detected for student %s: %s', student.id, str(e)
            )
            return False
        except SQLAlchemyError as e:
            db.rollback()
            logger.error('Error creating check event for %s: %s', student.id, str(e))
            raise _server_error()
        return True

    def _response(
        self, outcome: schemas.Outcome, student: User
    ) -> schemas.ValidatorResponse:
        summary = schemas.StudentSummary(
            id=student.id,
            name=student.name,
            username=student.username,
            photo=student.photo,
            department=student.department,
            batch=student.batch,
            email=student.email,
            year_label=year_label(student.batch),
        )
        return schemas.ValidatorResponse(
            outcome=outcome, message=MESSAGES[outcome], student=summary
        )

    def check_in(
        self,
        db: Session,
        barcode_id: str,
        user: TokenData,
    ) -> schemas.ValidatorResponse:
        student = self._lookup_student(db, barcode_id)

        try:
            last_event = self.get_latest(db, student.id)
        except SQLAlchemyError as e:
            logger.error('Error reading check events for %s: %s', student.id, str(e))
            raise _server_error()

        if last_event and last_event.status == schemas.CheckStatus.ENTERED.value:
            logger.info('Student %s already entered', student.id)
            return self._response(schemas.Outcome.ALREADY_ENTERED, student)

        logger.info('Checking in student %s (scanned by %s)', student.id, user.username)
        if not self._record_entry(db, student, user):
            return self._response(schemas.Outcome.ALREADY_ENTERED, student)

        return self._response(schemas.Outcome.CHECKED_IN, student)

    def history(
        self, db: Session, barcode_id: str, user: TokenData
    ) -> List[models.CheckEvent]:
        student = self._lookup_student(db, barcode_id)
        logger.info('User %s reading check events of %s', user.username, student.id)
        return (
            db.query(models.CheckEvent)
            .filter(models.CheckEvent.user_id == student.id)
            .order_by(models.CheckEvent.created_at.desc(), models.CheckEvent.id.desc())
            .all()
        )


check_event = CRUDCheckEvent(models.CheckEvent)
