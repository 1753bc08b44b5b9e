from datetime import timedelta
from typing import List, Optional, Union

from fastapi import HTTPException, status
from sqlalchemy.orm import Query, Session

from app.api.base_crud import CRUDBase
from app.api.users import models, schemas
from app.core.config import settings
from app.core.logger import logger
from app.core.security import (
    SYSTEM_TOKEN,
    Token,
    TokenData,
    hash_password,
    verify_password,
)
from app.core.utils import current_time, generate_barcode_id

MAX_BARCODE_ATTEMPTS = 10


class CRUDUser(
    CRUDBase[models.User, schemas.InternalUserCreate, schemas.StudentUpdate]
):
    def get_by_barcode(self, db: Session, barcode_id: str) -> Optional[models.User]:
        return (
            self._base_query(db).filter(self.model.barcode_id == barcode_id).first()
        )

    def get_by_username(self, db: Session, username: str) -> Optional[models.User]:
        return db.query(self.model).filter(self.model.username == username).first()

    def get_by_email(self, db: Session, email: str) -> Optional[models.User]:
        return (
            db.query(self.model).filter(self.model.email == email.lower()).first()
        )

    def _unique_barcode(self, db: Session) -> str:
        for _ in range(MAX_BARCODE_ATTEMPTS):
            barcode_id = generate_barcode_id()
            taken = db.query(self.model).filter(self.model.barcode_id == barcode_id)
            if not taken.first():
                return barcode_id
            logger.info('Barcode %s already taken, retrying', barcode_id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail='Could not generate a unique barcode ID',
        )

    def _check_availability(self, db: Session, username: str, email: str) -> None:
        if self.get_by_username(db, username):
            logger.error('Username %s already registered', username)
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT, detail='ID already exists.'
            )
        if self.get_by_email(db, email):
            logger.error('Email %s already registered', email)
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail='Email already registered.',
            )

    def create_user(
        self,
        db: Session,
        obj: Union[schemas.StudentSignup, schemas.StudentCreate],
        role: schemas.Role = schemas.Role.STUDENT,
        user: Optional[TokenData] = None,
    ) -> models.User:
        self._check_availability(db, obj.username, obj.email)
        to_create = schemas.InternalUserCreate(
            **obj.model_dump(exclude={'password', 'year'}),
            password=hash_password(obj.password),
            batch=obj.year,
            barcode_id=self._unique_barcode(db),
            role=role,
            completed=True,
            completed_at=current_time(),
        )
        db_user = super().create(db, to_create, user)
        logger.info('User %s created with role %s', db_user.username, db_user.role)
        return db_user

    def signup(self, db: Session, *, obj: schemas.StudentSignup) -> models.User:
        return self.create_user(db, obj)

    def login(self, db: Session, *, username: str, password: str) -> Token:
        user = self.get_by_username(db, username)
        if not user or not verify_password(password, user.password):
            logger.error('Invalid credentials for username %s', username)
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail='Invalid username or password',
                headers={'WWW-Authenticate': 'Bearer'},
            )
        logger.info('User %s logged in', user.id)
        return user.get_authorization(
            expires_delta=timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
        )

    def get_me(self, db: Session, user: TokenData) -> models.User:
        return self.get(db, user.user_id, SYSTEM_TOKEN)

    def update_profile(
        self, db: Session, obj: schemas.ProfileUpdate, user: TokenData
    ) -> models.User:
        db_user = self.get_me(db, user)
        data = obj.model_dump(exclude_unset=True)
        email = data.get('email')
        if email and email != db_user.email and self.get_by_email(db, email):
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail='Email already registered.',
            )
        for field, value in data.items():
            setattr(db_user, field, value)
        db_user.completed = True
        db_user.completed_at = current_time()
        return self._commit_update(db, db_user)

    def change_password(
        self, db: Session, obj: schemas.ChangePassword, user: TokenData
    ) -> dict:
        db_user = self.get_me(db, user)
        db_user.password = hash_password(obj.new_password)
        db_user.changed_password = True
        db_user.changed_password_at = current_time()
        db.commit()
        logger.info('Password changed for user %s', db_user.id)
        return {'message': 'Password updated successfully'}


class CRUDStudent(CRUDUser):
    """Registrar-facing view of the users table, restricted to students."""

    def _base_query(self, db: Session) -> Query:
        return db.query(self.model).filter(
            self.model.role == schemas.Role.STUDENT.value
        )

    def find(
        self,
        db: Session,
        skip: int = 0,
        limit: int = 100,
        filters: Optional[schemas.StudentFilter] = None,
        user: Optional[TokenData] = None,
    ) -> List[models.User]:
        return super().find(
            db, skip, limit, filters, user, sort_by='created_at', sort_order='desc'
        )

    def find_by_ids(self, db: Session, ids: List[int]) -> List[models.User]:
        return self._base_query(db).filter(self.model.id.in_(ids)).all()

    def update(
        self,
        db: Session,
        id: int,
        obj: schemas.StudentUpdate,
        user: TokenData,
    ) -> models.User:
        db_user = self.get(db, id, user)
        data = obj.model_dump(exclude_unset=True)

        username = data.get('username')
        if username and username != db_user.username and self.get_by_username(
            db, username
        ):
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT, detail='ID already exists.'
            )
        email = data.get('email')
        if email and email.lower() != db_user.email and self.get_by_email(db, email):
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail='Email already registered.',
            )

        if 'year' in data:
            data['batch'] = data.pop('year')
        password = data.pop('password', None)
        if password:
            data['password'] = hash_password(password)

        for field, value in data.items():
            setattr(db_user, field, value)

        db_user = self._commit_update(db, db_user)
        logger.info('Student %s updated by %s', db_user.id, user.username)
        return db_user


user = CRUDUser(models.User)
student = CRUDStudent(models.User, resource_name='Student')
