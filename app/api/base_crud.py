from typing import Generic, List, Optional, Type, TypeVar

import psycopg2
from fastapi import HTTPException, status
from pydantic import BaseModel
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.declarative import DeclarativeMeta
from sqlalchemy.orm import Query, Session

from app.api.users.schemas import Role
from app.core.logger import logger
from app.core.security import SYSTEM_TOKEN, TokenData

ModelType = TypeVar('ModelType', bound=DeclarativeMeta)
CreateSchemaType = TypeVar('CreateSchemaType', bound=BaseModel)
UpdateSchemaType = TypeVar('UpdateSchemaType', bound=BaseModel)


class CRUDBase(Generic[ModelType, CreateSchemaType, UpdateSchemaType]):
    def __init__(self, model: Type[ModelType], resource_name: Optional[str] = None):
        self.model = model
        self.resource_name = resource_name or model.__name__

    def _check_permission(self, db_obj: ModelType, user: TokenData) -> bool:
        """Override this method to implement permission checks"""
        return user == SYSTEM_TOKEN or user.role == Role.REGISTRAR

    def _base_query(self, db: Session) -> Query:
        """Override this method to restrict the rows visible through this CRUD"""
        return db.query(self.model)

    def _apply_filters(
        self, query: Query, filters: Optional[BaseModel] = None
    ) -> Query:
        """Override this method to implement filter logic"""
        if not filters:
            return query

        for field, value in filters.model_dump(exclude_none=True).items():
            if hasattr(self.model, field):
                query = query.filter(getattr(self.model, field) == value)
        return query

    def _integrity_detail(self, e: IntegrityError) -> str:
        orig = str(e.orig)
        detail = 'Integrity error'
        if isinstance(e.orig, psycopg2.errors.UniqueViolation) and 'DETAIL' in orig:
            error_detail = orig.split('DETAIL: ')[1].split('\n')[0].strip()
            if '(' in error_detail and ')' in error_detail:
                keys = error_detail.split('(')[1].split(')')[0]
                detail = f'It already exists a {self.resource_name} with this {keys}'
        return detail

    def create(
        self,
        db: Session,
        obj: CreateSchemaType,
        user: Optional[TokenData] = None,
    ) -> ModelType:
        """Create a new record."""
        try:
            # Only keep fields that map to table columns
            obj_data = obj.model_dump()
            model_columns = self.model.__table__.columns.keys()
            filtered_data = {k: v for k, v in obj_data.items() if k in model_columns}
            if user and 'created_by' in model_columns:
                filtered_data.setdefault('created_by', user.username)

            db_obj = self.model(**filtered_data)
            db.add(db_obj)
            db.commit()
            db.refresh(db_obj)
            return db_obj
        except IntegrityError as e:
            logger.error('Error creating %s: %s', self.resource_name, str(e))
            db.rollback()
            detail = self._integrity_detail(e)
            logger.error('Integrity error: %s', detail)
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=detail,
            )
        except Exception as e:
            logger.error('SQL error creating %s: %s', self.resource_name, str(e))
            db.rollback()
            raise e

    def get(self, db: Session, id: int, user: TokenData) -> ModelType:
        """Get a single record by id with permission check."""
        obj = self._base_query(db).filter(self.model.id == id).first()
        if not obj:
            logger.error('%s %s not found', self.resource_name, id)
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f'{self.resource_name} not found',
            )
        if not self._check_permission(obj, user):
            err_msg = f'Not authorized to access this {self.resource_name}: {obj.id}'
            logger.error(err_msg)
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=err_msg)
        return obj

    def find(
        self,
        db: Session,
        skip: int = 0,
        limit: int = 100,
        filters: Optional[BaseModel] = None,
        user: Optional[TokenData] = None,
        sort_by: str = 'created_at',
        sort_order: str = 'desc',
    ) -> List[ModelType]:
        """Get multiple records with pagination, filters and sorting."""
        query = self._base_query(db)
        query = self._apply_filters(query, filters)

        if not hasattr(self.model, sort_by):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f'Invalid sort field: {sort_by}',
            )

        order_by = getattr(self.model, sort_by)
        if sort_order == 'desc':
            order_by = order_by.desc()

        query = query.order_by(order_by)
        return query.offset(skip).limit(limit).all()

    def update(
        self,
        db: Session,
        id: int,
        obj: UpdateSchemaType,
        user: TokenData,
    ) -> ModelType:
        """Update a record."""
        db_obj = self.get(db, id, user)  # This will raise 404 if not found
        obj_data = obj.model_dump(exclude_unset=True)

        for field, value in obj_data.items():
            setattr(db_obj, field, value)

        return self._commit_update(db, db_obj)

    def _commit_update(self, db: Session, db_obj: ModelType) -> ModelType:
        try:
            db.commit()
        except IntegrityError as e:
            logger.error('Error updating %s: %s', self.resource_name, str(e))
            db.rollback()
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=self._integrity_detail(e),
            )
        db.refresh(db_obj)
        return db_obj

    def delete(self, db: Session, id: int, user: TokenData) -> ModelType:
        """Delete a record."""
        try:
            obj = self.get(db, id, user)  # This will raise 404 if not found
            db.delete(obj)
            db.commit()
            return obj
        except IntegrityError as e:
            db.rollback()
            logger.error('IntegrityError in delete: %s', e)

            if isinstance(e.orig, psycopg2.errors.ForeignKeyViolation):
                raise HTTPException(
                    status_code=status.HTTP_409_CONFLICT,
                    detail='Cannot delete this record because it is referenced by other records',
                )

            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail='Database integrity error occurred',
            )
