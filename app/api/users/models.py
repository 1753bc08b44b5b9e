from typing import TYPE_CHECKING, List

from sqlalchemy import Boolean, Column, DateTime, Integer, String, event
from sqlalchemy.orm import Mapped, relationship

from app.api.users.schemas import Role
from app.core.database import Base
from app.core.security import Token, create_access_token
from app.core.utils import current_time

if TYPE_CHECKING:
    from app.api.validator.models import CheckEvent


class User(Base):
    __tablename__ = 'users'

    id = Column(
        Integer,
        primary_key=True,
        autoincrement=True,
        unique=True,
        index=True,
    )
    name = Column(String)
    username = Column(String, unique=True, index=True, nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)
    password = Column(String)
    phone = Column(String)
    gender = Column(String)
    department = Column(String)
    batch = Column(String)
    photo = Column(String)
    barcode_id = Column(String, unique=True, index=True)
    role = Column(String, nullable=False, default=Role.STUDENT.value)

    completed = Column(Boolean, default=False)
    completed_at = Column(DateTime)
    changed_password = Column(Boolean, default=False)
    changed_password_at = Column(DateTime)

    check_events: Mapped[List['CheckEvent']] = relationship(
        'CheckEvent',
        back_populates='user',
        cascade='all, delete-orphan',
        order_by='CheckEvent.created_at.desc()',
    )

    created_at = Column(DateTime, default=current_time)
    updated_at = Column(DateTime, default=current_time, onupdate=current_time)

    def get_authorization(self, expires_delta=None) -> Token:
        data = {'user_id': self.id, 'username': self.username, 'role': self.role}
        return Token(
            access_token=create_access_token(data=data, expires_delta=expires_delta),
            token_type='Bearer',
        )


@event.listens_for(User, 'before_insert')
def clean_email(mapper, connection, target):
    if target.email:
        target.email = target.email.lower().strip()
