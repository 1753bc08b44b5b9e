from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship

from app.api.validator.schemas import CheckStatus
from app.core.database import Base
from app.core.utils import current_time


class CheckEvent(Base):
    __tablename__ = 'check_events'

    id = Column(
        Integer,
        primary_key=True,
        autoincrement=True,
        unique=True,
        index=True,
    )
    user_id = Column(Integer, ForeignKey('users.id'), nullable=False, index=True)
    status = Column(String, nullable=False, default=CheckStatus.ENTERED.value)

    user = relationship('User', back_populates='check_events')

    created_at = Column(DateTime, default=current_time, nullable=False)
    created_by = Column(String)

    # One "Entered" event per student, so concurrent scans cannot both insert
    __table_args__ = (
        UniqueConstraint('user_id', 'status', name='uq_check_events_user_status'),
    )
