from sqlalchemy import func
from sqlalchemy.orm import Session

from app.api.dashboard import schemas
from app.api.users.models import User
from app.api.users.schemas import YEAR_LEVELS, Department, Role
from app.api.validator.models import CheckEvent
from app.api.validator.schemas import CheckStatus
from app.core.logger import logger
from app.core.utils import parse_year, year_label


def get_analytics(db: Session) -> schemas.Analytics:
    students = (
        db.query(User.department, User.batch)
        .filter(User.role == Role.STUDENT.value)
        .all()
    )
    total_students = len(students)

    by_department = {d.value: 0 for d in Department}
    by_year = {year_label(y): 0 for y in YEAR_LEVELS}
    sum_of_years = 0
    for department, batch in students:
        if department in by_department:
            by_department[department] += 1

        year = parse_year(batch)
        if year is None:
            continue
        sum_of_years += year
        label = year_label(year)
        by_year[label] = by_year.get(label, 0) + 1

    average = f'{sum_of_years / total_students:.1f}' if total_students else '0.0'

    checked_in_count = (
        db.query(func.count(func.distinct(CheckEvent.user_id)))
        .filter(CheckEvent.status == CheckStatus.ENTERED.value)
        .scalar()
    )
    logger.info(
        'Dashboard analytics: %s students, %s checked in',
        total_students,
        checked_in_count,
    )

    return schemas.Analytics(
        total_students=total_students,
        total_departments=len(Department),
        average_year_level=average,
        students_by_department=[
            schemas.LabelValue(label=k, value=v) for k, v in by_department.items()
        ],
        students_by_year=[
            schemas.LabelValue(label=k, value=v) for k, v in by_year.items()
        ],
        checked_in_count=checked_in_count or 0,
    )
