from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.api.users import schemas
from app.api.users.crud import student as student_crud
from app.api.users.crud import user as user_crud
from app.core.database import get_db
from app.core.security import Token, TokenData, get_current_user, require_registrar

router = APIRouter()


@router.post(
    '/signup',
    response_model=schemas.User,
    status_code=status.HTTP_201_CREATED,
)
def signup(
    data: schemas.StudentSignup,
    db: Session = Depends(get_db),
):
    return user_crud.signup(db=db, obj=data)


@router.post('/login', response_model=Token)
def login(
    data: schemas.Login,
    db: Session = Depends(get_db),
):
    return user_crud.login(db=db, username=data.username, password=data.password)


@router.get('/me', response_model=schemas.User)
def get_me(
    current_user: TokenData = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return user_crud.get_me(db=db, user=current_user)


@router.patch('/me', response_model=schemas.User)
def update_me(
    data: schemas.ProfileUpdate,
    current_user: TokenData = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return user_crud.update_profile(db=db, obj=data, user=current_user)


@router.post('/me/password')
def change_password(
    data: schemas.ChangePassword,
    current_user: TokenData = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return user_crud.change_password(db=db, obj=data, user=current_user)


@router.get('/students', response_model=list[schemas.User])
def get_students(
    current_user: TokenData = Depends(require_registrar),
    filters: schemas.StudentFilter = Depends(),
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=100, ge=1, le=100),
    db: Session = Depends(get_db),
):
    return student_crud.find(
        db=db,
        skip=skip,
        limit=limit,
        filters=filters,
        user=current_user,
    )


@router.post(
    '/students',
    response_model=schemas.User,
    status_code=status.HTTP_201_CREATED,
)
def create_student(
    data: schemas.StudentCreate,
    current_user: TokenData = Depends(require_registrar),
    db: Session = Depends(get_db),
):
    return student_crud.create_user(db=db, obj=data, user=current_user)


@router.get('/students/{student_id}', response_model=schemas.User)
def get_student(
    student_id: int,
    current_user: TokenData = Depends(require_registrar),
    db: Session = Depends(get_db),
):
    return student_crud.get(db=db, id=student_id, user=current_user)


@router.patch('/students/{student_id}', response_model=schemas.User)
def update_student(
    student_id: int,
    data: schemas.StudentUpdate,
    current_user: TokenData = Depends(require_registrar),
    db: Session = Depends(get_db),
):
    return student_crud.update(db=db, id=student_id, obj=data, user=current_user)


@router.delete('/students/{student_id}')
def delete_student(
    student_id: int,
    current_user: TokenData = Depends(require_registrar),
    db: Session = Depends(get_db),
):
    student_crud.delete(db=db, id=student_id, user=current_user)
    return {'message': 'Student deleted successfully'}
