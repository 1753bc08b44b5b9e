from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.api.id_cards import crud, schemas
from app.core.database import get_db
from app.core.security import TokenData, require_registrar

router = APIRouter()


@router.get('/', response_model=list[schemas.StudentIdData])
def get_id_cards(
    ids: Optional[str] = Query(default=None, description='Comma separated student IDs'),
    current_user: TokenData = Depends(require_registrar),
    db: Session = Depends(get_db),
):
    return crud.get_id_cards(db=db, ids_param=ids)
