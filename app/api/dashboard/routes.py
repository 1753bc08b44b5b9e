from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.dashboard import crud, schemas
from app.core.database import get_db
from app.core.security import TokenData, require_registrar

router = APIRouter()


@router.get('/analytics', response_model=schemas.Analytics)
def get_analytics(
    current_user: TokenData = Depends(require_registrar),
    db: Session = Depends(get_db),
):
    return crud.get_analytics(db=db)
