from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.validator import schemas
from app.api.validator.crud import check_event as check_event_crud
from app.core.database import get_db
from app.core.security import TokenData, require_registrar

router = APIRouter()


@router.post('/', response_model=schemas.ValidatorResponse)
def validate_barcode(
    data: schemas.ValidatorRequest,
    current_user: TokenData = Depends(require_registrar),
    db: Session = Depends(get_db),
):
    return check_event_crud.check_in(
        db=db,
        barcode_id=data.barcode_id,
        user=current_user,
    )


@router.get('/{barcode_id}/events', response_model=list[schemas.CheckEvent])
def get_check_events(
    barcode_id: str,
    current_user: TokenData = Depends(require_registrar),
    db: Session = Depends(get_db),
):
    return check_event_crud.history(db=db, barcode_id=barcode_id, user=current_user)
