from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.api.deps import get_db, get_record_repository, get_user_id
from app.db.repository import FinancialRecordRepository
from app.schemas.records import RecordCreateRequest, RecordOut, RecordUpdateRequest
from app.services.records import FinancialRecordData, create_record, soft_delete, update_record


router = APIRouter(prefix="/projects/{project_id}/records", tags=["records"])


def _out(record: FinancialRecordData) -> RecordOut:
    return RecordOut.model_validate(record)


@router.get("", response_model=list[RecordOut])
def list_records(
    project_id: str,
    include_deleted: bool = False,
    records: FinancialRecordRepository = Depends(get_record_repository),
) -> list[RecordOut]:
    return [_out(row) for row in records.load(project_id, include_deleted=include_deleted)]


@router.post("", response_model=RecordOut, status_code=status.HTTP_201_CREATED)
def add_record(
    project_id: str,
    payload: RecordCreateRequest,
    db: Session = Depends(get_db),
    records: FinancialRecordRepository = Depends(get_record_repository),
    user_id: str = Depends(get_user_id),
) -> RecordOut:
    record = create_record(
        date=payload.date,
        type=payload.type,
        amount=payload.amount,
        category=payload.category,
        project_id=project_id,
        description=payload.description,
        user_id=user_id,
        cost_type=payload.cost_type,
    )
    saved = records.save([record])[0]
    db.commit()
    return _out(saved)


@router.patch("/{record_id}", response_model=RecordOut)
def edit_record(
    project_id: str,
    record_id: int,
    payload: RecordUpdateRequest,
    db: Session = Depends(get_db),
    records: FinancialRecordRepository = Depends(get_record_repository),
) -> RecordOut:
    current = records.get(project_id, record_id)
    updated = update_record(current, **payload.model_dump(exclude_unset=True))
    saved = records.save([updated])[0]
    db.commit()
    return _out(saved)


@router.delete("/{record_id}", response_model=RecordOut)
def delete_record(
    project_id: str,
    record_id: int,
    db: Session = Depends(get_db),
    records: FinancialRecordRepository = Depends(get_record_repository),
) -> RecordOut:
    current = records.get(project_id, record_id)
    saved = records.save([soft_delete(current)])[0]
    db.commit()
    return _out(saved)
