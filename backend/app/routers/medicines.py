import logging
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from app.auth import require_roles
from app.database import get_db
from app.exceptions import NotFound, ValidationError
from app.models.medicine import Medicine
from app.models.user import User, Role
from app.schemas.medicine import MedicineCreate, MedicineUpdate, MedicineResponse

logger = logging.getLogger(__name__)

router = APIRouter()

can_view = require_roles(Role.ADMIN, Role.DOCTOR, Role.STAFF)
can_edit = require_roles(Role.ADMIN, Role.DOCTOR)


async def _get_or_404(db: AsyncSession, medicine_id: int) -> Medicine:
    medicine = await db.get(Medicine, medicine_id)
    if not medicine:
        raise NotFound("Medicine not found")
    return medicine


@router.get("")
async def list_medicines(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(can_view),
):
    result = await db.execute(select(Medicine).order_by(Medicine.id))
    return {
        "success": True,
        "message": "Medicines retrieved",
        "data": [MedicineResponse.model_validate(m) for m in result.scalars().all()],
    }


@router.get("/{medicine_id}")
async def get_medicine(
    medicine_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(can_view),
):
    medicine = await _get_or_404(db, medicine_id)
    return {
        "success": True,
        "message": "Medicine retrieved",
        "data": MedicineResponse.model_validate(medicine),
    }


@router.post("", status_code=201)
async def create_medicine(
    data: MedicineCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(can_edit),
):
    if not data.name or not data.expiry_date:
        raise ValidationError("Name and expiry date are required")

    values = data.model_dump()
    values["created_by"] = values["created_by"] or current_user.username
    medicine = Medicine(**values)
    db.add(medicine)
    await db.flush()
    logger.info("Medicine %s created by user %s", medicine.id, current_user.id)
    return {
        "success": True,
        "message": "Medicine added successfully",
        "data": MedicineResponse.model_validate(medicine),
    }


@router.put("/{medicine_id}")
async def update_medicine(
    medicine_id: int,
    data: MedicineUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(can_edit),
):
    medicine = await _get_or_404(db, medicine_id)

    update_data = data.model_dump(exclude_unset=True, exclude_none=True)
    for key, value in update_data.items():
        setattr(medicine, key, value)

    await db.flush()
    return {
        "success": True,
        "message": "Medicine updated successfully",
        "data": MedicineResponse.model_validate(medicine),
    }


@router.delete("/{medicine_id}")
async def delete_medicine(
    medicine_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(can_edit),
):
    medicine = await _get_or_404(db, medicine_id)
    await db.delete(medicine)
    await db.flush()
    logger.info("Medicine %s deleted by user %s", medicine_id, current_user.id)
    return {"success": True, "message": "Medicine deleted successfully"}
