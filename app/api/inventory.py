"""Inventory API: items, stock movements, low-stock report."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.db import crud
from app.db.engine import get_db
from app.dependencies import http_error, require_admin, require_auth
from app.schemas import (
    InventoryItemCreate, InventoryItemRead, InventoryTransactionRead, StockMovement,
)
from app.services import inventory
from app.services.auth import AuthContext
from app.services.errors import FieldOpsError

router = APIRouter(prefix="/api/inventory", tags=["inventory"])


@router.get("", response_model=list[InventoryItemRead])
async def list_items(
    category: str | None = None,
    auth: AuthContext = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    return await crud.list_inventory_items(db, category)


@router.post("", response_model=InventoryItemRead, status_code=201)
async def create_item(
    body: InventoryItemCreate,
    auth: AuthContext = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await crud.create_inventory_item(db, **body.model_dump())


@router.get("/low-stock", response_model=list[InventoryItemRead])
async def low_stock(
    auth: AuthContext = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    return await inventory.low_stock(db)


@router.get("/history", response_model=list[InventoryTransactionRead])
async def history(
    item_id: str | None = Query(None, alias="itemId"),
    auth: AuthContext = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await inventory.history(db, item_id)


@router.get("/{item_id}", response_model=InventoryItemRead)
async def get_item(
    item_id: str,
    auth: AuthContext = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    item = await crud.get_inventory_item(db, item_id)
    if not item:
        raise HTTPException(404, "Inventory item not found")
    return item


@router.post("/{item_id}/add-stock", response_model=InventoryItemRead)
async def add_stock(
    item_id: str,
    body: StockMovement,
    auth: AuthContext = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    try:
        return await inventory.add_stock(db, item_id, body.quantity, auth, notes=body.notes)
    except FieldOpsError as e:
        raise http_error(e)


@router.post("/{item_id}/assign", response_model=InventoryItemRead)
async def assign(
    item_id: str,
    body: StockMovement,
    auth: AuthContext = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    try:
        return await inventory.assign(
            db, item_id, body.quantity, auth,
            operator_id=body.operator_id, job_id=body.job_id, notes=body.notes,
        )
    except FieldOpsError as e:
        raise http_error(e)


@router.post("/{item_id}/return", response_model=InventoryItemRead)
async def return_item(
    item_id: str,
    body: StockMovement,
    auth: AuthContext = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    try:
        return await inventory.return_item(
            db, item_id, body.quantity, auth,
            operator_id=body.operator_id, job_id=body.job_id, notes=body.notes,
        )
    except FieldOpsError as e:
        raise http_error(e)
