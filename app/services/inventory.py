"""Equipment inventory: stock movements with a transaction history."""

from __future__ import annotations

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from app.db import crud
from app.models import InventoryItem, InventoryTransaction
from app.services.auth import AuthContext
from app.services.errors import InsufficientStock, RecordNotFound, StepValidationError

logger = logging.getLogger(__name__)


async def _load(db: AsyncSession, item_id: str) -> InventoryItem:
    item = await crud.get_inventory_item(db, item_id)
    if not item:
        raise RecordNotFound("Inventory item not found")
    return item


def _check_quantity(quantity: int) -> None:
    if quantity <= 0:
        raise StepValidationError("Quantity must be greater than 0")


async def _commit(db: AsyncSession, item: InventoryItem) -> InventoryItem:
    await db.commit()
    await db.refresh(item)
    return item


async def add_stock(
    db: AsyncSession, item_id: str, quantity: int, identity: AuthContext, notes: str = ""
) -> InventoryItem:
    _check_quantity(quantity)
    item = await _load(db, item_id)
    item.quantity_in_stock += quantity
    await crud.create_inventory_transaction(
        db, item_id=item.id, action="add_stock", quantity=quantity,
        performed_by=identity.user_id, notes=notes,
    )
    logger.info("Added %d x %s to stock", quantity, item.name)
    return await _commit(db, item)


async def assign(
    db: AsyncSession,
    item_id: str,
    quantity: int,
    identity: AuthContext,
    operator_id: str | None = None,
    job_id: str | None = None,
    notes: str = "",
) -> InventoryItem:
    _check_quantity(quantity)
    item = await _load(db, item_id)
    if item.quantity_available < quantity:
        raise InsufficientStock(
            f"Only {item.quantity_available} {item.name} available, requested {quantity}"
        )
    item.quantity_assigned += quantity
    await crud.create_inventory_transaction(
        db, item_id=item.id, action="assign", quantity=quantity,
        performed_by=identity.user_id, operator_id=operator_id or identity.user_id,
        job_order_id=job_id, notes=notes,
    )
    return await _commit(db, item)


async def return_item(
    db: AsyncSession,
    item_id: str,
    quantity: int,
    identity: AuthContext,
    operator_id: str | None = None,
    job_id: str | None = None,
    notes: str = "",
) -> InventoryItem:
    _check_quantity(quantity)
    item = await _load(db, item_id)
    if quantity > item.quantity_assigned:
        raise StepValidationError(
            f"Cannot return {quantity}; only {item.quantity_assigned} assigned"
        )
    item.quantity_assigned -= quantity
    await crud.create_inventory_transaction(
        db, item_id=item.id, action="return", quantity=quantity,
        performed_by=identity.user_id, operator_id=operator_id or identity.user_id,
        job_order_id=job_id, notes=notes,
    )
    return await _commit(db, item)


async def low_stock(db: AsyncSession) -> list[InventoryItem]:
    items = await crud.list_inventory_items(db)
    return [i for i in items if i.quantity_available <= i.reorder_level]


async def history(db: AsyncSession, item_id: str | None = None) -> list[InventoryTransaction]:
    return await crud.list_inventory_transactions(db, item_id=item_id)
