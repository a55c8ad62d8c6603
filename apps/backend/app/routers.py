from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy.orm import Session

from app import models
from app.core.database import get_db
from app.core.deps import get_recurrence_service
from app.schemas import (
    ExceptionCreate,
    ExceptionOut,
    ExclusionCreate,
    ExclusionOut,
    OccurrenceOut,
    TemplateCreate,
    TemplateOut,
    TemplateUpdate,
    WalletCreate,
    WalletOut,
    WalletUpdate,
)
from app.services import RecurrenceService, TemplateRepository


router = APIRouter()


def _normalize_optional(value: str | None) -> str | None:
    if value is None:
        return None
    trimmed = value.strip()
    return trimmed or None


# ===== Wallets =====

@router.post("/wallets", response_model=WalletOut, status_code=201)
def create_wallet(payload: WalletCreate, db: Session = Depends(get_db)):
    row = TemplateRepository(db).create_wallet(payload.name)
    db.commit()
    db.refresh(row)
    return row


@router.get("/wallets", response_model=list[WalletOut])
def list_wallets(db: Session = Depends(get_db)):
    return TemplateRepository(db).list_wallets()


@router.get("/wallets/{wallet_id}", response_model=WalletOut)
def get_wallet(wallet_id: int, db: Session = Depends(get_db)):
    return TemplateRepository(db).get_wallet(wallet_id)


@router.put("/wallets/{wallet_id}", response_model=WalletOut)
def rename_wallet(wallet_id: int, payload: WalletUpdate, db: Session = Depends(get_db)):
    row = TemplateRepository(db).rename_wallet(wallet_id, payload.name)
    db.commit()
    db.refresh(row)
    return row


@router.delete("/wallets/{wallet_id}", status_code=204)
def delete_wallet(wallet_id: int, db: Session = Depends(get_db)):
    TemplateRepository(db).delete_wallet(wallet_id)
    db.commit()
    return Response(status_code=204)


# ===== Transaction templates =====

@router.get("/wallets/{wallet_id}/transactions", response_model=list[TemplateOut])
def list_transactions(wallet_id: int, db: Session = Depends(get_db)):
    repo = TemplateRepository(db)
    repo.get_wallet(wallet_id)
    return repo.get_all(wallet_id)


@router.post("/wallets/{wallet_id}/transactions", response_model=TemplateOut, status_code=201)
def create_transaction(wallet_id: int, payload: TemplateCreate, db: Session = Depends(get_db)):
    repo = TemplateRepository(db)
    repo.get_wallet(wallet_id)
    if payload.id and db.get(models.TransactionTemplate, payload.id) is not None:
        raise HTTPException(status_code=409, detail="Transaction with this id already exists")
    data = payload.model_dump()
    data["description"] = _normalize_optional(data.get("description"))
    data["person"] = _normalize_optional(data.get("person"))
    row = repo.create(wallet_id, data)
    db.commit()
    return repo.require(wallet_id, row.id)


# Declared before /{template_id} so "range" is not captured as an id
@router.get("/wallets/{wallet_id}/transactions/range", response_model=list[OccurrenceOut])
def list_occurrences_in_range(
    wallet_id: int,
    start: date = Query(..., alias="startDate"),
    end: date = Query(..., alias="endDate"),
    svc: RecurrenceService = Depends(get_recurrence_service),
):
    occurrences = svc.get_occurrences(wallet_id, start, end)
    return [OccurrenceOut.from_occurrence(occ) for occ in occurrences]


@router.get("/wallets/{wallet_id}/transactions/{template_id}", response_model=TemplateOut)
def get_transaction(wallet_id: int, template_id: str, db: Session = Depends(get_db)):
    return TemplateRepository(db).require(wallet_id, template_id)


@router.put("/wallets/{wallet_id}/transactions/{template_id}", response_model=TemplateOut)
def update_transaction(wallet_id: int, template_id: str, payload: TemplateUpdate, db: Session = Depends(get_db)):
    repo = TemplateRepository(db)
    row = repo.require(wallet_id, template_id)
    data = payload.model_dump()
    data["description"] = _normalize_optional(data.get("description"))
    data["person"] = _normalize_optional(data.get("person"))
    repo.update(row, data)
    db.commit()
    return repo.require(wallet_id, template_id)


@router.delete("/wallets/{wallet_id}/transactions/{template_id}", status_code=204)
def delete_transaction(wallet_id: int, template_id: str, db: Session = Depends(get_db)):
    repo = TemplateRepository(db)
    repo.delete(repo.require(wallet_id, template_id))
    db.commit()
    return Response(status_code=204)


# ===== Exclusions =====

@router.get("/wallets/{wallet_id}/transactions/{template_id}/exclusions", response_model=list[ExclusionOut])
def list_exclusions(wallet_id: int, template_id: str, db: Session = Depends(get_db)):
    repo = TemplateRepository(db)
    repo.require(wallet_id, template_id)
    return repo.list_exclusions(template_id)


@router.post(
    "/wallets/{wallet_id}/transactions/{template_id}/exclusions",
    response_model=ExclusionOut,
    status_code=201,
)
def add_exclusion(
    wallet_id: int,
    template_id: str,
    payload: ExclusionCreate,
    svc: RecurrenceService = Depends(get_recurrence_service),
):
    return svc.add_exclusion(wallet_id, template_id, payload.date, _normalize_optional(payload.reason))


@router.delete("/wallets/{wallet_id}/transactions/{template_id}/exclusions/{excluded_on}")
def remove_exclusion(
    wallet_id: int,
    template_id: str,
    excluded_on: date,
    svc: RecurrenceService = Depends(get_recurrence_service),
):
    svc.remove_exclusion(wallet_id, template_id, excluded_on)
    return {"deleted": True}


# ===== Exceptions =====

@router.post(
    "/wallets/{wallet_id}/transactions/{template_id}/exceptions",
    response_model=ExceptionOut,
    status_code=201,
)
def create_exception(
    wallet_id: int,
    template_id: str,
    payload: ExceptionCreate,
    svc: RecurrenceService = Depends(get_recurrence_service),
):
    override = payload.override.model_dump(exclude_none=True)
    outcome, row = svc.create_exception(wallet_id, template_id, payload.date, override)
    return ExceptionOut.build(outcome, TemplateOut.model_validate(row))
