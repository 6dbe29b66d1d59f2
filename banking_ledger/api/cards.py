"""
Card and budget endpoints
"""

from fastapi import APIRouter, Depends

from .dependencies import get_store, unwrap_result
from .schemas import BudgetCategoryRequest, CardFeaturesRequest, CardLimitRequest
from ..store import LedgerStore


router = APIRouter()


@router.get("/cards")
def list_cards(user_id: str, store: LedgerStore = Depends(get_store)):
    cards = unwrap_result(store.get_cards(user_id))
    return {"cards": [c.to_dict() for c in cards]}


@router.post("/cards/{card_id}/freeze")
def freeze_card(user_id: str, card_id: str, store: LedgerStore = Depends(get_store)):
    return unwrap_result(store.freeze_card(user_id, card_id)).to_dict()


@router.post("/cards/{card_id}/unfreeze")
def unfreeze_card(user_id: str, card_id: str, store: LedgerStore = Depends(get_store)):
    return unwrap_result(store.unfreeze_card(user_id, card_id)).to_dict()


@router.post("/cards/{card_id}/toggle")
def toggle_card(user_id: str, card_id: str, store: LedgerStore = Depends(get_store)):
    """Freeze an active card or unfreeze a frozen one"""
    return unwrap_result(store.toggle_card_status(user_id, card_id)).to_dict()


@router.post("/cards/{card_id}/report-lost")
def report_card_lost(user_id: str, card_id: str, store: LedgerStore = Depends(get_store)):
    """Block a card permanently"""
    return unwrap_result(store.report_card_lost(user_id, card_id)).to_dict()


@router.put("/cards/{card_id}/limit")
def update_card_limit(
    user_id: str,
    card_id: str,
    request: CardLimitRequest,
    store: LedgerStore = Depends(get_store)
):
    return unwrap_result(store.update_card_limit(user_id, card_id, request.limit)).to_dict()


@router.patch("/cards/{card_id}/features")
def update_card_features(
    user_id: str,
    card_id: str,
    request: CardFeaturesRequest,
    store: LedgerStore = Depends(get_store)
):
    """Switch individual card features; omitted features are left as they are"""
    flags = request.model_dump(exclude_none=True)
    return unwrap_result(store.update_card_features(user_id, card_id, **flags)).to_dict()


@router.get("/budget")
def get_budget(user_id: str, store: LedgerStore = Depends(get_store)):
    """Current month's budget with spend recomputed from the ledger"""
    return unwrap_result(store.get_budget(user_id)).to_dict()


@router.put("/budget/categories/{category}")
def update_budget_category(
    user_id: str,
    category: str,
    request: BudgetCategoryRequest,
    store: LedgerStore = Depends(get_store)
):
    budget = unwrap_result(store.update_budget_category(
        user_id, category, request.limit, request.color
    ))
    return budget.to_dict()
