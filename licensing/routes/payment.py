from typing import Any, Dict

from fastapi import APIRouter, Body, Depends, HTTPException
import logging

from licensing.auth.dependencies import get_current_actor
from licensing.routes.deps import get_engine
from licensing.schemas.payment import GatewayCallback
from licensing.services.payment_service import is_successful, verify_callback_signature
from licensing.workflow.engine import TransitionEngine
from licensing.workflow.policy import Actor
from licensing.workflow.status import Action

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/payment", tags=["Payment"])


@router.post("/{application_id}/initiate")
def initiate_payment(application_id: int, actor: Actor = Depends(get_current_actor),
                     engine: TransitionEngine = Depends(get_engine)):
    return engine.initiate_payment(application_id, actor).to_dict()


@router.post("/{application_id}/confirm")
def confirm_payment(
    application_id: int,
    payload: Dict[str, Any] = Body(...),
    actor: Actor = Depends(get_current_actor),
    engine: TransitionEngine = Depends(get_engine)
):
    return engine.apply_transition(application_id, Action.CONFIRM_PAYMENT, actor, payload).to_dict()


@router.post("/gateway/callback")
def gateway_callback(data: GatewayCallback, engine: TransitionEngine = Depends(get_engine)):
    logger.info(f"🚀 Gateway callback for application {data.application_id} ({data.reference})")
    if not verify_callback_signature(data.application_id, data.reference, data.amount, data.signature):
        logger.warning(f"❌ Bad callback signature for {data.reference}")
        raise HTTPException(status_code=400, detail="Invalid callback signature")

    if not is_successful({"status": data.status}):
        logger.info(f"Gateway reported {data.status} for {data.reference}, nothing to do")
        return {"message": "Payment not successful", "changed": False}

    result = engine.confirm_payment(data.application_id, Actor.system(), data.reference, data.amount)
    return result.to_dict()
