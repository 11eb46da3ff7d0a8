"""
FastAPI Router: Auth • Lawyers • Appointments • Wallet • Chat
==============================================================

Purpose
-------
Defines the HTTP API for:
- Authentication: register, login, logout, current principal (users and direct lawyers)
- Lawyer profiles: directory, profile creation and edits, availability
- Appointments: booking (paid from the wallet), status changes, listings
- Wallet: deposits, balance, paginated transaction history
- Chat: room creation, history, status, messages, read receipts, request decisions

Key Notes
---------
- Input validation via Pydantic models in `legal_eagle.api.models`.
- Auth header: `Authorization: Bearer <token>`; every route except register,
  login and the lawyer directory requires it.
- Service-layer errors (`legal_eagle.errors.AppError`) propagate to the
  exception handlers registered in `legal_eagle.main`.
- Chat mutations are fanned out to live sockets through the connection
  registry on `app.state`; delivery is best-effort.
"""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from legal_eagle.api.models import (
    AppointmentBooking,
    AppointmentUpdate,
    AvailabilityUpdate,
    ChatCreation,
    ChatRequestDecision,
    LawyerProfileCreation,
    LawyerProfileUpdate,
    LawyerRegistration,
    NewMessage,
    UserCredentials,
    UserRegistration,
    WalletDeposit,
)
from legal_eagle.api.utils import bearer_token
from legal_eagle.database.core import (
    appointment_funcs,
    auth_funcs,
    chat_funcs,
    lawyer_funcs,
    wallet_funcs,
)
from legal_eagle.database.core.principal import Principal, SharedUser
from legal_eagle.errors import AuthenticationError, AuthorizationError
from legal_eagle.realtime import events

router = APIRouter()
"""Creates the FastAPI router in which we define its routes"""


async def get_current_principal(request: Request) -> Principal:
    """
    Resolve the bearer token of the request to its principal.

    The raw token is kept on `request.state.token` for logout.

    Raises
    ------
    AuthenticationError
        Missing, invalid, expired or revoked token.
    """
    token = bearer_token(request.headers.get("Authorization"))
    principal = await run_in_threadpool(auth_funcs.validate_token, token=token) if token else None
    if principal is None:
        raise AuthenticationError("Authentication required")
    request.state.token = token
    return principal


def _registry(request: Request):
    return request.app.state.connection_registry


# -----------------------
# Auth
# -----------------------
@router.post("/auth/register", status_code=201)
async def register(data: UserRegistration):
    """Register a shared account and return its first session token."""
    return await run_in_threadpool(
        auth_funcs.register_user,
        name=data.name,
        email=data.email,
        password=data.password,
        role=data.role,
        admin_key=data.admin_key,
    )


@router.post("/auth/login")
async def login(data: UserCredentials):
    return await run_in_threadpool(auth_funcs.login_user, email=data.email, password=data.password)


@router.post("/auth/logout")
async def logout(request: Request, principal: Principal = Depends(get_current_principal)):
    """Revoke the session of the presented token; other sessions stay valid."""
    await run_in_threadpool(auth_funcs.revoke_session, principal=principal, token=request.state.token)
    return {"message": "Logged out successfully"}


@router.get("/auth/me")
async def me(principal: Principal = Depends(get_current_principal)):
    return principal.to_dict()


# -----------------------
# Lawyers
# -----------------------
@router.post("/lawyer/register", status_code=201)
async def register_lawyer(data: LawyerRegistration):
    return await run_in_threadpool(
        auth_funcs.register_lawyer,
        name=data.name,
        email=data.email,
        password=data.password,
        specialization=data.specialization,
        experience=data.experience,
        price_per_session=data.pricePerSession,
        bio=data.bio,
    )


@router.post("/lawyer/login")
async def login_lawyer(data: UserCredentials):
    return await run_in_threadpool(auth_funcs.login_lawyer, email=data.email, password=data.password)


@router.get("/lawyer")
async def list_lawyers(specialization: Optional[str] = None):
    return await run_in_threadpool(lawyer_funcs.list_lawyers, specialization=specialization)


@router.post("/lawyer", status_code=201)
async def create_lawyer_profile(data: LawyerProfileCreation, principal: Principal = Depends(get_current_principal)):
    return await run_in_threadpool(
        lawyer_funcs.create_lawyer_profile,
        principal=principal,
        name=data.name,
        specialization=data.specialization,
        experience=data.experience,
        price_per_session=data.pricePerSession,
        bio=data.bio,
        availability=[entry.model_dump() for entry in data.availability],
    )


@router.get("/lawyer/user/{user_id}")
async def get_lawyer_by_user(user_id: UUID):
    return await run_in_threadpool(lawyer_funcs.get_lawyer_by_user, user_id=user_id)


@router.get("/lawyer/{lawyer_id}")
async def get_lawyer(lawyer_id: UUID):
    return await run_in_threadpool(lawyer_funcs.get_lawyer, lawyer_id=lawyer_id)


@router.patch("/lawyer/{lawyer_id}")
async def update_lawyer(
    lawyer_id: UUID,
    data: LawyerProfileUpdate,
    principal: Principal = Depends(get_current_principal),
):
    return await run_in_threadpool(
        lawyer_funcs.update_lawyer,
        principal=principal,
        lawyer_id=lawyer_id,
        changes=data.model_dump(exclude_unset=True),
    )


@router.patch("/lawyer/{lawyer_id}/availability")
async def update_availability(
    lawyer_id: UUID,
    data: AvailabilityUpdate,
    principal: Principal = Depends(get_current_principal),
):
    return await run_in_threadpool(
        lawyer_funcs.update_availability,
        principal=principal,
        lawyer_id=lawyer_id,
        availability=[entry.model_dump() for entry in data.availability],
    )


# -----------------------
# Appointments
# -----------------------
@router.post("/appointments")
async def book_appointment(data: AppointmentBooking, principal: Principal = Depends(get_current_principal)):
    """
    Book a paid consultation.

    Response:
        201: the new appointment
        200: the existing qualifying appointment for the same lawyer and date (nothing charged)
    """
    if data.userId is not None and not (isinstance(principal, SharedUser) and principal.user_id == data.userId):
        raise AuthorizationError("Cannot book on behalf of another user")
    appointment, created = await run_in_threadpool(
        appointment_funcs.book_appointment,
        principal=principal,
        lawyer_id=data.lawyerId,
        slot_date=data.date,
        slot_time=data.time,
        notes=data.notes,
        duration=data.duration,
    )
    return JSONResponse(status_code=201 if created else 200, content=appointment)


@router.get("/appointments/user/{user_id}")
async def list_user_appointments(user_id: UUID, principal: Principal = Depends(get_current_principal)):
    return await run_in_threadpool(appointment_funcs.list_user_appointments, principal=principal, user_id=user_id)


@router.get("/appointments/lawyer/{lawyer_id}")
async def list_lawyer_appointments(lawyer_id: UUID, principal: Principal = Depends(get_current_principal)):
    return await run_in_threadpool(
        appointment_funcs.list_lawyer_appointments, principal=principal, lawyer_id=lawyer_id
    )


@router.get("/appointments/{appointment_id}")
async def get_appointment(appointment_id: UUID, principal: Principal = Depends(get_current_principal)):
    return await run_in_threadpool(
        appointment_funcs.get_appointment, principal=principal, appointment_id=appointment_id
    )


@router.patch("/appointments/{appointment_id}")
async def update_appointment(
    appointment_id: UUID,
    data: AppointmentUpdate,
    principal: Principal = Depends(get_current_principal),
):
    return await run_in_threadpool(
        appointment_funcs.update_appointment,
        principal=principal,
        appointment_id=appointment_id,
        status=data.status,
        notes=data.notes,
    )


# -----------------------
# Wallet
# -----------------------
@router.post("/wallet/add")
async def deposit(data: WalletDeposit, principal: Principal = Depends(get_current_principal)):
    return await run_in_threadpool(wallet_funcs.deposit, principal=principal, amount=data.amount, user_id=data.userId)


@router.get("/wallet/{user_id}")
async def get_balance(user_id: UUID, principal: Principal = Depends(get_current_principal)):
    return await run_in_threadpool(wallet_funcs.get_balance, principal=principal, user_id=user_id)


@router.get("/wallet/{user_id}/transactions")
async def list_transactions(
    user_id: UUID,
    page: int = Query(1, ge=1),
    limit: Optional[int] = Query(None, ge=1, le=100),
    principal: Principal = Depends(get_current_principal),
):
    return await run_in_threadpool(
        wallet_funcs.list_transactions, principal=principal, user_id=user_id, page=page, page_size=limit
    )


# -----------------------
# Chat
# -----------------------
@router.post("/chat")
async def create_chat(data: ChatCreation, request: Request, principal: Principal = Depends(get_current_principal)):
    """
    Open the chat room of the caller with a lawyer, or return the existing one.

    A new room starts pending and locked; the lawyer is notified with `newChatRequest`.
    """
    result = await run_in_threadpool(
        chat_funcs.create_chat_room,
        principal=principal,
        lawyer_id=data.lawyerId,
        force_creation=data.forceCreation,
        user_id=data.userId,
    )
    await events.publish_chat_request(_registry(request), result)
    return JSONResponse(status_code=201 if result["created"] else 200, content=result["chat"])


@router.get("/chat/user/{user_id}")
async def list_user_chats(user_id: UUID, principal: Principal = Depends(get_current_principal)):
    return await run_in_threadpool(chat_funcs.list_user_chats, principal=principal, user_id=user_id)


@router.get("/chat/lawyer/{lawyer_id}")
async def list_lawyer_chats(lawyer_id: UUID, principal: Principal = Depends(get_current_principal)):
    return await run_in_threadpool(chat_funcs.list_lawyer_chats, principal=principal, lawyer_id=lawyer_id)


@router.get("/chat/{chat_id}")
async def get_chat(chat_id: UUID, principal: Principal = Depends(get_current_principal)):
    return await run_in_threadpool(chat_funcs.get_chat_history, principal=principal, chat_id=chat_id)


@router.get("/chat/{chat_id}/status")
async def get_chat_status(chat_id: UUID, principal: Principal = Depends(get_current_principal)):
    return await run_in_threadpool(chat_funcs.get_chat_status, principal=principal, chat_id=chat_id)


@router.post("/chat/{chat_id}/message", status_code=201)
async def send_message(
    chat_id: UUID,
    data: NewMessage,
    request: Request,
    principal: Principal = Depends(get_current_principal),
):
    result = await run_in_threadpool(chat_funcs.send_message, principal=principal, chat_id=chat_id, text=data.text)
    await events.publish_message(_registry(request), result)
    return result["message"]


@router.patch("/chat/{chat_id}/read")
async def mark_as_read(chat_id: UUID, request: Request, principal: Principal = Depends(get_current_principal)):
    result = await run_in_threadpool(chat_funcs.mark_as_read, principal=principal, chat_id=chat_id)
    await events.publish_read(_registry(request), result)
    return {"chatId": result["chatId"], "updated": result["updated"]}


@router.post("/chat/{chat_id}/request")
async def decide_chat_request(
    chat_id: UUID,
    data: ChatRequestDecision,
    request: Request,
    principal: Principal = Depends(get_current_principal),
):
    """Lawyer accepts, declines or completes a chat request; the client gets `chatRequestUpdate`."""
    result = await run_in_threadpool(
        chat_funcs.decide_chat_request, principal=principal, chat_id=chat_id, action=data.action
    )
    await events.publish_decision(_registry(request), result)
    return result["chat"]


@router.post("/chat/{chat_id}/unlock")
async def unlock_chat(chat_id: UUID, request: Request, principal: Principal = Depends(get_current_principal)):
    result = await run_in_threadpool(chat_funcs.unlock_chat, principal=principal, chat_id=chat_id)
    await events.publish_unlock(_registry(request), result)
    return result["chat"]
