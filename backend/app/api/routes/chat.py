from fastapi import APIRouter, Depends, Query

from app.api.deps import get_chat_service, get_store, resolve_user_id
from app.core.config import Settings, get_settings
from app.schemas.chat import ChatMessageOut, ChatReply, ChatRequest
from app.services.chat import ChatService
from app.services.store import SqlAlchemyStore

router = APIRouter()


@router.post("/", response_model=ChatReply)
def send_message(
    payload: ChatRequest,
    store: SqlAlchemyStore = Depends(get_store),
    service: ChatService = Depends(get_chat_service),
    settings: Settings = Depends(get_settings),
) -> ChatReply:
    user_id = resolve_user_id(store, payload.user_id, settings)
    return service.process_message(user_id, payload.message)


@router.get("/history/{user_id}", response_model=list[ChatMessageOut])
def chat_history(
    user_id: str,
    limit: int | None = Query(default=None, ge=1, le=500),
    store: SqlAlchemyStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
) -> list[ChatMessageOut]:
    return store.list_chat_history(user_id, limit=limit or settings.chat_history_limit)
