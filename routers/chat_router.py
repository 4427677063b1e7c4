from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from models.common_models import ChatRequest, ChatResponse
from routers.dependencies import get_dataset_store, get_llm_service, load_session_dataset
from services.chat_service import answer_question
from services.llm_service import GenerationServiceError, LLMService
from services.session_service import DatasetStore, get_db

router = APIRouter(prefix="/chat", tags=["chat"])

# sync handler: the model call and rendering run in the threadpool
@router.post("/message", response_model=ChatResponse)
def chat_message(
    req: ChatRequest,
    db: Session = Depends(get_db),
    store: DatasetStore = Depends(get_dataset_store),
    llm: LLMService = Depends(get_llm_service),
):
    dataset = load_session_dataset(req.session_id, db, store)

    try:
        return answer_question(dataset, req, llm)
    except GenerationServiceError as e:
        # Recoverable: the client can offer a retry
        return JSONResponse(
            status_code=502 if e.configured else 503,
            content={"detail": str(e), "retryable": e.retryable},
        )
