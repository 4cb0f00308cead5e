from fastapi import APIRouter, Depends, HTTPException, Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from api.dependencies import get_feedback_store
from config import settings
from models.requests import DocumentVerifyRequest, ExtractRequest, VerifyRequest
from models.responses import FactualAccuracyReport
from models.schemas import ExtractedResumeData, FeedbackRecord, VerificationResult
from services import feedback_service
from services.feedback_store import FeedbackStore, VersionConflictError
from services.pipeline.extraction import extract_entities
from services.pipeline.verifier import verify_entity_preservation

router = APIRouter()
limiter = Limiter(key_func=get_remote_address)


@router.get("/health")
async def health():
    return {
        "status": "ok",
        "store_backend": settings.feedback_store_backend,
    }


@router.post("/extract", response_model=ExtractedResumeData)
@limiter.limit(settings.rate_limit)
async def extract(request: Request, body: ExtractRequest):
    return extract_entities(body.text)


@router.post("/verify", response_model=VerificationResult)
@limiter.limit(settings.rate_limit)
async def verify(request: Request, body: VerifyRequest):
    return verify_entity_preservation(body.entities, body.text)


@router.post(
    "/documents/{document_id}/extractions",
    response_model=FeedbackRecord,
    status_code=201,
)
@limiter.limit(settings.rate_limit)
async def create_extraction(
    request: Request,
    document_id: str,
    body: ExtractRequest,
    store: FeedbackStore = Depends(get_feedback_store),
):
    try:
        return feedback_service.analyze_and_store(store, document_id, body.text)
    except VersionConflictError as e:
        raise HTTPException(status_code=409, detail=str(e))


@router.get("/documents/{document_id}/extractions", response_model=list[FeedbackRecord])
async def list_extractions(
    document_id: str,
    store: FeedbackStore = Depends(get_feedback_store),
):
    return feedback_service.get_feedback_history(store, document_id)


@router.get("/documents/{document_id}/extractions/{version}", response_model=FeedbackRecord)
async def get_extraction(
    document_id: str,
    version: int,
    store: FeedbackStore = Depends(get_feedback_store),
):
    record = store.get(document_id, version)
    if record is None:
        raise HTTPException(
            status_code=404,
            detail=f"No extraction found for version {version} of {document_id}",
        )
    return record


@router.post("/documents/{document_id}/verify", response_model=FactualAccuracyReport)
@limiter.limit(settings.rate_limit)
async def verify_document(
    request: Request,
    document_id: str,
    body: DocumentVerifyRequest,
    store: FeedbackStore = Depends(get_feedback_store),
):
    try:
        return feedback_service.verify_optimized_content(
            store, document_id, body.text, version=body.version
        )
    except feedback_service.EntityDataNotFoundError as e:
        raise HTTPException(status_code=404, detail=f"Cannot verify accuracy: {e}")
