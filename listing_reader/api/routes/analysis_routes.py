"""
API routes for purchase-file analysis in the Listing Reader.

`POST /analyze` accepts a multipart form (listing link, free-text
description, documents and photos) and returns the reasoning service's
consistency reading. `GET /health` reports process and rendering engine state.
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Request, UploadFile, status

from listing_reader.api.models import AnalysisReport, ErrorResponse, HealthResponse
from listing_reader.components.analysis.prompt_builder import INSUFFICIENT_INFORMATION, PurchaseFile, SubmittedFile
from listing_reader.components.renderer.engine_manager import RenderEngineManager
from listing_reader.core.exceptions import InsufficientInformationError
from listing_reader.core.logger import get_logger
from listing_reader.core.manager import AnalysisManager

logger = get_logger(__name__)

MAX_DOCUMENTS = 10
MAX_PHOTOS = 20

router = APIRouter()


# --- Dependencies ---
# Both managers are created once in the application lifespan (see api/main.py).

def get_engine_manager(request: Request) -> RenderEngineManager:
    return request.app.state.engine_manager


def get_analysis_manager(request: Request) -> AnalysisManager:
    return request.app.state.analysis_manager


async def _read_uploads(uploads: Optional[List[UploadFile]], field_name: str, limit: int) -> List[SubmittedFile]:
    uploads = uploads or []
    if len(uploads) > limit:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Too many files in '{field_name}' (maximum {limit}).",
        )
    files = []
    for upload in uploads:
        files.append(SubmittedFile(
            filename=upload.filename or "",
            content_type=upload.content_type or "application/octet-stream",
            data=await upload.read(),
        ))
    return files


@router.post(
    "/analyze",
    summary="Analyze a vehicle purchase file",
    description="Reads the listing behind `annonceLink` (best effort), combines it with the "
                "description and uploaded files, and asks the reasoning service for a factual "
                "consistency reading.",
    responses={200: {"model": AnalysisReport}, 500: {"model": ErrorResponse}},
)
async def analyze_endpoint(
    annonceLink: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    documents: Optional[List[UploadFile]] = File(None),
    photos: Optional[List[UploadFile]] = File(None),
    manager: AnalysisManager = Depends(get_analysis_manager),
):
    logger.info(
        f"Analysis request received: description={len(description or '')} chars, "
        f"link={annonceLink or 'none'}, documents={len(documents or [])}, photos={len(photos or [])}."
    )
    purchase_file = PurchaseFile(
        listing_url=annonceLink,
        description=description,
        documents=await _read_uploads(documents, "documents", MAX_DOCUMENTS),
        photos=await _read_uploads(photos, "photos", MAX_PHOTOS),
    )

    try:
        return await manager.analyze(purchase_file)
    except InsufficientInformationError as e:
        logger.info(f"Answering with insufficient-information notice: {e.message}")
        return {"erreur": INSUFFICIENT_INFORMATION}


@router.get("/health", response_model=HealthResponse, summary="Service health")
async def health_endpoint(engine_manager: RenderEngineManager = Depends(get_engine_manager)):
    return HealthResponse(status="ok", browser=engine_manager.status)
