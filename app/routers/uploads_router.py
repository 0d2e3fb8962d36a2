from dataclasses import asdict
from fastapi import APIRouter, Depends, File, Request, UploadFile
import logging

from ..application.dto import UploadableFile
from ..application.services.upload_service import UploadService
from ..schemas.common.common import ErrorResponse, MessageResponse
from ..schemas.uploads.uploads import (
    Base64UploadRequest, CacheEntryOut, DeleteRequest, DeleteResponse, PreviewResponse,
    UploadMetadataResponse, UploadResponse
)

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/uploads",
    tags=["Uploads"],
    responses={code: {"model": ErrorResponse} for code in (400, 404, 413, 415, 422, 503)},
)


def get_upload_service(request: Request) -> UploadService:
    return request.app.state.upload_service


async def _to_uploadable(file: UploadFile) -> UploadableFile:
    data = await file.read()
    return UploadableFile.from_bytes(data, file.content_type or "", file.filename or "upload")


@router.post("/images", response_model=UploadResponse)
async def upload_image(file: UploadFile = File(...), service: UploadService = Depends(get_upload_service)):
    result = await service.upload_image(await _to_uploadable(file))
    return UploadResponse(**asdict(result))


@router.post("/images/base64", response_model=UploadResponse)
async def upload_base64_image(body: Base64UploadRequest, service: UploadService = Depends(get_upload_service)):
    result = await service.upload_base64(body.image, body.filename)
    return UploadResponse(**asdict(result))


@router.post("/preview", response_model=PreviewResponse)
async def create_preview(file: UploadFile = File(...), service: UploadService = Depends(get_upload_service)):
    preview = await service.create_image_preview(await _to_uploadable(file))
    return PreviewResponse(preview=preview)


# refs may be whole data URLs, too long for a query string
@router.post("/images/delete", response_model=DeleteResponse)
async def delete_image(body: DeleteRequest, service: UploadService = Depends(get_upload_service)):
    deleted = await service.delete_image(body.ref)
    return DeleteResponse(deleted=deleted)


@router.get("/metadata", response_model=UploadMetadataResponse)
def get_metadata(service: UploadService = Depends(get_upload_service)):
    entries = service.get_uploaded_images_metadata()
    images = {ref: CacheEntryOut(**asdict(entry)) for ref, entry in entries.items()}
    return UploadMetadataResponse(images=images, count=len(images))


@router.delete("/cache", response_model=MessageResponse)
def clear_cache(service: UploadService = Depends(get_upload_service)):
    service.clear_image_cache()
    return MessageResponse(message="Image cache cleared")
