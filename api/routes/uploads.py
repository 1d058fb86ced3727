from fastapi import APIRouter, File, HTTPException, Request, UploadFile
from starlette.concurrency import run_in_threadpool
from api.models.upload import UploadResponse
from services.upload_service import save_upload, UploadError, UploadTooLargeError
from config import settings
from typing import Optional
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["uploads"])


@router.post("/upload", response_model=UploadResponse)
async def upload_payment_proof(
    request: Request,
    file: Optional[UploadFile] = File(None)
):
    """Загрузить подтверждение оплаты, вернуть ссылку на файл"""
    if file is None or not file.filename:
        raise HTTPException(status_code=400, detail="No file uploaded")

    try:
        stored_name = await run_in_threadpool(
            save_upload,
            file.file,
            file.filename,
            settings.upload_path,
            settings.MAX_BODY_SIZE,
        )
    except UploadTooLargeError as e:
        raise HTTPException(status_code=413, detail=str(e))
    except UploadError:
        logger.exception(f"Failed to store upload {file.filename!r}")
        raise HTTPException(status_code=500, detail="File upload failed")
    finally:
        await file.close()

    return UploadResponse(url=str(request.url_for("uploads", path=stored_name)))
