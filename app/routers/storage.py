"""
Upload endpoint:
  POST /storage — multipart {key, file}; stores the file under its content
                  hash and returns the public URL as plain text
"""
import logging

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status
from fastapi.responses import PlainTextResponse
from opentelemetry import trace

from app.auth import Identity, get_identity
from app.clients.storage_client import content_key, missing_setting, public_url, put_object
from app.config import settings
from app.telemetry import UPLOADS_TOTAL

logger = logging.getLogger(__name__)
router = APIRouter()
tracer = trace.get_tracer(__name__)


@router.post("", response_class=PlainTextResponse)
async def upload(
    key: str = Form(...),
    file: UploadFile = File(...),
    identity: Identity = Depends(get_identity),
):
    missing = missing_setting()
    if missing:
        raise HTTPException(status_code=500, detail=f"{missing} is not defined")
    if identity.uid is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")

    with tracer.start_as_current_span("upload") as span:
        data = await file.read()
        object_key = content_key(data, key, settings.s3_folder)
        span.set_attribute("storage.key", object_key)
        try:
            put_object(object_key, data, file.content_type)
        except Exception as exc:
            UPLOADS_TOTAL.labels(outcome="error").inc()
            logger.error("Upload of %s failed: %s", object_key, exc)
            raise HTTPException(status_code=400, detail=str(exc))

        UPLOADS_TOTAL.labels(outcome="ok").inc()
        logger.info("Stored %s (%d bytes) for user %s", object_key, len(data), identity.uid)
        return public_url(object_key)
