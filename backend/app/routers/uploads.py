import logging

from fastapi import APIRouter, Depends, HTTPException, UploadFile, status
from fastapi import File as FastAPIFile

from ..dependencies import get_current_user
from ..models.user import User
from ..schemas.upload import UploadResult
from ..services.uploads import read_image_as_data_url

logger = logging.getLogger(__name__)

router = APIRouter(tags=["uploads"])


@router.post("/upload", response_model=UploadResult)
async def upload_file(
    file: UploadFile | None = FastAPIFile(default=None),
    current_user: User = Depends(get_current_user),
) -> UploadResult:
    if file is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No file uploaded")
    url, size = await read_image_as_data_url(file)
    logger.info(
        "Upload by user %s: %s (%s, %d bytes)", current_user.id, file.filename, file.content_type, size
    )
    return UploadResult(url=url, filename=file.filename, file_type=file.content_type, file_size=size)
