"""Proof document upload route"""

from fastapi import APIRouter, File, UploadFile

from resolveit.api.dependencies import Storage
from resolveit.config import settings
from resolveit.core.exceptions import ValidationError

router = APIRouter()


@router.post("/upload-proof")
async def upload_proof(
    store: Storage,
    proof: list[UploadFile] = File(...),
):
    """Store up to MAX_UPLOAD_FILES files and return their references."""
    limit = settings.MAX_UPLOAD_FILES
    if len(proof) > limit:
        raise ValidationError(f"At most {limit} files can be uploaded at once.")

    files = [(await f.read(), f.filename or "upload") for f in proof]
    references = await store.save_many(files)
    return {"message": "Files uploaded!", "files": references}
