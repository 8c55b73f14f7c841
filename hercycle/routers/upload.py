"""License document upload used by the doctor registration form."""
from fastapi import APIRouter, Depends, File, Request, UploadFile
from hercycle.dependencies.rate_limit import rate_limit
from hercycle.schemas.upload import UploadedFile
from hercycle.services import storage_service

router = APIRouter(prefix="/api/upload", tags=["upload"])


@router.post("/license", response_model=UploadedFile)
async def upload_license(
    request: Request,
    license_document: UploadFile = File(None, alias="licenseDocument"),
    _: None = Depends(rate_limit),
):
    """Accepts PDF, JPEG, JPG or PNG up to 5MB. Anonymous: applicants upload before registering."""
    stored = await storage_service.save_license_document(license_document)
    url = stored.url
    if url.startswith("/"):
        url = f"{str(request.base_url).rstrip('/')}{url}"
    return UploadedFile(
        url=url,
        filename=stored.filename,
        original_name=stored.original_name,
        size=stored.size,
        mimetype=stored.mimetype,
    )
