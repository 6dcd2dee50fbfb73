"""Certificate status, claim and public verification endpoints."""

from fastapi import APIRouter, Depends, Request

from journey.certificates.engine import CertificateEngine
from journey.core.config import settings
from journey.core.dependencies import (
    get_certificate_engine,
    get_current_user,
    known_course,
    require_known_course,
)
from journey.schemas.certificate import (
    CertificateOut,
    CertificateStatusResponse,
    CertificateVerifyResponse,
    ClaimRequest,
    ClaimResponse,
)

router = APIRouter(prefix="/certificates", tags=["certificates"])


def public_base(request: Request) -> str:
    if settings.PUBLIC_SITE_BASE_URL:
        return settings.PUBLIC_SITE_BASE_URL.rstrip("/")
    return str(request.base_url).rstrip("/")


@router.get("/status/{course_id}", response_model=CertificateStatusResponse)
async def certificate_status(
    request: Request,
    course_id: str = Depends(known_course),
    current_user: dict = Depends(get_current_user),
    engine: CertificateEngine = Depends(get_certificate_engine),
):
    """Eligibility checklist plus issued certificate links."""
    user_id = current_user["user_id"]
    snapshot = await engine.eligibility(user_id, course_id)
    certificate = await engine.get_certificate(user_id, course_id)

    response = CertificateStatusResponse(
        course_id=course_id,
        eligible=snapshot.eligible,
        total_lessons=snapshot.total_lessons,
        completed_lessons=snapshot.completed_lessons,
        exam_passed=snapshot.exam_passed,
        exam_score=snapshot.exam_score,
        issued=certificate is not None,
    )
    if certificate is not None:
        base = public_base(request)
        response.certificate_id = certificate.id
        response.issued_at = certificate.issued_at
        response.pdf_url = f"{base}/certificates/{course_id}/pdf"
        response.view_url = f"{base}/certificates/{course_id}/view"
        response.verify_url = f"{base}/certificates/verify/{certificate.id}"
    return response


@router.post("/claim", response_model=ClaimResponse)
async def claim_certificate(
    body: ClaimRequest,
    current_user: dict = Depends(get_current_user),
    engine: CertificateEngine = Depends(get_certificate_engine),
):
    """Issue the certificate once eligible; repeated claims return the same one."""
    course_id = require_known_course(body.course_id)
    certificate = await engine.ensure_certificate(current_user["user_id"], course_id)
    return ClaimResponse(certificate=CertificateOut.model_validate(certificate))


@router.get("/verify/{certificate_id}", response_model=CertificateVerifyResponse)
async def verify_certificate(
    certificate_id: int,
    engine: CertificateEngine = Depends(get_certificate_engine),
):
    """Public lookup used by the QR code on printed certificates."""
    certificate = await engine.verify(certificate_id)
    return CertificateVerifyResponse(
        certificate_id=certificate.id,
        course_id=certificate.course_id,
        issued_at=certificate.issued_at,
    )
