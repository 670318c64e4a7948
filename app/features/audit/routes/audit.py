from fastapi import APIRouter, Depends

from app.features.audit.dependencies.audit_request import get_audit_request
from app.features.audit.schemas.audit import AuditRequest
from app.platform.drivers import MOCK_AUDIT, DriverRegistry, get_drivers
from app.platform.exceptions import DriverFailure
from app.platform.i18n import TranslationCatalog, get_translations
from app.platform.logger import get_logger
from app.platform.response import api_response

logger = get_logger("audit_routes")
router = APIRouter()


@router.get("/audit", tags=["Audit"])
async def audit_page(
    audit_in: AuditRequest = Depends(get_audit_request),
    translations: TranslationCatalog = Depends(get_translations),
    drivers: DriverRegistry = Depends(get_drivers),
):
    logger.info(f"Starting mock audit for URL: {audit_in.url} (platform={audit_in.platform})")

    service = drivers.get(
        MOCK_AUDIT, message=translations.get(audit_in.lang, "api.serviceUnavailable")
    )

    try:
        report = await service.run_audit(audit_in.url, audit_in.platform, audit_in.lang)
    except Exception as e:
        logger.error(f"Mock audit failed for {audit_in.url}: {e}", exc_info=True)
        raise DriverFailure(
            translations.get(audit_in.lang, "api.auditFailed"), details=str(e)
        ) from e

    return api_response(data=report)
