from fastapi import APIRouter, Depends

from app.features.audit.dependencies.audit_request import get_url_request
from app.features.audit.schemas.audit import AuditRequest
from app.platform.drivers import LIGHTHOUSE, DriverRegistry, get_drivers
from app.platform.exceptions import DriverFailure
from app.platform.i18n import TranslationCatalog, get_translations
from app.platform.logger import get_logger
from app.platform.response import api_response

logger = get_logger("lighthouse_routes")
router = APIRouter()


@router.get("/lighthouse", tags=["Lighthouse"])
async def lighthouse_audit(
    audit_in: AuditRequest = Depends(get_url_request),
    translations: TranslationCatalog = Depends(get_translations),
    drivers: DriverRegistry = Depends(get_drivers),
):
    logger.info(f"Starting Lighthouse audit for URL: {audit_in.url}")

    service = drivers.get(
        LIGHTHOUSE, message=translations.get(audit_in.lang, "api.serviceUnavailable")
    )

    try:
        report = await service.run_audit(audit_in.url, audit_in.lang)
    except Exception as e:
        logger.error(f"Lighthouse audit failed for {audit_in.url}: {e}", exc_info=True)
        raise DriverFailure(
            translations.get(audit_in.lang, "api.lighthouseFailed"), details=str(e)
        ) from e

    return api_response(data=report)
