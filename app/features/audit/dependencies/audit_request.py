from typing import Optional

from fastapi import Depends, Query

from app.features.audit.schemas.audit import AuditRequest
from app.features.audit.services.audit import PLATFORMS
from app.platform.exceptions import InvalidInputError
from app.platform.i18n import TranslationCatalog, get_translations
from app.platform.utils.url_validator import validate_url


def _require_url(url: Optional[str], lang: str, translations: TranslationCatalog) -> str:
    if not url or not url.strip():
        raise InvalidInputError(translations.get(lang, "api.missingUrl"))
    return url


async def get_audit_request(
    url: Optional[str] = Query(default=None),
    platform: str = Query(default="web"),
    lang: Optional[str] = Query(default=None),
    translations: TranslationCatalog = Depends(get_translations),
) -> AuditRequest:
    """
    Query parameters of the mock audit.

    - `url` is required and must parse as an http(s) URL
    - `platform` must be "web" or "mobile"
    - an unknown `lang` silently becomes the default locale
    """
    lang = translations.resolve_lang(lang)
    url = _require_url(url, lang, translations)

    is_valid, normalized_url, _ = validate_url(url)
    if not is_valid:
        raise InvalidInputError(
            translations.get(lang, "api.invalidUrl", url=normalized_url),
            details={"url": url},
        )

    if platform not in PLATFORMS:
        raise InvalidInputError(translations.get(lang, "api.invalidPlatform"))

    return AuditRequest(url=url, platform=platform, lang=lang)


async def get_url_request(
    url: Optional[str] = Query(default=None),
    lang: Optional[str] = Query(default=None),
    translations: TranslationCatalog = Depends(get_translations),
) -> AuditRequest:
    """Query parameters of the browser driven audits (no platform)."""
    lang = translations.resolve_lang(lang)
    url = _require_url(url, lang, translations)
    return AuditRequest(url=url, lang=lang)
