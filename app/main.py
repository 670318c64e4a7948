import asyncio
import random
import threading
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, Callable, Dict, Mapping, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from app.api_routers.v1 import api_router
from app.features.audit.services.audit import MockAuditService
from app.features.health.routes.health import router as health_router
from app.features.lighthouse.services.lighthouse_service import LighthouseService
from app.features.lighthouse.services.runner import LighthouseRunner
from app.features.ux_audit.services.ux_audit_service import UXAuditService
from app.middlewares.request_timeout import RequestTimeoutMiddleware
from app.platform.browser import ChromeLauncher
from app.platform.config import Settings, get_settings
from app.platform.drivers import LIGHTHOUSE, MOCK_AUDIT, UX_AUDIT, DriverRegistry
from app.platform.exceptions import add_exception_handlers
from app.platform.i18n import TranslationCatalog
from app.platform.logger import get_logger

logger = get_logger("app")

DriverFactories = Mapping[str, Callable[[], Any]]


def default_driver_factories(settings: Settings, translations: TranslationCatalog) -> Dict[str, Callable[[], Any]]:
    launcher = ChromeLauncher(settings)
    return {
        MOCK_AUDIT: lambda: MockAuditService(
            translations,
            rng=random.Random(settings.MOCK_AUDIT_SEED),
            delay_seconds=settings.MOCK_AUDIT_DELAY_SECONDS,
        ),
        LIGHTHOUSE: lambda: LighthouseService(
            translations,
            launcher=launcher,
            runner=LighthouseRunner(settings.LIGHTHOUSE_BIN, settings.LIGHTHOUSE_TIMEOUT_SECONDS),
        ),
        UX_AUDIT: lambda: UXAuditService(translations, launcher=launcher, settings=settings),
    }


def _log_loop_exception(loop, context):
    exc = context.get("exception")
    logger.error(f"Uncaught exception in event loop: {context.get('message')}", exc_info=exc)


def _log_thread_exception(args):
    logger.error(
        f"Uncaught exception in thread {args.thread.name if args.thread else '?'}",
        exc_info=(args.exc_type, args.exc_value, args.exc_traceback),
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Keep serving when something blows up outside a request
    asyncio.get_running_loop().set_exception_handler(_log_loop_exception)
    threading.excepthook = _log_thread_exception
    logger.info(f"{app.title} started")
    yield
    logger.info(f"{app.title} stopped")


def create_app(
    settings: Optional[Settings] = None,
    translations: Optional[TranslationCatalog] = None,
    driver_factories: Optional[DriverFactories] = None,
) -> FastAPI:
    settings = settings or get_settings()
    translations = translations or TranslationCatalog.from_directory(
        settings.LOCALES_DIR,
        default_lang=settings.DEFAULT_LANG,
        fallback_lang=settings.FALLBACK_LANG,
    )

    app = FastAPI(
        title=settings.APP_NAME,
        description="Website UX, performance and accessibility audits",
        version="1.0.0",
        debug=settings.DEBUG,
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.translations = translations
    if driver_factories is None:
        driver_factories = default_driver_factories(settings, translations)
    app.state.drivers = DriverRegistry.build(driver_factories)

    add_exception_handlers(app)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(
        RequestTimeoutMiddleware,
        timeout=settings.REQUEST_TIMEOUT_SECONDS,
        message=translations.get(settings.DEFAULT_LANG, "api.requestTimeout"),
    )

    app.include_router(health_router)
    app.include_router(api_router, prefix="/api")

    # Locale tables and the front page are plain static files
    app.mount("/lang", StaticFiles(directory=settings.LOCALES_DIR), name="lang")
    static_dir = Path(settings.STATIC_DIR)
    static_dir.mkdir(parents=True, exist_ok=True)
    app.mount("/", StaticFiles(directory=str(static_dir), html=True), name="static")

    return app


app = create_app()
