from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import RedirectResponse

from pulsehr.core.config import get_settings
from pulsehr.core.logging import setup_logging
from pulsehr.db import database
from pulsehr.routers import (
    analytics,
    assessments,
    auth,
    company_pages,
    documents,
    employees,
    hr_manuals,
    onboarding,
    performance,
    policies,
    system,
    training,
)
from pulsehr.services.admins import ensure_default_admin
from pulsehr.services.catalog import ensure_document_types


def create_app() -> FastAPI:
    settings = get_settings()
    setup_logging(settings.LOG_LEVEL)

    # Database + reference data
    database.init_db(settings.DATABASE_URL)
    with database.SessionLocal() as db:
        ensure_document_types(db)
        ensure_default_admin(db, settings.DEFAULT_ADMIN_USERNAME, settings.DEFAULT_ADMIN_PASSWORD)

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description="HR onboarding API (employees, documents, HR policies, assessments)",
    )

    # CORS
    origins = [o.strip() for o in (settings.CORS_ORIGINS or "").split(",") if o.strip()]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins or ["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Routers
    app.include_router(system.router)
    app.include_router(auth.router)
    app.include_router(employees.router)
    app.include_router(onboarding.router)
    app.include_router(documents.router)
    app.include_router(hr_manuals.router)
    app.include_router(policies.router)
    app.include_router(company_pages.router)
    app.include_router(assessments.router)
    app.include_router(performance.router)
    app.include_router(training.router)
    app.include_router(analytics.router)

    # Redirect root → docs
    @app.get("/", include_in_schema=False)
    async def root():
        return RedirectResponse(url="/docs")

    return app


app = create_app()
