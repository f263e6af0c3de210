from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.openapi.utils import get_openapi
from fastapi.responses import JSONResponse
import os
import logging

from licensing.config import settings
from licensing.workflow.errors import WorkflowError

# Init app
app = FastAPI(title="Municipal Licensing Workflow")

# Enable logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# CORS Setup
origins = [
    "http://localhost",
    "http://localhost:3000",
    "http://127.0.0.1:3000",
    "http://localhost:8000",
    "http://127.0.0.1:8000",
    settings.FRONTEND_URL,
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    max_age=600
)

os.makedirs(settings.STORAGE_DIR, exist_ok=True)


# Custom OpenAPI
def custom_openapi():
    if app.openapi_schema:
        return app.openapi_schema

    openapi_schema = get_openapi(
        title=app.title,
        version="1.0.0",
        description="Licensing workflow API - Applicants, Engineers, Clerks and certificate issuance",
        routes=app.routes,
    )

    components = openapi_schema.setdefault("components", {})
    components.setdefault("securitySchemes", {})["BearerAuth"] = {
        "type": "http",
        "scheme": "bearer",
        "bearerFormat": "JWT",
        "description": "Enter JWT token in the format: Bearer <token>"
    }

    for path_name, path_item in openapi_schema["paths"].items():
        if any(public_path in path_name for public_path in ["/login", "/register", "/health", "/callback"]):
            continue
        for method_name, method_item in path_item.items():
            if method_name in ["get", "post", "put", "delete", "patch"]:
                method_item.setdefault("security", []).append({"BearerAuth": []})

    app.openapi_schema = openapi_schema
    return app.openapi_schema


app.openapi = custom_openapi

# Route Registrations
from licensing.routes import (  # noqa: E402
    applicant_auth_router,
    officer_auth_router,
    applications_router,
    workflow_router,
    payment_router,
    notifications_router,
    health_router,
)

routers = [
    applicant_auth_router,
    officer_auth_router,
    applications_router,
    workflow_router,
    payment_router,
    notifications_router,
    health_router,
]

for router in routers:
    app.include_router(router)
    logger.info(f"Included router: {router.prefix}")


# Root endpoint
@app.get("/", include_in_schema=False)
def root():
    return {
        "status": "ok",
        "message": "Welcome to the Municipal Licensing Workflow API",
        "version": "1.0.0",
        "docs": "/docs",
        "endpoints": [
            "/applicant/* - Applicant registration and login",
            "/officer/* - Officer login",
            "/applications/* - Drafts, documents, submission and certificates",
            "/workflow/* - Officer queues, appointments, approvals and signatures",
            "/payment/* - Fee payment",
            "/notifications/* - In-app notifications",
            "/api/health - System health check"
        ]
    }


# Workflow errors carry their own status and error code
@app.exception_handler(WorkflowError)
async def workflow_error_handler(request: Request, exc: WorkflowError):
    if exc.status_code >= 500:
        logger.error(f"❌ {exc.error_code} on {request.url.path}: {exc.message}")
    else:
        logger.info(f"{exc.error_code} on {request.url.path}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(500)
async def internal_error_handler(request: Request, exc: Exception):
    logger.error(f"Internal server error: {exc}")
    return Response(status_code=500, content="Internal server error")


# Startup event
@app.on_event("startup")
async def startup_event():
    logger.info("🚀 Licensing workflow backend starting up...")
    logger.info(f"📁 Storage directory: {settings.STORAGE_DIR}")
    logger.info(f"💳 Payment gateway mode: {'mock' if settings.PAYMENT_MOCK_MODE else 'live'}")
    logger.info("✅ Server is ready to handle requests")


# Shutdown event
@app.on_event("shutdown")
async def shutdown_event():
    logger.info("🛑 Licensing workflow backend shutting down...")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "licensing.main:app",
        host="127.0.0.1",
        port=8000,
        reload=True,
        log_level="info"
    )
