"""
FastAPI application entry point.
"""

from fastapi import FastAPI

from sonar_gitlab_webhook import __version__
from sonar_gitlab_webhook.config import settings
from sonar_gitlab_webhook.api import webhooks
from sonar_gitlab_webhook.utils.logging import setup_logging, get_logger

# Configure structured logging
setup_logging(settings.log_level)

logger = get_logger(__name__)

# Create FastAPI application
app = FastAPI(
    title="SonarQube GitLab Webhook",
    description="Relays SonarQube quality gate results to GitLab commits and merge requests",
    version=__version__
)


@app.get("/health")
async def health_check():
    """Health check endpoint for container orchestration."""
    return {"status": "healthy", "version": __version__}


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "SonarQube GitLab Webhook API",
        "version": __version__,
        "docs": "/docs"
    }


# Include API routers
app.include_router(webhooks.router)


@app.on_event("startup")
async def startup_event():
    """Log effective configuration on application startup."""
    logger.info(
        "Starting SonarQube GitLab Webhook API",
        extra={
            "gitlab_url": settings.gitlab_url,
            "property_prefix": settings.property_prefix,
            "signature_verification": bool(settings.webhook_secret),
        }
    )
    if not settings.gitlab_url or not settings.gitlab_token:
        logger.warning("GITLAB_URL or GITLAB_TOKEN is not set, comments will be rejected")


def run() -> None:
    """Serve the application with uvicorn."""
    import uvicorn
    logger.info(f"Listening on {settings.host}:{settings.port}...")
    uvicorn.run(app, host=settings.host, port=settings.port, log_config=None)


if __name__ == "__main__":
    run()
