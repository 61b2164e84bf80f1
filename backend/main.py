#!/usr/bin/env python3
"""
Self-hosted app deployer - Backend API

Accepts deployment requests for a fixed catalog of self-hosted applications.
Sensitive configuration fields may arrive encrypted client-side (AES-GCM);
they are decrypted and the whole configuration is validated before any
deployment is started.
"""

import asyncio
import logging
from contextlib import asynccontextmanager

import docker
from docker.errors import DockerException
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config.settings import AppConfig, setup_logging, HealthCheckFilter
from deployment import routes as deployment_routes

# Configure logging
setup_logging()
logger = logging.getLogger(__name__)


def connect_docker():
    """
    Connect to the local Docker daemon (DOCKER_HOST etc. from environment).

    Returns:
        DockerClient, or None if the daemon is unreachable
    """
    try:
        client = docker.from_env()
        client.ping()
    except (DockerException, OSError) as e:
        logger.error(f"Failed to connect to Docker daemon: {e}")
        return None

    logger.info(f"Successfully connected to Docker daemon. API Version: {client.api.api_version}")
    return client


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifecycle"""
    # Validate configuration early to fail fast on misconfiguration
    AppConfig.validate()

    logger.info("Starting deployer backend...")

    # Reapply health check filter to uvicorn access logger (must be done after uvicorn starts)
    uvicorn_access = logging.getLogger("uvicorn.access")
    uvicorn_access.addFilter(HealthCheckFilter())

    loop = asyncio.get_running_loop()
    app.state.docker_client = await loop.run_in_executor(None, connect_docker)

    yield

    logger.info("Shutting down deployer backend...")
    if app.state.docker_client is not None:
        try:
            app.state.docker_client.close()
        except (DockerException, OSError) as e:
            logger.error(f"Error closing Docker client: {e}")


app = FastAPI(
    title="Self-hosted Deployer API",
    version="1.0.0",
    lifespan=lifespan
)

cors_config = AppConfig.CORS_ORIGINS
if cors_config:
    origins_list = [origin.strip() for origin in cors_config.split(',')]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins_list,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )
    logger.info(f"CORS configured for specific origins: {origins_list}")
else:
    app.add_middleware(
        CORSMiddleware,
        allow_origin_regex=".*",
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )
    logger.info("CORS configured to allow all origins")


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """
    Custom handler for Pydantic validation errors.
    Returns field-level details without echoing submitted values.
    """
    errors = []
    for error in exc.errors():
        field = " -> ".join(str(x) for x in error['loc'])
        errors.append({
            "field": field,
            "message": error['msg'],
            "type": error['type']
        })

    logger.warning(f"Request validation failed for {request.url.path}: {[e['field'] for e in errors]}")

    return JSONResponse(
        status_code=422,
        content={
            "detail": "Invalid request data",
            "errors": errors
        }
    )


app.include_router(deployment_routes.router)


@app.get("/health")
async def health_check():
    """Health check endpoint for Docker health checks"""
    return {"status": "healthy", "service": "selfhost-deployer"}


@app.get("/")
async def root():
    """Backend API root - frontend is served separately"""
    return {"message": "Self-hosted Deployer API", "version": "1.0.0", "docs": "/docs"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=AppConfig.HOST, port=AppConfig.PORT, log_level=AppConfig.LOG_LEVEL.lower())
