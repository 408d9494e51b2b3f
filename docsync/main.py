"""
Documentation Sync FastAPI App
"""

import uvicorn
from fastapi import FastAPI
from pydantic import BaseModel
from typing import List, Optional
from contextlib import asynccontextmanager

from docsync.utils.logger import setup_logging, get_logger
from docsync.utils.correlation import generate_run_id
from docsync.orchestrator.plan import OriginatingChange
from docsync.orchestrator.runner import run_reconciliation_pipeline
from docsync.config import config, load_doc_config

setup_logging()
logger = get_logger(__name__, "DocSyncAPI")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.
    """
    logger.info("Docs Sync API starting...", run_id="SYSTEM")
    logger.info(f"Version: {app.version}", run_id="SYSTEM")
    logger.info(f"Log Level: {config.LOG_LEVEL}", run_id="SYSTEM")
    logger.info(f"Generator model: {config.GENERATOR_MODEL}", run_id="SYSTEM")
    logger.info("Docs Sync app is running and ready to serve requests", run_id="SYSTEM")
    yield
    logger.info("Docs Sync API shutting down", run_id="SYSTEM")


# FastAPI Application
app = FastAPI(
    title="Docs Sync Agent API",
    description="Keeps documentation in step with code changes through a single docs PR per change",
    version="1.0.0",
    lifespan=lifespan,
)


class ReconcileRequest(BaseModel):
    """Request model for documentation reconciliation."""
    owner: str
    repo: str
    pull_number: Optional[int] = None
    changed_paths: Optional[List[str]] = None
    labels: Optional[List[str]] = None
    base_branch: Optional[str] = None


@app.get("/")
async def root():
    return {
        "name": "Docs Sync API",
        "version": app.version,
        "status": "running",
        "features": [
            "Source to documentation path matching",
            "Single documentation branch per change",
            "Documentation PR create-or-update",
            "LLM content generation with quality gate",
            "Navigation updates for new pages",
        ],
        "endpoints": {
            "root": "/",
            "health": "/health",
            "reconcile": "/reconcile",
        },
    }


@app.get("/health")
async def health_check():
    return {"status": "healthy", "version": app.version}


@app.post("/reconcile")
def reconcile_docs(request: ReconcileRequest):
    run_id = generate_run_id()
    logger.info(
        f"Reconcile request received | "
        f"Repository: {request.owner}/{request.repo} | "
        f"PR: {request.pull_number if request.pull_number is not None else 'none'} | "
        f"Paths: {len(request.changed_paths) if request.changed_paths is not None else 'from PR'}",
        run_id=run_id,
    )

    try:
        result = run_reconciliation_pipeline(
            change=OriginatingChange(owner=request.owner, repo=request.repo, number=request.pull_number),
            changed_paths=request.changed_paths,
            doc_config=load_doc_config(),
            labels=request.labels,
            base_branch=request.base_branch,
            run_id=run_id,
        )
    except Exception as e:
        logger.exception(f"Reconciliation failed: {e}", run_id=run_id)
        return {
            "status": "error",
            "run_id": run_id,
            "error_type": type(e).__name__,
            "error": str(e),
            "message": "Documentation reconciliation failed. Please check the error details.",
        }

    if result.pull_request_number is not None:
        logger.info(
            f"Docs PR #{result.pull_request_number} "
            f"{'created' if result.pull_request_created else 'updated'}",
            run_id=run_id,
        )

    return {
        "status": "success",
        "run_id": run_id,
        "branch": result.branch,
        "pull_request_number": result.pull_request_number,
        "pull_request_created": result.pull_request_created,
        "files_written": result.files_written,
        "steps": result.execution_log,
    }


def start_server():
    uvicorn.run(
        "docsync.main:app",
        host=config.API_HOST,
        port=config.API_PORT,
        log_level=config.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    logger.info("Starting Docs Sync server", run_id="SYSTEM")
    start_server()
