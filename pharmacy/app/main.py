#!/usr/bin/env python3
"""
Main FastAPI application for the pharmacy assistant.
"""

from fastapi import APIRouter, Depends, FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import Config
from .controller import Controller
from .insights import UnknownReportType, generate_report, system_insights
from .records import ROUTERS
from ..agents.interaction_agent import check_drug_interactions
from ..data.database import create_tables, get_db
from ..schemas.io_models import ChatRequest, DrugInteractionRequest, ReportRequest
from ..utils.logger import get_logger

logger = get_logger()

# Initialize FastAPI app
app = FastAPI(
    title="Pharmacy Assistant API",
    description="Pharmacy records and rule-based chatbot",
    version="1.0.0"
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=Config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

_controller = None


def get_controller() -> Controller:
    global _controller
    if _controller is None:
        _controller = Controller()
    return _controller


def _server_error(message: str, error: Exception) -> JSONResponse:
    logger.exception(f"{message}: {error}")
    return JSONResponse(status_code=500, content={"success": False, "message": message, "error": str(error)})


@app.on_event("startup")
def on_startup():
    create_tables()
    Config.debug_print()


@app.exception_handler(StarletteHTTPException)
async def http_error(request: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content={"success": False, "message": exc.detail})


@app.exception_handler(RequestValidationError)
async def validation_error(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    message = errors[0].get("msg", "Invalid request") if errors else "Invalid request"
    return JSONResponse(status_code=400, content={"success": False, "message": message})


@app.exception_handler(Exception)
async def unexpected_error(request: Request, exc: Exception):
    return _server_error(f"Failed to process {request.method} {request.url.path}", exc)


chatbot = APIRouter(prefix="/api/chatbot", tags=["chatbot"])


@chatbot.post("/chat")
def chat(request: ChatRequest, controller: Controller = Depends(get_controller)):
    """Classify a free-text message and answer it from records or the knowledge base."""
    if not request.message or not request.message.strip():
        raise HTTPException(status_code=400, detail="Message is required")
    try:
        result = controller.handle_query(request.message, request.context)
    except Exception as e:
        return _server_error("Failed to process chat request", e)
    return {
        "success": True,
        "response": result["response"],
        "context": result["context"],
        "analysis": result["analysis"].model_dump(by_alias=True),
    }


@chatbot.post("/drug-interactions")
def drug_interactions(request: DrugInteractionRequest):
    meds = [m for m in (request.medications or []) if m and m.strip()]
    if len(meds) < 2:
        raise HTTPException(status_code=400, detail="Please provide at least 2 medications to check for interactions")
    try:
        report = check_drug_interactions(meds)
    except Exception as e:
        return _server_error("Failed to check drug interactions", e)
    return {"success": True, "data": report.model_dump(by_alias=True)}


@chatbot.get("/insights")
def insights(db: Session = Depends(get_db)):
    try:
        data = system_insights(db)
    except Exception as e:
        return _server_error("Failed to get system insights", e)
    return {"success": True, "insights": data}


@chatbot.post("/reports")
def reports(request: ReportRequest, db: Session = Depends(get_db)):
    try:
        data = generate_report(db, request.report_type)
    except UnknownReportType:
        raise HTTPException(status_code=400, detail="Invalid report type")
    except Exception as e:
        return _server_error("Failed to generate report", e)
    return {"success": True, "reportData": data, "reportType": request.report_type}


app.include_router(chatbot)
for router in ROUTERS:
    app.include_router(router)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
