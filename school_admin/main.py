import logging
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.openapi.docs import get_swagger_ui_html
from fastapi.openapi.utils import get_openapi

from school_admin.api import auth, marks, broadsheet, students, remarks, classes, teachers
from school_admin.config import settings
from school_admin.database import engine
from school_admin.models import Base
from school_admin.middleware.logging import setup_logging, add_logging_middleware

# Initialize FastAPI app
app = FastAPI(
    title="School Results API",
    description="API for recording marks, remarks and class broadsheets with per-teacher class and subject access",
    version="1.0.0",
    docs_url=None,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Setup logging
setup_logging()
add_logging_middleware(app)
logger = logging.getLogger(__name__)

# Custom exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception: {str(exc)}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"detail": "An unexpected error occurred. Please try again later."},
    )

# Create database tables
@app.on_event("startup")
async def startup():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables created or verified")

# Include routers
app.include_router(auth.router, prefix="/api", tags=["Authentication"])
app.include_router(marks.router, prefix="/api", tags=["Marks"])
app.include_router(broadsheet.router, prefix="/api", tags=["Broadsheet"])
app.include_router(students.router, prefix="/api", tags=["Students"])
app.include_router(remarks.router, prefix="/api", tags=["Remarks"])
app.include_router(classes.router, prefix="/api", tags=["Classes"])
app.include_router(teachers.router, prefix="/api", tags=["Teachers"])

# Custom OpenAPI schema for documentation
@app.get("/api/docs", include_in_schema=False)
async def custom_swagger_ui_html():
    return get_swagger_ui_html(
        openapi_url="/api/openapi.json",
        title="School Results API Documentation",
        swagger_ui_parameters={"defaultModelsExpandDepth": -1},
    )

@app.get("/api/openapi.json", include_in_schema=False)
async def get_openapi_endpoint():
    return get_openapi(
        title="School Results API",
        version="1.0.0",
        description="API for School Results system",
        routes=app.routes,
    )

@app.get("/", tags=["Root"])
async def root():
    return {"message": "Welcome to School Results API. Visit /api/docs for documentation."}

# Run the server
if __name__ == "__main__":
    import uvicorn
    uvicorn.run("school_admin.main:app", host="0.0.0.0", port=5000, reload=True)
