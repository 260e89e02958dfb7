from dotenv import load_dotenv
load_dotenv()

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Depends, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

# ENV
from config.env import ENV, LOG_LEVEL, CORS_ALLOWED_ORIGINS, FRONTEND_URL, validate_production_env

# ROUTES
from routes.auth import router as auth_router
from routes.seller import router as seller_router
from routes.products import router as products_router

from utils.context import AppContext, build_context, get_context
from utils.indexes import ensure_indexes

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


def create_app(context: AppContext | None = None) -> FastAPI:
    """
    Build the API. Tests pass a ready ``context``; otherwise one is built
    from the environment when the app starts.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("ENV: %s", ENV)
        validate_production_env()

        ctx = context or build_context()
        app.state.context = ctx
        await ensure_indexes(ctx.db)
        try:
            yield
        finally:
            ctx.close()

    app = FastAPI(
        title="Shopfront API",
        version="1.0.0",
        lifespan=lifespan,
        docs_url=None if ENV == "production" else "/docs",
        redoc_url=None if ENV == "production" else "/redoc",
        openapi_url=None if ENV == "production" else "/openapi.json",
    )

    # -----------------------------
    # CORS
    # -----------------------------

    allowed_origins = [origin.strip() for origin in CORS_ALLOWED_ORIGINS if origin.strip()]
    if not allowed_origins:
        allowed_origins = [FRONTEND_URL]

    # cookies are the credential, so credentials must be allowed
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # -----------------------------
    # ERRORS
    # -----------------------------

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"message": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=422,
            content={"message": "Invalid request", "errors": jsonable_encoder(exc.errors())},
        )

    @app.exception_handler(Exception)
    async def unhandled_error(request: Request, exc: Exception):
        logger.exception("UNHANDLED_ERROR %s %s", request.method, request.url.path)
        return JSONResponse(status_code=500, content={"message": "Server error"})

    # -----------------------------
    # ROUTES
    # -----------------------------

    app.include_router(auth_router)
    app.include_router(seller_router)
    app.include_router(products_router)

    # -----------------------------
    # HEALTH CHECKS
    # -----------------------------

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    @app.get("/health/db")
    async def health_db(ctx: AppContext = Depends(get_context)):
        await ctx.db.command("ping")
        return {"status": "mongodb connected"}

    return app


app = create_app()
