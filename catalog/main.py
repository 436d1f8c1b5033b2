from fastapi import FastAPI
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from slowapi.errors import RateLimitExceeded
from starlette.middleware.cors import CORSMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from timing_asgi import TimingMiddleware, TimingClient  # type: ignore
from timing_asgi.integrations import StarletteScopeToName  # type: ignore

from catalog.core import config
from catalog.core.database.engine import init_db
from catalog.features.attachments.routes import router as attachment_router
from catalog.features.datablocks.routes import router as datablock_router
from catalog.features.datasets.routes import router as dataset_router
from catalog.features.proposals.routes import router as proposal_router
from catalog.features.users.dependencies import limiter
from catalog.features.users.routes import router as user_router
from catalog.utils import get_logger


log = get_logger(__name__)
log.info("Initializing server")
app = FastAPI(
    title="Catalog Backend",
    description="Scientific data catalog API: proposals, datasets, datablocks and attachments",
    version="0.1.0",
    docs_url="/docs" if config.ENABLE_DOCS else None,
    redoc_url="/redoc" if config.ENABLE_DOCS else None,
    openapi_url="/openapi.json" if config.ENABLE_DOCS else None
)
app.state.limiter = limiter


class PrintTimings(TimingClient):
    def timing(self, metric_name, timing, tags):
        log.debug(dict(route=metric_name.removeprefix("main.catalog.features."), timing=timing, tags=tags))


app.add_middleware(TimingMiddleware, client=PrintTimings(), metric_namer=StarletteScopeToName("main", app))

if config.ENABLE_DOCS:
    log.warning("Docs enabled")
if config.ALLOW_ORIGIN:
    log.warning("Setting allow origin to %s", config.ALLOW_ORIGIN)
    origins = [config.ALLOW_ORIGIN]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(_request: Request, exc: RequestValidationError):
    errors = dict()
    for error in exc.errors():
        if "loc" not in error or "msg" not in error:
            continue
        key = error["loc"][-1]
        if key == "__root__":
            key = "root"
        errors[key] = error["msg"]
    log.info("Request validation error %s", errors)
    return JSONResponse(status_code=400, content=jsonable_encoder(errors))


@app.exception_handler(RateLimitExceeded)
def rate_limit_exceeded_handler(_request: Request, _exc: RateLimitExceeded) -> Response:
    return JSONResponse({"detail": "Too many token requests"}, status_code=429)


@app.on_event("startup")
async def create_tables():
    await init_db()
    log.info("Catalog tables ready")


@app.get("/")
async def root():
    return {
        "message": "Catalog Backend API",
        "version": "0.1.0",
        "status": "online",
        "docs": "/docs" if config.ENABLE_DOCS else None,
        "authentication": {
            "info": "Guarded endpoints require a Bearer token in the Authorization header",
            "token_claims": ["sub", "username", "email", "roles", "groups"],
        },
    }


@app.get("/health")
async def health():
    return {"status": "healthy"}


app.include_router(user_router, prefix="/users", tags=["users"])
app.include_router(proposal_router, prefix="/proposals", tags=["proposals"])
app.include_router(dataset_router, prefix="/datasets", tags=["datasets"])
app.include_router(datablock_router, prefix="/datablocks", tags=["datablocks"])
app.include_router(attachment_router, prefix="/attachments", tags=["attachments"])
