import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.responses import PlainTextResponse
from starlette.requests import ClientDisconnect

from .config import Settings, get_settings
from .errors import AcknowledgedError, BadRequest, WebhookError
from .gitlab_client import GitLabClient
from .scm_config import Config, load_global_config
from .services.config_resolver import ConfigResolver
from .services.processor import ConfigCheckProcessor
from .services.protocols import MergeRequestProcessor
from .services.request_checks import check_body, check_content_type, check_secret
from .services.webhook_service import WebhookService

# Setup logging - will be configured on startup
logger = logging.getLogger(__name__)

STATUS_BODY = "scm-engine status: OK\n\nNOTE: this is a static 'OK', no actual checks are being made"


def configure_logging(log_level: str) -> None:
    """Configure root logging once per process."""
    level = getattr(logging, log_level.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        force=True,  # Override any existing config
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logger.info(f"Logging configured with level: {log_level.upper()}")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Build the shared GitLab client and global config; refuse to start if either fails."""
    try:
        settings = get_settings()
    except Exception as e:
        logging.basicConfig(level=logging.INFO)
        logger.error(f"Invalid settings, refusing to start: {e}")
        raise

    configure_logging(settings.LOG_LEVEL)

    if not settings.auth_enabled():
        logger.warning("WEBHOOK_SECRET is not set, webhook authentication is disabled")

    global_config: Config | None = None
    if settings.GLOBAL_CONFIG_FILE:
        global_config = load_global_config(settings.GLOBAL_CONFIG_FILE)

    client = GitLabClient.from_settings(settings)
    app.state.gitlab_client = client
    app.state.global_config = global_config

    try:
        yield
    finally:
        await client.aclose()


app = FastAPI(title="scm-engine GitLab webhook", version="0.1.0", lifespan=lifespan)


def get_gitlab_client(request: Request) -> GitLabClient:
    """Shared client built at startup."""
    return request.app.state.gitlab_client  # type: ignore[no-any-return]


def get_global_config(request: Request) -> Config | None:
    return getattr(request.app.state, "global_config", None)


def get_processor(settings: Settings = Depends(get_settings)) -> MergeRequestProcessor:
    return ConfigCheckProcessor(config_file=settings.CONFIG_FILE)


def get_webhook_service(
    settings: Settings = Depends(get_settings),
    client: GitLabClient = Depends(get_gitlab_client),
    global_config: Config | None = Depends(get_global_config),
    processor: MergeRequestProcessor = Depends(get_processor),
) -> WebhookService:
    """Create WebhookService for one request around the shared client."""
    resolver = ConfigResolver(
        client=client,
        config_file=settings.CONFIG_FILE,
        global_config_file=settings.GLOBAL_CONFIG_FILE,
        global_config=global_config,
    )
    return WebhookService(client=client, resolver=resolver, processor=processor)


@app.exception_handler(WebhookError)
async def webhook_error_handler(request: Request, exc: WebhookError) -> PlainTextResponse:
    log = exc.context.logger(logger) if exc.context is not None else logger

    if isinstance(exc, AcknowledgedError):
        log.error(f"Webhook acknowledged with error: {exc}", exc_info=exc.__cause__)
    else:
        log.warning(f"Webhook rejected with {exc.status_code}: {exc}")

    return PlainTextResponse(exc.message, status_code=exc.status_code)


@app.get("/_status", response_class=PlainTextResponse)
async def status() -> str:
    logger.debug("GET /_status")
    return STATUS_BODY


@app.post("/gitlab", response_class=PlainTextResponse)
async def gitlab_webhook(
    request: Request,
    settings: Settings = Depends(get_settings),
    webhook_service: WebhookService = Depends(get_webhook_service),
) -> str:
    """
    Receives GitLab merge request and note webhook events.

    Protocol failures (secret, content type, body, payload shape) are answered
    with 4xx/5xx. Config and processing failures are answered with 200 so that
    GitLab does not retry the delivery.
    """
    check_secret(settings.WEBHOOK_SECRET, request.headers.get("x-gitlab-token"))
    check_content_type(request.headers.get("content-type"))

    try:
        body = await request.body()
    except ClientDisconnect as e:
        raise BadRequest(f"could not read POST body: {e!r}") from e

    # An empty body is not rejected here: decoding the empty buffer fails too
    # and both errors are returned together.
    empty_body_error = None
    try:
        check_body(body)
    except BadRequest as e:
        empty_body_error = e

    return await webhook_service.handle(body, empty_body_error)
