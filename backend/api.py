"""FastAPI application: the guarded login route plus health."""

import asyncio
import contextlib
import logging
import math
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from client_ip import client_ip
from config import Config, create_authenticator, create_reporter, create_store, get_config
from domain.errors import HandlerIndeterminate, InvalidCredentials, RateLimitExceeded, StoreUnavailable
from domain.models import Credentials, RateLimitPolicy, RequestMeta
from models import HealthResponse, LoginRequest, LoginResponse, ParseErrorResponse, TooManyAttemptsResponse
from ports.attempt_store import AttemptStorePort
from ports.authenticator import AuthenticatorPort
from ports.events import EventReporterPort
from use_cases.login import AttemptGate, LoginUseCase, OutcomeRecorder

logger = logging.getLogger(__name__)

# Parse.Error codes used for responses this service produces itself.
CONNECTION_FAILED = 100
TIMEOUT = 124


async def _sweep_loop(store: AttemptStorePort, interval: float) -> None:
    while True:
        await asyncio.sleep(interval)
        try:
            store.sweep_expired()
        except StoreUnavailable as e:
            logger.warning(f"Attempt store sweep failed: {e}")


def create_app(
    cfg: Optional[Config] = None,
    *,
    store: Optional[AttemptStorePort] = None,
    authenticator: Optional[AuthenticatorPort] = None,
    reporter: Optional[EventReporterPort] = None,
    policy: Optional[RateLimitPolicy] = None,
) -> FastAPI:
    if cfg is None:
        cfg = get_config()
    if policy is None:
        policy = cfg.policy()
    # An empty store is falsy.
    if store is None:
        store = create_store(cfg, window_seconds=policy.window_seconds)
    if authenticator is None:
        authenticator = create_authenticator(cfg)
    if reporter is None:
        reporter = create_reporter(cfg)

    login_use_case = LoginUseCase(
        gate=AttemptGate(store, policy, reporter, store_failure_policy=cfg.store_failure_policy),
        recorder=OutcomeRecorder(store, policy, reporter),
        authenticator=authenticator,
        timeout=cfg.auth_timeout,
    )

    @contextlib.asynccontextmanager
    async def lifespan(app: FastAPI):
        sweeper = None
        if cfg.sweep_interval > 0:
            sweeper = asyncio.create_task(_sweep_loop(store, cfg.sweep_interval))
        app.state.sweeper = sweeper
        logger.info(
            f"Login guard ready: max_failures={policy.max_failures}, "
            f"window={policy.window_seconds:.0f}s, identity={cfg.identity_strategy}"
        )
        try:
            yield
        finally:
            if sweeper:
                sweeper.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await sweeper
            await authenticator.close()

    app = FastAPI(title="Login Guard", lifespan=lifespan)
    app.state.store = store
    app.state.login = login_use_case

    @app.exception_handler(RateLimitExceeded)
    async def _rate_limited(request: Request, exc: RateLimitExceeded):
        seconds = max(1, math.ceil(exc.retry_after))
        body = TooManyAttemptsResponse(retryAfter=seconds)
        return JSONResponse(status_code=429, content=body.model_dump(), headers={"Retry-After": str(seconds)})

    @app.exception_handler(InvalidCredentials)
    async def _invalid_credentials(request: Request, exc: InvalidCredentials):
        return JSONResponse(status_code=exc.status_code, content=exc.payload)

    @app.exception_handler(HandlerIndeterminate)
    async def _indeterminate(request: Request, exc: HandlerIndeterminate):
        if exc.timed_out:
            body = ParseErrorResponse(code=TIMEOUT, error="Authentication service timed out.")
            return JSONResponse(status_code=504, content=body.model_dump())
        body = ParseErrorResponse(code=CONNECTION_FAILED, error="Authentication service unavailable.")
        return JSONResponse(status_code=502, content=body.model_dump())

    @app.get("/health", response_model=HealthResponse)
    async def health():
        return HealthResponse(
            authenticator=authenticator.name(),
            store=type(store).__name__,
            config=cfg.as_dict(),
        )

    @app.post("/v1/auth/login", response_model=LoginResponse)
    async def login(request: Request, body: Optional[LoginRequest] = None):
        body = body or LoginRequest()
        meta = RequestMeta(client_ip=client_ip(request), username=body.username)
        session = await request.app.state.login.execute(
            meta, Credentials(username=body.username, password=body.password)
        )
        return LoginResponse(objectId=session.object_id, sessionToken=session.session_token)

    return app
