import os
import logging
from typing import Dict, Any, Optional

from dotenv import load_dotenv

from domain.models import IDENTITY_STRATEGIES, RateLimitPolicy

logger = logging.getLogger(__name__)

load_dotenv()

DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 8001
DEFAULT_MAX_FAILURES = 5
DEFAULT_WINDOW_SECONDS = 900
DEFAULT_AUTH_TIMEOUT = 10.0
DEFAULT_SWEEP_INTERVAL = 60
DEFAULT_USERS_FILE = "/data/users.json"


class Config:
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super(Config, cls).__new__(cls)
            cls._instance._initialize()
        return cls._instance

    def _initialize(self):
        self.host = os.environ.get("HOST", DEFAULT_HOST)
        self.port = int(os.environ.get("PORT", DEFAULT_PORT))
        self.debug = os.environ.get("DEBUG", "0") == "1"

        self.max_failures = int(os.environ.get("LOGIN_MAX_FAILURES", DEFAULT_MAX_FAILURES))
        self.window_seconds = float(os.environ.get("LOGIN_WINDOW_SECONDS", DEFAULT_WINDOW_SECONDS))
        self.identity_strategy = os.environ.get("LOGIN_IDENTITY", "ip").lower()
        self.store_failure_policy = os.environ.get("STORE_FAILURE_POLICY", "open").lower()
        self.auth_timeout = float(os.environ.get("AUTH_TIMEOUT_SECONDS", DEFAULT_AUTH_TIMEOUT))
        self.sweep_interval = float(os.environ.get("SWEEP_INTERVAL_SECONDS", DEFAULT_SWEEP_INTERVAL))

        self.auth_backend = os.environ.get("AUTH_BACKEND", "local").lower()
        self.users_file = os.environ.get("USERS_FILE", DEFAULT_USERS_FILE)
        self.parse_server_url = os.environ.get("PARSE_SERVER_URL", "").strip()
        self.parse_app_id = os.environ.get("PARSE_APP_ID", "").strip()
        self.parse_rest_api_key = os.environ.get("PARSE_REST_API_KEY") or None
        self.infra = os.environ.get("INFRA", "local").lower()

        self._validate()

    def _validate(self):
        if self.identity_strategy not in IDENTITY_STRATEGIES:
            valid = ", ".join(IDENTITY_STRATEGIES)
            raise ValueError(f"Unknown LOGIN_IDENTITY: {self.identity_strategy!r}. Valid options: {valid}")
        if self.store_failure_policy not in ("open", "closed"):
            raise ValueError(
                f"Unknown STORE_FAILURE_POLICY: {self.store_failure_policy!r}. Valid options: open, closed"
            )
        if self.auth_timeout <= 0:
            raise ValueError(f"AUTH_TIMEOUT_SECONDS must be > 0, got {self.auth_timeout}")
        # RateLimitPolicy validates max_failures and window_seconds.
        self.policy()

    def policy(self) -> RateLimitPolicy:
        return RateLimitPolicy(
            max_failures=self.max_failures,
            window_seconds=self.window_seconds,
            identity_extractor=IDENTITY_STRATEGIES[self.identity_strategy],
        )

    def as_dict(self) -> Dict[str, Any]:
        return {
            "host": self.host,
            "port": self.port,
            "debug": self.debug,
            "max_failures": self.max_failures,
            "window_seconds": self.window_seconds,
            "identity_strategy": self.identity_strategy,
            "store_failure_policy": self.store_failure_policy,
            "auth_timeout": self.auth_timeout,
            "sweep_interval": self.sweep_interval,
            "auth_backend": self.auth_backend,
            "has_parse_rest_api_key": self.parse_rest_api_key is not None,
            "infra": self.infra,
        }


def get_config() -> Config:
    return Config()


def create_store(cfg: Config, window_seconds: Optional[float] = None):
    """Create the attempt store based on INFRA env var.

    window_seconds must match the gate's policy; it defaults to LOGIN_WINDOW_SECONDS.
    """
    from adapters.local.memory_store import InMemoryAttemptStore

    infra = cfg.infra
    if infra == "local":
        store = InMemoryAttemptStore(window_seconds=window_seconds or cfg.window_seconds)
    elif infra == "redis":
        raise NotImplementedError("Redis attempt store not yet implemented")
    else:
        raise ValueError(f"Unknown INFRA: {infra!r}. Valid options: local, redis")

    logger.info(f"Attempt store: {infra} -> {type(store).__name__}")
    return store


def create_authenticator(cfg: Config):
    """Create the authentication backend adapter based on AUTH_BACKEND env var.

    Uses lazy imports so httpx is only loaded when Parse is selected.
    """
    backend = cfg.auth_backend

    if backend == "local":
        from adapters.local.json_users import JsonFileAuthenticator
        authenticator = JsonFileAuthenticator(cfg.users_file)
    elif backend == "parse":
        from adapters.parse import ParseAuthenticator
        if not cfg.parse_server_url or not cfg.parse_app_id:
            raise ValueError("AUTH_BACKEND=parse requires PARSE_SERVER_URL and PARSE_APP_ID")
        authenticator = ParseAuthenticator(
            server_url=cfg.parse_server_url,
            app_id=cfg.parse_app_id,
            rest_api_key=cfg.parse_rest_api_key,
            timeout=cfg.auth_timeout,
        )
    else:
        raise ValueError(f"Unknown AUTH_BACKEND: {backend!r}. Valid options: local, parse")

    logger.info(f"Authenticator: {backend} -> {type(authenticator).__name__}")
    return authenticator


def create_reporter(cfg: Config):
    from adapters.local.log_events import LogEventReporter
    return LogEventReporter()
