"""Connection settings read from the environment (and a local .env file)."""

import logging
import os
import warnings
from dataclasses import dataclass

import urllib3
from dotenv import load_dotenv
from elasticsearch import Elasticsearch

from errors import ConfigError

DEFAULT_ES_HOST = "https://localhost:9200"
DEFAULT_ES_USER = "elastic"
DEFAULT_BOOKS_FILE = "goodreads_books.json"
DEFAULT_BULK_CHUNK_SIZE = 500

TRUE_VALUES = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    es_host: str = DEFAULT_ES_HOST
    es_user: str = DEFAULT_ES_USER
    es_password: str = None
    es_api_key: str = None
    verify_certs: bool = False
    books_file: str = DEFAULT_BOOKS_FILE
    bulk_chunk_size: int = DEFAULT_BULK_CHUNK_SIZE
    log_level: str = "INFO"


def _positive_int(environ, name, default):
    raw = environ.get(name)
    if raw is None or raw == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {raw!r}")
    if value < 1:
        raise ConfigError(f"{name} must be positive, got {value}")
    return value


def _log_level(environ):
    level = (environ.get("LOG_LEVEL") or "INFO").strip().upper()
    if not isinstance(logging.getLevelName(level), int):
        raise ConfigError(f"LOG_LEVEL must be a logging level name, got {level!r}")
    return level


def load_settings(environ=None) -> Settings:
    """Build Settings once at startup.

    With no explicit mapping, .env is loaded into os.environ first (a missing
    .env is not an error). Either ES_API_KEY or ES_PASSWORD must be set.
    """
    if environ is None:
        load_dotenv()
        environ = os.environ

    es_password = environ.get("ES_PASSWORD") or None
    es_api_key = environ.get("ES_API_KEY") or None
    if not es_password and not es_api_key:
        raise ConfigError("missing credentials: set ES_PASSWORD or ES_API_KEY")

    return Settings(
        es_host=environ.get("ES_HOST") or environ.get("ES_URL") or DEFAULT_ES_HOST,
        es_user=environ.get("ES_USER") or DEFAULT_ES_USER,
        es_password=es_password,
        es_api_key=es_api_key,
        verify_certs=environ.get("ES_VERIFY_CERTS", "").strip().lower() in TRUE_VALUES,
        books_file=environ.get("BOOKS_FILE") or DEFAULT_BOOKS_FILE,
        bulk_chunk_size=_positive_int(environ, "ES_BULK_CHUNK_SIZE", DEFAULT_BULK_CHUNK_SIZE),
        log_level=_log_level(environ),
    )


def setup_logging(level: str = "INFO") -> None:
    """Log to stderr; calling again only changes the level."""
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")
    logging.getLogger().setLevel(level)


def create_client(settings: Settings) -> Elasticsearch:
    if not settings.verify_certs:
        urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)
        warnings.filterwarnings("ignore", message="Connecting to .* using TLS with verify_certs=False is insecure")

    if settings.es_api_key:
        auth = {"api_key": settings.es_api_key}
    else:
        auth = {"basic_auth": (settings.es_user, settings.es_password)}

    try:
        return Elasticsearch(settings.es_host, verify_certs=settings.verify_certs, **auth)
    except ValueError as e:
        raise ConfigError(f"invalid ES_HOST {settings.es_host!r}: {e}") from e
