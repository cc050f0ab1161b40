"""
Readlater Backend — Application Configuration
===============================================

What:  Parses the process environment into a nested, immutable AppConfig.
How:   load_config() reads every named variable through EnvParser, which fails
       fast with ConfigurationError on a missing value unless the variable is
       on the nullable allow-list. Process knobs with sensible defaults
       (log level, CORS, pool pre-ping) come from RuntimeSettings, a
       pydantic-settings model that also honours a local .env file.
Who:   create_app() calls load_config() exactly once and stores the result on
       app.state.config; components receive it explicitly.
When:  Process start. Nothing reads os.environ after that.

Nullable variables:
    NULLABLE_ENV_VARS may be absent or empty and resolve to "". When the
    process is neither on App Engine nor running as prod/qa/demo, the list
    is widened with LOCAL_NULLABLE_ENV_VARS so a laptop can boot without
    cloud buckets.
"""

import getpass
import os
import socket
from typing import Callable, FrozenSet, List, Mapping, Optional

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings

from readlater.exceptions import ConfigurationError

NULLABLE_ENV_VARS: FrozenSet[str] = frozenset(
    {
        "INTERCOM_TOKEN",
        "INTERCOM_SECRET_KEY",
        "GAE_INSTANCE",
        "SENTRY_DSN",
        "SENTRY_AUTH_TOKEN",
        "SENTRY_ORG",
        "SENTRY_PROJECT",
        "JAEGER_HOST",
        "IMAGE_PROXY_URL",
        "IMAGE_PROXY_SECRET",
        "SAMPLE_METRICS_LOCALLY",
        "PUPPETEER_QUEUE_LOCATION",
        "PUPPETEER_QUEUE_NAME",
        "CONTENT_FETCH_URL",
        "CONTENT_FETCH_GCF_URL",
        "PREVIEW_IMAGE_WRAPPER_ID",
        "PREVIEW_GENERATION_SERVICE_URL",
        "GCS_UPLOAD_SA_KEY_FILE_PATH",
        "GAUTH_IOS_CLIENT_ID",
        "GAUTH_ANDROID_CLIENT_ID",
        "GAUTH_CLIENT_ID",
        "GAUTH_SECRET",
        "SEGMENT_WRITE_KEY",
        "TWITTER_BEARER_TOKEN",
        "GCS_UPLOAD_PRIVATE_BUCKET",
        "SENDER_MESSAGE",
        "SENDER_FEEDBACK",
        "SENDER_GENERAL",
        "SENDGRID_CONFIRMATION_TEMPLATE_ID",
        "SENDGRID_REMINDER_TEMPLATE_ID",
        "SENDGRID_RESET_PASSWORD_TEMPLATE_ID",
        "SENDGRID_INSTALLATION_TEMPLATE_ID",
        "SENDGRID_VERIFICATION_TEMPLATE_ID",
        "READWISE_API_URL",
        "INTEGRATION_TASK_HANDLER_URL",
        "TEXT_TO_SPEECH_TASK_HANDLER_URL",
        "AZURE_SPEECH_KEY",
        "AZURE_SPEECH_REGION",
        "GCP_LOCATION",
        "RECOMMENDATION_TASK_HANDLER_URL",
        "POCKET_CONSUMER_KEY",
        "THUMBNAIL_TASK_HANDLER_URL",
        "RSS_FEED_TASK_HANDLER_URL",
        "REMINDER_TASK_HANDLER_URL",
        "TRUST_PROXY",
        "INTEGRATION_EXPORTER_URL",
        "INTEGRATION_IMPORTER_URL",
        "PUBSUB_VERIFICATION_TOKEN",
    }
)

# Tolerated-empty only outside App Engine and outside prod/qa/demo.
LOCAL_NULLABLE_ENV_VARS: FrozenSet[str] = frozenset(
    {"GCS_UPLOAD_BUCKET", "PREVIEW_GENERATION_SERVICE_URL"}
)

DEPLOYED_API_ENVS: FrozenSet[str] = frozenset({"prod", "qa", "demo"})

_APP_ENGINE_VARS = ("GOOGLE_CLOUD_PROJECT", "GAE_INSTANCE", "GAE_SERVICE", "GAE_VERSION")


def is_app_engine(environ: Mapping[str, str]) -> bool:
    """True when every App Engine runtime variable is present."""
    return all(name in environ for name in _APP_ENGINE_VARS)


def nullable_env_vars(environ: Mapping[str, str]) -> FrozenSet[str]:
    """Allow-list for `environ`, widened for local/dev processes."""
    if not is_app_engine(environ) and environ.get("API_ENV", "") not in DEPLOYED_API_ENVS:
        return NULLABLE_ENV_VARS | LOCAL_NULLABLE_ENV_VARS
    return NULLABLE_ENV_VARS


class EnvParser:
    """
    Reads single variables out of an environment mapping.

    Missing or empty values raise ConfigurationError naming the variable,
    unless the variable is nullable, in which case "" is returned.
    """

    def __init__(self, environ: Mapping[str, str], nullable: FrozenSet[str]):
        self._environ = environ
        self._nullable = nullable

    def __call__(self, name: str) -> str:
        value = self._environ.get(name)
        if isinstance(value, str) and value:
            return value
        if name in self._nullable:
            return ""
        raise ConfigurationError(
            message=f"Missing {name} with a non-empty value in process environment",
            variable=name,
        )

    def integer(self, name: str) -> int:
        raw = self(name)
        try:
            return int(raw, 10)
        except ValueError:
            raise ConfigurationError(
                message=f"{name} must be an integer, got '{raw}'",
                variable=name,
            ) from None


# ══════════════════════════════════════════════════════════════════════════
# Runtime Settings (defaults, .env aware)
# ══════════════════════════════════════════════════════════════════════════


class RuntimeSettings(BaseSettings):
    """
    Process-level knobs that always have a development default.

    Attributes are grouped by concern for readability.
    """

    # ── Server ────────────────────────────────────────────────────────────
    backend_host: str = Field(default="0.0.0.0")
    backend_port: int = Field(default=8000, ge=1024, le=65535)
    cors_origins: str = Field(default="http://localhost:3000")

    # Valid: DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_level: str = Field(default="INFO")

    # ── Database ──────────────────────────────────────────────────────────
    # Overrides the URL composed from PG_* (e.g. sqlite+aiosqlite for local runs)
    database_url: Optional[str] = Field(default=None)
    db_pool_pre_ping: bool = Field(default=True)

    # ── Analytics ─────────────────────────────────────────────────────────
    analytics_endpoint: str = Field(default="https://api.segment.io/v1/track")
    analytics_timeout: float = Field(default=5.0, gt=0, le=60)

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",
    }

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensures log level is a valid Python logging level name."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log_level '{v}'. Must be one of: {valid_levels}")
        return upper

    @property
    def cors_origins_list(self) -> List[str]:
        return [origin.strip() for origin in self.cors_origins.split(",")]


# ══════════════════════════════════════════════════════════════════════════
# Configuration Sections
# ══════════════════════════════════════════════════════════════════════════


class _Section(BaseModel):
    model_config = {"frozen": True}


class PgPoolConfig(_Section):
    max: int


class PgConfig(_Section):
    host: str
    port: int
    user_name: str
    password: str
    db_name: str
    pool: PgPoolConfig

    @property
    def url(self) -> str:
        return (
            f"postgresql+asyncpg://{self.user_name}:{self.password}"
            f"@{self.host}:{self.port}/{self.db_name}"
        )


class ServerConfig(_Section):
    jwt_secret: str
    sso_jwt_secret: str
    gateway_url: str
    api_env: str
    instance_id: str
    trust_proxy: bool
    pubsub_verification_token: str


class ClientConfig(_Section):
    url: str
    preview_generation_service_url: str
    preview_image_wrapper_id: str


class GoogleAuthConfig(_Section):
    ios_client_id: str
    android_client_id: str
    client_id: str
    secret: str


class GoogleConfig(_Section):
    auth: GoogleAuthConfig


class SegmentConfig(_Section):
    write_key: str


class IntercomConfig(_Section):
    token: str
    secret_key: str


class SentryConfig(_Section):
    dsn: str


class JaegerConfig(_Section):
    host: str


class ImageProxyConfig(_Section):
    url: str
    secret_key: str


class TwitterConfig(_Section):
    token: str


class DevConfig(_Section):
    is_local: bool


class QueueConfig(_Section):
    location: str
    name: str
    content_fetch_url: str
    content_fetch_gcf_url: str
    reminder_task_handler_url: str
    integration_task_handler_url: str
    text_to_speech_task_handler_url: str
    recommendation_task_handler_url: str
    thumbnail_task_handler_url: str
    rss_feed_task_handler_url: str
    integration_exporter_url: str
    integration_importer_url: str


class FileUploadConfig(_Section):
    gcs_upload_bucket: str
    gcs_upload_sa_key_file_path: str
    gcs_upload_private_bucket: str


class SenderConfig(_Section):
    message: str
    feedback: str
    general: str


class SendgridConfig(_Section):
    confirmation_template_id: str
    reminder_template_id: str
    reset_password_template_id: str
    installation_template_id: str
    verification_template_id: str


class ReadwiseConfig(_Section):
    api_url: str


class AzureConfig(_Section):
    speech_key: str
    speech_region: str


class GcpConfig(_Section):
    location: str


class PocketConfig(_Section):
    consumer_key: str


class AppConfig(_Section):
    """Complete, immutable configuration handed to every component."""

    pg: PgConfig
    server: ServerConfig
    client: ClientConfig
    google: GoogleConfig
    segment: SegmentConfig
    intercom: IntercomConfig
    sentry: SentryConfig
    jaeger: JaegerConfig
    image_proxy: ImageProxyConfig
    twitter: TwitterConfig
    dev: DevConfig
    queue: QueueConfig
    file_upload: FileUploadConfig
    sender: SenderConfig
    sendgrid: SendgridConfig
    readwise: ReadwiseConfig
    azure: AzureConfig
    gcp: GcpConfig
    pocket: PocketConfig
    runtime: RuntimeSettings

    @property
    def database_url(self) -> str:
        return self.runtime.database_url or self.pg.url


def _default_instance_id() -> str:
    return f"x{getpass.getuser()}_{socket.gethostname()}"


def load_config(
    environ: Optional[Mapping[str, str]] = None,
    runtime: Optional[RuntimeSettings] = None,
    instance_id_factory: Callable[[], str] = _default_instance_id,
) -> AppConfig:
    """
    Build the AppConfig from an environment mapping.

    Args:
        environ: Variables to read (defaults to os.environ).
        runtime: Pre-built RuntimeSettings (defaults to reading env/.env).
        instance_id_factory: Fallback instance id when GAE_INSTANCE is empty.

    Raises:
        ConfigurationError: naming the first missing or malformed variable.
    """
    environ = os.environ if environ is None else environ
    parse = EnvParser(environ, nullable_env_vars(environ))

    # Sections are parsed in a fixed order; the first missing variable wins.
    pg = PgConfig(
        host=parse("PG_HOST"),
        port=parse.integer("PG_PORT"),
        user_name=parse("PG_USER"),
        password=parse("PG_PASSWORD"),
        db_name=parse("PG_DB"),
        pool=PgPoolConfig(max=parse.integer("PG_POOL_MAX")),
    )
    server = ServerConfig(
        jwt_secret=parse("JWT_SECRET"),
        sso_jwt_secret=parse("SSO_JWT_SECRET"),
        gateway_url=parse("GATEWAY_URL"),
        api_env=parse("API_ENV"),
        instance_id=parse("GAE_INSTANCE") or instance_id_factory(),
        trust_proxy=parse("TRUST_PROXY") == "true",
        pubsub_verification_token=parse("PUBSUB_VERIFICATION_TOKEN"),
    )
    client = ClientConfig(
        url=parse("CLIENT_URL"),
        preview_generation_service_url=parse("PREVIEW_GENERATION_SERVICE_URL"),
        preview_image_wrapper_id=parse("PREVIEW_IMAGE_WRAPPER_ID"),
    )
    google = GoogleConfig(
        auth=GoogleAuthConfig(
            ios_client_id=parse("GAUTH_IOS_CLIENT_ID"),
            android_client_id=parse("GAUTH_ANDROID_CLIENT_ID"),
            client_id=parse("GAUTH_CLIENT_ID"),
            secret=parse("GAUTH_SECRET"),
        )
    )
    queue = QueueConfig(
        location=parse("PUPPETEER_QUEUE_LOCATION"),
        name=parse("PUPPETEER_QUEUE_NAME"),
        content_fetch_url=parse("CONTENT_FETCH_URL"),
        content_fetch_gcf_url=parse("CONTENT_FETCH_GCF_URL"),
        reminder_task_handler_url=parse("REMINDER_TASK_HANDLER_URL"),
        integration_task_handler_url=parse("INTEGRATION_TASK_HANDLER_URL"),
        text_to_speech_task_handler_url=parse("TEXT_TO_SPEECH_TASK_HANDLER_URL"),
        recommendation_task_handler_url=parse("RECOMMENDATION_TASK_HANDLER_URL"),
        thumbnail_task_handler_url=parse("THUMBNAIL_TASK_HANDLER_URL"),
        rss_feed_task_handler_url=parse("RSS_FEED_TASK_HANDLER_URL"),
        integration_exporter_url=parse("INTEGRATION_EXPORTER_URL"),
        integration_importer_url=parse("INTEGRATION_IMPORTER_URL"),
    )
    file_upload = FileUploadConfig(
        gcs_upload_bucket=parse("GCS_UPLOAD_BUCKET"),
        gcs_upload_sa_key_file_path=parse("GCS_UPLOAD_SA_KEY_FILE_PATH"),
        gcs_upload_private_bucket=parse("GCS_UPLOAD_PRIVATE_BUCKET"),
    )
    sendgrid = SendgridConfig(
        confirmation_template_id=parse("SENDGRID_CONFIRMATION_TEMPLATE_ID"),
        reminder_template_id=parse("SENDGRID_REMINDER_TEMPLATE_ID"),
        reset_password_template_id=parse("SENDGRID_RESET_PASSWORD_TEMPLATE_ID"),
        installation_template_id=parse("SENDGRID_INSTALLATION_TEMPLATE_ID"),
        verification_template_id=parse("SENDGRID_VERIFICATION_TEMPLATE_ID"),
    )

    return AppConfig(
        pg=pg,
        server=server,
        client=client,
        google=google,
        segment=SegmentConfig(write_key=parse("SEGMENT_WRITE_KEY")),
        intercom=IntercomConfig(
            token=parse("INTERCOM_TOKEN"),
            secret_key=parse("INTERCOM_SECRET_KEY"),
        ),
        sentry=SentryConfig(dsn=parse("SENTRY_DSN")),
        jaeger=JaegerConfig(host=parse("JAEGER_HOST")),
        image_proxy=ImageProxyConfig(
            url=parse("IMAGE_PROXY_URL"),
            secret_key=parse("IMAGE_PROXY_SECRET"),
        ),
        twitter=TwitterConfig(token=parse("TWITTER_BEARER_TOKEN")),
        dev=DevConfig(is_local=not is_app_engine(environ)),
        queue=queue,
        file_upload=file_upload,
        sender=SenderConfig(
            message=parse("SENDER_MESSAGE"),
            feedback=parse("SENDER_FEEDBACK"),
            general=parse("SENDER_GENERAL"),
        ),
        sendgrid=sendgrid,
        readwise=ReadwiseConfig(api_url=parse("READWISE_API_URL")),
        azure=AzureConfig(
            speech_key=parse("AZURE_SPEECH_KEY"),
            speech_region=parse("AZURE_SPEECH_REGION"),
        ),
        gcp=GcpConfig(location=parse("GCP_LOCATION")),
        pocket=PocketConfig(consumer_key=parse("POCKET_CONSUMER_KEY")),
        runtime=runtime if runtime is not None else RuntimeSettings(),
    )
