import json
import warnings
from typing import Annotated, Any, Literal
from urllib.parse import quote_plus

from pydantic import (
    AnyUrl,
    BeforeValidator,
    computed_field,
    model_validator,
)
from pydantic_core import MultiHostUrl
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing_extensions import Self

from querystore.models import ProductTypeEnum


def parse_cors(v: Any) -> list[str] | str:
    if isinstance(v, str) and not v.startswith("["):
        return [i.strip() for i in v.split(",") if i.strip()]
    elif isinstance(v, list | str):
        return v
    raise ValueError(v)


def parse_names(v: Any) -> list[str]:
    """Accept ``"a,b"``, ``'["a", "b"]'`` or a list; trim and drop blanks."""
    if v is None:
        return []
    if isinstance(v, str):
        s = v.strip()
        if s.startswith("["):
            v = json.loads(s)
        else:
            v = s.split(",")
    if isinstance(v, list | tuple):
        return [str(i).strip() for i in v if str(i).strip()]
    raise ValueError(v)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        # Use top level .env file (one level above ./backend/)
        env_file="../.env",
        env_ignore_empty=True,
        extra="ignore",
    )
    API_V1_STR: str = "/api/v1"
    FRONTEND_HOST: str = "http://localhost:5173"
    ENVIRONMENT: Literal["local", "staging", "production"] = "local"
    LOG_LEVEL: str = "INFO"

    BACKEND_CORS_ORIGINS: Annotated[
        list[AnyUrl] | str, BeforeValidator(parse_cors)
    ] = []

    @computed_field  # type: ignore[prop-decorator]
    @property
    def all_cors_origins(self) -> list[str]:
        return [str(origin).rstrip("/") for origin in self.BACKEND_CORS_ORIGINS] + [
            self.FRONTEND_HOST
        ]

    PROJECT_NAME: str = "querystore"
    SENTRY_DSN: str | None = None

    # Template store database
    POSTGRES_SERVER: str = "localhost"
    POSTGRES_PORT: int = 5432
    POSTGRES_USER: str = "postgres"
    POSTGRES_PASSWORD: str = ""
    POSTGRES_DB: str = "querystore"
    STORE_DATABASE_URI: str | None = None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def SQLALCHEMY_DATABASE_URI(self) -> str:
        if self.STORE_DATABASE_URI:
            return self.STORE_DATABASE_URI
        return str(
            MultiHostUrl.build(
                scheme="postgresql+psycopg",
                username=self.POSTGRES_USER,
                password=self.POSTGRES_PASSWORD,
                host=self.POSTGRES_SERVER,
                port=self.POSTGRES_PORT,
                path=self.POSTGRES_DB,
            )
        )

    # Tenant databases: one pool per name in TENANT_DB_NAMES, all on the same
    # server. TENANT_DB_URLS (JSON object name -> SQLAlchemy URL) overrides or
    # adds individual entries.
    TENANT_DB_PRODUCT_TYPE: ProductTypeEnum = ProductTypeEnum.POSTGRES
    TENANT_DB_SERVER: str = "localhost"
    TENANT_DB_PORT: int | None = None
    TENANT_DB_USER: str = "postgres"
    TENANT_DB_PASSWORD: str = ""
    TENANT_DB_USE_SSL: bool = False
    TENANT_DB_NAMES: Annotated[list[str] | str, BeforeValidator(parse_names)] = []
    TENANT_DB_URLS: dict[str, str] = {}

    # Pool / timeouts for tenant databases
    EXTERNAL_DB_POOL_SIZE: int = 5
    EXTERNAL_DB_POOL_MAX_AGE_SEC: int = 600
    EXTERNAL_DB_CONNECT_TIMEOUT: int = 10
    EXTERNAL_DB_STATEMENT_TIMEOUT: float | None = None

    # Reject identifier values that are not plain SQL identifiers instead of
    # only logging a warning.
    IDENTIFIER_STRICT_MODE: bool = False
    # Echo bind values in ExecutionError responses (set False to redact).
    EXECUTION_ERROR_INCLUDE_BINDS: bool = True

    @property
    def tenant_database_urls(self) -> dict[str, str]:
        """Resolved name -> SQLAlchemy URL for every tenant database."""
        urls: dict[str, str] = {}
        for name in self.TENANT_DB_NAMES:
            urls[name] = build_tenant_url(
                self.TENANT_DB_PRODUCT_TYPE,
                host=self.TENANT_DB_SERVER,
                port=self.TENANT_DB_PORT,
                database=name,
                username=self.TENANT_DB_USER,
                password=self.TENANT_DB_PASSWORD,
                use_ssl=self.TENANT_DB_USE_SSL,
            )
        urls.update(self.TENANT_DB_URLS)
        return urls

    def _check_default_secret(self, var_name: str, value: str | None) -> None:
        if value == "changethis":
            message = (
                f'The value of {var_name} is "changethis", '
                "for security, please change it, at least for deployments."
            )
            if self.ENVIRONMENT == "local":
                warnings.warn(message, stacklevel=1)
            else:
                raise ValueError(message)

    @model_validator(mode="after")
    def _enforce_non_default_secrets(self) -> Self:
        self._check_default_secret("POSTGRES_PASSWORD", self.POSTGRES_PASSWORD)
        self._check_default_secret("TENANT_DB_PASSWORD", self.TENANT_DB_PASSWORD)
        return self


_DEFAULT_PORTS: dict[ProductTypeEnum, int] = {
    ProductTypeEnum.POSTGRES: 5432,
    ProductTypeEnum.MYSQL: 3306,
    ProductTypeEnum.TRINO: 8080,
}

_SCHEMES: dict[ProductTypeEnum, str] = {
    ProductTypeEnum.POSTGRES: "postgresql+psycopg",
    ProductTypeEnum.MYSQL: "mysql+pymysql",
    ProductTypeEnum.TRINO: "trino",
}


def build_tenant_url(
    product_type: ProductTypeEnum,
    *,
    host: str,
    database: str,
    username: str,
    password: str = "",
    port: int | None = None,
    use_ssl: bool = False,
) -> str:
    """
    Build a SQLAlchemy URL for a tenant database.

    Trino: ``database`` is the catalog; HTTPS requires a password.
    """
    if product_type == ProductTypeEnum.TRINO and use_ssl and not password.strip():
        raise ValueError("Password is required for Trino when using SSL/HTTPS.")
    scheme = _SCHEMES[product_type]
    port = port or _DEFAULT_PORTS[product_type]
    auth = quote_plus(username)
    if password:
        auth += ":" + quote_plus(password)
    url = f"{scheme}://{auth}@{host}:{port}/{quote_plus(database)}"
    if product_type == ProductTypeEnum.TRINO:
        url += "/default"
        if use_ssl:
            url += "?protocol=https"
    return url


settings = Settings()  # type: ignore
