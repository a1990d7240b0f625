"""Configuration models and helpers for the Event-to-Insight backend."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import List, Mapping, MutableMapping, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

__all__ = [
    "AppConfig",
    "ArticleCatalog",
    "DEFAULT_CATALOG_PATH",
    "DEFAULT_ENV_PATH",
    "HeuristicRules",
    "SeedArticle",
    "SummaryRule",
    "load_env_file",
    "read_env_file",
]

DEFAULT_CATALOG_PATH = Path(__file__).resolve().parent / "data" / "articles.json"
DEFAULT_ENV_PATH = Path(__file__).resolve().parents[2] / ".env"

SERVICE_NAME = "event-to-insight-backend"

PASSWORD_SUMMARY = (
    "To reset your password, go to the login page, click 'Forgot Password', enter your email "
    "address, and follow the instructions sent to your email. The reset link expires in 24 hours."
)
VPN_SUMMARY = (
    "To set up VPN connection, download the VPN client from the IT portal, install it with admin "
    "credentials, and connect to the 'Corporate-Main' server using your domain username and password."
)
EMAIL_SUMMARY = (
    "For email configuration, use IMAP: mail.company.com port 993 SSL and SMTP: mail.company.com "
    "port 587 STARTTLS. Ensure your username format is firstname.lastname@company.com."
)
PRINTER_SUMMARY = (
    "For printer issues, ensure the printer is connected to the corporate network, install latest "
    "drivers, and add printer using IP address 192.168.1.100."
)
MATCHED_SUMMARY = (
    "I found relevant information in our knowledge base that should help with your query. "
    "Please review the articles below for detailed instructions."
)
NO_MATCH_SUMMARY = (
    "I couldn't find specific information for your query in our knowledge base. Please contact IT "
    "support for further assistance, or try rephrasing your question."
)

DEFAULT_KEYWORDS = [
    "password",
    "vpn",
    "email",
    "printer",
    "software",
    "backup",
    "antivirus",
    "remote",
]


def read_env_file(path: Path | str) -> dict[str, str]:
    """Parse ``KEY=VALUE`` lines from a dotenv file.

    Blank lines and ``#`` comments are skipped, an ``export`` prefix is
    allowed and matching surrounding quotes are removed from values. A missing
    file yields an empty mapping.
    """

    env_path = Path(path)
    if not env_path.is_file():
        return {}

    values: dict[str, str] = {}
    for raw_line in env_path.read_text(encoding="utf-8").splitlines():
        line = raw_line.strip()
        if line.startswith("export "):
            line = line[len("export ") :].lstrip()
        if not line or line.startswith("#") or "=" not in line:
            continue

        key, _, value = line.partition("=")
        key = key.strip()
        if not key:
            continue
        value = value.strip()
        if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
            value = value[1:-1]
        values[key] = value
    return values


def load_env_file(path: Path | str = DEFAULT_ENV_PATH, environ: MutableMapping[str, str] | None = None) -> List[str]:
    """Copy variables from a dotenv file into ``environ`` without overriding.

    Returns the keys that were set.
    """

    target = os.environ if environ is None else environ
    loaded = []
    for key, value in read_env_file(path).items():
        if key not in target:
            target[key] = value
            loaded.append(key)
    return loaded


def _read_json(path: Path) -> object:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise FileNotFoundError(f"Configuration file not found: {path}") from exc
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON in configuration file: {path}") from exc


class SeedArticle(BaseModel):
    """An article inserted by the one-time seed step."""

    title: str = Field(..., min_length=1, description="Article title")
    content: str = Field(..., min_length=1, description="Full article body")


class ArticleCatalog(BaseModel):
    """The fixed knowledge-base catalog used to seed an empty store."""

    articles: List[SeedArticle] = Field(default_factory=list)

    @classmethod
    def from_file(cls, path: Path | str | None = None) -> "ArticleCatalog":
        """Load the catalog from a JSON file, defaulting to the bundled one."""

        catalog_path = Path(path) if path else DEFAULT_CATALOG_PATH
        data = _read_json(catalog_path)

        try:
            return cls.model_validate(data)
        except ValidationError as exc:
            raise ValueError(f"Article catalog is invalid: {catalog_path}\n{exc}") from exc

    def dump(self, path: Path | str) -> None:
        """Persist the catalog as JSON."""

        catalog_path = Path(path)
        catalog_path.parent.mkdir(parents=True, exist_ok=True)
        catalog_path.write_text(self.model_dump_json(indent=2), encoding="utf-8")


class SummaryRule(BaseModel):
    """Canned summary returned when ``keyword`` occurs in a query."""

    keyword: str = Field(..., min_length=1)
    summary: str = Field(..., min_length=1)

    @field_validator("keyword")
    @classmethod
    def _lowercase_keyword(cls, v: str) -> str:
        return v.strip().lower()


def _default_summary_rules() -> List[SummaryRule]:
    return [
        SummaryRule(keyword="password", summary=PASSWORD_SUMMARY),
        SummaryRule(keyword="vpn", summary=VPN_SUMMARY),
        SummaryRule(keyword="email", summary=EMAIL_SUMMARY),
        SummaryRule(keyword="printer", summary=PRINTER_SUMMARY),
    ]


class HeuristicRules(BaseModel):
    """Keyword list and summary cascade driving the keyword analyzer.

    ``summaries`` is evaluated in order and the first rule whose keyword occurs
    in the query wins. ``matched_summary`` is used when no rule applies but at
    least one article matched, ``no_match_summary`` otherwise.
    """

    keywords: List[str] = Field(default_factory=lambda: list(DEFAULT_KEYWORDS))
    summaries: List[SummaryRule] = Field(default_factory=_default_summary_rules)
    matched_summary: str = MATCHED_SUMMARY
    no_match_summary: str = NO_MATCH_SUMMARY

    @field_validator("keywords")
    @classmethod
    def _normalise_keywords(cls, v: List[str]) -> List[str]:
        keywords = [keyword.strip().lower() for keyword in v]
        if any(not keyword for keyword in keywords):
            raise ValueError("keywords must be non-empty")
        return keywords

    @classmethod
    def from_file(cls, path: Path | str) -> "HeuristicRules":
        """Load rules from a JSON file."""

        rules_path = Path(path)
        data = _read_json(rules_path)

        try:
            return cls.model_validate(data)
        except ValidationError as exc:
            raise ValueError(f"Heuristic rules file is invalid: {rules_path}\n{exc}") from exc

    def dump(self, path: Path | str) -> None:
        """Persist the rules as JSON."""

        rules_path = Path(path)
        rules_path.parent.mkdir(parents=True, exist_ok=True)
        rules_path.write_text(self.model_dump_json(indent=2), encoding="utf-8")


class AppConfig(BaseModel):
    """Environment-level settings for the HTTP service."""

    host: str = "0.0.0.0"
    port: int = Field(default=8080, ge=1, le=65535)
    db_path: str = "./data.db"
    database_url: Optional[str] = Field(
        default=None,
        description="SQLAlchemy URL; takes precedence over db_path when set",
    )
    use_mock_ai: bool = Field(default=True, description="Use the keyword analyzer instead of OpenAI")
    openai_api_key: Optional[str] = None
    openai_model: str = "gpt-4o-mini"
    heuristic_rules_path: Optional[Path] = None
    allowed_origins: List[str] = Field(
        default_factory=lambda: ["http://localhost:3000", "http://localhost:5173"]
    )
    log_level: str = "INFO"

    @field_validator("allowed_origins", mode="before")
    @classmethod
    def _parse_allowed_origins(cls, v: object) -> object:
        """Parse comma-separated origins from env var."""
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}:
            raise ValueError(f"Unknown log level: {v}")
        return level

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "AppConfig":
        """Build the configuration from environment variables.

        Empty variables are treated as unset.
        """

        env = os.environ if environ is None else environ

        def get(key: str) -> str | None:
            value = env.get(key, "").strip()
            return value or None

        values: dict[str, object] = {}
        for key, field in (
            ("HOST", "host"),
            ("PORT", "port"),
            ("DB_PATH", "db_path"),
            ("DATABASE_URL", "database_url"),
            ("OPENAI_API_KEY", "openai_api_key"),
            ("OPENAI_MODEL", "openai_model"),
            ("HEURISTIC_RULES_PATH", "heuristic_rules_path"),
            ("ALLOWED_ORIGINS", "allowed_origins"),
            ("LOG_LEVEL", "log_level"),
        ):
            value = get(key)
            if value is not None:
                values[field] = value

        use_mock = get("USE_MOCK_AI")
        if use_mock is not None:
            values["use_mock_ai"] = use_mock.lower() == "true"

        try:
            return cls.model_validate(values)
        except ValidationError as exc:
            raise ValueError(f"Invalid environment configuration\n{exc}") from exc

    @property
    def resolved_database_url(self) -> str:
        """Return the SQLAlchemy URL for the configured store."""

        if self.database_url:
            return self.database_url
        return f"sqlite:///{self.db_path}"

    @property
    def use_generative(self) -> bool:
        """``True`` when the OpenAI analyzer should be used."""

        return not self.use_mock_ai and bool(self.openai_api_key)

    def load_heuristic_rules(self) -> HeuristicRules:
        if self.heuristic_rules_path is None:
            return HeuristicRules()
        return HeuristicRules.from_file(self.heuristic_rules_path)
