"""Pydantic models shared by the proxy, the configuration layer and the commands."""

from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator

DEFAULT_REPORT_SERVER_URI = "http://localhost/reportserver/"


class Property(BaseModel):
    """
    A name/value pair attached to a catalog item.

    Mirrors the report server's ``Property`` type. Values travel as strings
    on the wire, so booleans are rendered as ``"true"`` / ``"false"``.
    """

    name: str = Field(..., description="Property name (e.g. 'Description').")
    value: str = Field(..., description="Property value as sent to the server.")

    model_config = ConfigDict(extra="forbid", frozen=True)

    @field_validator("name")
    @classmethod
    def _name_not_empty(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Property.name must not be empty")
        return v


class Credentials(BaseModel):
    """User credentials forwarded to the report server."""

    username: str = Field(..., description="Login name, without domain.")
    password: SecretStr = Field(
        default=SecretStr(""), description="Login password. Empty when omitted."
    )
    domain: str | None = Field(
        default=None, description="Optional Windows domain of the account."
    )

    model_config = ConfigDict(extra="forbid")

    @field_validator("username")
    @classmethod
    def _username_not_empty(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Credentials.username must not be empty")
        return v.strip()

    @property
    def login(self) -> str:
        """Login in ``DOMAIN\\user`` form when a domain is set."""
        if self.domain:
            return f"{self.domain}\\{self.username}"
        return self.username


class ConnectionSettings(BaseModel):
    """Everything needed to reach a report server."""

    report_server_uri: str = Field(
        default=DEFAULT_REPORT_SERVER_URI,
        description="Base URI of the report server web service.",
    )
    credentials: Credentials | None = Field(
        default=None,
        description="Explicit credentials. None sends unauthenticated requests.",
    )
    timeout_s: float = Field(
        default=60, gt=0, description="Request timeout in seconds."
    )
    verify_ssl: bool = Field(
        default=True, description="Verify the server TLS certificate."
    )

    model_config = ConfigDict(extra="forbid")

    @field_validator("report_server_uri")
    @classmethod
    def _uri_not_empty(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("report_server_uri must not be empty")
        return v.strip()
