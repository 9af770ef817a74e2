from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator

API_BASE_URL = "https://api.nonefivem.com"
API_BASE_PATH = "/cloud"


class NoCloudConfig(BaseModel):
    """Client configuration. Immutable once built, so it can be shared by concurrent calls."""

    model_config = ConfigDict(frozen=True)

    api_key: SecretStr
    """API key sent as a bearer token to the NoCloud API (never to the object store)."""
    base_url: str = API_BASE_URL
    """API base url, scheme included."""
    base_path: str = API_BASE_PATH
    """Path prefix prepended to every endpoint."""
    retries: int = Field(default=3, ge=0)
    """Number of retries after the first failed attempt of an API call."""
    retry_delay: float = Field(default=1.0, ge=0)
    """Fixed delay in seconds between attempts."""
    retry_on_status: bool = False
    """Also retry 429 and 5xx responses. By default only network failures are retried."""
    timeout: float = Field(default=30.0, gt=0)
    """Connect/write/pool timeout in seconds. Reads are unbounded so large transfers can complete."""

    @field_validator("api_key")
    @classmethod
    def validate_api_key(cls, value: SecretStr) -> SecretStr:
        if not value.get_secret_value().strip():
            raise ValueError("API key is required")
        return value

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, value: str) -> str:
        if not value.startswith(("http://", "https://")):
            value = f"https://{value}"
        return value.rstrip("/")

    @field_validator("base_path")
    @classmethod
    def validate_base_path(cls, value: str) -> str:
        value = value.strip("/")
        return f"/{value}" if value else ""

    @property
    def auth_header(self) -> dict[str, str]:
        """Format the authentication header for requests to the NoCloud API."""
        return {"Authorization": f"Bearer {self.api_key.get_secret_value()}"}

    def endpoint_url(self, endpoint: str) -> str:
        return f"{self.base_url}{self.base_path}/{endpoint.lstrip('/')}"
