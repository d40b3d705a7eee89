"""Provider configuration: which AI back end to call and how."""

import re
from enum import Enum

from pydantic import BaseModel, Field, field_validator, model_validator

_UNEXPANDED_VAR = re.compile(r"^\$\{?[A-Za-z_][A-Za-z0-9_]*\}?$")

_DEFAULT_BASE_URLS = {
    "openai": "https://api.openai.com/v1",
    "anthropic": "https://api.anthropic.com",
}


class ProviderKind(str, Enum):
    """Supported completion wire dialects."""

    OPENAI = "openai"
    AZURE_OPENAI = "azure-openai"
    ANTHROPIC = "anthropic"


class ProviderConfig(BaseModel):
    """Configuration for the active AI provider.

    Exactly one provider is active per call. ``base_url`` is the resource
    root: ``https://api.openai.com/v1`` for OpenAI-compatible servers,
    ``https://<resource>.openai.azure.com`` for Azure, and
    ``https://api.anthropic.com`` for Anthropic.
    """

    kind: ProviderKind = ProviderKind.OPENAI
    base_url: str = ""
    model: str = "gpt-4o-mini"
    api_key: str | None = None
    api_version: str = "2024-10-21"
    anthropic_version: str = "2023-06-01"
    timeout: float = Field(default=60.0, gt=0)

    @field_validator("api_key")
    @classmethod
    def _drop_unset_env_reference(cls, value: str | None) -> str | None:
        # expandvars leaves references to unset variables in place
        if value is None or not value.strip() or _UNEXPANDED_VAR.match(value.strip()):
            return None
        return value.strip()

    @model_validator(mode="after")
    def _require_azure_base_url(self) -> "ProviderConfig":
        if self.kind is ProviderKind.AZURE_OPENAI and not self.base_url:
            msg = "azure-openai provider requires base_url (https://<resource>.openai.azure.com)"
            raise ValueError(msg)
        return self

    @property
    def provider(self) -> str:
        return self.kind.value

    @property
    def resolved_base_url(self) -> str:
        """Return ``base_url`` without a trailing slash, or the provider default."""
        base = self.base_url or _DEFAULT_BASE_URLS.get(self.kind.value, "")
        return base.rstrip("/")

    def with_model(self, model: str | None) -> "ProviderConfig":
        """Return a copy with a per-request model override (same provider kind)."""
        if not model:
            return self
        return self.model_copy(update={"model": model})
