# app/llm/service/credentials.py
from dataclasses import dataclass, field
from typing import Dict, Optional

from app.core.config import Settings, settings as default_settings
from app.core.errors import ConfigurationError
from app.llm.entity.chat import ProviderFamily

PROXY_KEY_PREFIX = "sk-or-v1"

# Vendor namespace used by the proxy for each family it can route.
PROXY_NAMESPACES: Dict[ProviderFamily, str] = {
    ProviderFamily.OPENAI: "openai/",
    ProviderFamily.ANTHROPIC: "anthropic/",
    ProviderFamily.GEMINI: "google/",
}


def is_proxy_key(raw_key: str) -> bool:
    return raw_key.startswith(PROXY_KEY_PREFIX)


@dataclass(frozen=True)
class ResolvedCredential:
    family: ProviderFamily
    api_key: str
    base_url: str
    wire_model_prefix: str = ""
    headers: Dict[str, str] = field(default_factory=dict)
    uses_proxy: bool = False

    def wire_model(self, model_id: str) -> str:
        return f"{self.wire_model_prefix}{model_id}"


class CredentialResolver:
    """
    Decides, from configuration alone, how a provider family is reached:
    directly at the vendor, or through the proxy when the key has the proxy shape.
    """

    def __init__(self, config: Optional[Settings] = None):
        self.config = config or default_settings

    def _raw_key(self, family: ProviderFamily, model_id: Optional[str]) -> Optional[str]:
        if family is ProviderFamily.GEMINI and model_id and model_id.startswith("gemma-"):
            gemma_key = (self.config.GOOGLE_GEMMA_API_KEY or "").strip()
            if gemma_key:
                return gemma_key
        key = {
            ProviderFamily.OPENAI: self.config.OPENAI_API_KEY,
            ProviderFamily.ANTHROPIC: self.config.ANTHROPIC_API_KEY,
            ProviderFamily.GEMINI: self.config.GEMINI_API_KEY,
            ProviderFamily.MISTRAL: self.config.MISTRAL_API_KEY,
            ProviderFamily.COHERE: self.config.COHERE_API_KEY,
        }[family]
        return (key or "").strip() or None

    def is_configured(self, family: ProviderFamily, model_id: Optional[str] = None) -> bool:
        return self._raw_key(family, model_id) is not None

    def resolve(self, family: ProviderFamily, model_id: Optional[str] = None) -> ResolvedCredential:
        api_key = self._raw_key(family, model_id)
        if not api_key:
            raise ConfigurationError(f"{family.label} API key not configured")

        if family in PROXY_NAMESPACES and is_proxy_key(api_key):
            return ResolvedCredential(
                family=family,
                api_key=api_key,
                base_url=self.config.PROXY_BASE_URL,
                wire_model_prefix=PROXY_NAMESPACES[family],
                headers={
                    "Authorization": f"Bearer {api_key}",
                    "Content-Type": "application/json",
                    "HTTP-Referer": self.config.PROXY_REFERER,
                },
                uses_proxy=True,
            )

        if family is ProviderFamily.ANTHROPIC:
            headers = {
                "x-api-key": api_key,
                "anthropic-version": self.config.ANTHROPIC_VERSION,
                "Content-Type": "application/json",
            }
        elif family is ProviderFamily.GEMINI:
            # Gemini's native API takes the key as a query parameter.
            headers = {"Content-Type": "application/json"}
        else:
            headers = {
                "Authorization": f"Bearer {api_key}",
                "Content-Type": "application/json",
            }

        base_url = {
            ProviderFamily.OPENAI: self.config.OPENAI_BASE_URL,
            ProviderFamily.ANTHROPIC: self.config.ANTHROPIC_BASE_URL,
            ProviderFamily.GEMINI: self.config.GEMINI_BASE_URL,
            ProviderFamily.MISTRAL: self.config.MISTRAL_BASE_URL,
            ProviderFamily.COHERE: self.config.COHERE_BASE_URL,
        }[family]

        return ResolvedCredential(
            family=family,
            api_key=api_key,
            base_url=base_url.rstrip("/"),
            headers=headers,
            uses_proxy=False,
        )
