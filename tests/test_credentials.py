import pytest

from app.core.errors import ConfigurationError
from app.llm.entity.chat import ProviderFamily
from app.llm.service.credentials import CredentialResolver

from conftest import make_settings


def resolver(**keys) -> CredentialResolver:
    return CredentialResolver(make_settings(**keys))


def test_proxy_shaped_key_routes_through_proxy_with_namespace():
    cred = resolver(OPENAI_API_KEY="sk-or-v1-abc").resolve(ProviderFamily.OPENAI, "gpt-4o-mini")

    assert cred.uses_proxy
    assert cred.base_url == "https://openrouter.ai/api/v1"
    assert cred.wire_model("gpt-4o-mini") == "openai/gpt-4o-mini"
    assert cred.headers["Authorization"] == "Bearer sk-or-v1-abc"
    assert cred.headers["HTTP-Referer"] == "http://localhost:3000"


def test_vendor_key_routes_directly():
    cred = resolver(OPENAI_API_KEY="sk-live-abc").resolve(ProviderFamily.OPENAI, "gpt-4o-mini")

    assert not cred.uses_proxy
    assert cred.base_url == "https://api.openai.com/v1"
    assert cred.wire_model("gpt-4o-mini") == "gpt-4o-mini"
    assert cred.headers["Authorization"] == "Bearer sk-live-abc"


@pytest.mark.parametrize(
    "family, field, namespace",
    [
        (ProviderFamily.ANTHROPIC, "ANTHROPIC_API_KEY", "anthropic/"),
        (ProviderFamily.GEMINI, "GEMINI_API_KEY", "google/"),
    ],
)
def test_proxy_namespaces_per_family(family, field, namespace):
    cred = resolver(**{field: "sk-or-v1-xyz"}).resolve(family, "some-model")
    assert cred.uses_proxy
    assert cred.wire_model_prefix == namespace


@pytest.mark.parametrize(
    "family, field",
    [
        (ProviderFamily.MISTRAL, "MISTRAL_API_KEY"),
        (ProviderFamily.COHERE, "COHERE_API_KEY"),
    ],
)
def test_mistral_and_cohere_are_always_direct(family, field):
    cred = resolver(**{field: "sk-or-v1-looks-like-proxy"}).resolve(family, "any")
    assert not cred.uses_proxy
    assert "openrouter" not in cred.base_url


def test_anthropic_direct_headers():
    cred = resolver(ANTHROPIC_API_KEY="sk-ant-1").resolve(ProviderFamily.ANTHROPIC, "claude-3-5-sonnet-20241022")

    assert cred.headers["x-api-key"] == "sk-ant-1"
    assert cred.headers["anthropic-version"] == "2023-06-01"
    assert "Authorization" not in cred.headers


def test_missing_key_raises_configuration_error():
    with pytest.raises(ConfigurationError) as exc_info:
        resolver().resolve(ProviderFamily.ANTHROPIC, "claude-3-5-sonnet-20241022")

    assert exc_info.value.status_code == 503
    assert "Anthropic API key not configured" in exc_info.value.message


def test_blank_key_counts_as_missing():
    assert not resolver(MISTRAL_API_KEY="   ").is_configured(ProviderFamily.MISTRAL)


def test_gemma_prefers_dedicated_key_and_falls_back_to_gemini_key():
    both = resolver(GEMINI_API_KEY="g-key", GOOGLE_GEMMA_API_KEY="gemma-key")
    assert both.resolve(ProviderFamily.GEMINI, "gemma-2-9b-it").api_key == "gemma-key"
    assert both.resolve(ProviderFamily.GEMINI, "gemini-1.5-flash").api_key == "g-key"

    gemini_only = resolver(GEMINI_API_KEY="g-key")
    assert gemini_only.resolve(ProviderFamily.GEMINI, "gemma-2-9b-it").api_key == "g-key"


def test_trailing_slash_stripped_from_direct_base_url():
    cred = resolver(MISTRAL_API_KEY="m", MISTRAL_BASE_URL="https://mistral.example/v1/").resolve(
        ProviderFamily.MISTRAL, "mistral-large-latest"
    )
    assert cred.base_url == "https://mistral.example/v1"
