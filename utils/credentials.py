"""
Credential Utility Module

This module holds the per-invocation connection parameters used by the Weaviate
client: the instance URL, the Weaviate API key, and the optional API keys of the
vectorizer and generative modules that Weaviate forwards to third-party providers.

Credentials are immutable and are built fresh for every tool invocation; nothing
in this plugin keeps them in process-global state.

Author: Weaviate Team
Version: 1.0.0
"""

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

# Provider credential field -> header Weaviate reads the module key from
PROVIDER_KEY_HEADERS = {
    "openai_api_key": "X-OpenAI-Api-Key",
    "cohere_api_key": "X-Cohere-Api-Key",
    "huggingface_api_key": "X-HuggingFace-Api-Key",
    "anthropic_api_key": "X-Anthropic-Api-Key",
    "azure_api_key": "X-Azure-Api-Key",
}


def _clean(value: Any) -> Optional[str]:
    if value is None:
        return None
    s = str(value).strip()
    return s or None


@dataclass(frozen=True)
class Credentials:
    """
    Connection parameters for a single call against a Weaviate instance.

    Attributes:
        weaviate_url (Optional[str]): Base URL of the Weaviate instance
        api_key (Optional[str]): Weaviate API key, sent as a bearer token
        openai_api_key (Optional[str]): Key for text2vec-openai / generative-openai
        cohere_api_key (Optional[str]): Key for text2vec-cohere
        huggingface_api_key (Optional[str]): Key for text2vec-huggingface
        anthropic_api_key (Optional[str]): Key for generative-anthropic
        azure_api_key (Optional[str]): Key for Azure OpenAI modules
    """

    weaviate_url: Optional[str] = None
    api_key: Optional[str] = None
    openai_api_key: Optional[str] = None
    cohere_api_key: Optional[str] = None
    huggingface_api_key: Optional[str] = None
    anthropic_api_key: Optional[str] = None
    azure_api_key: Optional[str] = None

    @classmethod
    def from_mapping(cls, credentials: Mapping[str, Any]) -> "Credentials":
        """
        Build credentials from the plugin's provider credential form.

        Blank values are treated as absent.

        Args:
            credentials (Mapping[str, Any]): Runtime credentials with the keys ``url``,
                ``api_key`` and the optional ``*_api_key`` provider fields

        Returns:
            Credentials: Immutable credentials value
        """
        credentials = credentials or {}
        return cls(
            weaviate_url=_clean(credentials.get("url")),
            api_key=_clean(credentials.get("api_key")),
            **{field: _clean(credentials.get(field)) for field in PROVIDER_KEY_HEADERS},
        )

    def auth_headers(self) -> Dict[str, str]:
        """
        Assemble the request headers carrying these credentials.

        Returns:
            Dict[str, str]: ``Content-Type`` plus one header per populated key
        """
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        for field, header in PROVIDER_KEY_HEADERS.items():
            value = getattr(self, field)
            if value:
                headers[header] = value
        return headers
