from typing import Any
import asyncio
import logging

from dify_plugin import ToolProvider
from dify_plugin.errors.tool import ToolProviderCredentialValidationError

from utils.client import WeaviateClient
from utils.credentials import Credentials
from utils.errors import WeaviateApiError
from utils.validators import validate_api_key, validate_weaviate_url

logger = logging.getLogger(__name__)

# Seconds; shorter than the tool timeout
VALIDATION_TIMEOUT = 15


async def _check_instance(credentials: Credentials) -> None:
    """
    Check readiness, then make an authenticated call so a bad API key is caught.
    """
    async with WeaviateClient(credentials, timeout=VALIDATION_TIMEOUT) as client:
        ready = await client.is_ready()
        if ready["status"] != "ok":
            raise ToolProviderCredentialValidationError(
                "Weaviate endpoint is reachable but not ready. Please try again later."
            )
        await client.get_meta()


class WeaviatePluginProvider(ToolProvider):
    """
    Weaviate plugin provider for Dify that validates credentials against a Weaviate
    instance's REST API.
    """

    def _validate_credentials(self, credentials: dict[str, Any]) -> None:
        """
        Validates Weaviate connection credentials by performing format checks and
        calling the instance.

        This method performs the following validation steps:
        1. Validates URL format
        2. Validates API key format if provided
        3. Checks the readiness endpoint
        4. Calls ``/v1/meta`` to verify authentication

        Args:
            credentials (dict[str, Any]): Provider credentials:
                - url (str): Weaviate instance URL (e.g., https://your-instance.com)
                - api_key (str, optional): Weaviate API key
                - openai_api_key, cohere_api_key, huggingface_api_key,
                  anthropic_api_key, azure_api_key (str, optional): Module provider keys

        Raises:
            ToolProviderCredentialValidationError: If any validation step fails
        """
        url = (credentials.get("url") or "").strip()
        api_key = (credentials.get("api_key") or "").strip()

        if not validate_weaviate_url(url):
            raise ToolProviderCredentialValidationError(
                "Invalid Weaviate URL. Expected format like https://your-weaviate-instance.com[:port]"
            )
        if api_key and not validate_api_key(api_key):
            raise ToolProviderCredentialValidationError("Invalid API key value.")

        try:
            asyncio.run(_check_instance(Credentials.from_mapping(credentials)))

        except ToolProviderCredentialValidationError:
            raise

        except WeaviateApiError as e:
            logger.warning(f"Credential validation rejected: {e.message}")
            raise ToolProviderCredentialValidationError(f"Weaviate rejected the credentials: {e.message}")

        except Exception as e:
            msg = str(e) or repr(e)
            raise ToolProviderCredentialValidationError(
                f"Failed to connect to Weaviate at {url}. "
                f"Verify the URL is correct and the API key (if required) is valid. Details: {msg}"
            )
