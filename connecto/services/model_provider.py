import logging

from connecto.core.config import settings

logger = logging.getLogger(__name__)


class ModelProvider:
    """Chooses the chat backend from CHAT_PROVIDER and builds it on first use."""

    def __init__(self, provider_name=None):
        self.provider_name = (provider_name or settings.chat_provider).lower()
        self._provider = None

    @property
    def provider(self):
        if self._provider is None:
            logger.info("Initializing ModelProvider with %s", self.provider_name)
            if self.provider_name == "ollama":
                from connecto.services.model_providers.ollama_provider import OllamaProvider
                self._provider = OllamaProvider()
            elif self.provider_name == "gemini":
                from connecto.services.model_providers.gemini_provider import GeminiProvider
                self._provider = GeminiProvider()
            else:
                raise ValueError(f"Unknown CHAT_PROVIDER: {self.provider_name}")
        return self._provider

    async def generate_chat(self, messages, system_prompt=None):
        return await self.provider.generate_chat(messages, system_prompt)

# Initialize the model provider
model_provider = ModelProvider()
