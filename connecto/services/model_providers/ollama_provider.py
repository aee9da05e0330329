import httpx

from connecto.core.config import settings


class OllamaProvider:
    def __init__(self, base_url=None, chat_model=None):
        self.base_url = base_url or settings.ollama_base_url
        self.chat_model = chat_model or settings.ollama_chat_model

    async def generate_chat(self, messages, system_prompt=None):
        url = f"{self.base_url}/api/chat"
        chat_messages = []
        if system_prompt:
            chat_messages.append({"role": "system", "content": system_prompt})
        for msg in messages:
            # Ollama names the model turn "assistant"
            role = "assistant" if msg.get("role") == "model" else "user"
            chat_messages.append({"role": role, "content": msg.get("content", "")})
        payload = {
            "model": self.chat_model,
            "messages": chat_messages,
            "stream": False
        }
        async with httpx.AsyncClient() as client:
            response = await client.post(url, json=payload, timeout=settings.ai_timeout_seconds)
            response.raise_for_status()
            return response.json()
