import asyncio
import logging

from google import genai
from google.genai import types

from connecto.core.config import settings

logger = logging.getLogger(__name__)


class GeminiProvider:
    def __init__(self, api_key=None, chat_model=None):
        self.api_key = api_key or settings.google_api_key
        if not self.api_key:
            raise ValueError("GOOGLE_API_KEY (or GEMINI_API_KEY) is not set")
        self.client = genai.Client(api_key=self.api_key)
        self.chat_model = chat_model or settings.gemini_chat_model

    def _to_contents(self, messages):
        contents = []
        for msg in messages:
            role = "model" if msg.get("role") == "model" else "user"
            contents.append(types.Content(role=role, parts=[types.Part(text=msg.get("content", ""))]))
        return contents

    async def generate_chat(self, messages, system_prompt=None):
        config = types.GenerateContentConfig(
            system_instruction=system_prompt,
            temperature=0.7,
            top_k=40,
            top_p=0.95,
            max_output_tokens=800,
        )
        contents = self._to_contents(messages)

        loop = asyncio.get_running_loop()
        def call():
            return self.client.models.generate_content(
                model=self.chat_model,
                contents=contents,
                config=config,
            )
        try:
            response = await loop.run_in_executor(None, call)
        except Exception as e:
            logger.error("Exception when calling Gemini: %s", e)
            raise
        text = (response.text or "").strip()
        return {"message": {"content": text}}
