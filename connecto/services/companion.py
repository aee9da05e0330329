import asyncio
import logging
import random
from typing import Any, Dict, List, Optional

from connecto.core.config import settings
from connecto.core.prompt_manager import prompt_manager
from connecto.services.model_provider import model_provider

logger = logging.getLogger(__name__)

HISTORY_LIMIT = 10

FALLBACK_RESPONSES = [
    "I'm here to listen and support you. Tell me more about what's on your mind.",
    "Mental wellness is about finding balance in our thoughts, feelings and actions. How can I help you today?",
    "I appreciate you reaching out. Building mental resilience takes time and practice - I'm here to help.",
    "Sometimes talking through our challenges helps us see them more clearly. What specifically are you struggling with?",
    "Self-care looks different for everyone. Let's explore what might work best for your situation.",
]

INVALID_PROMPT_RESPONSE = "I didn't understand that. Could you please try again?"


def _turn_text(turn: Dict[str, Any]) -> str:
    # Accept both stored {"role", "parts": [{"text"}]} turns and plain {"role", "content"} turns
    if "content" in turn:
        return turn.get("content") or ""
    parts = turn.get("parts") or []
    if parts:
        return parts[0].get("text") or ""
    return ""


class AuraCompanion:
    """
    Stateless wrapper around the generative model.

    Each call sends the system prompt, the last `HISTORY_LIMIT` turns and the
    new prompt, once, with a timeout. Any upstream failure is absorbed into a
    canned reply, so callers cannot tell an outage from an ordinary answer.
    """

    def __init__(self, provider=None, timeout: Optional[float] = None, rng: Optional[random.Random] = None):
        self.provider = provider or model_provider
        self.timeout = timeout if timeout is not None else settings.ai_timeout_seconds
        self.rng = rng or random.Random()

    def trim_history(self, history: Optional[List[Dict[str, Any]]]) -> List[Dict[str, str]]:
        if not history or not isinstance(history, list):
            return []
        return [
            {"role": "model" if turn.get("role") == "model" else "user", "content": _turn_text(turn)}
            for turn in history[-HISTORY_LIMIT:]
        ]

    def fallback_response(self) -> str:
        return self.rng.choice(FALLBACK_RESPONSES)

    async def generate(self, prompt: str, history: Optional[List[Dict[str, Any]]] = None) -> str:
        if not prompt or not isinstance(prompt, str):
            logger.warning("Invalid prompt provided to companion: %r", prompt)
            return INVALID_PROMPT_RESPONSE

        messages = self.trim_history(history)
        messages.append({"role": "user", "content": prompt})

        try:
            result = await asyncio.wait_for(
                self.provider.generate_chat(messages, system_prompt=prompt_manager.get_template("aura_system")),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError:
            logger.error("Companion model timed out after %ss", self.timeout)
            return self.fallback_response()
        except Exception as e:
            logger.error("Error with companion model: %s", e)
            return self.fallback_response()

        text = ""
        if isinstance(result, dict) and "message" in result:
            text = (result["message"].get("content") or "").strip()
        if not text:
            logger.error("Empty response from companion model")
            return self.fallback_response()
        return text


companion = AuraCompanion()


def get_companion() -> AuraCompanion:
    return companion
