import os
from typing import List, Optional

from dotenv import load_dotenv

# Load environment variables
load_dotenv()


class Settings:
    """Runtime configuration read once from the environment (and `.env`)."""

    def __init__(self):
        self.database_url = os.getenv("DATABASE_URL", "sqlite:///./connecto.db")

        # Session tokens. A missing secret only fails requests that need a token.
        self.jwt_secret: Optional[str] = os.getenv("JWT_SECRET") or None
        self.jwt_algorithm = "HS256"
        self.jwt_expire_days = int(os.getenv("JWT_EXPIRE_DAYS", 30))
        self.cookie_secure = os.getenv("COOKIE_SECURE", "false").lower() == "true"

        self.cors_origins = os.getenv("CORS_ORIGINS", "http://localhost:5173,http://127.0.0.1:5173")
        self.log_level = os.getenv("LOG_LEVEL", "INFO")

        # Generative AI
        self.chat_provider = os.getenv("CHAT_PROVIDER", "gemini").lower()
        self.google_api_key = os.getenv("GOOGLE_API_KEY") or os.getenv("GEMINI_API_KEY")
        self.gemini_chat_model = os.getenv("GEMINI_CHAT_MODEL", "gemini-1.5-flash")
        self.ollama_base_url = os.getenv("OLLAMA_BASE_URL", "http://localhost:11434")
        self.ollama_chat_model = os.getenv("OLLAMA_CHAT_MODEL", "llama3")
        self.ai_timeout_seconds = float(os.getenv("AI_TIMEOUT_SECONDS", 20))

    def get_cors_origins_list(self) -> List[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]


settings = Settings()
