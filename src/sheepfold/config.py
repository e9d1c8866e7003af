import os
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

GEMINI_OPENAI_URL = "https://generativelanguage.googleapis.com/v1beta/openai/"

class Config:
    TELEGRAM_TOKEN = os.getenv("TELEGRAM_TOKEN")
    DB_PATH = os.getenv("DB_PATH", "sqlite:///sheepfold.db")

    # Advisor (OpenAI-compatible text generation endpoint)
    GEMINI_API_KEY = os.getenv("GEMINI_API_KEY")
    ADVISOR_MODEL = os.getenv("ADVISOR_MODEL", "gemini-2.5-flash")
    ADVISOR_BASE_URL = os.getenv("ADVISOR_BASE_URL", GEMINI_OPENAI_URL)
    ADVISOR_TIMEOUT = float(os.getenv("ADVISOR_TIMEOUT", "20"))

    def require_token(self) -> str:
        if not self.TELEGRAM_TOKEN:
            raise ValueError("No TELEGRAM_TOKEN provided in .env file.")
        return self.TELEGRAM_TOKEN

# Global instance
cfg = Config()
