import os
from pathlib import Path
from dotenv import load_dotenv

# Load .env FIRST before anything else
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(env_path)

BASE_DIR = Path(__file__).resolve().parent.parent


class Settings:
    BASE_DIR: Path = BASE_DIR
    APP_NAME: str = "precap"
    DEBUG: bool = os.getenv("DEBUG", "false").lower() == "true"

    # FastAPI
    API_HOST: str = os.getenv("API_HOST", "0.0.0.0")
    API_PORT: int = int(os.getenv("API_PORT", "8000"))
    FRONTEND_DIR: str = str(BASE_DIR / "frontend")

    # MCP
    MCP_SERVER_MODULE: str = "backend.mcp_server.server"

    # Google Workspace
    GOOGLE_CREDENTIALS_FILE: str = str(BASE_DIR / os.getenv("GOOGLE_CREDENTIALS_FILE", "credentials.json"))
    GOOGLE_TOKEN_FILE: str = str(BASE_DIR / os.getenv("GOOGLE_TOKEN_FILE", "token.json"))
    GOOGLE_SCOPES: list = [
        "https://www.googleapis.com/auth/calendar.readonly",
        "https://www.googleapis.com/auth/contacts.readonly",
        "https://www.googleapis.com/auth/userinfo.profile",
        "https://www.googleapis.com/auth/documents",
        "https://www.googleapis.com/auth/drive.file",
    ]
    MOCK_GOOGLE: bool = os.getenv("MOCK_GOOGLE", "true").lower() == "true"
    MAX_EVENTS: int = int(os.getenv("MAX_EVENTS", "100"))

    # Exa people search
    EXA_API_KEY: str = os.getenv("EXA_API_KEY", "")
    EXA_SEARCH_URL: str = os.getenv("EXA_SEARCH_URL", "https://api.exa.ai/search")
    EXA_NUM_RESULTS: int = int(os.getenv("EXA_NUM_RESULTS", "5"))
    HTTP_TIMEOUT: float = float(os.getenv("HTTP_TIMEOUT", "30"))

    # HuggingFace summarizer
    HF_TOKEN: str = os.getenv("HF_TOKEN", "")
    HF_MODEL: str = os.getenv("HF_MODEL", "meta-llama/Llama-3.3-70B-Instruct")
    SUMMARY_TEMPERATURE: float = float(os.getenv("SUMMARY_TEMPERATURE", "0.3"))
    SUMMARY_MAX_TOKENS: int = int(os.getenv("SUMMARY_MAX_TOKENS", "1024"))

    # Pipeline pacing (seconds)
    STEP_DELAY: float = float(os.getenv("STEP_DELAY", "0.1"))
    STAGE_DELAY: float = float(os.getenv("STAGE_DELAY", "0.5"))

    # Defaults
    DEFAULT_TIMEZONE: str = os.getenv("DEFAULT_TIMEZONE", "UTC")

    # Logging
    LOG_FILE: str = os.getenv("LOG_FILE", "app.log")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "DEBUG").upper()
    # the MCP server subprocess sets this to "stderr", stdout carries the protocol
    LOG_STREAM: str = os.getenv("LOG_STREAM", "stdout")


settings = Settings()

# Debug print on import
if settings.DEBUG:
    print(f"[CONFIG] HF_MODEL    = {settings.HF_MODEL}")
    print(f"[CONFIG] MOCK_GOOGLE = {settings.MOCK_GOOGLE}")
    print(f"[CONFIG] EXA KEY SET = {bool(settings.EXA_API_KEY)}")
    print(f"[CONFIG] CREDENTIALS = {settings.GOOGLE_CREDENTIALS_FILE}")
