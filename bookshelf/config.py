"""Configuration management."""
import os
from dotenv import load_dotenv

# Load environment variables
load_dotenv()


class Config:
    """Application configuration."""

    # Storage
    BOOKS_JSON_PATH = os.getenv("BOOKS_JSON_PATH", "book.json")
    CONTENT_DIR = os.getenv("CONTENT_DIR", "books")

    # API
    API_HOST = os.getenv("API_HOST", "127.0.0.1")
    API_PORT = int(os.getenv("API_PORT", "3000"))
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*")

    # Logging
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # Client defaults
    DEFAULT_TIMEOUT = int(os.getenv("DEFAULT_TIMEOUT", "10"))
    DEFAULT_MAX_RETRIES = int(os.getenv("DEFAULT_MAX_RETRIES", "3"))

    @property
    def BASE_URL(self):
        """Build the server URL the clients talk to."""
        return f"http://{self.API_HOST}:{self.API_PORT}"

    @property
    def cors_origins(self):
        """Split the comma-separated CORS origin list."""
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]
