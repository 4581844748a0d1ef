# Service request agent configuration

import os
from pathlib import Path

from dotenv import load_dotenv

PROJECT_ROOT = Path(__file__).parent

# Load .env from project root (real environment wins)
env_path = PROJECT_ROOT / ".env"
if env_path.exists():
    load_dotenv(env_path)

STATIC_DIR = PROJECT_ROOT / "static"

# HTTP server
PORT = int(os.getenv("PORT", "3000"))
MAX_BODY_BYTES = int(os.getenv("MAX_BODY_BYTES", str(1024 * 1024)))  # 1 MiB

# Page the form driver opens; by default the form this server hosts at GET /
FORM_URL = os.getenv("FORM_URL", f"http://localhost:{PORT}")

# Visible browser only when explicitly disabled (local debugging); CI/cron runs headless
HEADLESS = os.getenv("HEADLESS", "true").strip().lower() != "false"

# Text generation backend
AI_CONFIG = {
    "provider": os.getenv("GENERATION_PROVIDER", "claude"),  # claude (paid) or ollama (free)
    "claude_model": os.getenv("CLAUDE_MODEL", "claude-sonnet-4-20250514"),
    "ollama_model": os.getenv("OLLAMA_MODEL", "llama3"),
    "ollama_url": os.getenv("OLLAMA_URL", "http://localhost:11434"),
    "request_timeout": int(os.getenv("GENERATION_TIMEOUT", "120")),  # seconds
}
