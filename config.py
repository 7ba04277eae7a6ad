"""Configuration module for PDF Illustrator."""
import os
from pathlib import Path
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# Text generation (scene descriptions)
TEXT_GEN_PROVIDER = os.getenv("TEXT_GEN_PROVIDER", "groq")  # "groq" | "anthropic"
GROQ_API_KEY = os.getenv("GROQ_API_KEY", "")
GROQ_ENDPOINT = os.getenv("GROQ_ENDPOINT", "https://api.groq.com/openai/v1/chat/completions")
GROQ_MODEL = os.getenv("GROQ_MODEL", "llama-3.1-8b-instant")
ANTHROPIC_API_KEY = os.getenv("ANTHROPIC_API_KEY", "")
ANTHROPIC_MODEL = os.getenv("ANTHROPIC_MODEL", "claude-3-5-haiku-latest")
SCENE_MAX_TOKENS = int(os.getenv("SCENE_MAX_TOKENS", "120"))
SCENE_TEMPERATURE = float(os.getenv("SCENE_TEMPERATURE", "0.5"))
MAX_PROMPT_CHARS = int(os.getenv("MAX_PROMPT_CHARS", "1200"))

# Image generation (Cloudflare Workers AI, SDXL)
CLOUDFLARE_ACCOUNT_ID = os.getenv("CLOUDFLARE_ACCOUNT_ID", "")
CLOUDFLARE_API_TOKEN = os.getenv("CLOUDFLARE_API_TOKEN", "")
IMAGE_GEN_ENDPOINT = os.getenv(
    "IMAGE_GEN_ENDPOINT",
    f"https://api.cloudflare.com/client/v4/accounts/{CLOUDFLARE_ACCOUNT_ID}"
    "/ai/run/@cf/stabilityai/stable-diffusion-xl-base-1.0"
)
STYLE_SUFFIX = os.getenv(
    "STYLE_SUFFIX",
    "in a consistent, soft watercolor book illustration style, with gentle pastel colors. "
    "Use the same art style for all images in this PDF."
)
JPEG_QUALITY = int(os.getenv("JPEG_QUALITY", "65"))  # Lower = smaller file, 60-75 works well

# Timing
BUDGET_SECONDS = float(os.getenv("BUDGET_SECONDS", "50"))  # Stay under a 60s platform limit
REQUEST_TIMEOUT_SECONDS = float(os.getenv("REQUEST_TIMEOUT_SECONDS", "45"))

# HTTP ingress
MAX_UPLOAD_BYTES = int(os.getenv("MAX_UPLOAD_BYTES", str(25 * 1024 * 1024)))
OUTPUT_FILENAME = "illustrated.pdf"

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Output Paths
OUTPUT_DIR = Path(os.getenv("OUTPUT_DIR", "./output"))
