"""
Configuration for the HTML generation / vision evaluation pipeline.
Modify values here or override them through environment variables (.env is loaded).
"""

import os

from dotenv import load_dotenv
from openai import OpenAI

load_dotenv()

# Model Configuration (OpenRouter-compatible IDs)
OPENROUTER_BASE_URL = os.getenv("OPENROUTER_BASE_URL", "https://openrouter.ai/api/v1")
DEFAULT_GENERATOR_MODEL = os.getenv("VISUAL_EVAL_GENERATOR_MODEL", "openai/gpt-4o-mini")
DEFAULT_JUDGE_MODEL = os.getenv("VISUAL_EVAL_JUDGE_MODEL", "openai/gpt-4o")

# Generation
GENERATOR_MAX_TOKENS = 4096
GENERATOR_TEMPERATURE = 0.7

# Judge (deterministic decoding, room for a verbose reply)
JUDGE_TEMPERATURE = 0.0
JUDGE_MAX_TOKENS = 4096
SCORE_KEY = "visual_fidelity"
MAX_SCORE = 10

# Rendering
VIEWPORT_WIDTH = 1280
VIEWPORT_HEIGHT = 800
RENDER_SETTLE_MS = 1000  # Tailwind CDN needs a moment after networkidle

# Dataset
DATASET_PREFIX = "html-generation"
DATA_DIR = "data"
HF_NAMESPACE = os.getenv("HF_NAMESPACE")
HF_TOKEN = os.getenv("HF_TOKEN")

# Tracking (WANDB_MODE=disabled turns logging off without code changes)
WANDB_PROJECT = os.getenv("WANDB_PROJECT", "html-vision-eval")


def make_openai_client(api_key: str | None = None, base_url: str = OPENROUTER_BASE_URL) -> OpenAI:
    """Build the OpenRouter-backed client used for both generation and judging."""
    api_key = api_key or os.getenv("OPENROUTER_API_KEY")
    if not api_key:
        raise RuntimeError(
            "OPENROUTER_API_KEY not set. Add your key to .env: OPENROUTER_API_KEY=your-key-here"
        )
    return OpenAI(base_url=base_url, api_key=api_key)
