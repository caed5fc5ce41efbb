"""OpenAI chat completion and audio transcription client."""
from .client import OpenAIClient, API_KEY_ENV_VAR
