from .openai import OpenAIClient
