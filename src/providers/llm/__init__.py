"""LLM provider adapters.

Three concrete implementations of ILLMProvider (src/interfaces/llm_provider.py):
    - OpenAILLMProvider    : gpt-4o-mini (also OpenAI-compatible APIs)
    - AnthropicLLMProvider : Claude Sonnet
    - OllamaLLMProvider    : local models via an Ollama server

At startup, main.py picks the first configured provider in that order and
injects it into app.state.
"""

from src.providers.llm.anthropic_provider import AnthropicLLMProvider
from src.providers.llm.ollama_provider import OllamaLLMProvider
from src.providers.llm.openai_provider import OpenAILLMProvider

__all__ = ["OpenAILLMProvider", "AnthropicLLMProvider", "OllamaLLMProvider"]
