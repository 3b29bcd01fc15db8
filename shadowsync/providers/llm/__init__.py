"""LLM provider adapters.

Three concrete implementations of ILLMProvider:
    - OpenAILLMProvider    -- gpt-4o-mini (also any OpenAI-compatible API)
    - AnthropicLLMProvider -- Claude
    - OllamaLLMProvider    -- local models via an Ollama server

``shadowsync.main.build_llm_provider`` picks one from the configured
credentials and hands it to both gateways.
"""

from shadowsync.providers.llm.anthropic_provider import AnthropicLLMProvider
from shadowsync.providers.llm.ollama_provider import OllamaLLMProvider
from shadowsync.providers.llm.openai_provider import OpenAILLMProvider

__all__ = ["OpenAILLMProvider", "AnthropicLLMProvider", "OllamaLLMProvider"]
