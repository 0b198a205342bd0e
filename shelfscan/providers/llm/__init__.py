"""LLM provider adapters.

Two concrete implementations of ILLMProvider (shelfscan/interfaces/llm_provider.py):
    - OpenAILLMProvider    - gpt-4o, primary vision and primary text
    - AnthropicLLMProvider - Claude, secondary text
"""

from shelfscan.providers.llm.anthropic_provider import AnthropicLLMProvider
from shelfscan.providers.llm.openai_provider import OpenAILLMProvider

__all__ = ["AnthropicLLMProvider", "OpenAILLMProvider"]
