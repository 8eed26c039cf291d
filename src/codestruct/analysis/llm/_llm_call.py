"""Single LLM completion against one model via litellm."""

from __future__ import annotations

import logging
from collections.abc import Callable, Coroutine
from typing import TYPE_CHECKING, Any

import litellm

from codestruct.constants import LLM_MAX_OUTPUT_TOKENS

logger = logging.getLogger(__name__)

# litellm stubs have partially unknown types: typed alias
if TYPE_CHECKING:
    _acompletion: Callable[..., Coroutine[Any, Any, Any]]
else:
    _acompletion = litellm.acompletion


async def llm_call(
    model: str,
    messages: list[dict[str, str]],
    timeout: int,
    *,
    temperature: float = 0.1,
    json_mode: bool = False,
) -> tuple[str, int, int]:
    """Run one completion and return ``(content, input_tokens, output_tokens)``.

    Exactly one request is sent; errors propagate to the caller, which
    decides whether to move on to the next model in the chain.
    """
    kwargs: dict[str, Any] = {
        "model": model,
        "messages": messages,
        "timeout": timeout,
        "max_tokens": LLM_MAX_OUTPUT_TOKENS,
        "temperature": temperature,
        "num_retries": 0,
        # Providers without JSON mode silently ignore response_format
        "drop_params": True,
    }
    if json_mode:
        kwargs["response_format"] = {"type": "json_object"}
    response: Any = await _acompletion(**kwargs)

    usage: Any = getattr(response, "usage", None)
    input_tokens: int = getattr(usage, "prompt_tokens", 0) or 0
    output_tokens: int = getattr(usage, "completion_tokens", 0) or 0
    content = str(response.choices[0].message.content or "")
    return content, input_tokens, output_tokens
