"""Provider health checks — ping each API directly, bypassing the gateway fallback."""

import asyncio
import logging
from collections.abc import Mapping

from hypothetica.providers.base import AIProvider

logger = logging.getLogger(__name__)

_PING_MESSAGES = [{"role": "user", "content": "Reply with the word OK only."}]
_TIMEOUT_SEC = 15.0


async def _check_one(name: str, provider: AIProvider, model: str) -> tuple[str, bool, str]:
    """Ping a single provider. Returns (name, ok, error_message)."""
    try:
        await asyncio.wait_for(
            provider.complete(model, _PING_MESSAGES, temperature=0.0, max_tokens=8),
            timeout=_TIMEOUT_SEC,
        )
        return name, True, ""
    except Exception as exc:
        logger.debug("Health check failed for %s: %s", name, exc)
        return name, False, str(exc) or type(exc).__name__


async def run_health_checks(
    providers: Mapping[str, AIProvider],
    model_table: Mapping[str, str],
) -> dict[str, tuple[bool, str]]:
    """Ping all providers in parallel.

    Returns:
        Dict mapping provider id -> (ok, error_message).
        error_message is "" when ok is True.
    """
    results = await asyncio.gather(
        *(_check_one(name, p, model_table[name]) for name, p in providers.items())
    )
    return {name: (ok, err) for name, ok, err in results}
