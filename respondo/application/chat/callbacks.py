"""
Caller-supplied callbacks for streamed chat turns.

Callbacks may be plain functions or coroutine functions; both are accepted
wherever a turn reports tokens, retries, completion or failure.

Dependencies: None
System role: Callback invocation shared by the chat client and chat service
"""

import inspect
from collections.abc import Awaitable, Callable
from typing import Any

Callback = Callable[..., Any | Awaitable[Any]]


async def invoke_callback(callback: Callback | None, *args: Any) -> None:
    """Call a callback if one was given, awaiting it when it returns an awaitable."""
    if callback is None:
        return
    result = callback(*args)
    if inspect.isawaitable(result):
        await result
