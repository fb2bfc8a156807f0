"""
Test suite for invoke_callback.

System role: Verification of callback invocation for chat turns
"""

from unittest.mock import AsyncMock, MagicMock

from respondo.application.chat.callbacks import invoke_callback


class TestInvokeCallback:
    async def test_plain_function_should_be_called(self) -> None:
        callback = MagicMock(return_value=None)

        await invoke_callback(callback, "token")

        callback.assert_called_once_with("token")

    async def test_coroutine_function_should_be_awaited(self) -> None:
        callback = AsyncMock()

        await invoke_callback(callback, 1, 2)

        callback.assert_awaited_once_with(1, 2)

    async def test_missing_callback_should_be_ignored(self) -> None:
        assert await invoke_callback(None, "token") is None
