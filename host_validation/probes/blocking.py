"""Run blocking filesystem calls off the event loop in daemon threads."""

import asyncio
import threading
from collections.abc import Callable
from typing import TypeVar

T = TypeVar("T")


async def run_blocking(func: Callable[..., T], *args: object) -> T:
    """Run func(*args) in a daemon thread and await its result.

    Unlike asyncio.to_thread, the call does not occupy the loop's default
    executor. A call that never returns (a FIFO, a hung network mount) is
    abandoned when the awaiting task is cancelled and does not hold up
    interpreter shutdown.
    """
    loop = asyncio.get_running_loop()
    future: asyncio.Future[T] = loop.create_future()

    def _set_result(result: T) -> None:
        if not future.done():
            future.set_result(result)

    def _set_exception(exc: BaseException) -> None:
        if not future.done():
            future.set_exception(exc)

    def _worker() -> None:
        try:
            result = func(*args)
        except BaseException as exc:
            _deliver(_set_exception, exc)
        else:
            _deliver(_set_result, result)

    def _deliver(callback: Callable[..., None], value: object) -> None:
        try:
            loop.call_soon_threadsafe(callback, value)
        except RuntimeError:
            # Loop already closed; nobody is waiting for the value.
            pass

    name = getattr(func, "__name__", "blocking-call")
    thread = threading.Thread(
        target=_worker, name=f"host-validation-{name}", daemon=True
    )
    thread.start()
    return await future
