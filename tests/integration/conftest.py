"""Fixtures for integration tests."""

import asyncio
import socket
from collections.abc import AsyncGenerator, Generator

import pytest
from aioresponses import aioresponses as aioresponses_cls


@pytest.fixture
def aioresponses() -> Generator[aioresponses_cls]:
    """Intercept aiohttp requests."""
    with aioresponses_cls() as mocked:
        yield mocked


@pytest.fixture
async def listening_address() -> AsyncGenerator[str]:
    """Start a TCP server on localhost and return its host:port."""

    async def _accept(
        reader: asyncio.StreamReader, writer: asyncio.StreamWriter
    ) -> None:
        writer.close()

    server = await asyncio.start_server(_accept, "127.0.0.1", 0)
    port = server.sockets[0].getsockname()[1]
    async with server:
        yield f"127.0.0.1:{port}"


@pytest.fixture
def closed_address() -> str:
    """Return a localhost host:port with nothing listening."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        port = sock.getsockname()[1]
    return f"127.0.0.1:{port}"
