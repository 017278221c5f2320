"""
Shared fixtures for the StarDoc test suite.
"""

import pytest
import pytest_asyncio

from stardoc import connect, disconnect


@pytest_asyncio.fixture
async def database():
    """A fresh in-memory database, current for the duration of one test"""
    client = await connect("memory://")
    yield client
    await disconnect()


@pytest.fixture
def calls():
    """Records hook invocations in order"""
    return []
