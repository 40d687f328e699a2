import asyncio

import pytest

from onthego.views.location import (
    DENIED,
    TIMEOUT,
    UNAVAILABLE,
    BrowserLocationProvider,
    LocationError,
    StaticLocationProvider,
)


@pytest.mark.parametrize("code,reason", [(1, DENIED), (2, UNAVAILABLE), (3, TIMEOUT), (9, UNAVAILABLE)])
def test_browser_codes(code, reason):
    assert LocationError.from_browser_code(code).reason == reason


def test_messages_explain_the_fallback():
    assert LocationError(DENIED).describe() == (
        "Unable to get your location. "
        "Location permission denied. Using default location (San Francisco)."
    )
    assert str(LocationError("unsupported")) == "Unable to get your location. Using default location."


def test_static_provider():
    assert asyncio.run(StaticLocationProvider((1.0, 2.0)).current_position()) == (1.0, 2.0)
    with pytest.raises(LocationError):
        asyncio.run(StaticLocationProvider().current_position())


def test_browser_provider_resolves_from_the_socket_side():
    requests = []

    async def scenario():
        provider = BrowserLocationProvider(lambda: requests.append("asked"))
        task = asyncio.ensure_future(provider.current_position())
        await asyncio.sleep(0)
        assert provider.waiting
        provider.resolve(40.7, -74.0)
        result = await task
        assert not provider.waiting
        return result

    assert asyncio.run(scenario()) == (40.7, -74.0)
    assert requests == ["asked"]


def test_browser_provider_rejects():
    async def scenario():
        provider = BrowserLocationProvider(lambda: None)
        task = asyncio.ensure_future(provider.current_position())
        await asyncio.sleep(0)
        provider.reject(LocationError(DENIED))
        return await task

    with pytest.raises(LocationError) as excinfo:
        asyncio.run(scenario())
    assert excinfo.value.reason == DENIED


def test_answer_without_request_is_ignored():
    BrowserLocationProvider(lambda: None).resolve(1.0, 2.0)
