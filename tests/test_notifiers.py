"""Tests for notification sinks and the sink factory."""

from typing import Any

import httpx
import pytest

from liquor_radar.config.models import NotificationSinkConfig
from liquor_radar.errors import ConfigurationError
from liquor_radar.notifications.discord import DiscordNotifier
from liquor_radar.notifications.factory import build_notifier
from liquor_radar.notifications.gotify import GotifyNotifier
from liquor_radar.notifications.pushbullet import PushbulletNotifier
from liquor_radar.notifications.pushover import PushoverNotifier
from liquor_radar.notifications.slack import SlackNotifier
from liquor_radar.notifications.telegram import TelegramNotifier


@pytest.mark.parametrize(
    ("kind", "endpoint", "credential", "expected"),
    [
        ("gotify", "https://gotify.example.com", {"token": "t"}, GotifyNotifier),
        ("telegram", "", {"token": "t", "chat_id": "-100123"}, TelegramNotifier),
        ("slack", "", {"token": "t", "channel_id": "C01"}, SlackNotifier),
        ("discord", "", {"token": "t", "channel_id": "123"}, DiscordNotifier),
        ("pushover", "", {"token": "t", "recipient_id": "u"}, PushoverNotifier),
        (
            "pushbullet",
            "",
            {"token": "t", "device_nickname": "phone"},
            PushbulletNotifier,
        ),
    ],
)
def test_build_notifier_supported_types(
    kind: str, endpoint: str, credential: dict[str, str], expected: type
) -> None:
    config = NotificationSinkConfig(
        type=kind.upper(), endpoint=endpoint, credential=credential
    )

    assert isinstance(build_notifier(config), expected)


@pytest.mark.parametrize(
    ("kind", "credential", "message"),
    [
        ("gotify", {}, "gotify requires token"),
        ("telegram", {"token": "t"}, "telegram requires chat_id"),
        ("slack", {"channel_id": "C01"}, "slack requires token"),
        ("discord", {"token": "t"}, "discord requires channel_id"),
        ("pushover", {"token": "t"}, "pushover requires recipient_id"),
        ("pushbullet", {"token": "t"}, "pushbullet requires device_nickname"),
    ],
)
def test_build_notifier_missing_credentials(
    kind: str, credential: dict[str, str], message: str
) -> None:
    config = NotificationSinkConfig(
        type=kind, endpoint="https://gotify.example.com", credential=credential
    )

    with pytest.raises(ConfigurationError, match=message):
        build_notifier(config)


def test_build_notifier_rejects_unknown_type_and_bad_chat_id() -> None:
    with pytest.raises(ConfigurationError, match="unsupported notification type"):
        build_notifier(NotificationSinkConfig(type="carrier-pigeon"))

    with pytest.raises(ConfigurationError, match="invalid telegram chat_id"):
        build_notifier(
            NotificationSinkConfig(
                type="telegram", credential={"token": "t", "chat_id": "not-a-number"}
            )
        )


def test_build_notifier_gotify_requires_endpoint() -> None:
    with pytest.raises(ConfigurationError, match="endpoint"):
        build_notifier(NotificationSinkConfig(type="gotify", credential={"token": "t"}))


@pytest.mark.anyio
async def test_gotify_posts_message_with_token(monkeypatch: pytest.MonkeyPatch) -> None:
    captured: dict[str, Any] = {}

    async def fake_post(
        _self: httpx.AsyncClient, url: str, **kwargs: Any
    ) -> httpx.Response:
        captured["url"] = url
        captured.update(kwargs)
        return httpx.Response(200, request=httpx.Request("POST", url), json={"id": 1})

    monkeypatch.setattr(httpx.AsyncClient, "post", fake_post)

    notifier = GotifyNotifier("https://gotify.example.com/", "secret")
    sent = await notifier.send("Found it", title="Found BLANTON'S!")

    assert sent is True
    assert captured["url"] == "https://gotify.example.com/message"
    assert captured["params"] == {"token": "secret"}
    assert captured["json"] == {
        "title": "Found BLANTON'S!",
        "message": "Found it",
        "priority": 5,
    }


@pytest.mark.anyio
async def test_gotify_error_status_returns_false(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    async def fake_post(
        _self: httpx.AsyncClient, url: str, **_kwargs: Any
    ) -> httpx.Response:
        return httpx.Response(401, request=httpx.Request("POST", url))

    monkeypatch.setattr(httpx.AsyncClient, "post", fake_post)

    assert await GotifyNotifier("https://gotify.example.com", "bad").send("x") is False


@pytest.mark.anyio
async def test_telegram_reports_api_failure(monkeypatch: pytest.MonkeyPatch) -> None:
    payloads: list[dict[str, Any]] = []

    async def fake_post(
        _self: httpx.AsyncClient, url: str, **kwargs: Any
    ) -> httpx.Response:
        payloads.append(kwargs["json"])
        return httpx.Response(
            200,
            request=httpx.Request("POST", url),
            json={"ok": False, "description": "chat not found"},
        )

    monkeypatch.setattr(httpx.AsyncClient, "post", fake_post)

    sent = await TelegramNotifier("token", 42).send("body", title="Heartbeat")

    assert sent is False
    assert payloads == [{"chat_id": 42, "text": "Heartbeat\n\nbody"}]


@pytest.mark.anyio
async def test_slack_network_error_returns_false(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    async def fake_post(
        _self: httpx.AsyncClient, url: str, **_kwargs: Any
    ) -> httpx.Response:
        raise httpx.ConnectError(
            "connection refused", request=httpx.Request("POST", url)
        )

    monkeypatch.setattr(httpx.AsyncClient, "post", fake_post)

    assert await SlackNotifier("token", "C01").send("body") is False


@pytest.mark.anyio
async def test_pushover_checks_status_field(monkeypatch: pytest.MonkeyPatch) -> None:
    async def fake_post(
        _self: httpx.AsyncClient, url: str, **kwargs: Any
    ) -> httpx.Response:
        assert kwargs["data"]["user"] == "user-key"
        return httpx.Response(
            200, request=httpx.Request("POST", url), json={"status": 1}
        )

    monkeypatch.setattr(httpx.AsyncClient, "post", fake_post)

    assert await PushoverNotifier("token", "user-key").send("body", title="t") is True


@pytest.mark.anyio
async def test_pushbullet_resolves_device_nickname_once(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    device_lookups = 0
    pushes: list[dict[str, Any]] = []

    async def fake_get(
        _self: httpx.AsyncClient, url: str, **_kwargs: Any
    ) -> httpx.Response:
        nonlocal device_lookups
        device_lookups += 1
        return httpx.Response(
            200,
            request=httpx.Request("GET", url),
            json={
                "devices": [
                    {"iden": "old", "nickname": "phone", "active": False},
                    {"iden": "abc123", "nickname": "phone", "active": True},
                ]
            },
        )

    async def fake_post(
        _self: httpx.AsyncClient, url: str, **kwargs: Any
    ) -> httpx.Response:
        pushes.append(kwargs["json"])
        return httpx.Response(200, request=httpx.Request("POST", url), json={})

    monkeypatch.setattr(httpx.AsyncClient, "get", fake_get)
    monkeypatch.setattr(httpx.AsyncClient, "post", fake_post)

    notifier = PushbulletNotifier("token", "phone")
    assert await notifier.send("one", title="A") is True
    assert await notifier.send("two", title="B") is True

    assert device_lookups == 1
    assert [push["device_iden"] for push in pushes] == ["abc123", "abc123"]


@pytest.mark.anyio
async def test_discord_posts_to_channel(monkeypatch: pytest.MonkeyPatch) -> None:
    urls: list[str] = []

    async def fake_post(
        _self: httpx.AsyncClient, url: str, **_kwargs: Any
    ) -> httpx.Response:
        urls.append(url)
        return httpx.Response(200, request=httpx.Request("POST", url), json={"id": "1"})

    monkeypatch.setattr(httpx.AsyncClient, "post", fake_post)

    assert await DiscordNotifier("bot-token", "987").send("body") is True
    assert urls == ["https://discord.com/api/v10/channels/987/messages"]
