from __future__ import annotations

import os
from dataclasses import dataclass

import requests

CDN_URL = "https://cdn.discordapp.com"


class DiscordClientError(RuntimeError):
    pass


@dataclass(frozen=True)
class ProviderIdentity:
    provider: str
    account_id: str
    email: str | None = None
    name: str | None = None
    image: str | None = None


class DiscordClient:
    def __init__(
        self,
        *,
        base_url: str | None = None,
        timeout: int | None = None,
    ) -> None:
        self.base_url = (
            base_url or os.getenv("DISCORD_API_URL") or "https://discord.com/api/v10"
        ).rstrip("/")
        if timeout is None:
            timeout = int(os.getenv("DISCORD_TIMEOUT", "10"))
        self.timeout = timeout

    def fetch_identity(self, access_token: str) -> ProviderIdentity:
        try:
            response = requests.get(
                f"{self.base_url}/users/@me",
                headers={"Authorization": f"Bearer {access_token}"},
                timeout=self.timeout,
            )
            response.raise_for_status()
            payload = response.json()
        except (requests.RequestException, ValueError) as exc:
            raise DiscordClientError("Discord identity request failed") from exc

        if not isinstance(payload, dict) or not payload.get("id"):
            raise DiscordClientError("Discord returned no user id")
        return _identity_from_payload(payload)


def _identity_from_payload(payload: dict) -> ProviderIdentity:
    account_id = str(payload["id"])
    name = payload.get("global_name") or payload.get("username")
    return ProviderIdentity(
        provider="discord",
        account_id=account_id,
        email=payload.get("email"),
        name=name,
        image=_avatar_url(account_id, payload.get("avatar")),
    )


def _avatar_url(account_id: str, avatar_hash: str | None) -> str | None:
    if not avatar_hash:
        return None
    extension = "gif" if avatar_hash.startswith("a_") else "png"
    return f"{CDN_URL}/avatars/{account_id}/{avatar_hash}.{extension}"
