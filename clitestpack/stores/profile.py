"""Subscription profile model and persistence."""

from __future__ import annotations

from dataclasses import dataclass, field
import json
import logging
from pathlib import Path
from typing import Any, Mapping

from clitestpack.stores.exceptions import ProfileFormatError

logger = logging.getLogger(__name__)

PROFILE_FILE_NAME = "azureProfile.json"


@dataclass(slots=True)
class Subscription:
    id: str
    name: str
    management_endpoint_url: str | None = None
    management_certificate: dict[str, str | None] | None = None

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"id": self.id, "name": self.name}
        if self.management_endpoint_url is not None:
            payload["managementEndpointUrl"] = self.management_endpoint_url
        if self.management_certificate is not None:
            payload["managementCertificate"] = dict(self.management_certificate)
        return payload

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "Subscription":
        try:
            subscription_id = raw["id"]
        except KeyError as error:
            raise ProfileFormatError("Every subscription needs an `id`.") from error
        certificate = raw.get("managementCertificate")
        return cls(
            id=str(subscription_id),
            name=str(raw.get("name", subscription_id)),
            management_endpoint_url=raw.get("managementEndpointUrl"),
            management_certificate=dict(certificate) if isinstance(certificate, Mapping) else None,
        )


@dataclass(slots=True)
class Profile:
    environments: list[dict[str, Any]] = field(default_factory=list)
    subscriptions: list[Subscription] = field(default_factory=list)

    def subscription(self, subscription_id: str) -> Subscription | None:
        for subscription in self.subscriptions:
            if subscription.id == subscription_id:
                return subscription
        return None

    @property
    def default_subscription(self) -> Subscription | None:
        return self.subscriptions[0] if self.subscriptions else None

    def to_dict(self) -> dict[str, Any]:
        return {
            "environments": [dict(environment) for environment in self.environments],
            "subscriptions": [subscription.to_dict() for subscription in self.subscriptions],
        }

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "Profile":
        environments = raw.get("environments") or []
        subscriptions = raw.get("subscriptions") or []
        if not isinstance(environments, list) or not isinstance(subscriptions, list):
            raise ProfileFormatError("`environments` and `subscriptions` must be lists.")
        return cls(
            environments=[dict(environment) for environment in environments],
            subscriptions=[Subscription.from_dict(item) for item in subscriptions],
        )


class ProfileStore:
    """Loads and saves profiles and holds the profile currently in use."""

    def __init__(self, default_file: str | Path) -> None:
        self.default_file = Path(default_file)
        self.current: Profile | None = None

    def load(self, source: str | Path | Mapping[str, Any] | None = None) -> Profile:
        if source is None:
            source = self.default_file
        if isinstance(source, Mapping):
            return Profile.from_dict(source)

        path = Path(source)
        if not path.exists():
            logger.debug("No profile at %s, starting empty", path)
            return Profile()
        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as error:
            raise ProfileFormatError(f"Profile {path} is not valid JSON ({error})") from error
        if not isinstance(raw, dict):
            raise ProfileFormatError(f"Profile {path} must hold a JSON object.")
        return Profile.from_dict(raw)

    def save(self, profile: Profile, path: str | Path | None = None) -> Path:
        target = Path(path) if path is not None else self.default_file
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(
            json.dumps(profile.to_dict(), indent=2, sort_keys=True) + "\n",
            encoding="utf-8",
        )
        return target
