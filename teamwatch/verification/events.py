"""Filtering of inbound repository webhooks into creation events."""

from __future__ import annotations

import collections.abc as cabc
import typing as typ

import msgspec

from .models import CreationEvent
from .observability import CheckEventLogger

CREATED_ACTION = "created"


class _WebhookRepository(msgspec.Struct):
    id: int
    name: str
    private: bool


class _WebhookSender(msgspec.Struct):
    login: str


class _WebhookAction(msgspec.Struct):
    action: str | None = None


class RepositoryWebhook(msgspec.Struct):
    """The subset of a GitHub ``repository`` webhook the pipeline reads.

    Unknown fields are ignored; the platform sends many more.
    """

    action: str
    repository: _WebhookRepository
    sender: _WebhookSender


RawEvent: typ.TypeAlias = bytes | str | cabc.Mapping[str, object]


T = typ.TypeVar("T")


def _decode(raw: RawEvent, payload_type: type[T]) -> T:
    if isinstance(raw, bytes | str):
        return msgspec.json.decode(raw, type=payload_type)
    return msgspec.convert(raw, type=payload_type)


class EventFilter:
    """Turn raw webhook deliveries into :class:`CreationEvent` values.

    Only ``created`` actions on private repositories pass. Nothing here
    raises for malformed input; rejected deliveries simply yield ``None``.
    """

    def __init__(self, event_logger: CheckEventLogger | None = None) -> None:
        self._events = event_logger or CheckEventLogger()

    def accept(self, raw: RawEvent) -> CreationEvent | None:
        """Return a creation event for ``raw`` or ``None`` when it is dropped."""
        try:
            action = _decode(raw, _WebhookAction).action
        except msgspec.MsgspecError:
            self._events.log_event_ignored("malformed")
            return None
        if action != CREATED_ACTION:
            self._events.log_event_ignored("action", action=action)
            return None

        try:
            webhook = _decode(raw, RepositoryWebhook)
        except msgspec.MsgspecError:
            self._events.log_event_ignored("malformed", action=action)
            return None

        repository = webhook.repository
        creator = webhook.sender.login
        if not repository.private:
            self._events.log_public_repository_ignored(
                creator, repository.id, repository.name
            )
            return None

        return CreationEvent(
            repository_id=repository.id,
            creator_login=creator,
            repository_name=repository.name,
        )
