"""
Application context store of the LCMP.

Admits new contexts up to a bound, assigns their identifiers and reference
URIs, and only lets the callbackReference change afterwards.
"""

import logging
import threading
import uuid
from pathlib import Path
from typing import Callable

from pydantic import BaseModel, Field, ValidationError

from lcmp.errors import CapacityExceeded, Conflict, NotFound, ValidationFailed
from lcmp.messages import AppContext, UserAppInstanceInfo
from lcmp.resolver import ReferenceUriResolver, SingleUriResolver, TableUriResolver

logger = logging.getLogger(__name__)


def new_identifier() -> str:
    """Random 128-bit identifier rendered as 32 hex digits."""
    return uuid.uuid4().hex


class AppContextStore:
    """In-memory map of the active application contexts, indexed by context ID."""

    def __init__(
        self,
        max_contexts: int,
        resolver: ReferenceUriResolver,
        id_factory: Callable[[], str] = new_identifier,
    ) -> None:
        self._max_contexts = max_contexts
        self._resolver = resolver
        self._id_factory = id_factory
        self._contexts: dict[str, AppContext] = {}
        self._lock = threading.Lock()

    @property
    def max_contexts(self) -> int:
        return self._max_contexts

    def new_context(self, request: AppContext) -> AppContext:
        """
        Admit a creation request and return the stored context.

        The returned context carries the assigned contextId and one
        userAppInstanceInfo entry with the resolved reference URI; ``request``
        itself is not modified.
        """
        with self._lock:
            full = len(self._contexts) >= self._max_contexts
            if not full:
                context, instance = self._admit(request)

        if full:
            logger.warning(
                "Rejected new context: capacity reached",
                extra={"max_contexts": self._max_contexts},
            )
            raise CapacityExceeded(self._max_contexts)

        logger.info(
            "Application context created",
            extra={
                "context_id": context.context_id,
                "app_instance_id": instance.app_instance_id,
                "reference_uri": instance.reference_uri,
            },
        )
        return context

    def _admit(self, request: AppContext) -> tuple[AppContext, UserAppInstanceInfo]:
        # Caller holds the lock.
        request.valid_request()
        reference_uri = self._resolver.resolve(request.app_info.app_d_id)

        instance = UserAppInstanceInfo(
            app_instance_id=self._id_factory(),
            reference_uri=reference_uri,
        )
        context = request.model_copy(
            update={
                "context_id": self._id_factory(),
                "app_info": request.app_info.model_copy(
                    update={"user_app_instance_info": (instance,)}
                ),
            }
        )
        self._contexts[context.context_id] = context
        return context, instance

    def del_context(self, context_id: str) -> None:
        with self._lock:
            if self._contexts.pop(context_id, None) is None:
                raise NotFound(context_id)
        logger.info("Application context deleted", extra={"context_id": context_id})

    def get_context(self, context_id: str) -> AppContext:
        with self._lock:
            try:
                return self._contexts[context_id]
            except KeyError:
                raise NotFound(context_id) from None

    def update_context(self, request: AppContext) -> AppContext:
        """Replace the callbackReference of a stored context; nothing else may differ."""
        context_id = request.context_id
        if context_id is None:
            raise ValidationFailed(["context ID not specified in the request"])

        with self._lock:
            stored = self._contexts.get(context_id)
            if stored is None:
                raise NotFound(context_id)
            conflicting = not stored.identical_except_callback_reference(request)
            if not conflicting:
                updated = stored.model_copy(
                    update={"callback_reference": request.callback_reference}
                )
                self._contexts[context_id] = updated

        if conflicting:
            logger.warning(
                "Rejected context update: immutable fields differ",
                extra={"context_id": context_id},
            )
            raise Conflict(context_id)

        logger.info(
            "Application context updated",
            extra={"context_id": context_id, "callback_reference": updated.callback_reference},
        )
        return updated

    def list_contexts(self) -> list[str]:
        with self._lock:
            return list(self._contexts)

    def status(self) -> None:
        """Always healthy: there is nothing external to check."""


class ReferenceUriMapping(BaseModel):
    appdid: str
    reference_uri: str


class AppContextStoreConf(BaseModel):
    """Content of the file used by the ``file;<path>`` configuration."""

    max_contexts: int = Field(ge=0)
    mapping: list[ReferenceUriMapping] = []
    default_reference_uri: str | None = None


def _single_store(spec: str) -> AppContextStore:
    tokens = spec.split(",")
    if len(tokens) != 2 or not tokens[1]:
        raise ValueError("expected 'single;<max_contexts>,<reference URI>'")
    try:
        max_contexts = int(tokens[0])
    except ValueError as exc:
        raise ValueError(f"invalid maximum number of contexts: {tokens[0]!r}") from exc
    if max_contexts < 0:
        raise ValueError("the maximum number of contexts cannot be negative")
    return AppContextStore(max_contexts, SingleUriResolver(tokens[1]))


def _file_store(filename: str) -> AppContextStore:
    try:
        content = Path(filename).read_text(encoding="utf-8")
    except OSError as exc:
        raise ValueError(f"could not read from file '{filename}': {exc}") from exc
    try:
        conf = AppContextStoreConf.model_validate_json(content)
    except ValidationError as exc:
        raise ValueError(f"invalid input file: {filename}") from exc
    resolver = TableUriResolver(
        {elem.appdid: elem.reference_uri for elem in conf.mapping},
        default=conf.default_reference_uri,
    )
    return AppContextStore(conf.max_contexts, resolver)


def build_app_context_store(value: str) -> AppContextStore:
    """
    Build the context store from a configuration string.

    ``single;<max_contexts>,<uri>`` always assigns the same reference URI;
    ``file;<path>`` reads a JSON file with ``max_contexts``, the ``mapping``
    from appDId to reference URI and an optional ``default_reference_uri``.
    """
    kind, sep, rest = value.partition(";")
    if sep and kind == "single":
        store = _single_store(rest)
    elif sep and kind == "file" and rest:
        store = _file_store(rest)
    else:
        raise ValueError(f"could not create the application context store from {value!r}")
    logger.info(
        "Application context store ready",
        extra={"mode": kind, "max_contexts": store.max_contexts},
    )
    return store