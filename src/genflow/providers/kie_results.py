"""Normalization of Kie.ai status payloads.

Kie.ai reports task progress in two encodings:

* ``state`` strings plus a JSON-encoded ``resultJson`` (Imagen4, Sora2);
* an integer ``successFlag`` plus a structured ``response`` object
  (Veo3, Midjourney).

Each normalizer turns the ``data`` object of a query response into a
:class:`~genflow.domain.Succeeded`, :class:`~genflow.domain.Pending` or
:class:`~genflow.domain.Failed` value. Normalizers hold no state.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Mapping, Protocol

from ..domain.models import Failed, GenerationModel, NormalizedOutcome, Pending, Succeeded
from ..exceptions import MalformedResultError, MissingResultFieldError, UnknownTaskStateError

DEFAULT_FAILURE_CODE = "UNKNOWN_ERROR"
DEFAULT_FAILURE_MESSAGE = "Task failed without details"

PENDING_STATES = frozenset({"wait", "queueing", "generating", "waiting"})


class ResultNormalizer(Protocol):
    def normalize(self, raw: Mapping[str, Any]) -> NormalizedOutcome:
        ...


def _failed(raw: Mapping[str, Any]) -> Failed:
    return Failed(
        code=raw.get("failCode") or DEFAULT_FAILURE_CODE,
        message=raw.get("failMsg") or DEFAULT_FAILURE_MESSAGE,
    )


def _usable_urls(values: list[Any]) -> tuple[str, ...]:
    return tuple(url for url in values if isinstance(url, str) and url)


@dataclass(frozen=True, slots=True)
class StateStringNormalizer:
    """Normalizer for the ``state`` / ``resultJson`` encoding."""

    def normalize(self, raw: Mapping[str, Any]) -> NormalizedOutcome:
        state = raw.get("state")
        if isinstance(state, str) and state in PENDING_STATES:
            return Pending()
        if state == "fail":
            return _failed(raw)
        if state == "success":
            return Succeeded(urls=self._result_urls(raw.get("resultJson")))
        raise UnknownTaskStateError(f"Unknown state: {state!r}")

    @staticmethod
    def _result_urls(result_json: Any) -> tuple[str, ...]:
        if not result_json:
            raise MissingResultFieldError("resultJson missing from successful task")
        try:
            parsed = json.loads(result_json)
        except (TypeError, ValueError) as exc:
            raise MalformedResultError(f"Failed to parse resultJson: {exc}") from exc
        urls = parsed.get("resultUrls") if isinstance(parsed, dict) else None
        if not isinstance(urls, list):
            raise MissingResultFieldError("resultUrls not found in parsed resultJson")
        if not all(isinstance(url, str) and url for url in urls):
            raise MalformedResultError("resultUrls must hold non-empty URL strings")
        return tuple(urls)


@dataclass(frozen=True, slots=True)
class IntegerFlagNormalizer:
    """Normalizer for the ``successFlag`` / ``response`` encoding.

    A success without ``response.resultUrls`` yields an empty URL list.
    With ``result_info_fallback`` enabled, a missing ``response`` falls back
    to ``resultInfoJson.resultUrls``, whose entries are either URL strings
    or ``{"resultUrl": ...}`` objects.
    """

    result_info_fallback: bool = False

    def normalize(self, raw: Mapping[str, Any]) -> NormalizedOutcome:
        flag = raw.get("successFlag")
        # bool is an int subclass; a literal True/False is not a valid flag
        if isinstance(flag, bool) or not isinstance(flag, int):
            raise UnknownTaskStateError(f"Unknown successFlag: {flag!r}")
        if flag == 0:
            return Pending()
        if flag == 1:
            return Succeeded(urls=self._result_urls(raw))
        if flag in (2, 3):
            return _failed(raw)
        raise UnknownTaskStateError(f"Unknown successFlag: {flag!r}")

    def _result_urls(self, raw: Mapping[str, Any]) -> tuple[str, ...]:
        response = raw.get("response")
        if isinstance(response, Mapping):
            urls = response.get("resultUrls")
            return _usable_urls(urls) if isinstance(urls, list) else ()
        if self.result_info_fallback:
            info = raw.get("resultInfoJson")
            entries = info.get("resultUrls") if isinstance(info, Mapping) else None
            if isinstance(entries, list):
                return _usable_urls(
                    [entry.get("resultUrl") if isinstance(entry, Mapping) else entry for entry in entries]
                )
        return ()


_NORMALIZERS: Mapping[GenerationModel, ResultNormalizer] = {
    GenerationModel.IMAGEN4: StateStringNormalizer(),
    GenerationModel.SORA2: StateStringNormalizer(),
    GenerationModel.VEO3: IntegerFlagNormalizer(),
    GenerationModel.MIDJOURNEY: IntegerFlagNormalizer(result_info_fallback=True),
}


def normalizer_for(model: GenerationModel | str) -> ResultNormalizer:
    return _NORMALIZERS[GenerationModel(model)]


__all__ = [
    "DEFAULT_FAILURE_CODE",
    "DEFAULT_FAILURE_MESSAGE",
    "IntegerFlagNormalizer",
    "PENDING_STATES",
    "ResultNormalizer",
    "StateStringNormalizer",
    "normalizer_for",
]
