"""Localized message lookup by message code."""

from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

import yaml
from loguru import logger

DEFAULT_BUNDLE = Path(__file__).resolve().parents[3] / "resources" / "messages.yaml"

INVALID_CREDENTIALS = "auth.invalid.credentials"
USER_NOT_FOUND_BY_EMAIL = "auth.user.not.found.by.email"
USER_ALREADY_EXISTS = "auth.user.already.exists"
VERIFICATION_TOKEN_NOT_FOUND = "auth.verification.token.not.found"
RESET_TOKEN_NOT_FOUND = "auth.reset.token.not.found"
MAIL_SEND_FAILED = "auth.mail.send.failed"


class MessageSource:
    """Resolves message codes against per-locale templates.

    Templates use positional ``{0}`` placeholders. Lookup falls back from
    ``es-MX`` to ``es`` to the default locale, and finally to the code itself.
    """

    def __init__(
        self,
        bundles: Mapping[str, Mapping[str, str]],
        default_locale: str = "en",
    ) -> None:
        self._bundles = {
            self._normalize(locale): dict(messages)
            for locale, messages in bundles.items()
        }
        self._default_locale = self._normalize(default_locale)

    @classmethod
    def from_yaml(cls, path: Path = DEFAULT_BUNDLE, default_locale: str = "en") -> "MessageSource":
        with open(path, encoding="utf-8") as f:
            loaded = yaml.safe_load(f) or {}
        return cls(loaded.get("messages", {}), default_locale=default_locale)

    @property
    def locales(self) -> list[str]:
        return sorted(self._bundles)

    @staticmethod
    def _normalize(locale: str) -> str:
        return locale.strip().replace("_", "-").lower()

    def _candidates(self, locale: str | None) -> list[str]:
        candidates = []
        if locale:
            normalized = self._normalize(locale)
            candidates.append(normalized)
            candidates.append(normalized.split("-", 1)[0])
        candidates.append(self._default_locale)
        return candidates

    def get_message(
        self,
        code: str,
        args: Sequence[Any] = (),
        locale: str | None = None,
    ) -> str:
        for candidate in self._candidates(locale):
            template = self._bundles.get(candidate, {}).get(code)
            if template is not None:
                return template.format(*args)

        logger.warning("No message found for code {} (locale {})", code, locale)
        return code

    def resolve_locale(self, accept_language: str | None) -> str:
        """Pick the best bundled locale for an ``Accept-Language`` header value."""
        if not accept_language:
            return self._default_locale

        ranked: list[tuple[float, str]] = []
        for part in accept_language.split(","):
            piece = part.strip()
            if not piece:
                continue
            tag, _, params = piece.partition(";")
            quality = 1.0
            if params.strip().startswith("q="):
                try:
                    quality = float(params.strip()[2:])
                except ValueError:
                    quality = 0.0
            ranked.append((quality, tag.strip()))

        for _, tag in sorted(ranked, key=lambda item: item[0], reverse=True):
            if tag == "*":
                continue
            for candidate in self._candidates(tag)[:2]:
                if candidate in self._bundles:
                    return candidate

        return self._default_locale


class LocalizedMessages:
    """A :class:`MessageSource` bound to the locale of one request."""

    def __init__(self, source: MessageSource, locale: str | None = None) -> None:
        self._source = source
        self.locale = locale

    def get(self, code: str, *args: Any) -> str:
        return self._source.get_message(code, args, self.locale)
