"""Process-wide application context.

The active :class:`ConfigData` lives in a context variable so tests (and
anything else that needs a different configuration for a while) can swap it
without touching module globals. ``config.yaml`` is read once at import.
"""

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar, Token
from dataclasses import dataclass, replace
from typing import Any

from pydantic import BaseModel

from src.auth_api.runtime.config.config_data import ConfigData
from src.auth_api.runtime.config.config_template import load_config


@dataclass(frozen=True)
class AppContext:
    config: ConfigData


_app_context: ContextVar[AppContext] = ContextVar(
    "app_context", default=AppContext(config=load_config())
)


def get_context() -> AppContext:
    return _app_context.get()


def set_context(context: AppContext) -> Token[AppContext]:
    return _app_context.set(context)


def get_config() -> ConfigData:
    """Shortcut for ``get_context().config``."""
    return _app_context.get().config


def _explicit_fields(model: BaseModel) -> dict[str, Any]:
    # nested models contribute only what was set on them, at any depth
    explicit: dict[str, Any] = {}
    for name in type(model).model_fields:
        value = getattr(model, name)
        if isinstance(value, BaseModel):
            nested = _explicit_fields(value)
            if nested:
                explicit[name] = nested
            elif name in model.model_fields_set:
                explicit[name] = value.model_dump()
        elif name in model.model_fields_set:
            explicit[name] = value
    return explicit


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = _deep_merge(current, value)
        else:
            merged[key] = value
    return merged


def merge_config(base: ConfigData, override: ConfigData) -> ConfigData:
    """Return ``base`` with the explicitly set fields of ``override`` applied."""
    base_values = base.model_dump(exclude={"database": {"connection_string"}})
    return ConfigData.model_validate(_deep_merge(base_values, _explicit_fields(override)))


@contextmanager
def with_context(config_override: ConfigData | None = None) -> Iterator[None]:
    """Temporarily apply a partial configuration override.

    Example:
        with with_context(ConfigData(jwt=JWTConfig(secret="test-secret"))):
            assert get_config().jwt.secret == "test-secret"
    """
    if config_override is None:
        yield
        return

    if not isinstance(config_override, ConfigData):
        raise ValueError(
            f"config_override must be ConfigData or None, got {type(config_override)}"
        )

    token = set_context(
        replace(get_context(), config=merge_config(get_config(), config_override))
    )
    try:
        yield
    finally:
        _app_context.reset(token)
