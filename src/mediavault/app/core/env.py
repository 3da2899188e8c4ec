from __future__ import annotations

import os
import warnings
from enum import StrEnum
from functools import cache
from typing import NamedTuple


class Env(StrEnum):
    LOCAL = "local"
    DEV = "dev"
    TEST = "test"
    PROD = "prod"


ALIASES: dict[str, Env] = {
    "development": Env.DEV,
    "develop": Env.DEV,
    "testing": Env.TEST,
    "ci": Env.TEST,
    "staging": Env.TEST,
    "production": Env.PROD,
}


def parse_env(raw: str | None) -> Env | None:
    if not raw:
        return None
    value = raw.strip().lower()
    if value in Env._value2member_map_:
        return Env(value)
    return ALIASES.get(value)


@cache
def get_env() -> Env:
    """
    Resolve the deployment environment from APP_ENV.

    Unknown values fall back to LOCAL with a one-time warning; an unset
    APP_ENV is LOCAL silently.
    """
    raw = os.getenv("APP_ENV")
    env = parse_env(raw)
    if env is None:
        if raw:
            warnings.warn(
                f"Unrecognized APP_ENV '{raw}', defaulting to 'local'.",
                RuntimeWarning,
                stacklevel=2,
            )
        env = Env.LOCAL
    return env


class EnvFlags(NamedTuple):
    env: Env
    is_local: bool
    is_dev: bool
    is_test: bool
    is_prod: bool


def env_flags(env: Env | None = None) -> EnvFlags:
    current = env or get_env()
    return EnvFlags(
        env=current,
        is_local=current is Env.LOCAL,
        is_dev=current is Env.DEV,
        is_test=current is Env.TEST,
        is_prod=current is Env.PROD,
    )


def pick(*, prod, nonprod, test=None):
    """
    Choose a value for the active environment.

    Example:
        level = pick(prod="INFO", nonprod="DEBUG")
    """
    env = get_env()
    if env is Env.PROD:
        return prod
    if env is Env.TEST and test is not None:
        return test
    return nonprod
