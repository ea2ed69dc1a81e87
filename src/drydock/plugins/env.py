"""``env`` plugin: infer the environment name when none was configured."""

import os
from typing import Callable, Optional

DEFAULT_ENV = "development"
ENV_VAR = "APP_ENV"


def default_inferrer() -> str:
    return os.environ.get(ENV_VAR) or DEFAULT_ENV


def env_capabilities(inferrer: Optional[Callable[[], str]] = None) -> type:
    infer = inferrer or default_inferrer

    class Env:
        @property
        def env(self) -> str:
            return self.config.env or infer()

    return Env
