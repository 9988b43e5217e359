"""Typed access to VTC_* environment variables."""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from pathlib import Path

logger = logging.getLogger(__name__)

ENV_PREFIX = "VTC_"


class EnvReader:
    """Read VTC_* variables by their short name.

    ``EnvReader().get_int("MAX_HEIGHT")`` reads ``VTC_MAX_HEIGHT``. Blank
    values count as unset. A value that cannot be used is logged and
    treated as unset, so the config file or the default applies instead.

    Pass ``env`` to read from a plain dict in tests.
    """

    def __init__(self, env: Mapping[str, str] | None = None) -> None:
        self._env = os.environ if env is None else env

    def _lookup(self, name: str) -> tuple[str, str | None]:
        var = f"{ENV_PREFIX}{name}"
        value = self._env.get(var, "").strip()
        return var, value or None

    def get_str(self, name: str, default: str | None = None) -> str | None:
        _, value = self._lookup(name)
        return default if value is None else value

    def get_int(self, name: str) -> int | None:
        var, value = self._lookup(name)
        if value is None:
            return None
        try:
            return int(value)
        except ValueError:
            logger.warning("Ignoring %s=%r: not an integer", var, value)
            return None

    def get_path(self, name: str, *, must_exist: bool = True) -> Path | None:
        """Path from a variable, with ``~`` expanded.

        With must_exist, a path that is not on disk is logged and ignored.
        """
        var, value = self._lookup(name)
        if value is None:
            return None
        path = Path(value).expanduser()
        if must_exist and not path.exists():
            logger.warning("Ignoring %s=%s: no such file or directory", var, value)
            return None
        return path
