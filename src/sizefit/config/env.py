"""Reader for ``SIZEFIT_*`` environment settings.

Settings are addressed by their name without the prefix, so
``reader.number("PROBE_TIMEOUT")`` reads ``SIZEFIT_PROBE_TIMEOUT``. Unset
and empty variables read as None. Malformed values raise ValueError naming
the variable, which the CLI reports as a configuration error.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from pathlib import Path

logger = logging.getLogger(__name__)

ENV_PREFIX = "SIZEFIT_"

_TRUE = frozenset({"1", "true", "yes", "on"})
_FALSE = frozenset({"0", "false", "no", "off"})


class EnvReader:
    """Typed access to sizefit's environment variables.

    Args:
        env: Mapping to read instead of os.environ.
    """

    def __init__(self, env: Mapping[str, str] | None = None) -> None:
        self._env: Mapping[str, str] = os.environ if env is None else env

    @staticmethod
    def variable(name: str) -> str:
        return f"{ENV_PREFIX}{name}"

    def text(self, name: str) -> str | None:
        value = self._env.get(self.variable(name), "").strip()
        return value or None

    def number(self, name: str) -> float | None:
        value = self.text(name)
        if value is None:
            return None
        try:
            return float(value)
        except ValueError:
            raise ValueError(
                f"{self.variable(name)} must be a number, got {value!r}"
            ) from None

    def flag(self, name: str) -> bool | None:
        value = self.text(name)
        if value is None:
            return None
        folded = value.casefold()
        if folded in _TRUE:
            return True
        if folded in _FALSE:
            return False
        raise ValueError(f"{self.variable(name)} must be a boolean, got {value!r}")

    def path(self, name: str, must_exist: bool = False) -> Path | None:
        """Path from a variable.

        A path that must exist but does not is ignored with a warning, so
        the next source in line (config file, PATH lookup) still applies.
        """
        value = self.text(name)
        if value is None:
            return None
        path = Path(value).expanduser()
        if must_exist and not path.exists():
            logger.warning("Ignoring %s: %s does not exist", self.variable(name), path)
            return None
        return path
