from pathlib import Path
from typing import Callable, Dict, Iterable, Optional, TypeVar

from chess_broadcast.core.logging_utils import get_module_logger


logger = get_module_logger("ConfigManager")

T = TypeVar("T")

TRUE_WORDS = frozenset({"true", "1", "yes", "on"})


def _strip_quotes(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
        return value[1:-1]
    return value


def parse_config_lines(lines: Iterable[str]) -> Dict[str, str]:
    """Parse ``key = value`` lines.

    ``#`` starts a comment anywhere on a line, lines without ``=`` are
    skipped, and one pair of matching quotes around a value is dropped.
    Later keys win.
    """
    config: Dict[str, str] = {}
    for raw in lines:
        line = raw.split("#", 1)[0].strip()
        key, sep, value = line.partition("=")
        if not sep or not key.strip():
            continue
        config[key.strip()] = _strip_quotes(value.strip())
    return config


class ConfigManager:
    """Reads the launcher's ``config.txt``.

    A missing or unreadable file reads as an empty mapping, so every key
    falls back to its default rather than stopping the launcher.
    """

    def read_config(self, config_path: Path) -> Dict[str, str]:
        """Blocking read, for argparse defaults before the event loop exists."""
        try:
            with open(config_path, "r", encoding="utf-8") as fh:
                return parse_config_lines(fh)
        except FileNotFoundError:
            logger.debug("No config file at %s, using defaults", config_path)
        except OSError as exc:
            logger.error("Failed to read config %s: %s", config_path, exc)
        return {}

    # ------------------------------------------------------------------
    # Typed access

    def _convert(
        self,
        config: Dict[str, str],
        key: str,
        default: T,
        convert: Callable[[str], T],
    ) -> T:
        raw: Optional[str] = config.get(key)
        if raw is None:
            return default
        try:
            return convert(raw)
        except ValueError:
            logger.warning("Invalid value for %s: %r, using default %r", key, raw, default)
            return default

    def get_bool(self, config: Dict[str, str], key: str, default: bool = False) -> bool:
        return self._convert(config, key, default, lambda raw: raw.strip().lower() in TRUE_WORDS)

    def get_int(self, config: Dict[str, str], key: str, default: int = 0) -> int:
        return self._convert(config, key, default, int)

    def get_float(self, config: Dict[str, str], key: str, default: float = 0.0) -> float:
        return self._convert(config, key, default, float)

    def get_str(self, config: Dict[str, str], key: str, default: str = "") -> str:
        return config.get(key, default)


_config_manager = ConfigManager()


def get_config_manager() -> ConfigManager:
    return _config_manager
