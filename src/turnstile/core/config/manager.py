"""
Turnstile configuration management (YAML layers plus TURNSTILE_* overrides).
"""
from __future__ import annotations

import copy
import json
import logging
import os
import re
from pathlib import Path
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple

import yaml

from turnstile.core.exceptions import ConfigError
from turnstile.core.utils.merge import deep_merge
from turnstile.data import read_yaml as read_bundled_yaml

logger = logging.getLogger(__name__)

ENV_PREFIX = "TURNSTILE_"
CONFIG_PATH_ENV = "TURNSTILE_CONFIG"


class ConfigManager:
    """Load and merge Turnstile configuration.

    Configuration sources (highest to lowest priority):
    1. Environment variables: TURNSTILE_<section>__<key>
    2. Project config file: ``path`` argument, else $TURNSTILE_CONFIG
    3. Bundled defaults: turnstile.data/config/defaults.yaml
    """

    def __init__(
        self,
        path: Optional[Path] = None,
        *,
        environ: Optional[Mapping[str, str]] = None,
    ) -> None:
        self.environ: Mapping[str, str] = os.environ if environ is None else environ
        if path is None:
            raw = self.environ.get(CONFIG_PATH_ENV)
            path = Path(raw) if raw else None
        self.path: Optional[Path] = Path(path).expanduser() if path is not None else None

    def load_yaml(self, path: Path) -> Dict[str, Any]:
        # Fail closed: configuration must never silently ignore invalid YAML.
        if not path.exists():
            raise ConfigError(f"Config file not found: {path}", context={"path": str(path)})
        try:
            data = yaml.safe_load(path.read_text(encoding="utf-8"))
        except yaml.YAMLError as exc:
            raise ConfigError(f"Invalid YAML in {path}: {exc}", context={"path": str(path)}) from exc
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigError(
                f"Config file {path} must contain a mapping at the top level",
                context={"path": str(path)},
            )
        return data

    # ========== Environment Overrides ==========

    def _as_bool(self, v: str) -> Optional[bool]:
        low = v.strip().lower()
        if low in {"true", "false"}:
            return low == "true"
        return None

    def _as_int(self, v: str) -> Optional[int]:
        if re.fullmatch(r"[-+]?\d+", v.strip() or " "):
            return int(v)
        return None

    def _as_float(self, v: str) -> Optional[float]:
        s = v.strip()
        if re.fullmatch(r"[-+]?\d*\.\d+", s) or re.fullmatch(r"[-+]?\d+\.\d*", s):
            return float(s)
        return None

    def _as_json(self, v: str) -> Optional[Any]:
        s = v.strip()
        if (s.startswith("{") and s.endswith("}")) or (s.startswith("[") and s.endswith("]")):
            try:
                return json.loads(s)
            except ValueError:
                return None
        return None

    def _coerce_type(self, value: str) -> Any:
        for caster in (self._as_bool, self._as_int, self._as_float, self._as_json):
            result = caster(value)
            if result is not None:
                return result
        return value.strip()

    def _parse_env_key(self, raw: str, *, strict: bool) -> List[str]:
        if not raw:
            return []
        segs = raw.split("__")
        if any(seg == "" for seg in segs):
            if strict:
                raise ConfigError(
                    f"Malformed {ENV_PREFIX}* key: empty segment in '{raw}'.",
                    context={"key": raw},
                )
            return []
        return [seg.lower() for seg in segs]

    def _iter_env_overrides(self, *, strict: bool) -> Iterator[Tuple[List[str], Any]]:
        for key in sorted(self.environ.keys()):
            if not key.startswith(ENV_PREFIX) or key == CONFIG_PATH_ENV:
                continue
            path = self._parse_env_key(key[len(ENV_PREFIX):], strict=strict)
            if not path:
                continue
            yield path, self._coerce_type(self.environ[key])

    def _set_nested(self, root: Dict[str, Any], path: List[str], value: Any) -> None:
        cur = root
        for part in path[:-1]:
            key_candidates = {k.lower(): k for k in cur.keys() if isinstance(k, str)}
            key_to_use = key_candidates.get(part, part)
            nxt = cur.get(key_to_use)
            if nxt is None:
                nxt = cur[key_to_use] = {}
            if not isinstance(nxt, dict):
                raise ConfigError(
                    f"Override path '{'.'.join(path)}' traverses a non-mapping value",
                    context={"path": ".".join(path)},
                )
            cur = nxt
        leaf_candidates = {k.lower(): k for k in cur.keys() if isinstance(k, str)}
        cur[leaf_candidates.get(path[-1], path[-1])] = value

    def apply_env_overrides(self, cfg: Dict[str, Any], *, strict: bool) -> None:
        for path, typed_value in self._iter_env_overrides(strict=strict):
            logger.debug("Applying config override %s=%r", ".".join(path), typed_value)
            self._set_nested(cfg, path, typed_value)

    # ========== Loading ==========

    def load_config(self, *, strict: bool = True) -> Dict[str, Any]:
        """Return the merged configuration (uncached).

        Args:
            strict: Raise ConfigError on malformed TURNSTILE_* keys instead of
                skipping them.
        """
        # The bundled defaults are cached; overrides must never mutate them.
        cfg = copy.deepcopy(read_bundled_yaml("config", "defaults.yaml"))
        if self.path is not None:
            cfg = deep_merge(cfg, self.load_yaml(self.path))
        self.apply_env_overrides(cfg, strict=strict)
        return cfg

    def get(self, key: str, default: Any = None) -> Any:
        """Get a config value by dot-notation key.

        Example:
            >>> ConfigManager().get("handlers.default_order")
            100
        """
        current: Any = self.load_config()
        for part in key.split("."):
            if isinstance(current, dict) and part in current:
                current = current[part]
            else:
                return default
        return current


__all__ = ["ConfigManager", "ENV_PREFIX", "CONFIG_PATH_ENV"]
