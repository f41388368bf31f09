"""
Judge Registry

Central lookup from judge id to JudgeConfig. Populated once at startup from
the built-in catalog, per-judge credentials in the environment and an
optional YAML override file; read-only afterwards.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional

import yaml
from loguru import logger

from ..errors import UnknownJudge
from .catalog import BUILTIN_JUDGES
from .models import JudgeConfig


CREDENTIAL_ENV_PREFIX = "DIFY_API_KEY_"


def credential_env_var(judge_id: str) -> str:
    return f"{CREDENTIAL_ENV_PREFIX}{judge_id.upper()}"


class JudgeRegistry:
    """
    Registry of all judges known to this process.

    Usage:
        registry = JudgeRegistry(BUILTIN_JUDGES)
        registry.load_from_config("judges.yaml")
        registry.freeze()

        judge = registry.resolve("business")
    """

    def __init__(self, judges: Optional[Iterable[JudgeConfig]] = None):
        self._judges: Dict[str, JudgeConfig] = {}
        self._load_order: List[str] = []
        self._frozen = False
        for judge in judges or ():
            self.register(judge)

    # =========================================================================
    # REGISTRATION
    # =========================================================================

    def register(self, judge: JudgeConfig) -> None:
        """Add or replace a judge. Only allowed before ``freeze()``."""
        if self._frozen:
            raise RuntimeError("Judge registry is frozen; judges are fixed at startup")
        if not judge.id:
            raise ValueError("Judge id must be a non-empty string")

        if judge.id in self._judges:
            logger.debug(f"Replacing existing judge: {judge.id}")
        else:
            self._load_order.append(judge.id)
        self._judges[judge.id] = judge

    def freeze(self) -> "JudgeRegistry":
        self._frozen = True
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    # =========================================================================
    # CONFIGURATION
    # =========================================================================

    def apply_credentials(self, environ: Mapping[str, str]) -> int:
        """
        Attach credentials from ``DIFY_API_KEY_<JUDGE_ID>`` variables.

        Returns:
            Number of judges that ended up with a credential.
        """
        configured = 0
        for judge_id in list(self._load_order):
            judge = self._judges[judge_id]
            value = (environ.get(credential_env_var(judge_id)) or "").strip()
            if value:
                self._judges[judge_id] = judge.with_overrides({"credential": value})
            if self._judges[judge_id].has_credential:
                configured += 1
            else:
                logger.warning(f"No credential configured for judge '{judge_id}' ({credential_env_var(judge_id)})")
        return configured

    def load_from_config(self, config_path: str) -> int:
        """
        Apply overrides and extra judges from a YAML file.

        Expected format:
            judge_registry:
              judges:
                business:
                  display_name: "Business Analysis"
                  persist: true
                investor:
                  display_name: "Angel Investor"
                  query_template: "As an angel investor, review {repo_url}"

        Returns:
            Number of judges configured from the file
        """
        config_file = Path(config_path)
        if not config_file.exists():
            logger.warning(f"Judge registry config not found: {config_path}")
            return 0

        with open(config_file, "r", encoding="utf-8") as f:
            config = yaml.safe_load(f) or {}

        judges_config: Dict[str, Any] = (config.get("judge_registry") or {}).get("judges") or {}
        configured = 0
        for judge_id, entry in judges_config.items():
            entry = entry or {}
            existing = self._judges.get(judge_id)
            if existing is not None:
                self.register(existing.with_overrides(entry))
            else:
                self.register(JudgeConfig.from_dict({"id": judge_id, **entry}))
            configured += 1

        logger.info(f"Loaded {configured} judge override(s) from {config_path}")
        return configured

    @classmethod
    def from_environment(
        cls,
        environ: Optional[Mapping[str, str]] = None,
        config_path: Optional[str] = None,
    ) -> "JudgeRegistry":
        """Build the frozen startup registry."""
        environ = os.environ if environ is None else environ
        registry = cls(BUILTIN_JUDGES)
        if config_path:
            registry.load_from_config(config_path)
        configured = registry.apply_credentials(environ)
        logger.info(f"Judge registry ready: {len(registry)} judges, {configured} with credentials")
        return registry.freeze()

    # =========================================================================
    # RETRIEVAL
    # =========================================================================

    def resolve(self, judge_id: str) -> JudgeConfig:
        """Return the judge for ``judge_id`` or raise UnknownJudge."""
        judge = self._judges.get(judge_id)
        if judge is None:
            raise UnknownJudge(judge_id)
        return judge

    def get(self, judge_id: str) -> Optional[JudgeConfig]:
        return self._judges.get(judge_id)

    def ids(self) -> List[str]:
        return list(self._load_order)

    def list_judges(self) -> Dict[str, Dict[str, Any]]:
        """Credential-free summary of all registered judges."""
        return {judge_id: self._judges[judge_id].to_public_dict() for judge_id in self._load_order}

    def __len__(self) -> int:
        return len(self._judges)

    def __contains__(self, judge_id: object) -> bool:
        return judge_id in self._judges

    def __iter__(self) -> Iterator[JudgeConfig]:
        return iter([self._judges[judge_id] for judge_id in self._load_order])
