"""
Judge Registry - the fixed set of downstream analysis personas.

Usage:
    from a42z_judge.modules.judges import JudgeRegistry

    registry = JudgeRegistry.from_environment()
    judge = registry.resolve("paul")
    query = judge.render_query(repo_url="https://github.com/acme/widget")
"""

from .catalog import BUILTIN_JUDGES, builtin_catalog
from .models import DEFAULT_QUERY_TEMPLATE, JudgeConfig
from .registry import CREDENTIAL_ENV_PREFIX, JudgeRegistry, credential_env_var

__all__ = [
    "BUILTIN_JUDGES",
    "builtin_catalog",
    "DEFAULT_QUERY_TEMPLATE",
    "JudgeConfig",
    "CREDENTIAL_ENV_PREFIX",
    "JudgeRegistry",
    "credential_env_var",
]
