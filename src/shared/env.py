"""Resolve ``<NAME>_FILE`` environment variables into ``<NAME>``."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Dict, MutableMapping, Optional

import structlog

logger = structlog.get_logger(__name__)

_FILE_SUFFIX = "_FILE"


def load_secret_file_variables(
    environ: Optional[MutableMapping[str, str]] = None,
) -> Dict[str, str]:
    """
    Expose the contents of Docker-style secret files as plain variables.

    ``TEXTGEN_API_KEY_FILE=/run/secrets/key`` sets ``TEXTGEN_API_KEY`` to the
    stripped file contents. An explicitly set target variable wins. Unreadable
    files are logged and skipped.

    Returns:
        Mapping of the variables that were resolved.
    """
    env = os.environ if environ is None else environ
    resolved: Dict[str, str] = {}

    for key, file_path in list(env.items()):
        if not key.endswith(_FILE_SUFFIX) or not file_path:
            continue
        target_key = key[: -len(_FILE_SUFFIX)]
        if env.get(target_key):
            continue
        try:
            value = Path(file_path).read_text(encoding="utf-8").strip()
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning(
                "env.secret_file.unreadable",
                key=key,
                path=file_path,
                error=str(exc),
            )
            continue
        env[target_key] = value
        resolved[target_key] = value

    return resolved


load_secret_file_variables()
