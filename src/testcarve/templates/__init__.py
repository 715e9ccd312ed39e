"""Template files copied into every extracted test."""

from __future__ import annotations

import os
from collections.abc import Mapping
from datetime import datetime
from pathlib import Path

from testcarve.core.errors import ExtractionError

_TEMPLATE_DIR = Path(__file__).parent

MAKEFILE_TEMPLATE = "Makefile.mk"
RUN_SCRIPT_TEMPLATE = "run_test.sh"

# Environment variables describing the CI job that ran the extraction
_ENV_PLACEHOLDERS = ("JENKINS_URL", "JOB_NAME", "BUILD_ID")


def _read_bytes(name: str) -> bytes:
    path = _TEMPLATE_DIR / name
    if not path.is_file():
        raise ExtractionError.template_missing(name)
    return path.read_bytes()


def get_makefile_template() -> bytes:
    """Return the build descriptor exactly as bundled."""
    return _read_bytes(MAKEFILE_TEMPLATE)


def render_run_script(
    test_name: str,
    *,
    env: Mapping[str, str] | None = None,
    now: datetime | None = None,
) -> str:
    """Fill the run-script template for ``test_name``.

    Missing CI variables become ``missing-<NAME>``. When JAVA_TOOL_OPTIONS was
    set at extraction time it is recorded and exported by the script.
    """
    env = os.environ if env is None else env
    now = now or datetime.now()
    text = _read_bytes(RUN_SCRIPT_TEMPLATE).decode("utf-8")

    text = text.replace("{TEST}", test_name)
    text = text.replace("{DATE}", now.strftime("%a %b %d %H:%M:%S %Y"))
    for key in _ENV_PLACEHOLDERS:
        text = text.replace("{" + key + "}", env.get(key, f"missing-{key}"))

    jto = env.get("JAVA_TOOL_OPTIONS")
    if jto is None:
        text = text.replace("={JAVA_TOOL_OPTIONS}", "=").replace(
            "#{JAVA_TOOL_OPTIONS}", "# no JAVA_TOOL_OPTIONS found in runtime of this tool"
        )
    else:
        text = text.replace("={JAVA_TOOL_OPTIONS}", f"='{jto}'").replace(
            "#{JAVA_TOOL_OPTIONS}", f"export JAVA_TOOL_OPTIONS='{jto}'"
        )
    return text


__all__ = [
    "MAKEFILE_TEMPLATE",
    "RUN_SCRIPT_TEMPLATE",
    "get_makefile_template",
    "render_run_script",
]
