"""Public API for :mod:`csv_exec`."""

from importlib import metadata
from pathlib import Path
from typing import TYPE_CHECKING
import tomllib

if TYPE_CHECKING:
    from csv_exec.engine import run
    from csv_exec.models.run import RunOptions, RunResult, RunStatus
    from csv_exec.settings import Settings


def _pyproject_version() -> str | None:
    pyproject = Path(__file__).resolve().parents[2] / "pyproject.toml"
    try:
        parsed = tomllib.loads(pyproject.read_text(encoding="utf-8"))
        version = parsed.get("project", {}).get("version")
        if isinstance(version, str) and version:
            return version
    except (FileNotFoundError, OSError, tomllib.TOMLDecodeError):
        return None
    return None


def _resolve_version() -> str:
    # Prefer the local pyproject when running from a source checkout/editable install.
    version = _pyproject_version()
    if version is not None:
        return version

    try:
        return metadata.version("csv-exec")
    except metadata.PackageNotFoundError:  # pragma: no cover
        return "unknown"


__version__ = _resolve_version()

_EXPORTS = {
    "run": ("csv_exec.engine", "run"),
    "Settings": ("csv_exec.settings", "Settings"),
    "RunOptions": ("csv_exec.models.run", "RunOptions"),
    "RunResult": ("csv_exec.models.run", "RunResult"),
    "RunStatus": ("csv_exec.models.run", "RunStatus"),
}


def __getattr__(name: str):
    target = _EXPORTS.get(name)
    if target is None:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
    module_name, attr_name = target
    module = __import__(module_name, fromlist=[attr_name])
    value = getattr(module, attr_name)
    globals()[name] = value
    return value


def __dir__() -> list[str]:
    return sorted(list(globals().keys()) + list(_EXPORTS.keys()))


__all__ = [
    "RunOptions",
    "RunResult",
    "RunStatus",
    "Settings",
    "run",
    "__version__",
]
