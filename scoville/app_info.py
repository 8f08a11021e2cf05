"""Host application metadata captured at configure() time."""

import sys
from dataclasses import dataclass
from importlib import metadata
from pathlib import Path
from typing import Optional

from scoville.config import AppSettings

UNKNOWN = "unknown"


@dataclass(frozen=True)
class AppInfo:
    """Static identity of the host application."""

    bundle_id: str
    version: str
    build: str


def _script_name() -> Optional[str]:
    main = sys.modules.get("__main__")
    spec = getattr(main, "__spec__", None)
    if spec is not None and spec.name:
        # python -m package.module
        return spec.name.split(".")[0]
    if sys.argv and sys.argv[0] and sys.argv[0] != "-c":
        return Path(sys.argv[0]).stem or None
    return None


def _distribution_version(name: str) -> Optional[str]:
    try:
        return metadata.version(name)
    except metadata.PackageNotFoundError:
        return None


def current_app_info(settings: Optional[AppSettings] = None) -> AppInfo:
    """
    Resolve the host application's identity.

    Explicit settings win. Otherwise the bundle id is the running script or
    module name and the version comes from the installed distribution of the
    same name. Anything unresolved is reported as "unknown".
    """
    settings = settings or AppSettings()

    bundle_id = settings.bundle_id or _script_name() or UNKNOWN
    version = settings.version
    if not version and bundle_id != UNKNOWN:
        version = _distribution_version(bundle_id)

    return AppInfo(
        bundle_id=bundle_id,
        version=version or UNKNOWN,
        build=settings.build or UNKNOWN,
    )
