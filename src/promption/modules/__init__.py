"""Feature modules with auto-discovery."""

from importlib import import_module
from pathlib import Path

import structlog
from fastapi import APIRouter


logger = structlog.get_logger()


def discover_modules() -> list[APIRouter]:
    """Auto-discover and return routers from all modules.

    Scans the modules directory for packages whose ``__init__.py``
    exposes a ``router`` attribute. A module that fails to import is
    logged and the error propagates, so a broken module can never
    silently drop its routes.

    Returns:
        List of FastAPI routers from discovered modules, in name order.
    """
    modules_dir = Path(__file__).parent
    routers: list[APIRouter] = []

    for path in sorted(modules_dir.iterdir()):
        if path.is_dir() and not path.name.startswith("_"):
            try:
                module = import_module(f"promption.modules.{path.name}")
            except ImportError as e:
                logger.error("module_load_failed", module=path.name, error=str(e))
                raise
            if hasattr(module, "router"):
                routers.append(module.router)
                logger.debug("module_loaded", module=path.name)

    return routers
