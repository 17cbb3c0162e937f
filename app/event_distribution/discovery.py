"""Feature handler auto-discovery.

Imports every module of the configured handler packages so their
``@command`` declarations run before the distribution is initialized.

Usage:

    from event_distribution.discovery import discover_handler_modules

    summary = discover_handler_modules(["programs"])
    logger.info("handler_modules_discovered", summary=summary)
"""

import importlib
import pkgutil
from typing import Any, Dict, List, Sequence

from core.logging import get_module_logger

logger = get_module_logger()


def is_test_module(module_name: str) -> bool:
    """Whether a module belongs to a test suite rather than a feature."""
    parts = module_name.split(".")
    return any(
        part in ("tests", "test", "conftest") or part.startswith("test_")
        for part in parts
    )


def discover_handler_modules(packages: Sequence[str]) -> Dict[str, Any]:
    """Import every non-test module under the given packages.

    Args:
        packages: Importable package names, e.g. ["programs"]

    Returns:
        Dictionary with discovery summary:
        {
            "packages": List[str],
            "modules_imported": List[str],
        }

    Raises:
        Exception: Any error raised while importing a module, after logging
            it. A feature that fails to load is fatal.
    """
    imported: List[str] = []

    for package_name in packages:
        package = _import(package_name)
        imported.append(package_name)

        search_path = getattr(package, "__path__", None)
        if search_path is None:
            continue

        for module_info in pkgutil.walk_packages(search_path, prefix=f"{package_name}."):
            if is_test_module(module_info.name):
                continue
            _import(module_info.name)
            imported.append(module_info.name)

    logger.info(
        "handler_modules_discovered",
        packages=list(packages),
        module_count=len(imported),
    )

    return {"packages": list(packages), "modules_imported": imported}


def _import(module_name: str) -> Any:
    try:
        module = importlib.import_module(module_name)
    except Exception as e:
        logger.error(
            "handler_module_import_failed",
            module=module_name,
            error=f"{type(e).__name__}: {str(e)}",
        )
        raise
    logger.debug("handler_module_imported", module=module_name)
    return module
