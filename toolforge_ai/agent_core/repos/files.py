"""Filesystem-backed config storage and module locator.

``YamlDirectoryConfigStorage`` reads one ``<name>.yml`` file per config object,
the layout of an exported configuration directory. ``DirectoryModuleLocator``
treats every sub-directory of a root as an installed module.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, List, Optional, Union

import yaml

from .interfaces import ConfigStorage, ModuleLocator

logger = logging.getLogger(__name__)

_SUFFIX = ".yml"


class YamlDirectoryConfigStorage(ConfigStorage):
    """Read-only config storage over a directory of YAML files."""

    def __init__(self, directory: Union[str, Path]) -> None:
        self._dir = Path(directory)

    def list_all(self) -> List[str]:
        if not self._dir.is_dir():
            return []
        return sorted(p.name[: -len(_SUFFIX)] for p in self._dir.glob(f"*{_SUFFIX}") if p.is_file())

    def read(self, name: str) -> Optional[Any]:
        path = self._dir / f"{name}{_SUFFIX}"
        if not path.is_file():
            return None
        try:
            return yaml.safe_load(path.read_text(encoding="utf-8"))
        except yaml.YAMLError as e:
            logger.warning(f"Failed to parse config file {path}: {e}")
            return None


class DirectoryModuleLocator(ModuleLocator):
    """Modules are the sub-directories of ``root``."""

    def __init__(self, root: Union[str, Path]) -> None:
        self._root = Path(root)

    def exists(self, module: str) -> bool:
        if not module or "/" in module or "\\" in module or module in {".", ".."}:
            return False
        return (self._root / module).is_dir()

    def get_path(self, module: str) -> Optional[Path]:
        if not self.exists(module):
            return None
        return self._root / module
