"""Structural diff between two configuration stores.

``ConfigDiffer.diff`` compares an "active" and a "staging" store:

- ``created``: names only present in active (active enumeration order).
- ``deleted``: names only present in staging (staging enumeration order).
- ``updated``: names present in both whose trees differ after recursive key
  normalization (staging enumeration order).

Normalization sorts the keys of every mapping at every depth so that trees
that only differ in key order are not reported. For each updated name both
normalized trees are dumped to block-style YAML and diffed line by line
(staging → active) with one line of context around each change.

Names where either side is not a mapping are skipped.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Dict, List, Mapping, Sequence, Set

import yaml
from pydantic import Field

from .repos.interfaces import ConfigStorage
from .schemas.base import BaseSchema

logger = logging.getLogger(__name__)

CONTEXT_LINES = 1


class DiffOp(str, Enum):
    context = "context"
    add = "add"
    delete = "delete"


_PREFIX = {DiffOp.context: " ", DiffOp.add: "+", DiffOp.delete: "-"}


class DiffLine(BaseSchema):
    op: DiffOp
    text: str

    def render(self) -> str:
        return f"{_PREFIX[self.op]}{self.text}"


class DiffResult(BaseSchema):
    """Outcome of one config diff. Never persisted."""

    created: List[str] = Field(default_factory=list)
    deleted: List[str] = Field(default_factory=list)
    updated: List[str] = Field(default_factory=list)
    line_diffs: Dict[str, List[DiffLine]] = Field(default_factory=dict)

    def is_empty(self) -> bool:
        return not (self.created or self.deleted or self.updated)

    def render(self) -> str:
        """Readable report: name lists followed by a YAML map of per-item diffs."""
        out = "CREATED:\n"
        out += "".join(f" + {name}\n" for name in self.created)
        out += "\nDELETED:\n"
        out += "".join(f" - {name}\n" for name in self.deleted)
        out += "\nUPDATED:\n"
        out += "".join(f" * {name}\n" for name in self.updated)
        if self.line_diffs:
            texts = {name: "\n".join(line.render() for line in lines) for name, lines in self.line_diffs.items()}
            out += yaml.dump(texts, Dumper=_LiteralDumper, default_flow_style=False, sort_keys=False, indent=2)
        return out


class _LiteralDumper(yaml.SafeDumper):
    """Safe dumper that writes multi-line strings as literal blocks."""


def _represent_str(dumper: yaml.SafeDumper, data: str) -> yaml.ScalarNode:
    if "\n" in data:
        return dumper.represent_scalar("tag:yaml.org,2002:str", data, style="|")
    return dumper.represent_scalar("tag:yaml.org,2002:str", data)


_LiteralDumper.add_representer(str, _represent_str)


def normalize_config(data: Any) -> Any:
    """Recursively sort mapping keys; sequences keep their order."""
    if isinstance(data, Mapping):
        return {key: normalize_config(data[key]) for key in sorted(data, key=str)}
    if isinstance(data, list):
        return [normalize_config(item) for item in data]
    return data


def dump_config(data: Any) -> str:
    """Canonical block-style YAML text for an (already normalized) tree."""
    return yaml.dump(
        data,
        Dumper=_LiteralDumper,
        default_flow_style=False,
        sort_keys=False,
        indent=2,
        allow_unicode=True,
    )


def _edit_script(old: Sequence[str], new: Sequence[str]) -> List[DiffLine]:
    """Minimal edit script over the longest common subsequence of lines.

    Within one change block deletions come before additions.
    """
    n, m = len(old), len(new)
    # lcs[i][j] is the LCS length of old[i:] and new[j:]
    lcs = [[0] * (m + 1) for _ in range(n + 1)]
    for i in range(n - 1, -1, -1):
        for j in range(m - 1, -1, -1):
            if old[i] == new[j]:
                lcs[i][j] = lcs[i + 1][j + 1] + 1
            else:
                lcs[i][j] = max(lcs[i + 1][j], lcs[i][j + 1])

    script: List[DiffLine] = []
    i = j = 0
    while i < n and j < m:
        if old[i] == new[j]:
            script.append(DiffLine(op=DiffOp.context, text=old[i]))
            i += 1
            j += 1
        elif lcs[i + 1][j] >= lcs[i][j + 1]:
            script.append(DiffLine(op=DiffOp.delete, text=old[i]))
            i += 1
        else:
            script.append(DiffLine(op=DiffOp.add, text=new[j]))
            j += 1
    script.extend(DiffLine(op=DiffOp.delete, text=t) for t in old[i:])
    script.extend(DiffLine(op=DiffOp.add, text=t) for t in new[j:])
    return script


def line_diff(old: Sequence[str], new: Sequence[str], *, context: int = CONTEXT_LINES) -> List[DiffLine]:
    """Line-based edit script from ``old`` to ``new`` with ``context`` lines around each change."""
    script = _edit_script(list(old), list(new))
    changed = [idx for idx, line in enumerate(script) if line.op != DiffOp.context]
    if not changed:
        return []
    keep: Set[int] = set()
    for idx in changed:
        keep.update(range(max(0, idx - context), min(len(script), idx + context + 1)))
    return [line for idx, line in enumerate(script) if idx in keep]


class ConfigDiffer:
    """Compare two config storages item by item."""

    def diff(self, active: ConfigStorage, staging: ConfigStorage) -> DiffResult:
        active_names = active.list_all()
        staging_names = staging.list_all()
        active_set = set(active_names)
        staging_set = set(staging_names)

        result = DiffResult(
            created=[name for name in active_names if name not in staging_set],
            deleted=[name for name in staging_names if name not in active_set],
        )

        for name in staging_names:
            if name not in active_set:
                continue
            active_data = active.read(name)
            staging_data = staging.read(name)
            if not isinstance(active_data, Mapping) or not isinstance(staging_data, Mapping):
                logger.debug(f"Skipping config '{name}': not a mapping on both sides")
                continue

            active_text = dump_config(normalize_config(active_data))
            staging_text = dump_config(normalize_config(staging_data))
            if active_text == staging_text:
                continue

            result.updated.append(name)
            result.line_diffs[name] = line_diff(staging_text.splitlines(), active_text.splitlines())

        logger.info(
            f"Config diff: {len(result.created)} created, {len(result.deleted)} deleted, "
            f"{len(result.updated)} updated"
        )
        return result
