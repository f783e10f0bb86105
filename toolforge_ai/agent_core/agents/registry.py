from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Union

import yaml

from ..errors import AgentNotFoundError
from .models import AgentDefinition

logger = logging.getLogger(__name__)


class AgentRegistry:
    """
    Registry of agent definitions keyed by agent id.

    Definitions are loaded once (from code or a YAML file) and are immutable
    for the duration of any run.
    """

    def __init__(self, definitions: Iterable[AgentDefinition] = ()) -> None:
        self._agents: Dict[str, AgentDefinition] = {}
        for definition in definitions:
            self.register(definition)

    def register(self, definition: AgentDefinition) -> None:
        self._agents[definition.id] = definition

    def get(self, agent_id: str) -> AgentDefinition:
        """
        Retrieve one definition.

        Raises:
            AgentNotFoundError: If no agent is registered with the id.
        """
        try:
            return self._agents[agent_id]
        except KeyError as e:
            raise AgentNotFoundError(agent_id) from e

    def has(self, agent_id: str) -> bool:
        return agent_id in self._agents

    def list(self) -> List[AgentDefinition]:
        """All definitions sorted by id."""
        return [self._agents[k] for k in sorted(self._agents)]

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> "AgentRegistry":
        """
        Load definitions from a YAML file.

        The file holds either a list of definitions or a mapping of agent id to
        definition (the id is then taken from the key).
        """
        raw: Any = yaml.safe_load(Path(path).read_text(encoding="utf-8")) or []
        if isinstance(raw, dict):
            raw = [{"id": agent_id, **(body or {})} for agent_id, body in raw.items()]
        registry = cls(AgentDefinition.model_validate(item) for item in raw)
        logger.info(f"Loaded {len(registry._agents)} agent definition(s) from {path}")
        return registry
