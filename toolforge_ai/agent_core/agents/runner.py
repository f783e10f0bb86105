"""Agent run loop.

``AgentRunner.run`` drives a ``ToolCallingModel`` for one prompt:

1. Build the message list (system prompt, prior history, the prompt).
2. Ask the model for a turn, offering only the agent's own tools.
3. Run every requested tool through the ``CapabilityInvoker`` with one
   ``RunLedger`` per run, and feed the readable output back as a tool message.
4. Stop on the first turn without tool calls or after ``max_loops`` turns.

A tool failure is reported back to the model as the tool's output; it does not
end the run.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence

from ..errors import CapabilityError
from ..policy.authorization import AuthorizationContext
from ..runtime.invoker import CapabilityInvoker
from ..runtime.ledger import RunLedger
from ..schemas.domain import CapabilityDescriptor, ChatMessage, ChatRole, Principal
from .models import AgentDefinition, AgentResponse, ToolCall, ToolCallingModel
from .registry import AgentRegistry

logger = logging.getLogger(__name__)


class AgentRunner:
    """Run agents against a model and the capability invoker."""

    def __init__(self, *, invoker: CapabilityInvoker, agents: AgentRegistry, model: ToolCallingModel) -> None:
        self._invoker = invoker
        self._agents = agents
        self._model = model

    def _agent_tools(self, definition: AgentDefinition) -> Dict[str, CapabilityDescriptor]:
        """Descriptors the agent may call, keyed by both id and function name."""
        tools: Dict[str, CapabilityDescriptor] = {}
        for tool_id in definition.tools:
            try:
                descriptor = self._invoker.describe_capability(tool_id)
            except CapabilityError:
                logger.warning(f"Agent '{definition.id}' lists unknown tool '{tool_id}'")
                continue
            tools[descriptor.id] = descriptor
            tools[descriptor.function_name] = descriptor
        return tools

    async def run(
        self,
        agent_id: str,
        prompt: str,
        *,
        caller: Principal,
        history: Optional[Sequence[ChatMessage]] = None,
    ) -> AgentResponse:
        """
        Run one prompt through an agent.

        Raises:
            AgentNotFoundError: If the agent id is unknown.
        """
        definition = self._agents.get(agent_id)
        tools = self._agent_tools(definition)
        offered = list({d.id: d for d in tools.values()}.values())

        conversation: List[ChatMessage] = list(history or [])
        conversation.append(ChatMessage(role=ChatRole.user, content=prompt))
        system: List[ChatMessage] = []
        if definition.system_prompt:
            system.append(ChatMessage(role=ChatRole.system, content=definition.system_prompt))

        ledger = RunLedger()
        run_id = ledger.start_run()
        logger.info(f"Running agent '{agent_id}' (run {run_id})")

        response = ""
        try:
            for _ in range(definition.max_loops):
                turn = await self._model.complete(system + conversation, offered)
                if not turn.tool_calls:
                    response = turn.content or ""
                    break
                if turn.content:
                    conversation.append(ChatMessage(role=ChatRole.assistant, content=turn.content))
                for call in turn.tool_calls:
                    output = await self._run_tool(call, tools, caller=caller, ledger=ledger)
                    conversation.append(ChatMessage(role=ChatRole.tool, content=output, tool_call_id=call.id))
            else:
                logger.warning(f"Agent '{agent_id}' reached max_loops={definition.max_loops} without a final answer")
        finally:
            ledger.close()

        if response:
            conversation.append(ChatMessage(role=ChatRole.assistant, content=response))
        return AgentResponse(
            agent_id=agent_id,
            run_id=run_id,
            response=response,
            history=conversation,
            tool_results=list(ledger.entries()),
        )

    async def _run_tool(
        self,
        call: ToolCall,
        tools: Dict[str, CapabilityDescriptor],
        *,
        caller: Principal,
        ledger: RunLedger,
    ) -> str:
        descriptor = tools.get(call.name)
        if descriptor is None:
            logger.warning(f"Model requested tool '{call.name}' which is not available to this agent")
            return f"Tool '{call.name}' is not available to this agent."
        try:
            outcome = await self._invoker.invoke(
                descriptor.id,
                auth=AuthorizationContext(caller),
                context_json=call.arguments,
                ledger=ledger,
            )
        except CapabilityError as e:
            logger.info(f"Tool '{descriptor.id}' failed during agent run: {e}")
            return str(e)
        return outcome.readable_output
