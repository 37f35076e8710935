"""
Main orchestration loop for the BizHub assistant.

One call to :meth:`AgentLoop.run` answers one user message:

1. build the conversation (instruction preamble, replayed history, the new message);
2. ask the completion service for a reply;
3. if the reply is a tool call, run it: an *action* tool ends the exchange, a *data* tool feeds its
   output back into the conversation and we ask again;
4. otherwise the reply is the answer.

At most ``max_iterations`` completion calls are made per run.
"""

from __future__ import annotations

import logging
from typing import (
    List,
    Mapping,
    Sequence,
)

from bizhub.agent.completion_client import CompletionClient
from bizhub.agent.tool_executor import execute_tool
from bizhub.common import strip_code_fences
from bizhub.config import settings
from bizhub.core.schema import (
    ActionResult,
    ConversationTurn,
    Speaker,
)
from bizhub.tools import (
    ToolSchema,
    get_tool_schemas,
)
from bizhub.tools.host import HostEnvironment
from bizhub.tools.tool_call_parser import parse_tool_invocation

logger = logging.getLogger(__name__)

PREAMBLE_ACK = "Understood. I can control the website and find info using JSON tool commands."
DEFAULT_ACTION_REPLY = "Done!"
LOOP_EXHAUSTED_REPLY = "I'm sorry, I got stuck in a loop trying to answer that."
TOOL_OUTPUT_PREFIX = "Tool Output: "

TOOLS_PREAMBLE = """\
You have access to the following tools to control the website and fetch information.
To use a tool, you must respond with a JSON object in this format:
{ "tool": "toolName", "params": { "param1": "value" }, "response": "Message to user (optional)" }
"""

TOOLS_STRATEGY = """\
Strategy:
- If the user asks a specific question (e.g., "Who runs the bakery on Main St?"), use \
'findBusiness' first to get the data, then answer the user in the next turn.
- If 'findBusiness' returns data, use that data to answer the user's question.
- If the user wants to perform an action (navigate, scroll), use the appropriate tool.
- Always output valid JSON for tools.
"""


def build_tools_instruction(tool_schemas: Mapping[str, ToolSchema] | None = None) -> str:
    """Describe every registered tool in the format the model is asked to answer in."""
    if tool_schemas is None:
        tool_schemas = get_tool_schemas()

    lines = []
    for number, (name, schema) in enumerate(tool_schemas.items(), start=1):
        params = ", ".join(schema["parameters"])
        lines.append(f"{number}. {name}({params}): {schema['description']}")

    return f"{TOOLS_PREAMBLE}\nAvailable Tools:\n" + "\n".join(lines) + f"\n\n{TOOLS_STRATEGY}"


class AgentLoop:
    """
    Bounded call-interpret-execute loop.

    Parameters
    ----------
    client:
        Completion client used for every model call.
    host:
        Capabilities the tools act through.
    max_iterations:
        Upper bound on completion calls per :meth:`run` (default from settings, 3).
    """

    def __init__(
        self,
        client: CompletionClient,
        host: HostEnvironment,
        max_iterations: int | None = None,
    ):
        self.client = client
        self.host = host
        self.max_iterations = (
            settings.AGENT_MAX_ITERATIONS if max_iterations is None else max_iterations
        )

    def build_conversation(
        self,
        user_message: str,
        system_context: str = "",
        history: Sequence[ConversationTurn] = (),
    ) -> List[ConversationTurn]:
        """Preamble (exactly once), then *history* in order, then the new user message."""
        instruction = build_tools_instruction()
        if system_context:
            instruction = f"{system_context}\n\n{instruction}"

        conversation = [
            ConversationTurn(role=Speaker.USER, text=instruction),
            ConversationTurn(role=Speaker.ASSISTANT, text=PREAMBLE_ACK),
        ]
        conversation.extend(history)
        conversation.append(ConversationTurn(role=Speaker.USER, text=user_message))
        return conversation

    async def run(
        self,
        user_message: str,
        system_context: str = "",
        history: Sequence[ConversationTurn] = (),
    ) -> str:
        """
        Answer *user_message* and return the text to show the user.

        Completion errors propagate untouched.  Running out of iterations is not an error: a
        fixed apology is returned instead.
        """
        conversation = self.build_conversation(user_message, system_context, history)

        for iteration in range(1, self.max_iterations + 1):
            logger.info("Agent loop iteration %d/%d", iteration, self.max_iterations)
            response_text = await self.client.complete(conversation)

            invocation = parse_tool_invocation(response_text)
            if invocation is None:
                return response_text

            result = await execute_tool(invocation.tool, invocation.params, self.host)
            if isinstance(result, ActionResult):
                return invocation.user_message or DEFAULT_ACTION_REPLY

            logger.info("Feeding output of '%s' back to the model", invocation.tool)
            conversation.append(
                ConversationTurn(role=Speaker.ASSISTANT, text=strip_code_fences(response_text))
            )
            conversation.append(
                ConversationTurn(role=Speaker.USER, text=f"{TOOL_OUTPUT_PREFIX}{result.payload}")
            )

        logger.warning("Agent loop gave up after %d iterations", self.max_iterations)
        return LOOP_EXHAUSTED_REPLY
