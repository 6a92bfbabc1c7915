"""
Agent invoker: runs one conversational turn through the tool-calling graph.
"""
import json
from typing import Any, Dict, Optional
from uuid import uuid4

from langchain_core.messages import HumanMessage, SystemMessage

from config import logger
from utils.ai_router_tools import build_agent_graph, initialize_llm
from utils.defi_tools import create_defi_langchain_tools

SYSTEM_PROMPT = "You are a helpful AI Assistant. You MUST respond by calling a tool."


def parse_agent_output(content: Any) -> Dict[str, Any]:
    """Decode the final tool output; non-JSON text is wrapped as a message."""
    if isinstance(content, list):
        content = "".join(part.get("text", "") if isinstance(part, dict) else str(part) for part in content)
    try:
        result = json.loads(content)
    except (TypeError, ValueError):
        return {"message": content}
    if not isinstance(result, dict):
        return {"message": content}
    return result


class AgentInvoker:
    """Wraps the compiled graph and its checkpointer for the lifetime of the server."""

    def __init__(self, graph):
        self.graph = graph

    async def invoke(self, message: str, context: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        Run a single turn.

        Args:
            message: The user's message
            context: Per-request context; `address` is read by the tools and
                `sessionId` selects the conversation thread

        Returns:
            The parsed ToolResult of the last tool that ran
        """
        context = dict(context or {})
        thread_id = context.get("sessionId") or str(uuid4())

        config = {"configurable": {**context, "thread_id": thread_id}}
        inputs = {
            "messages": [
                SystemMessage(content=SYSTEM_PROMPT),
                HumanMessage(content=message),
            ]
        }

        logger.info(f"Invoking agent on thread {thread_id}")
        final_state = await self.graph.ainvoke(inputs, config=config)

        last_message = final_state["messages"][-1]
        return parse_agent_output(last_message.content)


def create_agent_invoker(llm=None, tools=None, checkpointer=None) -> AgentInvoker:
    """Wire the LLM, the DeFi tools and the graph into an invoker."""
    llm = llm or initialize_llm()
    tools = tools if tools is not None else create_defi_langchain_tools()
    graph = build_agent_graph(llm, tools, checkpointer=checkpointer)
    return AgentInvoker(graph)
