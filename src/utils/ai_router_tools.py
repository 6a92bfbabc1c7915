"""
LangGraph tool-calling agent for the DeFi tools.

The graph has two nodes: the model node asks the LLM to pick tools, the tools
node runs every selected tool. There is no loop back to the model; the last
tool output is the answer returned to the client. A model reply without any
tool call is rewritten to call the fallback tool, so every run ends in a tool.
"""

import inspect
from typing import Any, List, Optional
from uuid import uuid4

from langchain_core.messages import AIMessage, BaseMessage
from langchain_core.messages.tool import tool_call
from langchain_core.tools import StructuredTool
from langchain_openai import ChatOpenAI
from langgraph.checkpoint.memory import MemorySaver
from langgraph.graph import END, START, MessagesState, StateGraph
from langgraph.prebuilt import ToolNode

from config import LLM_BASE_URL, LLM_MODEL_ID, LLM_TEMPERATURE, OPENROUTER_API_KEY, logger
from tools.fallback_tool import FALLBACK_TOOL_NAME

MODEL_NODE = "model"
TOOLS_NODE = "tools"


def initialize_llm(model_id: str = LLM_MODEL_ID, temperature: float = LLM_TEMPERATURE) -> ChatOpenAI:
    """
    Initialize the LLM using OpenRouter (or any OpenAI-compatible endpoint in LLM_BASE_URL).

    Returns:
        Configured LLM instance
    """
    if not OPENROUTER_API_KEY:
        raise ValueError("OPENROUTER_API_KEY environment variable is required")

    llm_kwargs = {
        "model": model_id,
        "api_key": OPENROUTER_API_KEY,
        "base_url": LLM_BASE_URL,
        "temperature": temperature,
        "max_tokens": 4096,
    }

    # Disable parallel tool calls for Gemini models to avoid function response mismatch
    if "gemini" in model_id.lower():
        llm_kwargs["parallel_tool_calls"] = False

    return ChatOpenAI(**llm_kwargs)


def ensure_tool_call(message: BaseMessage) -> BaseMessage:
    """Force a single fallback tool call onto a model reply that selected no tools."""
    if isinstance(message, AIMessage) and message.tool_calls:
        return message

    logger.info("Model returned no tool call, routing to fallback")
    return AIMessage(
        content=message.content if message is not None else "",
        id=getattr(message, "id", None),
        tool_calls=[tool_call(name=FALLBACK_TOOL_NAME, args={}, id=f"call_{uuid4().hex}")],
    )


def route_after_model(state: MessagesState) -> str:
    """Go to the tools node when the last message carries tool calls, otherwise finish."""
    last_message = state["messages"][-1]
    if getattr(last_message, "tool_calls", None):
        return TOOLS_NODE
    return END


def build_agent_graph(llm: Any, tools: List[StructuredTool], checkpointer: Optional[Any] = None):
    """
    Compile the model -> tools -> END graph.

    Args:
        llm: Chat model supporting bind_tools
        tools: Tools the model may call (must include the fallback tool)
        checkpointer: Conversation store keyed by thread_id (in-memory by default)

    Returns:
        Compiled LangGraph runnable
    """
    if FALLBACK_TOOL_NAME not in {t.name for t in tools}:
        raise ValueError(f"The '{FALLBACK_TOOL_NAME}' tool must be registered")

    llm_with_tools = llm.bind_tools(tools)

    async def call_model(state: MessagesState):
        response = await llm_with_tools.ainvoke(state["messages"])
        return {"messages": [ensure_tool_call(response)]}

    graph = StateGraph(MessagesState)
    graph.add_node(MODEL_NODE, call_model)
    graph.add_node(TOOLS_NODE, ToolNode(tools))

    graph.add_edge(START, MODEL_NODE)
    graph.add_conditional_edges(MODEL_NODE, route_after_model, [TOOLS_NODE, END])
    graph.add_edge(TOOLS_NODE, END)

    return graph.compile(checkpointer=checkpointer or MemorySaver())


def create_langchain_tool(func: callable, name: Optional[str] = None, description: Optional[str] = None, args_schema: Optional[Any] = None):
    """Helper function to create a LangChain tool from a regular Python function.

    Automatically detects if the function is sync or async and creates the appropriate tool.

    Args:
        func: The Python function to convert to a LangChain tool
        name: Optional name for the tool (defaults to function name)
        description: Optional description for the tool (defaults to function docstring)
        args_schema: Optional Pydantic model for input validation

    Returns:
        A LangChain StructuredTool
    """
    # Use provided name or function name
    tool_name = name or func.__name__

    # Use provided description or function docstring
    tool_description = description or (func.__doc__ or f"Tool for {tool_name}")

    # Check if function is async
    if inspect.iscoroutinefunction(func):
        return StructuredTool.from_function(
            func=None,
            coroutine=func,
            name=tool_name,
            description=tool_description,
            args_schema=args_schema
        )

    return StructuredTool.from_function(
        func=func,
        coroutine=None,
        name=tool_name,
        description=tool_description,
        args_schema=args_schema
    )
