#!/usr/bin/env python3
"""
Interactive MapChat agent.

The model picks a MapChat tool for each request, the tool runs on the MCP
server, and the resulting geometry is handed to the map renderer.
"""

import asyncio
import json
import sys

from fastmcp.client import Client
from fastmcp.client.transports import StreamableHttpTransport
from llama_index.core.llms import ChatMessage, MessageRole
from llama_index.core.workflow import StartEvent, StopEvent, Workflow, step
from llama_index.llms.openai import OpenAI
from rich.console import Console
from rich.panel import Panel
from rich.prompt import Prompt

from mapchat.config import Config
from mapchat.utils.map_render import build_map_update
from mapchat.utils.results import ToolResult, feature_properties

console = Console()

SYSTEM_PROMPT = """You are MapChat.
- If the user wants only to find a location, use only "nominatim_search".
- If prompted by the user for recommendations of hotels/restaurants/attractions near a named place, use only "foursquare_by_place". After using this tool, you can remind the user that they can click on the markers for more details.
- Use "tripadvisor_by_place" only when the user asks for TripAdvisor results.
After any tool call, summarize briefly."""

MAX_STEPS = 5


def _build_llm():
    api_key = Config.get_openai_api_key()
    if not api_key:
        raise RuntimeError(
            "OPENAI_API_KEY or OPENROUTER_API_KEY environment variable not set."
        )
    if Config.OPENROUTER_API_KEY:
        return OpenAI(
            model=Config.OPENROUTER_MODEL,
            api_key=Config.OPENROUTER_API_KEY,
            base_url="https://openrouter.ai/api/v1",
            temperature=0.1,
        )
    return OpenAI(
        model=Config.OPENAI_MODEL_NAME, api_key=Config.OPENAI_API_KEY, temperature=0.1
    )


async def _list_tools_for_openai(base_url):
    transport = StreamableHttpTransport(url=f"{base_url}/mcp")
    async with Client(transport) as client:
        tools = await client.list_tools()
        return [
            {
                "type": "function",
                "function": {
                    "name": t.name,
                    "description": t.description or "",
                    "parameters": t.inputSchema or {"type": "object", "properties": {}},
                },
            }
            for t in tools
        ]


def parse_tool_payload(result_obj):
    """Pull the tool's JSON dict out of an MCP call result."""
    structured = getattr(result_obj, "structured_content", None)
    if structured:
        payload = structured.get("result", structured)
        if isinstance(payload, str):
            try:
                return json.loads(payload)
            except json.JSONDecodeError:
                return payload
        return payload

    content = getattr(result_obj, "content", None)
    if isinstance(content, list) and content:
        text = getattr(content[0], "text", None)
        if isinstance(text, str):
            try:
                return json.loads(text)
            except json.JSONDecodeError:
                return text
        return str(content[0])
    return {
        "ok": False,
        "error": "Failed to parse tool result from MCP server",
    }


async def _call_tool(base_url, tool_name, args):
    transport = StreamableHttpTransport(url=f"{base_url}/mcp")
    async with Client(transport) as client:
        result_obj = await client.call_tool(tool_name, args, raise_on_error=False)
        return parse_tool_payload(result_obj)


def summarize_for_model(result: ToolResult):
    """
    Compact view of a tool result for the LLM.

    Coordinates are dropped; polygons can run to thousands of positions and the
    model only needs names to write its summary.
    """
    if not result.ok:
        summary = {"ok": False, "error": result.error}
        if result.status is not None:
            summary["status"] = result.status
        return summary

    places = []
    for feature in result.features[:20]:
        props = feature_properties(feature)
        entry = {
            k: props[k]
            for k in ("name", "display_name", "category", "address", "distance", "rating")
            if props.get(k) is not None
        }
        geometry = feature.get("geometry")
        entry["geometry"] = geometry.get("type") if isinstance(geometry, dict) else None
        places.append(entry)
    return {
        "ok": True,
        "source": result.source,
        "feature_count": len(result.features),
        "features": places,
    }


def show_map_update(update):
    """Default renderer hook: describe what the map would draw."""
    lines = []
    for name, fc in update["layers"].items():
        lines.append(f"layer {name}: {len(fc['features'])} feature(s)")
    lines.append(f"markers: {len(update['markers'])}")
    if update["fit_bounds"]:
        (w, s), (e, n) = update["fit_bounds"]["bounds"]
        lines.append(f"fit bounds: {w:.5f},{s:.5f} -> {e:.5f},{n:.5f}")
    console.print(
        Panel("\n".join(lines), title="[blue]Map update[/blue]", border_style="blue")
    )


async def _execute_tool_call(tool_call, base_url, on_map_update):
    """Run one model-requested tool call and return the TOOL message for the model."""
    tool_name = tool_call.function.name
    try:
        tool_args = json.loads(tool_call.function.arguments)
    except json.JSONDecodeError:
        tool_args = {}

    problems = Config.validate_tool_params(tool_name, tool_args)
    if problems:
        return ChatMessage(
            role=MessageRole.TOOL,
            content=json.dumps({"ok": False, "error": "; ".join(problems)}),
            additional_kwargs={"tool_call_id": tool_call.id},
        )

    console.print(
        f"[bold cyan]Action:[/bold cyan] Calling [bold]{tool_name}[/bold] with {tool_args}"
    )
    try:
        with console.status(f"[bold green]Executing {tool_name}..."):
            payload = await _call_tool(base_url, tool_name, tool_args)
        result = ToolResult.from_dict(payload)
        if result.ok:
            console.print(
                f"[green]{tool_name}: added {len(result.features)} feature(s) to map.[/green]"
            )
            update = build_map_update(result)
            if update:
                on_map_update(update)
        else:
            console.print(f"[red]{tool_name} error: {result.error}[/red]")
        content = summarize_for_model(result)
    except Exception as e:
        console.print(f"[red]{tool_name} failed: {e}[/red]")
        content = {"ok": False, "error": f"Error executing tool {tool_name}: {e}"}

    return ChatMessage(
        role=MessageRole.TOOL,
        content=json.dumps(content),
        additional_kwargs={"tool_call_id": tool_call.id},
    )


class MapChatWorkflow(Workflow):
    def __init__(self, base_url, llm, conversation_history, on_map_update=show_map_update):
        super().__init__(timeout=600, verbose=False)
        self.base_url = base_url
        self.llm = llm
        self.conversation_history = conversation_history
        self.on_map_update = on_map_update

    @step
    async def process_query(self, _: StartEvent) -> StopEvent:
        """Let the model call tools until it answers in text or runs out of steps."""
        openai_tools = await _list_tools_for_openai(self.base_url)
        messages = [
            ChatMessage(role=MessageRole.SYSTEM, content=SYSTEM_PROMPT),
            *self.conversation_history,
        ]

        for _step in range(MAX_STEPS):
            with console.status("[bold yellow]Thinking..."):
                response = self.llm.chat(messages, tools=openai_tools)
            message = response.message
            tool_calls = message.additional_kwargs.get("tool_calls", [])
            if not tool_calls:
                return StopEvent(result=message.content or "")

            messages.append(message)
            # sequential: tool calls share caches and the geocode throttle
            for tc in tool_calls:
                messages.append(
                    await _execute_tool_call(tc, self.base_url, self.on_map_update)
                )

        final = self.llm.chat(messages)
        return StopEvent(result=final.message.content or "")


async def _amain():
    console.print(Panel.fit("[bold green]MapChat[/bold green]", border_style="green"))

    base_url = Config.MCP_SERVER_URL
    try:
        with console.status("[bold blue]Checking MCP server..."):
            tools = await _list_tools_for_openai(base_url)
        if not tools:
            console.print(f"[red]MCP server not found at {base_url}[/red]")
            console.print("[dim]Please start the server: 'mapchat-server'[/dim]")
            return
        console.print(f"[green]MCP server running at {base_url}[/green]")

        llm = _build_llm()
        conversation_history = []
        pending = " ".join(sys.argv[1:]).strip()

        while True:
            query = pending or Prompt.ask("[bold cyan]>[/bold cyan]")
            pending = ""
            if query.strip().lower() in ["quit", "exit", "bye"]:
                break
            if not query.strip():
                continue

            conversation_history.append(ChatMessage(role=MessageRole.USER, content=query))
            wf = MapChatWorkflow(base_url, llm, conversation_history)
            result_event = await wf.run()
            final_answer = (
                result_event.result
                if isinstance(result_event, StopEvent)
                else str(result_event)
            )
            conversation_history.append(
                ChatMessage(role=MessageRole.ASSISTANT, content=final_answer)
            )
            console.print(
                Panel(final_answer, title="[bold green]MapChat[/bold green]", border_style="green")
            )

    except KeyboardInterrupt:
        console.print("\n[bold yellow]Exiting MapChat.[/bold yellow]")
    except Exception as e:
        console.print(f"[red]An unexpected error occurred: {e}[/red]")


def main():
    asyncio.run(_amain())


if __name__ == "__main__":
    main()
