import asyncio
import logging
import os
import sys

# Ensure the package is importable
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src")))

from cliagent import (
    create_service,
    collect_file_changes,
    ProjectContext,
    RequirementSummary,
    DecisionSummary,
    SendMessageOptions,
    TextEvent,
    ThinkingEvent,
    FileStartEvent,
    FileEndEvent,
    ToolUseEvent,
    ErrorEvent,
)


async def main():
    logging.basicConfig(level=logging.INFO)

    # 1. Create the service and make sure the CLI is installed
    service = create_service(working_directory=os.getcwd())
    if not await service.check_availability():
        print("The CLI is not available on PATH.")
        return
    print(f"CLI version: {service.get_status().cli_version}")

    # 2. Describe the project
    context = ProjectContext(
        project_id="demo",
        project_name="Todo API",
        root_path=os.getcwd(),
        target_language="Python",
        generation_mode="incremental",
        requirements=[
            RequirementSummary(category="API", items=["CRUD endpoints for todos", "Pagination"]),
        ],
        decisions=[DecisionSummary(topic="Framework", choice="FastAPI")],
    )

    # 3. Stream the response
    events = []
    try:
        async for event in service.send_message(
            "Draft the spec index for this project.",
            SendMessageOptions(context=context),
        ):
            events.append(event)
            if isinstance(event, TextEvent):
                print(event.content, end="", flush=True)
            elif isinstance(event, ThinkingEvent):
                print(f"\n[Thinking] {event.content}", flush=True)
            elif isinstance(event, FileStartEvent):
                print(f"\n[{event.action.upper()}] {event.path}", flush=True)
            elif isinstance(event, FileEndEvent):
                print(f"[DONE] {event.path}", flush=True)
            elif isinstance(event, ToolUseEvent):
                print(f"\n[Tool: {event.tool}]", flush=True)
            elif isinstance(event, ErrorEvent):
                print(f"\nError ({event.code}): {event.message}")
    finally:
        service.dispose()

    # 4. Summarize requested file operations
    for change in collect_file_changes(events):
        print(f"- {change.action}: {change.path}")


if __name__ == "__main__":
    asyncio.run(main())
