import asyncio
import os
import sys

# Ensure the package is importable
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src")))

from cliagent import create_service, relay


async def main():
    service = create_service(working_directory=os.getcwd(), timeout_ms=120_000)

    # 1. Push events to a sink, as a UI transport would
    def sink(event: dict) -> None:
        print(event)

    request = asyncio.create_task(
        relay(service, "Write a long essay about specifications.", sink)
    )

    # 2. Cancel after a few seconds
    await asyncio.sleep(3)
    service.cancel()

    count = await request
    print(f"{count} events, final status: {service.get_status().state}")


if __name__ == "__main__":
    asyncio.run(main())
