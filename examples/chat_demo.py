"""Minimal demonstration of a two-turn chat followed by a summary."""

import asyncio

from chat_core import create_default_service


async def main() -> None:
    service = create_default_service()
    conv = service.create("Diabetes Inquiry")
    for question in (
        "What are the common symptoms of diabetes?",
        "How is Type 1 different from Type 2?",
    ):
        reply = await service.send_message(conv.id, question)
        print("User:", question)
        print("Model:", reply.text)
    summary = await service.update_summary(conv.id)
    print("Summary:", summary.text)


if __name__ == "__main__":
    asyncio.run(main())
