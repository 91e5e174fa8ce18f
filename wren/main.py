"""Wren entry point: a terminal chat loop."""

import asyncio
import logging

from wren.config import settings
from wren.context import AssistantContext
from wren.errors import WrenError
from wren.session import AssistantSession

logging.basicConfig(
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    level=getattr(logging, settings.log_level),
)
logger = logging.getLogger(__name__)

_HELP = "Commands: /reset (new conversation), /summary (summarize it), /quit"


async def chat() -> None:
    """Read lines from stdin and answer them until EOF or /quit."""
    context = AssistantContext.create()
    session = AssistantSession(context)
    logger.info("Starting Wren with model %s (db: %s)", settings.claude_model, context.database.path)
    print(_HELP)

    while True:
        try:
            line = await asyncio.to_thread(input, "> ")
        except EOFError:
            break

        text = line.strip()
        if not text:
            continue
        if text == "/quit":
            break
        if text == "/reset":
            cleared = await session.reset()
            print(f"(cleared {cleared} messages)")
            continue
        if text == "/summary":
            try:
                summary = await session.summarize()
            except WrenError as exc:
                print(f"Error: {exc}")
                continue
            print(summary or "(nothing to summarize yet)")
            continue

        print(await session.send_message(text))


def main() -> None:
    if not settings.anthropic_api_key:
        logger.warning("ANTHROPIC_API_KEY is empty; requests will be rejected")
    try:
        asyncio.run(chat())
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
