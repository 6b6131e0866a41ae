"""Simple CLI entry point for the Fin shopping assistant."""

import asyncio
import logging

from fin_assistant import CatalogUnavailableError, FinChatAgent, FinResponse
from fin_assistant.config import LOG_LEVEL


def format_response(response: FinResponse) -> str:
    """Plain-text rendering of one turn: reply, product cards, follow-ups."""
    lines = [f"Fin: {response.response_text}"]
    for i, item in enumerate(response.products, 1):
        p = item.product
        lines.append(f"  {i}. {p.name} ({p.brand}) - {p.currency} {p.price:.2f}")
        if item.ai_reasoning:
            lines.append(f"     {item.ai_reasoning}")
    if response.follow_ups:
        lines.append("  Try: " + " | ".join(f.label for f in response.follow_ups))
    return "\n".join(lines)


async def main() -> None:
    logging.basicConfig(
        level=LOG_LEVEL,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    agent = FinChatAgent()
    print("Fin is ready. Type 'clear' to start over, 'exit' or 'quit' to stop.")

    while True:
        try:
            user_input = input("You: ").strip()
        except (KeyboardInterrupt, EOFError):
            print("\nExiting.")
            break

        if not user_input:
            continue
        if user_input.lower() in {"exit", "quit"}:
            print("Goodbye.")
            break
        if user_input.lower() == "clear":
            agent.reset()
            print("Started a new conversation.\n")
            continue

        try:
            response = await agent.chat(user_input)
        except CatalogUnavailableError:
            print("Fin: Sorry, our catalog is temporarily unavailable. Please try again in a moment.\n")
            continue
        print(format_response(response) + "\n")

    print("Session ended.")


if __name__ == "__main__":
    asyncio.run(main())
