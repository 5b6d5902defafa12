"""
Interactive terminal client for the CareerChat API.

Usage:
    python demo_chat.py [--api-url http://localhost:8000] [--persona linkedin]

Type a message and press Enter. Type a number to pick one of the listed
suggestions, or "quit" to end the session.
"""
import argparse
import sys
from typing import Any, Dict, List

import requests


class ChatSession:
    """Thin wrapper over the conversation endpoints."""

    def __init__(self, api_url: str, persona: str, timeout: int = 60):
        self.api_url = api_url.rstrip("/")
        self.persona = persona
        self.timeout = timeout
        self.conversation_id = None
        self.suggestions: List[str] = []

    def start(self) -> Dict[str, Any]:
        response = requests.post(
            f"{self.api_url}/conversations",
            json={"persona": self.persona},
            timeout=self.timeout
        )
        response.raise_for_status()
        data = response.json()
        self.conversation_id = data["conversation_id"]
        return data

    def send(self, text: str) -> Dict[str, Any]:
        response = requests.post(
            f"{self.api_url}/conversations/{self.conversation_id}/messages",
            json={"text": text},
            timeout=self.timeout
        )
        response.raise_for_status()
        return response.json()

    def end(self) -> None:
        if self.conversation_id is None:
            return
        requests.delete(
            f"{self.api_url}/conversations/{self.conversation_id}",
            timeout=self.timeout
        )
        self.conversation_id = None


def print_turn(turn: Dict[str, Any]) -> List[str]:
    """Print an assistant/user turn and return its suggestions."""
    label = "You" if turn["role"] == "user" else "Assistant"
    marker = " [error]" if turn.get("is_error") else ""
    print(f"\n{label}{marker}: {turn['content']}")

    suggestions = turn.get("suggestions") or []
    for i, suggestion in enumerate(suggestions, 1):
        print(f"  {i}. {suggestion}")
    return suggestions


def main():
    parser = argparse.ArgumentParser(description="Chat with a CareerChat persona")
    parser.add_argument("--api-url", default="http://localhost:8000", help="CareerChat API base URL")
    parser.add_argument("--persona", default="linkedin", help="Persona key (linkedin or qwixai)")
    args = parser.parse_args()

    session = ChatSession(args.api_url, args.persona)

    try:
        data = session.start()
    except requests.exceptions.RequestException as e:
        print(f"Could not start conversation: {e}")
        sys.exit(1)

    for turn in data["turns"]:
        session.suggestions = print_turn(turn)

    try:
        while True:
            text = input("\n> ").strip()
            if text.lower() in ("quit", "exit"):
                break
            if text.isdigit() and 0 < int(text) <= len(session.suggestions):
                text = session.suggestions[int(text) - 1]

            try:
                result = session.send(text)
            except requests.exceptions.RequestException as e:
                print(f"Request failed: {e}")
                continue

            if result.get("notification") and result["notification"]["level"] == "error":
                print(f"\n! {result['notification']['description']}")
            for turn in result["turns"]:
                if turn["role"] == "assistant":
                    session.suggestions = print_turn(turn)
    except (KeyboardInterrupt, EOFError):
        print()
    finally:
        session.end()


if __name__ == "__main__":
    main()
