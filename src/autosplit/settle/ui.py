"""Interactive prompts for picking trip members and transfers."""

import logging
from typing import Any

from prompt_toolkit import PromptSession
from prompt_toolkit.completion import Completer, Completion
from prompt_toolkit.document import Document

from ..models import Member, Transfer

logger = logging.getLogger(__name__)


def fuzzy_match(query: str, text: str) -> bool:
    """
    Fuzzy match: all characters in query must appear in order in text.

    Example:
        query="ank" matches "Ananya K"
        query="rv" matches "Ravi"
    """
    query_idx = 0
    for char in text:
        if query_idx < len(query) and char == query[query_idx]:
            query_idx += 1
    return query_idx == len(query)


class MemberCompleter(Completer):
    """Fuzzy search completer for trip members."""

    def __init__(self, members: list[Member]):
        """Initialize the completer with the trip's members."""
        self.members = members

        # Build display labels and label-to-id mapping
        self.label_to_id = {}
        for member in members:
            self.label_to_id[self.label(member)] = member.user_id

    @staticmethod
    def label(member: Member) -> str:
        return f"{member.name} ({member.user_id})"

    def get_completions(self, document: Document, complete_event: Any):
        """Get fuzzy-matched completions."""
        query = document.text.lower()

        for label in self.label_to_id:
            if not query or fuzzy_match(query, label.lower()):
                yield Completion(
                    text=label,
                    start_position=-len(document.text),
                    display=label,
                )


def select_member_interactive(members: list[Member], prompt: str) -> str | None:
    """
    Interactive member selection with fuzzy search.

    Args:
        members: Members of the trip
        prompt: What the member is being picked for, e.g. "Paid by"

    Returns:
        Selected user ID, or None to skip
    """
    if not members:
        print("\nNo members in this trip yet")
        return None

    print("   Type to search, press Enter to confirm, Ctrl+C to skip\n")

    completer = MemberCompleter(members)
    session: PromptSession[str] = PromptSession(completer=completer)

    try:
        while True:
            result = session.prompt(f"{prompt}: ", complete_while_typing=True)

            if not result:
                return None

            # Accept a full label or a bare user ID
            user_id = completer.label_to_id.get(result)
            if user_id is None and result in completer.label_to_id.values():
                user_id = result
            if user_id:
                logger.info(f"User selected member: {user_id}")
                return user_id

            print("Unknown member. Please select from the list or press Tab to complete.")

    except KeyboardInterrupt:
        print("\nSkipped")
        return None
    except EOFError:
        return None


def select_transfer_interactive(
    transfers: list[Transfer], format_amount
) -> int | None:
    """
    Pick one of the outstanding transfers to record as paid.

    Args:
        transfers: Outstanding transfers
        format_amount: Callable turning minor units into display text

    Returns:
        Index of the selected transfer (0-based), or None to cancel
    """
    if not transfers:
        print("\nNothing left to settle")
        return None

    print("\nOutstanding transfers:\n")
    for idx, transfer in enumerate(transfers):
        print(
            f"  [{idx + 1}] {transfer.from_name} -> {transfer.to_name}: "
            f"{format_amount(transfer.amount)}"
        )
    print()

    try:
        response = (
            input(f"Select transfer [1-{len(transfers)}, or q to quit]: ")
            .strip()
            .lower()
        )

        if response in ("q", "quit", ""):
            return None

        selection = int(response) - 1

        if 0 <= selection < len(transfers):
            return selection
        print("Invalid selection")
        return None

    except (ValueError, KeyboardInterrupt, EOFError):
        print("\nCancelled")
        return None


def confirm(message: str) -> bool:
    """Simple yes/no confirmation, defaulting to no."""
    response = input(f"{message} [y/N] ").strip().lower()
    return response in ("y", "yes")
