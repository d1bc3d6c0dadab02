"""User interface components for the CLI."""

from typing import List, Optional

from prompt_toolkit import print_formatted_text, prompt
from prompt_toolkit.formatted_text import HTML
from prompt_toolkit.history import InMemoryHistory

# UI formatting constants
SEPARATOR_LINE = "=" * 80
DASH_LINE = "-" * 80

EXIT_WORDS = ("quit", "exit", "q")


def print_header(title: str):
    """Print a formatted header."""
    print("\n" + SEPARATOR_LINE)
    print(title)
    print(SEPARATOR_LINE)


def print_divider():
    """Print a divider line."""
    print("\n" + DASH_LINE)


def print_status(message: str):
    """Print a pipeline progress message."""
    print(f"  … {message}")


def read_multiline_input(prompt_text: str) -> Optional[str]:
    """Read multiline input from the user.

    Args:
        prompt_text: Prompt to display to the user

    Returns:
        The input text as a string, or None if cancelled
    """
    if prompt_text:
        print(prompt_text)

    print_formatted_text(
        HTML(
            "<b><style color='ansigray'>Press [Esc] followed by [Enter] to submit. Press [Ctrl-c] to cancel.</style></b>"
        )
    )
    try:
        text = prompt(
            "",
            multiline=True,
            mouse_support=False,  # Keep native terminal copy/paste working
            history=InMemoryHistory(),  # Up arrow should not recall earlier job briefs
        )
    except (KeyboardInterrupt, EOFError):
        print("\nCancelled.")
        return None

    text = text.strip()
    if text.lower() in EXIT_WORDS:
        return None
    return text


def get_user_choice(options: List[str], default: str = "1", prompt_text: str = "Choice") -> str:
    """Get a validated user choice from a list of options.

    Args:
        options: List of valid option strings (e.g. ['1', '2', '3'])
        default: Default option if user presses Enter
        prompt_text: Prompt text

    Returns:
        The selected option, or "q" if the user wants to quit
    """
    while True:
        try:
            # Mouse support off so the user can select text in the terminal
            choice = prompt(f"\n{prompt_text} [{default}]: ", mouse_support=False).strip()
        except (KeyboardInterrupt, EOFError):
            return "q"

        choice = choice or default

        if choice in options:
            return choice
        if choice.lower() in EXIT_WORDS:
            return "q"
        print(f"Invalid choice. Please select from: {', '.join(options)}")


def show_proposal(title: str, text: str, portfolio_used: Optional[int] = None):
    """Display a proposal between separator lines."""
    print_header(title)
    print(text)
    print(SEPARATOR_LINE)
    if portfolio_used is not None:
        print(f"Portfolio items referenced: {portfolio_used}")
