"""Command-line interface for proposal generation."""

import sys
from typing import Optional, Tuple

import pyperclip

from .config import Settings, load_settings
from .context import ContextAssembler
from .errors import ConfigurationError, GenerationFailed, RevisionFailed
from .generator import LetterGenerator
from .key_pool import KeyPool
from .logging_config import configure_logging
from .model_service import create_model_service
from .orchestrator import ProposalArtifact, ProposalOrchestrator
from .records import JsonRecordStore
from .retry import RetryExecutor
from .revision import RevisionEngine, RevisionSession
from .selector import RelevanceSelector
from .ui_components import (
    SEPARATOR_LINE,
    get_user_choice,
    print_divider,
    print_header,
    print_status,
    read_multiline_input,
    show_proposal,
)


def print_welcome(settings: Settings):
    """Print welcome message."""
    print_header("Upwork AI Proposal Generator")
    print("\nCraft winning cover letters in seconds with AI.")
    print(f"\nModel: {settings.model_name} ({settings.provider}), {len(settings.api_keys)} API key(s)")
    print(f"Data file: {settings.data_file}")
    print("\nInstructions:")
    print("  1. Paste the job brief")
    print("  2. The cover letter will be generated and displayed")
    print("  3. Ask for changes until you are happy, then copy it")
    print("\nType 'quit' or 'exit' to exit the program.")
    print(SEPARATOR_LINE + "\n")


def initialize_components(settings: Settings) -> Tuple[ProposalOrchestrator, RevisionEngine]:
    """Wire the key pool, model service and record store into the pipeline."""
    key_pool = KeyPool(settings.api_keys, quota_patterns=settings.quota_patterns)
    executor = RetryExecutor(key_pool)
    model_service = create_model_service(settings)
    store = JsonRecordStore(settings.data_file)

    orchestrator = ProposalOrchestrator(
        assembler=ContextAssembler(store),
        selector=RelevanceSelector(executor, model_service),
        generator=LetterGenerator(executor, model_service),
    )
    revision_engine = RevisionEngine(executor, model_service)
    return orchestrator, revision_engine


def copy_to_clipboard(text: str):
    """Copy text to the system clipboard."""
    try:
        pyperclip.copy(text)
        print("\n✓ Copied to clipboard!")
    except pyperclip.PyperclipException as e:
        print(f"\nError copying to clipboard: {e}")


def handle_revision_loop(revision_engine: RevisionEngine, artifact: ProposalArtifact) -> Optional[ProposalArtifact]:
    """Let the user refine the proposal.

    Returns:
        The final artifact, or None if the user wants to exit the program
    """
    session = RevisionSession(revision_engine, artifact)

    while True:
        print("\nOptions:")
        print("  (1) Refine this proposal")
        print("  (2) Copy to clipboard")
        print("  (3) Start over with a new job brief")
        print("  (4) Exit")

        choice = get_user_choice(["1", "2", "3", "4"], default="1")

        if choice == "1":
            print("\nWhat would you like to change?")
            print("(e.g. 'Make it more concise', 'Sound more professional', 'Add more enthusiasm')")
            instruction = read_multiline_input("Request:")
            if not instruction:
                continue

            print("\nUpdating your proposal...")
            try:
                revised = session.send(instruction)
            except RevisionFailed as e:
                print(f"\n{session.turns[-1].content}")
                print(f"Details: {e}")
                continue

            show_proposal("REVISED PROPOSAL", revised)
            print(f"\n{session.turns[-1].content}")

        elif choice == "2":
            copy_to_clipboard(session.artifact.text)

        elif choice == "3":
            return session.artifact

        else:
            return None


def main():
    """Main CLI function."""
    try:
        settings = load_settings()
    except ConfigurationError as e:
        print(f"\nError: {e}")
        sys.exit(1)

    configure_logging(settings.log_level)

    if not settings.api_keys:
        print("\nError: No API keys configured.")
        print("Please add MODEL_API_KEYS=key1,key2 to your .env file.")
        sys.exit(1)

    orchestrator, revision_engine = initialize_components(settings)
    print_welcome(settings)

    try:
        while True:
            print_divider()
            job_brief = read_multiline_input("Paste the job brief below:")
            if job_brief is None:
                print("\nExiting...")
                break
            if not job_brief:
                print("No job brief provided. Please try again.")
                continue

            print("\nStarting AI analysis...")
            try:
                artifact = orchestrator.run(job_brief, on_status=print_status)
            except GenerationFailed as e:
                print(f"\n{e}")
                continue

            show_proposal("GENERATED PROPOSAL", artifact.text, artifact.portfolio_used)

            if handle_revision_loop(revision_engine, artifact) is None:
                print("\nExiting...")
                break

    except KeyboardInterrupt:
        print("\n\nExiting...")
        sys.exit(0)


if __name__ == "__main__":
    main()
