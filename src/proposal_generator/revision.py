"""Chat-style revisions of a generated cover letter."""

from dataclasses import dataclass
from typing import List, Optional, Sequence

from .cancellation import CancellationToken
from .errors import RevisionFailed, RunCancelled
from .logging_config import get_logger
from .orchestrator import ProposalArtifact
from .retry import RetryExecutor

logger = get_logger(__name__)

USER = "user"
ASSISTANT = "assistant"

UPDATED_REPLY = "I've updated your proposal based on your request."
ERROR_REPLY = "Sorry, I encountered an error. Please try again."


@dataclass(frozen=True)
class ConversationTurn:
    """One message in a revision chat."""
    role: str  # "user" or "assistant"
    content: str


def build_revision_prompt(
    current_text: str,
    user_instruction: str,
    prior_turns: Sequence[ConversationTurn] = (),
) -> str:
    """Build the prompt asking the model to revise the letter."""
    sections = [
        "You are an expert Upwork proposal writer helping a freelancer refine a cover letter.",
        f'CURRENT COVER LETTER:\n"""\n{current_text}\n"""',
    ]

    if prior_turns:
        transcript = "\n".join(f"{turn.role.capitalize()}: {turn.content}" for turn in prior_turns)
        sections.append(f"CONVERSATION SO FAR (for context only):\n{transcript}")

    sections.append(f"REQUESTED CHANGE:\n{user_instruction}")
    sections.append(
        "Apply the requested change to the current cover letter. Keep its structure, "
        "tone and portfolio links unless the request says otherwise.\n"
        "Return ONLY the complete updated cover letter, with no commentary or explanation."
    )
    return "\n\n".join(sections)


class RevisionEngine:
    """Revise a letter from its current text and a free-text instruction.

    Every call starts from the text it is given; nothing is remembered
    between calls, so repeating an instruction may change the letter again.
    """

    def __init__(self, executor: RetryExecutor, model_service):
        self.executor = executor
        self.model_service = model_service

    def revise(
        self,
        current_text: str,
        user_instruction: str,
        prior_turns: Sequence[ConversationTurn] = (),
        cancel_token: Optional[CancellationToken] = None,
    ) -> str:
        """Return a revised version of current_text.

        Args:
            current_text: The latest version of the cover letter
            user_instruction: What the user wants changed
            prior_turns: Earlier chat turns, supplied to the model as context
            cancel_token: Optional cancellation token

        Returns:
            The revised cover letter text

        Raises:
            ValueError: If the instruction is blank
            RevisionFailed: If the model could not be reached with any key
        """
        if not user_instruction or not user_instruction.strip():
            raise ValueError("Revision instruction must not be empty")

        prompt = build_revision_prompt(current_text, user_instruction.strip(), prior_turns)

        logger.info("Revising cover letter: %s", user_instruction)
        try:
            revised = self.executor.complete(self.model_service, prompt, cancel_token=cancel_token)
        except RunCancelled:
            raise
        except Exception as e:
            raise RevisionFailed(f"Failed to revise cover letter: {e}") from e

        return revised.strip()


class RevisionSession:
    """Editing session for one proposal.

    Keeps the chat transcript and the latest accepted text. A failed
    revision leaves the proposal untouched.
    """

    def __init__(self, engine: RevisionEngine, artifact: ProposalArtifact):
        self.engine = engine
        self.artifact = artifact
        self.turns: List[ConversationTurn] = []

    def send(self, instruction: str, cancel_token: Optional[CancellationToken] = None) -> str:
        """Apply an instruction to the current proposal.

        Returns:
            The new proposal text

        Raises:
            RevisionFailed: If the revision failed; the proposal is unchanged
            RunCancelled: If cancelled; neither the proposal nor the transcript changes
        """
        instruction = instruction.strip()
        if not instruction:
            raise ValueError("Revision instruction must not be empty")

        # The user turn is recorded only with its reply; a cancelled call leaves none
        user_turn = ConversationTurn(USER, instruction)
        try:
            revised = self.engine.revise(
                self.artifact.text,
                instruction,
                self.turns + [user_turn],
                cancel_token=cancel_token,
            )
        except RevisionFailed:
            self.turns.extend([user_turn, ConversationTurn(ASSISTANT, ERROR_REPLY)])
            raise

        self.artifact.text = revised
        self.turns.extend([user_turn, ConversationTurn(ASSISTANT, UPDATED_REPLY)])
        return revised
