"""Interactive prompt abstraction."""

from abc import ABC, abstractmethod

import click


class Prompt(ABC):
    """Asks the operator a question and returns the typed answer."""

    @abstractmethod
    def ask(self, question: str) -> str:
        """Block until the operator answers.

        Returns:
            The answer with surrounding whitespace removed
        """
        ...


class RealPrompt(Prompt):
    """Reads the answer from the terminal; the question goes to stderr."""

    def ask(self, question: str) -> str:
        answer = click.prompt(
            question, default="", show_default=False, prompt_suffix="", err=True
        )
        return str(answer).strip()


def is_affirmative(answer: str) -> bool:
    return answer.strip().lower() in ("y", "yes")
