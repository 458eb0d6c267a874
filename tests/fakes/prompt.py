"""Fake Prompt for testing the interactive force-remove path."""

from git_parallel.core.prompt import Prompt


class FakePrompt(Prompt):
    """Answers questions from a predetermined list.

    Each ask() consumes the next answer; once the list is exhausted every
    question is answered with an empty string (a "no").
    """

    def __init__(self, answers: list[str] | None = None) -> None:
        self._answers = list(answers or [])
        self._questions: list[str] = []

    def ask(self, question: str) -> str:
        self._questions.append(question)
        if not self._answers:
            return ""
        return self._answers.pop(0).strip()

    @property
    def questions(self) -> list[str]:
        """Questions asked so far, for test assertions."""
        return self._questions.copy()
