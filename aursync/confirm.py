"""Confirmation providers consulted before changes are made."""

import logging
from typing import Callable, Iterable, List, Optional


class ConfirmationProvider:
    """Asks the operator whether to proceed."""

    def confirm(self, prompt: str) -> bool:
        raise NotImplementedError


class AlwaysConfirm(ConfirmationProvider):
    """Proceeds without asking, for ``--no-confirm``."""

    def confirm(self, prompt: str) -> bool:
        return True


class TerminalConfirmation(ConfirmationProvider):
    """Reads a y/n answer from the terminal; an empty answer means yes."""

    def __init__(self, input_func: Callable[[str], str] = input):
        self.input_func = input_func
        self.logger = logging.getLogger('aursync.confirm')

    def confirm(self, prompt: str) -> bool:
        try:
            answer = self.input_func(f"{prompt} y/n [default: y]: ")
        except EOFError:
            self.logger.debug("No answer on stdin, treating as no")
            return False
        return answer.strip().lower() in ("", "y")


class ScriptedConfirmation(ConfirmationProvider):
    """Answers from a fixed sequence; used when no terminal is available."""

    def __init__(self, answers: Iterable[bool], default: Optional[bool] = False):
        self.answers: List[bool] = list(answers)
        self.default = default
        self.prompts: List[str] = []

    def confirm(self, prompt: str) -> bool:
        self.prompts.append(prompt)
        if self.answers:
            return self.answers.pop(0)
        return bool(self.default)
