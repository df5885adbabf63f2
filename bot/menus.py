"""
Menu and reply assembly.

Every home-menu button carries a command id. Incoming text is matched to
a command by normalized label equality, so dispatch never depends on
substrings of the displayed text.
"""

from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional, Sequence, Tuple

from .models import Prompt, Submission
from .selection import normalize_label

ADMIN_PROMPT_EMOJI = "🖋"
ANSWER_EMOJI = "✍️"
COMMENT_EMOJI = "📖"
QUESTION_EMOJI = "❓"
INFO_EMOJI = "ℹ️"
BACK_EMOJI = "◀️"
DELETE_EMOJI = "🗑️"
STOP_EMOJI = "⏹"

BACK_LABEL = f"{BACK_EMOJI} Back"
BACK_COMMANDS = ("/back",)
START_COMMAND = "/start"

TIME_FORMAT = "%Y-%m-%d %H:%M:%S"
UNKNOWN_USER = "Unknown"

Keyboard = List[List[str]]


class Command(Enum):
    # Operator
    NEW_PROMPT = "new_prompt"
    STOP_PROMPT = "stop_prompt"
    VIEW_COMMENTS = "view_comments"
    VIEW_QUESTIONS = "view_questions"
    ADD_INFO = "add_info"
    DELETE = "delete"
    # Participant
    ANSWER = "answer"
    COMMENT = "comment"
    ASK = "ask"
    INFO = "info"
    CURRENT_PROMPT = "current_prompt"
    PAST_PROMPTS = "past_prompts"
    # Both
    VIEW_ANSWERS = "view_answers"


def build_keyboard(labels: Sequence[str], width: int = 1) -> Keyboard:
    """
    Lay labels out in rows.

    Rows of `width` buttons are used only for widths 2-3 and more than three
    labels; otherwise every label gets its own row. Blank labels are dropped.
    """
    valid = [label for label in labels if label and label.strip()]
    if 1 < width <= 3 and len(valid) > 3:
        return [valid[i:i + width] for i in range(0, len(valid), width)]
    return [[label] for label in valid]


class Menu:
    """An ordered set of (label, command) buttons."""

    def __init__(self, buttons: Sequence[Tuple[str, Command]], width: int = 1):
        self.buttons = list(buttons)
        self.width = width
        self._by_label: Dict[str, Command] = {
            normalize_label(label): command for label, command in self.buttons
        }

    def command_for(self, text: str) -> Optional[Command]:
        return self._by_label.get(normalize_label(text))

    def keyboard(self) -> Keyboard:
        return build_keyboard([label for label, _ in self.buttons], self.width)


def operator_home(width: int = 3) -> Menu:
    return Menu([
        (f"{ADMIN_PROMPT_EMOJI} New question", Command.NEW_PROMPT),
        (f"{ANSWER_EMOJI} View answers", Command.VIEW_ANSWERS),
        (f"{COMMENT_EMOJI} View comments", Command.VIEW_COMMENTS),
        (f"{QUESTION_EMOJI} View asked questions", Command.VIEW_QUESTIONS),
        (f"{INFO_EMOJI} Add information", Command.ADD_INFO),
        (f"{DELETE_EMOJI} Delete question/answer", Command.DELETE),
        (f"{STOP_EMOJI} Stop current question", Command.STOP_PROMPT),
    ], width=width)


def participant_home(width: int = 2) -> Menu:
    return Menu([
        (f"{ANSWER_EMOJI} Send an answer", Command.ANSWER),
        (f"{COMMENT_EMOJI} Leave a comment", Command.COMMENT),
        (f"{QUESTION_EMOJI} Ask a question", Command.ASK),
        (f"{INFO_EMOJI} Get information", Command.INFO),
        (f"{QUESTION_EMOJI} Current question", Command.CURRENT_PROMPT),
        (f"{QUESTION_EMOJI} Past questions", Command.PAST_PROMPTS),
        (f"{ANSWER_EMOJI} View answers", Command.VIEW_ANSWERS),
    ], width=width)


def back_keyboard() -> Keyboard:
    return build_keyboard([BACK_LABEL])


def selection_keyboard(labels: Sequence[str]) -> Keyboard:
    return build_keyboard([*labels, BACK_LABEL])


def is_back(text: str) -> bool:
    normalized = normalize_label(text)
    return normalized == normalize_label(BACK_LABEL) or normalized.lower() in BACK_COMMANDS


def is_start(text: str) -> bool:
    words = normalize_label(text).lower().split()
    # "/start", "/start@SomeBot" and "/start <payload>"
    return bool(words) and words[0].split("@")[0] == START_COMMAND


# ── Record formatting ─────────────────────────────────

def format_time(value: Optional[datetime]) -> str:
    return value.strftime(TIME_FORMAT) if value else "Now"


def display_name(submission: Submission) -> str:
    return submission.author_display_name or UNKNOWN_USER


def prompt_window(prompt: Prompt) -> str:
    return f"{format_time(prompt.start_time)} - {format_time(prompt.end_time)}"


def current_prompt_label(prompt: Prompt) -> str:
    return f"Current Question: {prompt.text} (Current)"


def archived_prompt_label(position: int, prompt: Prompt) -> str:
    return f"Old Question {position}: {prompt.text} ({prompt_window(prompt)})"


def submission_label(kind_name: str, position: int, submission: Submission) -> str:
    return (
        f"{kind_name} {position}: {submission.text} "
        f"(by {display_name(submission)}, {format_time(submission.timestamp)})"
    )
