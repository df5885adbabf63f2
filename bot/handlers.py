"""
Role-specific mode handlers.

A handler receives the conversation's current session and the inbound
message, and returns the next session together with the turn to send.
It never stores the session itself; the router does that once the turn
has completed, so a failing turn leaves the previous session in place.
"""

import logging
from typing import Awaitable, Callable, Dict, Tuple

from .menus import (
    Command,
    Menu,
    archived_prompt_label,
    back_keyboard,
    current_prompt_label,
    display_name,
    format_time,
    selection_keyboard,
    submission_label,
)
from .models import IncomingMessage, SubmissionKind, Turn
from .prompts import PromptLifecycle
from .selection import (
    ANSWER_DELETE,
    ANSWERS_VIEW,
    ARCHIVE_DELETE,
    CURRENT_DELETE,
    NOT_FOUND,
    QUESTION_DELETE,
    SelectionBuilder,
    parse_option_key,
    resolve,
)
from .sessions import Mode, Session
from .submissions import SubmissionService
from .texts import Texts

logger = logging.getLogger(__name__)

Outcome = Tuple[Session, Turn]


class RoleHandler:
    """Behaviour shared by operator and participant conversations."""

    welcome_key = ""

    def __init__(
        self,
        prompts: PromptLifecycle,
        submissions: SubmissionService,
        menu: Menu,
        label_max_chars: int = 100,
    ):
        self.prompts = prompts
        self.submissions = submissions
        self.menu = menu
        self.label_max_chars = label_max_chars

    async def handle(self, session: Session, message: IncomingMessage) -> Outcome:
        command = self.menu.command_for(message.text)
        if command is not None:
            logger.info(f"{message.conversation_id}: command {command.value}")
            # Commands always start from a fresh session
            return await self.run_command(command, session.home(), message)
        return await self.handle_input(session, message)

    async def run_command(self, command: Command, session: Session, message: IncomingMessage) -> Outcome:
        raise NotImplementedError

    async def handle_input(self, session: Session, message: IncomingMessage) -> Outcome:
        raise NotImplementedError

    def home(self, session: Session, text: str = None) -> Outcome:
        """Return to the home menu, dropping mode and selection."""
        turn = Turn().reply(
            session.conversation_id,
            text or Texts.get(self.welcome_key),
            self.menu.keyboard(),
        )
        return session.home(), turn

    def invalid_option(self, session: Session) -> Outcome:
        """Unmatched selection: session is returned untouched so the user can retry."""
        labels = [entry.label for entry in session.selection or ()]
        turn = Turn().reply(
            session.conversation_id,
            Texts.get("invalid_option"),
            selection_keyboard(labels),
        )
        return session, turn

    # ── Answer browsing (both roles) ──────────────────

    async def browse_answers(self, session: Session) -> Outcome:
        builder = SelectionBuilder(self.label_max_chars)
        current = await self.prompts.get_current()
        if current:
            builder.add(current_prompt_label(current), ANSWERS_VIEW, current.id)
        for position, prompt in enumerate(await self.prompts.list_archived(), start=1):
            builder.add(archived_prompt_label(position, prompt), ANSWERS_VIEW, prompt.id)

        if not len(builder):
            turn = Turn().reply(session.conversation_id, Texts.get("no_prompts"), back_keyboard())
            return session.home(), turn

        turn = Turn().reply(
            session.conversation_id,
            Texts.get("choose_prompt"),
            selection_keyboard(builder.labels),
        )
        return session.enter(Mode.SELECT_ANSWERS_PROMPT, builder.entries), turn

    async def show_answers(self, session: Session, message: IncomingMessage) -> Outcome:
        stable_id = resolve(session, message.text)
        if stable_id is NOT_FOUND:
            return self.invalid_option(session)

        _, prompt_id = parse_option_key(stable_id)
        prompt = await self.prompts.get(prompt_id)
        prompt_text = prompt.text if prompt else prompt_id
        answers = await self.submissions.answers_for(prompt_id)
        logger.info(f"Found {len(answers)} answers for prompt {prompt_id}")

        conv = session.conversation_id
        turn = Turn()
        if not answers:
            turn.reply(conv, Texts.get("no_answers", text=prompt_text), back_keyboard())
            return session.home(), turn

        for answer in answers:
            turn.forward(conv, answer.conversation_id, answer.source_message_id)
            turn.reply(conv, Texts.get(
                "answer_detail",
                text=answer.text,
                user=display_name(answer),
                time=format_time(answer.timestamp),
            ))
        turn.reply(conv, Texts.get("answers_end", text=prompt_text), back_keyboard())
        return session.home(), turn

    def prompt_for_input(self, session: Session, mode: Mode, text_key: str) -> Outcome:
        turn = Turn().reply(session.conversation_id, Texts.get(text_key), back_keyboard())
        return session.enter(mode), turn


class OperatorHandler(RoleHandler):
    """Prompt management, submission review and deletion."""

    welcome_key = "operator_welcome"

    async def run_command(self, command: Command, session: Session, message: IncomingMessage) -> Outcome:
        if command is Command.NEW_PROMPT:
            return self.prompt_for_input(session, Mode.NEW_PROMPT, "send_new_prompt")
        if command is Command.ADD_INFO:
            return self.prompt_for_input(session, Mode.ADD_INFO, "send_info")
        if command is Command.STOP_PROMPT:
            return await self.stop_prompt(session)
        if command is Command.VIEW_ANSWERS:
            return await self.browse_answers(session)
        if command is Command.VIEW_COMMENTS:
            return await self.list_submissions(
                session, SubmissionKind.COMMENT, "comment_detail", "no_comments", "comments_end"
            )
        if command is Command.VIEW_QUESTIONS:
            return await self.list_submissions(
                session, SubmissionKind.FREE_QUESTION, "question_detail", "no_questions", "questions_end"
            )
        if command is Command.DELETE:
            return await self.browse_deletable(session)
        return self.home(session)

    async def handle_input(self, session: Session, message: IncomingMessage) -> Outcome:
        if session.mode is Mode.NEW_PROMPT:
            await self.prompts.submit_new(message.text)
            return self.home(session, Texts.get("prompt_saved"))
        if session.mode is Mode.ADD_INFO:
            await self.submissions.add_info(message.text)
            return self.home(session, Texts.get("info_saved"))
        if session.mode is Mode.SELECT_ANSWERS_PROMPT:
            return await self.show_answers(session, message)
        if session.mode is Mode.DELETE:
            return await self.delete_selected(session, message)
        return self.home(session)

    async def stop_prompt(self, session: Session) -> Outcome:
        archived = await self.prompts.stop()
        if archived is None:
            return self.home(session, Texts.get("nothing_to_stop"))
        return self.home(session, Texts.get("prompt_stopped", text=archived.text))

    async def list_submissions(
        self,
        session: Session,
        kind: SubmissionKind,
        detail_key: str,
        empty_key: str,
        end_key: str,
    ) -> Outcome:
        conv = session.conversation_id
        items = await self.submissions.list(kind)
        turn = Turn()
        if not items:
            turn.reply(conv, Texts.get(empty_key), back_keyboard())
            return session, turn
        for item in items:
            turn.forward(conv, item.conversation_id, item.source_message_id)
            turn.reply(conv, Texts.get(
                detail_key,
                text=item.text,
                user=display_name(item),
                time=format_time(item.timestamp),
            ))
        turn.reply(conv, Texts.get(end_key), back_keyboard())
        return session, turn

    async def browse_deletable(self, session: Session) -> Outcome:
        builder = SelectionBuilder(self.label_max_chars)
        for position, answer in enumerate(await self.submissions.list(SubmissionKind.ANSWER), start=1):
            builder.add(submission_label("Answer", position, answer), ANSWER_DELETE, answer.id)
        questions = await self.submissions.list(SubmissionKind.FREE_QUESTION)
        for position, question in enumerate(questions, start=1):
            builder.add(submission_label("Question", position, question), QUESTION_DELETE, question.id)
        current = await self.prompts.get_current()
        if current:
            builder.add(current_prompt_label(current), CURRENT_DELETE, current.id)
        for position, prompt in enumerate(await self.prompts.list_archived(), start=1):
            builder.add(archived_prompt_label(position, prompt), ARCHIVE_DELETE, prompt.id)

        if not len(builder):
            turn = Turn().reply(session.conversation_id, Texts.get("nothing_to_delete"), back_keyboard())
            return session, turn

        turn = Turn().reply(
            session.conversation_id,
            Texts.get("choose_delete"),
            selection_keyboard(builder.labels),
        )
        return session.enter(Mode.DELETE, builder.entries), turn

    async def delete_selected(self, session: Session, message: IncomingMessage) -> Outcome:
        stable_id = resolve(session, message.text)
        if stable_id is NOT_FOUND:
            return self.invalid_option(session)

        tag, record_id = parse_option_key(stable_id)
        deleters: Dict[str, Callable[[str], Awaitable[bool]]] = {
            ANSWER_DELETE: lambda rid: self.submissions.delete(SubmissionKind.ANSWER, rid),
            QUESTION_DELETE: lambda rid: self.submissions.delete(SubmissionKind.FREE_QUESTION, rid),
            CURRENT_DELETE: self.prompts.delete_current,
            ARCHIVE_DELETE: self.prompts.delete_archived,
        }
        deleter = deleters.get(tag)
        if deleter is None:
            logger.warning(f"Unknown delete option {stable_id}")
            return self.invalid_option(session)

        if await deleter(record_id):
            return self.home(session, Texts.get("deleted"))
        return self.home(session, Texts.get("already_deleted"))


class ParticipantHandler(RoleHandler):
    """Answer, comment and question collection plus read-only views."""

    welcome_key = "participant_welcome"

    _collecting: Dict[Mode, Tuple[SubmissionKind, str]] = {
        Mode.COMMENT: (SubmissionKind.COMMENT, "comment_saved"),
        Mode.ASK: (SubmissionKind.FREE_QUESTION, "question_saved"),
    }

    async def run_command(self, command: Command, session: Session, message: IncomingMessage) -> Outcome:
        if command in (Command.ANSWER, Command.CURRENT_PROMPT):
            return await self.start_answer(session)
        if command is Command.COMMENT:
            return self.prompt_for_input(session, Mode.COMMENT, "send_comment")
        if command is Command.ASK:
            return self.prompt_for_input(session, Mode.ASK, "send_question")
        if command is Command.INFO:
            return await self.show_info(session)
        if command is Command.PAST_PROMPTS:
            return await self.show_past_prompts(session)
        if command is Command.VIEW_ANSWERS:
            return await self.browse_answers(session)
        return self.home(session)

    async def handle_input(self, session: Session, message: IncomingMessage) -> Outcome:
        if session.mode is Mode.ANSWER:
            return await self.record_answer(session, message)
        if session.mode in self._collecting:
            kind, saved_key = self._collecting[session.mode]
            await self.submissions.record(kind, message)
            return self.home(session, Texts.get(saved_key))
        if session.mode is Mode.SELECT_ANSWERS_PROMPT:
            return await self.show_answers(session, message)
        # Idle freeform text is not stored
        return self.home(session)

    async def start_answer(self, session: Session) -> Outcome:
        current = await self.prompts.get_current()
        if current is None:
            return self.home(session, Texts.get("no_prompt_yet"))
        conv = session.conversation_id
        turn = Turn()
        turn.reply(conv, Texts.get("current_prompt", text=current.text), back_keyboard())
        turn.reply(conv, Texts.get("send_answer"), back_keyboard())
        return session.enter(Mode.ANSWER), turn

    async def record_answer(self, session: Session, message: IncomingMessage) -> Outcome:
        current = await self.prompts.get_current()
        if current is None:
            turn = Turn().reply(session.conversation_id, Texts.get("no_current_prompt"), back_keyboard())
            return session, turn
        await self.submissions.record(SubmissionKind.ANSWER, message, prompt_id=current.id)
        return self.home(session, Texts.get("answer_saved"))

    async def show_info(self, session: Session) -> Outcome:
        conv = session.conversation_id
        notes = await self.submissions.list_info()
        turn = Turn()
        if not notes:
            turn.reply(conv, Texts.get("no_info"), back_keyboard())
            return session, turn
        for note in notes:
            turn.reply(conv, note.text)
        turn.reply(conv, Texts.get("info_end"), back_keyboard())
        return session, turn

    async def show_past_prompts(self, session: Session) -> Outcome:
        conv = session.conversation_id
        archived = await self.prompts.list_archived()
        turn = Turn()
        if not archived:
            turn.reply(conv, Texts.get("no_past_prompts"), back_keyboard())
            return session, turn
        for prompt in archived:
            turn.reply(conv, Texts.get(
                "past_prompt_detail",
                text=prompt.text,
                start=format_time(prompt.start_time),
                end=format_time(prompt.end_time),
            ))
        turn.reply(conv, Texts.get("past_prompts_end"), back_keyboard())
        return session, turn
