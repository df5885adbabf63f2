"""
Reply copy for Prompt Desk Bot.
"""

from typing import Any


class Texts:
    """User-facing strings, keyed by purpose."""

    TEMPLATES = {
        # Greetings / navigation
        "operator_welcome": "Welcome back, operator.",
        "participant_welcome": "Welcome to the daily question-and-answer bot.",
        "invalid_option": "Please pick one of the options shown.",

        # Operator
        "send_new_prompt": "Send the new question here.",
        "prompt_saved": "The new question has been saved.",
        "prompt_stopped": "The current question \"{text}\" has been closed.",
        "nothing_to_stop": "There is no current question to stop.",
        "send_info": "Send the new information here.",
        "info_saved": "The new information has been saved.",
        "no_comments": "There are no comments yet.",
        "comments_end": "Those are all the comments so far.",
        "no_questions": "No questions have been asked yet.",
        "questions_end": "Those are the questions sent by participants.",
        "nothing_to_delete": "There are no questions or answers to delete.",
        "choose_delete": "Choose what to delete:",
        "deleted": "The selected item has been deleted.",
        "already_deleted": "That item no longer exists.",

        # Shared answer browsing
        "no_prompts": "There are no questions yet.",
        "choose_prompt": "Choose the question whose answers you want to see:",
        "no_answers": "There are no answers for \"{text}\".",
        "answers_end": "Those are the answers for \"{text}\".",

        # Participant
        "no_prompt_yet": "Today's question has not been posted yet. Please check back later.",
        "current_prompt": "Current question:\n{text}",
        "send_answer": "Send your answer here.",
        "answer_saved": "Your answer has been saved. Thank you.",
        "no_current_prompt": "There is no current question right now.",
        "send_comment": "Send your comment here.",
        "comment_saved": "Your comment has been saved. Thank you.",
        "send_question": "Send your question here.",
        "question_saved": "Your question has been saved. Thank you.",
        "no_info": "There is no information yet.",
        "info_end": "That is the latest information from the organizers.",
        "no_past_prompts": "There are no past questions yet.",
        "past_prompts_end": "Those are the past questions.",

        # Record details
        "answer_detail": "Answer: {text}\nUser: {user}\nTime: {time}",
        "comment_detail": "Comment: {text}\nUser: {user}\nTime: {time}",
        "question_detail": "Question: {text}\nUser: {user}\nTime: {time}",
        "past_prompt_detail": "Question: {text}\nTime: {start} - {end}",
    }

    @classmethod
    def get(cls, key: str, **kwargs: Any) -> str:
        template = cls.TEMPLATES.get(key)
        if template is None:
            raise KeyError(f"Unknown text key: {key}")
        return template.format(**kwargs) if kwargs else template
