"""
LLM Prompt Templates
System prompt and database context formatting for the chat assistant
"""

import re
from typing import Iterable

from app.vectorstore.schemas import SchoolRecord


# Base system prompt for every chat turn
SYSTEM_PROMPT_BASE = """
You are an expert AI assistant.
- Communicate in clear, structured English.
- Use step-by-step reasoning when helpful.
- Format answers with bullet points, code blocks, or examples.
- Be concise but informative.
- If user asks about schools, use the database context.
- Always reply concisely in 10-20 words maximum.
- If unsure, admit it honestly.
""".strip()


# Appended when the latest user message is about schools
DATABASE_CONTEXT_TEMPLATE = """

Database context:
{school_lines}"""


SCHOOL_QUERY_PATTERN = re.compile(r"school|college|university|campus", re.IGNORECASE)


def is_school_query(text: str) -> bool:
    """True when the message mentions schools or similar institutions."""

    return bool(SCHOOL_QUERY_PATTERN.search(text or ""))


def format_school_line(school: SchoolRecord) -> str:
    return f"{school.name} in {school.city}, address: {school.address}"


def build_system_prompt(schools: Iterable[SchoolRecord] | None = None) -> str:
    """Base system prompt, optionally followed by one line per school."""

    prompt = SYSTEM_PROMPT_BASE
    lines = [format_school_line(school) for school in schools or ()]
    if lines:
        prompt += DATABASE_CONTEXT_TEMPLATE.format(school_lines="\n".join(lines))
    return prompt
