from __future__ import annotations

import re
from enum import Enum
from typing import List, NamedTuple, Optional


HEADING_RE = re.compile(r"#{1,6} .+")
CHECKBOX_RE = re.compile(r"- \[[ xX]\] .+")
LINE_RE = re.compile(r"[^\n]*\n|[^\n]+")


class TodoExtraction(NamedTuple):
    chat_message: str
    todo_markdown: Optional[str]


class _State(Enum):
    SEEKING_HEADING = "seeking_heading"
    IN_LIST = "in_list"
    DONE_SECTION = "done_section"


def _bare(line: str) -> str:
    return line.rstrip("\r\n")


def _is_heading(line: str) -> bool:
    return HEADING_RE.fullmatch(_bare(line)) is not None


def _is_checkbox(line: str) -> bool:
    return CHECKBOX_RE.fullmatch(_bare(line)) is not None


def _is_empty(line: str) -> bool:
    return _bare(line) == ""


def find_task_sections(text: str) -> List[str]:
    """Return the raw text of every heading + checkbox-list section, in order.

    A heading needs at least one checkbox line under it, optionally after a
    single empty line. A section runs until the first line that is not a
    checkbox item and keeps the newline of its last line.
    """
    lines = LINE_RE.findall(text)
    sections: List[str] = []
    state = _State.SEEKING_HEADING
    start = 0
    idx = 0

    while idx < len(lines):
        if state is _State.SEEKING_HEADING:
            # a heading line must end with a newline for a list to follow it
            if _is_heading(lines[idx]) and lines[idx] != _bare(lines[idx]):
                first_item = idx + 1
                if first_item < len(lines) and _is_empty(lines[first_item]):
                    first_item += 1
                if first_item < len(lines) and _is_checkbox(lines[first_item]):
                    start = idx
                    idx = first_item
                    state = _State.IN_LIST
                    continue
            idx += 1
        elif state is _State.IN_LIST:
            if _is_checkbox(lines[idx]):
                idx += 1
            else:
                state = _State.DONE_SECTION
        else:
            sections.append("".join(lines[start:idx]))
            state = _State.SEEKING_HEADING

    if state is not _State.SEEKING_HEADING:
        sections.append("".join(lines[start:idx]))
    return sections


def extract_todo_markdown(text: str) -> TodoExtraction:
    """Split a model reply into conversational prose and task markdown."""
    sections = find_task_sections(text)
    if not sections:
        return TodoExtraction(text.strip(), None)

    chat_message = text
    for section in sections:
        chat_message = chat_message.replace(section, "", 1)

    todo_markdown = "\n\n".join(section.rstrip("\r\n") for section in sections)
    return TodoExtraction(chat_message.strip(), todo_markdown)
