"""Grounded prompt construction and answer parsing."""

import re
from collections.abc import Sequence

from pydantic import BaseModel

from backend.docqa.models.chat import Message, Role
from backend.docqa.models.context import (
    ContextRepresentation,
    FilePart,
    InlineContext,
    ProviderPayload,
    RemoteContext,
    TextPart,
)

NOT_FOUND_SENTENCE = "I cannot find this information in the provided document."

GROUNDING_INSTRUCTION = f"""You are a strict document assistant. Answer the user's question ONLY using the provided document.
- Do not use outside knowledge or general information.
- If the answer is not found in the document, reply exactly: "{NOT_FOUND_SENTENCE}"
- Do not guess or speculate.

Reply in exactly this format:
Answer: <a short, direct answer>
Excerpt: "<the sentence(s) from the document that support the answer, quoted verbatim>"

If the answer is not in the document, reply with the Answer line only."""

# Bound on replayed history turns; the document itself is never truncated
MAX_HISTORY_MESSAGES = 20

_ANSWER_RE = re.compile(r"^\s*Answer:\s*(.*?)\s*(?=^\s*Excerpt:|\Z)", re.DOTALL | re.MULTILINE)
_EXCERPT_RE = re.compile(r"^\s*Excerpt:\s*(.*?)\s*\Z", re.DOTALL | re.MULTILINE)


class GroundedAnswer(BaseModel):
    """Provider reply split into its structured parts."""

    answer: str
    excerpt: str | None = None
    found: bool = True


def _format_history(history: Sequence[Message]) -> str:
    lines = ["Previous conversation about this document:"]
    for message in history[-MAX_HISTORY_MESSAGES:]:
        speaker = "User" if message.role == Role.user else "Assistant"
        lines.append(f"{speaker}: {message.content}")
    return "\n".join(lines)


def _question_block(question: str, history: Sequence[Message]) -> str:
    sections = [GROUNDING_INSTRUCTION]
    if history:
        sections.append(_format_history(history))
    sections.append(f"Question: {question.strip()}")
    return "\n\n".join(sections)


def build_prompt(
    context: ContextRepresentation,
    question: str,
    history: Sequence[Message] = (),
) -> ProviderPayload:
    """Assemble the provider payload for one question.

    Args:
        context: Remote handle or inline document text
        question: User's question
        history: Earlier messages for this document, oldest first

    Returns:
        ProviderPayload with the document first and instruction + question last
    """
    instruction = TextPart(text=_question_block(question, history))

    if isinstance(context, RemoteContext):
        return ProviderPayload(
            parts=[FilePart(handle=context.handle, mime_type=context.mime_type), instruction]
        )
    if isinstance(context, InlineContext):
        document = TextPart(text=f"Document content:\n\"\"\"\n{context.text}\n\"\"\"")
        return ProviderPayload(parts=[document, instruction])

    raise TypeError(f"Unknown context representation: {type(context).__name__}")


def parse_grounded_answer(text: str) -> GroundedAnswer:
    """Split a provider reply into answer and supporting excerpt.

    Replies that do not follow the structure are returned whole as the answer.
    """
    stripped = text.strip()
    found = NOT_FOUND_SENTENCE not in stripped

    answer_match = _ANSWER_RE.search(stripped)
    if not answer_match:
        return GroundedAnswer(answer=stripped, excerpt=None, found=found)

    excerpt_match = _EXCERPT_RE.search(stripped)
    excerpt = excerpt_match.group(1).strip().strip('"').strip() if excerpt_match else None

    return GroundedAnswer(
        answer=answer_match.group(1).strip(),
        excerpt=excerpt or None,
        found=found,
    )
