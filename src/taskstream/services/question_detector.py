"""Heuristics for deciding whether the worker is waiting on its caller."""

import re
from dataclasses import dataclass
from enum import Enum

from taskstream.models.progress import ASK_QUESTION_TOOL
from taskstream.models.settings import Confidence
from taskstream.services.event_transform import ToolCallInfo


class DetectionMethod(str, Enum):
    EXPLICIT_TOOL = "explicit_tool"
    QUESTION_MARK = "question_mark"
    PHRASE_MATCH = "phrase_match"
    NONE = "none"


@dataclass(frozen=True)
class QuestionDetection:
    is_question: bool
    confidence: Confidence
    method: DetectionMethod
    question: str | None = None
    context: str | None = None


NO_QUESTION = QuestionDetection(
    is_question=False, confidence=Confidence.HIGH, method=DetectionMethod.NONE
)

# Requests for input that do not end in a question mark.
INPUT_REQUEST_PATTERNS = [
    re.compile(r"please (?:let me know|tell me|confirm|clarify)", re.IGNORECASE),
    re.compile(
        r"(?:need|require) (?:your|user) "
        r"(?:input|decision|clarification|confirmation)",
        re.IGNORECASE,
    ),
    re.compile(
        r"waiting for (?:your|user) (?:response|answer|decision|input)",
        re.IGNORECASE,
    ),
]

_SENTENCE_SPLIT = re.compile(r"[.!?]+")


class QuestionDetector:
    """Explicit ask_question calls win; text heuristics are the fallback."""

    def detect_explicit(self, pending_calls: list[ToolCallInfo]) -> QuestionDetection:
        for call in pending_calls:
            if call.name != ASK_QUESTION_TOOL:
                continue
            question = call.args.get("question")
            if not isinstance(question, str) or not question.strip():
                continue
            context = call.args.get("context")
            return QuestionDetection(
                is_question=True,
                confidence=Confidence.HIGH,
                method=DetectionMethod.EXPLICIT_TOOL,
                question=question,
                context=context if isinstance(context, str) else None,
            )
        return NO_QUESTION

    def detect_implicit(
        self, content: str, has_pending_tool_calls: bool
    ) -> QuestionDetection:
        if has_pending_tool_calls:
            return NO_QUESTION

        text = content.strip()
        if not text:
            return NO_QUESTION

        if text.endswith("?"):
            sentences = [s.strip() for s in _SENTENCE_SPLIT.split(text) if s.strip()]
            context = ". ".join(sentences[:-1]) if len(sentences) > 1 else None
            return QuestionDetection(
                is_question=True,
                confidence=Confidence.MEDIUM,
                method=DetectionMethod.QUESTION_MARK,
                question=f"{sentences[-1]}?" if sentences else text,
                context=context,
            )

        for pattern in INPUT_REQUEST_PATTERNS:
            if pattern.search(text):
                return QuestionDetection(
                    is_question=True,
                    confidence=Confidence.LOW,
                    method=DetectionMethod.PHRASE_MATCH,
                    question=text,
                )

        return NO_QUESTION

    def detect(
        self, pending_calls: list[ToolCallInfo], content: str
    ) -> QuestionDetection:
        """Run both strategies in precedence order."""
        explicit = self.detect_explicit(pending_calls)
        if explicit.is_question:
            return explicit
        return self.detect_implicit(content, bool(pending_calls))
