"""Unit tests for QuestionDetector."""

import pytest

from taskstream.models.progress import ASK_QUESTION_TOOL
from taskstream.models.settings import Confidence
from taskstream.services.event_transform import ToolCallInfo
from taskstream.services.question_detector import DetectionMethod, QuestionDetector


@pytest.fixture
def detector():
    return QuestionDetector()


def ask_call(args: dict) -> ToolCallInfo:
    return ToolCallInfo(call_id="c1", name=ASK_QUESTION_TOOL, args=args)


class TestDetectExplicit:
    """Tests for explicit ask_question detection."""

    def test_ask_question_call(self, detector):
        result = detector.detect_explicit(
            [ask_call({"question": "Which color?", "context": "Styling"})]
        )

        assert result.is_question
        assert result.confidence == Confidence.HIGH
        assert result.method == DetectionMethod.EXPLICIT_TOOL
        assert result.question == "Which color?"
        assert result.context == "Styling"

    def test_ignores_other_tools(self, detector):
        call = ToolCallInfo(call_id="c1", name="read_file", args={"question": "x"})

        assert not detector.detect_explicit([call]).is_question

    def test_ignores_missing_question(self, detector):
        assert not detector.detect_explicit([ask_call({})]).is_question
        assert not detector.detect_explicit([ask_call({"question": " "})]).is_question


class TestDetectImplicit:
    """Tests for text heuristics."""

    def test_trailing_question_mark(self, detector):
        result = detector.detect_implicit(
            "I found two files. Which one should I edit?", False
        )

        assert result.is_question
        assert result.confidence == Confidence.MEDIUM
        assert result.method == DetectionMethod.QUESTION_MARK
        assert result.question == "Which one should I edit?"
        assert result.context == "I found two files"

    def test_single_sentence_question_has_no_context(self, detector):
        result = detector.detect_implicit("Shall I continue?", False)

        assert result.question == "Shall I continue?"
        assert result.context is None

    @pytest.mark.parametrize(
        "text",
        [
            "Please confirm the target directory.",
            "I need your input on the schema.",
            "Waiting for your decision before deleting files.",
        ],
    )
    def test_input_request_phrases(self, detector, text):
        result = detector.detect_implicit(text, False)

        assert result.is_question
        assert result.confidence == Confidence.LOW
        assert result.method == DetectionMethod.PHRASE_MATCH
        assert result.question == text

    def test_plain_statement(self, detector):
        result = detector.detect_implicit("All done. The file was written.", False)

        assert not result.is_question
        assert result.method == DetectionMethod.NONE

    def test_empty_text(self, detector):
        assert not detector.detect_implicit("  ", False).is_question

    def test_pending_tool_calls_suppress_heuristics(self, detector):
        assert not detector.detect_implicit("Shall I continue?", True).is_question


class TestDetect:
    def test_explicit_takes_precedence(self, detector):
        result = detector.detect(
            [ask_call({"question": "Tabs or spaces?"})], "Shall I continue?"
        )

        assert result.method == DetectionMethod.EXPLICIT_TOOL
        assert result.question == "Tabs or spaces?"

    def test_falls_back_to_text(self, detector):
        result = detector.detect([], "Shall I continue?")

        assert result.method == DetectionMethod.QUESTION_MARK
