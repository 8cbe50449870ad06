from ._main import build_arg_parser
from .concepts import CONCEPT_VOCABULARY, tag_concepts
from .extractor import (
    McqQuestion,
    Question,
    TheoryQuestion,
    extract,
    normalize_kind,
)
from .gateway import (
    GenerationFailure,
    Generator,
    OpenAIGenerator,
    evaluate_answer,
    generate_questions,
)
from .prompts import build_question_prompt
from .report import Report, build_report, render_report
from .session import InterviewResult, run_interview_session
from .tracker import AnswerEvent, ConceptStats, MasteryTracker, TopicStats

__all__ = [
    "build_arg_parser",
    "CONCEPT_VOCABULARY",
    "tag_concepts",
    "McqQuestion",
    "Question",
    "TheoryQuestion",
    "extract",
    "normalize_kind",
    "GenerationFailure",
    "Generator",
    "OpenAIGenerator",
    "evaluate_answer",
    "generate_questions",
    "build_question_prompt",
    "Report",
    "build_report",
    "render_report",
    "InterviewResult",
    "run_interview_session",
    "AnswerEvent",
    "ConceptStats",
    "MasteryTracker",
    "TopicStats",
]
