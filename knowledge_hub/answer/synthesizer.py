"""Answer synthesis from ranked documentation excerpts.

Answers are assembled only from the text of the selected documentation
excerpts. When nothing clears the score threshold the synthesizer returns
a fixed not-found answer with no sources and zero confidence.
"""

import logging
import re
import time
import uuid

from knowledge_hub.errors import DOCUMENTATION_HOME_URL
from knowledge_hub.question.models import Question, QuestionAnalysis, QuestionType
from knowledge_hub.search.models import SearchResultRanking
from knowledge_hub.search.ranker import url_key
from .models import Answer, AnswerOptions, AnswerSource, AnswerType

logger = logging.getLogger(__name__)

NOT_FOUND_MARKER = "No relevant documentation found"
TRUNCATION_NOTE = "\n\n*Answer truncated. See the sources below for the full documentation.*"

LOW_ANALYSIS_CONFIDENCE = 0.3
LOW_CONFIDENCE_FACTOR = 0.75
SINGLE_SOURCE_FACTOR = 0.8
MAX_STEPS = 8

_SENTENCE_SPLIT = re.compile(r"(?<=[.!?])\s+(?=[A-Z`])")
_FENCED_CODE = re.compile(r"```(?:[\w-]+\n)?(.*?)```", re.DOTALL)
_INLINE_CODE = re.compile(r"`([^`\n]+)`")
_LEADING_NUMBER = re.compile(r"^\s*(?:\d+[.)]|[-*])\s*")
_STEP_VERBS = (
    "open", "choose", "select", "enter", "create", "configure", "set", "run", "install",
    "check", "review", "increase", "sign", "deploy", "enable", "launch", "add", "update",
    "navigate", "click", "attach", "verify", "connect", "upload",
)
_STEP_MARKERS = re.compile(r"^(?:first|then|next|finally|step \d+)\b", re.IGNORECASE)

_ANSWER_TYPES = {
    QuestionType.HOWTO: AnswerType.HOWTO,
    QuestionType.TROUBLESHOOTING: AnswerType.TROUBLESHOOTING,
    QuestionType.COMPARISON: AnswerType.COMPARISON,
    QuestionType.TECHNICAL: AnswerType.REFERENCE,
}


# Heading, blocks and the separator between blocks
Section = tuple[str, list[str], str]


def render_sections(sections: list[Section]) -> str:
    return "\n\n".join(f"{heading}\n\n{separator.join(blocks)}" for heading, blocks, separator in sections)


def split_sentences(text: str) -> list[str]:
    return [sentence.strip() for sentence in _SENTENCE_SPLIT.split(text.strip()) if sentence.strip()]


def is_step_like(sentence: str) -> bool:
    """Whether a sentence reads like an instruction."""
    cleaned = _LEADING_NUMBER.sub("", sentence)
    first_word = cleaned.split(" ", 1)[0].lower().strip(",:")
    return first_word in _STEP_VERBS or _STEP_MARKERS.match(cleaned) is not None


def extract_code(text: str) -> list[str]:
    """Code spans in a documentation excerpt, in order of appearance."""
    spans = [match.strip() for match in _FENCED_CODE.findall(text)]
    without_fenced = _FENCED_CODE.sub(" ", text)
    spans.extend(match.strip() for match in _INLINE_CODE.findall(without_fenced))
    return [span for span in spans if span]


class AnswerSynthesizer:
    """Builds answers from ranked search results."""

    def __init__(self, default_options: AnswerOptions | None = None):
        self.default_options = default_options or AnswerOptions()

    def generate_answer(
        self,
        question: Question | str,
        ranked_results: list[SearchResultRanking],
        analysis: QuestionAnalysis,
        options: AnswerOptions | None = None,
    ) -> Answer:
        """Generate an answer.

        Args:
            question: The question being answered
            ranked_results: Ranked search results, best first
            analysis: Analysis of the question
            options: Generation options, defaults to the synthesizer's defaults

        Returns:
            Answer built from the selected excerpts
        """
        start_time = time.perf_counter()
        options = options or self.default_options
        question_id = question.id if isinstance(question, Question) else None

        selected = self._select(ranked_results, options)
        if not selected:
            answer = self._not_found(question_id, analysis, start_time)
            logger.info(f"No documentation above score {options.min_score}, returning not-found answer")
            return answer

        answer_type = _ANSWER_TYPES.get(analysis.question_type, AnswerType.CONCEPTUAL)
        sections: list[Section] = [("## Answer", [self._direct_answer(selected)], "")]

        steps: list[str] = []
        if options.include_steps and analysis.question_type in (QuestionType.HOWTO, QuestionType.TROUBLESHOOTING):
            steps = self._steps(selected)
            if steps:
                heading = "Steps" if analysis.question_type == QuestionType.HOWTO else "Details"
                numbered = [f"{index}. {step}" for index, step in enumerate(steps, start=1)]
                sections.append((f"## {heading}", numbered, "\n"))

        code_blocks: list[str] = []
        if options.include_code_examples:
            code_blocks = self._code_blocks(selected)
            if code_blocks:
                sections.append(("## Code Examples", [f"```\n{block}\n```" for block in code_blocks], "\n\n"))

        sources = [
            AnswerSource(url=ranking.result.url, title=ranking.result.title, score=ranking.final_score)
            for ranking in selected
        ]
        source_list = "\n".join(
            f"{index}. [{source.title}]({source.url})" for index, source in enumerate(sources, start=1)
        )
        source_section = f"## Sources\n\n{source_list}"

        body = render_sections(sections)
        truncated = False
        budget = options.max_length - len(source_section) - 2
        if len(body) > budget:
            body = self._truncate(sections, budget)
            truncated = True
        text = f"{body}\n\n{source_section}"

        confidence = self._confidence(selected, analysis)
        answer = Answer(
            answer_id=str(uuid.uuid4()),
            question_id=question_id,
            text=text,
            sources=sources,
            confidence=confidence,
            processing_time_ms=(time.perf_counter() - start_time) * 1000,
            answer_type=answer_type,
            has_code_examples=bool(code_blocks),
            has_steps=bool(steps),
            word_count=len(text.split()),
            truncated=truncated,
        )
        logger.info(
            f"Generated {answer_type.value} answer with {len(sources)} sources, confidence {confidence:.2f}"
        )
        return answer

    @staticmethod
    def _truncate(sections: list[Section], budget: int) -> str:
        """Keep whole blocks in order until the body no longer fits.

        Steps and code blocks are never split, so fences stay balanced. Only
        an answer paragraph that is too long on its own is cut, at a word
        boundary.
        """
        limit = budget - len(TRUNCATION_NOTE)
        kept: list[Section] = []
        for heading, blocks, separator in sections:
            fitting: list[str] = []
            for block in blocks:
                if len(render_sections([*kept, (heading, [*fitting, block], separator)])) > limit:
                    break
                fitting.append(block)
            if fitting:
                kept.append((heading, fitting, separator))
            if len(fitting) < len(blocks):
                break

        if not kept:
            heading, blocks, separator = sections[0]
            room = max(0, limit - len(heading) - 2)
            paragraph = blocks[0][:room]
            if " " in paragraph:
                paragraph = paragraph.rsplit(" ", 1)[0]
            kept = [(heading, [paragraph], separator)]

        return render_sections(kept).rstrip() + TRUNCATION_NOTE

    @staticmethod
    def _select(ranked_results: list[SearchResultRanking], options: AnswerOptions) -> list[SearchResultRanking]:
        selected: list[SearchResultRanking] = []
        seen: set[str] = set()
        ordered = sorted(ranked_results, key=lambda r: (-r.final_score, r.result.rank_order, url_key(r.result.url)))
        for ranking in ordered:
            if ranking.final_score < options.min_score:
                continue
            key = url_key(ranking.result.url)
            if key in seen:
                continue
            seen.add(key)
            selected.append(ranking)
            if len(selected) >= options.max_sources:
                break
        return selected

    @staticmethod
    def _direct_answer(selected: list[SearchResultRanking]) -> str:
        sentences: list[str] = []
        for ranking in selected[:2]:
            prose = _FENCED_CODE.sub(" ", ranking.result.context)
            for sentence in split_sentences(prose)[:2]:
                if sentence not in sentences:
                    sentences.append(sentence)
        if not sentences:
            return selected[0].result.title
        return " ".join(sentences)

    @staticmethod
    def _steps(selected: list[SearchResultRanking]) -> list[str]:
        steps: list[str] = []
        for ranking in selected:
            for sentence in split_sentences(_FENCED_CODE.sub(" ", ranking.result.context)):
                if is_step_like(sentence):
                    step = _LEADING_NUMBER.sub("", sentence)
                    if step not in steps:
                        steps.append(step)
                if len(steps) >= MAX_STEPS:
                    return steps
        return steps

    @staticmethod
    def _code_blocks(selected: list[SearchResultRanking]) -> list[str]:
        blocks: list[str] = []
        for ranking in selected:
            for span in extract_code(ranking.result.context):
                if span not in blocks:
                    blocks.append(span)
        return blocks

    @staticmethod
    def _confidence(selected: list[SearchResultRanking], analysis: QuestionAnalysis) -> float:
        confidence = sum(ranking.final_score for ranking in selected) / len(selected)
        if analysis.confidence < LOW_ANALYSIS_CONFIDENCE:
            confidence *= LOW_CONFIDENCE_FACTOR
        if len(selected) < 2:
            confidence *= SINGLE_SOURCE_FACTOR
        return round(max(0.0, min(1.0, confidence)), 4)

    @staticmethod
    def _not_found(question_id: str | None, analysis: QuestionAnalysis, start_time: float) -> Answer:
        suggestions = ["Try rephrasing the question with more specific terms."]
        if analysis.aws_services:
            for name in analysis.service_names[:3]:
                suggestions.append(f"Ask about a specific {name} feature or error message.")
        else:
            suggestions.append("Mention the AWS service you are asking about, for example S3, Lambda or EC2.")
        suggestions.append(f"Browse the AWS documentation directly at {DOCUMENTATION_HOME_URL}")

        hints = "\n".join(f"- {suggestion}" for suggestion in suggestions)
        text = f"{NOT_FOUND_MARKER} for this question.\n\n{hints}"
        return Answer(
            answer_id=str(uuid.uuid4()),
            question_id=question_id,
            text=text,
            sources=[],
            confidence=0.0,
            processing_time_ms=(time.perf_counter() - start_time) * 1000,
            answer_type=AnswerType.NOT_FOUND,
            suggestions=suggestions,
            word_count=len(text.split()),
        )
