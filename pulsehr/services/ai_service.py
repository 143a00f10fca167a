import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from openai import OpenAI

from pulsehr.utils.text_utils import normalize_text, truncate

logger = logging.getLogger(__name__)


# ============================================================
# Fallback payloads (returned when the AI call is off or fails)
# ============================================================

FALLBACK_POLICIES: List[Dict[str, str]] = [
    {
        "title": "Code of Conduct",
        "content": "Employees are expected to act with integrity, treat colleagues with respect "
                   "and avoid conflicts of interest.",
    },
    {
        "title": "Attendance and Leave",
        "content": "Working hours, leave entitlements and the approval process for planned and "
                   "unplanned absences are defined by HR.",
    },
    {
        "title": "Workplace Harassment",
        "content": "Harassment of any kind is not tolerated. Complaints can be raised with the "
                   "internal committee and are handled confidentially.",
    },
    {
        "title": "Information Security",
        "content": "Company data and credentials must be protected; devices must be locked when "
                   "unattended and incidents reported immediately.",
    },
]

FALLBACK_QUESTIONS: List[Dict[str, Any]] = [
    {
        "question_text": "Who should you contact first about a leave request?",
        "options": ["Your reporting manager", "The IT helpdesk", "A client", "Nobody"],
        "correct_answer": "Your reporting manager",
        "explanation": "Leave is approved by the reporting manager before HR records it.",
    },
    {
        "question_text": "What should you do when you witness workplace harassment?",
        "options": [
            "Ignore it",
            "Report it to the internal committee or HR",
            "Post about it on social media",
            "Wait for the annual review",
        ],
        "correct_answer": "Report it to the internal committee or HR",
        "explanation": "Complaints are handled confidentially by the internal committee.",
    },
    {
        "question_text": "How should company laptops be handled when left unattended?",
        "options": ["Left unlocked", "Locked", "Shared with visitors", "Turned off only on Fridays"],
        "correct_answer": "Locked",
        "explanation": "Information security policy requires locking devices.",
    },
    {
        "question_text": "Which of these is a conflict of interest?",
        "options": [
            "Attending a team lunch",
            "Approving a contract with a relative's company",
            "Taking a training course",
            "Working from the office",
        ],
        "correct_answer": "Approving a contract with a relative's company",
        "explanation": "Personal gain from company decisions must be declared and avoided.",
    },
    {
        "question_text": "Where are official working hours defined?",
        "options": ["In the HR attendance policy", "In a chat group", "Nowhere", "By each client"],
        "correct_answer": "In the HR attendance policy",
        "explanation": "The attendance policy is the reference for office timings.",
    },
]


@dataclass
class AIResult:
    items: List[Dict[str, Any]] = field(default_factory=list)
    source: str = "fallback"  # ai | fallback


class AIService:
    """
    Policy extraction and quiz generation.
    - If OPENAI_API_KEY is set and the client loads: calls OpenAI (JSON mode).
    - Otherwise, or on any error / malformed answer: static fallback payload.
    """

    def __init__(self, api_key: Optional[str] = None, model: str = "gpt-4o-mini", max_source_chars: int = 12000):
        self.model = model
        self.max_source_chars = max_source_chars
        self._client = None
        if api_key:
            try:
                self._client = OpenAI(api_key=api_key)
            except Exception as e:
                logger.warning("OpenAI client unavailable (%s). Using fallback.", e)

    @property
    def enabled(self) -> bool:
        return self._client is not None

    # ---------- public API ----------

    def extract_policies(self, source_text: str, category: Optional[str] = None) -> AIResult:
        text = truncate(normalize_text(source_text), self.max_source_chars)
        if text:
            system = (
                "You are an HR assistant. Split the HR manual into its individual policies. "
                "Answer in JSON: {\"policies\": [{\"title\": str, \"content\": str}]}. "
                "Keep each content to a short faithful summary."
            )
            user = f"Manual{' (' + category + ')' if category else ''}:\n{text}"
            payload = self._complete_json(system, user)
            policies = parse_policies(payload)
            if policies:
                return AIResult(items=policies, source="ai")

        return AIResult(items=[dict(p) for p in FALLBACK_POLICIES], source="fallback")

    def generate_quiz(self, source_text: str, count: int, topic: Optional[str] = None) -> AIResult:
        text = truncate(normalize_text(source_text), self.max_source_chars)
        if text:
            system = (
                "You write unambiguous multiple choice questions checking that an employee "
                "understood an HR policy. Each question has exactly 4 options and ONE correct "
                "answer copied verbatim from the options. Answer in JSON: "
                "{\"questions\": [{\"question_text\": str, \"options\": [str, str, str, str], "
                "\"correct_answer\": str, \"explanation\": str}]}."
            )
            user = (
                f"Policy source{' on ' + topic if topic else ''}:\n{text}\n\n"
                f"Write {count} questions."
            )
            payload = self._complete_json(system, user)
            questions = parse_questions(payload, count)
            if questions:
                return AIResult(items=questions, source="ai")

        items = (FALLBACK_QUESTIONS * ((count // len(FALLBACK_QUESTIONS)) + 1))[:count]
        return AIResult(items=[dict(q, options=list(q["options"])) for q in items], source="fallback")

    # ---------- internals ----------

    def _complete_json(self, system: str, user: str) -> Optional[Dict[str, Any]]:
        if self._client is None:
            return None
        try:
            comp = self._client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": system},
                    {"role": "user", "content": user},
                ],
                response_format={"type": "json_object"},
                temperature=0.2,
            )
            content = comp.choices[0].message.content or ""
            return json.loads(content)
        except Exception as e:
            logger.warning("OpenAI error: %s. Using fallback.", e)
            return None


def parse_policies(payload: Any) -> List[Dict[str, str]]:
    """
    Keep only well formed {title, content} entries.
    """
    if not isinstance(payload, dict) or not isinstance(payload.get("policies"), list):
        return []

    out: List[Dict[str, str]] = []
    for it in payload["policies"]:
        if not isinstance(it, dict):
            continue
        title = normalize_text(str(it.get("title") or ""))
        content = normalize_text(str(it.get("content") or ""))
        if title and content:
            out.append({"title": title, "content": content})
    return out


def parse_questions(payload: Any, count: int) -> List[Dict[str, Any]]:
    """
    Keep only questions with 4 distinct options and an answer among them.
    """
    if not isinstance(payload, dict) or not isinstance(payload.get("questions"), list):
        return []

    out: List[Dict[str, Any]] = []
    for it in payload["questions"]:
        if not isinstance(it, dict):
            continue
        stem = normalize_text(str(it.get("question_text") or ""))
        options = it.get("options")
        answer = normalize_text(str(it.get("correct_answer") or ""))
        if not stem or not isinstance(options, list) or len(options) != 4:
            continue
        options = [normalize_text(str(o)) for o in options]
        if len(set(options)) != 4 or answer not in options:
            continue
        out.append(
            {
                "question_text": stem,
                "options": options,
                "correct_answer": answer,
                "explanation": normalize_text(str(it.get("explanation") or "")),
            }
        )
        if len(out) >= count:
            break
    return out
