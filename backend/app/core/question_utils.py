"""
Utility functions for working with Question models.
"""

import json
from typing import Any, Dict, List

from app.models.models import Question


def parse_options(raw: Any) -> List[Any]:
    """
    Normalize stored question options to a list.

    Options are persisted as text and may hold a JSON array, a JSON object
    keyed by option label, or a plain comma-delimited string.

    - list: returned unchanged
    - text starting with ``[`` or ``{``: parsed as JSON; an object becomes its
      values ordered by key ({"B": "y", "A": "x"} -> ["x", "y"])
    - other text: split on commas, items trimmed, empty items dropped
    - anything else (None, numbers, malformed JSON): []
    """
    if isinstance(raw, list):
        return raw
    if not isinstance(raw, str):
        return []

    text = raw.strip()
    if text.startswith("[") or text.startswith("{"):
        try:
            parsed = json.loads(text)
        except ValueError:
            return []
        if isinstance(parsed, list):
            return parsed
        if isinstance(parsed, dict):
            return [parsed[key] for key in sorted(parsed.keys())]
        return []

    return [item.strip() for item in text.split(",") if item.strip()]


def serialize_options(options: Any) -> Any:
    """Store options as JSON text; strings are kept as given."""
    if options is None:
        return None
    if isinstance(options, str):
        return options
    return json.dumps(options)


def question_to_dict(question: Question, include_answer_key: bool = True) -> Dict[str, Any]:
    """
    Convert a Question model to its response mapping.

    Args:
        question: The Question model instance to convert
        include_answer_key: Include correct_answer and explanation. Disabled
            for candidates so the key never leaves the server before grading.
    """
    data: Dict[str, Any] = {
        "id": question.id,
        "test_id": question.test_id,
        "question_text": question.question_text,
        "question_type": question.question_type,
        "options": parse_options(question.options),
    }
    if include_answer_key:
        data["correct_answer"] = question.correct_answer
        data["explanation"] = question.explanation
    return data
