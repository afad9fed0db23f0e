"""
Tests for question option parsing and serialization.
"""
from types import SimpleNamespace

from app.core.question_utils import parse_options, question_to_dict, serialize_options


class TestParseOptions:
    """Tests for parse_options()."""

    def test_json_array(self):
        assert parse_options('["A", "B", "C"]') == ["A", "B", "C"]

    def test_json_object_values_ordered_by_key(self):
        assert parse_options('{"B": "y", "A": "x", "C": "z"}') == ["x", "y", "z"]

    def test_comma_delimited_string(self):
        assert parse_options("True, False") == ["True", "False"]

    def test_comma_delimited_drops_empty_items(self):
        assert parse_options(" A ,, B , ") == ["A", "B"]

    def test_list_passes_through(self):
        options = ["x", "y"]
        assert parse_options(options) is options

    def test_malformed_json_is_empty(self):
        assert parse_options('["A", "B"') == []

    def test_json_scalar_is_empty(self):
        assert parse_options("{}") == []
        assert parse_options("[]") == []

    def test_none_and_numbers_are_empty(self):
        assert parse_options(None) == []
        assert parse_options(42) == []

    def test_blank_string_is_empty(self):
        assert parse_options("   ") == []


class TestSerializeOptions:
    def test_list_becomes_json(self):
        assert serialize_options(["A", "B"]) == '["A", "B"]'

    def test_string_is_kept(self):
        assert serialize_options("A, B") == "A, B"

    def test_none_is_kept(self):
        assert serialize_options(None) is None

    def test_serialized_list_parses_back(self):
        assert parse_options(serialize_options(["x", "y"])) == ["x", "y"]


class TestQuestionToDict:
    """Tests for question_to_dict()."""

    def _question(self):
        return SimpleNamespace(
            id=1,
            test_id=2,
            question_text="Pick one",
            question_type="multiple_choice",
            options="A, B",
            correct_answer="A",
            explanation="Because",
        )

    def test_includes_answer_key_by_default(self):
        data = question_to_dict(self._question())

        assert data["options"] == ["A", "B"]
        assert data["correct_answer"] == "A"
        assert data["explanation"] == "Because"

    def test_answer_key_can_be_excluded(self):
        data = question_to_dict(self._question(), include_answer_key=False)

        assert "correct_answer" not in data
        assert "explanation" not in data
        assert data["question_text"] == "Pick one"
