"""Unit tests for answer-key normalization and the definition store."""
import pytest

from journey.core.exceptions import InvalidExamDefinition, NotFound
from journey.exams.definitions import ExamDefinitionStore, ExamQuestion, normalize_correct_index
from journey.models.exam import ExamDefinitionRecord
from tests.conftest import FOUNDATION_CORRECT, FOUNDATION_QUESTIONS

OPTIONS = ["a", "b", "c"]


@pytest.mark.unit
class TestNormalizeCorrectIndex:
    @pytest.mark.parametrize("field", ["correctIndex", "correct_index", "answerIndex", "answer_index"])
    def test_explicit_index_fields(self, field):
        assert normalize_correct_index({"options": OPTIONS, field: 2}) == 2

    @pytest.mark.parametrize("flag", ["correct", "isCorrect", "is_correct"])
    def test_boolean_per_option(self, flag):
        question = {"options": [{"text": "a"}, {"text": "b", flag: True}, {"text": "c", flag: False}]}
        assert normalize_correct_index(question) == 1

    @pytest.mark.parametrize("field", ["correctIndex", "answer", "correct"])
    def test_string_encoded_index(self, field):
        assert normalize_correct_index({"options": OPTIONS, field: " 1 "}) == 1

    def test_explicit_index_takes_precedence(self):
        question = {"options": [{"text": "a", "correct": True}, {"text": "b"}], "correctIndex": 1}
        assert normalize_correct_index(question) == 1

    def test_zero_is_a_valid_index(self):
        assert normalize_correct_index({"options": OPTIONS, "correctIndex": 0}) == 0

    @pytest.mark.parametrize(
        "question",
        [
            {"options": OPTIONS},
            {"options": OPTIONS, "correctIndex": 3},
            {"options": OPTIONS, "correctIndex": -1},
            {"options": OPTIONS, "answer": "b"},
            {"options": OPTIONS, "correctIndex": True},
            {"options": [{"text": "a", "correct": "yes"}, {"text": "b"}]},
            {"correctIndex": 0},
            "not a question",
        ],
    )
    def test_unresolvable(self, question):
        assert normalize_correct_index(question) is None

    def test_question_from_raw_flattens_options(self):
        question = ExamQuestion.from_raw(FOUNDATION_QUESTIONS[2])
        assert question.options == ("Spending", "Keeping")
        assert question.correct_index == 1
        assert question.resolvable


@pytest.mark.unit
class TestExamDefinitionStore:
    @pytest.mark.asyncio
    async def test_get_normalizes_every_shape(self, db, definition_cache):
        store = ExamDefinitionStore(db, definition_cache)
        definition = await store.get("foundation")

        assert definition.pass_score == 70
        assert [q.correct_index for q in definition.questions] == FOUNDATION_CORRECT
        assert definition.resolvable_count == 5

    @pytest.mark.asyncio
    async def test_get_is_cached(self, db, definition_cache):
        store = ExamDefinitionStore(db, definition_cache)
        first = await store.get("foundation", "ti")
        assert await definition_cache.get(store.cache_key("foundation", "ti")) is first
        assert await store.get("foundation", "ti") is first

    @pytest.mark.asyncio
    async def test_unknown_language_falls_back_to_english(self, db, definition_cache):
        definition = await ExamDefinitionStore(db, definition_cache).get("foundation", "fr")
        assert definition.lang == "en"

    @pytest.mark.asyncio
    async def test_missing_definition(self, db, definition_cache):
        with pytest.raises(NotFound):
            await ExamDefinitionStore(db, definition_cache).get("growth")

    @pytest.mark.asyncio
    async def test_public_questions_hide_answers(self, db, definition_cache):
        definition = await ExamDefinitionStore(db, definition_cache).get("foundation")
        public = definition.public_questions()
        assert public[2] == {"text": "Saving means?", "options": ["Spending", "Keeping"]}
        assert all(set(q) == {"text", "options"} for q in public)

    @pytest.mark.asyncio
    async def test_public_view_strips_answer_key(self, db, definition_cache):
        view = await ExamDefinitionStore(db, definition_cache).public_view("foundation", "ti")

        assert view["lang"] == "ti"
        assert view["pass_score"] == 70
        questions = view["exam"]["questions"]
        assert len(questions) == 5
        assert questions[3] == {"text": "Pick the habit", "options": ["Sleep late", "Skip", "Read daily"]}

    @pytest.mark.asyncio
    async def test_save_invalidates_cache(self, db, definition_cache):
        store = ExamDefinitionStore(db, definition_cache)
        await store.get("foundation")

        updated = [{"text": "Only question", "options": ["x", "y"], "correctIndex": 1}]
        await store.save("foundation", 50, updated, updated)

        definition = await store.get("foundation")
        assert definition.pass_score == 50
        assert len(definition.questions) == 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "questions",
        [
            [],
            [{"text": "Q", "options": ["x", "y"], "correctIndex": 2}],
            [{"text": "Q", "options": ["x", "y"]}],
            [{"text": "Q", "options": ["x"], "correctIndex": 0}],
            [{"text": "", "options": ["x", "y"], "correctIndex": 0}],
            [{"text": "Q", "options": ["x", ""], "correctIndex": 0}],
        ],
    )
    async def test_save_rejects_unscoreable_questions(self, db, definition_cache, questions):
        store = ExamDefinitionStore(db, definition_cache)
        with pytest.raises(InvalidExamDefinition):
            await store.save("growth", 70, questions, questions)

        record = await db.get(ExamDefinitionRecord, "growth")
        assert record is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize("pass_score", [-1, 101, 70.5, True])
    async def test_save_rejects_pass_score_out_of_range(self, db, definition_cache, pass_score):
        store = ExamDefinitionStore(db, definition_cache)
        with pytest.raises(InvalidExamDefinition):
            await store.save("growth", pass_score, FOUNDATION_QUESTIONS, FOUNDATION_QUESTIONS)
