import random
from pathlib import Path

from app.config.settings import settings
from app.services.quiz_catalog import QuizCatalog

from conftest import make_quiz


def test_missing_file_gives_empty_catalog(tmp_path):
    catalog = QuizCatalog.from_file(tmp_path / "absent.json")

    assert catalog.is_empty()
    assert catalog.pick("easy") is None


def test_invalid_json_gives_empty_catalog(tmp_path):
    path = tmp_path / "quizzes.json"
    path.write_text("{not json", encoding="utf-8")

    assert QuizCatalog.from_file(path).is_empty()


def test_non_list_root_gives_empty_catalog():
    assert QuizCatalog.from_raw({"difficulty": "easy"}).is_empty()


def test_non_list_quizzes_file_loads_empty(tmp_path):
    path = tmp_path / "quizzes.json"
    path.write_text('[{"difficulty": "easy", "quizzes": 5}]', encoding="utf-8")

    catalog = QuizCatalog.from_file(path)

    assert catalog.is_empty()
    assert catalog.pick("easy") is None


def test_malformed_entries_are_skipped():
    catalog = QuizCatalog.from_raw(
        [
            {
                "difficulty": "easy",
                "quizzes": [
                    make_quiz("Valid"),
                    {"title": "Too short", "clues": ["a", "b", "c", "d"]},
                    {"title": "", "clues": ["a", "b", "c", "d", "e"]},
                ],
            },
            {"quizzes": [make_quiz("No difficulty")]},
            {"difficulty": "hard", "quizzes": 5},
        ]
    )

    assert len(catalog) == 1
    assert catalog.difficulties() == ["easy"]
    assert catalog.bucket("easy")[0].title == "Valid"


def test_pick_requested_difficulty(catalog):
    served, quiz = catalog.pick("hard", random.Random(1))

    assert served == "hard"
    assert quiz.title == "Hard One"
    assert len(quiz.clues) == 5


def test_empty_bucket_falls_back_to_medium(catalog_raw):
    catalog_raw[2]["quizzes"] = []
    catalog = QuizCatalog.from_raw(catalog_raw)

    served, quiz = catalog.pick("hard")

    assert served == "medium"
    assert quiz.title == "Medium One"


def test_unknown_difficulty_without_medium_uses_first_bucket():
    catalog = QuizCatalog.from_raw(
        [
            {"difficulty": "easy", "quizzes": [make_quiz("First")]},
            {"difficulty": "hard", "quizzes": []},
        ]
    )

    served, quiz = catalog.pick("hard")

    assert served == "easy"
    assert quiz.title == "First"


def test_first_bucket_skips_empty_groups():
    catalog = QuizCatalog.from_raw(
        [
            {"difficulty": "easy", "quizzes": []},
            {"difficulty": "expert", "quizzes": [make_quiz("Only")]},
        ]
    )

    assert catalog.pick("hard") == ("expert", catalog.bucket("expert")[0])


def test_bundled_quiz_file_covers_every_difficulty():
    catalog = QuizCatalog.from_file(Path(settings.DATA_DIR) / settings.QUIZZES_FILE)

    for difficulty in ("easy", "medium", "hard"):
        quizzes = catalog.bucket(difficulty)
        assert quizzes
        assert all(len(q.clues) == 5 and q.title for q in quizzes)
