import pytest

from app.services.quiz_catalog import QuizCatalog


def make_quiz(title: str) -> dict:
    return {"title": title, "clues": [f"{title} clue {i}" for i in range(1, 6)]}


@pytest.fixture
def catalog_raw():
    return [
        {"difficulty": "easy", "quizzes": [make_quiz("Easy One"), make_quiz("Easy Two")]},
        {"difficulty": "medium", "quizzes": [make_quiz("Medium One")]},
        {"difficulty": "hard", "quizzes": [make_quiz("Hard One")]},
    ]


@pytest.fixture
def catalog(catalog_raw):
    return QuizCatalog.from_raw(catalog_raw)
