import random
from types import SimpleNamespace
from unittest.mock import Mock

import pytest

from app.client.api import QuizFlixApiError
from app.client.controller import (
    NO_LANGUAGE_MESSAGE,
    Correct,
    Failed,
    GameController,
    Idle,
    LanguageOption,
    Loading,
    Playing,
)
from app.models.game import Difficulty, GameRequest
from app.services.game_orchestrator import GameOrchestrator

CLUES = ["first", "second", "third", "fourth", "fifth"]
GAME = {"title": "The Matrix", "clues": CLUES, "posterUrl": "https://img.example/matrix.jpg", "source": "live"}


class FakeClock:
    def __init__(self):
        self.now = 100.0

    def __call__(self):
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def api():
    return SimpleNamespace(
        new_game=Mock(return_value=dict(GAME)),
        search=Mock(return_value=["The Matrix", "The Matrix Reloaded"]),
        languages=Mock(return_value=[]),
    )


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def controller(api, clock):
    return GameController(api, rng=random.Random(0), clock=clock)


@pytest.fixture
def playing(controller):
    controller.start_game()
    assert isinstance(controller.phase, Playing)
    return controller


def test_start_game_uses_settings(controller, api):
    controller.update_settings(year_range=(2000, 2010), difficulty="hard")

    phase = controller.start_game()

    assert isinstance(phase, Playing)
    assert phase.clue == "first"
    request = api.new_game.call_args.args[0]
    assert (request.start_year, request.end_year) == (2000, 2010)
    assert request.language == "en"
    assert request.difficulty is Difficulty.HARD


def test_language_is_drawn_from_selection(controller, api):
    controller.update_settings(languages=[LanguageOption("fr", "French")])

    controller.start_game()

    assert api.new_game.call_args.args[0].language == "fr"


def test_no_language_selected(controller, api):
    controller.update_settings(languages=[])

    phase = controller.start_game()

    assert phase == Idle(error=NO_LANGUAGE_MESSAGE)
    api.new_game.assert_not_called()


def test_failed_request_returns_to_idle_in_fallback_mode(controller, api):
    api.new_game.side_effect = QuizFlixApiError("Pre-generated quiz data not available.", status_code=503)

    phase = controller.start_game()

    assert phase == Idle(error="Pre-generated quiz data not available.", fallback=True)
    assert controller.is_fallback is True


def test_invalid_payload_is_rejected(controller, api):
    api.new_game.return_value = {"title": "Short", "clues": CLUES[:3]}

    phase = controller.start_game()

    assert isinstance(phase, Idle)
    assert phase.error


def test_begin_new_game_enters_loading(controller):
    request = controller.begin_new_game()

    assert isinstance(request, GameRequest)
    assert controller.phase == Loading(request)


def test_fallback_flag_follows_source(controller, api):
    api.new_game.return_value = {**GAME, "source": "fallback"}

    controller.start_game()

    assert controller.is_fallback is True


def test_poster_hidden_while_playing(playing):
    assert playing.poster_url is None


@pytest.mark.parametrize("guess", ["The Matrix", "  the matrix ", "THE MATRIX"])
def test_correct_guess(playing, guess):
    phase = playing.submit_guess(guess)

    assert isinstance(phase, Correct)
    assert playing.poster_url == "https://img.example/matrix.jpg"


def test_correct_guess_on_any_clue(playing):
    for _ in range(3):
        playing.submit_guess("Speed")

    phase = playing.submit_guess("the matrix")

    assert phase == Correct(playing.phase.round, 3)


def test_wrong_guess_reveals_next_clue(playing):
    playing.set_guess("Speed")

    phase = playing.submit_guess()

    assert isinstance(phase, Playing)
    assert phase.clue_index == 1
    assert phase.guess == ""
    assert phase.suggestions == ()


def test_wrong_guess_on_last_clue_fails(playing):
    for _ in range(4):
        playing.submit_guess("Speed")
    assert playing.phase.clue_index == 4

    phase = playing.submit_guess("Speed")

    assert isinstance(phase, Failed)
    assert phase.clue_index == 4


def test_give_up(playing):
    phase = playing.give_up()

    assert isinstance(phase, Failed)
    assert playing.poster_url == "https://img.example/matrix.jpg"


def test_correct_is_reached_once(playing):
    first = playing.submit_guess("The Matrix")
    second = playing.submit_guess("The Matrix")

    assert second is first
    assert playing.give_up() is first


def test_play_again_uses_current_settings(playing, api):
    playing.submit_guess("The Matrix")
    playing.update_settings(difficulty=Difficulty.EASY)

    phase = playing.play_again()

    assert isinstance(phase, Playing)
    assert api.new_game.call_count == 2
    assert api.new_game.call_args.args[0].difficulty is Difficulty.EASY


def test_settings_do_not_touch_current_round(playing):
    before = playing.phase

    playing.update_settings(year_range=(1950, 1960), difficulty="easy")

    assert playing.phase is before


def test_play_again_ignored_while_playing(playing, api):
    playing.play_again()

    assert api.new_game.call_count == 1


def test_year_range_is_validated(controller):
    with pytest.raises(ValueError):
        controller.update_settings(year_range=(1800, 1900))
    with pytest.raises(ValueError):
        controller.update_settings(year_range=(2010, 2000))


def test_suggestions_wait_for_debounce(playing, api, clock):
    playing.set_guess("mat")
    clock.advance(0.1)

    assert playing.poll_suggestions() == ()
    api.search.assert_not_called()

    clock.advance(0.25)
    assert playing.poll_suggestions() == ("The Matrix", "The Matrix Reloaded")
    api.search.assert_called_once_with("mat")

    clock.advance(1)
    playing.poll_suggestions()
    api.search.assert_called_once()


def test_single_character_never_searches(playing, api, clock):
    playing.set_guess("m")
    clock.advance(1)

    assert playing.poll_suggestions() == ()
    api.search.assert_not_called()


def test_stale_suggestions_are_discarded(playing, clock):
    playing.set_guess("mat")
    clock.advance(0.5)
    stale = playing.request_suggestions()

    playing.set_guess("matr")
    clock.advance(0.5)
    fresh = playing.request_suggestions()

    assert playing.receive_suggestions(stale, ["Matilda"]) is False
    assert playing.receive_suggestions(fresh, ["The Matrix"]) is True
    assert playing.phase.suggestions == ("The Matrix",)


def test_suggestions_cleared_on_submit(playing, clock):
    playing.set_guess("mat")
    clock.advance(0.5)
    ticket = playing.request_suggestions()

    playing.submit_guess("Speed")

    assert playing.phase.suggestions == ()
    assert playing.receive_suggestions(ticket, ["The Matrix"]) is False


def test_choose_suggestion_submits_it(playing):
    phase = playing.choose_suggestion("The Matrix")

    assert isinstance(phase, Correct)


def test_search_errors_clear_suggestions(playing, api, clock):
    api.search.side_effect = QuizFlixApiError("down")
    playing.set_guess("mat")
    clock.advance(0.5)

    assert playing.poll_suggestions() == ()


def test_load_languages_filters_unnamed(controller, api):
    api.languages.return_value = [
        {"iso_639_1": "fr", "english_name": "French"},
        {"iso_639_1": "xx", "english_name": ""},
    ]

    assert controller.load_languages() == [LanguageOption("fr", "French")]


def test_orchestrated_round_reaches_correct_once(catalog, api, clock):
    tmdb = Mock()
    tmdb.is_reachable.return_value = False
    orchestrator = GameOrchestrator(catalog, tmdb, llm=None, rng=random.Random(5))

    def fake_new_game(request):
        outcome = orchestrator.new_game(request)
        return {**outcome.payload.to_public(), "source": outcome.source}

    api.new_game.side_effect = fake_new_game
    controller = GameController(api, rng=random.Random(1), clock=clock)
    controller.start_game()
    title = controller.phase.round.title

    first = controller.submit_guess(title)

    assert isinstance(first, Correct)
    assert controller.is_fallback is True
    assert controller.submit_guess(title) is first


def test_load_languages_skips_non_dict_entries(controller, api):
    api.languages.return_value = ["oops", None, {"iso_639_1": "fr", "english_name": "French"}]

    assert controller.load_languages() == [LanguageOption("fr", "French")]


def test_load_languages_keeps_options_on_unexpected_body(controller, api):
    controller.language_options = [LanguageOption("en", "English")]
    api.languages.return_value = {"status_message": "boom"}

    assert controller.load_languages() == [LanguageOption("en", "English")]
