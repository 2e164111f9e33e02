from __future__ import annotations

from blockfall.ai.autoplay import build_parser, play_game, run_games
from blockfall.storage.records import AISettings, GameSettings


def _settings(**ai):
    return GameSettings(ai=AISettings(enabled=True, move_delay=50, **ai))


def test_play_game_stops_at_step_limit():
    result = play_game(_settings(), seed=4, max_steps=60)
    assert result.steps == 60
    assert not result.finished
    assert result.score > 0


def test_same_seed_same_game():
    a = play_game(_settings(), seed=9, max_steps=300)
    b = play_game(_settings(), seed=9, max_steps=300)
    assert a == b


def test_run_games_uses_consecutive_seeds():
    results = run_games(2, _settings(), seed=9, max_steps=300, progress=False)
    assert results[0] == play_game(_settings(), seed=9, max_steps=300)
    assert len(results) == 2


def test_parser_defaults_match_ai_settings():
    args = build_parser().parse_args([])
    defaults = AISettings()
    assert args.holes_weight == defaults.holes_weight
    assert args.games == 5 and args.seed == 0
