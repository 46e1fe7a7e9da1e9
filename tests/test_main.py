import pygame
import pytest

import main
from code_maze import Difficulty, MoveResult, Phase
from code_maze.questions import OPTION_LETTERS


@pytest.fixture
def game(make_session):
    session = make_session()
    ui = main.new_ui()
    main.attach(session, ui)
    return session, ui


@pytest.fixture
def screen():
    pygame.init()
    yield pygame.Surface((main.WIDTH, main.HEIGHT))
    pygame.quit()


def answer_key(question):
    return pygame.K_1 + OPTION_LETTERS.index(question.answer)


def test_key_maps_cover_arrows_and_wasd():
    assert main.KEY_DIRECTIONS[pygame.K_UP] == main.KEY_DIRECTIONS[pygame.K_w] == (0, -1)
    assert main.KEY_DIRECTIONS[pygame.K_RIGHT] == main.KEY_DIRECTIONS[pygame.K_d] == (1, 0)
    assert set(main.DIFFICULTY_KEYS.values()) == set(Difficulty)


def test_arrow_then_answer_key_moves(game, capsys):
    session, ui = game
    main.handle_key(session, ui, pygame.K_RIGHT)
    assert session.phase == Phase.AWAITING_ANSWER

    main.handle_key(session, ui, answer_key(session.current_question))
    assert session.player == (1, 0)
    assert session.coins == 10
    assert ui['message'].startswith("Correct!")
    assert "Correct!" in capsys.readouterr().out


def test_wrong_answer_then_override_prompt(game):
    session, ui = game
    main.handle_key(session, ui, pygame.K_d)
    main.handle_key(session, ui, answer_key(session.current_question))
    main.handle_key(session, ui, pygame.K_d)
    question = session.current_question
    wrong = next(k for k in range(pygame.K_1, pygame.K_1 + len(question.options))
                 if k != answer_key(question))
    main.handle_key(session, ui, wrong)
    assert session.phase == Phase.AWAITING_OVERRIDE
    assert "(Y/N)" in ui['message']

    main.handle_key(session, ui, pygame.K_RIGHT)
    assert session.phase == Phase.AWAITING_OVERRIDE
    main.handle_key(session, ui, pygame.K_y)
    assert session.player == (2, 0)
    assert session.coins == 0


def test_free_text_answer_in_a_dead_end(make_session):
    session = make_session(branch=True)
    ui = main.new_ui()
    main.attach(session, ui)
    for key in (pygame.K_RIGHT, pygame.K_RIGHT, pygame.K_DOWN):
        main.handle_key(session, ui, key)
        main.handle_key(session, ui, answer_key(session.current_question))
    assert session.player == (2, 1)

    main.handle_key(session, ui, pygame.K_UP)
    question = session.current_question
    assert not question.multiple_choice

    main.handle_text(session, ui, question.answer + "x")
    main.handle_key(session, ui, pygame.K_BACKSPACE)
    assert ui['input'] == question.answer
    main.handle_key(session, ui, pygame.K_RETURN)
    assert session.player == (2, 0)
    assert ui['input'] == ""


def test_typing_is_ignored_for_multiple_choice(game):
    session, ui = game
    main.handle_key(session, ui, pygame.K_RIGHT)
    main.handle_text(session, ui, "abc")
    assert ui['input'] == ""


def test_hint_toggle_menu_and_regenerate(game):
    session, ui = game
    main.handle_key(session, ui, pygame.K_h)
    assert ui['show_hint']
    main.handle_key(session, ui, pygame.K_r)
    assert not ui['show_hint']
    assert main.handle_key(session, ui, pygame.K_n) == "menu"


def test_victory_screen_waits_for_menu(game):
    session, ui = game
    session.pool.clear()
    session.dead_end_pool.clear()
    for key in [pygame.K_RIGHT] * 4 + [pygame.K_DOWN] * 4:
        main.handle_key(session, ui, key)
    assert session.completed
    assert ui['victory'] == (0, 50, 50)

    assert main.handle_key(session, ui, pygame.K_LEFT) is None
    assert main.handle_key(session, ui, pygame.K_SPACE) == "menu"


def test_draw_game_paints_player_and_exit(game, screen):
    session, ui = game
    fonts = main.load_fonts()
    ui['show_hint'] = True
    main.draw_game(screen, fonts, session, ui)

    size = main.cell_size(session)
    ox, oy = main.maze_origin(session)
    player = (ox + size // 2, oy + size // 2)
    exit_center = (ox + 4 * size + size // 2, oy + 4 * size + size // 2)
    assert tuple(screen.get_at(player))[:3] == main.PLAYER_COLOR
    assert tuple(screen.get_at(exit_center))[:3] == main.EXIT_COLOR


def test_draw_question_and_start_screen(game, screen):
    session, ui = game
    fonts = main.load_fonts()
    assert session.move(1, 0) == MoveResult.QUESTION
    main.draw_game(screen, fonts, session, ui)
    main.draw_start_screen(screen, fonts, [Difficulty.EASY])


def test_wrapped_text_grows_downwards(screen):
    font = main.load_fonts()['small']
    one = main.draw_wrapped_text(screen, "short", 0, 0, font, (255, 255, 255), 400)
    many = main.draw_wrapped_text(screen, "word " * 60, 0, 0, font, (255, 255, 255), 400)
    assert many > one


def test_main_rejects_bad_arguments(capsys):
    assert main.main(["easy", "hard"]) == 2
    assert main.main(["nightmare"]) == 1
    assert "Unknown difficulty" in capsys.readouterr().err
