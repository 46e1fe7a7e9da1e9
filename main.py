import logging
import math
import sys
from array import array

import pygame

from code_maze import (
    Cell,
    CodeMazeError,
    Difficulty,
    FrameScheduler,
    GameSession,
    JsonStorage,
    Phase,
    Settings,
    configure_logging,
    shortest_path,
)
from code_maze.questions import OPTION_LETTERS

logger = logging.getLogger("code_maze.main")

# ---------------------- config ----------------------
WIDTH = 800
HEIGHT = 680
HUD_HEIGHT = 90
MAZE_AREA = 560
FPS = 60
TEXT_LIMIT = 120

# ---------------------- colors ----------------------
BG_COLOR = (0, 26, 51)
WALL_COLOR = (102, 102, 102)
PATH_COLOR = (255, 255, 255)
CORRECT_COLOR = (170, 255, 170)
DEAD_END_COLOR = (255, 170, 170)
COIN_COLOR = (255, 200, 0)
PLAYER_COLOR = (0, 0, 255)
EXIT_COLOR = (0, 200, 0)
HINT_COLOR = (120, 180, 255)
TEXT_COLOR = (235, 235, 245)
WARN_COLOR = (255, 170, 120)

CELL_COLORS = {
    Cell.PATH: PATH_COLOR,
    Cell.WALL: WALL_COLOR,
    Cell.CORRECT_PATH: CORRECT_COLOR,
    Cell.DEAD_END: DEAD_END_COLOR,
    Cell.COIN: PATH_COLOR,
}

# ---------------------- keys ----------------------
KEY_DIRECTIONS = {
    pygame.K_UP: (0, -1),
    pygame.K_w: (0, -1),
    pygame.K_DOWN: (0, 1),
    pygame.K_s: (0, 1),
    pygame.K_LEFT: (-1, 0),
    pygame.K_a: (-1, 0),
    pygame.K_RIGHT: (1, 0),
    pygame.K_d: (1, 0),
}
ANSWER_KEYS = {
    pygame.K_1: "A", pygame.K_a: "A",
    pygame.K_2: "B", pygame.K_b: "B",
    pygame.K_3: "C", pygame.K_c: "C",
    pygame.K_4: "D", pygame.K_d: "D",
}
DIFFICULTY_KEYS = {
    pygame.K_1: Difficulty.EASY,
    pygame.K_2: Difficulty.MEDIUM,
    pygame.K_3: Difficulty.HARD,
}


# ---------------------- sound ----------------------
class Sfx:
    enabled = False
    sounds = {}


def init_sound():
    try:
        pygame.mixer.init(frequency=44100, size=-16, channels=1, buffer=512)
    except pygame.error as exc:
        logger.info("Sound disabled: %s", exc)
        Sfx.enabled = False
        return

    def tone(freq=440, ms=120, vol=0.35):
        sr = pygame.mixer.get_init()[0]
        n = int(sr * ms / 1000)
        buf = array('h')
        amp = int(vol * 32767)
        for i in range(n):
            s = math.sin(2 * math.pi * freq * i / sr)
            a = min(1.0, i / (0.002 * sr), (n - 1 - i) / (0.002 * sr))
            buf.append(int(amp * s * max(0.0, a)))
        return pygame.mixer.Sound(buffer=buf.tobytes())

    try:
        Sfx.sounds = {
            "correct_answer": tone(880, 80, 0.35),
            "wrong_answer": tone(220, 120, 0.35),
            "coin_collect": tone(990, 70, 0.30),
            "dead_end": tone(180, 300, 0.35),
        }
        Sfx.enabled = True
    except pygame.error as exc:
        logger.info("Sound disabled: %s", exc)
        Sfx.enabled = False


def play(name):
    snd = Sfx.sounds.get(name)
    if Sfx.enabled and snd:
        try:
            snd.play()
        except pygame.error:
            pass


# ---------------------- game state ----------------------
def new_ui():
    return {'message': '', 'input': '', 'show_hint': False, 'victory': None}


def start_game(difficulty, storage, scheduler, settings=None):
    session = GameSession(difficulty, storage, scheduler, settings=settings)
    ui = new_ui()
    attach(session, ui)
    return session, ui


def attach(session, ui):
    """Wire the session's events to sounds and on-screen messages."""

    def say(text):
        ui['message'] = text
        print(text)

    def on_question(question):
        ui['input'] = ''
        ui['message'] = ''
        if not question.multiple_choice:
            try:
                pygame.key.start_text_input()
            except pygame.error:
                pass

    def on_correct(question):
        play("correct_answer")
        say(f"Correct! {question.explanation}")

    def on_wrong(question):
        play("wrong_answer")
        say(f"Wrong! {question.explanation}")

    def on_dead_end(position):
        play("dead_end")

    def on_coin(position):
        play("coin_collect")

    def on_override(cost, balance):
        say(f"Pay {cost} coins to move anyway? (Y/N)")

    def on_debt(balance):
        say(f"You are {-balance} coins in debt. Reset to zero? (Y/N)")

    def on_timeout():
        ui['input'] = ''
        stop_text_input()
        say("Time is up for that question.")

    def on_complete(difficulty, coins, bonus, total):
        ui['victory'] = (coins, bonus, total)
        say(f"Maze complete! +{bonus} bonus")

    session.on("question", on_question)
    session.on("correct_answer", on_correct)
    session.on("wrong_answer", on_wrong)
    session.on("dead_end", on_dead_end)
    session.on("coin_collect", on_coin)
    session.on("override_offer", on_override)
    session.on("debt_relief", on_debt)
    session.on("warning", say)
    session.on("timeout", on_timeout)
    session.on("complete", on_complete)


def stop_text_input():
    try:
        pygame.key.stop_text_input()
    except pygame.error:
        pass


def handle_key(session, ui, key):
    """Apply one key press. Returns "menu" when the player leaves the run."""
    if ui['victory'] is not None:
        if key in (pygame.K_SPACE, pygame.K_RETURN, pygame.K_n):
            return "menu"
        if key == pygame.K_r:
            ui.update(new_ui())
            session.regenerate()
        return None

    if session.phase == Phase.AWAITING_OVERRIDE:
        if key in (pygame.K_y, pygame.K_n):
            session.resolve_override(key == pygame.K_y)
        return None

    if session.phase == Phase.AWAITING_ANSWER:
        question = session.current_question
        if question.multiple_choice:
            letter = ANSWER_KEYS.get(key)
            if letter is not None and OPTION_LETTERS.index(letter) < len(question.options):
                session.submit_answer(letter)
        elif key in (pygame.K_RETURN, pygame.K_KP_ENTER):
            answer = ui['input']
            ui['input'] = ''
            stop_text_input()
            session.submit_answer(answer)
        elif key == pygame.K_BACKSPACE:
            ui['input'] = ui['input'][:-1]
        return None

    if session.debt_relief_pending and key in (pygame.K_y, pygame.K_n):
        session.resolve_debt_relief(key == pygame.K_y)
        ui['message'] = ''
        return None

    if key in KEY_DIRECTIONS:
        session.move(*KEY_DIRECTIONS[key])
    elif key == pygame.K_r:
        ui.update(new_ui())
        session.regenerate()
    elif key == pygame.K_h:
        ui['show_hint'] = not ui['show_hint']
    elif key == pygame.K_n:
        return "menu"
    return None


def handle_text(session, ui, text):
    if session.phase != Phase.AWAITING_ANSWER or session.current_question.multiple_choice:
        return
    if len(ui['input']) < TEXT_LIMIT:
        ui['input'] += text


# ---------------------- drawing ----------------------
def load_fonts():
    return {
        'big': pygame.font.Font(None, 48),
        'body': pygame.font.Font(None, 28),
        'small': pygame.font.Font(None, 22),
    }


def cell_size(session):
    return min(64, MAZE_AREA // session.size)


def maze_origin(session):
    return (WIDTH - cell_size(session) * session.size) // 2, HUD_HEIGHT


def draw_wrapped_text(surf, text, x, y, font, color, max_width, line_gap=2):
    """Render text wrapped to max_width starting at (x, y). Returns the y below the last line."""
    yy = y
    for paragraph in text.split("\n"):
        line = ""
        for w in paragraph.split(" "):
            test = line + (" " if line else "") + w
            if font.size(test)[0] <= max_width or not line:
                line = test
                continue
            surf.blit(font.render(line, True, color), (x, yy))
            yy += font.get_linesize() + line_gap
            line = w
        surf.blit(font.render(line, True, color), (x, yy))
        yy += font.get_linesize() + line_gap
    return yy


def draw_cell(screen, cell, rect, hinted):
    color = HINT_COLOR if hinted and cell != Cell.DEAD_END else CELL_COLORS[cell]
    pygame.draw.rect(screen, color, rect)
    pygame.draw.rect(screen, (0, 0, 0), rect, 1)
    if cell == Cell.COIN:
        pygame.draw.circle(screen, COIN_COLOR, rect.center, rect.width // 4)


def draw_exit_glow(screen, rect, glow_time):
    glow = 12 + math.sin(glow_time) * 6
    inner = rect.inflate(-rect.width // 5, -rect.height // 5)
    pygame.draw.rect(screen, EXIT_COLOR, inner)
    for i in range(6):
        pygame.draw.circle(screen, EXIT_COLOR, rect.center, int(glow * (i / 6)), 2)


def draw_question(screen, fonts, session, ui):
    question = session.current_question
    box = pygame.Rect(WIDTH // 8, HEIGHT // 6, WIDTH * 3 // 4, HEIGHT * 2 // 3)
    pygame.draw.rect(screen, (255, 255, 255), box, border_radius=8)
    y = draw_wrapped_text(screen, question.text, box.x + 20, box.y + 20, fonts['body'], (0, 0, 0), box.width - 40)
    y += 10
    if question.multiple_choice:
        for letter, option in zip(OPTION_LETTERS, question.options):
            y = draw_wrapped_text(screen, f"{letter}) {option}", box.x + 30, y, fonts['small'], (30, 30, 30), box.width - 60)
            y += 6
    else:
        input_box = pygame.Rect(box.x + 20, box.bottom - 70, box.width - 40, 50)
        pygame.draw.rect(screen, (230, 230, 230), input_box)
        screen.blit(fonts['body'].render(ui['input'], True, (0, 0, 0)), (input_box.x + 10, input_box.y + 12))
        # blink on/off every 500ms
        if (pygame.time.get_ticks() // 500) % 2 == 0:
            caret_x = input_box.x + 12 + fonts['body'].size(ui['input'])[0]
            pygame.draw.line(screen, (0, 0, 0), (caret_x, input_box.y + 10), (caret_x, input_box.bottom - 10), 2)


def draw_hud(screen, fonts, session, ui):
    status = f"Coins: {session.coins}    Questions left: {session.remaining}    {session.difficulty.value.title()}"
    screen.blit(fonts['body'].render(status, True, TEXT_COLOR), (20, 16))
    if ui['message']:
        color = WARN_COLOR if session.locked or session.debt_relief_pending else TEXT_COLOR
        draw_wrapped_text(screen, ui['message'], 20, 48, fonts['small'], color, WIDTH - 40)
    help_text = "Arrows/WASD move   H hint   R new maze   N menu   Esc quit"
    screen.blit(fonts['small'].render(help_text, True, TEXT_COLOR), (20, HEIGHT - 28))


def draw_game(screen, fonts, session, ui, glow_time=0.0):
    screen.fill(BG_COLOR)
    grid, player = session.snapshot()
    size = cell_size(session)
    ox, oy = maze_origin(session)

    hint = set()
    if ui['show_hint']:
        hint = set(shortest_path(grid, player, session.exit) or ())

    for y, row in enumerate(grid):
        for x, cell in enumerate(row):
            rect = pygame.Rect(ox + x * size, oy + y * size, size, size)
            draw_cell(screen, cell, rect, (x, y) in hint)

    ex, ey = session.exit
    draw_exit_glow(screen, pygame.Rect(ox + ex * size, oy + ey * size, size, size), glow_time)

    px, py = player
    pygame.draw.circle(screen, PLAYER_COLOR, (ox + px * size + size // 2, oy + py * size + size // 2), int(size * 0.4))

    draw_hud(screen, fonts, session, ui)

    if session.phase == Phase.AWAITING_ANSWER:
        draw_question(screen, fonts, session, ui)

    if ui['victory'] is not None:
        coins, bonus, total = ui['victory']
        text = fonts['big'].render("Victory!", True, (255, 255, 0))
        screen.blit(text, (WIDTH // 2 - text.get_width() // 2, HEIGHT // 2 - 60))
        lines = [f"Coins this run: {coins}   Bonus: {bonus}"]
        if total is not None:
            lines.append(f"Total coins: {total}")
        lines.append("Space for menu, R for a new maze")
        y = HEIGHT // 2
        for line in lines:
            surf = fonts['body'].render(line, True, (255, 255, 0))
            screen.blit(surf, (WIDTH // 2 - surf.get_width() // 2, y))
            y += 32


def draw_start_screen(screen, fonts, completed=()):
    screen.fill(BG_COLOR)
    title = fonts['big'].render("Code Maze", True, TEXT_COLOR)
    screen.blit(title, (WIDTH // 2 - title.get_width() // 2, 140))
    y = 240
    for key_label, difficulty in (("1", Difficulty.EASY), ("2", Difficulty.MEDIUM), ("3", Difficulty.HARD)):
        mark = "  (done)" if difficulty in completed else ""
        line = fonts['body'].render(f"{key_label}. {difficulty.value.title()}{mark}", True, TEXT_COLOR)
        screen.blit(line, (WIDTH // 2 - 80, y))
        y += 40
    hint = fonts['small'].render("Answer questions to unlock each step. Esc quits.", True, TEXT_COLOR)
    screen.blit(hint, (WIDTH // 2 - hint.get_width() // 2, y + 30))


# ---------------------- main ----------------------
def run(settings, difficulty=None):
    pygame.init()
    init_sound()
    screen = pygame.display.set_mode((WIDTH, HEIGHT))
    pygame.display.set_caption("Code Maze")
    clock = pygame.time.Clock()
    fonts = load_fonts()

    storage = JsonStorage(settings.store_path)
    scheduler = FrameScheduler()
    session = ui = None
    if difficulty is not None:
        session, ui = start_game(difficulty, storage, scheduler, settings)

    glow_time = 0.0
    running = True
    while running:
        scheduler.advance(clock.tick(FPS) / 1000.0)
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                running = False
            elif event.type == pygame.KEYDOWN:
                if event.key == pygame.K_ESCAPE:
                    running = False
                elif session is None:
                    chosen = DIFFICULTY_KEYS.get(event.key)
                    if chosen is not None:
                        session, ui = start_game(chosen, storage, scheduler, settings)
                elif handle_key(session, ui, event.key) == "menu":
                    stop_text_input()
                    session = ui = None
            elif event.type == pygame.TEXTINPUT and session is not None:
                handle_text(session, ui, event.text)

        glow_time += 0.15
        if session is None:
            draw_start_screen(screen, fonts, storage.load_completed_difficulties())
        else:
            draw_game(screen, fonts, session, ui, glow_time)
        pygame.display.flip()
    return 0


def main(argv=None):
    argv = sys.argv[1:] if argv is None else argv
    if len(argv) > 1:
        print("Usage: python main.py [easy|medium|hard]", file=sys.stderr)
        return 2
    try:
        settings = Settings.from_env()
        configure_logging(settings.log_level)
        difficulty = Difficulty.parse(argv[0]) if argv else None
        return run(settings, difficulty)
    except KeyboardInterrupt:
        print("Interrupted.", file=sys.stderr)
        return 130
    except CodeMazeError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    finally:
        pygame.quit()


if __name__ == "__main__":
    raise SystemExit(main())
