"""
Telo CLI - Command-line interface for the engine.

Usage:
    telo play [--mode ai|local]     Play in the terminal
    telo history [--clear]          Show finished games
    telo scores [--reset]           Show the running score
    telo serve [--host --port]      Run the HTTP/WebSocket API
"""

import argparse
import logging
import sys
import time


BOARD_TEMPLATE = """\
  {0} --- {1} --- {2}      y=0
  | \\     |     / |
  |   \\   |   /   |
  {3} --- {4} --- {5}      y=1
  |   /   |   \\   |
  | /     |     \\ |
  {6} --- {7} --- {8}      y=2
 x=0     x=1     x=2
"""

SYMBOLS = {None: ".", 1: "X", 2: "O"}


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Telo - Fanorona-telo game engine",
        prog="telo",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    play_parser = subparsers.add_parser("play", help="Play a game in the terminal")
    play_parser.add_argument("--mode", choices=["ai", "local"], default="ai")
    play_parser.add_argument("--time-limit", type=float, help="Seconds per turn (0 disables)")
    play_parser.add_argument("--ai-delay", type=float, help="Computer thinking pause in seconds")
    play_parser.add_argument("--seed", type=int, help="Seed for the computer's random moves")

    history_parser = subparsers.add_parser("history", help="Show finished games")
    history_parser.add_argument("--clear", action="store_true", help="Delete the history")

    scores_parser = subparsers.add_parser("scores", help="Show the running score")
    scores_parser.add_argument("--reset", action="store_true", help="Reset both scores to 0")

    serve_parser = subparsers.add_parser("serve", help="Run the API server")
    serve_parser.add_argument("--host", default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=8000)

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "play":
        cmd_play(args)
    elif args.command == "history":
        cmd_history(args)
    elif args.command == "scores":
        cmd_scores(args)
    elif args.command == "serve":
        cmd_serve(args)
    else:
        parser.print_help()
        sys.exit(1)


def _settings(args=None):
    from .config import load_settings

    try:
        settings = load_settings()
    except ValueError as e:
        print(f"Error: {e}")
        sys.exit(1)

    if args is not None:
        if getattr(args, "time_limit", None) is not None:
            settings.turn_time_limit = args.time_limit or None
        if getattr(args, "ai_delay", None) is not None:
            settings.ai_move_delay = max(0.0, args.ai_delay)
    return settings


def _store(settings):
    from .storage import GameStore
    return GameStore(settings.data_dir, settings.history_limit)


def render_board(state) -> str:
    """Text drawing of the board, corners and edges joined by lines."""
    from .engine_core.board import Position

    cells = []
    for y in range(3):
        for x in range(3):
            piece = state.piece_at(Position(x, y))
            symbol = SYMBOLS[piece.player_id if piece else None]
            if piece and piece.piece_id == state.selected_piece_id:
                symbol = symbol.lower()
            cells.append(symbol)
    return BOARD_TEMPLATE.format(*cells)


def cmd_play(args):
    """Interactive terminal game."""
    import random

    from .bots import HeuristicBot
    from .engine_core.board import Position
    from .engine_core.state import GamePhase
    from .session import GameLoop, SessionManager

    settings = _settings(args)
    store = _store(settings)
    manager = SessionManager(store=store, settings=settings)
    session = manager.create_session(
        mode=args.mode, bot=HeuristicBot(rng=random.Random(args.seed))
    )
    loop = GameLoop(session, store=store)

    print("Fanorona-telo: line up your three pieces. Enter points as x,y; q quits.")
    if settings.turn_time_limit:
        print(f"Time limit: {settings.turn_time_limit:.0f}s per turn")

    while True:
        state = loop.state
        print()
        print(render_board(state))

        if state.is_over:
            winner = session.get_player(state.winner)
            print(f"{winner.name} wins ({state.end_reason.value})!")
            p1, p2 = session.get_player(1), session.get_player(2)
            print(f"Score: {p1.name} {p1.score} - {p2.score} {p2.name}")
            break

        player = session.get_player(state.current_player)

        if session.is_ai_turn():
            ticket = loop.request_ai_turn()
            print(f"{player.name} is thinking...")
            time.sleep(ticket.delay)
            result = loop.run_ai_turn(ticket)
            for change in result.changes:
                print(f"  {change}")
            continue

        if state.phase == GamePhase.PLACEMENT:
            prompt = f"{player.name} ({SYMBOLS[player.player_id]}) place at: "
        elif state.selected_piece is None:
            prompt = f"{player.name} ({SYMBOLS[player.player_id]}) select a piece: "
        else:
            targets = " ".join(p.key for p in loop.valid_destinations())
            prompt = f"{player.name} move to [{targets}] (or pick another piece): "

        try:
            text = input(prompt).strip()
        except EOFError:
            text = "q"
        if text.lower() in {"q", "quit", "exit"}:
            manager.end_session(session.session_id, reason="user_ended")
            print("Game abandoned.")
            return

        try:
            position = Position.parse(text)
        except ValueError as e:
            print(f"  {e}")
            continue

        result = loop.click(position)
        if not result.success:
            print(f"  {result.error}")
        for change in result.changes:
            print(f"  {change}")


def cmd_history(args):
    """Show or clear finished games."""
    settings = _settings()
    store = _store(settings)

    if args.clear:
        store.clear_history()
        print("History cleared.")
        return

    history = store.load_history()
    if not history:
        print("No games played yet.")
        return

    for record in history:
        minutes, seconds = divmod(record.duration, 60)
        outcome = f"{record.winner.name} beat {record.loser.name}"
        print(
            f"{record.date[:19]}  {outcome:<30} "
            f"{minutes}:{seconds:02d}  {record.total_turns} turns"
        )


def cmd_scores(args):
    """Show or reset the running score."""
    settings = _settings()
    store = _store(settings)

    if args.reset:
        store.reset_scores()
        print("Scores reset.")
        return

    scores = store.load_scores()
    print(f"Player 1: {scores['player1']}")
    print(f"Player 2: {scores['player2']}")


def cmd_serve(args):
    """Run the API with uvicorn."""
    try:
        import uvicorn
    except ImportError:
        print("uvicorn not installed. Install with: pip install 'telo[api]'")
        sys.exit(1)

    uvicorn.run("telo.api.app:create_app", factory=True, host=args.host, port=args.port)


if __name__ == "__main__":
    main()
