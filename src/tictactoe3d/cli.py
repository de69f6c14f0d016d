from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .engine import GameEngine, GameEvent, GameMode, SessionState
from .errors import GameError, IllegalMove, IllegalState
from .game_basics import BOARD_SIZE, Outcome, Player, Position
from .lines import expected_line_count, line_catalog
from .opponent import ComputerOpponent, OpponentConfig
from .paths import exports_dir, save_file
from .persistence import deserialize, serialize
from .records import ExportArgs, export_game
from .selfplay import play_out
from .store import JsonFileStore, restore_session, session_record


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="ttt3d", description="3D tic-tac-toe CLI")
    sub = p.add_subparsers(dest="cmd")
    p.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")
    p.add_argument("--version", action="store_true", help="Print version and exit")
    p.add_argument(
        "--info",
        action="store_true",
        help="Print environment and dependency info and exit",
    )

    p_play = sub.add_parser("play", help="Play in the terminal (moves as x,y,z)")
    p_play.add_argument("--mode", choices=[m.value for m in GameMode], default=None,
                        help="pvp or pvc (default: saved mode, else pvc)")
    p_play.add_argument("--computer-mark", type=int, choices=[1, 2], default=None,
                        help="Which player the computer plays in pvc mode (default: saved mark, else 2)")
    p_play.add_argument("--depth", type=int, default=None, help="Search depth for the computer")
    p_play.add_argument("--save-file", type=Path, default=None,
                        help="Session file (default: $TTT3D_SAVE_FILE or data/session.json)")
    p_play.add_argument("--fresh", action="store_true", help="Ignore any saved session")
    p_play.add_argument("--no-save", action="store_true", help="Do not write the session file")

    p_sug = sub.add_parser("suggest", help="Ask the computer for a move after the given moves")
    p_sug.add_argument("--moves", default="", help='Space-separated triples, e.g. "1,1,1 0,0,0"')
    p_sug.add_argument("--mark", type=int, choices=[1, 2], default=None,
                       help="Side to choose for (default: side to move)")
    p_sug.add_argument("--depth", type=int, default=None, help="Search depth")

    p_lines = sub.add_parser("lines", help="Show the winning-line catalog")
    p_lines.add_argument("--size", type=int, default=BOARD_SIZE, help="Cube size N")
    p_lines.add_argument("--list", action="store_true", help="Print every line")

    p_check = sub.add_parser("check", help="Validate a saved session file")
    p_check.add_argument("--file", type=Path, required=True)

    p_exp = sub.add_parser(
        "export",
        help="Export a saved session's moves (CSV by default; parquet requires pandas+pyarrow)",
    )
    p_exp.add_argument("--file", type=Path, required=True, help="Saved session file")
    p_exp.add_argument("--out", type=Path, default=None, help="Output directory (default: data/exports)")
    p_exp.add_argument("--format", choices=["csv", "parquet", "both"], default="csv")

    p_self = sub.add_parser("selfplay", help="Let the computer play both sides")
    p_self.add_argument("--opening", default="", help='Space-separated triples to start from')
    p_self.add_argument("--depth", type=int, default=None, help="Search depth")
    p_self.add_argument("--save-file", type=Path, default=None, help="Write the final session here")

    return p


def parse_position(text: str) -> Position:
    parts = text.replace(",", " ").split()
    if len(parts) != 3:
        raise IllegalMove(f"Expected three coordinates x,y,z, got {text!r}")
    try:
        x, y, z = (int(s) for s in parts)
    except ValueError:
        raise IllegalMove(f"Coordinates must be integers, got {text!r}") from None
    return (x, y, z)


def parse_moves(text: str) -> List[Position]:
    return [parse_position(tok) for tok in text.split()]


def _opponent_config(depth: Optional[int]) -> OpponentConfig:
    cfg = OpponentConfig.from_env()
    if depth is not None:
        cfg = OpponentConfig(max_depth=depth, full_depth_empties=cfg.full_depth_empties)
    return cfg


def describe_winner(winner: Optional[Outcome], game_mode: GameMode, computer_mark: Player) -> str:
    if winner is None:
        return "in progress"
    if winner is Outcome.DRAW:
        return "Draw!"
    if game_mode is GameMode.PVC and winner.player == computer_mark:
        return "Computer wins!"
    return f"Player {int(winner.player)} wins!"


def _print_info() -> None:
    import importlib.util
    import platform

    print(f"python={sys.version.split()[0]} platform={platform.platform()}")
    for pkg in ["numpy", "pandas", "pyarrow"]:
        spec = importlib.util.find_spec(pkg)
        if spec is None:
            print(f"{pkg}=<not installed>")
        else:
            mod = __import__(pkg)
            ver = getattr(mod, "__version__", "?")
            print(f"{pkg}={ver}")


def _play(ns: argparse.Namespace) -> int:
    computer_mark = Player(ns.computer_mark) if ns.computer_mark is not None else None
    opponent = ComputerOpponent(_opponent_config(ns.depth))
    store = JsonFileStore(ns.save_file or save_file())
    if ns.fresh:
        engine = GameEngine(computer_mark=computer_mark or Player.TWO, opponent=opponent)
    else:
        engine = restore_session(store, computer_mark=computer_mark, opponent=opponent)
    if ns.mode is not None:
        engine.set_game_mode(GameMode(ns.mode))
    elif not engine.move_history:
        engine.set_game_mode(GameMode.PVC)

    def on_event(event: GameEvent, state: SessionState) -> None:
        if event is GameEvent.GAME_OVER:
            print(describe_winner(state.winner, state.game_mode, engine.computer_mark))

    engine.add_listener(on_event)

    def persist() -> None:
        if ns.no_save:
            return
        if engine.winner is not None:
            store.clear()
        else:
            store.save(session_record(engine))

    print("Enter moves as x,y,z. Commands: reset, mode pvp|pvc, quit")
    try:
        while True:
            reply = engine.play_computer_turn()
            if reply is not None:
                print(f"Computer plays {','.join(map(str, reply.position))}")
                persist()
            print(engine.grid.render())
            if engine.winner is None:
                prompt = f"Player {int(engine.current_player)}> "
            else:
                prompt = "Game over (reset or quit)> "
            print(prompt, end="", flush=True)
            line = sys.stdin.readline()
            if not line:
                break
            cmd = line.strip().lower()
            if not cmd:
                continue
            if cmd in ("q", "quit", "exit"):
                break
            if cmd == "reset":
                engine.reset()
                persist()
                continue
            if cmd.startswith("mode"):
                try:
                    engine.set_game_mode(GameMode(cmd.split()[-1]))
                except ValueError:
                    logging.error("Unknown mode %r; use pvp or pvc", cmd.split()[-1])
                continue
            try:
                engine.apply_move(parse_position(cmd))
            except IllegalMove as exc:
                logging.error("%s", exc)
                continue
            persist()
    finally:
        persist()
        if engine.winner is None and engine.move_history and not ns.no_save:
            logging.info("Game in progress saved to %s", store.path)
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    ns = parser.parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if getattr(ns, "verbose", False) else logging.INFO,
                        format="[%(levelname)s] %(message)s")

    # Early exits
    if getattr(ns, "version", False):
        try:
            from importlib.metadata import version as _ver

            print(_ver("tictactoe3d"))
        except Exception:
            print("unknown")
        return 0
    if getattr(ns, "info", False):
        _print_info()
        return 0

    try:
        if ns.cmd == "play":
            return _play(ns)

        if ns.cmd == "suggest":
            engine = GameEngine.replay(parse_moves(ns.moves))
            if engine.winner is not None:
                logging.error("Game is already over: %s", engine.winner.name)
                return 2
            mark = Player(ns.mark) if ns.mark is not None else engine.current_player
            opponent = ComputerOpponent(_opponent_config(ns.depth))
            pos = opponent.choose_move(engine.grid, mark)
            logging.info("mark=%d move=%s nodes=%d", mark, ",".join(map(str, pos)), opponent.nodes_evaluated)
            return 0

        if ns.cmd == "lines":
            if ns.size < 1:
                logging.error("Size must be positive, got %d", ns.size)
                return 2
            catalog = line_catalog(ns.size)
            logging.info("size=%d lines=%d expected=%d", ns.size, len(catalog), expected_line_count(ns.size))
            if ns.list:
                for line in catalog:
                    print(" ".join(",".join(map(str, p)) for p in line))
            return 0

        if ns.cmd == "check":
            record = JsonFileStore(ns.file).load()
            if record is None:
                logging.error("No session file at %s", ns.file)
                return 2
            state = deserialize(record)
            logging.info(
                "valid=true moves=%d status=%s",
                len(state.move_history),
                state.status.value,
            )
            return 0

        if ns.cmd == "export":
            record = JsonFileStore(ns.file).load()
            if record is None:
                logging.error("No session file at %s", ns.file)
                return 2
            out = export_game(deserialize(record), ExportArgs(out=ns.out or exports_dir(), format=ns.format))
            logging.info("Exported game record to: %s", out)
            return 0

        if ns.cmd == "selfplay":
            state = play_out(parse_moves(ns.opening), config=_opponent_config(ns.depth))
            print(state.grid.render())
            logging.info(
                "moves=%d result=%s",
                len(state.move_history),
                describe_winner(state.winner, state.game_mode, Player.TWO),
            )
            if ns.save_file is not None:
                JsonFileStore(ns.save_file).save(serialize(state))
            return 0
    except (IllegalMove, IllegalState) as exc:
        logging.error("%s", exc)
        return 2
    except (GameError, ValueError, RuntimeError) as exc:
        logging.error("%s: %s", type(exc).__name__, exc)
        return 2

    parser.print_help()
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
