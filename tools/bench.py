#!/usr/bin/env python3
"""
Benchmark: measure nodes searched and time per move for each difficulty.

Run before and after any change to move generation, evaluation or search to
quantify the effect. Search results must not change for a pure speed-up,
so the chosen move and score columns double as a regression check. A depth
of 0 in the output means the engine played a random move at that level
instead of searching (see random_factor in engine/constants.py).

Usage: python3 tools/bench.py [difficulty ...]   (default: easy medium)
"""
import os
import subprocess
import sys

REPO = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
PYTHON = sys.executable
ENGINE = os.path.join(REPO, "interface", "uci.py")

# Fixed positions spanning opening, middlegame and endgame. All are out of
# book so the search actually runs.
POSITIONS = [
    ("Start+Nf3",    "startpos moves g1f3"),
    ("Italian",      "startpos moves e2e4 e7e5 g1f3 b8c6 f1c4"),
    ("Mid-open",     "fen r1bqkb1r/pppp1ppp/2n2n2/4p3/2B1P3/5N2/PPPP1PPP/RNBQK2R b - - 4 4"),
    ("Mate in 1",    "fen 6k1/5ppp/8/8/8/8/8/R5K1 w - - 0 1"),
    ("Rook ending",  "fen 8/5pk1/6p1/7p/7P/6P1/5PK1/8 b - - 0 1"),
    ("Pawn race",    "fen 8/1p4k1/p7/P1K5/8/8/8/8 w - - 0 1"),
]


def run_position(label: str, pos_spec: str, difficulty: str) -> dict:
    """Run a single position through the UCI engine and return metrics.

    Spawns the engine as a subprocess, selects the difficulty, sends the
    position and "go", then parses the "info" line for depth, score, node
    count, NPS and time.

    Args:
        label: Human-readable position name for display.
        pos_spec: UCI position string (e.g. "startpos" or "fen <FEN>").
        difficulty: Difficulty level name.

    Returns:
        Dict with keys: label, move, depth, score, nodes, nps, time_ms.
    """
    env = {**os.environ, "PYTHONPATH": REPO}
    proc = subprocess.Popen(
        [PYTHON, ENGINE],
        stdin=subprocess.PIPE,
        stdout=subprocess.PIPE,
        stderr=subprocess.DEVNULL,
        text=True,
        env=env,
    )
    cmds = (
        f"uci\nsetoption name Difficulty value {difficulty}\nisready\n"
        f"position {pos_spec}\ngo\n"
    )
    proc.stdin.write(cmds)
    proc.stdin.flush()

    nodes = time_ms = nps = depth = score = 0
    move = "(none)"
    for line in proc.stdout:
        line = line.strip()
        if line.startswith("info depth"):
            parts = line.split()

            def _get(key: str) -> int:
                try:
                    return int(parts[parts.index(key) + 1])
                except (ValueError, IndexError):
                    return 0

            depth = _get("depth")
            score = _get("cp")
            nodes = _get("nodes")
            nps = _get("nps")
            time_ms = _get("time")
        elif line.startswith("bestmove"):
            move = line.split()[1]
            break

    proc.stdin.write("quit\n")
    proc.stdin.flush()
    proc.wait(timeout=5)

    return {
        "label": label,
        "move": move,
        "depth": depth,
        "score": score,
        "nodes": nodes,
        "nps": nps,
        "time_ms": time_ms,
    }


def main() -> None:
    """Run all benchmark positions for each difficulty and print a table."""
    difficulties = sys.argv[1:] or ["easy", "medium"]
    print(f"Chess core benchmark ({PYTHON})")
    print(f"Engine: {ENGINE}")

    for difficulty in difficulties:
        print()
        print(f"Difficulty: {difficulty}")
        print(
            f"{'Position':<14} {'Move':<7} {'Depth':>5} {'Score':>6} "
            f"{'Nodes':>8} {'NPS':>8} {'Time(ms)':>9}"
        )
        print("-" * 68)

        results = []
        for label, pos in POSITIONS:
            r = run_position(label, pos, difficulty)
            results.append(r)
            print(
                f"{r['label']:<14} {r['move']:<7} {r['depth']:>5} {r['score']:>6} "
                f"{r['nodes']:>8,} {r['nps']:>8,} {r['time_ms']:>9,}"
            )

        searched = [r for r in results if r["depth"] > 0]
        if searched:
            avg_nodes = sum(r["nodes"] for r in searched) // len(searched)
            avg_time = sum(r["time_ms"] for r in searched) // len(searched)
            avg_nps = sum(r["nps"] for r in searched) // len(searched)
            print("-" * 68)
            print(
                f"{'AVERAGE':<14} {'':<7} {'':<5} {'':<6} "
                f"{avg_nodes:>8,} {avg_nps:>8,} {avg_time:>9,}"
            )


if __name__ == "__main__":
    main()
