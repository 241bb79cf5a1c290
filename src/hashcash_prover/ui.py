from typing import Optional

from rich.live import Live
from rich.panel import Panel
from rich.table import Table

from hashcash_prover.prover import leading_zero_bits
from hashcash_prover.search_snapshot import SearchSnapshot
from hashcash_prover.state_queue import SingleSlotQueue


COLORS = {
    "zero_bits": "bold spring_green2",
    "other_bits": "dark_red",
    "found": "bold green",
    "not_found": "bold red",
    "running": "bold yellow",
}


def digest_to_string(digest: bytes, zero_bits: int) -> str:
    """Hex-encode a digest, highlighting the bytes that are entirely inside the zero-bit prefix."""
    if not digest:
        return "??"

    zero_bytes = zero_bits // 8
    hex_bytes = []
    for i, b in enumerate(digest):
        style = COLORS["zero_bits"] if i < zero_bytes else COLORS["other_bits"]
        hex_bytes.append(f"[{style}]{b:02x}[/{style}]")
    return " ".join(hex_bytes)


def status_string(state: SearchSnapshot) -> str:
    if not state.complete:
        return f"[{COLORS['running']}]searching[/{COLORS['running']}]"
    if state.found:
        return f"[{COLORS['found']}]found[/{COLORS['found']}]"
    return f"[{COLORS['not_found']}]not found[/{COLORS['not_found']}]"


def render(state: Optional[SearchSnapshot]):
    """Render the search snapshot."""
    if state is None:
        return Panel("Waiting for first update…", title="Proof of Work", border_style="dim")

    ui_table = Table(title=f"{state.hash_algo}  |  difficulty {state.difficulty} bits  |  {status_string(state)}")
    ui_table.add_column("Field", justify="right")
    ui_table.add_column("Value")

    ui_table.add_row("Attempts", f"{state.attempts:,}")
    ui_table.add_row("Elapsed", f"{state.elapsed_ms / 1000:.2f}s")
    ui_table.add_row("Rate", f"{state.hash_rate:,.0f} H/s")
    ui_table.add_row("Best zero bits", f"{state.best_zero_bits} / {state.difficulty}")
    ui_table.add_row("Nonce", state.nonce.hex() or "??")
    ui_table.add_row("Digest", digest_to_string(state.digest, leading_zero_bits(state.digest)))
    return ui_table


def ui_loop(state_queue: SingleSlotQueue[SearchSnapshot]) -> Optional[SearchSnapshot]:
    """Render snapshots until the queue closes. Returns the last snapshot seen."""
    last = None
    with Live(render(None), refresh_per_second=30, screen=False) as live:
        while True:
            state = state_queue.get()
            if state is None:
                break
            last = state
            live.update(render(state))
    return last
