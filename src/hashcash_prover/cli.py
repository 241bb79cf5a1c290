from concurrent.futures import ThreadPoolExecutor
import threading
from typing import Optional

import click
import structlog
from rich.console import Console
from rich.table import Table

from hashcash_prover.config import DEFAULT_HASH_ALGO, DEFAULT_TIMEOUT_MS, SearchConfig
from hashcash_prover.errors import ProverError
from hashcash_prover.hashing import supported_algorithms
from hashcash_prover.logging_config import configure_logging
from hashcash_prover.nonces import NONCE_STRATEGIES, NonceGenerator
from hashcash_prover.prover import Prover
from hashcash_prover.search_snapshot import SearchSnapshot
from hashcash_prover.state_queue import SingleSlotQueue
from hashcash_prover.ui import ui_loop
from hashcash_prover.utils import (
    decode_payload,
    encode_output,
    load_nonce_plugin,
    load_payload,
    OutputFormat,
    PayloadFormat,
)


log = structlog.get_logger()

ENVVAR_PREFIX = "HASHCASH_PROVER"


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
@click.option("--json-logs", is_flag=True, help="Render logs as JSON.")
def cli(verbose: bool, json_logs: bool):
    configure_logging(verbose=verbose, json=json_logs)


def search(
    prover: Prover,
    difficulty: int,
    data: bytes,
    nonce_generator: NonceGenerator,
    *,
    show_ui: bool = True,
) -> Optional[bytes]:
    """Run the search in a worker thread while the main thread renders progress."""
    if not show_ui:
        return prover.process(difficulty, data, nonce_generator)

    state_queue: SingleSlotQueue[SearchSnapshot] = SingleSlotQueue()
    cancel = threading.Event()

    def run() -> Optional[bytes]:
        try:
            return prover.process(
                difficulty, data, nonce_generator,
                observer=state_queue.publish,
                cancel=cancel,
            )
        finally:
            # Always close the queue so the UI can exit
            state_queue.close()

    with ThreadPoolExecutor(max_workers=1) as executor:
        future = executor.submit(run)

        try:
            ui_loop(state_queue)
        except KeyboardInterrupt:
            cancel.set()
            state_queue.close()

        nonce = future.result()

    if cancel.is_set():
        raise click.Abort()
    return nonce


def build_nonce_generator(strategy: str, plugin_path: Optional[str]) -> NonceGenerator:
    if plugin_path:
        return load_nonce_plugin(plugin_path)
    return NONCE_STRATEGIES[strategy]()


@cli.command()
@click.option("--data", "data_text", help="Payload given on the command line.")
@click.option("--data-path", "-p", type=click.Path(exists=True, dir_okay=False), help="Read the payload from a file.")
@click.option(
    "--data-format",
    "-f",
    type=click.Choice(["text", "raw", "b64", "b64_urlsafe", "hex"]),
    default="text",
    show_default=True,
)
@click.option("--difficulty", "-d", required=True, type=click.IntRange(min=0), help="Required leading zero bits.")
@click.option("--timeout", "-t", type=click.IntRange(min=0), default=DEFAULT_TIMEOUT_MS, show_default=True, help="Time budget in milliseconds.")
@click.option("--algorithm", "-a", default=DEFAULT_HASH_ALGO, show_default=True, help="Hash algorithm identifier.")
@click.option("--nonce", "nonce_strategy", type=click.Choice(list(NONCE_STRATEGIES)), default="sequential", show_default=True)
@click.option("--nonce-plugin", type=click.Path(exists=True, dir_okay=False), help="Python file defining make_nonce_generator().")
@click.option("--output-format", "-o", type=click.Choice(["hex", "b64"]), default="hex", show_default=True)
@click.option("--ui/--no-ui", "show_ui", default=True, help="Show the live progress view.")
def prove(
    data_text: Optional[str],
    data_path: Optional[str],
    data_format: PayloadFormat,
    difficulty: int,
    timeout: int,
    algorithm: str,
    nonce_strategy: str,
    nonce_plugin: Optional[str],
    output_format: OutputFormat,
    show_ui: bool,
):
    """Find a nonce so that hash(data || nonce) has DIFFICULTY leading zero bits."""
    if data_text is not None and data_path is not None:
        raise click.UsageError("Use either --data or --data-path, not both.")

    try:
        if data_path is not None:
            data = load_payload(data_path, data_format)
        else:
            data = decode_payload(data_text or "", data_format)
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="--data/--data-path") from e

    try:
        prover = Prover.from_config(SearchConfig(timeout_ms=timeout, hash_algo=algorithm))
        nonce_generator = build_nonce_generator(nonce_strategy, nonce_plugin)
        nonce = search(prover, difficulty, data, nonce_generator, show_ui=show_ui)
    except (ProverError, ValueError) as e:
        raise click.ClickException(str(e)) from e

    if nonce is None:
        log.info("proof_not_found", difficulty=difficulty, timeout_ms=timeout)
        raise click.ClickException(f"No nonce met difficulty {difficulty} within {timeout} ms.")

    digest = prover.calculate_hash(prover.prepare_block(data, nonce))
    log.info("proof_found", difficulty=difficulty, nonce=nonce.hex())
    click.echo(f"nonce: {encode_output(nonce, output_format)}")
    click.echo(f"digest: {digest.hex()}")


@cli.command()
def algorithms():
    """List the supported hash algorithms."""
    table = Table(title="Hash algorithms")
    table.add_column("Identifier")
    table.add_column("Digest bytes", justify="right")
    table.add_column("Max difficulty", justify="right")
    for name, size in supported_algorithms():
        table.add_row(name, str(size), str(size * 8))
    Console().print(table)


if __name__ == "__main__":
    cli(auto_envvar_prefix=ENVVAR_PREFIX)
