#!/usr/bin/env python3
"""Command-line front end for Speech Bridge."""

import json as json_module
import sys
import threading
import time
import wave
from collections.abc import Callable
from pathlib import Path

import numpy as np
import rich_click as click
from rich.console import Console

from . import __version__
from .core.config import get_config, setup_logging
from .transcription import bridge
from .transcription.session import StreamingSession
from .transcription.types import RecognitionConfig

click.rich_click.USE_RICH_MARKUP = True

click.rich_click.STYLE_OPTION = "#ff79c6"
click.rich_click.STYLE_ARGUMENT = "#8be9fd"
click.rich_click.STYLE_COMMAND = "#50fa7b"
click.rich_click.STYLE_USAGE = "#bd93f9"
click.rich_click.STYLE_HELPTEXT = "#b3b8c0"

logger = setup_logging(__name__)


def load_wav(path: Path) -> tuple[np.ndarray, int]:
    """Read a 16-bit mono WAV file into int16 samples and its sample rate."""
    with wave.open(str(path), "rb") as wav_file:
        if wav_file.getsampwidth() != 2:
            raise ValueError(f"{path} is not 16-bit PCM (sample width {wav_file.getsampwidth()} bytes)")
        if wav_file.getnchannels() != 1:
            raise ValueError(f"{path} has {wav_file.getnchannels()} channels, expected mono")
        sample_rate = wav_file.getframerate()
        frames = wav_file.readframes(wav_file.getnframes())
    return np.frombuffer(frames, dtype="<i2").astype(np.int16), sample_rate


def stream_samples(
    session: StreamingSession,
    samples: np.ndarray,
    block_size: int,
    linger_seconds: float,
    on_transcript: Callable[[str], None],
) -> tuple[bool, str]:
    """Stream samples from a sender thread while receiving on the calling thread.

    The session must already be initialized. Once every block is sent and
    linger_seconds have passed, the session is closed, which ends the blocked
    receive.

    Returns:
        (success, error_text)

    """
    closing = threading.Event()
    send_error: list[str] = []

    def send_blocks() -> None:
        for start in range(0, len(samples), block_size):
            if closing.is_set():
                return
            if not bridge.send_audio(session, samples[start : start + block_size]):
                send_error.append(bridge.get_log(session))
                return

    def close_after_send() -> None:
        sender.join()
        if not send_error:
            time.sleep(linger_seconds)
        closing.set()
        bridge.close_stream(session)

    sender = threading.Thread(target=send_blocks, name="speech-bridge-sender", daemon=True)
    closer = threading.Thread(target=close_after_send, name="speech-bridge-closer", daemon=True)
    sender.start()
    closer.start()

    receive_error = ""
    while True:
        ok, text = bridge.receive_transcript(session)
        if not ok:
            if not closing.is_set():
                receive_error = bridge.get_log(session)
                closing.set()
                bridge.close_stream(session)
            break
        if text:
            on_transcript(text)
        elif closing.is_set():
            break

    closer.join()
    if send_error:
        return False, send_error[0]
    if receive_error:
        return False, receive_error
    return True, ""


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(version=__version__, prog_name="speech-bridge")
def main() -> None:
    """🎙️ [bold cyan]Speech Bridge[/bold cyan] - Stream PCM audio to a speech recognizer and print transcripts

    \b
    [bold yellow]🎯 Quick Start:[/bold yellow]
    \b
      [green]speech-bridge transcribe recording.wav[/green]             [italic]# Stream a 16-bit mono WAV file[/italic]
      [green]speech-bridge transcribe rec.wav --json[/green]            [italic]# One JSON object per transcript[/italic]
      [green]speech-bridge config[/green]                               [italic]# Show recognition defaults[/italic]
    """


@main.command()
@click.argument("audio_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--language", help=" 🌍 BCP-47 language tag (e.g. 'en-US', 'de-DE')")
@click.option(
    "--model",
    type=click.Choice(["default", "video", "phone_call", "command_and_search"]),
    help=" 🤖 Recognition model",
)
@click.option("--max-alternatives", type=click.IntRange(0, 30), help=" 🔢 Alternatives per result (0-30)")
@click.option("--interim-results/--final-only", default=None, help=" ⏱️  Include interim results")
@click.option("--block-ms", type=click.IntRange(min=1), help=" 📦 Audio sent per SendAudio call, in ms")
@click.option("--linger", type=float, help=" ⏳ Seconds to keep receiving after the last block")
@click.option("--json", "as_json", is_flag=True, help=" 📄 Output JSON lines")
def transcribe(audio_file, language, model, max_alternatives, interim_results, block_ms, linger, as_json):
    """Stream AUDIO_FILE to the recognizer and print each transcript."""
    console = Console()
    config = get_config()

    try:
        samples, sample_rate = load_wav(audio_file)
    except (OSError, ValueError, wave.Error) as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)

    defaults = RecognitionConfig.from_config()
    session = bridge.create_session()
    if not bridge.initialize_stream(
        session,
        language or defaults.language,
        sample_rate,
        model or defaults.model,
        defaults.max_alternatives if max_alternatives is None else max_alternatives,
        defaults.interim_results if interim_results is None else interim_results,
    ):
        console.print(f"[red]Error: {bridge.get_log(session)}[/red]")
        sys.exit(1)

    block_size = max(1, sample_rate * (block_ms or config.cli_block_ms) // 1000)
    linger_seconds = config.cli_linger_seconds if linger is None else linger

    def emit(text: str) -> None:
        if as_json:
            click.echo(json_module.dumps({"transcript": text, "alternatives": text.split(";")}))
        else:
            console.print(text)

    logger.info(f"Streaming {audio_file} ({len(samples)} samples at {sample_rate} Hz)")
    ok, error = stream_samples(session, samples, block_size, linger_seconds, emit)
    if not ok:
        console.print(f"[red]Error: {error}[/red]")
        sys.exit(1)

    if not as_json:
        console.print(f"[dim]{json_module.dumps(session.stats.to_dict())}[/dim]")


@main.command(name="config")
def show_config():
    """Show the effective recognition defaults."""
    console = Console()
    config = get_config()
    console.print(f"[bold]Config file:[/bold] {config.config_file}")
    console.print_json(json_module.dumps(RecognitionConfig.from_config().to_dict()))


if __name__ == "__main__":
    main()
