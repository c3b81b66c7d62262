"""
POCSAG command line tools.

pocsag-encode reads "address:message" lines and writes the pages as audio.
pocsag-inspect prints the codewords of a single page.
"""

import logging
import sys
from typing import Optional

import click

from . import (
    SAMPLE_RATE,
    BAUD_RATE,
    SILENCE_SECONDS,
    MAX_SILENCE_SECONDS,
    CARRIER_FREQUENCY,
    MAX_ADDRESS,
    SYNC,
    IDLE,
)
from .codeword import split_codeword, verify_codeword
from .driver import PageDriver
from .pcm import pcm_transmission_length
from .records import RecordError, read_records
from .transmission import PREAMBLE_WORDS, encode_transmission, text_message_length
from .transmitter import AudioDeviceTransmitter, StreamTransmitter, WaveFileTransmitter

CONTEXT_SETTINGS = dict(auto_envvar_prefix="POCSAG")


def _setup_logging(verbose: bool):
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        )
    else:
        logging.basicConfig(level=logging.WARNING, format='%(levelname)s: %(message)s')


@click.command(context_settings=CONTEXT_SETTINGS)
@click.option(
    "-i", "--input",
    type=click.File("rb"),
    default="-",
    help="Input file of address:message lines (default: stdin)",
)
@click.option(
    "-o", "--output",
    type=click.Path(dir_okay=False, allow_dash=True),
    default="-",
    help="Output path, '-' for stdout (default: stdout)",
)
@click.option(
    "-f", "--format",
    "output_format",
    type=click.Choice(["raw", "wav", "flac"], case_sensitive=False),
    default="raw",
    help="Output format (default: raw s16le)",
)
@click.option(
    "-s", "--sample-rate",
    type=int,
    default=SAMPLE_RATE,
    help=f"Sample rate in Hz (default: {SAMPLE_RATE})",
)
@click.option(
    "-b", "--baud-rate",
    type=int,
    default=BAUD_RATE,
    help=f"POCSAG bit rate: 512, 1200 or 2400 (default: {BAUD_RATE})",
)
@click.option(
    "--silence",
    type=click.FloatRange(0, MAX_SILENCE_SECONDS),
    default=SILENCE_SECONDS,
    help=f"Silence after each page in seconds (default: {SILENCE_SECONDS})",
)
@click.option(
    "--carrier",
    type=int,
    default=CARRIER_FREQUENCY,
    help=f"Carrier frequency in Hz (default: {CARRIER_FREQUENCY})",
)
@click.option(
    "--play",
    is_flag=True,
    help="Play through an audio device instead of writing output",
)
@click.option(
    "-d", "--device",
    type=int,
    help="Audio output device number for --play (default: system default)",
)
@click.option(
    "--shape",
    is_flag=True,
    help="Low-pass filter the baseband signal",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output",
)
def main(
    input,
    output: str,
    output_format: str,
    sample_rate: int,
    baud_rate: int,
    silence: float,
    carrier: int,
    play: bool,
    device: Optional[int],
    shape: bool,
    verbose: bool,
):
    """
    Encode POCSAG text pages as audio.

    Each input line is ADDRESS:MESSAGE. The output is 16-bit mono PCM,
    one page after another, each followed by a block of silence.

    Examples:

        echo '1234567:Hello' | pocsag-encode > page.raw

        pocsag-encode -i pages.txt -f wav -o pages.wav

        pocsag-encode -i pages.txt --play -d 3
    """
    _setup_logging(verbose)

    try:
        driver = PageDriver(
            sample_rate=sample_rate,
            baud_rate=baud_rate,
            silence_seconds=silence,
            carrier_frequency=carrier,
            shape=shape,
        )
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    output_format = output_format.lower()
    if play:
        transmitter = AudioDeviceTransmitter(sample_rate, device=device)
    elif output_format == "raw":
        if output == "-":
            transmitter = StreamTransmitter(click.get_binary_stream("stdout"))
        else:
            transmitter = StreamTransmitter(open(output, "wb"), close_stream=True)
    else:
        if output == "-":
            click.echo(f"Error: {output_format} output needs a file path (-o)", err=True)
            sys.exit(1)
        transmitter = WaveFileTransmitter(output, sample_rate, format=output_format.upper())

    if verbose:
        click.echo(f"Encoding pages at {baud_rate} baud...", err=True)
        click.echo(f"  Sample rate: {sample_rate} Hz", err=True)
        click.echo(f"  Silence: {silence}s", err=True)
        click.echo(f"  Carrier: {carrier} Hz", err=True)

    try:
        with transmitter:
            count = driver.run(read_records(input), transmitter)
    except RecordError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    if verbose:
        click.echo(f"✓ Encoded {count} page(s)", err=True)


def _word_role(index: int, word: int) -> str:
    if index < PREAMBLE_WORDS:
        return "PREAMBLE"
    if word == SYNC:
        return "SYNC"
    if word == IDLE:
        return "IDLE"
    return "MESSAGE" if split_codeword(word).is_message else "ADDRESS"


@click.command(context_settings=CONTEXT_SETTINGS)
@click.argument("address", type=click.IntRange(0, MAX_ADDRESS))
@click.argument("message", default="")
@click.option(
    "-s", "--sample-rate",
    type=int,
    default=SAMPLE_RATE,
    help=f"Sample rate in Hz for the PCM size (default: {SAMPLE_RATE})",
)
@click.option(
    "-b", "--baud-rate",
    type=int,
    default=BAUD_RATE,
    help=f"Bit rate for the PCM size (default: {BAUD_RATE})",
)
def inspect(address: int, message: str, sample_rate: int, baud_rate: int):
    """
    Print the codewords of a page.

    Words after the preamble are numbered by batch and position.

    Example:

        pocsag-inspect 1234567 'Hello'
    """
    transmission = encode_transmission(address, message)
    num_words = text_message_length(address, len(message.encode("utf-8")))

    batch = -1
    position = 0
    for index, word in enumerate(transmission):
        role = _word_role(index, word)
        if role == "SYNC":
            batch += 1
            position = 0
            location = f"{batch:3d}  S"
        elif role == "PREAMBLE":
            location = "   -  -"
        else:
            location = f"{batch:3d} {position:2d}"
            position += 1

        check = "" if role in ("PREAMBLE", "SYNC", "IDLE") else (
            "ok" if verify_codeword(word) else "BAD"
        )
        click.echo(f"{index:4d} {location}  {word:08X}  {role:<8} {check}".rstrip())

    click.echo(f"Words: {len(transmission)} (predicted {num_words})")
    if baud_rate > 0 and sample_rate > 0:
        pcm_bytes = pcm_transmission_length(sample_rate, baud_rate, len(transmission))
        click.echo(
            f"PCM: {pcm_bytes} bytes at {sample_rate} Hz / {baud_rate} baud "
            f"({pcm_bytes / 2 / sample_rate:.2f}s)"
        )


if __name__ == "__main__":
    main()
