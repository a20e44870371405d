"""
plc0c - miniplc0 Compiler Command-Line Interface
================================================

Usage Examples
--------------
Tokenize, one token per line:
    $ plc0c -t -i prog.plc0 -o prog.tokens

Compile to an instruction listing:
    $ plc0c -l -i prog.plc0 -o prog.out

Compile from stdin to stdout and run the result:
    $ plc0c -l -r -o - < prog.plc0

Verbose mode:
    $ plc0c -v -l -i prog.plc0
"""

import logging
from pathlib import Path
from typing import Optional

import click

from miniplc0 import __version__
from miniplc0.cli.errors import handle_cli_exception
from miniplc0.compiler import CompilerOptions, Plc0Compiler
from miniplc0.source import SourceBuffer
from miniplc0.vm import execute

logger = logging.getLogger(__name__)


def read_source(input_path: str, options: CompilerOptions) -> SourceBuffer:
    """Load the input file, or standard input for '-'."""
    if input_path == "-":
        text = click.get_text_stream("stdin").read()
        return SourceBuffer(text, "<stdin>")
    return SourceBuffer.from_file(Path(input_path), options.encoding)


def write_lines(output_path: str, lines: list[str]) -> None:
    """Write one entry per line to the output file, or stdout for '-'."""
    with click.open_file(output_path, "w", encoding="utf-8") as stream:
        for line in lines:
            stream.write(f"{line}\n")


# =============================================================================
# CLI Definition
# =============================================================================

@click.command()
@click.option(
    "-i", "--input", "input_path",
    type=click.Path(exists=True, dir_okay=False, allow_dash=True),
    default="-",
    show_default=True,
    help="Source file ('-' reads standard input)",
)
@click.option(
    "-o", "--output", "output_path",
    type=click.Path(dir_okay=False, allow_dash=True),
    default="a.out",
    show_default=True,
    help="Output file ('-' writes standard output)",
)
@click.option(
    "-t", "--tokenize", "mode",
    flag_value="tokenize",
    help="Perform tokenization: write one token per line",
)
@click.option(
    "-l", "--analyze", "mode",
    flag_value="analyze",
    help="Perform analysis: write one instruction per line",
)
@click.option(
    "-r", "--run",
    is_flag=True,
    help="Execute the compiled program on the reference stack machine",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output",
)
@click.version_option(version=__version__, prog_name="plc0c")
@click.pass_context
def main(
    ctx: click.Context,
    input_path: str,
    output_path: str,
    mode: Optional[str],
    run: bool,
    verbose: bool,
) -> None:
    """
    Compile miniplc0 programs to stack-machine instructions.

    \b
    Examples:
        plc0c -t -i prog.plc0            # Tokens to a.out
        plc0c -l -i prog.plc0 -o out     # Instructions to out
        plc0c -l -r -i prog.plc0 -o -    # Print listing, then run it

    Nothing is written when the source contains an error.
    """
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s: %(message)s")

    if not mode and run:
        mode = "analyze"
    if not mode:
        click.echo(ctx.get_help())
        return

    options = CompilerOptions.from_env()
    compiler = Plc0Compiler(options)
    logger.debug(f"mode={mode} input={input_path} output={output_path} lazy={options.lazy_tokens}")

    try:
        buffer = read_source(input_path, options)

        if mode == "tokenize":
            tokens = compiler.tokenize(buffer)
            write_lines(output_path, [str(token) for token in tokens])
            if verbose:
                click.echo(f"Tokenized: {len(tokens)} tokens -> {output_path}", err=True)
            return

        result = compiler.compile(buffer)
        write_lines(output_path, [str(instruction) for instruction in result.program])
        if verbose:
            click.echo(
                f"Compiled {buffer.filename}: {result.symbol_count} slots, "
                f"{len(result.program)} instructions -> {output_path}",
                err=True,
            )

        if run:
            execute(result.program, output=click.echo)

    except Exception as e:
        handle_cli_exception(e, verbose)


if __name__ == "__main__":
    main()
