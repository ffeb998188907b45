import asyncio
import getpass
import sys
from argparse import ArgumentParser
from pathlib import Path
from typing import Optional

from monkey.monkey_lexer import Lexer
from monkey.monkey_runtime import ScriptRunner
from monkey.monkey_serialize import serialize

PROMPT = ">> "


# A basic awaitable input prompt.
async def ainput(prompt: str) -> str:
    loop = asyncio.get_running_loop()
    sys.stdout.write(prompt)
    sys.stdout.flush()
    return await loop.run_in_executor(None, sys.stdin.readline)


def print_side_effects(result):
    for effect in result.side_effects:
        if effect.get('topics') == ['stdout']:
            print(effect.get('message', ''))


def print_tokens(line: str):
    for tok in Lexer(line):
        print(f"{{Type:{tok.type.value} Literal:{tok.literal}}}")


def run_script_file(file_path: str, fmt: Optional[str] = None):
    """Run a Monkey script file non-interactively and exit with appropriate status."""
    runner = ScriptRunner()
    p = Path(file_path)
    try:
        source = p.read_text(encoding="utf-8")
    except FileNotFoundError:
        print(f"Error: file not found: {file_path}", file=sys.stderr)
        raise SystemExit(1)
    result = runner.handle_script(source)
    print_side_effects(result)
    if result.status == 'error':
        print(result.format_error(), file=sys.stderr)
        raise SystemExit(1)
    if result.value is not None:
        if fmt:
            try:
                print(serialize(result.value, fmt))
            except TypeError as e:
                print(f"Error: {e}", file=sys.stderr)
                raise SystemExit(1)
        else:
            print(result.value.inspect())


def _user_name() -> str:
    try:
        return getpass.getuser()
    except (KeyError, OSError):
        return "there"


async def main(argv=None):
    """Run a script file when provided, otherwise start the interactive REPL."""
    parser = ArgumentParser(prog="monkey", description="The Monkey programming language")
    parser.add_argument("file", type=str, nargs="?", default=None)
    parser.add_argument("--tokens", action="store_true", help="print the tokens of each line instead of evaluating it")
    parser.add_argument("--format", choices=["json", "yaml"], default=None, help="serialize a script's final value")
    args = parser.parse_args(argv)

    if args.file is not None:
        run_script_file(args.file, args.format)
        return

    print(f"Hello {_user_name()}! This is the Monkey programming language!")
    print("Feel free to type in commands. Type 'exit' or press Ctrl+D to quit.")

    runner = ScriptRunner()

    # REPL Loop
    while True:
        try:
            raw = await ainput(PROMPT)
            if raw == "":
                raise EOFError
            line = raw.strip()

            if not line:
                continue
            if line == "exit":
                break

            if args.tokens:
                print_tokens(line)
                continue

            result = runner.handle_script(line)
            print_side_effects(result)

            if result.status == 'error':
                print(result.format_error(), file=sys.stderr)
                continue

            if result.value is not None:
                print(result.value.inspect())

        except EOFError:
            print("\nExiting.")
            break


def run():
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        print("\nExiting.")


if __name__ == "__main__":
    run()
