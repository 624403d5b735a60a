#!/usr/bin/python3

from auralib import Interpreter, Number, make_global_environment
from seal import load_sealed_program
import sys


def main():
    if len(sys.argv) < 2:
        print("Usage: aura <sealed>")
        sys.exit(1)

    program = load_sealed_program(sys.argv[1])
    if program is None:
        print(f"Can't load sealed program '{sys.argv[1]}'", file=sys.stderr)
        sys.exit(1)

    result = Interpreter().evaluate(program, make_global_environment())
    if result.error:
        print(result.error.as_string(), file=sys.stderr)
        sys.exit(1)

    if isinstance(result.value, Number):
        sys.exit(int(result.value.value))


if __name__ == '__main__':
    main()
