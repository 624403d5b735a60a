#!/usr/bin/python3

from auralib import parse
from seal import save_sealed_program
import sys


def main(fn, text, output):
    program, errors = parse(fn, text)
    if errors:
        for error in errors:
            print(error.as_string(), file=sys.stderr)
        return 1

    save_sealed_program(program, output)
    return 0


def cli():
    if len(sys.argv) < 3:
        print("Usage: auram <input> <output>")
        sys.exit(1)
    with open(sys.argv[1], 'r', encoding='utf-8') as f:
        sys.exit(main(sys.argv[1], f.read(), sys.argv[2]))


if __name__ == '__main__':
    cli()
