#!/usr/bin/python3

import auralib
import sys
import os


def report(errors):
    for error in errors:
        print(error.as_string(), file=sys.stderr)


def main():
    if len(sys.argv) > 1:
        dyr, fn = os.path.split(sys.argv[1])
        try:
            if dyr:
                os.chdir(dyr)
        except OSError:
            pass
        with open(fn, 'r', encoding='utf-8') as f:
            code = f.read()
        _, errors = auralib.run(fn, code)
        if errors:
            report(errors)
            sys.exit(1)

    while True:
        try:
            text = input('repl@aura > ')
            if text.strip() == '':
                continue

            result, errors = auralib.run('<stdin>', text)

            if errors:
                report(errors)
            elif result is not None and not isinstance(result, auralib.Null):
                print(repr(result))
                auralib.global_environment.set('_', result)
        except (KeyboardInterrupt, EOFError):
            print()
            sys.exit(0)


if __name__ == '__main__':
    main()
