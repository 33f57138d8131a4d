import argparse
import logging
import sys
from typing import List, Optional

from .session import Session


def build_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='kscope',
        description='Compile kscope source into an instruction listing.',
    )
    parser.add_argument('file', nargs='?', help='source file, reads stdin when omitted')
    parser.add_argument('--eval', action='store_true', dest='evaluate',
                        help='evaluate each top-level expression')
    parser.add_argument('--no-dump', action='store_true',
                        help='do not print the module at the end of the session')
    parser.add_argument('--module-name', default='kscope', help='name recorded in the module dump')
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument('-v', '--verbose', action='store_true', help='log every parsed unit')
    verbosity.add_argument('-q', '--quiet', action='store_true', help='only log errors')
    return parser


def configure_logging(verbose: bool = False, quiet: bool = False):
    if verbose:
        level = logging.INFO
    elif quiet:
        level = logging.ERROR
    else:
        level = logging.WARNING
    logging.basicConfig(level=level, format='%(message)s', stream=sys.stderr)


def main(argv: Optional[List[str]] = None) -> int:
    args = build_argument_parser().parse_args(argv)
    configure_logging(verbose=args.verbose, quiet=args.quiet)
    # --eval 时总是输出计算结果
    if args.evaluate and not args.verbose:
        logging.getLogger('kscope.session.result').setLevel(logging.INFO)

    if args.file is None:
        session = Session(sys.stdin, module_name=args.module_name, evaluate=args.evaluate)
        session.run()
    else:
        with open(args.file, 'r', encoding='utf-8') as f:
            session = Session(f, module_name=args.module_name, evaluate=args.evaluate)
            session.run()

    if not args.no_dump:
        sys.stdout.write(session.dump())
    return 1 if session.error_count else 0
