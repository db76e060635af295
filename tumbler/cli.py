"""Command line interface: ``step``, ``explain`` and ``create``."""

import argparse
import contextlib
import logging
import sys

import pydantic

from .config import ExplainConfig
from .csv_utils import encode_step, parse_number
from .explain_utils import dump_json, explain_schedule
from .schedule_utils import INTERNAL, NO_ROUNDING, describe_validation_error, validate_step

LOGGER = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_INVALID = 2


def number(text: str) -> int | float:
    return parse_number('value', text)


def _open_output(path):
    if path is None:
        return contextlib.nullcontext(sys.stdout)
    return open(path, 'w', encoding='utf-8')


def _open_input(path):
    if path is None:
        return contextlib.nullcontext(sys.stdin)
    return open(path, 'r', encoding='utf-8', newline='')


def run_step(args) -> int:
    step = validate_step(
        mixdepth=args.mixdepth,
        portion=args.portion,
        counterparties=args.counterparties,
        address=args.address,
        wait=args.wait,
        rounding=args.rounding,
    )
    text = dump_json(step.to_record()) if args.json else encode_step(step)

    with _open_output(args.output) as out:
        out.write(text + '\n')
    return EXIT_OK


def run_explain(args) -> int:
    config = ExplainConfig.from_env(
        amtmixdepths=args.amtmixdepths,
        block_interval=args.block_interval,
    )

    with _open_input(args.input) as lines, _open_output(args.output) as out:
        count = explain_schedule(lines, out, as_json=args.json, config=config)
    LOGGER.info('Explained %d steps', count)
    return EXIT_OK


def run_create(args) -> int:
    LOGGER.error('create is not implemented')
    return EXIT_FAILURE


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='tumbler-schedule',
        description='Build and explain coinjoin tumbler schedules',
    )
    parser.add_argument(
        '--verbose',
        '-v',
        action='store_true',
        help='Show debug logging',
    )
    subparsers = parser.add_subparsers(dest='command', required=True)

    step = subparsers.add_parser('step', help='Encode a single schedule step')
    step.add_argument('--mixdepth', type=number, required=True, help='Source mixdepth')
    step.add_argument(
        '--portion',
        type=number,
        required=True,
        help='0 to sweep, a fraction below 1, or an amount in satoshis',
    )
    step.add_argument('--counterparties', type=number, required=True)
    step.add_argument(
        '--address',
        default=INTERNAL,
        help=f'{INTERNAL}, addrask or a destination address (default: {INTERNAL})',
    )
    step.add_argument('--wait', type=number, required=True, help='Minutes to wait after confirmation')
    step.add_argument(
        '--rounding',
        type=number,
        default=NO_ROUNDING,
        help=f'Significant digits to round the amount to, {NO_ROUNDING} for none',
    )
    step.add_argument('--json', action='store_true', help='Emit JSON instead of CSV')
    step.add_argument('--output', default=None, help='Write to FILE instead of stdout')
    step.set_defaults(handler=run_step)

    explain = subparsers.add_parser('explain', help='Describe a schedule')
    explain.add_argument('--json', action='store_true', help='Emit a JSON array instead of prose')
    explain.add_argument('--input', default=None, help='Read from FILE instead of stdin')
    explain.add_argument('--amtmixdepths', type=number, default=None, help='Number of mixdepths (default: 5)')
    explain.add_argument(
        '--block-interval',
        type=number,
        default=None,
        help='Average minutes per confirmation (default: 10)',
    )
    explain.add_argument('--output', default=None, help='Write to FILE instead of stdout')
    explain.set_defaults(handler=run_explain)

    create = subparsers.add_parser('create', help='Not implemented')
    create.add_argument('--input', default=None)
    create.add_argument('--output', default=None)
    create.set_defaults(handler=run_create)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='[%(levelname)s] %(message)s',
    )

    try:
        return args.handler(args)
    except pydantic.ValidationError as exc:
        LOGGER.error(describe_validation_error(exc))
        return EXIT_INVALID
    except UnicodeDecodeError as exc:
        LOGGER.error('I/O error: %s', exc)
        return EXIT_FAILURE
    except ValueError as exc:
        LOGGER.error(str(exc))
        return EXIT_INVALID
    except OSError as exc:
        LOGGER.error('I/O error: %s', exc)
        return EXIT_FAILURE


if __name__ == '__main__':
    sys.exit(main())
