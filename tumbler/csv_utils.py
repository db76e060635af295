"""Reading and writing schedules as CSV rows."""

import csv
import io
import logging
from typing import Callable, Iterable, Iterator, Optional

import pydantic

from .schedule_utils import (
    Schedule,
    ScheduleStep,
    describe_validation_error,
    format_state,
    normalize_number,
    parse_state,
)

LOGGER = logging.getLogger(__name__)

COLUMNS = ('mixdepth', 'portion', 'counterparties', 'address', 'wait', 'rounding', 'state')
COMMENT_PREFIX = '#'


class ScheduleParseError(ValueError):
    """A single schedule row that could not be decoded."""

    def __init__(self, line_number: int, raw: str, reason: str):
        self.line_number = line_number
        self.raw = raw
        self.reason = reason
        super().__init__(f'line {line_number}: {reason} ({raw!r})')


ErrorHandler = Callable[[ScheduleParseError], None]


def encode_step(step: ScheduleStep) -> str:
    """
    Encode one step as a CSV row, without the line terminator.

    Column order is mixdepth, portion, counterparties, address, wait,
    rounding, state.
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator='\n')
    writer.writerow([
        step.mixdepth,
        step.portion,
        step.counterparties,
        step.address,
        step.wait,
        step.rounding,
        format_state(step.state),
    ])
    return buffer.getvalue().rstrip('\n')


def encode_schedule(steps: Iterable[ScheduleStep]) -> str:
    return ''.join(encode_step(step) + '\n' for step in steps)


def parse_number(name: str, field: str) -> int | float:
    text = field.strip()
    try:
        return int(text)
    except ValueError:
        pass
    try:
        return normalize_number(float(text))
    except ValueError:
        raise ValueError(f'{name} {field!r} is not a number') from None


def parse_row(row: list[str]) -> ScheduleStep:
    """
    Coerce the fields of one CSV row and validate them as a step.

    Raises:
        ValueError: if the row has the wrong shape or any field is invalid
    """
    if len(row) != len(COLUMNS):
        raise ValueError(f'expected {len(COLUMNS)} columns, got {len(row)}')

    mixdepth, portion, counterparties, address, wait, rounding, state = row
    return ScheduleStep(
        mixdepth=parse_number('mixdepth', mixdepth),
        portion=parse_number('portion', portion),
        counterparties=parse_number('counterparties', counterparties),
        address=address.strip(),
        wait=parse_number('wait', wait),
        rounding=parse_number('rounding', rounding),
        state=parse_state(state),
    )


def _log_parse_error(error: ScheduleParseError) -> None:
    LOGGER.warning('Skipping malformed schedule row: %s', error)


def decode_schedule(lines: Iterable[str], on_error: Optional[ErrorHandler] = None) -> Iterator[ScheduleStep]:
    """
    Lazily decode schedule rows from an iterable of text lines.

    Steps are yielded in input order. A row that fails to decode is passed
    to ``on_error`` (logged when no handler is given) and decoding carries on
    with the next row. Blank rows, rows with an empty first field and
    comment rows are skipped.

    Args:
        lines: Text lines, e.g. an open file or ``sys.stdin``
        on_error: Called with a ScheduleParseError for each malformed row

    Yields:
        Validated schedule steps
    """
    handle_error = on_error or _log_parse_error

    for line_number, raw in enumerate(lines, start=1):
        line = raw.rstrip('\r\n')
        try:
            rows = list(csv.reader([line], strict=True))
        except csv.Error as exc:
            handle_error(ScheduleParseError(line_number, line, str(exc)))
            continue

        row = rows[0] if rows else []
        if not row or not row[0].strip():
            continue
        if row[0].lstrip().startswith(COMMENT_PREFIX):
            continue

        try:
            step = parse_row(row)
        except pydantic.ValidationError as exc:
            handle_error(ScheduleParseError(line_number, line, describe_validation_error(exc)))
            continue
        except ValueError as exc:
            handle_error(ScheduleParseError(line_number, line, str(exc)))
            continue

        yield step


def read_schedule(lines: Iterable[str]) -> tuple[Schedule, list[ScheduleParseError]]:
    """Decode every row, collecting malformed rows instead of logging them."""
    errors: list[ScheduleParseError] = []
    steps = list(decode_schedule(lines, on_error=errors.append))
    return Schedule(steps=steps), errors
