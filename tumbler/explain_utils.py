"""Human-readable and JSON explanations of schedules, with time estimates."""

import json
import logging
import math
from typing import Iterable, Optional, TextIO

from .config import DEFAULT_BLOCK_INTERVAL, DEFAULT_MIXDEPTHS, ExplainConfig
from .csv_utils import ErrorHandler, decode_schedule
from .schedule_utils import ADDRASK, INTERNAL, NO_ROUNDING, Broadcast, ScheduleStep

LOGGER = logging.getLogger(__name__)


def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def explain_step(index: int, step: ScheduleStep, amtmixdepths: int = DEFAULT_MIXDEPTHS) -> str:
    """
    Describe one step as a sentence.

    Args:
        index: 1-based position of the step in its schedule
        step: The step to describe
        amtmixdepths: Number of mixdepths in the wallet, used to resolve INTERNAL

    Returns:
        A newline-terminated description
    """
    text = f'{index}: Send '

    if step.is_sweep:
        pass
    elif step.portion >= 1:
        text += f'{step.portion} satoshis from '
    else:
        text += f'{round_half_up(step.portion * 100)}% of '

    text += f'mixdepth {step.mixdepth} to '

    if step.address == INTERNAL:
        text += f'mixdepth {step.destination(amtmixdepths)}'
    elif step.address == ADDRASK:
        text += 'a user-supplied address'
    else:
        text += f"'{step.address}'"

    text += f' using {step.counterparties} counterparties'

    if step.rounding != NO_ROUNDING:
        text += f', rounding the amount to {step.rounding} places'

    text += f'. Then wait {step.wait} minutes after confirmation.'

    if step.is_completed:
        text += ' (completed)'
    elif isinstance(step.state, Broadcast):
        text += f' (unconfirmed, txid: {step.state.txid})'

    return text + '\n'


def dump_json(value) -> str:
    return json.dumps(value, separators=(',', ':'))


class TimeEstimator:
    """
    Running estimate of how long a schedule takes to execute.

    Each step costs one confirmation (``block_interval`` minutes) plus its
    own wait. Completed steps are already done and cost nothing. The wait
    of the last step counted is subtracted, so a completed final step
    leaves the preceding pending step's wait out instead.
    """

    def __init__(self, block_interval: float = DEFAULT_BLOCK_INTERVAL):
        self.block_interval = block_interval
        self._accumulated = 0
        self._last_wait = 0

    def add(self, step: ScheduleStep) -> None:
        if step.is_completed:
            return
        self._accumulated += self.block_interval + step.wait
        self._last_wait = step.wait

    @property
    def total_minutes(self) -> float:
        return self._accumulated - self._last_wait

    def summary(self) -> str:
        total = self.total_minutes
        hours = math.floor(total / 60)
        # A leftover of 59.5 minutes or more rounds to 60 without carrying into hours.
        minutes = round_half_up(total - hours * 60)
        return f'Total expected time is {hours} hours, {minutes} minutes.\n'


def estimate_minutes(steps: Iterable[ScheduleStep], block_interval: float = DEFAULT_BLOCK_INTERVAL) -> float:
    estimator = TimeEstimator(block_interval)
    for step in steps:
        estimator.add(step)
    return estimator.total_minutes


def explain_schedule(
    lines: Iterable[str],
    out: TextIO,
    *,
    as_json: bool = False,
    config: Optional[ExplainConfig] = None,
    on_error: Optional[ErrorHandler] = None,
) -> int:
    """
    Explain a CSV schedule, writing the result to ``out``.

    Text mode writes one line per step as rows arrive, then a total time
    line once the input is exhausted. JSON mode writes a single array once
    the input is exhausted; it carries no time estimate.

    Args:
        lines: Schedule rows as text lines
        out: Destination stream
        as_json: Emit a JSON array instead of prose
        config: Mixdepth count and block interval; defaults from the environment
        on_error: Called for each malformed row

    Returns:
        Number of steps explained
    """
    config = config or ExplainConfig.from_env()
    records = []
    estimator = TimeEstimator(config.block_interval)
    count = 0

    for index, step in enumerate(decode_schedule(lines, on_error=on_error), start=1):
        count = index
        if as_json:
            records.append(step.to_record())
        else:
            out.write(explain_step(index, step, config.amtmixdepths))
            estimator.add(step)

    if as_json:
        out.write(dump_json(records) + '\n')
    else:
        out.write(estimator.summary())

    LOGGER.debug('Explained %d schedule steps', count)
    return count
