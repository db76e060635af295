"""Coinjoin tumbler schedules: model, CSV codec and explanations."""

from .config import ExplainConfig
from .csv_utils import (
    ScheduleParseError,
    decode_schedule,
    encode_schedule,
    encode_step,
    read_schedule,
)
from .explain_utils import (
    TimeEstimator,
    estimate_minutes,
    explain_schedule,
    explain_step,
)
from .schedule_utils import (
    ADDRASK,
    INTERNAL,
    NO_ROUNDING,
    Broadcast,
    Completed,
    Pending,
    Schedule,
    ScheduleStep,
    validate_amtmixdepths,
    validate_step,
)

__all__ = [
    'ADDRASK',
    'INTERNAL',
    'NO_ROUNDING',
    'Broadcast',
    'Completed',
    'Pending',
    'Schedule',
    'ScheduleStep',
    'validate_amtmixdepths',
    'validate_step',
    'ScheduleParseError',
    'decode_schedule',
    'encode_schedule',
    'encode_step',
    'read_schedule',
    'TimeEstimator',
    'estimate_minutes',
    'explain_schedule',
    'explain_step',
    'ExplainConfig',
]
