"""Configuration for explaining schedules."""

import logging
import os

import pydantic

from .schedule_utils import MIN_MIXDEPTHS, validate_amtmixdepths

LOGGER = logging.getLogger(__name__)

DEFAULT_MIXDEPTHS = MIN_MIXDEPTHS
# Average minutes between blocks, i.e. the expected wait for one confirmation.
DEFAULT_BLOCK_INTERVAL = 10

AMTMIXDEPTHS_ENV = 'TUMBLER_AMTMIXDEPTHS'
BLOCK_INTERVAL_ENV = 'TUMBLER_BLOCK_INTERVAL'


class ExplainConfig(pydantic.BaseModel):
    """
    Settings used when explaining a schedule.

    Values are resolved in order: explicit overrides, then the
    ``TUMBLER_AMTMIXDEPTHS`` / ``TUMBLER_BLOCK_INTERVAL`` environment
    variables, then the defaults.
    """

    amtmixdepths: int = DEFAULT_MIXDEPTHS
    block_interval: float = pydantic.Field(default=DEFAULT_BLOCK_INTERVAL, gt=0)

    model_config = pydantic.ConfigDict(extra='forbid')

    @pydantic.field_validator('amtmixdepths', mode='before')
    @classmethod
    def check_amtmixdepths(cls, v):
        return validate_amtmixdepths(v)

    @classmethod
    def from_env(cls, **overrides) -> 'ExplainConfig':
        values = {}
        raw_mixdepths = os.environ.get(AMTMIXDEPTHS_ENV)
        if raw_mixdepths:
            values['amtmixdepths'] = _parse_env_number(AMTMIXDEPTHS_ENV, raw_mixdepths)
        raw_interval = os.environ.get(BLOCK_INTERVAL_ENV)
        if raw_interval:
            values['block_interval'] = _parse_env_number(BLOCK_INTERVAL_ENV, raw_interval)

        values.update({k: v for k, v in overrides.items() if v is not None})
        LOGGER.debug('Explain config resolved to %s', values)
        return cls(**values)


def _parse_env_number(name: str, raw: str) -> float:
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f'{name} must be a number, got {raw!r}') from None
