"""Schedule step model and validation rules."""

import math
from typing import Annotated, Literal, Union

import pydantic

INTERNAL = 'INTERNAL'
ADDRASK = 'addrask'
NO_ROUNDING = 16
MIN_MIXDEPTHS = 5


def _is_number(v) -> bool:
    return isinstance(v, (int, float)) and not isinstance(v, bool) and math.isfinite(v)


def _is_integer(v) -> bool:
    return _is_number(v) and float(v).is_integer()


def normalize_number(v: float) -> int | float:
    """Return integral numbers as ``int`` so they serialize as ``30``, not ``30.0``."""
    if isinstance(v, float) and v.is_integer():
        return int(v)
    return v


class Pending(pydantic.BaseModel):
    kind: Literal['pending'] = 'pending'


class Completed(pydantic.BaseModel):
    kind: Literal['completed'] = 'completed'


class Broadcast(pydantic.BaseModel):
    kind: Literal['broadcast'] = 'broadcast'
    txid: str = pydantic.Field(..., min_length=1)


# Pydantic selects the variant from ``kind``.
StepState = Annotated[
    Union[Pending, Completed, Broadcast],
    pydantic.Field(discriminator='kind'),
]

PENDING_TOKEN = '0'
COMPLETED_TOKEN = '1'


def parse_state(token: str) -> Pending | Completed | Broadcast:
    """
    Turn the persisted state column into a state variant.

    ``0`` is pending, ``1`` is completed and any other non-empty string is
    the txid of a broadcast but unconfirmed transaction.
    """
    token = token.strip()
    if token == PENDING_TOKEN:
        return Pending()
    if token == COMPLETED_TOKEN:
        return Completed()
    if not token:
        raise ValueError('state cannot be empty')
    return Broadcast(txid=token)


def format_state(state: Pending | Completed | Broadcast) -> str:
    if isinstance(state, Completed):
        return COMPLETED_TOKEN
    if isinstance(state, Broadcast):
        return state.txid
    return PENDING_TOKEN


class ScheduleStep(pydantic.BaseModel):
    mixdepth: int
    portion: int | float
    counterparties: int
    address: str = INTERNAL
    wait: int | float
    rounding: int = NO_ROUNDING
    state: StepState = pydantic.Field(default_factory=Pending)

    model_config = pydantic.ConfigDict(extra='forbid')

    @pydantic.field_validator('mixdepth', mode='before')
    @classmethod
    def validate_mixdepth(cls, v):
        if not _is_integer(v) or v < 0:
            raise ValueError(f'{v} is not a valid mixdepth')
        return int(v)

    @pydantic.field_validator('portion', mode='before')
    @classmethod
    def validate_portion(cls, v):
        if not _is_number(v) or v < 0 or (v > 1 and not _is_integer(v)):
            raise ValueError(f'{v} is not a valid portion')
        return normalize_number(v)

    @pydantic.field_validator('counterparties', mode='before')
    @classmethod
    def validate_counterparties(cls, v):
        if not _is_integer(v) or v < 1:
            raise ValueError(f'{v} is not a valid counterparty count')
        return int(v)

    @pydantic.field_validator('address')
    @classmethod
    def validate_address(cls, v: str) -> str:
        if not v:
            raise ValueError('address cannot be empty')
        if '\n' in v or '\r' in v:
            raise ValueError('address cannot contain line breaks')
        return v

    @pydantic.field_validator('wait', mode='before')
    @classmethod
    def validate_wait(cls, v):
        if not _is_number(v):
            raise ValueError(f'{v} is not a valid wait')
        if v < 0:
            raise ValueError(f'negative wait of {v} minutes is not allowed')
        return normalize_number(v)

    @pydantic.field_validator('rounding', mode='before')
    @classmethod
    def validate_rounding(cls, v):
        if not _is_integer(v) or not 0 <= v <= NO_ROUNDING:
            raise ValueError(f'{v} is not a valid rounding')
        return int(v)

    @property
    def is_sweep(self) -> bool:
        return self.portion == 0

    @property
    def is_completed(self) -> bool:
        return isinstance(self.state, Completed)

    @property
    def txid(self) -> str | None:
        if isinstance(self.state, Broadcast):
            return self.state.txid
        return None

    def destination(self, amtmixdepths: int = MIN_MIXDEPTHS) -> int | str | None:
        """
        Resolve where this step sends its funds.

        Returns the destination mixdepth for ``INTERNAL``, ``None`` for
        ``addrask`` (the address is asked for when the step runs) and the
        literal address otherwise.
        """
        if self.address == INTERNAL:
            return (self.mixdepth + 1) % amtmixdepths
        if self.address == ADDRASK:
            return None
        return self.address

    def to_record(self) -> dict:
        """Fields verbatim plus the derived ``completed`` flag and optional ``txid``."""
        record = {
            'mixdepth': self.mixdepth,
            'portion': self.portion,
            'counterparties': self.counterparties,
            'address': self.address,
            'wait': self.wait,
            'rounding': self.rounding,
            'completed': self.is_completed,
        }
        if self.txid is not None:
            record['txid'] = self.txid
        return record


class Schedule(pydantic.BaseModel):
    steps: list[ScheduleStep] = pydantic.Field(default_factory=list)

    def to_records(self) -> list[dict]:
        return [step.to_record() for step in self.steps]


def validate_step(mixdepth, portion, counterparties, address=INTERNAL, wait=0,
                  rounding=NO_ROUNDING) -> ScheduleStep:
    """
    Validate the editable fields of a prospective step.

    Raises:
        pydantic.ValidationError: if any field is out of range
    """
    return ScheduleStep(
        mixdepth=mixdepth,
        portion=portion,
        counterparties=counterparties,
        address=address,
        wait=wait,
        rounding=rounding,
    )


def validate_amtmixdepths(v):
    if not _is_integer(v) or v < MIN_MIXDEPTHS:
        raise ValueError(f'{v} is not a valid mixdepth count')
    return int(v)


def describe_validation_error(exc: pydantic.ValidationError) -> str:
    """Join the messages of a validation error without pydantic's prefixes."""
    messages = []
    for error in exc.errors():
        cause = error.get('ctx', {}).get('error')
        messages.append(str(cause) if cause is not None else error['msg'])
    return '; '.join(messages)
