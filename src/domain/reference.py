from __future__ import annotations

from typing import Annotated, NewType

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer

Symbol = NewType("Symbol", str)

E9 = 10**9
E18 = 10**18
U64_MAX = 2**64 - 1
U128_MAX = 2**128 - 1

NUMERAIRE = Symbol("USD")

Uint64 = Annotated[int, Field(ge=0, le=U64_MAX)]
# Wide unsigned values travel as decimal strings on the wire.
Uint128 = Annotated[int, Field(ge=0, le=U128_MAX), PlainSerializer(str, return_type=str, when_used="json")]


class RateRecord(BaseModel):
    """Latest attested rate for one symbol.

    ``resolve_time == 0`` marks a record that was never resolved; readers treat
    it as missing.
    """

    model_config = ConfigDict(frozen=True)

    rate: Uint64
    resolve_time: Uint64
    request_id: Uint64

    @property
    def is_resolved(self) -> bool:
        return self.resolve_time > 0


class ReferenceState(BaseModel):
    refs: dict[str, RateRecord] = Field(default_factory=dict)


class RateSnapshot(BaseModel):
    model_config = ConfigDict(frozen=True)

    rate: Uint128
    last_update: Uint128


class ReferenceData(BaseModel):
    model_config = ConfigDict(frozen=True)

    rate: Uint128
    last_updated_base: Uint128
    last_updated_quote: Uint128
