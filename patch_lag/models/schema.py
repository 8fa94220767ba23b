"""Pydantic v2 schema definitions for patch-lag."""

from __future__ import annotations

import datetime
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


class OSIdentity(_Frozen):
    product_name: str
    version_label: str
    build: str  # "<major>.<UBR>", e.g. "22621.1992"

    @property
    def major_build(self) -> str:
        return self.build.split(".", 1)[0]


class CatalogEntry(_Frozen):
    product_name: str
    version_label: str
    initial_build: Optional[str] = None
    initial_release_date: datetime.date
    history_uri: str


class RawLinkElement(_Frozen):
    label: str = ""
    href: str = ""
    css_class: str = ""
    markup: str = ""


class UpdateRecord(_Frozen):
    name: str
    kb: str
    info_url: str
    build: str
    release_date: datetime.date


class BaselineRecord(_Frozen):
    """Synthetic installed record for a device still on the release baseline."""

    release_date: datetime.date


class Resolution(_Frozen):
    identity: OSIdentity
    entry: CatalogEntry
    installed: Union[UpdateRecord, BaselineRecord]
    latest: Optional[UpdateRecord] = None


class LagResult(_Frozen):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    number_of_days_behind_lcu: int = Field(alias="numberOfDaysBehindLCU")
