"""Pydantic models for the randomized data used by a scripted journey."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, model_validator


class UserFixture(BaseModel):
    """Synthetic identity used for one signup/login round trip."""

    username: str
    email: str
    password: str


class UtmParameters(BaseModel):
    """Attribution tuple appended to the landing URL."""

    source: str
    medium: str
    campaign: str
    term: Optional[str] = None

    @model_validator(mode="after")
    def _term_only_for_search(self) -> "UtmParameters":
        if (self.medium == "search") != (self.term is not None):
            raise ValueError("utm term must be set if and only if medium is 'search'")
        return self

    def query_params(self) -> dict[str, str]:
        params = {
            "utm_source": self.source,
            "utm_medium": self.medium,
            "utm_campaign": self.campaign,
        }
        if self.term is not None:
            params["utm_term"] = self.term
        return params


class PlanSelection(BaseModel):
    name: str
    price: float


class Viewport(BaseModel):
    width: int
    height: int


class DeviceProfile(BaseModel):
    """Viewport and user-agent preset for one device variant."""

    device_type: str  # desktop, tablet, mobile
    mobile_type: Optional[str] = None  # iphone, android (mobile only)
    viewport: Viewport
    device_scale_factor: float = 1
    is_mobile: bool = False
    has_touch: bool = False
    user_agent: Optional[str] = None

    @property
    def label(self) -> str:
        return f"{self.device_type}/{self.mobile_type}" if self.mobile_type else self.device_type


class Geolocation(BaseModel):
    """Proxy exit location requested from the session provider."""

    city: str
    country: str
    state: Optional[str] = None

    def to_proxy(self) -> dict:
        return {
            "type": "browserbase",
            "geolocation": self.model_dump(exclude_none=True),
        }
