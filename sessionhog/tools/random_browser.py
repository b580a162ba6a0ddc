"""Device profiles and proxy locations drawn per run."""

from __future__ import annotations

import random

from ..models.fixtures import DeviceProfile, Geolocation, Viewport

DEVICE_TYPES = ["desktop", "tablet", "mobile"]
MOBILE_TYPES = ["iphone", "android"]

DEVICE_PROFILES = {
    "desktop": DeviceProfile(
        device_type="desktop",
        viewport=Viewport(width=1920, height=1080),
        device_scale_factor=1,
    ),
    "tablet": DeviceProfile(
        device_type="tablet",
        viewport=Viewport(width=1024, height=768),
        device_scale_factor=2,
        is_mobile=True,
        has_touch=True,
    ),
    "iphone": DeviceProfile(
        device_type="mobile",
        mobile_type="iphone",
        viewport=Viewport(width=390, height=844),
        device_scale_factor=3,
        is_mobile=True,
        has_touch=True,
        user_agent="Mozilla/5.0 (iPhone; CPU iPhone OS 14_4 like Mac OS X)",
    ),
    "android": DeviceProfile(
        device_type="mobile",
        mobile_type="android",
        viewport=Viewport(width=393, height=851),
        device_scale_factor=2.75,
        is_mobile=True,
        has_touch=True,
        user_agent="Mozilla/5.0 (Linux; Android 12; Pixel 6)",
    ),
}

LOCATIONS = [
    Geolocation(city="NEW_YORK", state="NY", country="US"),
    Geolocation(city="LOS_ANGELES", state="CA", country="US"),
    Geolocation(city="SAN_FRANCISCO", state="CA", country="US"),
    Geolocation(city="CHICAGO", state="IL", country="US"),
    Geolocation(city="AUSTIN", state="TX", country="US"),
    Geolocation(city="SEATTLE", state="WA", country="US"),
    Geolocation(city="DENVER", state="CO", country="US"),
    Geolocation(city="MIAMI", state="FL", country="US"),
    Geolocation(city="LONDON", country="GB"),
    Geolocation(city="TORONTO", country="CA"),
    Geolocation(city="BERLIN", country="DE"),
    Geolocation(city="SYDNEY", country="AU"),
]


def randomize_browser() -> DeviceProfile:
    """Pick a device category uniformly, then a handset for mobile."""
    device_type = random.choice(DEVICE_TYPES)
    if device_type == "mobile":
        return DEVICE_PROFILES[random.choice(MOBILE_TYPES)]
    return DEVICE_PROFILES[device_type]


def randomize_geolocation() -> Geolocation:
    return random.choice(LOCATIONS)
