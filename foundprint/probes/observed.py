"""
Profile Probes for FOUNDprint.

Replays an already-observed device profile through the engine. The profile
is a flat JSON object of raw readings, as a browser would report them:

    screen_width, screen_height   CSS pixels
    device_pixel_ratio            window.devicePixelRatio
    timezone, utc_offset_minutes  IANA name, minutes ahead of UTC
    language, languages           primary language, preference list
    platform, user_agent
    do_not_track                  "1", "0" or null
    hardware_concurrency, device_memory, max_touch_points
    ad_blocker                    true / false
    connection_type               effective type, e.g. "4g"
    webgl                         {"vendor", "renderer", "debug_info"}
    fonts                         detected font names
    canvas                        canvas data URL
    audio_signature               summed compressor output

A key that is absent means the reading was not available, and the probe
reports unavailable. Each probe applies the lookup decision its attribute
needs; the measurement itself happened elsewhere.
"""

from __future__ import annotations

import hashlib
import json
import re
from functools import partial
from pathlib import Path
from typing import Any, Callable, Optional

from ..config import EngineConfig
from ..resolution.lookup import (
    lookup_from_baseline,
    lookup_from_table,
    resolve,
    resolve_with_baseline,
)
from ..resolution.pixel_ratio import Confidence, disambiguate
from .base import FunctionProbe, Probe, ProbeResult


Profile = dict[str, Any]

_MISSING = object()

# Fonts worth naming in the message
DISTINCTIVE_FONTS = (
    "Fira Code", "JetBrains Mono", "Monaco", "Consolas", "Comic Sans MS",
    "SF Pro", "Roboto", "Ubuntu", "Helvetica Neue",
)


# =============================================================================
# PARSING HELPERS
# =============================================================================

def parse_user_agent(ua: str) -> tuple[str, str]:
    """
    Extract (browser, os) from a user agent string.

    Edge is checked before Chrome and iOS before macOS, since their UA
    strings contain the other's tokens.
    """
    browser = "Unknown Browser"
    os_name = "Unknown OS"

    if "Firefox/" in ua:
        match = re.search(r"Firefox/(\d+)", ua)
        browser = "Firefox " + (match.group(1) if match else "")
    elif "Edg/" in ua:
        match = re.search(r"Edg/(\d+)", ua)
        browser = "Edge " + (match.group(1) if match else "")
    elif "Chrome/" in ua:
        match = re.search(r"Chrome/(\d+)", ua)
        browser = "Chrome " + (match.group(1) if match else "")
    elif "Safari/" in ua and "Chrome" not in ua:
        match = re.search(r"Version/(\d+)", ua)
        browser = "Safari " + (match.group(1) if match else "")

    if "iPhone" in ua or "iPad" in ua:
        os_name = "iOS"
    elif "Windows NT 10.0" in ua:
        os_name = "Windows 10/11" if "Windows NT 10.0; Win64" in ua else "Windows 10"
    elif "Windows NT" in ua:
        os_name = "Windows"
    elif "Mac OS X" in ua:
        match = re.search(r"Mac OS X (\d+[._]\d+)", ua)
        os_name = "macOS" + (" " + match.group(1).replace("_", ".") if match else "")
    elif "Linux" in ua:
        os_name = "Android" if "Android" in ua else "Linux"

    return browser.strip(), os_name


def describe_timezone(tz: str, utc_offset_minutes: Optional[int] = None) -> tuple[str, str]:
    """
    Readable timezone name and UTC offset.

    "America/New_York", -300 -> ("New York", "UTC-5")
    """
    readable = tz.replace("_", " ").split("/")[-1]
    if utc_offset_minutes is None:
        return readable, "UTC offset unknown"

    sign = "+" if utc_offset_minutes >= 0 else "-"
    hours, minutes = divmod(abs(int(utc_offset_minutes)), 60)
    offset = f"UTC{sign}{hours}" + (f":{minutes:02d}" if minutes else "")
    return readable, offset


def short_hash(data: str) -> str:
    """Display hash for rendered artifacts."""
    return hashlib.md5(data.encode("utf-8")).hexdigest()


def _format_ratio(value: float) -> str:
    return f"{value:g}"


# =============================================================================
# DETECTORS
# =============================================================================

def detect_screen_resolution(profile: Profile, config: EngineConfig) -> Optional[ProbeResult]:
    width = profile.get("screen_width")
    height = profile.get("screen_height")
    if not width or not height:
        return None

    # Physical pixels, not CSS pixels
    dpr = profile.get("device_pixel_ratio") or 1
    width = round(width * dpr)
    height = round(height * dpr)
    resolution = f"{width}x{height}"

    lookup = resolve_with_baseline(
        config.tables["screen_resolution"],
        config.baselines.get("screen_resolution"),
        resolution,
    )
    return ProbeResult(
        value=resolution,
        message=f"Your screen resolution is {width}×{height}.",
        lookup=lookup,
    )


def detect_pixel_ratio(profile: Profile, config: EngineConfig) -> Optional[ProbeResult]:
    raw = profile.get("device_pixel_ratio", _MISSING)
    if raw is _MISSING:
        return None

    analysis = disambiguate(raw)
    shown = _format_ratio(analysis.display_value)
    desc = analysis.density_description

    if not analysis.is_scaled:
        message = f"Your display has a {shown}x pixel ratio ({desc})."
    elif analysis.confidence == Confidence.MEDIUM:
        message = (
            f"Your display has a {shown}x pixel ratio "
            f"({desc}, likely browser zoom ~{analysis.scale_factor_percent}%)."
        )
    else:
        message = (
            f"Your display has a {shown}x pixel ratio "
            f"({desc}, unusual value - may be affected by zoom)."
        )

    # The actual ratio goes into the hash; the bucket drives the lookup
    lookup = resolve_with_baseline(
        config.tables["pixel_ratio"],
        config.baselines.get("pixel_ratio"),
        analysis.matched_bucket_key,
    )
    return ProbeResult(value=analysis.display_value, message=message, lookup=lookup)


def detect_timezone(profile: Profile, config: EngineConfig) -> Optional[ProbeResult]:
    tz = profile.get("timezone")
    if not tz:
        return None

    readable, offset = describe_timezone(tz, profile.get("utc_offset_minutes"))
    lookup = resolve_with_baseline(
        config.tables["timezone"], config.baselines.get("timezone"), tz,
    )
    return ProbeResult(
        value=tz,
        message=f"You're in the {readable} timezone ({offset}).",
        lookup=lookup,
    )


def detect_language(profile: Profile, config: EngineConfig) -> Optional[ProbeResult]:
    lang = profile.get("language")
    if not lang:
        return None

    count = len(profile.get("languages") or [lang])
    extra = f" (with {count} language preferences)" if count > 1 else ""
    lookup = resolve_with_baseline(
        config.tables["language"], config.baselines.get("language"), lang,
    )
    return ProbeResult(
        value=lang,
        message=f"Your primary language is {lang}{extra}.",
        lookup=lookup,
    )


def detect_user_agent(profile: Profile, config: EngineConfig) -> Optional[ProbeResult]:
    ua = profile.get("user_agent")
    if not ua:
        return None

    browser, os_name = parse_user_agent(ua)
    family = browser.split(" ")[0]
    lookup = resolve_with_baseline(
        config.tables["user_agent"], config.baselines.get("user_agent"), family,
    )
    return ProbeResult(
        value=ua,
        message=f"You're running {browser} on {os_name}.",
        lookup=lookup,
    )


def detect_platform(profile: Profile, config: EngineConfig) -> Optional[ProbeResult]:
    platform = profile.get("platform")
    if not platform:
        return None

    lookup = resolve_with_baseline(
        config.tables["platform"], config.baselines.get("platform"), platform,
    )
    return ProbeResult(
        value=platform,
        message=f"Your platform reports as {platform}.",
        lookup=lookup,
    )


def detect_do_not_track(profile: Profile, config: EngineConfig) -> Optional[ProbeResult]:
    dnt = profile.get("do_not_track", _MISSING)
    if dnt is _MISSING:
        return None

    dnt = None if dnt is None else str(dnt)
    if dnt == "1":
        status, irony = "enabled", " Ironically, this makes you more identifiable."
        key = "1"
    elif dnt == "0":
        status, irony = "explicitly disabled", " Few users bother to disable it explicitly."
        key = "0"
    else:
        status, irony = "not set", ""
        key = "null"

    table = config.tables["do_not_track"]
    return ProbeResult(
        value=dnt,
        message=f"Your Do Not Track setting is {status}.{irony}",
        lookup=lookup_from_table(table, resolve(table, key)),
    )


def _detect_hardware_count(
    profile: Profile,
    config: EngineConfig,
    profile_key: str,
    attribute_key: str,
    describe: Callable[[Any], str],
) -> Optional[ProbeResult]:
    count = profile.get(profile_key)
    if not count:
        return None

    lookup = resolve_with_baseline(
        config.tables[attribute_key], config.baselines.get(attribute_key), count,
    )
    return ProbeResult(value=count, message=describe(count), lookup=lookup)


detect_cpu_cores = partial(
    _detect_hardware_count,
    profile_key="hardware_concurrency",
    attribute_key="cpu_cores",
    describe=lambda n: f"Your device has {n} CPU cores.",
)

detect_device_memory = partial(
    _detect_hardware_count,
    profile_key="device_memory",
    attribute_key="device_memory",
    describe=lambda n: f"Your device reports {_format_ratio(n)}GB of RAM.",
)


def detect_touch_support(profile: Profile, config: EngineConfig) -> Optional[ProbeResult]:
    points = profile.get("max_touch_points", _MISSING)
    if points is _MISSING:
        return None

    points = points or 0
    if points == 0:
        desc = "no touch support (desktop)"
    elif points <= 2:
        desc = "basic touch support"
    else:
        desc = f"multi-touch support ({points} points)"

    return ProbeResult(
        value=points,
        message=f"Your device has {desc}.",
        lookup=lookup_from_baseline(config.baselines["touch_support"]),
    )


def detect_ad_blocker(profile: Profile, config: EngineConfig) -> Optional[ProbeResult]:
    blocked = profile.get("ad_blocker", _MISSING)
    if blocked is _MISSING or blocked is None:
        return None

    blocked = bool(blocked)
    table = config.tables["ad_blocker"]
    result = resolve(table, blocked)
    share = f"{result.percent:g}%"
    if blocked:
        message = f"You have an ad blocker installed. About {share} of users do."
    else:
        message = f"You don't have an ad blocker. About {share} of users don't either."

    return ProbeResult(value=blocked, message=message, lookup=lookup_from_table(table, result))


def detect_connection_type(profile: Profile, config: EngineConfig) -> Optional[ProbeResult]:
    conn = profile.get("connection_type")
    if not conn:
        return None

    return ProbeResult(
        value=conn,
        message=f"Your connection type is {str(conn).upper()}.",
        lookup=lookup_from_baseline(config.baselines["connection_type"]),
    )


def detect_webgl(profile: Profile, config: EngineConfig) -> Optional[ProbeResult]:
    webgl = profile.get("webgl")
    if not webgl or not webgl.get("renderer"):
        return None

    renderer = webgl["renderer"]
    renderer_baseline = config.baselines["webgl_renderer"]

    # Without the debug extension only the masked renderer is visible
    if not webgl.get("debug_info", True) or not webgl.get("vendor"):
        return ProbeResult(
            value=renderer,
            message=f"Your graphics renderer is {renderer}.",
            lookup=lookup_from_baseline(
                renderer_baseline,
                bits=renderer_baseline.bits * 0.5,
                note="Reduced entropy - WebGL debug info not available",
            ),
        )

    vendor = webgl["vendor"]
    clean = renderer
    if "ANGLE" in renderer:
        match = re.search(r"ANGLE \([^,]+, ([^,]+)", renderer)
        if match:
            clean = match.group(1).strip()

    value = {"vendor": vendor, "renderer": renderer}
    message = f"Your graphics card is {clean}."
    table = config.tables["webgl"]
    result = resolve(table, renderer)
    if not result.estimated:
        return ProbeResult(value=value, message=message, lookup=lookup_from_table(table, result))

    # Vendor and renderer are separate signals; both baselines count
    parts = config.combination_rules.get("webgl", ())
    combined = sum(config.baselines[part].bits for part in parts)
    return ProbeResult(
        value=value,
        message=message,
        lookup=lookup_from_baseline(renderer_baseline, bits=combined),
    )


def detect_fonts(profile: Profile, config: EngineConfig) -> Optional[ProbeResult]:
    detected = list(profile.get("fonts") or [])
    if not detected:
        return None

    interesting = [f for f in detected if f in DISTINCTIVE_FONTS]
    if len(interesting) >= 2:
        highlight = f", including {interesting[0]} and {interesting[1]}"
    elif interesting:
        highlight = f", including {interesting[0]}"
    else:
        highlight = ""

    return ProbeResult(
        value=detected,
        message=f"You have {len(detected)} distinctive fonts installed{highlight}.",
        lookup=lookup_from_baseline(config.baselines["fonts"]),
    )


def detect_canvas(profile: Profile, config: EngineConfig) -> Optional[ProbeResult]:
    data_url = profile.get("canvas")
    if not data_url:
        return None

    return ProbeResult(
        value=data_url,
        message=f"Your browser renders invisible test shapes in a unique way ({short_hash(data_url)}).",
        lookup=lookup_from_baseline(config.baselines["canvas"]),
    )


def detect_audio(profile: Profile, config: EngineConfig) -> Optional[ProbeResult]:
    signature = profile.get("audio_signature")
    if signature is None:
        return None

    signature = round(float(signature), 4)
    return ProbeResult(
        value=signature,
        message=(
            "Your audio hardware processes sound with a distinct signature "
            f"({short_hash(repr(signature))})."
        ),
        lookup=lookup_from_baseline(config.baselines["audio"]),
    )


DETECTORS: dict[str, Callable[[Profile, EngineConfig], Optional[ProbeResult]]] = {
    "screen_resolution": detect_screen_resolution,
    "pixel_ratio": detect_pixel_ratio,
    "timezone": detect_timezone,
    "language": detect_language,
    "user_agent": detect_user_agent,
    "platform": detect_platform,
    "do_not_track": detect_do_not_track,
    "cpu_cores": detect_cpu_cores,
    "device_memory": detect_device_memory,
    "touch_support": detect_touch_support,
    "ad_blocker": detect_ad_blocker,
    "connection_type": detect_connection_type,
    "webgl": detect_webgl,
    "fonts": detect_fonts,
    "canvas": detect_canvas,
    "audio": detect_audio,
}


# =============================================================================
# PROFILE LOADING
# =============================================================================

SAMPLE_PROFILE: Profile = {
    "screen_width": 1536,
    "screen_height": 864,
    "device_pixel_ratio": 1.25,
    "timezone": "Europe/Berlin",
    "utc_offset_minutes": 60,
    "language": "de-DE",
    "languages": ["de-DE", "de", "en-US", "en"],
    "platform": "Win32",
    "user_agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:133.0) "
        "Gecko/20100101 Firefox/133.0"
    ),
    "do_not_track": "1",
    "hardware_concurrency": 12,
    "device_memory": 8,
    "max_touch_points": 0,
    "ad_blocker": True,
    "webgl": {
        "vendor": "Google Inc. (NVIDIA)",
        "renderer": "ANGLE (NVIDIA, NVIDIA GeForce RTX 3070 Direct3D11 vs_5_0 ps_5_0, D3D11)",
        "debug_info": True,
    },
    "fonts": [
        "Arial", "Calibri", "Cambria", "Consolas", "Courier New", "Georgia",
        "Segoe UI", "Tahoma", "Times New Roman", "Verdana", "Fira Code",
        "JetBrains Mono",
    ],
    "canvas": "data:image/png;base64,iVBORw0KGgoAAAANSUhEUgAAARgAAAA8CAYAAAC9xKUYAAAAAXNSR0IArs4c6QAA",
    "audio_signature": 35.7383295930922,
}


def load_profile(path: str | Path) -> Profile:
    """Read a device profile from a JSON file."""
    with open(path, "r", encoding="utf-8") as fh:
        profile = json.load(fh)
    if not isinstance(profile, dict):
        raise ValueError(f"Profile must be a JSON object, got {type(profile).__name__}")
    return profile


def build_profile_probes(profile: Profile, config: EngineConfig) -> dict[str, Probe]:
    """One probe per configured attribute that has a detector."""
    probes: dict[str, Probe] = {}
    for key in config.attribute_order:
        detector = DETECTORS.get(key)
        if detector is None:
            continue
        probes[key] = FunctionProbe(
            config.spec_for(key),
            partial(detector, profile, config),
        )
    return probes
