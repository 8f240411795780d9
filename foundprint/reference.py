"""
Reference Data for FOUNDprint.

Market-share tables and study-derived baseline entropy. All of it is built
once at import time from static values and is never mutated.

Sources:
    Panopticlick valuation engine (POPULATION_STATS / POPULATION_DATA)
    Panopticlick 2010:           https://coveryourtracks.eff.org/static/browser-uniqueness.pdf
    AmIUnique 2016:              https://hal.inria.fr/hal-01285470/document
    Hiding in the Crowd 2018:    https://hal.inria.fr/hal-01718234v2/document
    Steam Hardware Survey:       https://store.steampowered.com/hwsurvey/directx/

Data retrieved: December 2024.
"""

from __future__ import annotations

from .domain import (
    AttributeSpec,
    BaselineCandidate,
    BaselineRecord,
    Difficulty,
    ReferenceTable,
    select_conservative,
)


PANOPTICLICK_ENTROPY_TS = (
    "https://github.com/panopticlick/Panopticlick/blob/main/"
    "packages/valuation-engine/src/entropy.ts"
)
PANOPTICLICK_COMPARISON_TS = (
    "https://github.com/panopticlick/Panopticlick/blob/main/"
    "packages/valuation-engine/src/comparison.ts"
)
PANOPTICLICK_2010 = "https://coveryourtracks.eff.org/static/browser-uniqueness.pdf"
AMIUNIQUE_2016 = "https://hal.inria.fr/hal-01285470/document"
HITC_2018 = "https://hal.inria.fr/hal-01718234v2/document"
STEAM_SURVEY = "https://store.steampowered.com/hwsurvey/directx/"

# Upper bound for display only. Nobody is "1 in 10 billion".
WORLD_POPULATION = 8.3e9


# =============================================================================
# MARKET SHARE TABLES
# =============================================================================

SCREEN_RESOLUTION_TABLE = ReferenceTable(
    source_citation=PANOPTICLICK_ENTROPY_TS,
    source_label="Panopticlick POPULATION_STATS.screenResolutions",
    entries=(
        ("1920x1080", 23),
        ("1366x768", 19),
        ("1536x864", 8),
        ("1440x900", 5),
        ("1280x720", 4),
        ("2560x1440", 4),
        ("1600x900", 3),
        ("1280x800", 3),
        ("3840x2160", 2),
    ),
    default_percent=1.0,
)

BROWSER_TABLE = ReferenceTable(
    source_citation=PANOPTICLICK_COMPARISON_TS,
    source_label="Panopticlick POPULATION_DATA.browsers",
    entries=(
        ("Chrome", 65),
        ("Safari", 18),
        ("Edge", 5),
        ("Firefox", 3),
        ("Opera", 2),
    ),
    default_percent=1.0,
)

# Panopticlick has no GPU data; Steam is gamer-skewed
GPU_TABLE = ReferenceTable(
    source_citation=STEAM_SURVEY,
    source_label="Steam Hardware Survey (fallback)",
    entries=(
        ("NVIDIA GeForce RTX 3060", 8.32),
        ("NVIDIA GeForce RTX 4060", 7.92),
        ("NVIDIA GeForce RTX 3050", 5.92),
        ("NVIDIA GeForce GTX 1650", 5.60),
        ("NVIDIA GeForce RTX 4060 Ti", 5.26),
        ("NVIDIA GeForce RTX 3060 Ti", 4.78),
        ("NVIDIA GeForce RTX 3070", 4.48),
        ("AMD Radeon Graphics", 4.24),
        ("NVIDIA GeForce RTX 4070", 4.14),
        ("NVIDIA GeForce RTX 2060", 3.92),
        ("NVIDIA GeForce GTX 1060", 3.60),
        ("Intel Iris Xe", 3.52),
        ("Intel UHD Graphics", 2.0),
        ("AMD Radeon RX", 2.0),
        ("Apple M1", 1.5),
        ("Apple M2", 1.0),
        ("Apple M3", 0.8),
    ),
    default_percent=0.5,
    note="Panopticlick lacks GPU data; Steam data is gamer-skewed",
)

PIXEL_RATIO_TABLE = ReferenceTable(
    source_citation=PANOPTICLICK_ENTROPY_TS,
    source_label="Panopticlick POPULATION_STATS.pixelRatios",
    entries=(
        ("1", 45),
        ("2", 30),
        ("1.25", 10),
        ("1.5", 8),
        ("3", 3),
        ("2.5", 2),
    ),
    default_percent=2.0,
)

DO_NOT_TRACK_TABLE = ReferenceTable(
    source_citation=PANOPTICLICK_COMPARISON_TS,
    source_label="Panopticlick POPULATION_DATA.privacyTools",
    entries=(
        ("1", 20),      # Enabled
        ("0", 3),       # Explicitly disabled (estimated)
        ("null", 77),   # Not set
    ),
    default_percent=77,
)

CPU_CORES_TABLE = ReferenceTable(
    source_citation=PANOPTICLICK_ENTROPY_TS,
    source_label="Panopticlick POPULATION_STATS.cpuCores",
    entries=(
        ("1", 1),
        ("2", 15),
        ("4", 35),
        ("6", 15),
        ("8", 20),
        ("12", 5),
        ("16", 5),
    ),
    default_percent=4.0,
)

DEVICE_MEMORY_TABLE = ReferenceTable(
    source_citation=PANOPTICLICK_ENTROPY_TS,
    source_label="Panopticlick POPULATION_STATS.deviceMemory",
    entries=(
        ("2", 5),
        ("4", 25),
        ("8", 45),
        ("16", 15),
        ("32", 5),
    ),
    default_percent=5.0,
)

AD_BLOCKER_TABLE = ReferenceTable(
    source_citation=PANOPTICLICK_COMPARISON_TS,
    source_label="Panopticlick POPULATION_DATA.privacyTools",
    entries=(
        ("true", 42),
        ("false", 58),
    ),
    default_percent=1.0,
)

TIMEZONE_TABLE = ReferenceTable(
    source_citation=PANOPTICLICK_ENTROPY_TS,
    source_label="Panopticlick POPULATION_STATS.timezones",
    entries=(
        ("America/New_York", 12),
        ("America/Los_Angeles", 10),
        ("America/Chicago", 8),
        ("Asia/Shanghai", 6),
        ("Europe/London", 5),
        ("Asia/Tokyo", 4),
        ("Europe/Paris", 3),
        ("Europe/Berlin", 3),
    ),
    default_percent=1.0,
)

LANGUAGE_TABLE = ReferenceTable(
    source_citation=PANOPTICLICK_ENTROPY_TS,
    source_label="Panopticlick POPULATION_STATS.languages",
    entries=(
        ("en-US", 35),
        ("zh-CN", 10),
        ("en-GB", 5),
        ("es", 5),
        ("de", 3),
        ("fr", 3),
        ("ja", 3),
    ),
    default_percent=1.0,
)

PLATFORM_TABLE = ReferenceTable(
    source_citation=PANOPTICLICK_ENTROPY_TS,
    source_label="Panopticlick POPULATION_STATS.platforms",
    entries=(
        ("Win32", 70),
        ("MacIntel", 15),
        ("iPhone", 5),
        ("Android", 4),
        ("Linux x86_64", 3),
        ("iPad", 2),
    ),
    default_percent=1.0,
)


# Attribute key -> table used for its direct lookup
REFERENCE_TABLES: dict[str, ReferenceTable] = {
    "screen_resolution": SCREEN_RESOLUTION_TABLE,
    "pixel_ratio": PIXEL_RATIO_TABLE,
    "timezone": TIMEZONE_TABLE,
    "language": LANGUAGE_TABLE,
    "user_agent": BROWSER_TABLE,
    "platform": PLATFORM_TABLE,
    "do_not_track": DO_NOT_TRACK_TABLE,
    "cpu_cores": CPU_CORES_TABLE,
    "device_memory": DEVICE_MEMORY_TABLE,
    "ad_blocker": AD_BLOCKER_TABLE,
    "webgl": GPU_TABLE,
}


# =============================================================================
# BASELINE ENTROPY (conservative selection across studies)
# =============================================================================

def _baseline(
    key: str,
    source_citation: str | None,
    source_label: str,
    note: str,
    *candidates: BaselineCandidate,
) -> BaselineRecord:
    return BaselineRecord(
        attribute_key=key,
        bits=select_conservative(candidates),
        source_citation=source_citation,
        source_label=source_label,
        note=note,
        candidates=candidates,
    )


_C = BaselineCandidate

BASELINES: dict[str, BaselineRecord] = {
    record.attribute_key: record
    for record in (
        _baseline(
            "canvas", HITC_2018, "Hiding in the Crowd 2018 (Table 3)",
            "Conservative estimate; AmIUnique found 8.28 bits",
            _C("Hiding in the Crowd 2018", 8.04),
            _C("AmIUnique 2016", 8.28),
        ),
        _baseline(
            "audio", PANOPTICLICK_ENTROPY_TS, "Panopticlick entropy.ts (code comment)",
            "Based on Panopticlick implementation; no academic baseline available",
            _C("Panopticlick entropy.ts", 10.0),
        ),
        _baseline(
            "webgl_renderer", AMIUNIQUE_2016, "AmIUnique 2016 (Table 2)",
            "Conservative estimate; HitC 2018 found 5.28 bits",
            _C("AmIUnique 2016", 3.41),
            _C("Hiding in the Crowd 2018", 5.28),
        ),
        _baseline(
            "webgl_vendor", HITC_2018, "Hiding in the Crowd 2018 (Table 3)",
            "Conservative estimate; AmIUnique found 2.14 bits",
            _C("AmIUnique 2016", 2.14),
            _C("Hiding in the Crowd 2018", 1.82),
        ),
        _baseline(
            "fonts", HITC_2018, "Hiding in the Crowd 2018 (Table 3)",
            "Conservative estimate; Panopticlick found 13.9 bits",
            _C("Panopticlick 2010", 13.9),
            _C("AmIUnique 2016", 8.38),
            _C("Hiding in the Crowd 2018", 6.97),
        ),
        _baseline(
            "user_agent", HITC_2018, "Hiding in the Crowd 2018 (Table 3)",
            "Conservative estimate; Panopticlick found 10.0 bits",
            _C("Panopticlick 2010", 10.0),
            _C("AmIUnique 2016", 9.78),
            _C("Hiding in the Crowd 2018", 6.32),
        ),
        # HitC 2018 is lower but its sample is 98% French, so one timezone
        # dominates. The lowest unbiased study is used instead.
        _baseline(
            "timezone", PANOPTICLICK_2010, "Panopticlick 2010",
            "HitC 2018 (0.10 bits) excluded due to French geographic bias",
            _C("Panopticlick 2010", 3.04),
            _C("AmIUnique 2016", 3.34),
            _C(
                "Hiding in the Crowd 2018", 0.10,
                excluded_reason="98% French sample biased to a single timezone",
            ),
        ),
        _baseline(
            "language", HITC_2018, "Hiding in the Crowd 2018 (Table 3)",
            "Conservative estimate; AmIUnique found 5.92 bits",
            _C("AmIUnique 2016", 5.92),
            _C("Hiding in the Crowd 2018", 2.56),
        ),
        _baseline(
            "touch_support", PANOPTICLICK_ENTROPY_TS,
            "Panopticlick entropy.ts (calculateTouchPointsEntropy)",
            "Desktop (0 touch) = 1 bit; touch devices = 2-3 bits",
            _C("Panopticlick entropy.ts (desktop)", 1.0),
        ),
        _baseline(
            "connection_type", None, "No public dataset",
            "Estimated; no academic baseline available",
            _C("Estimate", 1.5),
        ),
        _baseline(
            "plugins", HITC_2018, "Hiding in the Crowd 2018 Mobile (Table 3)",
            "Plugins largely deprecated; desktop was 10.28 bits",
            _C("Panopticlick 2010", 15.4),
            _C("AmIUnique 2016", 11.06),
            _C("Hiding in the Crowd 2018 Desktop", 10.28),
            _C("Hiding in the Crowd 2018 Mobile", 0.21),
        ),
        _baseline(
            "do_not_track", AMIUNIQUE_2016, "AmIUnique 2016 (Table 2)",
            "Conservative estimate; HitC 2018 found 1.92 bits",
            _C("AmIUnique 2016", 0.94),
            _C("Hiding in the Crowd 2018", 1.92),
        ),
        _baseline(
            "cookies_enabled", HITC_2018, "Hiding in the Crowd 2018 (Table 3)",
            "Nearly universal; provides no distinguishing information",
            _C("Panopticlick 2010", 0.35),
            _C("AmIUnique 2016", 0.25),
            _C("Hiding in the Crowd 2018", 0.0),
        ),
        _baseline(
            "local_storage", HITC_2018, "Hiding in the Crowd 2018 (Table 3)",
            "Nearly universal; provides minimal distinguishing information",
            _C("AmIUnique 2016", 0.41),
            _C("Hiding in the Crowd 2018", 0.04),
        ),
        _baseline(
            "screen_resolution", PANOPTICLICK_2010, "Panopticlick 2010",
            "Used when resolution not in Panopticlick POPULATION_STATS lookup table",
            _C("Panopticlick 2010", 4.83),
            _C("AmIUnique 2016", 5.21),
            _C("Hiding in the Crowd 2018", 4.83),
        ),
        _baseline(
            "pixel_ratio", PANOPTICLICK_ENTROPY_TS,
            "Panopticlick POPULATION_STATS (estimated for unlisted)",
            "For pixel ratios not in the lookup table",
            _C("Estimate", 2.0),
        ),
        _baseline(
            "platform", PANOPTICLICK_2010, "Panopticlick 2010",
            "Used when platform not in Panopticlick POPULATION_STATS lookup table",
            _C("Panopticlick 2010", 0.56),
            _C("AmIUnique 2016", 1.06),
        ),
        _baseline(
            "cpu_cores", PANOPTICLICK_ENTROPY_TS,
            "Panopticlick POPULATION_STATS (estimated for unlisted)",
            "For core counts not in the lookup table",
            _C("Estimate", 3.0),
        ),
        _baseline(
            "device_memory", PANOPTICLICK_ENTROPY_TS,
            "Panopticlick POPULATION_STATS (estimated for unlisted)",
            "For memory sizes not in the lookup table",
            _C("Estimate", 3.0),
        ),
        # log2(100 / 58): the majority share, so the least identifying case
        _baseline(
            "ad_blocker", PANOPTICLICK_COMPARISON_TS,
            "Panopticlick POPULATION_DATA.privacyTools",
            "Derived from the 58% of users without an ad blocker",
            _C("Panopticlick privacyTools (no blocker)", 0.79),
        ),
    )
}

# Two-part observations whose entropy is the sum of named baselines
COMBINATION_RULES: dict[str, tuple[str, ...]] = {
    "webgl": ("webgl_renderer", "webgl_vendor"),
}


# =============================================================================
# ATTRIBUTES
# =============================================================================

_A = AttributeSpec
_E, _M, _H = Difficulty.EASY, Difficulty.MEDIUM, Difficulty.HARD

ATTRIBUTES: dict[str, AttributeSpec] = {
    spec.key: spec
    for spec in (
        _A("screen_resolution", "Screen Resolution", _H, "Different monitor"),
        _A("pixel_ratio", "Pixel Ratio", _H, "Different display"),
        _A("timezone", "Timezone", _E, "OS settings"),
        _A("language", "Language", _E, "Browser settings"),
        _A("user_agent", "Browser/OS", _M, "Browser extension"),
        _A("platform", "Platform", _M, "Browser extension"),
        _A("do_not_track", "Do Not Track", _E, "Browser settings"),
        _A("cpu_cores", "CPU Cores", _H, "Different device"),
        _A("device_memory", "Device Memory", _H, "Different device"),
        _A("touch_support", "Touch Support", _H, "Different device"),
        _A("ad_blocker", "Ad Blocker", _E, "Install/remove extension"),
        _A("connection_type", "Connection Type", _M, "Different network"),
        _A("webgl", "WebGL", _H, "Different GPU, or disable in browser settings"),
        _A("fonts", "Installed Fonts", _M, "Install/remove fonts"),
        _A("canvas", "Canvas Fingerprint", _H,
           "Different browser/GPU, or disable via extension"),
        _A("audio", "Audio Fingerprint", _H,
           "Different browser/audio hardware, or disable via extension"),
    )
}

# Processing order: environment facts, then hardware, then rendering techniques
ATTRIBUTE_ORDER: tuple[str, ...] = (
    "screen_resolution",
    "pixel_ratio",
    "timezone",
    "language",
    "user_agent",
    "platform",
    "do_not_track",
    "cpu_cores",
    "device_memory",
    "touch_support",
    "ad_blocker",
    "connection_type",
    "webgl",
    "fonts",
    "canvas",
    "audio",
)
