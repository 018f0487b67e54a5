"""Physical environment presets for creature analysis."""

from __future__ import annotations

import sys
from dataclasses import dataclass, replace
from typing import Callable

_SURFACE_PRESSURE_PA = 101325.0


@dataclass(frozen=True)
class Environment:
    """The fluid a creature lives in, and the gravity and temperature it lives under."""

    fluid_density_kg_m3: float
    fluid_viscosity_pa_s: float
    gravity_m_s2: float
    fluid_pressure_pa: float
    temperature_k: float


def earth_air() -> Environment:
    """Earth baseline."""
    return Environment(
        fluid_density_kg_m3=1.225,
        fluid_viscosity_pa_s=1.81e-5,
        gravity_m_s2=9.81,
        fluid_pressure_pa=_SURFACE_PRESSURE_PA + 1025.0 * 9.81 * 30.0,
        temperature_k=293.15,
    )


def earth_ocean() -> Environment:
    """Temperate Earth sea water at 30 m depth."""
    return Environment(
        fluid_density_kg_m3=1025.0,
        fluid_viscosity_pa_s=0.00107,
        gravity_m_s2=9.81,
        fluid_pressure_pa=_SURFACE_PRESSURE_PA + 1025.0 * 9.81 * 30.0,
        temperature_k=293.15,
    )


def proxima_centauri_b() -> Environment:
    """Proxima Centauri b: 1.27 g, cold, possibly water under ice."""
    return Environment(
        fluid_density_kg_m3=1.4,
        fluid_viscosity_pa_s=1.85e-5,
        gravity_m_s2=12.46,
        fluid_pressure_pa=150000.0 + 1030.0 * 12.46 * 50.0,
        temperature_k=278.15,
    )


def trappist_1e() -> Environment:
    """TRAPPIST-1e: Earth-like mass, moderate ocean world."""
    return Environment(
        fluid_density_kg_m3=1.3,
        fluid_viscosity_pa_s=1.82e-5,
        gravity_m_s2=9.12,
        fluid_pressure_pa=105000.0 + 1015.0 * 9.12 * 40.0,
        temperature_k=288.15,
    )


def kepler_442b() -> Environment:
    """Kepler-442b: super-Earth with a thicker atmosphere and deep oceans."""
    return Environment(
        fluid_density_kg_m3=1.8,
        fluid_viscosity_pa_s=1.95e-5,
        gravity_m_s2=13.25,
        fluid_pressure_pa=135000.0 + 1050.0 * 13.25 * 60.0,
        temperature_k=283.15,
    )


def lhs_1140b() -> Environment:
    """LHS 1140 b: dense atmosphere, high-pressure water world."""
    return Environment(
        fluid_density_kg_m3=2.1,
        fluid_viscosity_pa_s=2.0e-5,
        gravity_m_s2=17.15,
        fluid_pressure_pa=180000.0 + 1045.0 * 17.15 * 45.0,
        temperature_k=280.15,
    )


def kepler_62f() -> Environment:
    """Kepler-62f: low gravity, thinner atmosphere, warm."""
    return Environment(
        fluid_density_kg_m3=1.0,
        fluid_viscosity_pa_s=1.75e-5,
        gravity_m_s2=7.35,
        fluid_pressure_pa=95000.0 + 1010.0 * 7.35 * 35.0,
        temperature_k=298.15,
    )


def k2_18b() -> Environment:
    """K2-18b: hot hycean mini-Neptune with a very dense atmosphere."""
    return Environment(
        fluid_density_kg_m3=3.5,
        fluid_viscosity_pa_s=2.2e-5,
        gravity_m_s2=23.54,
        fluid_pressure_pa=250000.0 + 980.0 * 23.54 * 25.0,
        temperature_k=348.15,
    )


def wolf_1061c() -> Environment:
    """Wolf 1061c: thin atmosphere, near-freezing oceans."""
    return Environment(
        fluid_density_kg_m3=0.9,
        fluid_viscosity_pa_s=1.7e-5,
        gravity_m_s2=11.27,
        fluid_pressure_pa=88000.0 + 1035.0 * 11.27 * 55.0,
        temperature_k=271.15,
    )


def gliese_667cc() -> Environment:
    """Gliese 667 Cc: tidally locked with a warm dayside ocean."""
    return Environment(
        fluid_density_kg_m3=1.5,
        fluid_viscosity_pa_s=1.88e-5,
        gravity_m_s2=13.73,
        fluid_pressure_pa=115000.0 + 995.0 * 13.73 * 38.0,
        temperature_k=308.15,
    )


def icy_moon_ocean() -> Environment:
    """Salty, viscous ocean deep under the ice of a cold moon."""
    return Environment(
        fluid_density_kg_m3=1040.0,
        fluid_viscosity_pa_s=0.0018,
        gravity_m_s2=7.84,
        fluid_pressure_pa=120000.0 + 1040.0 * 7.84 * 100.0,
        temperature_k=268.15,
    )


def titan() -> Environment:
    """Titan's surface atmosphere (not its lakes)."""
    return Environment(
        fluid_density_kg_m3=5.3,
        fluid_viscosity_pa_s=0.0000063,
        gravity_m_s2=1.352,
        fluid_pressure_pa=146500.0,
        temperature_k=93.7,
    )


def _carboniferous() -> Environment:
    air = earth_air()
    return replace(air, temperature_k=303.0, fluid_density_kg_m3=air.fluid_density_kg_m3 * 1.6)


def _warm_titan() -> Environment:
    return replace(titan(), temperature_k=earth_air().temperature_k)


_PRESETS: dict[str, Callable[[], Environment]] = {
    "air": earth_air,
    "ocean": earth_ocean,
    "titan": titan,
    "centauri": proxima_centauri_b,
    "proxima": proxima_centauri_b,
    "trappist": trappist_1e,
    "422b": kepler_442b,
    "kepler422b": kepler_442b,
    "lhs": lhs_1140b,
    "lhs1140b": lhs_1140b,
    "62f": kepler_62f,
    "kepler62f": kepler_62f,
    "18b": k2_18b,
    "k2-18b": k2_18b,
    "wolf": wolf_1061c,
    "wolf1061c": wolf_1061c,
    "gliese": gliese_667cc,
    "gliese667cc": gliese_667cc,
    "europa": icy_moon_ocean,
    "icy": icy_moon_ocean,
    "carboniferous": _carboniferous,
    "carb": _carboniferous,
    "warm-titan": _warm_titan,
}


def parse_environment(name: str) -> Environment:
    """Look up a preset by name, case-insensitively; unknown names fall back to air."""
    preset = _PRESETS.get(name.lower())
    if preset is None:
        print(f"Unknown environment: {name}, defaulting to air", file=sys.stderr)
        return earth_air()
    return preset()