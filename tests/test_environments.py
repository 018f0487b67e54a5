import dataclasses

import pytest

from tontonkit.environments import (
    Environment,
    earth_air,
    earth_ocean,
    gliese_667cc,
    icy_moon_ocean,
    k2_18b,
    kepler_442b,
    kepler_62f,
    lhs_1140b,
    parse_environment,
    proxima_centauri_b,
    titan,
    trappist_1e,
    wolf_1061c,
)


@pytest.mark.parametrize(
    "name, preset",
    [
        ("air", earth_air),
        ("ocean", earth_ocean),
        ("titan", titan),
        ("centauri", proxima_centauri_b),
        ("proxima", proxima_centauri_b),
        ("trappist", trappist_1e),
        ("422b", kepler_442b),
        ("kepler422b", kepler_442b),
        ("lhs", lhs_1140b),
        ("lhs1140b", lhs_1140b),
        ("62f", kepler_62f),
        ("kepler62f", kepler_62f),
        ("18b", k2_18b),
        ("k2-18b", k2_18b),
        ("wolf", wolf_1061c),
        ("wolf1061c", wolf_1061c),
        ("gliese", gliese_667cc),
        ("gliese667cc", gliese_667cc),
        ("europa", icy_moon_ocean),
        ("icy", icy_moon_ocean),
    ],
)
def test_names_select_presets(name, preset):
    assert parse_environment(name) == preset()


def test_names_are_case_insensitive():
    assert parse_environment("TiTaN") == titan()
    assert parse_environment("K2-18B") == k2_18b()


def test_earth_air_values():
    air = earth_air()
    assert air.gravity_m_s2 == 9.81
    assert air.fluid_density_kg_m3 == 1.225
    assert air.temperature_k == 293.15


def test_air_and_ocean_share_pressure_and_gravity():
    air, ocean = earth_air(), earth_ocean()
    assert air.fluid_pressure_pa == ocean.fluid_pressure_pa
    assert air.gravity_m_s2 == ocean.gravity_m_s2
    assert ocean.fluid_density_kg_m3 > air.fluid_density_kg_m3


def test_titan_pressure_is_fixed():
    assert titan().fluid_pressure_pa == 146500.0


def test_carboniferous_is_warmer_denser_air():
    air = earth_air()
    carb = parse_environment("carboniferous")
    assert carb.temperature_k == 303.0
    assert carb.fluid_density_kg_m3 == pytest.approx(air.fluid_density_kg_m3 * 1.6)
    assert carb.gravity_m_s2 == air.gravity_m_s2
    assert carb.fluid_viscosity_pa_s == air.fluid_viscosity_pa_s
    assert parse_environment("carb") == carb


def test_warm_titan_takes_earth_temperature():
    warm = parse_environment("warm-titan")
    assert warm.temperature_k == earth_air().temperature_k
    assert warm.fluid_density_kg_m3 == titan().fluid_density_kg_m3
    assert warm.gravity_m_s2 == titan().gravity_m_s2


def test_unknown_name_defaults_to_air(capsys):
    assert parse_environment("mars") == earth_air()
    assert "Unknown environment: mars, defaulting to air" in capsys.readouterr().err


def test_known_name_prints_nothing(capsys):
    parse_environment("ocean")
    assert capsys.readouterr().err == ""


def test_presets_are_physical():
    for preset in (
        earth_air, earth_ocean, titan, proxima_centauri_b, trappist_1e, kepler_442b,
        lhs_1140b, kepler_62f, k2_18b, wolf_1061c, gliese_667cc, icy_moon_ocean,
    ):
        env = preset()
        assert env.fluid_density_kg_m3 > 0
        assert env.fluid_viscosity_pa_s > 0
        assert env.gravity_m_s2 > 0
        assert env.fluid_pressure_pa > 0
        assert env.temperature_k > 0


def test_environment_is_immutable():
    env = earth_air()
    with pytest.raises(dataclasses.FrozenInstanceError):
        env.gravity_m_s2 = 1.0  # type: ignore[misc]
    assert isinstance(env, Environment)
    assert env.gravity_m_s2 == earth_air().gravity_m_s2