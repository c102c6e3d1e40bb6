from types import MappingProxyType

import pytest

import services.positions as m
from domain.errors import ConfigurationError
from domain.models import PositionSpec, SafVariant


def test_registry_is_valid():
    m.validate_registry()


def test_every_pic_field_has_a_position():
    for field in m.PIC_FIELDS:
        spec = m.lookup(m.PIC_POSITIONS, field)
        assert 0.0 <= spec.x <= 1.0
        assert 0.0 <= spec.y <= 1.0


def test_lookup_missing_field_raises_configuration_error():
    with pytest.raises(ConfigurationError):
        m.lookup(m.PIC_POSITIONS, "favourite_colour")


def test_tables_are_read_only():
    with pytest.raises(TypeError):
        m.PIC_POSITIONS["email"] = PositionSpec(0.5, 0.5)


def test_absolute_point_and_area():
    assert m.absolute(PositionSpec(0.5, 0.25), 800, 400) == (400.0, 100.0)
    x, y, w, h = m.absolute(m.SAF_POSITIONS["signature"], 1000, 1000)
    assert (x, y) == pytest.approx((830.0, 810.0))
    assert (w, h) == pytest.approx((500.0, 200.0))


def test_checkbox_offset_only_for_standard_saf():
    assert m.checkbox_offset(SafVariant.VICTORY, 1000, 500) == (0.0, 0.0)
    dx, dy = m.checkbox_offset(SafVariant.STANDARD, 1000, 500)
    assert dx == 0.0
    assert dy == pytest.approx(-40.0)


def test_validate_registry_reports_missing_field(monkeypatch):
    broken = dict(m.PIC_POSITIONS)
    del broken["amount"]
    monkeypatch.setattr(m, "PIC_POSITIONS", MappingProxyType(broken))
    with pytest.raises(ConfigurationError, match="PIC.amount"):
        m.validate_registry()


def test_validate_registry_requires_signature_area(monkeypatch):
    broken = dict(m.SAF_POSITIONS)
    broken["signature"] = PositionSpec(0.8, 0.8)
    monkeypatch.setattr(m, "SAF_POSITIONS", MappingProxyType(broken))
    with pytest.raises(ConfigurationError, match="signature"):
        m.validate_registry()


def test_validate_registry_rejects_out_of_range(monkeypatch):
    broken = dict(m.SAF_POSITIONS)
    broken["canceled_general_fund"] = PositionSpec(1.2, 0.5)
    monkeypatch.setattr(m, "SAF_POSITIONS", MappingProxyType(broken))
    with pytest.raises(ConfigurationError, match="outside"):
        m.validate_registry()
