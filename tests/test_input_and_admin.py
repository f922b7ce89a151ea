import pytest

from sunmeadow.auth.admin import AdminAuthError, AdminGate
from sunmeadow.input.validator import EntryValidationError, validate_entry_input


@pytest.mark.parametrize("raw,expected", [
    ("1000", 1000),
    ("-2000", -2000),
    (" 3000 ", 3000),
    ("3e3", 3000),
    ("5000.0", 5000),
    ("0", 0),
    (4000, 4000),
    (-1000.0, -1000),
])
def test_validator_accepts_unit_multiples(raw, expected):
    assert validate_entry_input(raw) == expected


@pytest.mark.parametrize("raw", ["", "abc", "NaN", "inf", "-Infinity", "10 00", True])
def test_validator_rejects_non_numbers(raw):
    with pytest.raises(EntryValidationError) as exc:
        validate_entry_input(raw)
    assert exc.value.reason == "not_a_number"


@pytest.mark.parametrize("raw", ["999", "1500", "-1", "1000.5", 250])
def test_validator_rejects_non_multiples(raw):
    with pytest.raises(EntryValidationError) as exc:
        validate_entry_input(raw)
    assert exc.value.reason == "not_unit_multiple"
    assert isinstance(exc.value, ValueError)


def test_validator_custom_unit():
    assert validate_entry_input("250", unit=250) == 250


def test_admin_gate_login_logout():
    gate = AdminGate("0987")
    assert gate.is_admin is False
    with pytest.raises(AdminAuthError):
        gate.require()
    assert gate.login("1234") is False
    assert gate.login("0987") is True
    gate.require()
    gate.logout()
    assert gate.is_admin is False


def test_admin_gate_check_is_stateless():
    gate = AdminGate("s3cret")
    assert gate.check("s3cret") is True
    assert gate.is_admin is False
    assert gate.check(None) is False


def test_admin_gate_requires_secret():
    with pytest.raises(ValueError):
        AdminGate("")
