import copy

from vcx.status import STATUS_FIELDS, StatusField, angle_formatter, format_aligned, format_level


def test_default_formatter_uses_fmt():
    field = StatusField(label="Level", fmt="{:.1f}°", value=1.234)
    assert field.text() == "Level: 1.2°"


def test_custom_formatter():
    field = StatusField(label="Align", formatter=format_aligned, value=True)
    assert field.text() == "Align: ALIGNED"
    field.value = False
    assert field.text() == "Align: --"


def test_format_level():
    assert format_level(True) == "LEVEL"
    assert format_level(False) == "TILTED"


def test_angle_formatter_honours_settings():
    assert angle_formatter()(12.345) == "12.3°"
    assert angle_formatter(0)(12.5) == "13°"
    assert angle_formatter(2, "radians")(180.0) == "3.14 rad"


def test_status_fields_are_copyable():
    fields = {k: copy.deepcopy(v) for k, v in STATUS_FIELDS.items()}
    fields["aligned"].value = True
    assert STATUS_FIELDS["aligned"].value is False
    assert set(fields) == {"pitch", "roll", "yaw", "deviation", "aligned", "roll_angle", "level"}
