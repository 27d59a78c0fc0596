from utils.formats import IMAGE_SIGNATURES
from comics_lib.sources import DEFAULT_SOURCES, DATE_STYLES


def test_signatures_checked_in_reference_order():
    assert [ext for _, ext in IMAGE_SIGNATURES] == ['png', 'jpg', 'gif', 'bmp']


def test_builtin_sources_present():
    assert set(DEFAULT_SOURCES) == {'calvin', 'dilbert', 'xkcd'}
    for definition in DEFAULT_SOURCES.values():
        assert definition.get('date_style', 'slash') in DATE_STYLES
