from datetime import date
from pathlib import Path

import pytest

from utils.filenames import clean_comic_id, output_prefix


@pytest.mark.parametrize("input_str, expected", [
    ("calvin", "calvin"),
    ("Calvin", "calvin"),
    (" XKCD ", "xkcd"),
    ("dil bert", "dilbert"),
])
def test_clean_comic_id(input_str, expected):
    assert clean_comic_id(input_str) == expected


def test_output_prefix_uses_comic_and_iso_date(tmp_path):
    prefix = output_prefix(tmp_path, 'calvin', date(2016, 4, 6))
    assert prefix == tmp_path / 'calvin-2016-04-06'
    assert prefix.suffix == ''


def test_output_prefix_sanitises_path_separators():
    prefix = output_prefix(Path('/tmp/comics'), '../evil/comic', date(2016, 4, 6))
    assert prefix.parent == Path('/tmp/comics')
    assert '/' not in prefix.name


def test_output_prefixes_distinct_per_comic(tmp_path):
    day = date(2016, 4, 6)
    names = {output_prefix(tmp_path, c, day) for c in ('calvin', 'dilbert', 'xkcd')}
    assert len(names) == 3
