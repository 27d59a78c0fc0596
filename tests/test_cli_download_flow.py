from datetime import date

import pytest

import download_comics
from comics_lib.models import Outcome
from download_comics import main


def test_no_comics_exits_immediately(tmp_path, capsys, monkeypatch):
    def boom(*args, **kwargs):
        raise AssertionError('no downloader should be created')

    monkeypatch.setattr(download_comics, 'ComicsDownloader', boom)
    assert main(['-d', str(tmp_path)]) == 0
    assert 'nothing to do' in capsys.readouterr().out


def test_unknown_comic_is_usage_error(tmp_path):
    with pytest.raises(SystemExit) as exc:
        main(['-d', str(tmp_path), '-c', 'garfield'])
    assert exc.value.code == 2


def test_bad_date_is_usage_error(tmp_path):
    with pytest.raises(SystemExit) as exc:
        main(['-d', str(tmp_path), '-c', 'xkcd', '--date', '2016/04/06'])
    assert exc.value.code == 2


def test_missing_config_file_is_usage_error(tmp_path):
    with pytest.raises(SystemExit) as exc:
        main(['-d', str(tmp_path), '-c', 'xkcd', '--config', str(tmp_path / 'nope.json')])
    assert exc.value.code == 2


@pytest.mark.parametrize("results, expected", [
    ([True, True], 0),
    ([True, False], 1),
    ([False, False], 1),
])
def test_exit_status_reflects_outcomes(tmp_path, monkeypatch, results, expected):
    captured = {}

    def fake_download_all(self):
        captured['comics'] = self.comics
        captured['date'] = self.reference_date
        captured['mode'] = self.mode
        captured['workers'] = (self.fetch_workers, self.download_workers)
        return [Outcome(comic=c, success=ok) for c, ok in zip(self.comics, results)]

    monkeypatch.setattr(download_comics.ComicsDownloader, 'download_all_comics', fake_download_all)
    code = main(['-d', str(tmp_path), '-c', 'calvin', '-c', 'dilbert', '--date', '2016-04-06',
                 '--mode', 'pipeline', '--workers', '3'])
    assert code == expected
    assert captured == {
        'comics': ['calvin', 'dilbert'],
        'date': date(2016, 4, 6),
        'mode': 'pipeline',
        'workers': (3, 3),
    }


def test_config_file_sources_are_selectable(tmp_path, monkeypatch):
    cfg = tmp_path / 'custom.json'
    cfg.write_text('{"sources": {"garfield": {"url": "https://www.gocomics.com/garfield/{date}", '
                   '"container_class": "feature", "alt": "Garfield"}}}', encoding='utf-8')
    monkeypatch.setattr(download_comics.ComicsDownloader, 'download_all_comics',
                        lambda self: [Outcome(comic=c, success=True) for c in self.comics])
    assert main(['-d', str(tmp_path), '-c', 'garfield', '--config', str(cfg)]) == 0


def test_non_positive_timeout_is_usage_error(tmp_path):
    with pytest.raises(SystemExit) as exc:
        main(['-d', str(tmp_path), '-c', 'xkcd', '--timeout', '0'])
    assert exc.value.code == 2
