import os

import pytest

from pymsf import pymsf as P

from conftest import write_files


def test_scan_skips_hidden_and_recurses(sample_tree, expected_tree):
    entries = P.scan_directory_msf(str(sample_tree))
    names = [e['fname'] for e in entries]
    assert sorted(names) == sorted(expected_tree)
    for ent in entries:
        assert ent['fsize'] == len(expected_tree[ent['fname']])
        assert ent['foffset'] == 0
        assert ent['fnamelen'] == len(os.fsencode(ent['fname']))
        assert os.path.isfile(ent['fpath'])
    assert [e['fid'] for e in entries] == list(range(len(entries)))


def test_scan_keeps_subdirectory_entries_together(tmp_path):
    root = tmp_path / 'tree'
    write_files(root, {
        'a.txt': b'1', 'z.txt': b'2', 'm.txt': b'3',
        'sub/one': b'4', 'sub/two': b'5', 'sub/inner/three': b'6',
    })
    names = [e['fname'] for e in P.scan_directory_msf(str(root))]
    positions = [i for i, n in enumerate(names) if n.startswith('sub/')]
    assert len(positions) == 3
    assert positions == list(range(positions[0], positions[0] + 3))


def test_scan_follows_listdir_order(tmp_path, monkeypatch):
    root = tmp_path / 'tree'
    write_files(root, {'b': b'', 'a': b'', 'c': b''})
    real_listdir = os.listdir
    monkeypatch.setattr(P.os, 'listdir', lambda p: list(reversed(sorted(real_listdir(p)))))
    assert [e['fname'] for e in P.scan_directory_msf(str(root))] == ['c', 'b', 'a']


def test_scan_empty_directory(tmp_path):
    root = tmp_path / 'empty'
    (root / 'only' / 'dirs').mkdir(parents=True)
    assert P.scan_directory_msf(str(root)) == []


def test_scan_missing_directory(tmp_path):
    with pytest.raises(P.MSFIOError) as exc:
        P.scan_directory_msf(str(tmp_path / 'nope'))
    assert 'could not open directory' in str(exc.value)


@pytest.mark.skipif(not hasattr(os, 'symlink'), reason='needs symlinks')
def test_scan_dangling_symlink_is_io_error(tmp_path):
    root = tmp_path / 'tree'
    root.mkdir()
    os.symlink(str(tmp_path / 'missing'), str(root / 'broken'))
    with pytest.raises(P.MSFIOError) as exc:
        P.scan_directory_msf(str(root))
    assert "couldn't stat" in str(exc.value)


def test_scan_truncates_long_names(tmp_path, capsys):
    root = tmp_path / 'tree'
    rel = 'a' * 200 + '/' + 'b' * 100
    write_files(root, {rel: b'long'})
    entries = P.scan_directory_msf(str(root))
    assert len(entries) == 1
    assert entries[0]['fnamelen'] == 255
    assert entries[0]['fname'] == rel[:255]
    assert entries[0]['fpath'].endswith('b' * 100)
    assert 'longer than 255 bytes (301)' in capsys.readouterr().err


def test_scan_warns_on_truncation_collisions(tmp_path, capsys):
    root = tmp_path / 'tree'
    base = 'a' * 200 + '/' + 'b' * 60
    write_files(root, {base + 'X': b'x', base + 'Y': b'y'})
    entries = P.scan_directory_msf(str(root))
    assert entries[0]['fname'] == entries[1]['fname']
    assert 'duplicate name' in capsys.readouterr().err
