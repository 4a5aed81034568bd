import os

import pytest


@pytest.fixture(autouse=True)
def _isolated_config(tmp_path, monkeypatch):
    # keep a stray msftool.ini or PYMSF_INI from changing the format profile
    monkeypatch.delenv('PYMSF_INI', raising=False)
    monkeypatch.chdir(tmp_path)


def write_files(root, files):
    for rel, data in files.items():
        path = os.path.join(str(root), *rel.split('/'))
        os.makedirs(os.path.dirname(path), exist_ok=True)
        with open(path, 'wb') as f:
            f.write(data)


def read_tree(root):
    out = {}
    root = str(root)
    for dirpath, dirnames, filenames in os.walk(root):
        for name in filenames:
            path = os.path.join(dirpath, name)
            rel = os.path.relpath(path, root).replace(os.sep, '/')
            with open(path, 'rb') as f:
                out[rel] = f.read()
    return out


@pytest.fixture
def sample_tree(tmp_path):
    root = tmp_path / 'src'
    write_files(root, {
        'readme.txt': b'hello msf\n',
        'empty.bin': b'',
        'data/blob.bin': bytes(range(256)) * 8,
        'data/nested/deep.txt': b'deep',
        'docs/\u00fcber.txt': b'unicode name',
        '.hidden': b'skip me',
        '.git/config': b'skip me too',
        'data/.cache/x': b'and me',
    })
    return root


@pytest.fixture
def expected_tree():
    return {
        'readme.txt': b'hello msf\n',
        'empty.bin': b'',
        'data/blob.bin': bytes(range(256)) * 8,
        'data/nested/deep.txt': b'deep',
        'docs/\u00fcber.txt': b'unicode name',
    }
