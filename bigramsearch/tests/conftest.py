import os
import sys
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '..', '..'))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

import pytest


def write_files(root, files):
    """Create {relative path: str or bytes} under root."""
    for rel, content in files.items():
        p = root / rel
        p.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, bytes):
            p.write_bytes(content)
        else:
            p.write_bytes(content.encode('utf-8'))
    return root


@pytest.fixture
def corpus(tmp_path):
    root = tmp_path / 'corpus'
    root.mkdir()
    return write_files(root, {
        'a.txt': 'hello world',
        'b.txt': 'goodbye world',
    })
