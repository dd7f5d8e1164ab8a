import json
import os

import pytest

from bigramsearch.config import ConfigManager
from bigramsearch.core.errors import IndexBuildError, IndexLoadError
from bigramsearch.core.index_manager import IndexManager, load_index, save_index
from bigramsearch.core.indexer import make_index
from bigramsearch.core.searcher import Searcher

from conftest import write_files

QUERIES = ['world', 'hello', 'goodbye', 'xyz', 'o w', 'ld', 'h']


def make_manager(tmp_path, root):
    cfg = ConfigManager(tmp_path / 'cfg')
    cfg.update(root_path=str(root), include_pattern='', exclude_pattern='')
    return IndexManager(cfg)


def test_save_load_round_trip(corpus, tmp_path):
    idx, _ = make_index(str(corpus))
    path = tmp_path / 'out' / 'fs.index'
    save_index(idx, path)
    loaded = load_index(path)
    for q in QUERIES:
        assert Searcher(loaded).search(q) == Searcher(idx).search(q)
    assert loaded.number_of_files == idx.number_of_files
    assert loaded.number_of_entries == idx.number_of_entries


def test_document_shape(corpus, tmp_path):
    idx, _ = make_index(str(corpus))
    path = tmp_path / 'fs.index'
    save_index(idx, path)
    doc = json.loads(path.read_text(encoding='utf-8'))
    assert set(doc) == {'fileIdMap', 'index'}
    assert doc['fileIdMap'] == [[str(corpus / 'a.txt'), 0], [str(corpus / 'b.txt'), 1]]
    for code, ids in doc['index']:
        assert len(code) == 2 and all(0 <= c <= 127 for c in code)
        assert set(ids) <= {0, 1}
    # no temp files left behind
    assert sorted(os.listdir(tmp_path)) == ['corpus', 'fs.index']


def test_rebuild_twice_is_equivalent(corpus, tmp_path):
    first, _ = make_index(str(corpus))
    second, _ = make_index(str(corpus))
    save_index(first, tmp_path / 'one')
    save_index(second, tmp_path / 'two')
    a, b = load_index(tmp_path / 'one'), load_index(tmp_path / 'two')
    for q in QUERIES:
        assert Searcher(a).search(q) == Searcher(b).search(q)


def test_load_missing_file(tmp_path):
    with pytest.raises(IndexLoadError):
        load_index(tmp_path / 'missing.index')


@pytest.mark.parametrize('content', ['', 'not json', 'null', '[]', '{"fileIdMap": []}'])
def test_load_malformed_file(tmp_path, content):
    path = tmp_path / 'bad.index'
    path.write_text(content, encoding='utf-8')
    with pytest.raises(IndexLoadError):
        load_index(path)


def test_get_index_builds_and_saves_when_absent(corpus, tmp_path):
    mgr = make_manager(tmp_path, corpus)
    assert not mgr.index_path.exists()
    idx = mgr.get_index()
    assert mgr.is_ready
    assert mgr.index_path.exists()
    assert mgr.last_build_report.files_indexed == 2
    assert mgr.get_index() is idx


def test_get_index_prefers_saved_index(corpus, tmp_path):
    mgr = make_manager(tmp_path, corpus)
    mgr.get_index()
    fresh = make_manager(tmp_path, corpus)
    fresh.get_index()
    assert fresh.last_build_report is None
    assert sorted(os.path.basename(p) for p in fresh.search('world')) == ['a.txt', 'b.txt']


def test_get_index_rebuilds_corrupt_index(corpus, tmp_path):
    mgr = make_manager(tmp_path, corpus)
    mgr.index_path.parent.mkdir(parents=True, exist_ok=True)
    mgr.index_path.write_text('{broken', encoding='utf-8')
    mgr.get_index()
    assert mgr.last_build_report is not None
    assert load_index(mgr.index_path).number_of_files == 2


def test_get_index_reports_inaccessible_root(tmp_path):
    mgr = make_manager(tmp_path, tmp_path / 'does-not-exist')
    with pytest.raises(IndexBuildError):
        mgr.get_index()
    assert not mgr.is_ready


def test_stats(corpus, tmp_path):
    mgr = make_manager(tmp_path, corpus)
    stats = mgr.stats()
    assert stats['files'] == 2
    assert stats['index_size'] > 0
    assert stats['memory_rss'] > 0
    assert stats['entries'] >= stats['code_entries']
    assert mgr.count_files() == 2


def test_get_index_rebuilds_for_another_root(corpus, tmp_path):
    make_manager(tmp_path, corpus).get_index()
    other = write_files(tmp_path / 'other', {'c.txt': 'hello there'})
    mgr = make_manager(tmp_path, other)
    mgr.get_index()
    assert mgr.last_build_report is not None
    assert mgr.search('hello') == [str(other / 'c.txt')]
    data = json.loads((tmp_path / 'cfg' / 'config.json').read_text(encoding='utf-8'))
    assert data['index_roots'][str(mgr.index_path)] == str(other)


def test_load_rejects_index_of_another_root(corpus, tmp_path):
    make_manager(tmp_path, corpus).get_index()
    mgr = make_manager(tmp_path, tmp_path / 'elsewhere')
    with pytest.raises(IndexLoadError):
        mgr.load()
