import os

import pytest

from bigramsearch.core.indexer import make_index
from bigramsearch.core.searcher import Searcher

from conftest import write_files


def names(paths):
    return sorted(os.path.basename(p) for p in paths)


def test_hello_world_scenario(corpus):
    idx, _ = make_index(str(corpus))
    s = Searcher(idx)
    assert names(s.search('world')) == ['a.txt', 'b.txt']
    assert names(s.search('hello')) == ['a.txt']
    assert s.search('xyz') == []
    assert s.search('h') == []


@pytest.mark.parametrize('query', ['', 'a', ' '])
def test_short_query_contract(corpus, query):
    idx, _ = make_index(str(corpus))
    assert Searcher(idx).search(query) == []


def test_verification_removes_false_positives(tmp_path):
    write_files(tmp_path, {'fp.txt': 'ab ca bc', 'tp.txt': 'xxabcaxx'})
    idx, _ = make_index(str(tmp_path))
    s = Searcher(idx)
    assert names(s.find_candidates('abca')) == ['fp.txt', 'tp.txt']
    assert names(s.search('abca')) == ['tp.txt']


def test_results_literally_contain_query(tmp_path):
    write_files(tmp_path, {
        '1.txt': 'the quick brown fox',
        '2.txt': 'quick, quick!',
        '3.txt': 'kciuq',
    })
    idx, _ = make_index(str(tmp_path))
    s = Searcher(idx)
    for q in ['quick', 'qu', 'ck', 'fox', 'k,', 'own f']:
        for path in s.search(q):
            with open(path, 'rb') as f:
                assert q.encode() in f.read()


def test_every_ascii_substring_is_found(tmp_path):
    text = 'int main(void) { return 0; }'
    write_files(tmp_path, {'m.c': text})
    idx, _ = make_index(str(tmp_path))
    s = Searcher(idx)
    for i in range(len(text)):
        for j in range(i + 2, min(len(text), i + 8) + 1):
            assert names(s.search(text[i:j])) == ['m.c'], text[i:j]


def test_vanished_candidate_is_a_non_match(corpus):
    idx, _ = make_index(str(corpus))
    os.remove(corpus / 'a.txt')
    s = Searcher(idx)
    assert names(s.find_candidates('world')) == ['a.txt', 'b.txt']
    assert names(s.search('world')) == ['b.txt']


def test_stale_content_is_filtered(corpus):
    idx, _ = make_index(str(corpus))
    (corpus / 'a.txt').write_text('changed')
    assert names(Searcher(idx).search('hello')) == []


def test_search_with_stats(corpus):
    idx, _ = make_index(str(corpus))
    outcome = Searcher(idx).search_with_stats('world')
    assert outcome.candidate_count == 2
    assert names(outcome.results) == ['a.txt', 'b.txt']
    assert outcome.elapsed >= 0
    empty = Searcher(idx).search_with_stats('w')
    assert empty.candidate_count == 0 and empty.results == []
