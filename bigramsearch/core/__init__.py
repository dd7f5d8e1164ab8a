"""
Bigram index core.
"""

from .errors import BigramSearchError, IndexBuildError, IndexLoadError
from .id_map import IdMap
from .bigram_index import BigramIndex, PostingSet, bigrams_of, scan_bigrams
from .indexer import IndexBuildReport, count_files, index_file, iter_file_entries, make_index
from .searcher import SearchOutcome, Searcher
from .index_manager import IndexManager, load_index, save_index

__all__ = [
    'BigramSearchError',
    'IndexBuildError',
    'IndexLoadError',
    'IdMap',
    'BigramIndex',
    'PostingSet',
    'bigrams_of',
    'scan_bigrams',
    'IndexBuildReport',
    'count_files',
    'index_file',
    'iter_file_entries',
    'make_index',
    'SearchOutcome',
    'Searcher',
    'IndexManager',
    'load_index',
    'save_index',
]
