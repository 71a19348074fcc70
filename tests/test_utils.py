from kbpscorer.common.utils import document_order, load_symbol_list


def test_document_order_keeps_sequence_order_without_repeats():
    assert document_order(['doc3', 'doc1', 'doc3', 'doc2', 'doc1']) == ['doc3', 'doc1', 'doc2']
    assert document_order(('doc2', 'doc2')) == ['doc2']


def test_document_order_sorts_other_collections():
    assert document_order({'doc3', 'doc1', 'doc2'}) == ['doc1', 'doc2', 'doc3']
    assert document_order(frozenset()) == []


def test_load_symbol_list_skips_comments_and_blanks(tmp_path):
    path = tmp_path / 'docs.txt'
    path.write_text('# header\ndoc1\n\n  doc2  \ndoc1\n')
    assert load_symbol_list(str(path)) == ['doc1', 'doc2', 'doc1']
