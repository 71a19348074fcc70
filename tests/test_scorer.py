import os

import pytest

from builders import answer_key, correct, output, response, span, wrong
from kbpscorer.annotation.ingestion import MemoryAnnotationStore, MemorySystemOutputStore
from kbpscorer.scoring.answer_source import AnswerKeyAnswerSource, SystemOutputAnswerSource
from kbpscorer.scoring.equivalence import EntityNormalizer, TypeRoleFillerRealis
from kbpscorer.scoring.observer import DocumentObserver, ScoringObserver
from kbpscorer.scoring.scorer import HAPPY_ANSWERABLES_FILE, KBPScorer

ALIGNMENT_EVENTS = {'annotated_selected_response', 'unannotated_selected_response', 'responses_unaligned',
                    'responses_only_non_empty', 'annotations_only_non_empty'}


class RecordingObserver(ScoringObserver):
    def __init__(self, name='Recording', fail_on=None):
        super(RecordingObserver, self).__init__(name)
        self.events = []
        self.fail_on = fail_on

    def start_corpus(self):
        self.events.append(('start_corpus',))

    def document_observer(self, system_source, answer_key_source):
        return RecordingDocumentObserver(self, system_source, answer_key_source)

    def end_corpus(self):
        self.events.append(('end_corpus',))

    def write_corpus_output(self, directory):
        self.events.append(('write_corpus_output', directory))


class RecordingDocumentObserver(DocumentObserver):
    def _record(self, *event):
        if self.parent.fail_on == event[0]:
            raise ValueError('failing on ' + event[0])
        self.parent.events.append(event)

    def start(self):
        self._record('start', self.docid)

    def start_answerable(self, answerable):
        self._record('start_answerable', answerable)

    def observe(self, answerable, responses, annotated_responses):
        self._record('observe', answerable)

    def annotated_selected_response(self, answerable, response, annotation, annotated_responses):
        self._record('annotated_selected_response', answerable, response, annotation)

    def unannotated_selected_response(self, answerable, response, annotated_responses):
        self._record('unannotated_selected_response', answerable, response)

    def responses_unaligned(self, answerable, responses, annotated_responses):
        self._record('responses_unaligned', answerable)

    def responses_only_non_empty(self, answerable, responses):
        self._record('responses_only_non_empty', answerable)

    def annotations_only_non_empty(self, answerable, annotated_responses):
        self._record('annotations_only_non_empty', answerable)

    def end_answerable(self, answerable):
        self._record('end_answerable', answerable)

    def end(self):
        self._record('end', self.docid)

    def write_document_output(self, directory):
        self._record('write_document_output', directory)


def extract(r):
    return TypeRoleFillerRealis.extractor(EntityNormalizer(dict()))(r)


def run(keys, outputs, tmp_path, observer=None):
    observer = observer or RecordingObserver()
    KBPScorer.create().run(MemorySystemOutputStore(outputs), MemoryAnnotationStore(keys), [observer], str(tmp_path))
    return observer


def alignment_events(observer):
    return [e for e in observer.events if e[0] in ALIGNMENT_EVENTS]


def test_aligned_correct_response_gets_only_annotated_event(tmp_path):
    r = response()
    observer = run([answer_key([correct(r)])], [output([r])], tmp_path)
    assert alignment_events(observer) == [('annotated_selected_response', extract(r), r, correct(r))]


def test_unaligned_selected_response_gets_two_events(tmp_path):
    gold = response(predicate_justifications=[span(50, 56)])
    system = response(predicate_justifications=[span(60, 66)])
    observer = run([answer_key([correct(gold)])], [output([system])], tmp_path)
    assert alignment_events(observer) == [('unannotated_selected_response', extract(system), system),
                                          ('responses_unaligned', extract(system))]


def test_selected_response_is_the_most_confident(tmp_path):
    low = response(predicate_justifications=[span(50, 56)])
    high = response(predicate_justifications=[span(60, 66)])
    observer = run([answer_key([correct(low), wrong(high)])], [output([low, high], {low: 0.2, high: 0.9})],
                   tmp_path)
    assert alignment_events(observer) == [('annotated_selected_response', extract(high), high, wrong(high))]


def test_one_sided_classes(tmp_path):
    system_only = response('rebels', 0)
    gold_only = response('army', 40, role='Target')
    observer = run([answer_key([correct(gold_only)])], [output([system_only])], tmp_path)
    assert alignment_events(observer) == [('responses_only_non_empty', extract(system_only)),
                                          ('annotations_only_non_empty', extract(gold_only))]


def test_every_class_gets_exactly_one_alignment_case(tmp_path):
    responses = [response('rebels', 0), response('army', 40, role='Target'), response('village', 20, role='Place'),
                 response('they', 60)]
    unaligned = response('they', 60, predicate_justifications=[span(1, 2)])
    key = answer_key([correct(responses[1]), wrong(responses[2]), correct(unaligned)])
    observer = run([key], [output([responses[0], responses[2], responses[3]])], tmp_path)

    seen = [e[1] for e in alignment_events(observer) if e[0] != 'responses_unaligned']
    assert sorted(seen, key=lambda a: a.sort_key()) == sorted({extract(r) for r in responses},
                                                              key=lambda a: a.sort_key())


def test_lifecycle_order(tmp_path):
    r = response()
    observer = run([answer_key([correct(r)])], [output([r])], tmp_path)
    names = [e[0] for e in observer.events]
    assert names == ['start_corpus', 'start', 'start_answerable', 'observe', 'annotated_selected_response',
                     'end_answerable', 'end', 'write_document_output', 'end_corpus', 'write_corpus_output']
    assert observer.events[-1] == ('write_corpus_output', os.path.join(str(tmp_path), 'Recording'))
    assert observer.events[-3] == ('write_document_output', os.path.join(str(tmp_path), 'Recording', 'doc1'))


def test_classes_visited_in_text_order(tmp_path):
    late = response('army', 40, role='Target')
    early = response('rebels', 0)
    observer = run([answer_key([correct(late)])], [output([late, early])], tmp_path)
    visited = [e[1] for e in observer.events if e[0] == 'start_answerable']
    assert visited == [extract(early), extract(late)]


def test_documents_in_only_one_store_are_scored(tmp_path):
    r = response()
    other = response(docid='doc2')
    observer = run([answer_key([correct(r)])], [output([other], docid='doc2')], tmp_path)
    assert [e[1] for e in observer.events if e[0] == 'start'] == ['doc1', 'doc2']


def test_class_with_nothing_on_either_side_cannot_happen():
    extract_fn = TypeRoleFillerRealis.extractor(EntityNormalizer(dict()))
    gold = AnswerKeyAnswerSource.for_answerable(answer_key([]), extract_fn)
    system = SystemOutputAnswerSource.for_answerable(output([]), extract_fn)
    with pytest.raises(RuntimeError):
        KBPScorer.align_answerable(extract(response()), system, gold, [])


def test_document_failure_is_wrapped_with_docid(tmp_path):
    r = response()
    with pytest.raises(RuntimeError) as e:
        run([answer_key([correct(r)])], [output([r])], tmp_path, RecordingObserver(fail_on='observe'))
    assert 'doc1' in str(e.value)
    assert isinstance(e.value.__cause__, ValueError)


def test_happy_answerables_file(tmp_path):
    happy = response('rebels', 0)
    sad = response('army', 40, role='Target')
    unanswered = response('village', 20, role='Place')
    key = answer_key([correct(happy), wrong(sad), correct(unanswered)])
    run([key], [output([happy, sad])], tmp_path)
    with open(os.path.join(str(tmp_path), HAPPY_ANSWERABLES_FILE)) as f:
        lines = f.read().splitlines()
    assert lines == ['doc1\tConflict.Attack/Attacker/rebels[0-5]/Actual',
                     'doc1\tConflict.Attack/Place/village[20-26]/Actual']


def test_score_document_returns_happy_classes():
    r = response()
    happy = KBPScorer.create().score_document(answer_key([correct(r)]), output([r]), [])
    assert happy == [extract(r)]


def test_repeated_documents_are_observed_once(tmp_path):
    r = response()
    observer = RecordingObserver()
    KBPScorer.create().run(MemorySystemOutputStore([output([r])]), MemoryAnnotationStore([answer_key([correct(r)])]),
                           [observer], str(tmp_path), documents_to_score=['doc1', 'doc1'])
    assert [e[1] for e in observer.events if e[0] == 'start'] == ['doc1']
    with open(os.path.join(str(tmp_path), HAPPY_ANSWERABLES_FILE)) as f:
        assert len(f.read().splitlines()) == 1
