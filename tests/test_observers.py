import os

import numpy as np
import pytest

from builders import answer_key, correct, inexact, output, response, span, wrong
from kbpscorer.annotation.ingestion import MemoryAnnotationStore, MemorySystemOutputStore
from kbpscorer.scoring.observers import (AlignmentLogObserver, ArgumentCounts, ArgumentScoringObserver,
                                         PresenceObserver, create_observers)
from kbpscorer.scoring.scorer import KBPScorer

REBELS = response('rebels', 0)
ARMY = response('army', 40, role='Target')
VILLAGE = response('village', 20, role='Place')
THEY = response('they', 60, role='Instrument')


def score(observers, tmp_path, keys=None, outputs=None):
    if keys is None:
        keys = [answer_key([correct(REBELS), wrong(ARMY), correct(VILLAGE)])]
    if outputs is None:
        outputs = [output([REBELS, ARMY, THEY])]
    KBPScorer.create().run(MemorySystemOutputStore(outputs), MemoryAnnotationStore(keys), observers, str(tmp_path))
    return observers


def test_argument_scoring_counts(tmp_path):
    observer, = score([ArgumentScoringObserver()], tmp_path)
    counts = observer.counts
    assert counts.tp['Conflict.Attack'] == 1
    assert counts.fp['Conflict.Attack'] == 1
    assert counts.fn['Conflict.Attack'] == 1
    assert counts.unassessed['Conflict.Attack'] == 1
    f1 = counts.f1()
    assert f1.precision == pytest.approx(0.5)
    assert f1.recall == pytest.approx(0.5)
    assert os.path.isfile(os.path.join(str(tmp_path), 'ArgumentScoring', 'score.txt'))
    assert os.path.isfile(os.path.join(str(tmp_path), 'ArgumentScoring', 'doc1', 'score.txt'))


def test_wrong_selection_in_correct_class_is_also_a_miss(tmp_path):
    good = response(predicate_justifications=[span(50, 56)])
    bad = response(predicate_justifications=[span(60, 66)])
    observer, = score([ArgumentScoringObserver()], tmp_path, [answer_key([correct(good), wrong(bad)])],
                      [output([good, bad], {good: 0.1, bad: 0.9})])
    assert observer.counts.fp['Conflict.Attack'] == 1
    assert observer.counts.fn['Conflict.Attack'] == 1
    assert observer.counts.tp['Conflict.Attack'] == 0


def test_semantic_scoring_accepts_inexact(tmp_path):
    keys = [answer_key([inexact(REBELS)])]
    outputs = [output([REBELS])]
    strict, semantic = score([ArgumentScoringObserver(), ArgumentScoringObserver('Semantic', semantic=True)],
                             tmp_path, keys, outputs)
    assert strict.counts.tp['Conflict.Attack'] == 0
    assert strict.counts.fp['Conflict.Attack'] == 1
    assert semantic.counts.tp['Conflict.Attack'] == 1
    assert semantic.counts.fp['Conflict.Attack'] == 0


def test_counts_merge_across_documents(tmp_path):
    other = response(docid='doc2')
    observer, = score([ArgumentScoringObserver()], tmp_path,
                      [answer_key([correct(REBELS)]), answer_key([correct(other)], docid='doc2')],
                      [output([REBELS]), output([other], docid='doc2')])
    assert observer.counts.tp['Conflict.Attack'] == 2


def test_argument_counts_breakdown():
    counts = ArgumentCounts()
    counts.tp['Life.Die'] += 2
    counts.fp['Conflict.Attack'] += 1
    assert counts.event_types() == ['Conflict.Attack', 'Life.Die']
    assert counts.f1('Life.Die').f1 == pytest.approx(1.0)
    assert counts.to_string().splitlines()[-1].startswith('ALL')


def test_presence_confusion(tmp_path):
    observer, = score([PresenceObserver()], tmp_path)
    np.testing.assert_array_equal(observer.confusion, np.array([[1, 2], [1, 0]]))
    assert os.path.isfile(os.path.join(str(tmp_path), 'Presence', PresenceObserver.CONFUSION_FILE))


def read_alignment_log(tmp_path, docid='doc1'):
    with open(os.path.join(str(tmp_path), 'AlignmentLog', docid, AlignmentLogObserver.LOG_FILE)) as f:
        return [line.split('\t') for line in f.read().splitlines()]


def test_alignment_log(tmp_path):
    observer, = score([AlignmentLogObserver()], tmp_path)
    assert observer.event_counts['annotated_selected_response'] == 2
    assert observer.event_counts['responses_only_non_empty'] == 1
    assert observer.event_counts['annotations_only_non_empty'] == 1
    assert observer.event_counts['start_answerable'] == 4
    lines = read_alignment_log(tmp_path)
    assert [line[0] for line in lines][:2] == ['start_answerable', 'observe']
    assert lines[0][1] == 'Conflict.Attack/Attacker/rebels[0-5]/Actual'
    assert len(lines) == sum(observer.event_counts.values())
    with open(os.path.join(str(tmp_path), 'AlignmentLog', AlignmentLogObserver.SUMMARY_FILE)) as f:
        assert 'start_answerable\t4' in f.read().splitlines()


def test_create_observers():
    assert [o.name for o in create_observers()] == ['AlignmentLog', 'ArgumentScoring', 'Presence',
                                                   'SemanticArgumentScoring', 'SemanticPresence']
    assert create_observers([]) == []
    assert create_observers(['Presence'])[0].name == 'Presence'
    with pytest.raises(ValueError):
        create_observers(['NoSuchObserver'])
