import pytest

from builders import DOCID, I, W, answer_key, assessed, correct, inexact, output, response, span, wrong
from kbpscorer.annotation.answer_key import AnswerKey, ArgumentOutput
from kbpscorer.annotation.response import AssessedResponse, FieldAssessment, KBPRealis


def test_responses_compare_by_value():
    a = response('rebels', 0)
    b = response('rebels', 0)
    assert a == b
    assert hash(a) == hash(b)
    assert a.unique_id() == b.unique_id()
    assert len({a, b}) == 1

    other = response('rebels', 0, realis=KBPRealis.Generic)
    assert a != other
    assert a.unique_id() != other.unique_id()


def test_realis_parse():
    assert KBPRealis.parse('actual') is KBPRealis.Actual
    with pytest.raises(ValueError):
        KBPRealis.parse('Hypothetical')


def test_correctness_levels():
    r = response()
    assert correct(r).is_completely_correct()
    assert correct(r).is_correct_up_to_inexact_justifications()

    assert not inexact(r).is_completely_correct()
    assert inexact(r).is_correct_up_to_inexact_justifications()

    assert not wrong(r).is_completely_correct()
    assert not wrong(r).is_correct_up_to_inexact_justifications()

    inexact_argument = assessed(r, argument_assessment=I)
    assert inexact_argument.is_correct_up_to_inexact_justifications()

    wrong_realis = assessed(r, realis=KBPRealis.Generic)
    assert not wrong_realis.is_correct_up_to_inexact_justifications()


def test_type_wrong_leaves_rest_unassessed():
    r = response()
    a = assessed(r, W, None, None, None)
    assert not a.is_correct_up_to_inexact_justifications()
    assert FieldAssessment.parse('W') is W


def test_find_annotation_for_argument():
    r1 = response('rebels', 0)
    r2 = response('they', 20)
    annotated = [correct(r1), wrong(r2)]
    assert AssessedResponse.find_annotation_for_argument(r2, annotated) == wrong(r2)
    assert AssessedResponse.find_annotation_for_argument(response('army', 40), annotated) is None


def test_answer_key_validation():
    r = response()
    with pytest.raises(ValueError):
        answer_key([correct(response(docid='other'))])
    with pytest.raises(ValueError):
        answer_key([correct(r), wrong(r)])
    with pytest.raises(ValueError):
        answer_key([correct(r)], unannotated=[r])

    key = answer_key([correct(r)], unannotated=[response('army', 40)])
    assert key.correct_responses() == {correct(r)}
    assert len(key.all_responses()) == 2
    assert len(AnswerKey.empty(DOCID).all_responses()) == 0


def test_select_highest_confidence():
    low = response('rebels', 0)
    high = response('rebels', 0, predicate_justifications=[span(50, 56)])
    out = output([low, high], {low: 0.2, high: 0.9})
    assert out.select_from_multiple_system_responses([low, high]) == high


def test_select_breaks_ties_by_unique_id():
    a = response('rebels', 0, predicate_justifications=[span(50, 56)])
    b = response('rebels', 0, predicate_justifications=[span(60, 66)])
    out = output([a, b])
    expected = min([a, b], key=lambda r: r.unique_id())
    assert out.select_from_multiple_system_responses([a, b]) == expected
    assert out.select_from_multiple_system_responses([b, a]) == expected


def test_select_from_nothing_is_an_error():
    with pytest.raises(ValueError):
        ArgumentOutput.empty(DOCID).select_from_multiple_system_responses([])


def test_output_rejects_foreign_responses():
    with pytest.raises(ValueError):
        output([response(docid='other')])
