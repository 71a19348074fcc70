from builders import answer_key, correct, output, response
from kbpscorer.annotation.response import KBPRealis
from kbpscorer.scoring.answer_source import AnswerKeyAnswerSource, SystemOutputAnswerSource
from kbpscorer.scoring.equivalence import EntityNormalizer, TypeRoleFillerRealis
from kbpscorer.text.text_span import KBPString


def test_uncovered_fillers_normalize_to_themselves():
    normalizer = EntityNormalizer.from_annotation(answer_key([]))
    s = KBPString.of('rebels', 0, 5)
    assert normalizer.normalize(s) == s


def test_coreffed_fillers_share_canonical_member():
    louisville = KBPString.of('Louisville', 30, 39)
    cards = KBPString.of('The Cards', 10, 18)
    other = KBPString.of('Kentucky', 50, 57)
    normalizer = EntityNormalizer.from_annotation(answer_key([], coref=[[louisville, cards], [other]]))
    assert normalizer.normalize(louisville) == cards
    assert normalizer.normalize(cards) == cards
    assert normalizer.normalize(other) == other


def test_coreffed_responses_fall_in_one_class():
    louisville = response('Louisville', 30, event_type='Contact.Meet', role='Entity')
    cards = response('The Cards', 10, event_type='Contact.Meet', role='Entity')
    generic_cards = response('The Cards', 10, event_type='Contact.Meet', role='Entity', realis=KBPRealis.Generic)
    key = answer_key([correct(louisville)],
                     coref=[[louisville.canonical_argument, cards.canonical_argument]])
    extract = TypeRoleFillerRealis.extractor(EntityNormalizer.from_annotation(key))

    assert extract(louisville) == extract(cards)
    assert extract(cards) != extract(generic_cards)

    gold = AnswerKeyAnswerSource.for_answerable(key, extract)
    system = SystemOutputAnswerSource.for_answerable(output([cards, generic_cards]), extract)
    assert gold.answerables() == {extract(cards)}
    assert system.answerables() == {extract(cards), extract(generic_cards)}
    assert system.answers(extract(cards)) == {cards}
    assert gold.answers(extract(generic_cards)) == frozenset()


def test_every_response_lands_in_exactly_one_class():
    responses = [response('rebels', 0), response('they', 20), response('army', 40, role='Target'),
                 response('they', 20, realis=KBPRealis.Other)]
    extract = TypeRoleFillerRealis.extractor(EntityNormalizer(dict()))
    system = SystemOutputAnswerSource.for_answerable(output(responses), extract)
    grouped = [r for a in system.answerables() for r in system.answers(a)]
    assert sorted(grouped, key=lambda r: r.unique_id()) == sorted(responses, key=lambda r: r.unique_id())


def test_class_key_is_hashable_and_printable():
    r = response('rebels', 0)
    key = TypeRoleFillerRealis.extractor(EntityNormalizer(dict()))(r)
    assert {key: 1}[key] == 1
    assert key.to_string() == 'Conflict.Attack/Attacker/rebels[0-5]/Actual'
