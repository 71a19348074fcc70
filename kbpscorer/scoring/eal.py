import logging
from collections import defaultdict

from kbpscorer.common import parameters
from kbpscorer.common.utils import PrecisionRecallF1, safe_divide
from kbpscorer.scoring.scorer import answer_sources_for_document

logger = logging.getLogger(__name__)

DEFAULT_LAMBDA = 0.5
DEFAULT_FALSE_POSITIVE_PENALTY = 0.25


def check_lambda(lam):
    if not 0.0 <= lam <= 1.0:
        raise ValueError('lambda must be in [0,1], got {}'.format(lam))
    return float(lam)


class ScoringData(object):
    """Everything needed to score one document."""

    def __init__(self, answer_key, argument_output, reference_linking, system_linking):
        """
        :type answer_key: kbpscorer.annotation.answer_key.AnswerKey
        :type argument_output: kbpscorer.annotation.answer_key.ArgumentOutput
        :type reference_linking: kbpscorer.annotation.linking.ResponseLinking
        :type system_linking: kbpscorer.annotation.linking.ResponseLinking
        """
        for name, value in (('answer_key', answer_key), ('argument_output', argument_output),
                            ('reference_linking', reference_linking), ('system_linking', system_linking)):
            if value is None:
                raise ValueError('ScoringData requires {}'.format(name))
        docids = {answer_key.docid, argument_output.docid, reference_linking.docid, system_linking.docid}
        if len(docids) != 1:
            raise ValueError('ScoringData mixes documents: {}'.format(','.join(sorted(docids))))
        self.answer_key = answer_key
        self.argument_output = argument_output
        self.reference_linking = reference_linking
        self.system_linking = system_linking

    @property
    def docid(self):
        return self.answer_key.docid


class Result(object):
    """Unscaled scores and normalizers for one document. Scaled scores are derived from them."""

    def __init__(self, docid, unscaled_argument_score, argument_normalizer, linking_score,
                 linking_normalizer, lam):
        """
        :type linking_score: kbpscorer.common.utils.PrecisionRecallF1
        :type lam: float    # weight of the linking score in the combined score
        """
        self._docid = docid
        self._unscaled_argument_score = unscaled_argument_score
        self._argument_normalizer = argument_normalizer
        self._linking_score = linking_score
        self._linking_normalizer = linking_normalizer
        self._lam = lam

    def docid(self):
        return self._docid

    def unscaled_argument_score(self):
        return self._unscaled_argument_score

    def argument_normalizer(self):
        return self._argument_normalizer

    def linking_score(self):
        return self._linking_score

    def linking_normalizer(self):
        return self._linking_normalizer

    def unscaled_linking_score(self):
        return self._linking_score.f1 * self._linking_normalizer

    def unscaled_linking_precision(self):
        return self._linking_score.precision * self._linking_normalizer

    def unscaled_linking_recall(self):
        return self._linking_score.recall * self._linking_normalizer

    def scaled_argument_score(self):
        return safe_divide(self._unscaled_argument_score, self._argument_normalizer)

    def scaled_linking_score(self):
        return safe_divide(self.unscaled_linking_score(), self._linking_normalizer)

    def scaled_score(self):
        return (1.0 - self._lam) * self.scaled_argument_score() + self._lam * self.scaled_linking_score()


def project_linking(linking, to_item, keep=None):
    """Map a linking over responses to clusters of equivalence classes.

    :type linking: kbpscorer.annotation.linking.ResponseLinking
    :type to_item: callable     # Response -> equivalence class
    :type keep: set             # if given, only these items are kept
    :rtype: list[frozenset]
    """
    ret = set()
    for response_set in linking.response_sets:
        items = frozenset(i for i in (to_item(r) for r in response_set) if keep is None or i in keep)
        if len(items) > 0:
            ret.add(items)
    return list(ret)


def _item_to_related(clusters):
    """Each item's related set is the union of every cluster containing it."""
    ret = defaultdict(set)
    for cluster in clusters:
        for item in cluster:
            ret[item].update(cluster)
    return ret


def b_cubed(system_clusters, reference_clusters):
    """B-cubed precision and recall over items which may sit in more than one cluster.

    Precision is averaged over the system's items, recall over the reference's items. An item missing from
    the other side contributes zero.

    :type system_clusters: list[frozenset]
    :type reference_clusters: list[frozenset]
    :rtype: kbpscorer.common.utils.PrecisionRecallF1
    """
    system = _item_to_related(system_clusters)
    reference = _item_to_related(reference_clusters)

    precision_sum = 0.0
    for item in sorted(system, key=lambda i: i.sort_key()):
        related = system[item]
        precision_sum += len(related & reference.get(item, set())) / len(related)
    recall_sum = 0.0
    for item in sorted(reference, key=lambda i: i.sort_key()):
        related = reference[item]
        recall_sum += len(related & system.get(item, set())) / len(related)

    return PrecisionRecallF1(safe_divide(precision_sum, len(system)), safe_divide(recall_sum, len(reference)))


class EALScorer2015Style(object):
    """Scores one document's arguments and linking in the style of the KBP 2015 event argument and linking task."""

    def __init__(self, lam=DEFAULT_LAMBDA, false_positive_penalty=DEFAULT_FALSE_POSITIVE_PENALTY):
        """
        :type lam: float
        :type false_positive_penalty: float
        """
        self._lam = check_lambda(lam)
        if false_positive_penalty < 0:
            raise ValueError('false_positive_penalty must be non-negative, got {}'.format(false_positive_penalty))
        self.false_positive_penalty = float(false_positive_penalty)

    @staticmethod
    def create(params):
        """
        :type params: dict
        """
        return EALScorer2015Style(parameters.get_float(params, 'lambda', DEFAULT_LAMBDA),
                                  parameters.get_float(params, 'false_positive_penalty',
                                                       DEFAULT_FALSE_POSITIVE_PENALTY))

    def lam(self):
        return self._lam

    def score(self, scoring_data):
        """
        :type scoring_data: ScoringData
        :rtype: Result
        """
        sources = answer_sources_for_document(scoring_data.answer_key, scoring_data.argument_output)
        answer_key_source = sources.answer_key_source
        system_source = sources.system_source

        correct_answerables = frozenset(sources.extractor(r.response)
                                        for r in scoring_data.answer_key.correct_responses())

        argument_score = 0.0
        for answerable in sorted(system_source.answerables(), key=lambda a: a.sort_key()):
            if answerable in correct_answerables:
                argument_score += 1.0
            elif len(answer_key_source.answers(answerable)) > 0:
                argument_score -= self.false_positive_penalty
            else:
                logger.warning('Unassessed equivalence class %s in %s', answerable.to_string(), scoring_data.docid)
        argument_score = max(0.0, argument_score)

        # linking is only scored over correct equivalence classes
        reference_clusters = project_linking(scoring_data.reference_linking, sources.extractor, correct_answerables)
        kept_responses = system_source.system_output.responses
        system_linking = scoring_data.system_linking.copy_with_filtered_responses(lambda r: r in kept_responses)
        reference_items = frozenset(i for cluster in reference_clusters for i in cluster)
        system_clusters = project_linking(system_linking, sources.extractor, reference_items)
        linking_score = b_cubed(system_clusters, reference_clusters)

        result = Result(scoring_data.docid, argument_score, len(correct_answerables), linking_score,
                        len(reference_items), self._lam)
        logger.debug('%s: arg=%.4f/%d link=%s/%d', scoring_data.docid, argument_score, len(correct_answerables),
                     linking_score.to_string(), len(reference_items))
        return result
