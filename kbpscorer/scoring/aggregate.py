import logging
import os

from kbpscorer.common.utils import document_order, safe_divide, write_text
from kbpscorer.scoring.eal import EALScorer2015Style, ScoringData, check_lambda

logger = logging.getLogger(__name__)

SCORES_BY_DOCUMENT_FILE = 'scoresByDocument.txt'
AGGREGATE_SCORE_FILE = 'aggregateScore.txt'


class CorpusScore(object):
    """Corpus-level scores.

    Raw scores and normalizers are summed over documents before dividing.
    """

    def __init__(self, raw_argument_score_sum, argument_normalizer_sum, raw_linking_score_sum,
                 linking_normalizer_sum, raw_linking_precision_sum, raw_linking_recall_sum, lam):
        self.raw_argument_score_sum = raw_argument_score_sum
        self.argument_normalizer_sum = argument_normalizer_sum
        self.raw_linking_score_sum = raw_linking_score_sum
        self.linking_normalizer_sum = linking_normalizer_sum
        self.raw_linking_precision_sum = raw_linking_precision_sum
        self.raw_linking_recall_sum = raw_linking_recall_sum
        self.lam = lam

        self.argument_score = safe_divide(raw_argument_score_sum, argument_normalizer_sum)
        self.linking_score = safe_divide(raw_linking_score_sum, linking_normalizer_sum)
        self.overall_score = (1.0 - lam) * self.argument_score + lam * self.linking_score
        self.linking_precision = safe_divide(raw_linking_precision_sum, linking_normalizer_sum)
        self.linking_recall = safe_divide(raw_linking_recall_sum, linking_normalizer_sum)

    def to_string(self):
        return (
            '%30s:%8.2f\n' % ('Aggregate argument score', 100.0 * self.argument_score) +
            '%30s:%8.2f\n' % ('Aggregate linking score', 100.0 * self.linking_score) +
            '%30s:%8.2f\n' % ('Overall score', 100.0 * self.overall_score) +
            '%30s:%8.2f\n' % ('Aggregate linking precision', 100.0 * self.linking_precision) +
            '%30s:%8.2f\n' % ('Aggregate linking recall', 100.0 * self.linking_recall))


def aggregate(per_doc_results, lam):
    """
    :type per_doc_results: list[kbpscorer.scoring.eal.Result]
    :type lam: float
    :rtype: CorpusScore
    """
    lam = check_lambda(lam)
    raw_arg_score_sum = 0.0
    arg_normalizer_sum = 0.0
    raw_link_score_sum = 0.0
    link_normalizer_sum = 0.0
    raw_link_precision_sum = 0.0
    raw_link_recall_sum = 0.0
    # summed in document order
    for result in per_doc_results:
        raw_arg_score_sum += max(0.0, result.unscaled_argument_score())
        arg_normalizer_sum += result.argument_normalizer()
        raw_link_score_sum += result.unscaled_linking_score()
        link_normalizer_sum += result.linking_normalizer()
        raw_link_precision_sum += result.unscaled_linking_precision()
        raw_link_recall_sum += result.unscaled_linking_recall()
    return CorpusScore(raw_arg_score_sum, arg_normalizer_sum, raw_link_score_sum, link_normalizer_sum,
                       raw_link_precision_sum, raw_link_recall_sum, lam)


def scores_by_document_to_string(per_doc_results):
    lines = ['%40s\t%10s\t%10s\t%10s\t%10s' % ('Document', 'Arg', 'Link-P,R,F', 'Link', 'Combined')]
    for result in per_doc_results:
        linking_score = result.linking_score()
        lines.append('%40s\t%10.2f\t%7s%7s%7s\t%10.2f\t%10.2f' % (
            result.docid(),
            100.0 * result.scaled_argument_score(),
            '%.1f' % (100.0 * linking_score.precision),
            '%.1f' % (100.0 * linking_score.recall),
            '%.1f' % (100.0 * linking_score.f1),
            100.0 * result.scaled_linking_score(),
            100.0 * result.scaled_score()))
    return '\n'.join(lines)


class KBP2015Scorer(object):
    """Scores a system's arguments and linking over a corpus and writes the per-document and aggregate reports."""

    def __init__(self, document_scorer):
        """
        :type document_scorer: kbpscorer.scoring.eal.EALScorer2015Style
        """
        if document_scorer is None:
            raise ValueError('KBP2015Scorer requires a document scorer')
        self.document_scorer = document_scorer

    @staticmethod
    def from_parameters(params):
        """
        :type params: dict
        """
        return KBP2015Scorer(EALScorer2015Style.create(params))

    def score_documents(self, gold_answer_store, reference_linking_store, argument_store, system_linking_store,
                        docs_to_score):
        """
        :type gold_answer_store: kbpscorer.annotation.ingestion.AnnotationStore
        :type reference_linking_store: kbpscorer.annotation.ingestion.LinkingStore
        :type argument_store: kbpscorer.annotation.ingestion.SystemOutputStore
        :type system_linking_store: kbpscorer.annotation.ingestion.LinkingStore
        :type docs_to_score: collections.abc.Iterable[str]
        :rtype: list[kbpscorer.scoring.eal.Result]
        """
        per_doc_results = []
        for docid in docs_to_score:
            logger.info('Scoring document: %s', docid)
            try:
                argument_key = gold_answer_store.read(docid)
                argument_output = argument_store.read_or_empty(docid)

                reference_linking = reference_linking_store.read(argument_key)
                system_linking = system_linking_store.read(argument_output)
                if reference_linking is None:
                    raise RuntimeError('Reference linking missing for {}'.format(docid))
                if system_linking is None:
                    raise RuntimeError('System linking missing for {}'.format(docid))

                scoring_data = ScoringData(argument_key, argument_output, reference_linking, system_linking)
                per_doc_results.append(self.document_scorer.score(scoring_data))
            except Exception as e:
                raise RuntimeError('Exception while processing {}'.format(docid)) from e
        return per_doc_results

    def score(self, gold_answer_store, reference_linking_store, argument_store, system_linking_store,
              docs_to_score, output_dir):
        """Scores every document, then writes scoresByDocument.txt and aggregateScore.txt to output_dir.

        :rtype: CorpusScore
        """
        docs_to_score = document_order(docs_to_score)
        per_doc_results = self.score_documents(gold_answer_store, reference_linking_store, argument_store,
                                               system_linking_store, docs_to_score)
        corpus_score = aggregate(per_doc_results, self.document_scorer.lam())

        os.makedirs(output_dir, exist_ok=True)
        write_text(os.path.join(output_dir, SCORES_BY_DOCUMENT_FILE), scores_by_document_to_string(per_doc_results))
        write_text(os.path.join(output_dir, AGGREGATE_SCORE_FILE), corpus_score.to_string())
        logger.info('Wrote scores for %d documents to %s', len(per_doc_results), output_dir)
        return corpus_score
