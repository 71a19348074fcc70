import logging
import os
from collections import namedtuple

from kbpscorer.annotation.response import AssessedResponse
from kbpscorer.common.utils import document_order, write_text
from kbpscorer.scoring.answer_source import AnswerKeyAnswerSource, SystemOutputAnswerSource
from kbpscorer.scoring.equivalence import EntityNormalizer, TypeRoleFillerRealis
from kbpscorer.scoring.ordering import ByJustificationLocation
from kbpscorer.scoring.temporal import OnlyMostSpecificTemporal

logger = logging.getLogger(__name__)

HAPPY_ANSWERABLES_FILE = 'happyAnswerables.txt'

DocumentAnswerSources = namedtuple('DocumentAnswerSources', ['answer_key_source', 'system_source', 'extractor'])


def answer_sources_for_document(answer_key, argument_output):
    """Group one document's gold and system responses into equivalence classes.

    Fillers are normalized using the assessors' coreference, so e.g. (Conflict.Attack, Attacker, "the rebels",
    Actual) and (Conflict.Attack, Attacker, "they", Actual) fall in the same class if the two mentions were
    coreffed. If a correct temporal argument is in the answer key, less specific versions of it are removed
    from the system output first.

    :type answer_key: kbpscorer.annotation.answer_key.AnswerKey
    :type argument_output: kbpscorer.annotation.answer_key.ArgumentOutput
    :rtype: DocumentAnswerSources
    """
    temporal_filter = OnlyMostSpecificTemporal.for_answer_key(answer_key)
    entity_normalizer = EntityNormalizer.from_annotation(answer_key)
    extractor = TypeRoleFillerRealis.extractor(entity_normalizer)
    answer_key_source = AnswerKeyAnswerSource.for_answerable(answer_key, extractor)
    system_source = SystemOutputAnswerSource.for_answerable(temporal_filter.apply(argument_output), extractor)
    return DocumentAnswerSources(answer_key_source, system_source, extractor)


class KBPScorer(object):
    """Aligns system output to gold annotation, class by class, and reports the alignment to observers."""

    @staticmethod
    def create():
        return KBPScorer()

    def run(self, system_output_store, gold_answer_store, corpus_observers, base_output_dir,
            documents_to_score=None):
        """Scores the given documents, by default every document in either store.

        :type system_output_store: kbpscorer.annotation.ingestion.SystemOutputStore
        :type gold_answer_store: kbpscorer.annotation.ingestion.AnnotationStore
        :type corpus_observers: list[kbpscorer.scoring.observer.ScoringObserver]
        :type base_output_dir: str
        :type documents_to_score: collections.abc.Iterable[str]
        """
        if documents_to_score is None:
            documents_to_score = system_output_store.docids() | gold_answer_store.docids()
        documents_to_score = document_order(documents_to_score)

        for observer in corpus_observers:
            observer.start_corpus()
        self.compare_output_to_gold(system_output_store, gold_answer_store, documents_to_score,
                                    corpus_observers, base_output_dir)

    def compare_output_to_gold(self, system_output_store, gold_answer_store, documents_to_score,
                               corpus_observers, base_output_dir):
        scorer_to_output_dir = self._make_scorer_to_output_dir(base_output_dir, corpus_observers)
        happy_lines = []

        for docid in documents_to_score:
            logger.info('Scoring document: %s', docid)
            try:
                happy_answerables = self.score_document(
                    gold_answer_store.read_or_empty(docid), system_output_store.read_or_empty(docid),
                    corpus_observers, scorer_to_output_dir)
            except Exception as e:
                raise RuntimeError('Exception while processing {}'.format(docid)) from e
            happy_lines.extend('{}\t{}'.format(docid, a.to_string()) for a in happy_answerables)

        logger.info('Reports for corpus:')
        for observer in corpus_observers:
            observer.end_corpus()
        for observer in corpus_observers:
            observer.write_corpus_output(scorer_to_output_dir[observer])

        write_text(os.path.join(base_output_dir, HAPPY_ANSWERABLES_FILE),
                   ''.join(line + '\n' for line in happy_lines))

    def score_document(self, answer_key, argument_output, corpus_observers, scorer_to_output_dir=None):
        """Runs the per-document observer lifecycle.

        Returns the equivalence classes with at least one assessment correct up to inexact justifications,
        in class order.

        :type answer_key: kbpscorer.annotation.answer_key.AnswerKey
        :type argument_output: kbpscorer.annotation.answer_key.ArgumentOutput
        :rtype: list[kbpscorer.scoring.equivalence.TypeRoleFillerRealis]
        """
        sources = answer_sources_for_document(answer_key, argument_output)
        answer_key_source = sources.answer_key_source
        system_source = sources.system_source

        # each corpus observer gets its own observer for this document
        doc_observers = [(observer.document_observer(system_source, answer_key_source), observer)
                         for observer in corpus_observers]

        for doc_observer, _ in doc_observers:
            doc_observer.start()

        all_answerables = system_source.answerables() | answer_key_source.answerables()
        order = ByJustificationLocation.create(answer_key_source, system_source)

        happy_answerables = set()
        for answerable in order.sorted_copy(all_answerables):
            logger.debug('Scoring equivalence class %s', answerable.to_string())
            if self.align_answerable(answerable, system_source, answer_key_source,
                                     [d for d, _ in doc_observers]):
                happy_answerables.add(answerable)

        for doc_observer, _ in doc_observers:
            doc_observer.end()

        if scorer_to_output_dir is not None:
            for doc_observer, corpus_observer in doc_observers:
                output_dir = os.path.join(scorer_to_output_dir[corpus_observer], answer_key.docid)
                os.makedirs(output_dir, exist_ok=True)
                doc_observer.write_document_output(output_dir)

        return order.sorted_copy(happy_answerables)

    @staticmethod
    def align_answerable(answerable, system_source, answer_key_source, doc_observers):
        """Notifies observers of exactly one alignment case for this equivalence class.

        Returns whether any assessment in the class is correct up to inexact justifications.
        """
        for doc_observer in doc_observers:
            doc_observer.start_answerable(answerable)

        responses = system_source.answers(answerable)
        annotated_responses = answer_key_source.answers(answerable)
        happy = any(a.is_correct_up_to_inexact_justifications() for a in annotated_responses)

        for doc_observer in doc_observers:
            doc_observer.observe(answerable, responses, annotated_responses)

        if len(responses) > 0 and len(annotated_responses) > 0:
            selected = system_source.select_from_multiple_system_responses(responses)
            annotation = AssessedResponse.find_annotation_for_argument(selected, annotated_responses)
            if annotation is not None:
                for doc_observer in doc_observers:
                    doc_observer.annotated_selected_response(answerable, selected, annotation, annotated_responses)
            else:
                for doc_observer in doc_observers:
                    doc_observer.unannotated_selected_response(answerable, selected, annotated_responses)
                for doc_observer in doc_observers:
                    doc_observer.responses_unaligned(answerable, responses, annotated_responses)
        elif len(responses) > 0:
            for doc_observer in doc_observers:
                doc_observer.responses_only_non_empty(answerable, responses)
        elif len(annotated_responses) > 0:
            for doc_observer in doc_observers:
                doc_observer.annotations_only_non_empty(answerable, annotated_responses)
        else:
            raise RuntimeError("Can't happen: alignment failure for {}".format(answerable.to_string()))

        for doc_observer in doc_observers:
            doc_observer.end_answerable(answerable)
        return happy

    @staticmethod
    def _make_scorer_to_output_dir(base_output_dir, corpus_observers):
        ret = dict()
        for observer in corpus_observers:
            output_dir = os.path.join(base_output_dir, observer.name)
            os.makedirs(output_dir, exist_ok=True)
            ret[observer] = output_dir
        return ret
