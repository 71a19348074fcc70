import logging
from collections import defaultdict

logger = logging.getLogger(__name__)


def _check_docid(docid, responses, what):
    for response in responses:
        if response.docid != docid:
            raise ValueError('{} for document {} contains a response from document {}'.format(
                what, docid, response.docid))


class CorefAnnotation(object):
    """Assessor coreference between argument fillers of one document.

    Annotators mark e.g. "Louisville" and "The Cards" as the same entity; we use this to group
    responses whose fillers differ only in which mention of the entity they picked.
    """

    def __init__(self, docid, string_to_cluster=None):
        """
        :type docid: str
        :type string_to_cluster: dict[kbpscorer.text.text_span.KBPString, int]
        """
        self.docid = docid
        self.string_to_cluster = dict(string_to_cluster) if string_to_cluster else dict()
        """:type: dict[kbpscorer.text.text_span.KBPString, int]"""

    def clusters(self):
        """
        :rtype: dict[int, frozenset[kbpscorer.text.text_span.KBPString]]
        """
        ret = defaultdict(set)
        for kbp_string, cluster_id in self.string_to_cluster.items():
            ret[cluster_id].add(kbp_string)
        return {cluster_id: frozenset(members) for cluster_id, members in ret.items()}

    @staticmethod
    def empty(docid):
        return CorefAnnotation(docid)


class AnswerKey(object):
    """The gold annotation for one document: assessed responses plus coreference."""

    def __init__(self, docid, annotated_responses, unannotated_responses=(), coref_annotation=None):
        """
        :type docid: str
        :type annotated_responses: collections.abc.Iterable[kbpscorer.annotation.response.AssessedResponse]
        :type unannotated_responses: collections.abc.Iterable[kbpscorer.annotation.response.Response]
        :type coref_annotation: CorefAnnotation
        """
        self.docid = docid
        self.annotated_responses = frozenset(annotated_responses)
        """:type: frozenset[kbpscorer.annotation.response.AssessedResponse]"""
        self.unannotated_responses = frozenset(unannotated_responses)
        """:type: frozenset[kbpscorer.annotation.response.Response]"""
        self.coref_annotation = coref_annotation if coref_annotation is not None else CorefAnnotation.empty(docid)

        _check_docid(docid, (r.response for r in self.annotated_responses), 'Answer key')
        _check_docid(docid, self.unannotated_responses, 'Answer key')
        if self.coref_annotation.docid != docid:
            raise ValueError('Coreference annotation for {} attached to answer key for {}'.format(
                self.coref_annotation.docid, docid))

        self._assessment_by_response = dict()
        for annotated_response in self.annotated_responses:
            response = annotated_response.response
            if response in self._assessment_by_response:
                raise ValueError('Response {} is assessed more than once in {}'.format(response.to_string(), docid))
            self._assessment_by_response[response] = annotated_response
        both = self.unannotated_responses.intersection(self._assessment_by_response.keys())
        if len(both) > 0:
            raise ValueError('{} responses are both annotated and unannotated in {}'.format(len(both), docid))

    def all_responses(self):
        return frozenset(self._assessment_by_response.keys()) | self.unannotated_responses

    def correct_responses(self):
        return frozenset(r for r in self.annotated_responses if r.is_correct_up_to_inexact_justifications())

    @staticmethod
    def empty(docid):
        return AnswerKey(docid, [], [], CorefAnnotation.empty(docid))


class ArgumentOutput(object):
    """A system's argument responses for one document, each with a confidence."""

    DEFAULT_CONFIDENCE = 1.0

    def __init__(self, docid, responses, confidences=None):
        """
        :type docid: str
        :type responses: collections.abc.Iterable[kbpscorer.annotation.response.Response]
        :type confidences: dict[kbpscorer.annotation.response.Response, float]
        """
        self.docid = docid
        self.responses = frozenset(responses)
        """:type: frozenset[kbpscorer.annotation.response.Response]"""
        _check_docid(docid, self.responses, 'System output')
        self.confidences = dict()
        for response in self.responses:
            if confidences is not None and response in confidences:
                self.confidences[response] = float(confidences[response])
            else:
                self.confidences[response] = self.DEFAULT_CONFIDENCE

    def confidence(self, response):
        return self.confidences[response]

    def select_from_multiple_system_responses(self, responses):
        """Choose the single response which represents an equivalence class.

        Highest confidence wins; ties go to the smallest unique id, so the choice never depends on
        set iteration order.

        :type responses: collections.abc.Collection[kbpscorer.annotation.response.Response]
        :rtype: kbpscorer.annotation.response.Response
        """
        if len(responses) == 0:
            raise ValueError('Cannot select a system response from an empty collection')
        return min(responses, key=lambda r: (-self.confidence(r), r.unique_id()))

    def copy_with_filtered_responses(self, predicate):
        kept = [r for r in self.responses if predicate(r)]
        return ArgumentOutput(self.docid, kept, {r: self.confidences[r] for r in kept})

    def __len__(self):
        return len(self.responses)

    @staticmethod
    def empty(docid):
        return ArgumentOutput(docid, [])
