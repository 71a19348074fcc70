import logging

logger = logging.getLogger(__name__)


class ByJustificationLocation(object):
    """Orders the equivalence classes of a document by where their earliest filler occurs in the text.

    Classes with no located response go last. Ties are broken by the natural order of the class key, so
    the order is total and identical from run to run.
    """

    # sorts after any real offset
    UNLOCATED = (float('inf'), float('inf'))

    def __init__(self, earliest_location):
        """
        :type earliest_location: dict[kbpscorer.scoring.equivalence.TypeRoleFillerRealis, kbpscorer.text.text_span.CharOffsetSpan]
        """
        self._earliest_location = earliest_location

    @staticmethod
    def create(*answer_sources):
        """
        :type answer_sources: list[kbpscorer.scoring.answer_source.AnswerKeyAnswerSource | kbpscorer.scoring.answer_source.SystemOutputAnswerSource]
        """
        earliest = dict()
        for answer_source in answer_sources:
            for answerable in answer_source.answerables():
                for response in answer_source.responses(answerable):
                    location = response.base_filler
                    if answerable not in earliest or location < earliest[answerable]:
                        earliest[answerable] = location
        return ByJustificationLocation(earliest)

    def sort_key(self, answerable):
        location = self._earliest_location.get(answerable)
        if location is None:
            location = self.UNLOCATED
        return (tuple(location), answerable.sort_key())

    def sorted_copy(self, answerables):
        return sorted(answerables, key=self.sort_key)

    def compare(self, a, b):
        ka = self.sort_key(a)
        kb = self.sort_key(b)
        if ka < kb:
            return -1
        elif ka > kb:
            return 1
        return 0
