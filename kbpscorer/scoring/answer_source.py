import logging
from collections import defaultdict

logger = logging.getLogger(__name__)


def group_by_answerable(items, extract):
    """
    :type items: collections.abc.Iterable
    :type extract: callable  # item -> equivalence class key
    :rtype: dict[object, frozenset]
    """
    ret = defaultdict(set)
    for item in items:
        ret[extract(item)].add(item)
    return {k: frozenset(v) for k, v in ret.items()}


class AnswerKeyAnswerSource(object):
    """Assessed responses of one document, indexed by equivalence class."""

    def __init__(self, answer_key, answerable_to_responses):
        """
        :type answer_key: kbpscorer.annotation.answer_key.AnswerKey
        :type answerable_to_responses: dict[object, frozenset[kbpscorer.annotation.response.AssessedResponse]]
        """
        self.answer_key = answer_key
        self._answerable_to_responses = answerable_to_responses

    @staticmethod
    def for_answerable(answer_key, extractor):
        """
        :type extractor: callable  # kbpscorer.annotation.response.Response -> equivalence class key
        """
        return AnswerKeyAnswerSource(answer_key, group_by_answerable(
            answer_key.annotated_responses, lambda assessed: extractor(assessed.response)))

    @property
    def docid(self):
        return self.answer_key.docid

    def answerables(self):
        return frozenset(self._answerable_to_responses.keys())

    def answers(self, answerable):
        """
        :rtype: frozenset[kbpscorer.annotation.response.AssessedResponse]
        """
        return self._answerable_to_responses.get(answerable, frozenset())

    def responses(self, answerable):
        return frozenset(a.response for a in self.answers(answerable))


class SystemOutputAnswerSource(object):
    """System responses of one document, indexed by equivalence class."""

    def __init__(self, system_output, answerable_to_responses):
        """
        :type system_output: kbpscorer.annotation.answer_key.ArgumentOutput
        :type answerable_to_responses: dict[object, frozenset[kbpscorer.annotation.response.Response]]
        """
        self.system_output = system_output
        self._answerable_to_responses = answerable_to_responses

    @staticmethod
    def for_answerable(system_output, extractor):
        return SystemOutputAnswerSource(system_output, group_by_answerable(system_output.responses, extractor))

    @property
    def docid(self):
        return self.system_output.docid

    def answerables(self):
        return frozenset(self._answerable_to_responses.keys())

    def answers(self, answerable):
        """
        :rtype: frozenset[kbpscorer.annotation.response.Response]
        """
        return self._answerable_to_responses.get(answerable, frozenset())

    def responses(self, answerable):
        return self.answers(answerable)

    def select_from_multiple_system_responses(self, responses):
        return self.system_output.select_from_multiple_system_responses(responses)
