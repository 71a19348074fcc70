import logging
import re
from collections import defaultdict

logger = logging.getLogger(__name__)

TEMPORAL_ROLES = frozenset(['Time'])


class TimexExpression(object):
    """A normalized date of the form YYYY-MM-DD, where any digit may be replaced by X if unknown."""

    PATTERN = re.compile(r'^([0-9X]{4})-([0-9X]{2})-([0-9X]{2})$')

    def __init__(self, year, month, day):
        self.year = year
        self.month = month
        self.day = day

    @staticmethod
    def parse(s):
        """
        :rtype: TimexExpression | None
        """
        m = TimexExpression.PATTERN.match(s.strip())
        if m is None:
            return None
        return TimexExpression(m.group(1), m.group(2), m.group(3))

    def to_string(self):
        return '{}-{}-{}'.format(self.year, self.month, self.day)

    def is_less_specific_than(self, other):
        """True if other fills in strictly more of the date, and agrees wherever this one is filled in.

        2013-05-XX and 2013-XX-XX are both less specific than 2013-05-12; 2013-06-XX is not.

        :type other: TimexExpression
        """
        mine = self.to_string()
        theirs = other.to_string()
        if mine == theirs:
            return False
        for a, b in zip(mine, theirs):
            if a != 'X' and a != b:
                return False
        return True

    def __eq__(self, other):
        if isinstance(other, TimexExpression):
            return self.to_string() == other.to_string()
        return NotImplemented

    def __hash__(self):
        return hash(self.to_string())


def is_temporal(response):
    return response.role in TEMPORAL_ROLES


class OnlyMostSpecificTemporal(object):
    """If a correct temporal argument is in the answer key, less specific versions of it are removed from system output.

    A system which says an attack happened on 2013-05-12 and also in 2013-XX-XX should not be
    penalized for the redundant, vaguer response once the specific date is known to be right.
    """

    def __init__(self, docid, best_times):
        """
        :type best_times: dict[tuple, list[TimexExpression]]   # (type, role, realis) -> correct times
        """
        self.docid = docid
        self.best_times = best_times

    @staticmethod
    def for_answer_key(answer_key):
        """
        :type answer_key: kbpscorer.annotation.answer_key.AnswerKey
        """
        best_times = defaultdict(list)
        for assessed_response in answer_key.annotated_responses:
            response = assessed_response.response
            if is_temporal(response) and assessed_response.is_correct_up_to_inexact_justifications():
                timex = TimexExpression.parse(response.canonical_argument.string)
                if timex is not None:
                    best_times[(response.event_type, response.role, response.realis)].append(timex)
                else:
                    logger.debug('Ignoring unparseable correct time "%s" in %s',
                                 response.canonical_argument.string, answer_key.docid)
        return OnlyMostSpecificTemporal(answer_key.docid, dict(best_times))

    def is_superseded(self, response):
        """
        :type response: kbpscorer.annotation.response.Response
        """
        if not is_temporal(response):
            return False
        candidates = self.best_times.get((response.event_type, response.role, response.realis))
        if not candidates:
            return False
        timex = TimexExpression.parse(response.canonical_argument.string)
        if timex is None:
            return False
        return any(timex.is_less_specific_than(best) for best in candidates)

    def apply(self, argument_output):
        """
        :type argument_output: kbpscorer.annotation.answer_key.ArgumentOutput
        :rtype: kbpscorer.annotation.answer_key.ArgumentOutput
        """
        if argument_output.docid != self.docid:
            raise ValueError('Temporal filter for {} applied to output for {}'.format(self.docid, argument_output.docid))
        ret = argument_output.copy_with_filtered_responses(lambda r: not self.is_superseded(r))
        removed = len(argument_output) - len(ret)
        if removed > 0:
            logger.debug('Removed %d less specific temporal responses from %s', removed, self.docid)
        return ret
