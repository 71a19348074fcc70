import logging
from collections import defaultdict

logger = logging.getLogger(__name__)


class ResponseLinking(object):
    """A partition of a document's responses into event frames ("response sets").

    Responses which were not linked to anything are kept as incomplete responses. A response may
    belong to at most one response set, and never to both a response set and the incomplete set.
    """

    def __init__(self, docid, response_sets, incomplete_responses=()):
        """
        :type docid: str
        :type response_sets: collections.abc.Iterable[collections.abc.Iterable[kbpscorer.annotation.response.Response]]
        :type incomplete_responses: collections.abc.Iterable[kbpscorer.annotation.response.Response]
        """
        self.docid = docid
        self.response_sets = frozenset(frozenset(s) for s in response_sets)
        """:type: frozenset[frozenset[kbpscorer.annotation.response.Response]]"""
        self.incomplete_responses = frozenset(incomplete_responses)
        self._check_invariants()

    def _check_invariants(self):
        seen = set()
        for response_set in self.response_sets:
            if len(response_set) == 0:
                raise ValueError('Empty response set in linking for {}'.format(self.docid))
            for response in response_set:
                if response.docid != self.docid:
                    raise ValueError('Linking for {} contains response from {}'.format(self.docid, response.docid))
                if response in seen:
                    raise ValueError('Response {} appears in more than one response set in linking for {}'.format(
                        response.to_string(), self.docid))
                seen.add(response)
        overlap = seen.intersection(self.incomplete_responses)
        if len(overlap) > 0:
            raise ValueError('{} responses are both linked and incomplete in linking for {}'.format(
                len(overlap), self.docid))

    def all_responses(self):
        ret = set(self.incomplete_responses)
        for response_set in self.response_sets:
            ret.update(response_set)
        return frozenset(ret)

    def copy_with_filtered_responses(self, predicate):
        """Drop every response failing predicate; response sets left empty disappear."""
        new_sets = []
        for response_set in self.response_sets:
            kept = [r for r in response_set if predicate(r)]
            if len(kept) > 0:
                new_sets.append(kept)
        return ResponseLinking(self.docid, new_sets, [r for r in self.incomplete_responses if predicate(r)])

    def __eq__(self, other):
        if isinstance(other, ResponseLinking):
            return (self.docid == other.docid and self.response_sets == other.response_sets and
                    self.incomplete_responses == other.incomplete_responses)
        return NotImplemented

    def __hash__(self):
        return hash((self.docid, self.response_sets, self.incomplete_responses))


class SameEventTypeLinker(object):
    """Default linking for systems which only produce arguments.

    Every response whose realis is in the linkable set is linked with all other such responses of the
    same event type. The remaining responses are left incomplete.
    """

    def __init__(self, realis_to_link):
        """
        :type realis_to_link: collections.abc.Iterable[kbpscorer.annotation.response.KBPRealis]
        """
        self.realis_to_link = frozenset(realis_to_link)

    def link(self, argument_output):
        """
        :type argument_output: kbpscorer.annotation.answer_key.ArgumentOutput
        :rtype: ResponseLinking
        """
        by_type = defaultdict(list)
        incomplete = []
        for response in argument_output.responses:
            if response.realis in self.realis_to_link:
                by_type[response.event_type].append(response)
            else:
                incomplete.append(response)
        logger.debug('Default linking for %s: %d event types, %d incomplete responses',
                     argument_output.docid, len(by_type), len(incomplete))
        return ResponseLinking(argument_output.docid, by_type.values(), incomplete)
