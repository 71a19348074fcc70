import logging
import os
from collections import Counter, defaultdict

import numpy as np

from kbpscorer.common.utils import (F1Score, Presence, any_answer_correct, any_answer_semantically_correct,
                                    is_present, write_text)
from kbpscorer.scoring.observer import DocumentObserver, ScoringObserver

logger = logging.getLogger(__name__)

ALL_EVENT_TYPES = 'ALL'


class ArgumentCounts(object):
    """True positive, false positive, false negative and unassessed counts, broken down by event type."""

    def __init__(self):
        self.tp = defaultdict(int)
        self.fp = defaultdict(int)
        self.fn = defaultdict(int)
        self.unassessed = defaultdict(int)

    def add(self, other):
        """
        :type other: ArgumentCounts
        """
        for mine, theirs in ((self.tp, other.tp), (self.fp, other.fp), (self.fn, other.fn),
                             (self.unassessed, other.unassessed)):
            for k, v in theirs.items():
                mine[k] += v

    def event_types(self):
        return sorted(set(self.tp) | set(self.fp) | set(self.fn) | set(self.unassessed))

    def f1(self, event_type=None):
        if event_type is None:
            tp = sum(self.tp.values())
            fp = sum(self.fp.values())
            fn = sum(self.fn.values())
            label = ALL_EVENT_TYPES
        else:
            tp = self.tp[event_type]
            fp = self.fp[event_type]
            fn = self.fn[event_type]
            label = event_type
        return F1Score(tp, tp + fn, tp + fp, class_label=label)

    def score_breakdown(self):
        """
        :rtype: dict[str, kbpscorer.common.utils.F1Score]
        """
        return {event_type: self.f1(event_type) for event_type in self.event_types()}

    def to_string(self):
        lines = []
        for event_type, f1_score in sorted(self.score_breakdown().items()):
            lines.append('{}\t{}\tunassessed={}'.format(event_type, f1_score.to_string(),
                                                     self.unassessed[event_type]))
        lines.append('{}\t{}\tunassessed={}'.format(ALL_EVENT_TYPES, self.f1().to_string(),
                                                 sum(self.unassessed.values())))
        return '\n'.join(lines) + '\n'


class ArgumentScoringObserver(ScoringObserver):
    """Standard precision/recall over equivalence classes, judged by the selected system response.

    A selected response judged correct is a true positive. One judged wrong is a false positive, and also a
    false negative when some other assessment in the class is correct. A correct class the system never
    answered is a false negative. Responses nobody assessed are counted separately and never scored.
    """

    SCORE_FILE = 'score.txt'

    def __init__(self, name='ArgumentScoring', semantic=False):
        super(ArgumentScoringObserver, self).__init__(name)
        self.semantic = semantic
        self.counts = ArgumentCounts()

    def is_correct(self, assessed_response):
        if self.semantic:
            return assessed_response.is_correct_up_to_inexact_justifications()
        return assessed_response.is_completely_correct()

    def start_corpus(self):
        self.counts = ArgumentCounts()

    def document_observer(self, system_source, answer_key_source):
        return ArgumentScoringObserver.DocumentArgumentObserver(self, system_source, answer_key_source)

    def end_corpus(self):
        logger.info('%s: %s', self.name, self.counts.f1().to_string())

    def write_corpus_output(self, directory):
        write_text(os.path.join(directory, self.SCORE_FILE), self.counts.to_string())

    class DocumentArgumentObserver(DocumentObserver):
        def __init__(self, parent, system_source, answer_key_source):
            super(ArgumentScoringObserver.DocumentArgumentObserver, self).__init__(
                parent, system_source, answer_key_source)
            self.counts = ArgumentCounts()

        def _any_correct(self, annotated_responses):
            return any(self.parent.is_correct(a) for a in annotated_responses)

        def annotated_selected_response(self, answerable, response, annotation, annotated_responses):
            event_type = answerable.event_type
            if self.parent.is_correct(annotation):
                self.counts.tp[event_type] += 1
            else:
                self.counts.fp[event_type] += 1
                if self._any_correct(annotated_responses):
                    self.counts.fn[event_type] += 1

        def unannotated_selected_response(self, answerable, response, annotated_responses):
            self.counts.unassessed[answerable.event_type] += 1
            if self._any_correct(annotated_responses):
                self.counts.fn[answerable.event_type] += 1

        def responses_only_non_empty(self, answerable, responses):
            self.counts.unassessed[answerable.event_type] += 1

        def annotations_only_non_empty(self, answerable, annotated_responses):
            if self._any_correct(annotated_responses):
                self.counts.fn[answerable.event_type] += 1

        def end(self):
            self.parent.counts.add(self.counts)

        def write_document_output(self, directory):
            write_text(os.path.join(directory, self.parent.SCORE_FILE), self.counts.to_string())


class PresenceObserver(ScoringObserver):
    """Confusion between whether the system answered a class and whether the class has a correct answer."""

    CONFUSION_FILE = 'confusion.txt'
    PRESENCE_ORDER = [Presence.PRESENT, Presence.ABSENT]

    def __init__(self, name='Presence', semantic=False):
        super(PresenceObserver, self).__init__(name)
        self.gold_presence = any_answer_semantically_correct if semantic else any_answer_correct
        self.confusion = self.new_confusion()

    @classmethod
    def new_confusion(cls):
        # rows: system presence, columns: gold presence
        return np.zeros((len(cls.PRESENCE_ORDER), len(cls.PRESENCE_ORDER)), dtype=np.int64)

    @classmethod
    def confusion_to_string(cls, confusion):
        lines = ['%20s%20s%20s' % ('system\\gold', Presence.PRESENT.value, Presence.ABSENT.value)]
        for i, system_presence in enumerate(cls.PRESENCE_ORDER):
            lines.append('%20s%20d%20d' % (system_presence.value, confusion[i, 0], confusion[i, 1]))
        return '\n'.join(lines) + '\n'

    def start_corpus(self):
        self.confusion = self.new_confusion()

    def document_observer(self, system_source, answer_key_source):
        return PresenceObserver.DocumentPresenceObserver(self, system_source, answer_key_source)

    def write_corpus_output(self, directory):
        write_text(os.path.join(directory, self.CONFUSION_FILE), self.confusion_to_string(self.confusion))

    class DocumentPresenceObserver(DocumentObserver):
        def __init__(self, parent, system_source, answer_key_source):
            super(PresenceObserver.DocumentPresenceObserver, self).__init__(parent, system_source, answer_key_source)
            self.confusion = PresenceObserver.new_confusion()

        def observe(self, answerable, responses, annotated_responses):
            row = PresenceObserver.PRESENCE_ORDER.index(is_present(responses))
            column = PresenceObserver.PRESENCE_ORDER.index(self.parent.gold_presence(annotated_responses))
            self.confusion[row, column] += 1

        def end(self):
            self.parent.confusion += self.confusion

        def write_document_output(self, directory):
            write_text(os.path.join(directory, PresenceObserver.CONFUSION_FILE),
                       PresenceObserver.confusion_to_string(self.confusion))


class AlignmentLogObserver(ScoringObserver):
    """Records the alignment events of each document in the order they were delivered."""

    LOG_FILE = 'alignment.txt'
    SUMMARY_FILE = 'eventCounts.txt'

    def __init__(self, name='AlignmentLog'):
        super(AlignmentLogObserver, self).__init__(name)
        self.event_counts = Counter()

    def start_corpus(self):
        self.event_counts = Counter()

    def document_observer(self, system_source, answer_key_source):
        return AlignmentLogObserver.DocumentLogObserver(self, system_source, answer_key_source)

    def write_corpus_output(self, directory):
        write_text(os.path.join(directory, self.SUMMARY_FILE),
                   ''.join('{}\t{}\n'.format(event, count) for event, count in sorted(self.event_counts.items())))

    class DocumentLogObserver(DocumentObserver):
        def __init__(self, parent, system_source, answer_key_source):
            super(AlignmentLogObserver.DocumentLogObserver, self).__init__(parent, system_source, answer_key_source)
            self.events = []
            """:type: list[tuple]"""

        def _record(self, event, answerable, detail=''):
            self.events.append((event, answerable, detail))

        def start_answerable(self, answerable):
            self._record('start_answerable', answerable)

        def observe(self, answerable, responses, annotated_responses):
            self._record('observe', answerable, 'system={} gold={}'.format(len(responses), len(annotated_responses)))

        def annotated_selected_response(self, answerable, response, annotation, annotated_responses):
            self._record('annotated_selected_response', answerable, response.unique_id())

        def unannotated_selected_response(self, answerable, response, annotated_responses):
            self._record('unannotated_selected_response', answerable, response.unique_id())

        def responses_unaligned(self, answerable, responses, annotated_responses):
            self._record('responses_unaligned', answerable)

        def responses_only_non_empty(self, answerable, responses):
            self._record('responses_only_non_empty', answerable)

        def annotations_only_non_empty(self, answerable, annotated_responses):
            self._record('annotations_only_non_empty', answerable)

        def end_answerable(self, answerable):
            self._record('end_answerable', answerable)

        def end(self):
            for event, _, _ in self.events:
                self.parent.event_counts[event] += 1

        def write_document_output(self, directory):
            write_text(os.path.join(directory, AlignmentLogObserver.LOG_FILE),
                       ''.join('{}\t{}\t{}\n'.format(event, answerable.to_string(), detail)
                               for event, answerable, detail in self.events))


BUILTIN_OBSERVERS = {
    'ArgumentScoring': lambda: ArgumentScoringObserver('ArgumentScoring'),
    'SemanticArgumentScoring': lambda: ArgumentScoringObserver('SemanticArgumentScoring', semantic=True),
    'Presence': lambda: PresenceObserver('Presence'),
    'SemanticPresence': lambda: PresenceObserver('SemanticPresence', semantic=True),
    'AlignmentLog': lambda: AlignmentLogObserver('AlignmentLog'),
}


def create_observers(names=None):
    """
    :type names: list[str]
    :rtype: list[kbpscorer.scoring.observer.ScoringObserver]
    """
    if names is None:
        names = sorted(BUILTIN_OBSERVERS.keys())
    ret = []
    for name in names:
        if name not in BUILTIN_OBSERVERS:
            raise ValueError('Unknown observer "{}", expected one of: {}'.format(
                name, ','.join(sorted(BUILTIN_OBSERVERS.keys()))))
        ret.append(BUILTIN_OBSERVERS[name]())
    return ret
