import codecs
import hashlib
import logging
from collections import OrderedDict
from enum import Enum

logger = logging.getLogger(__name__)


class Presence(Enum):
    """Two-valued marker used when tabulating whether something exists for an equivalence class."""
    PRESENT = 'PRESENT'
    ABSENT = 'ABSENT'

    @staticmethod
    def of(collection):
        return Presence.PRESENT if len(collection) > 0 else Presence.ABSENT


def is_present(responses):
    """
    :type responses: collections.abc.Collection[kbpscorer.annotation.response.Response]
    :rtype: Presence
    """
    return Presence.of(responses)


def any_answer_correct(assessed_responses):
    """
    :type assessed_responses: collections.abc.Collection[kbpscorer.annotation.response.AssessedResponse]
    :rtype: Presence
    """
    if any(r.is_completely_correct() for r in assessed_responses):
        return Presence.PRESENT
    return Presence.ABSENT


def any_answer_semantically_correct(assessed_responses):
    if any(r.is_correct_up_to_inexact_justifications() for r in assessed_responses):
        return Presence.PRESENT
    return Presence.ABSENT


def safe_divide(numerator, denominator):
    if denominator > 0:
        return float(numerator) / denominator
    return 0.0


def document_order(docids):
    """Lists and tuples keep their order with repeats dropped; any other collection is sorted.

    :type docids: collections.abc.Iterable[str]
    :rtype: list[str]
    """
    if isinstance(docids, (list, tuple)):
        return list(OrderedDict.fromkeys(docids))
    return sorted(docids)


def sha1_hex(s):
    return hashlib.sha1(s.encode('utf-8')).hexdigest()


def load_symbol_list(filepath):
    """Read one identifier per line, skipping blank lines and '#' comments.

    :type filepath: str
    :rtype: list[str]
    """
    ret = []
    with codecs.open(filepath, 'r', encoding='utf-8') as f:
        for line in f:
            line = line.strip()
            if len(line) == 0 or line.startswith('#'):
                continue
            ret.append(line)
    return ret


def write_text(filepath, text):
    with codecs.open(filepath, 'w', encoding='utf-8') as f:
        f.write(text)


class F1Score(object):
    def __init__(self, c, num_true, num_predict, class_label='class_label'):
        self.c = c
        self.num_true = num_true
        self.num_predict = num_predict
        self.class_label = class_label
        self.calculate_score()

    def calculate_score(self):
        if self.c > 0 and self.num_true > 0:
            self.recall = float(self.c) / self.num_true
        else:
            self.recall = 0

        if self.c > 0 and self.num_predict > 0:
            self.precision = float(self.c) / self.num_predict
        else:
            self.precision = 0

        if self.recall > 0 and self.precision > 0:
            self.f1 = (2 * self.recall * self.precision) / (self.recall + self.precision)
        else:
            self.f1 = 0

    def to_string(self):
        return '%s #C=%d,#R=%d,#P=%d R,P,F=%.2f,%.2f,%.6f' % (self.class_label, self.c, self.num_true, self.num_predict, self.recall, self.precision, self.f1)


class PrecisionRecallF1(object):
    """An F-measure given directly as precision and recall, rather than counts."""

    def __init__(self, precision, recall):
        self.precision = precision
        self.recall = recall
        if precision > 0 and recall > 0:
            self.f1 = (2 * precision * recall) / (precision + recall)
        else:
            self.f1 = 0.0

    def to_string(self):
        return 'P,R,F=%.4f,%.4f,%.4f' % (self.precision, self.recall, self.f1)
