from collections import namedtuple

"""Classes here:
CharOffsetSpan
KBPString
"""


class CharOffsetSpan(namedtuple('CharOffsetSpan', ['start', 'end'])):
    """Inclusive start and end character offsets into a document.

    Ordered first by start offset, then by end offset.
    """
    __slots__ = ()

    def __new__(cls, start, end):
        if start < 0 or end < 0:
            raise ValueError('Character offsets must be non-negative, got ({},{})'.format(start, end))
        if start > end:
            raise ValueError('Span start {} is after span end {}'.format(start, end))
        return super(CharOffsetSpan, cls).__new__(cls, start, end)

    def to_string(self):
        return '{}-{}'.format(self.start, self.end)


class KBPString(namedtuple('KBPString', ['string', 'span'])):
    """A string together with the document span it was taken from, e.g. an argument filler mention."""
    __slots__ = ()

    @classmethod
    def of(cls, string, start, end):
        return cls(string, CharOffsetSpan(start, end))

    def to_string(self):
        return '{}[{}]'.format(self.string, self.span.to_string())
