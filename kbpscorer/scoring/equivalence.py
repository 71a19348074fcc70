import logging
from collections import namedtuple

logger = logging.getLogger(__name__)


class EntityNormalizer(object):
    """Maps each argument filler to a canonical member of its coreference cluster.

    Fillers the assessors did not coref normalize to themselves.
    """

    def __init__(self, string_to_canonical):
        """
        :type string_to_canonical: dict[kbpscorer.text.text_span.KBPString, kbpscorer.text.text_span.KBPString]
        """
        self._string_to_canonical = dict(string_to_canonical)

    @staticmethod
    def from_annotation(answer_key):
        """
        :type answer_key: kbpscorer.annotation.answer_key.AnswerKey
        :rtype: EntityNormalizer
        """
        string_to_canonical = dict()
        for cluster_id, members in answer_key.coref_annotation.clusters().items():
            canonical = min(members, key=lambda s: (s.span, s.string))
            for member in members:
                string_to_canonical[member] = canonical
        logger.debug('Entity normalizer for %s covers %d fillers', answer_key.docid, len(string_to_canonical))
        return EntityNormalizer(string_to_canonical)

    def normalize(self, kbp_string):
        """
        :type kbp_string: kbpscorer.text.text_span.KBPString
        :rtype: kbpscorer.text.text_span.KBPString
        """
        return self._string_to_canonical.get(kbp_string, kbp_string)


class TypeRoleFillerRealis(namedtuple('TypeRoleFillerRealis', ['event_type', 'role', 'argument_canonical_string', 'realis'])):
    """The equivalence class key: two responses are the same claim iff these agree after filler normalization."""
    __slots__ = ()

    def sort_key(self):
        """Natural order of equivalence classes: type, role, filler, realis."""
        return (self.event_type, self.role, self.argument_canonical_string.string,
                self.argument_canonical_string.span, self.realis.value)

    def to_string(self):
        return '{}/{}/{}/{}'.format(self.event_type, self.role, self.argument_canonical_string.to_string(),
                                    self.realis.value)

    @staticmethod
    def extractor(entity_normalizer):
        """A pure function from a response to its equivalence class, shared by gold and system sides.

        :type entity_normalizer: EntityNormalizer
        """
        def extract(response):
            return TypeRoleFillerRealis(response.event_type, response.role,
                                        entity_normalizer.normalize(response.canonical_argument),
                                        response.realis)
        return extract
