import logging
from enum import Enum

from kbpscorer.common.utils import sha1_hex

logger = logging.getLogger(__name__)


class KBPRealis(Enum):
    Actual = 'Actual'
    Generic = 'Generic'
    Other = 'Other'

    @staticmethod
    def parse(s):
        for realis in KBPRealis:
            if realis.value.lower() == s.strip().lower():
                return realis
        raise ValueError('Unknown realis "{}", expected one of: {}'.format(
            s, ','.join(r.value for r in KBPRealis)))


class FieldAssessment(Enum):
    """The judgment an assessor gives to a single field of a response"""
    CORRECT = 'C'
    INEXACT = 'I'
    WRONG = 'W'

    def is_acceptable(self):
        return self is FieldAssessment.CORRECT or self is FieldAssessment.INEXACT

    @staticmethod
    def parse(s):
        for a in FieldAssessment:
            if a.value == s or a.name == s:
                return a
        raise ValueError('Unknown field assessment "{}"'.format(s))


class Response(object):
    """A single event argument claimed by a system.

    Responses are immutable and compare by value.
    """

    def __init__(self, docid, event_type, role, canonical_argument, base_filler, realis,
                 additional_argument_justifications=(), predicate_justifications=()):
        """
        :type docid: str
        :type event_type: str
        :type role: str
        :type canonical_argument: kbpscorer.text.text_span.KBPString
        :type base_filler: kbpscorer.text.text_span.CharOffsetSpan
        :type realis: KBPRealis
        :type additional_argument_justifications: collections.abc.Iterable[kbpscorer.text.text_span.CharOffsetSpan]
        :type predicate_justifications: collections.abc.Iterable[kbpscorer.text.text_span.CharOffsetSpan]
        """
        if not isinstance(realis, KBPRealis):
            raise ValueError('realis must be a KBPRealis, got {}'.format(realis))
        self.__docid = docid
        self.__event_type = event_type
        self.__role = role
        self.__canonical_argument = canonical_argument
        self.__base_filler = base_filler
        self.__realis = realis
        self.__additional_argument_justifications = frozenset(additional_argument_justifications)
        self.__predicate_justifications = frozenset(predicate_justifications)
        self.__key = (docid, event_type, role, canonical_argument, base_filler, realis.value,
                      tuple(sorted(self.__additional_argument_justifications)),
                      tuple(sorted(self.__predicate_justifications)))
        self.__unique_id = None

    @property
    def docid(self):
        return self.__docid

    @property
    def event_type(self):
        return self.__event_type

    @property
    def role(self):
        return self.__role

    @property
    def canonical_argument(self):
        return self.__canonical_argument

    @property
    def base_filler(self):
        return self.__base_filler

    @property
    def realis(self):
        return self.__realis

    @property
    def additional_argument_justifications(self):
        return self.__additional_argument_justifications

    @property
    def predicate_justifications(self):
        return self.__predicate_justifications

    def unique_id(self):
        """A content-derived identifier, stable across runs and platforms."""
        if self.__unique_id is None:
            self.__unique_id = sha1_hex(self.to_string())
        return self.__unique_id

    def to_string(self):
        return '\t'.join([
            self.__docid, self.__event_type, self.__role,
            self.__canonical_argument.to_string(),
            self.__base_filler.to_string(),
            ','.join(s.to_string() for s in sorted(self.__additional_argument_justifications)),
            ','.join(s.to_string() for s in sorted(self.__predicate_justifications)),
            self.__realis.value])

    def __eq__(self, other):
        if isinstance(other, Response):
            return self.__key == other.__key
        return NotImplemented

    def __hash__(self):
        return hash(self.__key)

    def __repr__(self):
        return 'Response({})'.format(self.to_string())


class ResponseAssessment(object):
    """Assessor judgments for the fields of one response.

    Fields after a WRONG event type are typically left unassessed (None).
    """

    def __init__(self, type_assessment, role_assessment=None, argument_assessment=None,
                 base_filler_assessment=None, realis=None, coreference_id=None):
        """
        :type type_assessment: FieldAssessment
        :type role_assessment: FieldAssessment
        :type argument_assessment: FieldAssessment
        :type base_filler_assessment: FieldAssessment
        :type realis: KBPRealis
        :type coreference_id: int
        """
        self.type_assessment = type_assessment
        self.role_assessment = role_assessment
        self.argument_assessment = argument_assessment
        self.base_filler_assessment = base_filler_assessment
        self.realis = realis
        self.coreference_id = coreference_id

    def _key(self):
        return (self.type_assessment, self.role_assessment, self.argument_assessment,
                self.base_filler_assessment, self.realis, self.coreference_id)

    def __eq__(self, other):
        if isinstance(other, ResponseAssessment):
            return self._key() == other._key()
        return NotImplemented

    def __hash__(self):
        return hash(self._key())


def _acceptable(field_assessment):
    return field_assessment is not None and field_assessment.is_acceptable()


class AssessedResponse(object):
    def __init__(self, response, assessment):
        """
        :type response: Response
        :type assessment: ResponseAssessment
        """
        self.response = response
        self.assessment = assessment

    def realis_correct(self):
        return self.assessment.realis is not None and self.assessment.realis == self.response.realis

    def is_completely_correct(self):
        a = self.assessment
        return (a.type_assessment is FieldAssessment.CORRECT and
                a.role_assessment is FieldAssessment.CORRECT and
                a.argument_assessment is FieldAssessment.CORRECT and
                a.base_filler_assessment is FieldAssessment.CORRECT and
                self.realis_correct())

    def is_correct_up_to_inexact_justifications(self):
        """Correct if we ignore whether the justification spans were exact."""
        a = self.assessment
        return (_acceptable(a.type_assessment) and
                _acceptable(a.role_assessment) and
                _acceptable(a.argument_assessment) and
                self.realis_correct())

    @staticmethod
    def find_annotation_for_argument(response, annotated_responses):
        """Return the AssessedResponse for exactly this response, or None.

        :type response: Response
        :type annotated_responses: collections.abc.Iterable[AssessedResponse]
        :rtype: AssessedResponse
        """
        for annotated_response in annotated_responses:
            if annotated_response.response == response:
                return annotated_response
        return None

    def __eq__(self, other):
        if isinstance(other, AssessedResponse):
            return self.response == other.response and self.assessment == other.assessment
        return NotImplemented

    def __hash__(self):
        return hash((self.response, self.assessment))

    def __repr__(self):
        return 'AssessedResponse({}, correct={})'.format(self.response.to_string(), self.is_completely_correct())
