"""Stores for gold annotation, system output, and linking.

Each store knows the set of document ids it holds. The JSON-backed stores keep one file per document,
<directory>/<docid>.json. Linking files refer to responses by Response.unique_id(), resolved against the
answer key or system output the linking belongs to.
"""
import codecs
import json
import logging
import os
from abc import ABC, abstractmethod

from kbpscorer.annotation.answer_key import AnswerKey, ArgumentOutput, CorefAnnotation
from kbpscorer.annotation.linking import ResponseLinking
from kbpscorer.annotation.response import (AssessedResponse, FieldAssessment, KBPRealis, Response,
                                           ResponseAssessment)
from kbpscorer.text.text_span import CharOffsetSpan, KBPString

logger = logging.getLogger(__name__)

JSON_SUFFIX = '.json'


class AnnotationStore(ABC):
    @abstractmethod
    def docids(self):
        """
        :rtype: frozenset[str]
        """
        pass

    @abstractmethod
    def _read(self, docid):
        pass

    def read(self, docid):
        """
        :rtype: kbpscorer.annotation.answer_key.AnswerKey
        """
        if docid not in self.docids():
            raise RuntimeError('No annotation for document {}'.format(docid))
        return self._read(docid)

    def read_or_empty(self, docid):
        if docid in self.docids():
            return self._read(docid)
        return AnswerKey.empty(docid)


class SystemOutputStore(ABC):
    @abstractmethod
    def docids(self):
        pass

    @abstractmethod
    def _read(self, docid):
        pass

    def read(self, docid):
        """
        :rtype: kbpscorer.annotation.answer_key.ArgumentOutput
        """
        if docid not in self.docids():
            raise RuntimeError('No system output for document {}'.format(docid))
        return self._read(docid)

    def read_or_empty(self, docid):
        if docid in self.docids():
            return self._read(docid)
        return ArgumentOutput.empty(docid)


class LinkingStore(ABC):
    @abstractmethod
    def docids(self):
        pass

    @abstractmethod
    def read(self, responses_source):
        """Read the linking over the responses of an answer key or system output.

        :type responses_source: AnswerKey | ArgumentOutput
        :rtype: kbpscorer.annotation.linking.ResponseLinking | None
        """
        pass


def _responses_of(responses_source):
    if isinstance(responses_source, AnswerKey):
        return responses_source.all_responses()
    elif isinstance(responses_source, ArgumentOutput):
        return responses_source.responses
    else:
        raise ValueError('Cannot read a linking for a {}'.format(type(responses_source).__name__))


# ==== in-memory stores ====
class MemoryAnnotationStore(AnnotationStore):
    def __init__(self, answer_keys):
        self.answer_keys = {k.docid: k for k in answer_keys}

    def docids(self):
        return frozenset(self.answer_keys.keys())

    def _read(self, docid):
        return self.answer_keys[docid]


class MemorySystemOutputStore(SystemOutputStore):
    def __init__(self, argument_outputs):
        self.argument_outputs = {o.docid: o for o in argument_outputs}

    def docids(self):
        return frozenset(self.argument_outputs.keys())

    def _read(self, docid):
        return self.argument_outputs[docid]


class MemoryLinkingStore(LinkingStore):
    def __init__(self, linkings):
        self.linkings = {l.docid: l for l in linkings}

    def docids(self):
        return frozenset(self.linkings.keys())

    def read(self, responses_source):
        return self.linkings.get(responses_source.docid)


class LinkerLinkingStore(LinkingStore):
    """Produces linkings on the fly from system output, e.g. with a SameEventTypeLinker."""

    def __init__(self, linker, system_output_store):
        """
        :type linker: kbpscorer.annotation.linking.SameEventTypeLinker
        :type system_output_store: SystemOutputStore
        """
        self.linker = linker
        self.system_output_store = system_output_store

    def docids(self):
        return self.system_output_store.docids()

    def read(self, responses_source):
        if not isinstance(responses_source, ArgumentOutput):
            raise ValueError('Default linking can only be applied to system output')
        return self.linker.link(responses_source)


# ==== JSON serialization ====
def span_to_json(span):
    return [span.start, span.end]


def span_from_json(d):
    return CharOffsetSpan(int(d[0]), int(d[1]))


def response_to_json(response):
    """
    :type response: kbpscorer.annotation.response.Response
    """
    d = dict()
    d['docid'] = response.docid
    d['event_type'] = response.event_type
    d['role'] = response.role
    d['cas'] = {'string': response.canonical_argument.string,
                'span': span_to_json(response.canonical_argument.span)}
    d['base_filler'] = span_to_json(response.base_filler)
    d['additional_argument_justifications'] = [span_to_json(s) for s in sorted(response.additional_argument_justifications)]
    d['predicate_justifications'] = [span_to_json(s) for s in sorted(response.predicate_justifications)]
    d['realis'] = response.realis.value
    return d


def response_from_json(d):
    cas = KBPString(d['cas']['string'], span_from_json(d['cas']['span']))
    return Response(d['docid'], d['event_type'], d['role'], cas, span_from_json(d['base_filler']),
                    KBPRealis.parse(d['realis']),
                    [span_from_json(s) for s in d.get('additional_argument_justifications', [])],
                    [span_from_json(s) for s in d.get('predicate_justifications', [])])


def _field_to_json(field_assessment):
    return field_assessment.value if field_assessment is not None else None


def _field_from_json(s):
    return FieldAssessment.parse(s) if s is not None else None


def assessment_to_json(assessment):
    d = dict()
    d['type'] = _field_to_json(assessment.type_assessment)
    d['role'] = _field_to_json(assessment.role_assessment)
    d['argument'] = _field_to_json(assessment.argument_assessment)
    d['base_filler'] = _field_to_json(assessment.base_filler_assessment)
    d['realis'] = assessment.realis.value if assessment.realis is not None else None
    d['coref_id'] = assessment.coreference_id
    return d


def assessment_from_json(d):
    return ResponseAssessment(
        _field_from_json(d['type']), _field_from_json(d.get('role')), _field_from_json(d.get('argument')),
        _field_from_json(d.get('base_filler')),
        KBPRealis.parse(d['realis']) if d.get('realis') is not None else None,
        d.get('coref_id'))


def answer_key_to_json(answer_key):
    """
    :type answer_key: kbpscorer.annotation.answer_key.AnswerKey
    """
    d = dict()
    d['docid'] = answer_key.docid
    d['annotated_responses'] = [
        {'response': response_to_json(ar.response), 'assessment': assessment_to_json(ar.assessment)}
        for ar in sorted(answer_key.annotated_responses, key=lambda ar: ar.response.unique_id())]
    d['unannotated_responses'] = [response_to_json(r) for r in
                                  sorted(answer_key.unannotated_responses, key=lambda r: r.unique_id())]
    d['coref'] = [{'string': s.string, 'span': span_to_json(s.span), 'cluster': cluster_id}
                  for s, cluster_id in sorted(answer_key.coref_annotation.string_to_cluster.items())]
    return d


def answer_key_from_json(d):
    docid = d['docid']
    annotated = [AssessedResponse(response_from_json(x['response']), assessment_from_json(x['assessment']))
                 for x in d.get('annotated_responses', [])]
    unannotated = [response_from_json(x) for x in d.get('unannotated_responses', [])]
    coref = CorefAnnotation(docid, {KBPString(x['string'], span_from_json(x['span'])): int(x['cluster'])
                                    for x in d.get('coref', [])})
    return AnswerKey(docid, annotated, unannotated, coref)


def argument_output_to_json(argument_output):
    d = dict()
    d['docid'] = argument_output.docid
    d['responses'] = [{'response': response_to_json(r), 'confidence': argument_output.confidence(r)}
                      for r in sorted(argument_output.responses, key=lambda r: r.unique_id())]
    return d


def argument_output_from_json(d):
    responses = []
    confidences = dict()
    for x in d.get('responses', []):
        response = response_from_json(x['response'])
        responses.append(response)
        confidences[response] = x.get('confidence', ArgumentOutput.DEFAULT_CONFIDENCE)
    return ArgumentOutput(d['docid'], responses, confidences)


def linking_to_json(linking):
    """
    :type linking: kbpscorer.annotation.linking.ResponseLinking
    """
    d = dict()
    d['docid'] = linking.docid
    d['response_sets'] = sorted(sorted(r.unique_id() for r in s) for s in linking.response_sets)
    d['incomplete'] = sorted(r.unique_id() for r in linking.incomplete_responses)
    return d


def linking_from_json(d, responses):
    """
    :type responses: collections.abc.Iterable[kbpscorer.annotation.response.Response]
    """
    by_id = {r.unique_id(): r for r in responses}

    def resolve(response_id):
        if response_id not in by_id:
            raise ValueError('Linking for {} refers to unknown response {}'.format(d['docid'], response_id))
        return by_id[response_id]

    response_sets = [[resolve(i) for i in s] for s in d.get('response_sets', [])]
    incomplete = [resolve(i) for i in d.get('incomplete', [])]
    return ResponseLinking(d['docid'], response_sets, incomplete)


def _read_json(filepath):
    with codecs.open(filepath, 'r', encoding='utf-8') as f:
        return json.load(f)


def _write_json(d, filepath):
    with codecs.open(filepath, 'w', encoding='utf-8') as f:
        json.dump(d, f, indent=4, sort_keys=True, ensure_ascii=False)


class JsonDirectoryStore(object):
    """Common directory handling for the JSON-backed stores."""

    def __init__(self, directory):
        if not os.path.isdir(directory):
            raise IOError('Store directory {} does not exist'.format(directory))
        self.directory = directory

    def docids(self):
        return frozenset(f[:-len(JSON_SUFFIX)] for f in os.listdir(self.directory) if f.endswith(JSON_SUFFIX))

    def path_for(self, docid):
        return os.path.join(self.directory, docid + JSON_SUFFIX)

    @classmethod
    def open_or_create(cls, directory):
        if not os.path.isdir(directory):
            os.makedirs(directory)
        return cls(directory)


class JsonAnnotationStore(JsonDirectoryStore, AnnotationStore):
    def _read(self, docid):
        return answer_key_from_json(_read_json(self.path_for(docid)))

    def write(self, answer_key):
        _write_json(answer_key_to_json(answer_key), self.path_for(answer_key.docid))


class JsonSystemOutputStore(JsonDirectoryStore, SystemOutputStore):
    def _read(self, docid):
        return argument_output_from_json(_read_json(self.path_for(docid)))

    def write(self, argument_output):
        _write_json(argument_output_to_json(argument_output), self.path_for(argument_output.docid))


class JsonLinkingStore(JsonDirectoryStore, LinkingStore):
    def read(self, responses_source):
        docid = responses_source.docid
        if docid not in self.docids():
            return None
        return linking_from_json(_read_json(self.path_for(docid)), _responses_of(responses_source))

    def write(self, linking):
        _write_json(linking_to_json(linking), self.path_for(linking.docid))
