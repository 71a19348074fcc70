from abc import ABC, abstractmethod


class ScoringObserver(ABC):
    """A corpus-level metric computed from the aligned stream of equivalence classes.

    For each document the scorer asks the observer for a fresh DocumentObserver, which sees the events
    of that document only and may report back to its parent. Hooks are called in this order:

        start_corpus()
        for each document:
            start()
            for each equivalence class:
                start_answerable, observe, exactly one alignment event (plus responses_unaligned
                after unannotated_selected_response), end_answerable
            end(), write_document_output(directory)
        end_corpus(), write_corpus_output(directory)
    """

    def __init__(self, name):
        self.name = name

    def start_corpus(self):
        pass

    @abstractmethod
    def document_observer(self, system_source, answer_key_source):
        """
        :type system_source: kbpscorer.scoring.answer_source.SystemOutputAnswerSource
        :type answer_key_source: kbpscorer.scoring.answer_source.AnswerKeyAnswerSource
        :rtype: DocumentObserver
        """
        pass

    def end_corpus(self):
        pass

    def write_corpus_output(self, directory):
        pass


class DocumentObserver(object):
    """Receives the alignment events of a single document. Every hook is a no-op unless overridden."""

    def __init__(self, parent, system_source, answer_key_source):
        """
        :type parent: ScoringObserver
        :type system_source: kbpscorer.scoring.answer_source.SystemOutputAnswerSource
        :type answer_key_source: kbpscorer.scoring.answer_source.AnswerKeyAnswerSource
        """
        # not owned; used to report back at end()
        self.parent = parent
        self.system_source = system_source
        self.answer_key_source = answer_key_source

    @property
    def docid(self):
        return self.answer_key_source.docid

    def start(self):
        pass

    def start_answerable(self, answerable):
        pass

    def observe(self, answerable, responses, annotated_responses):
        """Sees system and gold responses of the class jointly, before any alignment event."""
        pass

    def annotated_selected_response(self, answerable, response, annotation, annotated_responses):
        """The selected system response has an assessment."""
        pass

    def unannotated_selected_response(self, answerable, response, annotated_responses):
        """The class has assessments, but none for the selected system response."""
        pass

    def responses_unaligned(self, answerable, responses, annotated_responses):
        """Follows unannotated_selected_response: system responses and assessments exist but do not align."""
        pass

    def responses_only_non_empty(self, answerable, responses):
        """System responses but no assessments for the class."""
        pass

    def annotations_only_non_empty(self, answerable, annotated_responses):
        """Assessments but no system responses for the class."""
        pass

    def end_answerable(self, answerable):
        pass

    def end(self):
        pass

    def write_document_output(self, directory):
        pass
