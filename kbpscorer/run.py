import argparse
import logging
import os

from kbpscorer.annotation.ingestion import (JsonAnnotationStore, JsonLinkingStore, JsonSystemOutputStore,
                                            LinkerLinkingStore)
from kbpscorer.annotation.linking import SameEventTypeLinker
from kbpscorer.annotation.response import KBPRealis
from kbpscorer.common import parameters
from kbpscorer.common.utils import document_order, load_symbol_list
from kbpscorer.scoring.aggregate import KBP2015Scorer
from kbpscorer.scoring.observers import create_observers
from kbpscorer.scoring.scorer import KBPScorer

logger = logging.getLogger(__name__)

SYSTEM_OUTPUT_PARAM = 'system_output'
SYSTEM_OUTPUTS_DIR_PARAM = 'system_outputs_dir'
ARGUMENTS_SUBDIR = 'arguments'
LINKING_SUBDIR = 'linking'
OBSERVER_OUTPUT_SUBDIR = 'observers'

"""
Parameters are:
    answer_key: argument annotation store to score against
    reference_linking: linking store to score against
    documents_to_score: (optional) file listing which documents to score; defaults to every annotated document
    lambda: (optional) weight of the linking score in the overall score
    false_positive_penalty: (optional) argument score lost for each wrong equivalence class
    observers: (optional) names of the alignment observers to run; [] disables them

If running on a single output store:
    scoring_output_dir: directory to write scores to
    system_output: system output to score

If running on multiple stores:
    scoring_output_root: a subdirectory will be created here for each input store
    system_outputs_dir: each subdirectory of this is expected to be a system's output to score

Each system's output directory should have two sub-directories, "arguments" and "linking". With
create_default_linking, the directory itself holds the arguments and responses of the same event type are
linked together.
"""


def use_default_linking(params):
    return parameters.get_boolean(params, 'create_default_linking', False)


def get_system_output_store(params, system_output_dir):
    if use_default_linking(params):
        return JsonSystemOutputStore(system_output_dir)
    return JsonSystemOutputStore(os.path.join(system_output_dir, ARGUMENTS_SUBDIR))


def get_linking_store(params, system_output_dir, argument_store):
    if use_default_linking(params):
        return LinkerLinkingStore(SameEventTypeLinker([KBPRealis.Actual, KBPRealis.Other]), argument_store)
    return JsonLinkingStore.open_or_create(os.path.join(system_output_dir, LINKING_SUBDIR))


def load_documents_to_score(params, gold_answer_store):
    if parameters.is_present(params, 'documents_to_score'):
        docs_to_score_list = parameters.get_existing_file(params, 'documents_to_score')
        ret = document_order(load_symbol_list(docs_to_score_list))
        logger.info('Scoring over %d documents specified in %s', len(ret), docs_to_score_list)
    else:
        ret = sorted(gold_answer_store.docids())
        logger.info('Scoring over all %d annotated documents', len(ret))
    return ret


def score_system(params, scorer, gold_answer_store, reference_linking_store, system_output_dir, docs_to_score,
                 output_dir):
    """Scores one system: EAL scores, then the alignment observers.

    :type scorer: kbpscorer.scoring.aggregate.KBP2015Scorer
    :rtype: kbpscorer.scoring.aggregate.CorpusScore
    """
    argument_store = get_system_output_store(params, system_output_dir)
    system_linking_store = get_linking_store(params, system_output_dir, argument_store)
    corpus_score = scorer.score(gold_answer_store, reference_linking_store, argument_store, system_linking_store,
                                docs_to_score, output_dir)

    observers = create_observers(params.get('observers'))
    if len(observers) > 0:
        observer_output_dir = os.path.join(output_dir, OBSERVER_OUTPUT_SUBDIR)
        os.makedirs(observer_output_dir, exist_ok=True)
        KBPScorer.create().run(argument_store, gold_answer_store, observers, observer_output_dir,
                               documents_to_score=docs_to_score)
    return corpus_score


def run(params):
    """
    :type params: dict
    :rtype: dict[str, kbpscorer.scoring.aggregate.CorpusScore]   # system output directory -> score
    """
    scorer = KBP2015Scorer.from_parameters(params)
    gold_answer_store = JsonAnnotationStore(parameters.get_existing_directory(params, 'answer_key'))
    docs_to_score = load_documents_to_score(params, gold_answer_store)
    reference_linking_store = JsonLinkingStore(parameters.get_existing_directory(params, 'reference_linking'))

    if parameters.is_present(params, SYSTEM_OUTPUT_PARAM) == parameters.is_present(params, SYSTEM_OUTPUTS_DIR_PARAM):
        raise ValueError('Exactly one of {} and {} must be specified'.format(SYSTEM_OUTPUT_PARAM,
                                                                           SYSTEM_OUTPUTS_DIR_PARAM))

    ret = dict()
    if parameters.is_present(params, SYSTEM_OUTPUT_PARAM):
        output_dir = parameters.get_creatable_directory(params, 'scoring_output_dir')
        system_output_dir = parameters.get_existing_directory(params, SYSTEM_OUTPUT_PARAM)
        logger.info('Scoring single system output %s', system_output_dir)
        ret[system_output_dir] = score_system(params, scorer, gold_answer_store, reference_linking_store,
                                              system_output_dir, docs_to_score, output_dir)
    else:
        system_outputs_dir = parameters.get_existing_directory(params, SYSTEM_OUTPUTS_DIR_PARAM)
        output_root = parameters.get_creatable_directory(params, 'scoring_output_root')
        logger.info('Scoring all subdirectories of %s', system_outputs_dir)
        for name in sorted(os.listdir(system_outputs_dir)):
            system_output_dir = os.path.join(system_outputs_dir, name)
            if not os.path.isdir(system_output_dir):
                continue
            logger.info('Scoring system %s', system_output_dir)
            try:
                ret[system_output_dir] = score_system(params, scorer, gold_answer_store, reference_linking_store,
                                                      system_output_dir, docs_to_score,
                                                      os.path.join(output_root, name))
            except Exception as e:
                raise RuntimeError('Exception while processing {}'.format(system_output_dir)) from e
    return ret


def main(argv=None):
    logging.basicConfig(format='%(asctime)s %(name)-12s %(levelname)-8s %(message)s', level=logging.INFO)

    parser = argparse.ArgumentParser(description='Score event argument and linking output against an answer key')
    parser.add_argument('--params', required=True)
    args = parser.parse_args(argv)

    run(parameters.load_params(args.params))


if __name__ == '__main__':
    main()
