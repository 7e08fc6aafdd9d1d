# -*- coding: utf-8 -*-
"""
Training of the Q-learning energy management system on the DC grid.

    python main_training_qlearning.py --id 1
"""

import argparse
import os
import pickle

from settings_file import settings, control_settings

from qlearning_ems.episode import EpisodeOutcome
from qlearning_ems.report import RunReport
from qlearning_ems.training import Trainer


def parse_args(argv=None):
    parser = argparse.ArgumentParser()
    parser.add_argument('--id', type=int, default=1, help='seed and index of the training')
    parser.add_argument('--episodes', type=int, default=None, help='overrides max_episodes')
    parser.add_argument('--output', type=str, default=None, help='overrides the parent folder of the results')
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)

    # Seeding
    i_seed = args.id
    i_training = i_seed

    run_settings = dict(settings)
    if args.episodes is not None:
        run_settings['max_episodes'] = args.episodes
    if args.output is not None:
        run_settings['parent_folder'] = args.output

    result_path = os.path.join(run_settings['parent_folder'], run_settings['sub_folder'] + str(i_training))

    report = RunReport(result_path, run_settings)
    try:
        trainer = Trainer(run_settings, control_settings, seed=i_seed, reporter=report)
        results = trainer.run()
    finally:
        report.close()

    n_completed = sum(result.outcome is EpisodeOutcome.COMPLETED for result in results)
    print('Training', i_training)
    print('Completed episodes: %i/%i' % (n_completed, len(results)))

    outcomes_list = [(result.episode, result.outcome.value, result.iterations) for result in results]
    with open(os.path.join(result_path, 'outcomes_list.txt'), 'wb') as fp:   #Pickling
        pickle.dump(outcomes_list, fp)

    return results


if __name__ == '__main__':
    main()
