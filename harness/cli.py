import argparse
import sys
from config import settings
from harness.ml.data_splitter import DataSplitter
from harness.ml.dataset_preparation import DatasetPreparation
from harness.ml.model_manager import Manager
from harness.ml.scoring import CLASSIFICATION_SCORERS, get_scorer
from harness.ml.tune_config import PRESETS, get_preset, load_tune_configs
from harness.utils.evaluation import print_report
from harness.utils.exceptions import ConfigurationError, ScoringError, TrainingFailure


def build_parser():
    parser = argparse.ArgumentParser(description="Hold-out evaluation of tuned models on a tabular dataset")
    parser.add_argument('data', help="Delimited data file")
    parser.add_argument('--label', required=True, help="Response column")
    parser.add_argument('--models', nargs='+', default=["ols"],
                        help=f"Tuning entries to compare (presets: {', '.join(sorted(PRESETS))})")
    parser.add_argument('--grid-config', help="YAML file with extra tuning entries")
    parser.add_argument('--names', nargs='+', help="Column names for a headerless file")
    parser.add_argument('--sep', default=",", help="Field separator, 'whitespace' for runs of blanks")
    parser.add_argument('--drop', nargs='*', default=[], help="Columns to leave out")
    parser.add_argument('--categorical', nargs='*', default=[], help="Columns to treat as categories")
    parser.add_argument('--scoring', help="Override the scorer of the tuning entries")
    parser.add_argument('--holdout-fraction', type=float, default=settings.holdout_fraction)
    parser.add_argument('--sampled-side', choices=["holdout", "train"], default=settings.sampled_side,
                        help="Which side of the split is the randomly drawn subset")
    parser.add_argument('--folds', type=int,
                        help="Fold count for every entry (default: each entry's n_folds)")
    parser.add_argument('--seed', type=int, default=settings.random_state)
    parser.add_argument('--save', action='store_true', help="Persist refit models and evaluation files")
    parser.add_argument('--output', default=settings.models_directory)
    return parser


def resolve_tune_configs(models, grid_config=None):
    available = load_tune_configs(grid_config) if grid_config else {}
    configs = {}
    for name in models:
        configs[name] = available[name] if name in available else get_preset(name)
    return configs


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        prep = DatasetPreparation(verbose=True)
        sep = None if args.sep == "whitespace" else args.sep
        frame = prep.read_table(args.data, names=args.names, sep=sep)
        numeric = [col for col in frame.columns if col not in set(args.categorical) | set(args.drop) | {args.label}]
        dataset = prep.prepare(frame, args.label, drop=args.drop, numeric=numeric, categorical=args.categorical)

        configs = resolve_tune_configs(args.models, args.grid_config)
        scorings = {config.scoring for config in configs.values()}
        if args.scoring is None and len(scorings) > 1:
            raise ConfigurationError(f"Tuning entries disagree on scoring {sorted(scorings)}; pass --scoring")
        scorer = get_scorer(args.scoring or scorings.pop())

        splitter = DataSplitter(holdout_fraction=args.holdout_fraction, random_seed=args.seed,
                                sampled_side=args.sampled_side)
        manager = Manager(dataset, scorer=scorer, splitter=splitter, n_folds=args.folds,
                          output_directory=args.output)
        for name, config in configs.items():
            manager.add_tune_config(name, config)
        manager.train_all()

        classification = scorer in CLASSIFICATION_SCORERS
        for record in manager.records:
            print_report(record.result, classification=classification)
    except (ConfigurationError, ScoringError, TrainingFailure, KeyError, FileNotFoundError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print("\n=== Comparison ===")
    print(manager.comparison().to_string(index=False))
    if args.save:
        manager.save_all()
    return 0


if __name__ == "__main__":
    sys.exit(main())
