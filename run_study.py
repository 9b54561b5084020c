"""
Run the prize-effect CS-DID study.

The script loads the merged author-paper table, runs the configured model
variants (by default the Nature/Science/PNAS/JAMA/NEJM/BMJ journal subset,
clustered by author, controlling for top-5 prizes), writes the coefficient
table and the event-study figure of every model, prints a summary and saves
a snapshot of the whole run.

Usage
-----
Edit ``DATA_PATH`` below if the input lives elsewhere, then run from the
project root::

    python run_study.py

The R package ``did`` and the ``rpy2`` bridge must be installed
(``pip install -e .[r]``).

"""

from prize_did.helpers.config import StudyConfig
from prize_did.helpers.defaults import DEFAULT_DATA_PATH, SNAPSHOT_FILENAME
from prize_did.reporting import print_study_summary
from prize_did.study import PrizeStudy

DATA_PATH = DEFAULT_DATA_PATH


def main() -> None:
    cfg = StudyConfig(
        data_path=DATA_PATH,
        min_cohort_size=100,
        biters=2000,
        event_window=(-10, 15),
        snapshot_path=SNAPSHOT_FILENAME,
    )
    results = PrizeStudy(cfg).run()
    print_study_summary(results)


if __name__ == "__main__":
    main()
