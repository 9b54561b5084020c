"""
The :mod:`prize_did` package estimates how winning a scientific prize changes
publication timelines (the submission-to-acceptance delay of a paper) with
the staggered-adoption difference-in-differences estimator of Callaway and
Sant'Anna.  Group-time average treatment effects, bootstrap inference and the
dynamic (event-time) aggregation come from an external estimation backend;
this package prepares the panel, drives the backend and turns its output
into a coefficient table and a publication figure.

The package exposes three core classes:

``PanelData``
    Loads the author-paper table and builds a clean panel: numeric author and
    group identifiers, the first-treatment cohort ``gname`` (0 for never
    treated), author-position dummies, a single listwise deletion over every
    field any model needs and removal of award cohorts that are too small to
    estimate.  See :class:`prize_did.helpers.preparation.PanelData`.

``CsDidEstimator``
    Maps the panel onto the estimator (outcome ``DeltaDays``, time
    ``PubYear``, unit ``id_numeric``, cohort ``gname``; not-yet-treated
    controls, outcome regression, universal base period, 2000 bootstrap
    draws, simultaneous bands) and returns an
    :class:`prize_did.estimators.EstimationOutcome` instead of raising.
    See :class:`prize_did.estimator.CsDidEstimator`.

``PrizeStudy``
    A high-level orchestrator that wires together panel preparation,
    estimation, export and plotting for each configured model, and returns a
    serializable :class:`prize_did.study.PrizeStudyResult`.

References
----------
* Callaway, B. and Sant'Anna, P. H. C. (2021).  Difference-in-differences
  with multiple time periods.  Journal of Econometrics 225(2), 200-230.
  Implemented in the R package ``did``, which the default backend calls
  through ``rpy2``.

"""
