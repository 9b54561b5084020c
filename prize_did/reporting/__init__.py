"""Reporting utilities for the ``prize_did`` package.

This subpackage collects the outputs of a study run.  The
:mod:`prize_did.reporting.export` module writes the per-event-time
coefficient table, :mod:`prize_did.reporting.plotting` renders the
CS-DID event-study figure and :mod:`prize_did.reporting.summary` prints
a concise textual summary of the analysis.

Users may import these functions directly from this subpackage.  For
example::

    from prize_did.reporting import print_study_summary, plot_cs_event_study

"""

from .export import save_event_study_results
from .plotting import PlotTheme, build_plot_frame, plot_cs_event_study
from .summary import print_dynamic_effects, print_study_summary

__all__ = [
    "PlotTheme",
    "build_plot_frame",
    "plot_cs_event_study",
    "print_dynamic_effects",
    "print_study_summary",
    "save_event_study_results",
]
