"""Default column names, journal lists and model variants for the prize study.

The raw input is the merged author-paper table produced by the upstream
curation notebooks (OpenAlex/PubMed/JCR).  The names below mirror its
headers; users may override any of them through
:class:`prize_did.helpers.config.StudyConfig`.
"""

from __future__ import annotations

from typing import Tuple

DEFAULT_DATA_PATH = (
    "final_group_pos_doipmid_puby_deltadays_field_tsize_top5_before0_after1_"
    "coauthor_wc0_natindex_fpy_aca_exp_jif_EISSN.csv"
)

# Derived column names
UNIT_COL = "id_numeric"
GROUP_COL = "group_id_numeric"
COHORT_COL = "gname"
FIRST_COL = "is_first"
LAST_COL = "is_last"

DERIVED_COLUMNS: Tuple[str, ...] = (UNIT_COL, COHORT_COL, GROUP_COL, FIRST_COL, LAST_COL)

# Paper/author covariates coerced to numeric (the year column is coerced too)
NUMERIC_COVARIATES: Tuple[str, ...] = (
    "teamsize",
    "JIF",
    "academic_experience",
    "ref_num",
    "is_top5",
)

# 2 = "unknown/unclassified" in the nature-index flag
NATURE_INDEX_UNKNOWN = 2

# Nature, Science, PNAS, JAMA, NEJM and BMJ (print + electronic ISSN)
NSPBM_ISSNS: Tuple[str, ...] = tuple(dict.fromkeys([
    "0028-0836", "1476-4687",
    "0036-8075", "1095-9203",
    "0027-8424", "1091-6490",
    "0028-0836", "1476-4687",
    "0098-7484", "1538-3598",
    "0028-4793", "1533-4406",
    "0959-8138", "1756-1833",
]))

NSPBM_TITLE = "CS-DID (Nature, Science, PNAS, Lancet, JAMA, NEJM, and BMJ)"
NSPBM_DESCRIPTION = "Cluster: Author ID | Controls: Top 5 Prizes"

SNAPSHOT_FILENAME = "CS-DID.joblib"
