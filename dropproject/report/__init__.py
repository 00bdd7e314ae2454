#!/usr/bin/env python3

# DropProject - submission processing pipeline
# Copyright © 2019-2024 The DropProject development team
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as
# published by the Free Software Foundation, either version 3 of the
# License, or (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU Affero General Public License for more details.
#
# You should have received a copy of the GNU Affero General Public License
# along with this program.  If not, see <http://www.gnu.org/licenses/>.

"""Package containing what teachers get out of the submissions: the
results of each submission, the choice of the final ones, their export
and the leaderboard.

"""

from .csvexport import export_csv, format_elapsed
from .finalization import mark_as_final, cleanup_non_final
from .leaderboard import LeaderboardEntry, leaderboard, latest_submissions
from .projectexport import export_mavenized_projects, \
    export_original_projects, group_folder_name
from .surefire import SurefireReportBuilder, classify_test_class
from .summary import TestSummary, ParsedReport, ReportBuilder, \
    SubmissionSummary, summarize


__all__ = [
    # csvexport.py
    "export_csv", "format_elapsed",
    # finalization.py
    "mark_as_final", "cleanup_non_final",
    # leaderboard.py
    "LeaderboardEntry", "leaderboard", "latest_submissions",
    # projectexport.py
    "export_mavenized_projects", "export_original_projects",
    "group_folder_name",
    # summary.py
    "TestSummary", "ParsedReport", "ReportBuilder", "SubmissionSummary",
    "summarize",
    # surefire.py
    "SurefireReportBuilder", "classify_test_class",
]
