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

"""A report builder returning canned results, for tests.

"""

from dropproject.report import ParsedReport, ReportBuilder


class FakeReportBuilder(ReportBuilder):
    """Return the parsed report registered for each submission id."""

    def __init__(self):
        self.reports = {}
        self.calls = []

    def set_report(self, submission, **kwargs):
        self.reports[submission.id] = ParsedReport(**kwargs)

    def build(self, output_lines, project_folder, assignment, submission):
        self.calls.append(submission.id)
        return self.reports.get(submission.id, ParsedReport())
