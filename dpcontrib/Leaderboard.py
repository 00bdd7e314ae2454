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

"""Print the leaderboard of an assignment.

"""

import logging
import sys

from dropproject import default_argument_parser
from dropproject.db import Assignment, SessionGen
from dropproject.errors import EntityNotFound, PolicyViolation
from dropproject.report import SurefireReportBuilder, leaderboard
from dropproject.report.csvexport import format_elapsed
from dropproject.submission import TeacherFiles


logger = logging.getLogger(__name__)


def main():
    """Parse arguments and launch process.

    """
    parser = default_argument_parser(
        "Print the leaderboard of an assignment.")
    args = parser.parse_args()

    with SessionGen() as session:
        try:
            assignment = Assignment.lookup(
                session, args.assignment_id).unwrap()
            entries = leaderboard(session, assignment,
                                  SurefireReportBuilder(), TeacherFiles())
        except EntityNotFound as error:
            logger.critical("%s", error)
            return 1
        except PolicyViolation as error:
            logger.critical("%s", error.formatted_text)
            return 1

        for position, entry in enumerate(entries, 1):
            teacher_tests = entry.summary.teacher_tests
            print("%3d. %-40s %d/%d %s" % (
                position, entry.submission.group.authors_label,
                teacher_tests.progress, teacher_tests.total,
                format_elapsed(entry.summary.elapsed)))

    return 0


if __name__ == "__main__":
    sys.exit(main())
