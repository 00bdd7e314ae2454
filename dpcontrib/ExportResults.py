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

"""Utility to export the results of the final submissions of an
assignment as CSV.

"""

import logging
import sys

from dropproject import config, default_argument_parser, utf8_decoder
from dropproject.db import Assignment, SessionGen
from dropproject.errors import EntityNotFound
from dropproject.report import SurefireReportBuilder, export_csv
from dropproject.submission import TeacherFiles
from dpcommon.datetime import get_timezone


logger = logging.getLogger(__name__)


def main():
    """Parse arguments and launch process.

    """
    parser = default_argument_parser(
        "Export the results of the final submissions of an assignment.")
    parser.add_argument("-o", "--output", action="store", type=utf8_decoder,
                        help="file where to write the CSV "
                             "(default: standard output)")
    parser.add_argument("--elapsed", action="store_true",
                        help="if set, add the time spent by the teacher "
                             "tests")
    parser.add_argument("--timezone", action="store", type=utf8_decoder,
                        default=config.global_.timezone,
                        help="timezone of the submission dates "
                             "(default: the configured one, or local)")
    args = parser.parse_args()

    try:
        tz = get_timezone(args.timezone)
    except LookupError:
        logger.critical("Unknown timezone %s.", args.timezone)
        return 1

    with SessionGen() as session:
        try:
            assignment = Assignment.lookup(
                session, args.assignment_id).unwrap()
        except EntityNotFound as error:
            logger.critical("%s", error)
            return 1
        text = export_csv(session, assignment, SurefireReportBuilder(),
                          TeacherFiles(), include_elapsed=args.elapsed,
                          tz=tz)

    if args.output is None:
        sys.stdout.write(text)
    else:
        with open(args.output, "wt", encoding="utf-8") as f_out:
            f_out.write(text)
        logger.info("Results written to %s.", args.output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
