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

"""Drop all the tables of the DropProject database, with their content.

"""

import argparse
import logging
import sys

from dropproject.db import drop_db


logger = logging.getLogger(__name__)


def main():
    """Parse arguments and launch process.

    """
    parser = argparse.ArgumentParser(
        description="Drop the DropProject database tables.")
    parser.add_argument("-y", "--yes", action="store_true",
                        help="don't ask for confirmation")
    args = parser.parse_args()

    if not args.yes:
        print("This will delete all the data in the database. "
              "Are you sure? [y/N] ", end='')
        ans = sys.stdin.readline().strip().lower()
        if ans not in ["y", "yes"]:
            print("Will not drop.")
            return 0

    success = drop_db()
    if success:
        logger.info("Database dropped.")
    return 0 if success else 1


if __name__ == "__main__":
    sys.exit(main())
