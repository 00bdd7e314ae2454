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

"""Create the tables of the DropProject database.

"""

import argparse
import logging
import sys

from dropproject.db import init_db


logger = logging.getLogger(__name__)


def main():
    """Parse arguments and launch process.

    """
    parser = argparse.ArgumentParser(
        description="Create the DropProject database tables.")
    parser.parse_args()

    success = init_db()
    if success:
        logger.info("Database initialized.")
    return 0 if success else 1


if __name__ == "__main__":
    sys.exit(main())
