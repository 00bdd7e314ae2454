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

# As this package initialization code is run by all code that imports
# something in dropproject.* it's the best place to setup the logging
# handlers. By importing the log module we install a handler on stdout.
# Other handlers will be added by tools calling initialize_logging.
import dropproject.log


# Define what this package will provide.

__all__ = [
    "__version__",
    "SOURCE_ROOT", "AUTHORS_FILE", "README_FILE", "TEST_FILES_FOLDER",
    "TEST_PREFIX", "TEACHER_TEST_PREFIX",
    # log
    "initialize_logging",
    # conf
    "ConfigError", "config",
    # util
    "mkdir", "rmtree", "utf8_decoder", "sanitize_id", "exists_case_sensitive",
    "default_argument_parser",
]


__version__ = "0.9.0"


# Layout of a student project.

SOURCE_ROOT = "src"
AUTHORS_FILE = "AUTHORS.txt"
README_FILE = "README.md"
TEST_FILES_FOLDER = "test-files"

# Files whose name starts with TEST_PREFIX are tests: they never reach
# the main sources of the canonical tree. Students can't ship files
# starting with TEACHER_TEST_PREFIX, which is reserved for the tests
# provided with the assignment.
TEST_PREFIX = "Test"
TEACHER_TEST_PREFIX = "TestTeacher"


from .log import initialize_logging
from .conf import ConfigError, config
from .util import mkdir, rmtree, utf8_decoder, sanitize_id, \
    exists_case_sensitive, default_argument_parser
