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

import dataclasses
import logging
import os
import sys
from dataclasses import dataclass

from dropproject.log import set_detailed_logs
from dpcommon import conf_parser
from dpcommon.conf_parser import ConfigError


logger = logging.getLogger(__name__)


def default_path(name):
    return os.path.join(sys.prefix, name)


@dataclass()
class GlobalConfig:
    temp_dir: str = "/tmp"
    file_log_debug: bool = False
    stream_log_detailed: bool = False
    log_dir: str = default_path("log")
    data_dir: str = default_path("lib")
    # Timezone used when showing dates to teachers; None for the
    # system one.
    timezone: str | None = None


@dataclass()
class DatabaseConfig:
    url: str
    debug: bool = False


@dataclass()
class StorageConfig:
    # Raw uploads, both the zip files and their extracted folders.
    upload_root: str = default_path("lib/upload")
    # Local working copies of the git repositories.
    git_root: str = default_path("lib/git")
    # Canonical trees handed to the build facility.
    mavenized_root: str = default_path("lib/mavenized")
    # Files provided by the teachers, one folder per assignment id.
    assignments_root: str = default_path("lib/assignments")
    delete_original_project_folder: bool = True
    # Raw uploads of assignments whose id starts with one of these are
    # always kept.
    fixture_prefixes: tuple[str, ...] = (
        "testJavaProj", "sample", "testKotlinProj")


@dataclass()
class SubmissionConfig:
    # Cool-off, in minutes, after a submission that failed the project
    # structure or the compilation, if shorter than the assignment's.
    quick_retry_cooloff: int = 5
    max_upload_size: int = 20 * 1024 * 1024  # 20 MiB


@dataclass()
class BuildConfig:
    # Maximum number of concurrent builds, 0 for no limit.
    pool_size: int = 0


field_helper = lambda T: dataclasses.field(default_factory=T)

@dataclass(kw_only=True)
class Config:
    # The sections are mutable (not frozen) so that tests can patch
    # them.
    global_: GlobalConfig = field_helper(GlobalConfig)
    database: DatabaseConfig
    storage: StorageConfig = field_helper(StorageConfig)
    submission: SubmissionConfig = field_helper(SubmissionConfig)
    build: BuildConfig = field_helper(BuildConfig)

    def __post_init__(self):
        # If the configuration says to print detailed log on stdout,
        # change the log configuration.
        set_detailed_logs(self.global_.stream_log_detailed)


def make_config():
    # Default config file path can be overridden using environment
    # variable 'DROPPROJECT_CONFIG'.
    default_config_file = default_path("etc/dropproject.toml")
    config_file = os.environ.get("DROPPROJECT_CONFIG", default_config_file)

    hint = " (copy config/dropproject.sample.toml there and edit it)"
    return conf_parser.parse_config(config_file, Config, hint)


config = make_config()
