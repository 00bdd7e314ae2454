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

"""Build and installation routines for DropProject.

"""

import os
import re

from setuptools import setup, find_packages


PACKAGE_DATA = {
    "dptestsuite": [
        "unit_tests/*.toml",
    ],
}


def find_version():
    """Return the version string obtained from dropproject/__init__.py"""
    path = os.path.join("dropproject", "__init__.py")
    with open(path, "rt", encoding="utf-8") as f:
        version_match = re.search(r"^__version__ = ['\"]([^'\"]*)['\"]",
                                  f.read(), re.M)
    if version_match is not None:
        return version_match.group(1)
    raise RuntimeError("Unable to find version string.")


setup(
    name="dropproject",
    version=find_version(),
    author="The DropProject development team",
    url="https://github.com/drop-project-edu/drop-project",
    description="Submission processing pipeline for student programming "
                "assignments",
    packages=find_packages(include=["dropproject", "dropproject.*",
                                    "dpcommon", "dpcommon.*",
                                    "dpcontrib", "dpcontrib.*",
                                    "dptestsuite", "dptestsuite.*"]),
    package_data=PACKAGE_DATA,
    python_requires=">=3.11",
    install_requires=[
        "SQLAlchemy>=2.0",
        "psycopg2>=2.8",
        "gevent>=21.0",
        "chardet>=4.0",
        "patool>=1.12",
        "babel>=2.12",
        "GitPython>=3.1",
    ],
    extras_require={
        "test": [
            "pytest",
        ],
    },
    entry_points={
        "console_scripts": [
            "dpInitDB=dpcontrib.InitDB:main",
            "dpDropDB=dpcontrib.DropDB:main",
            "dpExportResults=dpcontrib.ExportResults:main",
            "dpLeaderboard=dpcontrib.Leaderboard:main",
            "dpMarkAsFinal=dpcontrib.MarkAsFinal:main",
            "dpCleanupSubmissions=dpcontrib.CleanupSubmissions:main",
            "dpExportProject=dpcontrib.ExportProject:main",
            "dpExportProjects=dpcontrib.ExportProjects:main",
        ],
    },
    keywords="programming assignments submissions grader maven",
    license="Affero General Public License v3",
    classifiers=[
        "Development Status :: 5 - Production/Stable",
        "Natural Language :: English",
        "Operating System :: POSIX :: Linux",
        "Programming Language :: Python :: 3.11",
        "License :: OSI Approved :: "
        "GNU Affero General Public License v3",
    ]
)
