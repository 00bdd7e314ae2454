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
"""Export of the latest project of every group of an assignment.

Each project goes to a folder named after the authors of its group.
Projects can be exported as the students sent them, or as the canonical
trees that were built, in which case they are bound together by an
aggregate Maven project.

"""

import logging
import os
import re
import shutil
import tempfile

from dropproject import config, rmtree
from dropproject.db import Assignment, ProjectGroup, SubmissionMethod
from dropproject.errors import N_, PolicyViolation, StorageFailed
from dropproject.submission.teacherfiles import TeacherFiles
from .leaderboard import latest_submissions


logger = logging.getLogger(__name__)


ARTIFACT_ID_REGEX = re.compile(r"<artifactId>.*?</artifactId>")

AGGREGATE_POM = """\
<?xml version="1.0" encoding="UTF-8"?>
<project xmlns="http://maven.apache.org/POM/4.0.0"
         xmlns:xsi="http://www.w3.org/2001/XMLSchema-instance"
         xsi:schemaLocation="http://maven.apache.org/POM/4.0.0
                             http://maven.apache.org/xsd/maven-4.0.0.xsd">
    <modelVersion>4.0.0</modelVersion>

    <groupId>%(group_id)s</groupId>
    <artifactId>%(artifact_id)s</artifactId>
    <version>1.0-SNAPSHOT</version>
    <packaging>pom</packaging>

    <modules>
%(modules)s
    </modules>
</project>
"""


def group_folder_name(group: ProjectGroup) -> str:
    """Return the folder of the project of group in an export."""
    return "_".join(author.user_id for author in group.authors)


def _pack(storage, folder: str, archive_path: str, count: int,
          assignment: Assignment) -> int:
    if count > 0:
        storage.pack(folder, archive_path)
        logger.info("Exported %d projects of %s to %s.", count,
                    assignment.id, archive_path)
    return count


def export_original_projects(session, assignment: Assignment, storage,
                             archive_path: str) -> int:
    """Pack the latest upload of every group, as it was sent.

    Uploads kept only as archives are unpacked for the export and
    removed again afterwards.

    storage (FileSystemStorage): where the uploads are.
    archive_path: the archive to create.

    return: the number of projects exported; no archive is created
        when it is 0.

    raise (PolicyViolation): if the assignment is not submitted by
        upload.
    raise (StorageFailed): if the files of a submission are gone.
    raise (ArchiveFailed): if the archive can't be created.

    """
    if assignment.submission_method is not SubmissionMethod.UPLOAD:
        raise PolicyViolation(
            N_("Invalid operation"),
            N_("Only the projects of upload assignments can be exported "
               "as they were sent."))

    count = 0
    export_root = tempfile.mkdtemp(dir=config.global_.temp_dir)
    try:
        for submission in latest_submissions(session, assignment):
            was_unpacked = os.path.isdir(storage.get_upload_folder(submission))
            project_folder = storage.retrieve(submission)
            if project_folder is None:
                raise StorageFailed("The files of submission %d are not "
                                    "available anymore." % submission.id)
            try:
                shutil.copytree(project_folder, os.path.join(
                    export_root, group_folder_name(submission.group)))
            finally:
                if not was_unpacked:
                    rmtree(project_folder, missing_ok=True)
            count += 1
        return _pack(storage, export_root, archive_path, count, assignment)
    finally:
        rmtree(export_root, missing_ok=True)


def _rename_artifact(pom_path: str, artifact_id: str):
    """Replace the first artifactId of a pom, that of the project."""
    with open(pom_path, "rt", encoding="utf-8") as f:
        content = f.read()
    content = ARTIFACT_ID_REGEX.sub(
        "<artifactId>%s</artifactId>" % artifact_id, content, count=1)
    with open(pom_path, "wt", encoding="utf-8") as f:
        f.write(content)


def export_mavenized_projects(session, assignment: Assignment, storage,
                              teacher_files: TeacherFiles,
                              archive_path: str) -> int:
    """Pack the canonical tree of the latest submission of every group.

    Build outputs are left out. Each project gets its own artifact id,
    and a pom.xml at the top of the archive lists them all as modules.
    Submissions without a tree (e.g. with structure errors, or cleaned
    up) are skipped.

    storage (FileSystemStorage): used to create the archive.
    teacher_files: where the trees are.
    archive_path: the archive to create.

    return: the number of projects exported; no archive is created
        when it is 0.

    raise (ArchiveFailed): if the archive can't be created.

    """
    modules = []
    export_root = tempfile.mkdtemp(dir=config.global_.temp_dir)
    try:
        for submission in latest_submissions(session, assignment):
            tree = teacher_files.get_project_folder(submission)
            if not os.path.isdir(tree):
                logger.warning("Submission %d has no tree to export, "
                               "skipping it.", submission.id)
                continue
            module = group_folder_name(submission.group)
            destination = os.path.join(export_root, module)
            shutil.copytree(tree, destination,
                            ignore=lambda folder, names:
                            ["target"] if folder == tree else [])
            pom_path = os.path.join(destination, "pom.xml")
            if os.path.isfile(pom_path):
                _rename_artifact(pom_path,
                                 "%s-%s" % (assignment.id, module))
            modules.append(module)

        if modules:
            with open(os.path.join(export_root, "pom.xml"), "wt",
                      encoding="utf-8") as f:
                f.write(AGGREGATE_POM % {
                    "group_id": assignment.package_name or assignment.id,
                    "artifact_id": assignment.id,
                    "modules": "\n".join(
                        "        <module>%s</module>" % module
                        for module in modules),
                })
        return _pack(storage, export_root, archive_path, len(modules),
                     assignment)
    finally:
        rmtree(export_root, missing_ok=True)
