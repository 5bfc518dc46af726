#!/usr/bin/env python3
# Copyright (c) 2017-present, Facebook, Inc.
# All rights reserved.
#
# This source code is licensed under the BSD-style license found in the
# LICENSE file in the root directory of this source tree. An additional grant
# of patent rights can be found in the PATENTS file in the same directory.

import errno
import logging
import subprocess
from dataclasses import dataclass
from subprocess import TimeoutExpired
from typing import Iterable, List, Optional


logger = logging.getLogger(__name__)

# only benchmarks are run, '^$' matches no regular test
BASE_TEST_ARGS = ["test", "-v", "-run=^$", "-bench=."]


@dataclass
class RunResult(object):
    output: str
    """combined stdout and stderr of the benchmark process"""

    returncode: int


class BenchmarkRunner(object):
    """Runs go benchmarks and captures their console output.

    Attributes:
        binary (str): go executable
        test_args (list): extra arguments for `go test`
        timeout (float): seconds before the process is killed, None to wait
                         forever
        log_file (str): if set, the complete output is also written here
    """

    def __init__(
        self,
        binary: str = "go",
        test_args: Iterable[str] = (),
        timeout: Optional[float] = None,
        log_file: Optional[str] = None,
    ):
        self.binary = binary
        self.test_args = list(test_args)
        self.timeout = timeout
        self.log_file = log_file

    def command(self, packages: Iterable[str]) -> List[str]:
        return [self.binary] + BASE_TEST_ARGS + self.test_args + list(packages)

    def run(self, packages: Iterable[str]) -> RunResult:
        """Run the benchmarks to completion.

        A non-zero exit code is logged but not raised, failing benchmarks make
        `go test` exit 1 and their output still has to be reported.
        """
        cmd = self.command(packages)
        logger.info("Running command %s...", cmd)
        try:
            proc = subprocess.Popen(
                cmd,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                encoding="utf-8",
                errors="backslashreplace",
            )
        except OSError as e:
            logger.error('"{}" failed ({})'.format(self.binary, e))
            if e.errno == errno.ENOENT:
                logger.error("Binary not found, did you forget to install Go?")
            raise  # make sure it passes the exception up the chain

        try:
            output, _ = proc.communicate(None, timeout=self.timeout)
        except TimeoutExpired:
            proc.kill()
            proc.communicate()
            logger.error("Benchmarks did not finish within %ss", self.timeout)
            raise

        if proc.returncode != 0:
            logger.error(
                "Error(s) executing benchmarks, exit code %d", proc.returncode
            )
        if self.log_file:
            logger.info('Writing benchmark output to "%s"', self.log_file)
            try:
                with open(self.log_file, "w") as f:
                    f.write(output)
            except OSError as e:
                logger.error('Failed to write to log file "{}" ({})'.format(self.log_file, e))
                raise
        logger.info("Benchmarks completed")
        return RunResult(output=output, returncode=proc.returncode)
