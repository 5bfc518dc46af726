#!/usr/bin/env python3
# Copyright (c) 2017-present, Facebook, Inc.
# All rights reserved.
#
# This source code is licensed under the BSD-style license found in the
# LICENSE file in the root directory of this source tree. An additional grant
# of patent rights can be found in the PATENTS file in the same directory.
import re
from abc import ABCMeta, abstractmethod

from benchjunit.lib.junit import TestSuites


class ParseError(Exception):
    """Benchmark output broke the structure the parser depends on.

    No partial report is returned when this is raised.
    """


# seconds per unit, same units as Go's time.ParseDuration
DURATION_UNITS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,  # micro sign
    "μs": 1e-6,  # greek small letter mu
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}

_UNIT_ALTERNATION = "|".join(
    re.escape(u) for u in sorted(DURATION_UNITS, key=len, reverse=True)
)
DURATION_PART_RE = re.compile(r"(\d+\.?\d*|\.\d+)({})".format(_UNIT_ALTERNATION))
DURATION_RE = re.compile(
    r"^([-+]?)((?:(?:\d+\.?\d*|\.\d+)(?:{}))+)$".format(_UNIT_ALTERNATION)
)


def parse_duration(duration: str) -> float:
    """Convert a Go duration string like "1.490s" or "1m2.5s" to seconds.

    Raises:
        ValueError: duration is not in Go's duration format
    """
    if duration in ("0", "+0", "-0"):
        return 0.0
    match = DURATION_RE.match(duration)
    if not match:
        raise ValueError(f'invalid duration "{duration}"')
    sign, body = match.groups()
    seconds = sum(
        float(value) * DURATION_UNITS[unit]
        for value, unit in DURATION_PART_RE.findall(body)
    )
    return -seconds if sign == "-" else seconds


class Parser(object, metaclass=ABCMeta):
    """Parser is the link between benchmark console output and the report.
    A Parser is given the complete combined output of a benchmark run and
    returns the JUnit report tree for it.
    """

    @abstractmethod
    def parse(self, output: str) -> TestSuites:
        """Convert raw benchmark output into a report.

        Raises:
            ParseError: output is malformed beyond recovery
        """
        pass
