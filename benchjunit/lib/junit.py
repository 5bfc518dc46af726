#!/usr/bin/env python3
# Copyright (c) 2017-present, Facebook, Inc.
# All rights reserved.
#
# This source code is licensed under the BSD-style license found in the
# LICENSE file in the root directory of this source tree. An additional grant
# of patent rights can be found in the PATENTS file in the same directory.
"""In-memory form of a JUnit report.

The layout follows the XML that TestGrid consumes:

    <testsuites>
      <testsuite name tests failures time>
        <testcase class_name name time>
          <failure>text</failure>
          <skipped/>
          <properties><property name value/></properties>
        </testcase>
      </testsuite>
    </testsuites>

Every time is a fixed-point string of seconds so that reporters can write it
out unchanged.
"""
from dataclasses import dataclass, field
from typing import List, Optional


@dataclass
class Property(object):
    name: str
    value: str


@dataclass
class Failure(object):
    text: str = ""


@dataclass
class TestCase(object):
    __test__ = False  # keep pytest from picking these up as tests

    class_name: str

    name: str

    time: str = "0"
    """runtime of this benchmark in seconds"""

    failure: Optional[Failure] = None
    """only set for benchmarks that failed"""

    skipped: bool = False

    properties: List[Property] = field(default_factory=list)
    """benchmark metrics, in the order they were reported"""


@dataclass
class TestSuite(object):
    __test__ = False  # keep pytest from picking these up as tests

    name: str
    """package path, eg k8s.io/test-infra/experiment/dummybenchmarks"""

    tests: int = 0

    failures: int = 0

    time: str = "0"

    cases: List[TestCase] = field(default_factory=list)

    @property
    def current_case(self) -> Optional[TestCase]:
        if not self.cases:
            return None
        return self.cases[-1]


@dataclass
class TestSuites(object):
    __test__ = False  # keep pytest from picking these up as tests

    suites: List[TestSuite] = field(default_factory=list)

    def __len__(self):
        return len(self.suites)

    def __iter__(self):
        return iter(self.suites)
