#!/usr/bin/env python3
# Copyright (c) 2017-present, Facebook, Inc.
# All rights reserved.
#
# This source code is licensed under the BSD-style license found in the
# LICENSE file in the root directory of this source tree. An additional grant
# of patent rights can be found in the PATENTS file in the same directory.

import enum
import logging
import posixpath
import re
from typing import List, Optional, Tuple

from benchjunit.lib.junit import Failure, Property, TestCase, TestSuite, TestSuites
from benchjunit.lib.parser import ParseError, Parser, parse_duration


logger = logging.getLogger(__name__)

DEFAULT_FAILURE_TEXT_LIMIT = 1000

# benchmark log output is indented by exactly this prefix
LOG_INDENT = "    "

# start of a package, captures the package path
#   pkg: k8s.io/test-infra/experiment/dummybenchmarks
SUITE_START_RE = re.compile(r"^pkg:\s+(\S+)\s*$", re.ASCII)

# end of a package, captures the result, package path and runtime
#   ok  	k8s.io/test-infra/experiment/dummybenchmarks/subpkg	1.490s
#   FAIL	k8s.io/test-infra/experiment/dummybenchmarks	17.829s
SUITE_END_RE = re.compile(r"^(ok|FAIL)\s+(\S+)\s+(\S+)\s*$", re.ASCII)

# metrics of a successful benchmark, captures name, op count and metric values
#   Benchmark-4                 	20000000	       77.9 ns/op
#   BenchmarkAllocsAndBytes-4   	10000000	       131 ns/op	 152.50 MB/s	     112 B/op	       2 allocs/op
BENCH_METRICS_RE = re.compile(
    r"^(Benchmark\S*)\s+(\d+)\s+([\d\.]+) ns/op"
    r"(?:\s+([\d\.]+) MB/s)?"
    r"(?:\s+([\d\.]+) B/op)?"
    r"(?:\s+([\d\.]+) allocs/op)?\s*$",
    re.ASCII,
)

# start of log output and/or a skipped or failed benchmark
#   --- BENCH: BenchmarkLog-4
#   --- SKIP: BenchmarkSkip
#   --- FAIL: BenchmarkFatal
ACTION_LINE_RE = re.compile(r"^--- (BENCH|SKIP|FAIL):\s+(\S+)\s*$", re.ASCII)


class LineKind(enum.Enum):
    SUITE_START = "suite-start"
    SUITE_END = "suite-end"
    METRICS = "metrics"
    ACTION = "action"


# tested top to bottom, first match wins
LINE_MATCHERS = (
    (LineKind.SUITE_START, SUITE_START_RE),
    (LineKind.SUITE_END, SUITE_END_RE),
    (LineKind.METRICS, BENCH_METRICS_RE),
    (LineKind.ACTION, ACTION_LINE_RE),
)


def classify(line: str) -> Tuple[Optional[LineKind], Optional[re.Match]]:
    """Find which kind of line this is, (None, None) for anything unrecognized.

    Continuation lines are not handled here, callers check LOG_INDENT first.
    """
    for kind, regex in LINE_MATCHERS:
        match = regex.match(line)
        if match:
            return kind, match
    return None, None


def truncate(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    if limit > 3:
        return text[: limit - 3] + "..."
    return text[:limit]


def properties_from_match(match: re.Match) -> Tuple[List[Property], str]:
    """Get the property list and runtime for a BENCH_METRICS_RE match.

    The runtime is op count * ns/op converted to seconds, as a fixed-point
    string.

    Raises:
        ParseError: op count or ns/op is not a number
    """
    _, op_count, op_duration, mb_per_s, bytes_per_op, allocs_per_op = (
        match.groups()
    )
    try:
        ops = float(op_count)
    except ValueError as e:
        raise ParseError(f'error parsing opcount "{op_count}": {e}') from e
    try:
        ns_per_op = float(op_duration)
    except ValueError as e:
        raise ParseError(f'error parsing ns/op "{op_duration}": {e}') from e
    runtime = "%f" % (ops * ns_per_op / 1e9)

    props = [
        Property(name="op count", value=op_count),
        Property(name="avg op duration (ns/op)", value=op_duration),
    ]
    if mb_per_s:
        props.append(Property(name="MB/s", value=mb_per_s))
    if bytes_per_op:
        props.append(Property(name="alloced B/op", value=bytes_per_op))
    if allocs_per_op:
        props.append(Property(name="allocs/op", value=allocs_per_op))
    return props, runtime


class Assembler(object):
    """Builds the report one line at a time.

    Holds the finished suites, the currently open suite (if any) and the log
    text that has been collected since the last non-indented line.

    Attributes:
        suites (TestSuites): suites whose summary line has been seen
        suite (TestSuite): suite that is still open, or None
        failure_text_limit (int): max length of recorded failure text
    """

    def __init__(self, failure_text_limit: int = DEFAULT_FAILURE_TEXT_LIMIT):
        self.failure_text_limit = failure_text_limit
        self.suites = TestSuites()
        self.suite: Optional[TestSuite] = None
        self.log_text = ""

    def feed(self, line: str):
        # multi-line log text is collected before anything else
        if line.startswith(LOG_INDENT):
            self.log_text += line[len(LOG_INDENT) :] + "\n"
            return
        self.flush_log_text()

        kind, match = classify(line)
        if kind is LineKind.SUITE_START:
            self.start_suite(match)
        elif kind is LineKind.SUITE_END:
            self.end_suite(match)
        elif kind is LineKind.METRICS:
            self.add_metrics(match)
        elif kind is LineKind.ACTION:
            self.add_action(match)

    def finish(self) -> TestSuites:
        self.flush_log_text()
        if self.suite is not None:
            logger.warning(
                'No summary line for package "%s", dropping %d benchmark(s)',
                self.suite.name,
                len(self.suite.cases),
            )
        return self.suites

    def flush_log_text(self):
        if self.log_text:
            self.record_log_text(self.log_text)
            self.log_text = ""

    def record_log_text(self, text: str):
        """Attach log text to the most recent benchmark of the open suite.

        Only failed benchmarks keep their log text, for everything else it is
        dropped.
        """
        case = self.suite.current_case if self.suite is not None else None
        if case is None:
            logger.error(
                "Tried to record Benchmark log text before any Benchmarks "
                "were found for the package!"
            )
            logger.debug("Dropped log text:\n%s", text)
            return
        text = truncate(text, self.failure_text_limit)
        if case.failure is None:
            return
        case.failure.text = text
        # TestGrid groups failures by this property
        case.properties.append(Property(name="categorized_fail", value=text))

    def start_suite(self, match: re.Match):
        if self.suite is not None:
            logger.warning(
                'Package "%s" started before "%s" finished, dropping the latter',
                match.group(1),
                self.suite.name,
            )
        self.suite = TestSuite(name=match.group(1))

    def end_suite(self, match: re.Match):
        _, name, duration = match.groups()
        open_name = self.suite.name if self.suite is not None else None
        if name != open_name:
            raise ParseError(
                f'mismatched package summary for "{name}" with "{open_name}" '
                "benchmarks"
            )
        try:
            seconds = parse_duration(duration)
        except ValueError as e:
            raise ParseError(
                f'failed to parse package test time "{duration}": {e}'
            ) from e
        self.suite.time = "%f" % seconds
        self.suites.suites.append(self.suite)
        self.suite = None

    def new_case(self, name: str, line: str) -> Optional[TestCase]:
        if self.suite is None:
            logger.warning('Ignoring "%s" outside of any package', line)
            return None
        case = TestCase(
            class_name=posixpath.basename(self.suite.name.rstrip("/")), name=name
        )
        self.suite.cases.append(case)
        return case

    def add_metrics(self, match: re.Match):
        props, runtime = properties_from_match(match)
        case = self.new_case(match.group(1), match.group(0))
        if case is None:
            return
        case.properties = props
        case.time = runtime
        self.suite.tests += 1

    def add_action(self, match: re.Match):
        action, name = match.groups()
        if action == "BENCH":
            # only introduces log output of a passing benchmark
            return
        case = self.new_case(name, match.group(0))
        if case is None:
            return
        if action == "SKIP":
            case.skipped = True
        elif action == "FAIL":
            case.failure = Failure()
            self.suite.failures += 1
            self.suite.tests += 1


class GoBenchParser(Parser):
    """Parses the output of `go test -v -run='^$' -bench=. <packages>`."""

    def __init__(self, failure_text_limit: int = DEFAULT_FAILURE_TEXT_LIMIT):
        self.failure_text_limit = failure_text_limit

    def parse(self, output: str) -> TestSuites:
        assembler = Assembler(failure_text_limit=self.failure_text_limit)
        for line in output.split("\n"):
            assembler.feed(line.rstrip("\r"))
        return assembler.finish()
