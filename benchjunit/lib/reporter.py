#!/usr/bin/env python3
# Copyright (c) 2017-present, Facebook, Inc.
# All rights reserved.
#
# This source code is licensed under the BSD-style license found in the
# LICENSE file in the root directory of this source tree. An additional grant
# of patent rights can be found in the PATENTS file in the same directory.
import dataclasses
import json
import re
import sys
import xml.etree.ElementTree as ET
from abc import ABCMeta, abstractmethod
from typing import Optional, TextIO

from benchjunit.lib.junit import TestCase, TestSuites

# anything XML 1.0 does not allow, eg the ANSI escapes in colored go test logs
INVALID_XML_CHARS_RE = re.compile(
    "[^\t\n\r\u0020-\ud7ff\ue000-\ufffd\U00010000-\U0010ffff]"
)


def xml_safe(text: str) -> str:
    """Replace characters that can't appear in an XML document with U+FFFD."""
    return INVALID_XML_CHARS_RE.sub("\ufffd", text)


class Reporter(object, metaclass=ABCMeta):
    """A Reporter writes a finished report to a text stream.

    Attributes:
        stream (file): where the report is written, defaults to stdout
    """

    def __init__(self, stream: Optional[TextIO] = None):
        self.stream = stream if stream is not None else sys.stdout

    @abstractmethod
    def report(self, suites: TestSuites):
        """Serialize all suites to the stream."""
        pass

    def close(self):
        """Flush anything buffered, the stream itself belongs to the caller."""
        self.stream.flush()


def case_status(case: TestCase) -> str:
    if case.skipped:
        return "SKIPPED"
    if case.failure is not None:
        return "FAILED"
    return "PASSED"


class JUnitReporter(Reporter):
    """Writes the report as JUnit XML in the flavor that TestGrid reads."""

    @staticmethod
    def to_element(suites: TestSuites) -> ET.Element:
        root = ET.Element("testsuites")
        for suite in suites:
            suite_el = ET.SubElement(
                root,
                "testsuite",
                name=xml_safe(suite.name),
                tests=str(suite.tests),
                failures=str(suite.failures),
                time=suite.time,
            )
            for case in suite.cases:
                case_el = ET.SubElement(
                    suite_el,
                    "testcase",
                    class_name=xml_safe(case.class_name),
                    name=xml_safe(case.name),
                    time=case.time,
                )
                if case.failure is not None:
                    ET.SubElement(case_el, "failure").text = xml_safe(case.failure.text)
                if case.skipped:
                    ET.SubElement(case_el, "skipped")
                # properties is always written, even when empty
                props_el = ET.SubElement(case_el, "properties")
                for prop in case.properties:
                    ET.SubElement(
                        props_el,
                        "property",
                        name=xml_safe(prop.name),
                        value=xml_safe(prop.value),
                    )
        return root

    def report(self, suites: TestSuites):
        xml = ET.tostring(self.to_element(suites), encoding="unicode")
        self.stream.write(xml + "\n")


class JSONReporter(Reporter):
    def report(self, suites: TestSuites):
        """Write the whole report as one JSON document."""
        json.dump(dataclasses.asdict(suites), self.stream, indent=2)
        self.stream.write("\n")


class StdoutReporter(Reporter):
    """Human-readable summary, one colored line per benchmark."""

    COLORS = {
        "PASSED": "\u001b[32m",
        "FAILED": "\u001b[31m",
        "SKIPPED": "\u001b[33m",
    }

    def report(self, suites: TestSuites):
        for suite in suites:
            self.stream.write(
                f"{suite.name}: {suite.tests} benchmark(s), "
                f"{suite.failures} failure(s) in {suite.time}s\n"
            )
            for case in suite.cases:
                status = case_status(case)
                color = self.COLORS[status]
                self.stream.write(f"  {case.name}: {color}{status}\033[0m\n")
                if case.failure is not None and case.failure.text:
                    for line in case.failure.text.rstrip("\n").split("\n"):
                        self.stream.write(f"    {line}\n")
                for prop in case.properties:
                    if prop.name == "categorized_fail":
                        continue
                    self.stream.write(f"    {prop.name}={prop.value}\n")
